import re
import time
import uuid
from dataclasses import dataclass
from pathlib import PurePath
from typing import Dict, List, Optional, Protocol, Sequence

from catalog_api.core.config import settings
from catalog_api.core.exceptions import NotFoundException, UploadErrorReason, UploadException
from catalog_api.core.logging import get_logger
from catalog_api.schemas.media import MediaAsset, UploadedFiles

logger = get_logger(__name__)

IMAGES_FIELD = "images"
VIDEOS_FIELD = "videos"

# field name -> required mime prefix
FIELD_MIME_PREFIXES: Dict[str, str] = {
    IMAGES_FIELD: "image/",
    VIDEOS_FIELD: "video/",
}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")

READ_CHUNK_SIZE = 1024 * 1024


class MediaStorage(Protocol):
    async def save(self, key: str, content: bytes, content_type: str) -> str:
        ...

    async def delete(self, key: str) -> bool:
        ...


@dataclass
class IncomingFile:
    field_name: str
    content: bytes
    content_type: Optional[str]
    original_name: str
    # Declared size, for checking a file before its body is read
    size: Optional[int] = None

    def __post_init__(self):
        if self.size is None:
            self.size = len(self.content)


class UploadSource(Protocol):
    async def read(self, size: int = -1) -> bytes:
        ...


def sanitize_filename(name: str) -> str:
    base = PurePath(name or "").name
    cleaned = _UNSAFE_CHARS.sub("-", base).strip("-.")
    return cleaned or "file"


def file_too_large(original_name: str, limit: int) -> UploadException:
    return UploadException(
        UploadErrorReason.TOO_LARGE,
        f"File {original_name} exceeds the {limit // (1024 * 1024)}MB limit",
    )


def build_storage_key(field_name: str, original_name: str) -> str:
    """``{field}/{epoch_ms}-{random}-{name}``; unique even for same-millisecond uploads."""
    return f"{field_name}/{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{sanitize_filename(original_name)}"


class MediaIntakeService:
    """Checks uploaded media against the field/type/size/count limits and stores it."""

    def __init__(
        self,
        storage: MediaStorage,
        max_file_size: Optional[int] = None,
        max_counts: Optional[Dict[str, int]] = None,
    ):
        self.storage = storage
        self.max_file_size = max_file_size or settings.MEDIA_MAX_FILE_SIZE
        self.max_counts = max_counts or {
            IMAGES_FIELD: settings.MEDIA_MAX_IMAGES,
            VIDEOS_FIELD: settings.MEDIA_MAX_VIDEOS,
        }

    def check(self, files: Sequence[IncomingFile]) -> None:
        """Raise UploadException for the first file breaking a field, count, type or size rule."""
        counts: Dict[str, int] = {}
        for item in files:
            prefix = FIELD_MIME_PREFIXES.get(item.field_name)
            if prefix is None:
                raise UploadException(UploadErrorReason.INVALID_FIELD, f"Invalid field name: {item.field_name}")

            counts[item.field_name] = counts.get(item.field_name, 0) + 1
            if counts[item.field_name] > self.max_counts[item.field_name]:
                raise UploadException(
                    UploadErrorReason.TOO_MANY,
                    f"Too many files for {item.field_name} field (max {self.max_counts[item.field_name]})",
                )

            if not (item.content_type or "").lower().startswith(prefix):
                kind = "image" if item.field_name == IMAGES_FIELD else "video"
                raise UploadException(
                    UploadErrorReason.INVALID_TYPE,
                    f"Only {kind} files are allowed for {item.field_name} field",
                )

            if (item.size or 0) > self.max_file_size:
                raise file_too_large(item.original_name, self.max_file_size)

    async def read_bounded(self, source: UploadSource, original_name: str) -> bytes:
        """Read an upload in chunks, giving up as soon as it passes the size limit."""
        chunks: List[bytes] = []
        total = 0
        while True:
            chunk = await source.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            total += len(chunk)
            if total > self.max_file_size:
                raise file_too_large(original_name, self.max_file_size)
            chunks.append(chunk)
        return b"".join(chunks)

    async def ingest(self, files: Sequence[IncomingFile]) -> UploadedFiles:
        """Store every file, one at a time, and return their assets by field.

        Any storage failure fails the whole request. Files stored before the
        failure are not rolled back.
        """
        self.check(files)

        uploaded: Dict[str, List[MediaAsset]] = {IMAGES_FIELD: [], VIDEOS_FIELD: []}
        for item in files:
            key = build_storage_key(item.field_name, item.original_name)
            try:
                url = await self.storage.save(key, item.content, item.content_type or "application/octet-stream")
            except Exception as e:
                logger.error(f"Error storing {item.field_name} file {item.original_name}: {e}")
                raise UploadException(UploadErrorReason.STORAGE_FAILURE, "Upload failed")

            uploaded[item.field_name].append(
                MediaAsset(
                    filename=key.rsplit("/", 1)[-1],
                    original_name=item.original_name,
                    url=url,
                    size=item.size,
                    mimetype=item.content_type or "application/octet-stream",
                )
            )

        logger.info(
            f"Uploaded media: {len(uploaded[IMAGES_FIELD])} images, {len(uploaded[VIDEOS_FIELD])} videos"
        )
        return UploadedFiles(images=uploaded[IMAGES_FIELD], videos=uploaded[VIDEOS_FIELD])

    async def delete(self, field_name: str, filename: str) -> None:
        if field_name not in FIELD_MIME_PREFIXES:
            raise UploadException(UploadErrorReason.INVALID_FIELD, "Invalid media type")
        if sanitize_filename(filename) != filename:
            raise NotFoundException("File")
        try:
            removed = await self.storage.delete(f"{field_name}/{filename}")
        except Exception as e:
            logger.error(f"Error deleting media {field_name}/{filename}: {e}")
            raise UploadException(UploadErrorReason.STORAGE_FAILURE, "Delete failed")
        if not removed:
            raise NotFoundException("File")
        logger.info(f"Deleted media: {field_name}/{filename}")
