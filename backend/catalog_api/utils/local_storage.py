"""Local filesystem media storage, served back through a static mount."""
import asyncio
from pathlib import Path

from catalog_api.core.logging import get_logger

logger = get_logger(__name__)


class LocalMediaStorage:
    """Stores media under ``root`` and returns URLs under ``url_prefix``."""

    def __init__(self, root: str, url_prefix: str):
        self.root = Path(root).resolve()
        self.url_prefix = "/" + url_prefix.strip("/")

    def _path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise ValueError(f"Storage key escapes the upload directory: {key}")
        return path

    async def save(self, key: str, content: bytes, content_type: str) -> str:
        dest = self._path_for(key)

        def _sync_write() -> None:
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(content)

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, _sync_write)
        logger.info(f"File stored locally: {dest}")
        return f"{self.url_prefix}/{key}"

    async def delete(self, key: str) -> bool:
        path = self._path_for(key)

        def _sync_remove() -> bool:
            if not path.is_file():
                return False
            path.unlink()
            return True

        loop = asyncio.get_running_loop()
        removed = await loop.run_in_executor(None, _sync_remove)
        if removed:
            logger.info(f"File deleted locally: {path}")
        return removed
