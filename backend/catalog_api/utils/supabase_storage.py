"""Supabase Storage backend for product media."""
import asyncio
from typing import Optional

from supabase import Client, create_client

from catalog_api.core.config import settings
from catalog_api.core.logging import get_logger

logger = get_logger(__name__)


class SupabaseMediaStorage:
    """Uploads media to a public Supabase Storage bucket."""

    def __init__(
        self,
        url: Optional[str] = None,
        service_key: Optional[str] = None,
        bucket: Optional[str] = None,
    ):
        url = url or settings.SUPABASE_URL
        service_key = service_key or settings.SUPABASE_SERVICE_KEY
        if not url or not service_key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set for supabase media storage")
        try:
            self.client: Client = create_client(supabase_url=url, supabase_key=service_key)
            self.bucket_name = bucket or settings.SUPABASE_BUCKET
            logger.info(f"Supabase media storage initialized with bucket: {self.bucket_name}")
        except Exception as e:
            logger.error(f"Failed to initialize Supabase client: {e}")
            raise

    async def save(self, key: str, content: bytes, content_type: str) -> str:
        """
        Upload raw bytes in a threadpool, since the Supabase client is
        synchronous. Returns the public URL of the object.
        """

        def _sync_upload() -> str:
            bucket = self.client.storage.from_(self.bucket_name)
            bucket.upload(
                path=key,
                file=content,
                file_options={"content-type": content_type or "application/octet-stream"},
            )
            pub = bucket.get_public_url(key)
            # Older clients return a dict
            if isinstance(pub, dict):
                return pub.get("publicURL") or pub.get("publicUrl") or key
            return pub

        loop = asyncio.get_running_loop()
        url = await loop.run_in_executor(None, _sync_upload)
        logger.info(f"File uploaded successfully: {key}")
        return url

    async def delete(self, key: str) -> bool:
        def _sync_remove():
            return self.client.storage.from_(self.bucket_name).remove([key])

        loop = asyncio.get_running_loop()
        removed = await loop.run_in_executor(None, _sync_remove)
        logger.info(f"File delete requested: {key}")
        return bool(removed)
