from functools import lru_cache

from fastapi import Depends

from catalog_api.core.config import settings
from catalog_api.db.session import get_db
from catalog_api.services.media_service import MediaIntakeService, MediaStorage


@lru_cache(maxsize=1)
def get_media_storage() -> MediaStorage:
    """Process-wide media storage backend selected by MEDIA_STORAGE_BACKEND."""
    backend = settings.MEDIA_STORAGE_BACKEND.lower()
    if backend == "supabase":
        from catalog_api.utils.supabase_storage import SupabaseMediaStorage

        return SupabaseMediaStorage()
    if backend == "local":
        from catalog_api.utils.local_storage import LocalMediaStorage

        return LocalMediaStorage(settings.UPLOAD_DIR, settings.UPLOAD_URL_PREFIX)
    raise RuntimeError(f"Unknown MEDIA_STORAGE_BACKEND: {settings.MEDIA_STORAGE_BACKEND}")


def get_media_service(storage: MediaStorage = Depends(get_media_storage)) -> MediaIntakeService:
    return MediaIntakeService(storage)


__all__ = ["get_db", "get_media_storage", "get_media_service"]
