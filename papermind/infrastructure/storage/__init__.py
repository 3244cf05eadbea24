"""Object storage for uploaded file bytes."""

from functools import lru_cache

from ...modules.common.exceptions import ConfigurationError
from ..config import StorageBackendOption, get_settings
from .base import ObjectStore, build_storage_key, guess_extension
from .local import LocalObjectStore
from .s3 import S3ObjectStore


@lru_cache()
def get_object_store() -> ObjectStore:
    """Build the process-wide object store selected by ``STORAGE_BACKEND``."""
    settings = get_settings()
    if settings.STORAGE_BACKEND == StorageBackendOption.S3:
        return S3ObjectStore(
            bucket=settings.S3_BUCKET_NAME,
            region=settings.S3_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            access_key_id=settings.S3_ACCESS_KEY_ID,
            secret_access_key=settings.S3_SECRET_ACCESS_KEY,
        )
    if settings.STORAGE_BACKEND == StorageBackendOption.LOCAL:
        return LocalObjectStore(settings.LOCAL_STORAGE_PATH)
    raise ConfigurationError(f"Unsupported storage backend: {settings.STORAGE_BACKEND}")


__all__ = [
    "LocalObjectStore",
    "ObjectStore",
    "S3ObjectStore",
    "build_storage_key",
    "get_object_store",
    "guess_extension",
]
