"""Object store interface and storage key layout."""

import re
import secrets
import time
from abc import ABC, abstractmethod

from ...modules.common.exceptions import StorageError

MIME_EXTENSIONS = {
    "application/pdf": ".pdf",
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/tiff": ".tiff",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
}

_NAMESPACE_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.@|:-]{0,254}$")


def guess_extension(content_type: str) -> str:
    return MIME_EXTENSIONS.get(content_type.split(";")[0].strip().lower(), ".bin")


def build_storage_key(namespace: str, content_type: str) -> str:
    """Build ``{namespace}/{millis}-{random}{ext}``.

    Raises:
        StorageError: If ``namespace`` could escape its prefix.
    """
    if not _NAMESPACE_PATTERN.match(namespace) or ".." in namespace:
        raise StorageError(f"Invalid storage namespace: {namespace!r}")
    suffix = f"{int(time.time() * 1000)}-{secrets.token_hex(8)}"
    return f"{namespace}/{suffix}{guess_extension(content_type)}"


class ObjectStore(ABC):
    """Opaque byte storage addressed by keys this store generates.

    Objects are immutable: writing to an occupied key fails with
    ``StorageConflictError`` and reading a missing key fails with
    ``StorageNotFoundError``.
    """

    async def put(self, namespace: str, data: bytes, content_type: str) -> str:
        """Store ``data`` under a fresh key inside ``namespace`` and return the key."""
        key = build_storage_key(namespace, content_type)
        await self._write(key, data, content_type)
        return key

    @abstractmethod
    async def _write(self, key: str, data: bytes, content_type: str) -> None:
        """Create the object at ``key``; must never overwrite."""

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Return the bytes stored at ``key``."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the object at ``key``."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Report whether an object is stored at ``key``."""
