"""Object store on the local filesystem."""

from pathlib import Path
from typing import Union

import aiofiles
import aiofiles.os

from ...modules.common.exceptions import StorageConflictError, StorageError, StorageNotFoundError
from ..logging import get_logger
from .base import ObjectStore

logger = get_logger(__name__)


class LocalObjectStore(ObjectStore):
    """Keeps each object as a file below ``root``; the key is the relative path."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root).resolve()

    def _path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise StorageError(f"Storage key escapes the storage root: {key!r}")
        return path

    async def _write(self, key: str, data: bytes, content_type: str) -> None:
        path = self._path_for(key)
        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            # "x" fails if the file exists, so the check and the create are one step.
            async with aiofiles.open(path, "xb") as handle:
                await handle.write(data)
        except FileExistsError as exc:
            raise StorageConflictError(f"Object already exists at {key}") from exc
        except OSError as exc:
            raise StorageError(f"Could not write {key}: {exc}") from exc

        logger.debug(f"Stored {len(data)} bytes at {key}")

    async def get(self, key: str) -> bytes:
        path = self._path_for(key)
        try:
            async with aiofiles.open(path, "rb") as handle:
                return await handle.read()
        except FileNotFoundError as exc:
            raise StorageNotFoundError(f"No object at {key}") from exc
        except OSError as exc:
            raise StorageError(f"Could not read {key}: {exc}") from exc

    async def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError as exc:
            raise StorageNotFoundError(f"No object at {key}") from exc
        except OSError as exc:
            raise StorageError(f"Could not delete {key}: {exc}") from exc

    async def exists(self, key: str) -> bool:
        return await aiofiles.os.path.isfile(self._path_for(key))
