"""
Key-value stores backing snapshot persistence.

Both stores enforce a hard size quota the way a browser's local storage
does: an oversized write is rejected as a whole and the previous value is
left untouched.
"""

from asyncio import Lock
from contextlib import suppress
from logging import getLogger
from pathlib import Path
from re import compile as re_compile
from typing import Protocol, runtime_checkable

import aiofiles
from aiofiles.os import remove as aio_remove
from aiofiles.os import replace as aio_replace

from itera.configs import file_logger, settings
from itera.errors import CorruptValueError, PersistenceError, StorageQuotaExceededError

logger = file_logger(getLogger(__name__))

_SAFE_KEY = re_compile(r"^[A-Za-z0-9_.-]+$")


@runtime_checkable
class KeyValueStoreProtocol(Protocol):
    """
    Protocol for durable key-value stores.

    Implementations raise ``PersistenceError`` (or a subclass) on failure.
    """

    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove a key; return True if it existed."""
        ...


def _encoded_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class MemoryStore:
    """In-memory store with a total size quota, for tests and ephemeral sessions."""

    DEFAULT_MAX_BYTES: int = 5 * 1024 * 1024

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES) -> None:
        self._data: dict[str, str] = {}
        self._max_bytes = max_bytes
        self._lock = Lock()

    @property
    def used_bytes(self) -> int:
        return sum(_encoded_size(k, v) for k, v in self._data.items())

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            current = self._data.get(key)
            released = _encoded_size(key, current) if current is not None else 0
            needed = self.used_bytes - released + _encoded_size(key, value)
            if needed > self._max_bytes:
                raise StorageQuotaExceededError(
                    detail=f"Writing {key!r} would use {needed} of {self._max_bytes} bytes",
                    size=needed,
                    limit=self._max_bytes,
                )
            self._data[key] = value

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._data.pop(key, None) is not None


class FileStore:
    """
    File-backed store: one UTF-8 file per key under a directory.

    Writes go to a temporary file first and are moved into place, so a
    failed write never leaves a truncated value behind.
    """

    def __init__(
        self,
        directory: Path | None = None,
        max_bytes: int | None = None,
    ) -> None:
        self.directory = directory or settings.SNAPSHOT_DIR
        self._max_bytes = max_bytes if max_bytes is not None else settings.SNAPSHOT_MAX_BYTES
        self._lock = Lock()

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            msg = f"Invalid store key: {key!r}"
            raise PersistenceError(msg)
        return self.directory / f"{key}.json"

    async def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            async with aiofiles.open(path, encoding="utf-8") as f:
                return await f.read()
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            msg = f"Stored value for {key!r} is not valid UTF-8: {e}"
            raise CorruptValueError(msg) from e
        except OSError as e:
            msg = f"Failed to read {key!r}: {e}"
            raise PersistenceError(msg) from e

    async def set(self, key: str, value: str) -> None:
        size = _encoded_size(key, value)
        if size > self._max_bytes:
            raise StorageQuotaExceededError(
                detail=f"Writing {key!r} would use {size} of {self._max_bytes} bytes",
                size=size,
                limit=self._max_bytes,
            )

        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        async with self._lock:
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
                async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                    await f.write(value)
                await aio_replace(tmp_path, path)
            except OSError as e:
                with suppress(OSError):
                    await aio_remove(tmp_path)
                msg = f"Failed to write {key!r}: {e}"
                raise PersistenceError(msg) from e

    async def delete(self, key: str) -> bool:
        path = self._path(key)
        async with self._lock:
            try:
                await aio_remove(path)
            except FileNotFoundError:
                return False
            except OSError as e:
                msg = f"Failed to delete {key!r}: {e}"
                raise PersistenceError(msg) from e
        logger.info(f"Removed stored value {key!r}")
        return True
