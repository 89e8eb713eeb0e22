"""Custom exceptions for snapshot persistence."""

from itera.errors.base import BaseAppError


class PersistenceError(BaseAppError):
    """Base exception for key-value store operations."""

    def __init__(self, detail: str = "Persistence error occurred") -> None:
        super().__init__(detail)


class StorageQuotaExceededError(PersistenceError):
    """Raised when a write would exceed the store's size quota."""

    def __init__(
        self,
        detail: str = "Storage quota exceeded",
        size: int = 0,
        limit: int = 0,
    ) -> None:
        super().__init__(detail)
        self.size = size
        self.limit = limit



class CorruptValueError(PersistenceError):
    """Raised when a stored value exists but cannot be decoded."""

    def __init__(self, detail: str = "Stored value is corrupt") -> None:
        super().__init__(detail)
