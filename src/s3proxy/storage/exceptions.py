"""Common exception hierarchy for the object store collaborator."""


class StorageError(Exception):
    """Base exception for all object store operations."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        code: str | None = None,
        cause: Exception | None = None,
    ):
        self.key = key
        self.code = code or "StorageError"
        self.message = message
        self.cause = cause
        super().__init__(message)


class StorageNotFoundError(StorageError):
    """Raised when a requested key does not exist."""


class StoragePermissionError(StorageError):
    """Raised when credentials are invalid or access is denied."""


class StorageConnectionError(StorageError):
    """Raised when the object store is unreachable."""


class StorageIncompleteReadError(StorageError):
    """Raised when an object body ends before its declared length."""
