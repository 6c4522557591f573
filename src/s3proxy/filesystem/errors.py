"""Caller-visible error taxonomy of the bucket file system."""

from ..storage.exceptions import StorageError


class FileSystemError(Exception):
    """Base exception for all file-system adapter failures."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


class NotExistError(FileSystemError):
    """No object and no non-empty prefix matches the requested path."""

    def __init__(self, path: str):
        super().__init__(f"{path}: file does not exist", path=path)


class UpstreamError(FileSystemError):
    """The object store reported a failure other than not-found."""

    def __init__(self, code: str, message: str, path: str | None = None):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}", path=path)

    @classmethod
    def from_storage_error(cls, error: StorageError, path: str | None = None) -> "UpstreamError":
        return cls(error.code, error.message, path=path)


class ContentLengthMismatchError(FileSystemError):
    """The number of body bytes received differs from the declared size."""

    def __init__(self, path: str, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{path}: content length mismatch (expected {expected} bytes, got {actual})",
            path=path,
        )


class UnsupportedOperationError(FileSystemError):
    """The handle does not support the requested operation."""

    def __init__(self, operation: str, path: str | None = None, reason: str | None = None):
        self.operation = operation
        message = f"Unsupported operation: {operation}"
        if path:
            message += f" on {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message, path=path)
