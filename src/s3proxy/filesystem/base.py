"""Handle contract shared by files and synthesized directories."""

import io
from abc import ABC, abstractmethod
from datetime import datetime

from .entries import DirEntry
from .errors import FileSystemError


class FileHandle(ABC):
    """A resolved, stateful handle owned by a single request.

    Handles are closed at the end of the response cycle; ``close`` is
    idempotent and releases any underlying store connection.
    """

    def __init__(self, name: str):
        self._name = name
        self._closed = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    @abstractmethod
    def size(self) -> int:
        """Size in bytes (files) or loaded listing length (directories)."""

    @property
    @abstractmethod
    def mod_time(self) -> datetime:
        """Last modification time."""

    @property
    @abstractmethod
    def mode(self) -> int:
        """POSIX mode bits."""

    @property
    @abstractmethod
    def is_directory(self) -> bool:
        """True for synthesized directories."""

    @abstractmethod
    def read(self, size: int = -1) -> bytes:
        """Read up to *size* bytes, or everything remaining when negative."""

    @abstractmethod
    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Move the read position and return the new absolute offset."""

    @abstractmethod
    def list_entries(self, max_count: int = 0) -> tuple[list[DirEntry], bool]:
        """Return up to *max_count* entries and whether the listing is done."""

    @abstractmethod
    def _release(self) -> None:
        """Free resources held by the handle."""

    def readinto(self, buffer) -> int:
        view = memoryview(buffer).cast("B")
        data = self.read(len(view))
        view[: len(data)] = data
        return len(data)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._release()

    def _check_open(self) -> None:
        if self._closed:
            raise FileSystemError(f"I/O operation on closed handle: {self._name}", path=self._name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        kind = "directory" if self.is_directory else "file"
        return f"<{type(self).__name__} {kind} {self._name!r}>"
