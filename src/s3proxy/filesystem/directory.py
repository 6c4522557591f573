"""Synthesized directories over prefix listings."""

import heapq
import io
import logging
from datetime import datetime
from typing import Callable, Iterator

from ..storage.base import ListPage
from .base import FileHandle
from .entries import DIR_MODE, DirEntry, project_common_prefix, project_object
from .errors import UnsupportedOperationError

log = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100


def project_page(prefix: str, page: ListPage) -> list[DirEntry]:
    """Project one listing page into visible entries, in key order.

    Objects and delimiter-grouped prefixes arrive as two separately sorted
    sequences; they are merged, not re-sorted.
    """
    files = ((obj.key, project_object(prefix, obj)) for obj in page.items)
    dirs = (
        (common, project_common_prefix(prefix, common, page.fetched_at))
        for common in page.common_prefixes
    )
    return [entry for _, entry in heapq.merge(files, dirs, key=lambda pair: pair[0]) if entry is not None]


class DirectoryView(FileHandle):
    """A pseudo-directory: every key under ``prefix``.

    The view starts from the page fetched during resolution and asks
    ``fetch_page`` for the next page whenever its cursor runs past the
    current one, so listings are never truncated at the page size.
    """

    def __init__(
        self,
        name: str,
        prefix: str,
        first_page: ListPage,
        fetch_page: Callable[[str], ListPage],
    ):
        super().__init__(name)
        self._prefix = prefix
        self._fetch_page = fetch_page
        self._mod_time = first_page.fetched_at
        self._entries = project_page(prefix, first_page)
        self._next_token = first_page.next_token
        self._cursor = 0
        self._position = 0
        self._loaded = len(first_page.items) + len(first_page.common_prefixes)
        self._pages = 1

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def size(self) -> int:
        return self._loaded

    @property
    def mod_time(self) -> datetime:
        return self._mod_time

    @property
    def mode(self) -> int:
        return DIR_MODE

    @property
    def is_directory(self) -> bool:
        return True

    @property
    def position(self) -> int:
        """Number of entries handed out so far; never decreases."""
        return self._position

    @property
    def exhausted(self) -> bool:
        return self._cursor >= len(self._entries) and self._next_token is None

    def list_entries(self, max_count: int = 0) -> tuple[list[DirEntry], bool]:
        """Return the next entries, at most *max_count* unless it is <= 0.

        ``done`` is True once the last page is loaded and fully consumed.
        """
        self._check_open()
        unlimited = max_count <= 0
        result: list[DirEntry] = []

        while unlimited or len(result) < max_count:
            available = len(self._entries) - self._cursor
            if available <= 0:
                if not self._load_next_page():
                    break
                continue
            take = available if unlimited else min(available, max_count - len(result))
            result.extend(self._entries[self._cursor:self._cursor + take])
            self._cursor += take

        self._position += len(result)
        return result, self.exhausted

    def __iter__(self) -> Iterator[DirEntry]:
        while True:
            entries, done = self.list_entries(DEFAULT_BATCH_SIZE)
            yield from entries
            if done:
                return

    def read(self, size: int = -1) -> bytes:
        raise UnsupportedOperationError("read", path=self._name)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        raise UnsupportedOperationError("seek", path=self._name)

    def _load_next_page(self) -> bool:
        if self._next_token is None:
            return False
        page = self._fetch_page(self._next_token)
        self._pages += 1
        self._entries = project_page(self._prefix, page)
        self._cursor = 0
        self._next_token = page.next_token
        self._loaded += len(page.items) + len(page.common_prefixes)
        log.debug(
            "Directory %s: loaded page %d (%d entries, more=%s)",
            self._name,
            self._pages,
            len(self._entries),
            self._next_token is not None,
        )
        return True

    def _release(self) -> None:
        self._entries = []
        self._next_token = None
