"""Read-only abstraction over a flat key-addressed object store."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import BinaryIO

DEFAULT_PAGE_SIZE = 1000


@dataclass(frozen=True)
class ListedObject:
    """One object as reported by a prefix listing."""

    key: str
    size: int
    last_modified: datetime
    etag: str | None = None


@dataclass(frozen=True)
class ListPage:
    """A single bounded page of a prefix listing.

    ``next_token`` is the continuation token for the following page, or
    ``None`` when this page is the last one.
    """

    items: list[ListedObject] = field(default_factory=list)
    common_prefixes: list[str] = field(default_factory=list)
    next_token: str | None = None
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_empty(self) -> bool:
        return not self.items and not self.common_prefixes

    @property
    def is_truncated(self) -> bool:
        return self.next_token is not None


@dataclass
class StoredObject:
    """Result of a successful object fetch; ``body`` is an open stream."""

    key: str
    size: int
    last_modified: datetime
    body: BinaryIO
    content_type: str | None = None
    etag: str | None = None


class ObjectStoreClient(ABC):
    """Minimal read-only interface the file-system adapter depends on.

    Implementations are bound to one bucket and must be safe to share
    between concurrent requests.
    """

    @abstractmethod
    def get_object(self, key: str) -> StoredObject:
        """Open an object by key. Raises StorageNotFoundError if missing."""

    @abstractmethod
    def list_objects(
        self,
        prefix: str,
        continuation_token: str | None = None,
        max_keys: int = DEFAULT_PAGE_SIZE,
        delimiter: str | None = None,
    ) -> ListPage:
        """Return one page of objects whose keys start with *prefix*."""
