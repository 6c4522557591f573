"""Resolution of request paths against a flat object keyspace."""

import logging
from dataclasses import dataclass
from typing import Union

from ..storage.base import DEFAULT_PAGE_SIZE, ListPage, ObjectStoreClient
from ..storage.exceptions import StorageError, StorageNotFoundError
from .base import FileHandle
from .directory import DirectoryView
from .errors import NotExistError, UpstreamError
from .reader import ObjectReader

log = logging.getLogger(__name__)

SEPARATOR = "/"


@dataclass(frozen=True)
class Missing:
    """Resolution outcome for a path matching neither an object nor a prefix."""

    path: str


ResolvedEntity = Union[ObjectReader, DirectoryView, Missing]


def normalize_key_prefix(key_prefix: str) -> str:
    """Turn a configured key prefix into "" or a "a/b/" style prefix."""
    stripped = key_prefix.strip(SEPARATOR)
    return f"{stripped}{SEPARATOR}" if stripped else ""


class PathResolver:
    """Maps request paths onto objects and synthesized directories.

    The store client is the only long-lived collaborator and is shared
    read-only between concurrent resolutions; every call builds fresh
    handles owned by the caller.
    """

    def __init__(
        self,
        store: ObjectStoreClient,
        key_prefix: str = "",
        page_size: int = DEFAULT_PAGE_SIZE,
        recursive: bool = True,
    ):
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self._store = store
        self._key_prefix = normalize_key_prefix(key_prefix)
        self._page_size = page_size
        self._delimiter = None if recursive else SEPARATOR

    @property
    def recursive(self) -> bool:
        return self._delimiter is None

    @property
    def page_size(self) -> int:
        return self._page_size

    def object_key(self, path: str) -> str:
        return self._key_prefix + path.lstrip(SEPARATOR)

    def directory_prefix(self, path: str) -> str:
        prefix = self.object_key(path)
        if prefix and not prefix.endswith(SEPARATOR):
            prefix += SEPARATOR
        return prefix

    def resolve(self, path: str) -> ResolvedEntity:
        """Resolve *path* to exactly one of file, directory or missing.

        A path without a trailing separator is first tried as an object
        key; not-found there falls through to a prefix listing. Any other
        store failure raises UpstreamError.
        """
        log.debug("Resolving %s", path)
        # the root is always a directory, even over a marker object at key_prefix
        if path.lstrip(SEPARATOR) and not path.endswith(SEPARATOR):
            key = self.object_key(path)
            try:
                stored = self._store.get_object(key)
            except StorageNotFoundError:
                log.debug("No object at %s, trying as directory", key)
            except StorageError as e:
                raise UpstreamError.from_storage_error(e, path) from e
            else:
                return ObjectReader(path, stored)

        prefix = self.directory_prefix(path)
        first_page = self._list_page(prefix, None, path)
        if first_page.is_empty:
            return Missing(path)

        return DirectoryView(
            path,
            prefix,
            first_page,
            lambda token: self._list_page(prefix, token, path),
        )

    def open(self, path: str) -> FileHandle:
        """Resolve *path* to a handle, raising NotExistError when missing."""
        entity = self.resolve(path)
        if isinstance(entity, Missing):
            raise NotExistError(path)
        return entity

    def _list_page(self, prefix: str, token: str | None, path: str) -> ListPage:
        try:
            return self._store.list_objects(
                prefix,
                continuation_token=token,
                max_keys=self._page_size,
                delimiter=self._delimiter,
            )
        except StorageError as e:
            raise UpstreamError.from_storage_error(e, path) from e
