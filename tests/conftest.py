"""Shared fixtures: an in-memory object store standing in for S3."""

import io
from datetime import datetime, timezone

import pytest

from s3proxy.storage.base import DEFAULT_PAGE_SIZE, ListedObject, ListPage, ObjectStoreClient, StoredObject
from s3proxy.storage.exceptions import StorageError, StorageNotFoundError

DEFAULT_MTIME = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)


class FakeBody:
    """Body stream that may deliver fewer bytes than the declared size."""

    def __init__(self, data: bytes):
        self._stream = io.BytesIO(data)
        self.closed = False
        self.reads = 0

    def read(self, amt=None) -> bytes:
        self.reads += 1
        return self._stream.read(amt)

    def close(self) -> None:
        self.closed = True


class InMemoryObjectStore(ObjectStoreClient):
    """Sorted in-memory keyspace with S3-like listing and pagination."""

    def __init__(self):
        self.objects: dict[str, dict] = {}
        self.errors: dict[str, StorageError] = {}
        self.list_error: StorageError | None = None
        self.get_calls: list[str] = []
        self.list_calls: list[dict] = []
        self.bodies: list[FakeBody] = []

    def put(
        self,
        key: str,
        data: bytes = b"",
        declared_size: int | None = None,
        content_type: str | None = None,
        last_modified: datetime = DEFAULT_MTIME,
        etag: str | None = None,
    ) -> None:
        self.objects[key] = {
            "data": data,
            "size": len(data) if declared_size is None else declared_size,
            "content_type": content_type,
            "last_modified": last_modified,
            "etag": etag,
        }

    def get_object(self, key: str) -> StoredObject:
        self.get_calls.append(key)
        if key in self.errors:
            raise self.errors[key]
        if key not in self.objects:
            raise StorageNotFoundError("The specified key does not exist.", key=key, code="NoSuchKey")
        obj = self.objects[key]
        body = FakeBody(obj["data"])
        self.bodies.append(body)
        return StoredObject(
            key=key,
            size=obj["size"],
            last_modified=obj["last_modified"],
            body=body,
            content_type=obj["content_type"],
            etag=obj["etag"],
        )

    def list_objects(
        self,
        prefix: str,
        continuation_token: str | None = None,
        max_keys: int = DEFAULT_PAGE_SIZE,
        delimiter: str | None = None,
    ) -> ListPage:
        self.list_calls.append(
            {"prefix": prefix, "token": continuation_token, "max_keys": max_keys, "delimiter": delimiter}
        )
        if self.list_error is not None:
            raise self.list_error

        rows: list[tuple[str, bool]] = []
        seen_prefixes = set()
        for key in sorted(k for k in self.objects if k.startswith(prefix)):
            rest = key[len(prefix):]
            if delimiter and delimiter in rest:
                common = prefix + rest.split(delimiter, 1)[0] + delimiter
                if common not in seen_prefixes:
                    seen_prefixes.add(common)
                    rows.append((common, True))
            else:
                rows.append((key, False))

        start = int(continuation_token) if continuation_token else 0
        window = rows[start:start + max_keys]
        end = start + len(window)
        items = [
            ListedObject(
                key=key,
                size=self.objects[key]["size"],
                last_modified=self.objects[key]["last_modified"],
            )
            for key, is_prefix in window
            if not is_prefix
        ]
        common_prefixes = [key for key, is_prefix in window if is_prefix]
        return ListPage(
            items=items,
            common_prefixes=common_prefixes,
            next_token=str(end) if end < len(rows) else None,
        )


@pytest.fixture
def store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def docs_store(store: InMemoryObjectStore) -> InMemoryObjectStore:
    """The documented example bucket: a file and a nested image under docs/."""
    store.put("docs/readme.txt", b"hello world\n", content_type="text/plain")
    store.put("docs/img/logo.png", b"\x89PNG....", content_type="image/png")
    return store
