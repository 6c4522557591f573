"""Read-only object store clients backing the bucket file system."""

from .base import ListedObject, ListPage, ObjectStoreClient, StoredObject
from .exceptions import (
    StorageConnectionError,
    StorageError,
    StorageIncompleteReadError,
    StorageNotFoundError,
    StoragePermissionError,
)
from .factory import create_store_client

__all__ = [
    "ListedObject",
    "ListPage",
    "ObjectStoreClient",
    "StoredObject",
    "StorageError",
    "StorageNotFoundError",
    "StoragePermissionError",
    "StorageConnectionError",
    "StorageIncompleteReadError",
    "create_store_client",
]
