"""Hierarchical file access over a flat object keyspace."""

from .base import FileHandle
from .directory import DirectoryView
from .entries import DIR_MODE, FILE_MODE, DirEntry, project_object
from .errors import (
    ContentLengthMismatchError,
    FileSystemError,
    NotExistError,
    UnsupportedOperationError,
    UpstreamError,
)
from .reader import ObjectReader
from .resolver import Missing, PathResolver, ResolvedEntity

__all__ = [
    "FileHandle",
    "ObjectReader",
    "DirectoryView",
    "DirEntry",
    "FILE_MODE",
    "DIR_MODE",
    "project_object",
    "PathResolver",
    "ResolvedEntity",
    "Missing",
    "FileSystemError",
    "NotExistError",
    "UpstreamError",
    "ContentLengthMismatchError",
    "UnsupportedOperationError",
]
