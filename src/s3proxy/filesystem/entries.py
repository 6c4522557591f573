"""Projection of listed objects onto directory entries."""

import stat
from dataclasses import dataclass
from datetime import datetime

from ..storage.base import ListedObject

FILE_MODE = 0o444
DIR_MODE = stat.S_IFDIR | 0o555


@dataclass(frozen=True)
class DirEntry:
    """A child of a synthesized directory, named relative to its parent prefix."""

    name: str
    size: int
    mod_time: datetime
    mode: int = FILE_MODE
    is_dir: bool = False


def relative_name(prefix: str, key: str) -> str:
    """Return *key* relative to *prefix*, or "" when it is not a strict child."""
    if not key.startswith(prefix):
        return ""
    return key[len(prefix):]


def project_object(prefix: str, obj: ListedObject) -> DirEntry | None:
    """Turn a listed object into a file entry.

    Returns None for the prefix object itself (for example a zero-byte
    folder marker), which is never a visible child of its own directory.
    """
    name = relative_name(prefix, obj.key)
    if not name:
        return None
    return DirEntry(name=name, size=obj.size, mod_time=obj.last_modified)


def project_common_prefix(prefix: str, common_prefix: str, mod_time: datetime) -> DirEntry | None:
    """Turn a delimiter-grouped key prefix into a subdirectory entry."""
    name = relative_name(prefix, common_prefix)
    if not name:
        return None
    return DirEntry(name=name, size=0, mod_time=mod_time, mode=DIR_MODE, is_dir=True)
