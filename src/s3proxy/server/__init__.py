"""HTTP static file serving for bucket file systems."""

from .app import create_app
from .file_server import BucketFileServer

__all__ = ["create_app", "BucketFileServer"]
