"""Serve S3-compatible buckets through a hierarchical static file interface."""

__version__ = "0.3.0"
