from s3proxy import __version__

__all__ = ["__version__"]
