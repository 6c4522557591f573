"""FastAPI application serving one or more bucket mounts."""

import logging
from dataclasses import dataclass
from typing import Callable

from fastapi import FastAPI, Request

from .. import __version__
from ..config import BucketConfig, ProxyConfig
from ..filesystem.errors import NotExistError
from ..filesystem.resolver import PathResolver
from ..storage.base import ObjectStoreClient
from ..storage.factory import create_store_client
from .exception_handlers import register_exception_handlers
from .file_server import BucketFileServer, clean_path
from .middleware import RequestLoggingMiddleware

log = logging.getLogger(__name__)

StoreFactory = Callable[[BucketConfig], ObjectStoreClient]


def default_store_factory(bucket: BucketConfig) -> ObjectStoreClient:
    return create_store_client(
        bucket_name=bucket.name,
        region=bucket.region,
        endpoint_url=bucket.endpoint_url,
    )


@dataclass(frozen=True)
class BucketMount:
    """A bucket file server attached at a URL path."""

    path: str
    bucket: str
    server: BucketFileServer

    def match(self, url_path: str) -> str | None:
        """Return *url_path* relative to this mount, or None if outside it."""
        if self.path == "/":
            return url_path
        if url_path == self.path or url_path.startswith(self.path + "/"):
            return url_path[len(self.path):] or "/"
        return None


def build_mounts(config: ProxyConfig, store_factory: StoreFactory) -> list[BucketMount]:
    """Create one file server per configured bucket, longest mount path first."""
    mounts = []
    for bucket in config.buckets:
        resolver = PathResolver(
            store_factory(bucket),
            key_prefix=bucket.key_prefix,
            page_size=bucket.page_size,
            recursive=bucket.recursive,
        )
        mounts.append(BucketMount(path=bucket.path, bucket=bucket.name, server=BucketFileServer(resolver)))
        log.info(
            "Mounted bucket %s at %s (key_prefix=%r, recursive=%s)",
            bucket.name,
            bucket.path,
            bucket.key_prefix,
            bucket.recursive,
        )
    return sorted(mounts, key=lambda m: len(m.path), reverse=True)


def find_mount(mounts: list[BucketMount], url_path: str) -> tuple[BucketMount, str] | None:
    for mount in mounts:
        relative = mount.match(url_path)
        if relative is not None:
            return mount, relative
    return None


def create_app(config: ProxyConfig, store_factory: StoreFactory = default_store_factory) -> FastAPI:
    """Assemble the proxy application for *config*."""
    if not config.buckets:
        raise ValueError("At least one bucket must be configured")

    app = FastAPI(
        title="S3 Proxy",
        version=__version__,
        description="Serves S3 buckets as static file trees.",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.mounts = build_mounts(config, store_factory)

    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    @app.get("/healthz", include_in_schema=False)
    def healthz():
        return {"ok": True, "buckets": [m.bucket for m in app.state.mounts]}

    @app.api_route("/{full_path:path}", methods=["GET", "HEAD"], include_in_schema=False)
    def serve_path(full_path: str, request: Request):
        url_path = clean_path(request.scope["path"])
        found = find_mount(app.state.mounts, url_path)
        if found is None:
            raise NotExistError(url_path)
        mount, relative = found
        return mount.server.serve(
            relative,
            request_path=url_path,
            method=request.method,
            headers=request.headers,
            query=request.url.query,
        )

    return app
