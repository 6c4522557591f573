"""Mapping of file-system errors onto HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse

from ..filesystem.errors import (
    ContentLengthMismatchError,
    FileSystemError,
    NotExistError,
    UnsupportedOperationError,
    UpstreamError,
)

log = logging.getLogger(__name__)

NOT_FOUND_BODY = "404 page not found"


async def not_exist_handler(request: Request, exc: NotExistError) -> PlainTextResponse:
    log.debug("Not found: %s %s", request.method, request.url.path)
    return PlainTextResponse(NOT_FOUND_BODY, status_code=status.HTTP_404_NOT_FOUND)


async def upstream_error_handler(request: Request, exc: UpstreamError) -> PlainTextResponse:
    log.error(
        "Object store error for %s %s: %s: %s",
        request.method,
        request.url.path,
        exc.code,
        exc.message,
    )
    return PlainTextResponse(
        f"{exc.code}: {exc.message}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def content_length_mismatch_handler(
    request: Request, exc: ContentLengthMismatchError
) -> PlainTextResponse:
    log.error("Integrity error for %s %s: %s", request.method, request.url.path, exc)
    return PlainTextResponse(str(exc), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


async def file_system_error_handler(request: Request, exc: FileSystemError) -> PlainTextResponse:
    log.error(
        "File system error (%s) for %s %s: %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc,
    )
    return PlainTextResponse(str(exc), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


async def unexpected_error_handler(request: Request, exc: Exception) -> PlainTextResponse:
    log.exception("Unhandled error for %s %s: %s", request.method, request.url.path, exc)
    return PlainTextResponse(
        "Internal Server Error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the file-system error mapping on *app*."""
    app.add_exception_handler(NotExistError, not_exist_handler)
    app.add_exception_handler(UpstreamError, upstream_error_handler)
    app.add_exception_handler(ContentLengthMismatchError, content_length_mismatch_handler)
    app.add_exception_handler(UnsupportedOperationError, file_system_error_handler)
    app.add_exception_handler(FileSystemError, file_system_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
