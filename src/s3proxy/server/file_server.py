"""Static file serving over bucket file-system handles."""

import logging
import mimetypes
import posixpath
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import formatdate, parsedate_to_datetime
from typing import Iterator, Mapping

from fastapi.responses import HTMLResponse, RedirectResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from ..filesystem.base import FileHandle
from ..filesystem.directory import DirectoryView
from ..filesystem.errors import FileSystemError
from ..filesystem.reader import ObjectReader
from ..filesystem.resolver import PathResolver
from .listing import render_listing

log = logging.getLogger(__name__)

INDEX_PAGE = "index.html"
STREAM_CHUNK_SIZE = 64 * 1024
LISTING_BATCH_SIZE = 100

_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")


class RangeNotSatisfiable(Exception):
    """The requested byte range lies outside the object."""


@dataclass(frozen=True)
class ByteRange:
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1


def clean_path(path: str) -> str:
    """Collapse dot segments and duplicate slashes, keeping a trailing slash."""
    if not path.startswith("/"):
        path = "/" + path
    cleaned = "/" + posixpath.normpath(path).lstrip("/")
    if path.endswith("/") and cleaned != "/":
        cleaned += "/"
    return cleaned


def parse_range(header: str | None, size: int) -> ByteRange | None:
    """Parse a single-range ``Range`` header.

    Returns None when the whole body should be sent: no header, a malformed
    header, or a multi-range request. Raises RangeNotSatisfiable when the
    range does not overlap the object.
    """
    if not header:
        return None
    match = _RANGE_RE.match(header.strip())
    if not match:
        return None
    first, last = match.groups()
    if not first and not last:
        return None

    if not first:
        suffix = int(last)
        if suffix == 0 or size == 0:
            raise RangeNotSatisfiable(header)
        return ByteRange(max(size - suffix, 0), size - 1)

    start = int(first)
    if start >= size:
        raise RangeNotSatisfiable(header)
    end = min(int(last), size - 1) if last else size - 1
    if end < start:
        return None
    return ByteRange(start, end)


def http_date(moment: datetime) -> str:
    return formatdate(moment.timestamp(), usegmt=True)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def not_modified(header: str | None, mod_time: datetime) -> bool:
    if not header:
        return False
    try:
        since = parsedate_to_datetime(header)
    except (TypeError, ValueError):
        return False
    return _as_utc(mod_time).replace(microsecond=0) <= _as_utc(since)


def content_type_for(reader: ObjectReader) -> str:
    guessed, _ = mimetypes.guess_type(reader.name)
    return guessed or reader.content_type or "application/octet-stream"


def iter_body(handle: FileHandle, length: int) -> Iterator[bytes]:
    """Yield *length* bytes from *handle*, closing it when done or abandoned."""
    try:
        remaining = length
        while remaining > 0:
            chunk = handle.read(min(STREAM_CHUNK_SIZE, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk
    except FileSystemError as e:
        log.error("Aborting response for %s after streaming started: %s", handle.name, e)
        raise
    finally:
        handle.close()


class BucketFileServer:
    """Answers GET/HEAD requests for paths inside one bucket mount."""

    def __init__(self, resolver: PathResolver):
        self._resolver = resolver

    @property
    def resolver(self) -> PathResolver:
        return self._resolver

    def serve(
        self,
        path: str,
        request_path: str,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        query: str = "",
    ) -> Response:
        """Build the response for *path* (relative to the mount).

        ``request_path`` is the full URL path, used for redirects.
        """
        headers = headers or {}
        handle = self._resolver.open(path)
        try:
            if handle.is_directory:
                if not request_path.endswith("/"):
                    handle.close()
                    location = request_path + "/" + (f"?{query}" if query else "")
                    return RedirectResponse(location, status_code=301)
                index = self._open_index(path)
                if index is None:
                    return self._listing_response(handle, method)
                handle.close()
                handle = index
            return self._file_response(handle, method, headers)
        except Exception:
            handle.close()
            raise

    def _open_index(self, path: str) -> ObjectReader | None:
        entity = self._resolver.resolve(posixpath.join(path, INDEX_PAGE))
        if isinstance(entity, ObjectReader):
            return entity
        if isinstance(entity, DirectoryView):
            entity.close()
        return None

    def _listing_response(self, directory: FileHandle, method: str) -> Response:
        with directory:
            entries = []
            done = False
            while not done:
                batch, done = directory.list_entries(LISTING_BATCH_SIZE)
                entries.extend(batch)
        log.debug("Listing %s: %d entries", directory.name, len(entries))
        body = render_listing(entries)
        if method == "HEAD":
            return Response(
                status_code=200,
                media_type="text/html; charset=utf-8",
                headers={"Content-Length": str(len(body.encode("utf-8")))},
            )
        return HTMLResponse(body)

    def _file_response(self, reader: ObjectReader, method: str, headers: Mapping[str, str]) -> Response:
        response_headers = {
            "Last-Modified": http_date(reader.mod_time),
            "Accept-Ranges": "bytes",
        }
        if reader.etag:
            response_headers["ETag"] = f'"{reader.etag}"'

        if not_modified(headers.get("if-modified-since"), reader.mod_time):
            reader.close()
            return Response(status_code=304, headers=response_headers)

        media_type = content_type_for(reader)
        status_code = 200
        length = reader.size
        try:
            byte_range = parse_range(headers.get("range"), reader.size)
        except RangeNotSatisfiable:
            reader.close()
            return Response(
                status_code=416,
                headers={"Content-Range": f"bytes */{reader.size}"},
            )

        if byte_range is not None:
            status_code = 206
            length = byte_range.length
            response_headers["Content-Range"] = f"bytes {byte_range.start}-{byte_range.end}/{reader.size}"

        response_headers["Content-Length"] = str(length)
        if method == "HEAD":
            reader.close()
            return Response(status_code=status_code, headers=response_headers, media_type=media_type)

        if byte_range is not None:
            reader.seek(byte_range.start)
        reader.stream_only()

        return StreamingResponse(
            iter_body(reader, length),
            status_code=status_code,
            headers=response_headers,
            media_type=media_type,
            background=BackgroundTask(reader.close),
        )
