"""Stream-first reader over a single object body."""

import io
import logging
from datetime import datetime

from ..storage.base import StoredObject
from ..storage.exceptions import StorageError, StorageIncompleteReadError
from .base import FileHandle
from .entries import FILE_MODE, DirEntry
from .errors import ContentLengthMismatchError, FileSystemError, UnsupportedOperationError, UpstreamError

log = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class ObjectReader(FileHandle):
    """Reads an object body, streaming until random access is requested.

    Reads go straight to the store's body stream. The first ``seek`` drains
    the rest of the body into memory, checks the total against the declared
    content length and serves every later read and seek from that buffer.

    Bytes streamed before the first seek are kept so a later seek can still
    reach all of the content. Callers that only ever read front to back can
    call ``stream_only`` to stop keeping them.
    """

    def __init__(self, name: str, stored: StoredObject):
        super().__init__(name)
        self._key = stored.key
        self._size = stored.size
        self._mod_time = stored.last_modified
        self._content_type = stored.content_type
        self._etag = stored.etag
        self._body = stored.body
        self._head: bytearray | None = bytearray()
        self._streamed = 0
        self._eof = False
        self._buffer: io.BytesIO | None = None
        self._failure: FileSystemError | None = None

    @property
    def key(self) -> str:
        return self._key

    @property
    def size(self) -> int:
        return self._size

    @property
    def mod_time(self) -> datetime:
        return self._mod_time

    @property
    def mode(self) -> int:
        return FILE_MODE

    @property
    def is_directory(self) -> bool:
        return False

    @property
    def content_type(self) -> str | None:
        return self._content_type

    @property
    def etag(self) -> str | None:
        return self._etag

    @property
    def buffered(self) -> bool:
        return self._buffer is not None

    def read(self, size: int = -1) -> bytes:
        self._check_open()
        if self._buffer is not None:
            return self._buffer.read(size)
        if size == 0:
            return b""

        if size is None or size < 0:
            chunks = []
            while True:
                chunk = self._pull(CHUNK_SIZE)
                if not chunk:
                    break
                chunks.append(chunk)
            data = b"".join(chunks)
        else:
            data = self._pull(size)

        self._retain(data)
        return data

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._check_open()
        if self._buffer is None:
            self._buffer_body()
        return self._buffer.seek(offset, whence)

    def tell(self) -> int:
        self._check_open()
        if self._buffer is not None:
            return self._buffer.tell()
        return self._streamed

    def list_entries(self, max_count: int = 0) -> tuple[list[DirEntry], bool]:
        raise UnsupportedOperationError("list_entries", path=self._name)

    def _pull(self, amt: int) -> bytes:
        """Read from the body stream, checking the running byte count."""
        if self._failure is not None:
            raise self._failure
        if self._eof:
            return b""
        try:
            data = self._body.read(amt)
        except StorageIncompleteReadError as e:
            raise ContentLengthMismatchError(self._name, self._size, self._streamed) from e
        except StorageError as e:
            raise UpstreamError.from_storage_error(e, self._name) from e

        self._streamed += len(data)
        if self._streamed > self._size or (not data and self._streamed != self._size):
            raise ContentLengthMismatchError(self._name, self._size, self._streamed)
        if not data:
            self._eof = True
        return data

    def stream_only(self) -> None:
        """Stop keeping streamed bytes; later seeks become unsupported.

        Has no effect once the body is buffered.
        """
        self._check_open()
        if self._buffer is None:
            self._head = None

    def _retain(self, data: bytes) -> None:
        if self._head is not None:
            self._head.extend(data)

    def _buffer_body(self) -> None:
        if self._failure is not None:
            raise self._failure
        if self._head is None:
            raise UnsupportedOperationError("seek", path=self._name, reason="reader is stream-only")

        position = self._streamed
        chunks = [bytes(self._head)]
        try:
            while True:
                chunk = self._pull(CHUNK_SIZE)
                if not chunk:
                    break
                chunks.append(chunk)
        except FileSystemError as e:
            self._failure = e
            self._head = None
            self._close_body()
            raise

        log.debug("Buffered %d bytes of %s for random access", self._streamed, self._name)
        self._buffer = io.BytesIO(b"".join(chunks))
        self._buffer.seek(position)
        self._head = None
        self._close_body()

    def _close_body(self) -> None:
        if self._body is not None:
            body, self._body = self._body, None
            body.close()

    def _release(self) -> None:
        self._close_body()
        self._buffer = None
        self._head = None
