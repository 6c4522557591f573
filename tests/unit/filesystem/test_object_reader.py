"""Tests for ObjectReader streaming, buffering and integrity checks."""

import io

import pytest

from s3proxy.filesystem.errors import (
    ContentLengthMismatchError,
    FileSystemError,
    UnsupportedOperationError,
    UpstreamError,
)
from s3proxy.filesystem.reader import ObjectReader
from s3proxy.storage.exceptions import StorageConnectionError, StorageIncompleteReadError

CONTENT = b"0123456789abcdefghij"


@pytest.fixture
def open_reader(store):
    def _open(data: bytes = CONTENT, declared_size: int | None = None, **kwargs) -> ObjectReader:
        store.put("files/data.bin", data, declared_size=declared_size)
        return ObjectReader("/files/data.bin", store.get_object("files/data.bin"), **kwargs)

    return _open


class TestSequentialReads:
    def test_read_all_returns_exactly_size_bytes(self, open_reader):
        reader = open_reader()

        data = reader.read()

        assert data == CONTENT
        assert len(data) == reader.size

    def test_chunked_reads_concatenate_to_content(self, open_reader):
        reader = open_reader()
        chunks = []
        while True:
            chunk = reader.read(7)
            if not chunk:
                break
            chunks.append(chunk)

        assert b"".join(chunks) == CONTENT
        assert reader.tell() == len(CONTENT)

    def test_streaming_does_not_buffer(self, open_reader):
        reader = open_reader()
        reader.read(5)

        assert not reader.buffered

    def test_readinto_fills_buffer(self, open_reader):
        reader = open_reader()
        buf = bytearray(4)

        assert reader.readinto(buf) == 4
        assert bytes(buf) == b"0123"

    def test_read_zero_returns_empty(self, open_reader):
        assert open_reader().read(0) == b""

    def test_empty_object(self, open_reader):
        reader = open_reader(b"")
        assert reader.read() == b""

    def test_truncated_body_raises_mismatch_at_end_of_stream(self, open_reader):
        reader = open_reader(CONTENT[:15], declared_size=len(CONTENT))

        with pytest.raises(ContentLengthMismatchError) as exc_info:
            reader.read()

        assert exc_info.value.expected == 20
        assert exc_info.value.actual == 15

    def test_oversized_body_raises_mismatch(self, open_reader):
        reader = open_reader(CONTENT, declared_size=10)

        with pytest.raises(ContentLengthMismatchError):
            reader.read()


class TestSeek:
    def test_seek_buffers_and_allows_random_access(self, open_reader):
        reader = open_reader()

        assert reader.seek(10) == 10
        assert reader.buffered
        assert reader.read(5) == b"abcde"
        assert reader.seek(-3, io.SEEK_END) == 17
        assert reader.read() == b"hij"

    def test_seek_after_partial_read_keeps_all_bytes(self, open_reader):
        reader = open_reader()
        assert reader.read(4) == b"0123"

        assert reader.seek(0, io.SEEK_CUR) == 4
        assert reader.seek(0) == 0
        assert reader.read() == CONTENT

    def test_seek_releases_body_stream(self, open_reader, store):
        reader = open_reader()
        reader.seek(0)

        assert store.bodies[-1].closed

    def test_truncated_body_on_seek_raises_mismatch(self, open_reader):
        reader = open_reader(CONTENT[:12], declared_size=len(CONTENT))

        with pytest.raises(ContentLengthMismatchError):
            reader.seek(5)

    def test_seek_after_long_partial_read_keeps_all_bytes(self, open_reader):
        data = bytes(range(256)) * 400
        reader = open_reader(data)
        reader.read(70000)

        assert reader.seek(0) == 0
        assert reader.read() == data

    def test_seek_after_full_read_rewinds(self, open_reader):
        data = bytes(range(256)) * 400
        reader = open_reader(data)
        assert reader.read() == data

        reader.seek(0)

        assert reader.read() == data
        assert reader.tell() == reader.size

    def test_stream_only_reader_rejects_seek(self, open_reader):
        reader = open_reader()
        reader.stream_only()

        assert reader.read(4) == b"0123"
        with pytest.raises(UnsupportedOperationError):
            reader.seek(0)

    def test_stream_only_after_seek_keeps_buffer(self, open_reader):
        reader = open_reader()
        reader.seek(10)
        reader.stream_only()

        assert reader.seek(0) == 0
        assert reader.read() == CONTENT

    def test_failed_seek_releases_body_and_keeps_failing(self, open_reader, store):
        reader = open_reader(CONTENT[:12], declared_size=len(CONTENT))
        reader.read(4)

        with pytest.raises(ContentLengthMismatchError):
            reader.seek(0)

        assert store.bodies[-1].closed
        with pytest.raises(ContentLengthMismatchError):
            reader.read(4)
        with pytest.raises(ContentLengthMismatchError):
            reader.seek(0)


class TestErrorsAndLifecycle:
    def test_list_entries_is_unsupported(self, open_reader):
        with pytest.raises(UnsupportedOperationError):
            open_reader().list_entries(10)

    def test_close_is_idempotent_and_releases_body(self, open_reader, store):
        reader = open_reader()
        reader.close()
        reader.close()

        assert reader.closed
        assert store.bodies[-1].closed

    def test_read_after_close_fails(self, open_reader):
        reader = open_reader()
        reader.close()

        with pytest.raises(FileSystemError):
            reader.read()

    def test_context_manager_closes(self, open_reader, store):
        with open_reader() as reader:
            reader.read(1)

        assert store.bodies[-1].closed

    def test_store_read_failure_becomes_upstream_error(self, open_reader, store):
        reader = open_reader()

        def failing_read(amt=None):
            raise StorageConnectionError("connection reset", code="ConnectionClosedError")

        store.bodies[-1].read = failing_read

        with pytest.raises(UpstreamError) as exc_info:
            reader.read(4)

        assert exc_info.value.code == "ConnectionClosedError"

    def test_incomplete_read_from_store_becomes_mismatch(self, open_reader, store):
        reader = open_reader()

        def short_read(amt=None):
            raise StorageIncompleteReadError("short", code="IncompleteRead")

        store.bodies[-1].read = short_read

        with pytest.raises(ContentLengthMismatchError):
            reader.read()

    def test_metadata(self, store):
        store.put("a/b.txt", b"xyz", content_type="text/plain", etag="e-1")
        reader = ObjectReader("/a/b.txt", store.get_object("a/b.txt"))

        assert reader.name == "/a/b.txt"
        assert reader.key == "a/b.txt"
        assert reader.size == 3
        assert reader.is_directory is False
        assert reader.mode == 0o444
        assert reader.content_type == "text/plain"
        assert reader.etag == "e-1"
