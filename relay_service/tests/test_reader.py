"""Tests for bounded body reading."""

import asyncio

import pytest

from relay_service.errors import PayloadTooLargeError
from relay_service.reader import MAX_BODY_BYTES, check_declared_length, read_limited


class ChunkStream:
    """Async chunk source that records how many chunks were pulled."""

    def __init__(self, chunks):
        self._chunks = list(chunks)
        self.pulled = 0

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.pulled >= len(self._chunks):
            raise StopAsyncIteration
        chunk = self._chunks[self.pulled]
        self.pulled += 1
        return chunk


def test_ceiling_is_64_kib():
    """The default ceiling is 65536 bytes."""
    assert MAX_BODY_BYTES == 65536


def test_stream_within_limit_is_joined():
    """Chunks within the limit are concatenated in order."""
    stream = ChunkStream([b"[{", b'"a":1', b"}]"])
    assert asyncio.run(read_limited(stream)) == b'[{"a":1}]'


def test_stream_exactly_at_limit_is_accepted():
    """A body of exactly the ceiling is accepted."""
    stream = ChunkStream([b"x" * 6, b"y" * 4])
    assert asyncio.run(read_limited(stream, max_bytes=10)) == b"xxxxxxyyyy"


def test_stream_aborts_as_soon_as_limit_is_crossed():
    """Reading stops at the first chunk that crosses the ceiling."""
    stream = ChunkStream([b"x" * 8, b"y" * 8, b"z" * 8, b"w" * 8])
    with pytest.raises(PayloadTooLargeError):
        asyncio.run(read_limited(stream, max_bytes=10))
    assert stream.pulled == 2


def test_whole_body_checked_after_the_fact():
    """Whole bodies are checked against the same ceiling."""
    assert asyncio.run(read_limited(b"abc", max_bytes=3)) == b"abc"
    assert asyncio.run(read_limited("é", max_bytes=2)) == "é".encode()
    with pytest.raises(PayloadTooLargeError) as exc_info:
        asyncio.run(read_limited("éé", max_bytes=3))
    assert exc_info.value.status_code == 413


def test_declared_length_over_limit_is_rejected():
    """A Content-Length above the ceiling is rejected before reading."""
    with pytest.raises(PayloadTooLargeError):
        check_declared_length(str(MAX_BODY_BYTES + 1))
    check_declared_length(str(MAX_BODY_BYTES))
    check_declared_length(None)
    check_declared_length("garbage")
    check_declared_length("\u00b2")
    check_declared_length("\u0661\u0662")


def test_declared_length_with_huge_digit_count_is_rejected():
    """A Content-Length with thousands of digits is rejected without int overflow."""
    with pytest.raises(PayloadTooLargeError):
        check_declared_length("9" * 5000)
    check_declared_length("0" * 5000 + "10")
