"""Bounded reading of inbound request bodies."""

from collections.abc import AsyncIterable
from typing import Union

from .errors import PayloadTooLargeError

MAX_BODY_BYTES = 64 * 1024

BodySource = Union[bytes, bytearray, str, AsyncIterable[bytes]]


def check_declared_length(content_length: str | None, max_bytes: int = MAX_BODY_BYTES) -> None:
    """Reject a request whose declared Content-Length is already over the limit.

    Malformed or missing headers are left to the streaming check.

    Raises:
        PayloadTooLargeError: If the declared length exceeds ``max_bytes``.
    """
    declared = (content_length or "").strip()
    if not (declared.isascii() and declared.isdigit()):
        return
    significant = declared.lstrip("0")
    if len(significant) > len(str(max_bytes)) or int(significant or "0") > max_bytes:
        raise PayloadTooLargeError(f"declared body of {content_length} bytes exceeds {max_bytes}")


async def read_limited(source: BodySource, max_bytes: int = MAX_BODY_BYTES) -> bytes:
    """Read a request body without buffering more than ``max_bytes``.

    Args:
        source: Either the whole body (``bytes`` or ``str``) or an async
            iterator of chunks, such as ``starlette.requests.Request.stream()``.
        max_bytes: Byte ceiling. A body of exactly this size is accepted.

    Returns:
        bytes: The complete body.

    Raises:
        PayloadTooLargeError: As soon as the accumulated size exceeds the ceiling.
    """
    if isinstance(source, str):
        source = source.encode("utf-8")
    if isinstance(source, (bytes, bytearray)):
        if len(source) > max_bytes:
            raise PayloadTooLargeError(f"body of {len(source)} bytes exceeds {max_bytes}")
        return bytes(source)

    received = 0
    chunks = []
    async for chunk in source:
        received += len(chunk)
        if received > max_bytes:
            raise PayloadTooLargeError(f"body exceeds {max_bytes} bytes")
        chunks.append(chunk)
    return b"".join(chunks)
