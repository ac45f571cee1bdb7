"""
Line counting and line iteration over bytes or streams.

The in-memory and streaming variants agree on every input: a line is a
run of bytes terminated by '\\n', plus one final unterminated line when
the content does not end with '\\n'. Empty content has zero lines.
"""

from collections.abc import Iterator
from typing import BinaryIO

from .models import DEFAULT_STREAM_CHUNK_SIZE

_NEWLINE = b"\n"


def count_lines_in_bytes(content: bytes) -> int:
    """Count lines in an in-memory buffer."""
    count = content.count(_NEWLINE)
    if content and not content.endswith(_NEWLINE):
        count += 1
    return count


def count_lines_streaming(stream: BinaryIO, chunk_size: int = DEFAULT_STREAM_CHUNK_SIZE) -> int:
    """
    Count lines by reading a stream in fixed-size chunks.

    Args:
        stream: Binary stream positioned at the start of the content
        chunk_size: Number of bytes per read

    Returns:
        Same value count_lines_in_bytes would return for the whole content
    """
    count = 0
    last_byte = b""
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        count += chunk.count(_NEWLINE)
        last_byte = chunk[-1:]

    if last_byte and last_byte != _NEWLINE:
        count += 1
    return count


def _decode_line(raw: bytes) -> str:
    """Decode one raw line, dropping the terminator and a trailing carriage return."""
    if raw.endswith(_NEWLINE):
        raw = raw[:-1]
    if raw.endswith(b"\r"):
        raw = raw[:-1]
    return raw.decode("utf-8", errors="replace")


def iter_lines_from_bytes(content: bytes) -> Iterator[str]:
    """Yield decoded lines from an in-memory buffer."""
    if not content:
        return
    raw_lines = content.split(_NEWLINE)
    # A trailing terminator leaves an empty element that is not a line
    if content.endswith(_NEWLINE):
        raw_lines.pop()
    for raw in raw_lines:
        yield _decode_line(raw)


def iter_lines_streaming(stream: BinaryIO) -> Iterator[str]:
    """Yield decoded lines from a binary stream without loading it whole."""
    for raw in stream:
        yield _decode_line(raw)
