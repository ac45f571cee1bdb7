"""
Property-based tests for line counting.

The streaming counter must agree with the in-memory counter for any
content and any chunk size, and with the number of iterated lines.
"""

import io

from hypothesis import given, settings
from hypothesis import strategies as st

from repohealth.core.file_scanner import (
    count_lines_in_bytes,
    count_lines_streaming,
    iter_lines_from_bytes,
    iter_lines_streaming,
)

chunk_size_strategy = st.integers(min_value=1, max_value=256)

# Content biased towards newlines so that chunk boundaries fall on them
newline_heavy_strategy = st.lists(st.sampled_from([b"\n", b"a", b"\r\n", b"xyz"]), max_size=60).map(
    b"".join
)


@given(content=st.binary(max_size=2048), chunk_size=chunk_size_strategy)
@settings(max_examples=200)
def test_streaming_matches_in_memory(content, chunk_size):
    """For any content, both counters return the same number of lines."""
    assert count_lines_streaming(io.BytesIO(content), chunk_size) == count_lines_in_bytes(content)


@given(content=newline_heavy_strategy, chunk_size=chunk_size_strategy)
@settings(max_examples=200)
def test_streaming_matches_in_memory_newline_heavy(content, chunk_size):
    assert count_lines_streaming(io.BytesIO(content), chunk_size) == count_lines_in_bytes(content)


@given(content=st.binary(max_size=1024))
def test_count_equals_newlines_plus_partial_line(content):
    """Count is the number of newlines, plus one for an unterminated final line."""
    expected = content.count(b"\n") + (1 if content and not content.endswith(b"\n") else 0)

    assert count_lines_in_bytes(content) == expected


@given(content=newline_heavy_strategy)
def test_iterated_lines_match_count(content):
    lines = list(iter_lines_from_bytes(content))

    assert len(lines) == count_lines_in_bytes(content)
    assert list(iter_lines_streaming(io.BytesIO(content))) == lines
