"""
Property-based tests for FileScanner.

Generates small in-memory repositories and checks the traversal against
an independent model of which files it should contain.
"""

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from repohealth.core.file_scanner import (
    FileScanner,
    IgnoreRuleSet,
    count_lines_in_bytes,
    matches,
)
from tests.support.repo_builders import ROOT, build_fs, repository_strategy

ignore_rules_strategy = st.lists(
    st.sampled_from(["*.log", "*.txt", "a*", "x/", "b", "*/c*", "zz"]),
    max_size=3,
    unique=True,
)


def _expected_paths(files: dict[str, bytes], rules: list[str]) -> set[str]:
    """A file is present iff neither it nor any ancestor directory matches a rule."""
    expected = set()
    for path in files:
        parts = path.split("/")
        prefixes = ["/".join(parts[: i + 1]) for i in range(len(parts))]
        if not any(matches(prefix, rules) for prefix in prefixes):
            expected.add(path)
    return expected


@given(files=repository_strategy(), rules=ignore_rules_strategy)
@settings(max_examples=100, suppress_health_check=[HealthCheck.too_slow])
def test_cache_holds_exactly_the_non_ignored_files(files, rules):
    scanner = FileScanner(
        ROOT, file_system=build_fs(files), ignore_rules=IgnoreRuleSet.from_patterns(rules)
    )

    cache = scanner.scan_all()

    assert set(cache) == _expected_paths(files, rules)
    assert all(not matches(path, rules) for path in cache)


@given(files=repository_strategy())
@settings(max_examples=100, suppress_health_check=[HealthCheck.too_slow])
def test_records_are_consistent_with_content(files):
    scanner = FileScanner(ROOT, file_system=build_fs(files))

    for relative_path, record in scanner.scan_all().items():
        content = files[relative_path]
        assert record.size == len(content)
        assert record.is_text == (b"\x00" not in content[:512])
        if record.is_text:
            assert record.content == content
            assert record.line_count == count_lines_in_bytes(content)
        else:
            assert record.content is None
            assert record.line_count == 0


@given(files=repository_strategy())
@settings(max_examples=50, suppress_health_check=[HealthCheck.too_slow])
def test_rescan_is_idempotent(files):
    scanner = FileScanner(ROOT, file_system=build_fs(files))

    assert scanner.scan_all() == scanner.scan_all()


@given(
    files=repository_strategy(max_files=6),
    chunk_size=st.integers(min_value=1, max_value=16),
)
@settings(max_examples=50, suppress_health_check=[HealthCheck.too_slow])
def test_streamed_counts_match_cached_counts(files, chunk_size):
    """Disabling content caching never changes the recorded line counts."""
    cached = FileScanner(ROOT, file_system=build_fs(files)).scan_all()
    streamed = FileScanner(
        ROOT, file_system=build_fs(files), cache_threshold=-1, stream_chunk_size=chunk_size
    ).scan_all()

    assert {k: v.line_count for k, v in streamed.items()} == {
        k: v.line_count for k, v in cached.items()
    }
    assert all(v.content is None for v in streamed.values())
