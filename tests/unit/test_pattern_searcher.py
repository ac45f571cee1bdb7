"""
Unit tests for PatternSearcher.
"""

import logging

import pytest

from repohealth.core.file_scanner import FileScanner, MatchRecord, ScanError
from repohealth.infrastructure.pattern_searcher import (
    PatternSearcher,
    PatternSearcherError,
    normalize_extensions,
)
from tests.support.repo_builders import PNG_HEADER, ROOT, build_fs, build_scanner

REPO_FILES = {
    "main.go": "package main\n\nfunc main() {\n\tfmt.Println(\"TODO: wire\")\n}\n",
    "lib/util.py": "# TODO refactor\ndef util():\n    return 1\n",
    "README.md": "# Project\nTODO: write docs\n",
    "photo.png": PNG_HEADER + b"TODO",
}


@pytest.fixture
def scanner():
    return build_scanner(REPO_FILES)


class TestSearch:
    def test_invalid_regex_raises(self, scanner):
        with pytest.raises(PatternSearcherError) as exc_info:
            PatternSearcher(scanner).search("(unclosed")

        assert "Invalid regex pattern" in str(exc_info.value)

    def test_results_ordered_by_file_then_line(self, scanner):
        results = PatternSearcher(scanner).search("TODO")

        assert [(r.file, r.line) for r in results] == [
            ("README.md", 2),
            ("lib/util.py", 1),
            ("main.go", 4),
        ]

    def test_record_fields(self, scanner):
        results = PatternSearcher(scanner).search(r"def \w+")

        assert results == [
            MatchRecord(file="lib/util.py", line=2, content="def util():", pattern=r"def \w+")
        ]

    def test_binary_files_never_match(self, scanner):
        results = PatternSearcher(scanner).search("PNG|TODO")

        assert "photo.png" not in {r.file for r in results}

    def test_no_matches(self, scanner):
        assert PatternSearcher(scanner).search("does-not-occur") == []

    def test_empty_line_is_searchable(self, scanner):
        results = PatternSearcher(scanner).search("^$", extensions=[".go"])

        assert [r.line for r in results] == [2]
        assert results[0].content == ""


class TestExtensionFilter:
    @pytest.mark.parametrize("extensions", [[".go"], ["go"], [".GO"], ["  go "]])
    def test_extension_spellings(self, scanner, extensions):
        results = PatternSearcher(scanner).search("TODO", extensions=extensions)

        assert [r.file for r in results] == ["main.go"]

    def test_multiple_extensions(self, scanner):
        results = PatternSearcher(scanner).search("TODO", extensions=[".go", ".py"])

        assert [r.file for r in results] == ["lib/util.py", "main.go"]

    @pytest.mark.parametrize("extensions", [None, [], [""]])
    def test_empty_filter_allows_everything(self, scanner, extensions):
        results = PatternSearcher(scanner).search("TODO", extensions=extensions)

        assert len(results) == 3

    def test_normalize_extensions(self):
        assert normalize_extensions(["Go", ".PY", "", " md "]) == frozenset({".go", ".py", ".md"})
        assert normalize_extensions(None) == frozenset()


class TestCacheAndFallback:
    def test_unscanned_repository_is_searched_directly(self, scanner):
        results = PatternSearcher(scanner).search("TODO")

        assert len(results) == 3
        assert not scanner.cache.is_populated

    def test_cache_is_used_once_populated(self, scanner):
        scanner.scan_all()
        opened = len(scanner.file_system.opened)

        results = PatternSearcher(scanner).search("TODO")

        assert len(results) == 3
        assert len(scanner.file_system.opened) == opened

    def test_cached_and_uncached_results_agree(self):
        direct = PatternSearcher(build_scanner(REPO_FILES)).search("TODO|main")

        scanned = build_scanner(REPO_FILES)
        scanned.scan_all()
        cached = PatternSearcher(scanned).search("TODO|main")

        assert direct == cached

    def test_ignored_files_are_not_searched(self):
        files = dict(REPO_FILES)
        files[".gitignore"] = "lib/\n*.md\n"
        scanner = build_scanner(files)

        fallback = PatternSearcher(scanner).search("TODO")
        scanner.scan_all()
        cached = PatternSearcher(scanner).search("TODO")

        assert [r.file for r in fallback] == ["main.go"]
        assert cached == fallback

    def test_vcs_directory_is_not_searched(self):
        scanner = build_scanner({".git/config": "TODO\n", "a.txt": "TODO\n"})

        assert [r.file for r in PatternSearcher(scanner).search("TODO")] == ["a.txt"]


class TestLineHandling:
    def test_crlf_line_endings(self):
        scanner = build_scanner({"win.txt": "first\r\nsecond end\r\n"})

        results = PatternSearcher(scanner).search("end$")

        assert [(r.line, r.content) for r in results] == [(2, "second end")]

    def test_file_without_trailing_newline(self):
        scanner = build_scanner({"a.txt": "one\ntwo"})

        results = PatternSearcher(scanner).search("two")

        assert [(r.line, r.content) for r in results] == [(2, "two")]

    def test_streaming_and_buffered_reads_agree(self):
        content = "".join(f"row {i}{' needle' if i % 7 == 0 else ''}\n" for i in range(500))
        buffered = build_scanner({"data.txt": content})
        streamed = build_scanner({"data.txt": content}, streaming_threshold=0)

        expected = PatternSearcher(buffered).search("needle")
        actual = PatternSearcher(streamed).search("needle")

        assert actual == expected
        assert [r.line for r in actual] == [i + 1 for i in range(0, 500, 7)]

    def test_large_uncached_file_is_streamed_from_disk(self):
        scanner = build_scanner({"big.txt": "x\n" * 10 + "needle\n"}, cache_threshold=4, streaming_threshold=4)
        scanner.scan_all()

        results = PatternSearcher(scanner).search("needle")

        assert [(r.file, r.line) for r in results] == [("big.txt", 11)]


class TestErrors:
    def test_unreadable_file_is_skipped_with_warning(self, caplog):
        fs = build_fs({"a.txt": "needle\n", "b.txt": "needle\n"})
        scanner = FileScanner(ROOT, file_system=fs, cache_threshold=0)
        scanner.scan_all()
        fs.make_unreadable("a.txt")

        with caplog.at_level(logging.WARNING):
            results = PatternSearcher(scanner).search("needle")

        assert [r.file for r in results] == ["b.txt"]
        assert any("a.txt" in record.message for record in caplog.records)

    def test_walk_error_propagates_without_cache(self):
        fs = build_fs({"sub/a.txt": "needle\n"})
        fs.fail_listing("sub")
        scanner = FileScanner(ROOT, file_system=fs)

        with pytest.raises(ScanError):
            PatternSearcher(scanner).search("needle")
