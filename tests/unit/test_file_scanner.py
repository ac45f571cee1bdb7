"""
Unit tests for the unified FileScanner.

Covers the single traversal, exclusion rules, classification, content
caching, line counting, error semantics and the cached-or-scan-now
accessors.
"""

import logging
import os
import threading
from pathlib import Path

import pytest

from repohealth.core.config import ScanConfig
from repohealth.core.file_scanner import (
    FileScanner,
    IgnoreRuleSet,
    ScanCancelledError,
    ScanError,
)
from repohealth.infrastructure.fakes import InMemoryFileSystem
from tests.support.repo_builders import (
    PNG_HEADER,
    ROOT,
    GatedFileSystem,
    build_fs,
    build_scanner,
    numbered_lines,
)


class TestConcreteRepository:
    """main.go, notes.txt and photo.png in one repository."""

    @pytest.fixture
    def files(self):
        return {
            "main.go": numbered_lines(10, trailing_newline=False),
            "notes.txt": numbered_lines(5),
            "photo.png": PNG_HEADER,
        }

    def test_in_memory(self, files):
        scanner = build_scanner(files)

        cache = scanner.scan_all()

        assert set(cache) == {"main.go", "notes.txt", "photo.png"}
        assert cache["main.go"].line_count == 10
        assert cache["notes.txt"].line_count == 5
        assert cache["photo.png"].is_text is False
        assert cache["photo.png"].line_count == 0
        assert cache["photo.png"].content is None

    def test_local_disk(self, files, tmp_path):
        for name, content in files.items():
            data = content.encode("utf-8") if isinstance(content, str) else content
            (tmp_path / name).write_bytes(data)

        cache = FileScanner(tmp_path).scan_all()

        assert set(cache) == {"main.go", "notes.txt", "photo.png"}
        assert cache["main.go"].line_count == 10
        assert cache["notes.txt"].line_count == 5
        assert cache["photo.png"].is_text is False
        assert cache["main.go"].path == tmp_path / "main.go"

    def test_record_metadata(self, files):
        scanner = build_scanner(files)

        record = scanner.scan_all()["main.go"]

        assert record.relative_path == "main.go"
        assert record.path == Path(ROOT) / "main.go"
        assert record.extension == ".go"
        assert record.size == len(files["main.go"])
        assert record.is_text is True
        assert record.content == files["main.go"].encode("utf-8")


class TestContentCaching:
    def test_large_text_file_is_streamed_not_cached(self):
        content = ("x" * 60 + "\n") * 20_000
        scanner = build_scanner({"big.txt": content})

        record = scanner.scan_all()["big.txt"]

        assert record.size > 1024 * 1024
        assert record.content is None
        assert record.line_count == 20_000

    def test_threshold_is_inclusive(self):
        scanner = build_scanner({"a.txt": "abcd", "b.txt": "abcde"}, cache_threshold=4)

        cache = scanner.scan_all()

        assert cache["a.txt"].has_content
        assert not cache["b.txt"].has_content
        assert cache["b.txt"].line_count == 1

    def test_binary_file_never_cached(self):
        scanner = build_scanner({"blob.bin": b"\x00" * 10})

        record = scanner.scan_all()["blob.bin"]

        assert record.is_text is False
        assert record.content is None
        assert record.line_count == 0

    def test_cached_file_read_once(self):
        scanner = build_scanner({"a.txt": "one\ntwo\n"})

        scanner.scan_all()

        # One read for classification, one for caching; counting uses the cache
        assert scanner.file_system.open_count("a.txt") == 2

    def test_empty_file(self):
        record = build_scanner({"empty.txt": b""}).scan_all()["empty.txt"]

        assert record.is_text is True
        assert record.content == b""
        assert record.line_count == 0


class TestExclusion:
    def test_vcs_directory_is_skipped(self):
        scanner = build_scanner(
            {
                ".git/HEAD": "ref: refs/heads/main\n",
                ".git/objects/ab/cdef": b"\x00\x01",
                ".github/workflows/ci.yml": "on: push\n",
                ".gitignore": "",
                "main.go": "package main\n",
            }
        )

        keys = set(scanner.scan_all())

        assert keys == {".github/workflows/ci.yml", ".gitignore", "main.go"}

    def test_ignored_files_are_absent(self):
        scanner = build_scanner(
            {
                ".gitignore": "*.log\ndocs/draft.md\n",
                "app.log": "x\n",
                "logs/deep/trace.log": "x\n",
                "docs/draft.md": "x\n",
                "docs/final.md": "x\n",
            }
        )

        keys = set(scanner.scan_all())

        assert keys == {".gitignore", "docs/final.md"}

    def test_directory_pattern_prunes_subtree(self):
        scanner = build_scanner(
            {
                ".gitignore": "build/\nnode_modules/\n",
                "build/out/app.js": "x\n",
                "web/node_modules/pkg/index.js": "x\n",
                "web/app.js": "x\n",
            }
        )

        keys = set(scanner.scan_all())

        assert keys == {".gitignore", "web/app.js"}

    def test_rule_matching_a_directory_prunes_its_files(self):
        scanner = build_scanner(
            {
                ".gitignore": "vendor\nsrc/*\n",
                "vendor/lib/util.go": "x\n",
                "src/main.go": "x\n",
                "src/pkg/util.go": "x\n",
                "cmd/vendor.go": "x\n",
            }
        )

        keys = set(scanner.scan_all())

        assert keys == {".gitignore", "cmd/vendor.go"}

    def test_wildcard_rule_stays_in_its_directory(self):
        scanner = build_scanner(
            {
                ".gitignore": "docs/*.md\n",
                "docs/top.md": "# top\n",
                "docs/api/readme.md": "# api\n",
            }
        )

        keys = set(scanner.scan_all())

        assert keys == {".gitignore", "docs/api/readme.md"}

    def test_preloaded_rules_override_ignore_file(self):
        fs = build_fs({".gitignore": "*.go\n", "main.go": "x\n", "notes.txt": "x\n"})
        scanner = FileScanner(
            ROOT, file_system=fs, ignore_rules=IgnoreRuleSet.from_patterns(["*.txt"])
        )

        keys = set(scanner.scan_all())

        assert keys == {".gitignore", "main.go"}

    def test_custom_vcs_dir_name(self):
        scanner = build_scanner({".hg/store": "x\n", "a.txt": "x\n"}, vcs_dir_name=".hg")

        assert set(scanner.scan_all()) == {"a.txt"}


class TestErrors:
    def test_missing_root_fails(self):
        scanner = FileScanner("/elsewhere", file_system=InMemoryFileSystem())

        with pytest.raises(ScanError) as exc_info:
            scanner.scan_all()

        assert "not a directory" in str(exc_info.value)
        assert str(exc_info.value.path) == "/elsewhere"

    def test_missing_root_on_disk_fails(self, tmp_path):
        scanner = FileScanner(tmp_path / "missing")

        with pytest.raises(ScanError):
            scanner.scan_all()

    def test_root_that_is_a_file_fails(self, tmp_path):
        file_path = tmp_path / "file.txt"
        file_path.write_text("x", encoding="utf-8")

        with pytest.raises(ScanError):
            FileScanner(file_path).scan_all()

    def test_walk_error_aborts_and_leaves_cache_empty(self):
        fs = build_fs({"a.txt": "x\n", "sub/b.txt": "y\n"})
        scanner = FileScanner(ROOT, file_system=fs)
        scanner.scan_all()
        fs.fail_listing("sub")

        with pytest.raises(ScanError) as exc_info:
            scanner.scan_all()

        assert isinstance(exc_info.value.__cause__, PermissionError)
        assert scanner.get_cached_files() == {}
        assert not scanner.cache.is_populated

    def test_unreadable_file_does_not_abort(self, caplog):
        fs = build_fs({"a.txt": "x\n", "locked.txt": "secret\n", "z.txt": "y\n"})
        fs.make_unreadable("locked.txt")
        scanner = FileScanner(ROOT, file_system=fs)

        with caplog.at_level(logging.WARNING):
            cache = scanner.scan_all()

        assert set(cache) == {"a.txt", "locked.txt", "z.txt"}
        assert cache["locked.txt"].is_text is False
        assert cache["locked.txt"].line_count == 0
        assert cache["z.txt"].line_count == 1
        assert any("locked.txt" in record.message for record in caplog.records)


class TestCancellation:
    def test_set_event_cancels_scan(self):
        scanner = build_scanner({"a.txt": "x\n", "b.txt": "y\n"})
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(ScanCancelledError):
            scanner.scan_all(cancel)

        assert not scanner.cache.is_populated
        assert len(scanner.cache) == 0

    def test_unset_event_does_not_interfere(self):
        scanner = build_scanner({"a.txt": "x\n"})

        assert set(scanner.scan_all(threading.Event())) == {"a.txt"}


class TestRescan:
    def test_rescan_replaces_previous_results(self):
        fs = build_fs({"a.txt": "x\n", "b.txt": "y\n"})
        scanner = FileScanner(ROOT, file_system=fs)
        scanner.scan_all()

        fs.remove("a.txt")
        fs.add_file("c.txt", "z\n")
        cache = scanner.scan_all()

        assert set(cache) == {"b.txt", "c.txt"}

    def test_rescan_is_idempotent(self):
        scanner = build_scanner(
            {"a.go": numbered_lines(3), "b/c.py": "x", "d.bin": b"\x00\x01"}
        )

        first = scanner.scan_all()
        second = scanner.scan_all()

        assert first == second


class TestAccessors:
    @pytest.fixture
    def scanner(self):
        return build_scanner(
            {
                "main.go": "package main\n",
                "lib/util.GO": "package lib\n",
                "README.md": "# readme\n",
                "big.log": "z" * 5000,
            }
        )

    def test_get_files_scans_once(self, scanner):
        first = scanner.get_files()
        opened = len(scanner.file_system.opened)
        second = scanner.get_files()

        assert [f.relative_path for f in first] == ["README.md", "big.log", "lib/util.GO", "main.go"]
        assert first == second
        assert len(scanner.file_system.opened) == opened

    def test_get_files_after_scan_all_does_not_rescan(self, scanner):
        scanner.scan_all()
        opened = len(scanner.file_system.opened)

        scanner.get_files()

        assert len(scanner.file_system.opened) == opened

    def test_get_cached_files_before_scan_is_empty(self, scanner):
        assert scanner.get_cached_files() == {}
        assert scanner.get_cached_file("main.go") is None

    def test_get_cached_file(self, scanner):
        scanner.scan_all()

        record = scanner.get_cached_file("main.go")

        assert record is not None
        assert record.line_count == 1
        assert scanner.get_cached_file("missing.go") is None

    def test_get_files_by_extension_is_case_insensitive(self, scanner):
        files = scanner.get_files_by_extension([".GO"])

        assert [f.relative_path for f in files] == ["lib/util.GO", "main.go"]

    def test_get_large_files(self, scanner):
        files = scanner.get_large_files(4096)

        assert [f.relative_path for f in files] == ["big.log"]

    def test_filter_cached_files(self, scanner):
        scanner.scan_all()

        files = scanner.filter_cached_files(lambda f: f.extension == ".md")

        assert [f.relative_path for f in files] == ["README.md"]

    def test_public_records_hide_prefix(self, scanner):
        scanner.scan_all()

        assert all(f.first_bytes is None for f in scanner.get_cached_files().values())
        assert all(f.first_bytes is None for f in scanner.get_files())


class TestConfiguration:
    def test_from_config(self):
        fs = build_fs({"a.txt": "abcdef\n"})
        config = ScanConfig(cache_threshold_bytes=3, stream_chunk_size=2)

        scanner = FileScanner.from_config(ROOT, config, file_system=fs)
        record = scanner.scan_all()["a.txt"]

        assert scanner.classifier.cache_threshold == 3
        assert record.content is None
        assert record.line_count == 1


class TestConcurrentReaders:
    def test_reader_never_observes_partial_scan(self):
        fs = GatedFileSystem("m.txt")
        for name in ("a.txt", "m.txt", "z.txt"):
            fs.add_file(name, f"{name}\n")
        scanner = FileScanner(ROOT, file_system=fs)
        observed: list[dict] = []

        scan_thread = threading.Thread(target=scanner.scan_all)
        scan_thread.start()
        assert fs.entered.wait(timeout=5)

        reader = threading.Thread(target=lambda: observed.append(scanner.get_cached_files()))
        reader.start()
        reader.join(timeout=0.2)
        assert observed == []

        fs.release.set()
        scan_thread.join(timeout=5)
        reader.join(timeout=5)

        assert len(observed) == 1
        assert set(observed[0]) == {"a.txt", "m.txt", "z.txt"}


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
class TestLocalFileSystem:
    def test_symlinked_directory_is_not_followed(self, tmp_path):
        real = tmp_path / "real"
        real.mkdir()
        (real / "a.txt").write_text("x\n", encoding="utf-8")
        try:
            os.symlink(real, tmp_path / "link", target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks")

        keys = set(FileScanner(tmp_path).scan_all())

        assert "real/a.txt" in keys
        assert "link/a.txt" not in keys

    def test_nested_directories(self, tmp_path):
        (tmp_path / "a" / "b").mkdir(parents=True)
        (tmp_path / "a" / "b" / "c.py").write_text("print(1)\n", encoding="utf-8")
        (tmp_path / ".git").mkdir()
        (tmp_path / ".git" / "config").write_text("[core]\n", encoding="utf-8")

        cache = FileScanner(tmp_path).scan_all()

        assert set(cache) == {"a/b/c.py"}
        assert cache["a/b/c.py"].line_count == 1
