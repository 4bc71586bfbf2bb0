"""Tests for clisync.parser.loader -- file discovery and tree-sitter parsing."""

from __future__ import annotations

import warnings
from pathlib import Path

import pytest

from clisync.exceptions import SourceLocationError, SourceParseError
from clisync.parser.loader import discover_sources, load_sources, parse_source


class TestDiscoverSources:
    def test_excludes_tests_mocks_and_dotfiles(self, sdk_dir: Path) -> None:
        names = [p.name for p in discover_sources(sdk_dir)]
        assert names == ["apps.go", "events.go"]

    def test_ignores_subdirectories(self, sdk_dir: Path) -> None:
        nested = sdk_dir / "internal"
        nested.mkdir()
        (nested / "nested.go").write_text("package internal\n")
        assert all(p.parent == sdk_dir for p in discover_sources(sdk_dir))

    def test_custom_patterns_replace_defaults(self, sdk_dir: Path) -> None:
        names = [p.name for p in discover_sources(sdk_dir, ["events.go"])]
        assert "events.go" not in names
        assert "apps_test.go" in names

    def test_missing_location(self, tmp_path: Path) -> None:
        with pytest.raises(SourceLocationError, match="not found"):
            discover_sources(tmp_path / "nope")

    def test_file_is_not_a_location(self, tmp_path: Path) -> None:
        path = tmp_path / "file.go"
        path.write_text("package x\n")
        with pytest.raises(SourceLocationError, match="not a directory"):
            discover_sources(path)

    def test_empty_directory(self, tmp_path: Path) -> None:
        assert discover_sources(tmp_path) == []

    def test_patterns_compile_without_deprecation_warnings(self, sdk_dir: Path) -> None:
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            assert len(discover_sources(sdk_dir)) == 2


class TestParseSource:
    def test_valid_source(self) -> None:
        root = parse_source(b"package x\n\ntype A struct{}\n")
        assert root.type == "source_file"

    def test_malformed_source_reports_file_and_line(self) -> None:
        with pytest.raises(SourceParseError, match=r"broken\.go:\d+"):
            parse_source(b"package x\n\ntype A interface {\n", "broken.go")

    def test_load_fails_on_any_malformed_file(self, sdk_dir: Path) -> None:
        (sdk_dir / "zz_broken.go").write_text("package scalingo\nfunc (\n")
        with pytest.raises(SourceParseError):
            load_sources(sdk_dir)
