"""Tests for rule_engine/resolver.py: nearest-config grouping."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from conftest import CARGO_CONFIG, _write_config

from rufio.errors import ConfigSchemaError, UnknownPresetError
from rufio.rule_engine import config as config_module
from rufio.rule_engine.config import CONFIG_FILENAME
from rufio.rule_engine.presets import PresetChain
from rufio.rule_engine.resolver import ConfigResolver, group_by_config

PNPM_CONFIG = "presets: [pnpm]\n"


class TestNearestConfig:
    def test_finds_config_at_repo_root(self, tmp_path: Path):
        _write_config(tmp_path, CARGO_CONFIG)
        sub = tmp_path / "src" / "lib"
        sub.mkdir(parents=True)
        found = ConfigResolver(tmp_path, PresetChain()).nearest_config(sub)
        assert found == tmp_path / CONFIG_FILENAME

    def test_nearest_wins_over_root(self, tmp_path: Path):
        _write_config(tmp_path, CARGO_CONFIG)
        pkg = tmp_path / "packages" / "foo"
        _write_config(pkg, PNPM_CONFIG)
        found = ConfigResolver(tmp_path, PresetChain()).nearest_config(pkg / "src")
        assert found == pkg / CONFIG_FILENAME

    def test_none_when_no_config(self, tmp_path: Path):
        (tmp_path / "src").mkdir()
        assert ConfigResolver(tmp_path, PresetChain()).nearest_config(tmp_path / "src") is None

    def test_does_not_leave_repo_root(self, tmp_path: Path):
        _write_config(tmp_path, CARGO_CONFIG)
        repo = tmp_path / "repo"
        (repo / "src").mkdir(parents=True)
        assert ConfigResolver(repo, PresetChain()).nearest_config(repo / "src") is None

    def test_memoizes_directory_lookups(self, tmp_path: Path):
        _write_config(tmp_path, CARGO_CONFIG)
        resolver = ConfigResolver(tmp_path, PresetChain())
        resolver.nearest_config(tmp_path / "a" / "b")
        with patch.object(Path, "is_file", side_effect=AssertionError("not memoized")):
            assert resolver.nearest_config(tmp_path / "a" / "b") == tmp_path / CONFIG_FILENAME
            assert resolver.nearest_config(tmp_path / "a") == tmp_path / CONFIG_FILENAME


class TestGroupByConfig:
    def test_file_groups_under_nearest_config(self, tmp_path: Path):
        _write_config(tmp_path / "pkg", CARGO_CONFIG)
        groups = group_by_config([tmp_path / "pkg" / "sub" / "x.rs"], tmp_path, PresetChain())
        assert list(groups) == [tmp_path / "pkg"]
        group = groups[tmp_path / "pkg"]
        assert group.files == [tmp_path / "pkg" / "sub" / "x.rs"]
        assert [c.name for c in group.checks] == ["cargo-checks", "cargo-version-bump"]

    def test_file_without_config_has_no_checks(self, tmp_path: Path):
        _write_config(tmp_path / "pkg", CARGO_CONFIG)
        groups = group_by_config([tmp_path / "other" / "y.rs"], tmp_path, PresetChain())
        assert list(groups) == [None]
        assert groups[None].checks == []
        assert groups[None].files == [tmp_path / "other" / "y.rs"]

    def test_mixed_files(self, tmp_path: Path):
        _write_config(tmp_path / "pkg", CARGO_CONFIG)
        _write_config(tmp_path / "web", PNPM_CONFIG)
        files = [
            tmp_path / "pkg" / "a.rs",
            tmp_path / "web" / "src" / "b.ts",
            tmp_path / "pkg" / "src" / "c.rs",
            tmp_path / "README.md",
        ]
        groups = group_by_config(files, tmp_path, PresetChain())
        assert set(groups) == {tmp_path / "pkg", tmp_path / "web", None}
        assert groups[tmp_path / "pkg"].files == [files[0], files[2]]
        assert groups[tmp_path / "web"].files == [files[1]]
        assert groups[None].files == [files[3]]

    def test_relative_paths_resolved_against_root(self, tmp_path: Path):
        _write_config(tmp_path, CARGO_CONFIG)
        groups = group_by_config(["src/main.rs"], tmp_path, PresetChain())
        assert groups[tmp_path].files == [tmp_path / "src" / "main.rs"]

    def test_file_outside_repo_has_no_config(self, tmp_path: Path):
        repo = tmp_path / "repo"
        _write_config(repo, CARGO_CONFIG)
        groups = group_by_config([tmp_path / "elsewhere.rs"], repo, PresetChain())
        assert list(groups) == [None]

    def test_duplicate_files_listed_once(self, tmp_path: Path):
        _write_config(tmp_path, CARGO_CONFIG)
        groups = group_by_config(["a.rs", tmp_path / "a.rs"], tmp_path, PresetChain())
        assert groups[tmp_path].files == [tmp_path / "a.rs"]

    def test_deterministic(self, tmp_path: Path):
        _write_config(tmp_path / "pkg", CARGO_CONFIG)
        files = [tmp_path / "pkg" / "a.rs", tmp_path / "b.rs"]
        first = group_by_config(files, tmp_path, PresetChain())
        second = group_by_config(files, tmp_path, PresetChain())
        assert first == second

    def test_config_loaded_once_per_file(self, tmp_path: Path):
        _write_config(tmp_path, CARGO_CONFIG)
        resolver = ConfigResolver(tmp_path, PresetChain())
        with patch(
            "rufio.rule_engine.resolver.load_document",
            wraps=config_module.load_document,
        ) as loader:
            resolver.group([tmp_path / "a.rs", tmp_path / "src" / "b.rs", tmp_path / "c" / "d.rs"])
        assert loader.call_count == 1

    def test_broken_config_aborts(self, tmp_path: Path):
        _write_config(tmp_path, "checks: oops\n")
        with pytest.raises(ConfigSchemaError):
            group_by_config([tmp_path / "a.rs"], tmp_path, PresetChain())

    def test_unknown_preset_aborts(self, tmp_path: Path):
        _write_config(tmp_path, "presets: [nope]\n")
        with pytest.raises(UnknownPresetError):
            group_by_config([tmp_path / "a.rs"], tmp_path, PresetChain(user_dir=tmp_path / "p"))


class TestSymlinks:
    def test_file_through_symlink_groups_under_real_root(self, tmp_path: Path):
        real = tmp_path / "real"
        _write_config(real, CARGO_CONFIG)
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)
        groups = group_by_config([link / "src" / "main.rs"], real, PresetChain())
        assert list(groups) == [real]
        assert groups[real].files == [real / "src" / "main.rs"]

    def test_symlinked_repo_root(self, tmp_path: Path):
        real = tmp_path / "real"
        _write_config(real, CARGO_CONFIG)
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)
        groups = group_by_config([real / "a.rs"], link, PresetChain())
        assert list(groups) == [real]
