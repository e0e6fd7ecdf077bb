"""Tests for watch exclusion rules."""

import os

import pytest

from reloader.core.excludes import (
    DEFAULT_IGNORE_DIRS,
    is_default_ignored,
    is_ignored_path,
    normalize_prefixes,
)


class TestDefaultIgnores:
    """Default ignore set tests."""

    @pytest.mark.parametrize("name", [".git", ".hg", ".svn", "node_modules"])
    def test_given_vcs_or_dependency_dir_when_checked_then_ignored(self, name: str) -> None:
        assert name in DEFAULT_IGNORE_DIRS
        assert is_default_ignored(name)

    def test_given_regular_dir_when_checked_then_not_ignored(self) -> None:
        assert not is_default_ignored("cmd")


class TestIgnorePrefixes:
    """User ignore prefix tests."""

    def test_given_equivalent_prefixes_when_normalized_then_equal(self) -> None:
        """./tmp/, tmp and tmp/ all normalize to the same prefix."""
        expected = os.path.join(os.getcwd(), "tmp")

        assert normalize_prefixes(["./tmp/", "tmp", "tmp/", ""]) == (expected,) * 3

    def test_given_path_under_prefix_when_checked_then_ignored(self) -> None:
        prefixes = normalize_prefixes(["./backend/tmp"])

        assert is_ignored_path(os.path.join("backend", "tmp"), prefixes)
        assert is_ignored_path(os.path.join("backend", "tmp", "cache"), prefixes)
        assert not is_ignored_path(os.path.join("backend", "api"), prefixes)

    def test_given_relative_prefix_when_absolute_path_checked_then_ignored(
        self, tmp_path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Watcher events carry absolute paths; relative --ignore values must still match."""
        monkeypatch.chdir(tmp_path)
        prefixes = normalize_prefixes(["./backend/tmp/"])

        assert is_ignored_path(str(tmp_path / "backend" / "tmp" / "new"), prefixes)
        assert not is_ignored_path(str(tmp_path / "backend" / "api"), prefixes)

    def test_given_nested_vcs_dir_when_checked_then_ignored_by_base_name(self) -> None:
        assert is_ignored_path(os.path.join("vendor", "lib", ".git"), ())
        assert is_ignored_path(os.path.join("web", "node_modules") + os.sep, ())
