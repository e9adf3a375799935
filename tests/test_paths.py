"""
Tests for the jailfs.paths module.

This module tests:
- Lexical confinement of virtual paths (posix and windows flavors)
- Joining and prefix checks against a base path
- Stripping the base path from real paths
"""

import os

import pytest

from jailfs.exceptions import JailConfigurationError, PathOutsideBaseError
from jailfs.paths import PathPolicy


@pytest.fixture
def posix():
    return PathPolicy.posix()


@pytest.fixture
def windows():
    return PathPolicy.windows()


# =============================================================================
# Confinement Tests
# =============================================================================

class TestConfinePosix:
    """Tests for PathPolicy.confine with posix conventions."""

    @pytest.mark.parametrize("path,expected", [
        ("/tmp/foo", "tmp/foo"),
        ("tmp/foo", "tmp/foo"),
        ("/a/./b/../c", "a/c"),
        ("//x//y", "x/y"),
        ("/../x", "x"),
        ("/../../x", "x"),
        ("./x", "x"),
        ("..foo/bar", "..foo/bar"),
        ("C:/path1", "C:/path1"),
    ])
    def test_confines_paths(self, posix, path, expected):
        """Test that paths are cleaned against the virtual root."""
        assert posix.confine(path) == expected

    @pytest.mark.parametrize("path", ["/", "", ".", "a/..", "/..", "//"])
    def test_root_variants_confine_to_empty(self, posix, path):
        """Test that every spelling of the root maps to the empty relative path."""
        assert posix.confine(path) == ""

    @pytest.mark.parametrize("path", [
        "..",
        "../x",
        "../../x",
        "a/../../x",
        "./../x",
        "../tmp/bar",
    ])
    def test_rejects_escaping_paths(self, posix, path):
        """Test that relative paths climbing above the root are rejected."""
        with pytest.raises(PathOutsideBaseError) as exc_info:
            posix.confine(path)

        assert exc_info.value.filename == path


class TestConfineWindows:
    """Tests for PathPolicy.confine with windows conventions."""

    @pytest.mark.parametrize("path,expected", [
        ("C:\\tmp\\foo", "tmp\\foo"),
        ("C:/tmp/foo", "tmp\\foo"),
        ("\\tmp\\foo", "tmp\\foo"),
        ("\\\\server\\share\\x", "x"),
        ("a/b", "a\\b"),
    ])
    def test_drive_and_share_are_dropped(self, windows, path, expected):
        """Test that drive-qualified paths are re-rooted lexically."""
        assert windows.confine(path) == expected

    @pytest.mark.parametrize("path", ["..\\x", "a\\..\\..\\x", "C:..\\x"])
    def test_rejects_escaping_paths(self, windows, path):
        """Test that traversal is rejected with windows separators."""
        with pytest.raises(PathOutsideBaseError):
            windows.confine(path)


# =============================================================================
# Join / Prefix Tests
# =============================================================================

class TestJoinAndPrefix:
    """Tests for join, is_within and to_virtual."""

    def test_join(self, posix):
        """Test joining a confined path onto a base."""
        assert posix.join("/base/path", "tmp/foo") == "/base/path/tmp/foo"

    def test_join_empty_returns_base(self, posix):
        """Test that the root maps to the base path exactly."""
        assert posix.join("/base/path", "") == "/base/path"

    def test_join_windows(self, windows):
        """Test joining with windows separators."""
        assert windows.join("C:\\base", "tmp\\foo") == "C:\\base\\tmp\\foo"

    @pytest.mark.parametrize("base,path,expected", [
        ("/base/path", "/base/path", True),
        ("/base/path", "/base/path/x", True),
        ("/base/path", "/base/pathology", False),
        ("/base/path", "/base", False),
        ("/", "/anything", True),
        (".", "./x", True),
    ])
    def test_is_within(self, posix, base, path, expected):
        """Test prefix checks respect component boundaries."""
        assert posix.is_within(base, path) is expected

    def test_is_within_drive_root(self, windows):
        """Test prefix checks against a drive root."""
        assert windows.is_within("C:\\", "C:\\x")

    @pytest.mark.parametrize("path,expected", [
        ("C:x", True),
        ("C:x\\y", True),
        ("C:\\x", False),
        ("D:x", False),
    ])
    def test_is_within_drive_relative_base(self, windows, path, expected):
        """Test that a bare drive base accepts paths joined onto it."""
        assert windows.is_within("C:", path) is expected

    def test_to_virtual_drive_relative_base(self, windows):
        """Test stripping a bare drive base."""
        assert windows.to_virtual("C:", "C:tmp\\x") == "\\tmp\\x"

    def test_to_virtual(self, posix):
        """Test stripping the base from a real path."""
        assert posix.to_virtual("/base/path", "/base/path/tmp/x") == "/tmp/x"
        assert posix.to_virtual("/base/path", "/base/path") == "/"

    def test_to_virtual_outside_base(self, posix):
        """Test that paths outside the base are not translated."""
        assert posix.to_virtual("/base/path", "/elsewhere/x") is None
        assert posix.to_virtual("/base/path", "relative") is None


# =============================================================================
# Construction Tests
# =============================================================================

class TestPolicyConstruction:
    """Tests for building policies."""

    def test_clean(self, posix):
        """Test lexical cleaning of base paths."""
        assert posix.clean("/base/path/") == "/base/path"
        assert posix.clean("") == "."

    def test_for_flavor(self):
        """Test the flavor names map to their path modules."""
        assert PathPolicy.for_flavor("posix").sep == "/"
        assert PathPolicy.for_flavor("windows").sep == "\\"
        assert PathPolicy.for_flavor("native").sep == os.sep

    def test_unknown_flavor(self):
        """Test that an unknown flavor is a configuration error."""
        with pytest.raises(JailConfigurationError) as exc_info:
            PathPolicy.for_flavor("amiga")

        assert exc_info.value.config_field == "path_flavor"
        assert exc_info.value.config_value == "amiga"
