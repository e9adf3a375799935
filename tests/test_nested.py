"""
Tests for jails wrapping other jails.

This module tests:
- Independent resolution at every layer
- Real location of files created through the outermost layer
- Traversal being caught by the outermost layer
- Names never revealing any layer's base
"""

import posixpath

import pytest

from jailfs.exceptions import PathOutsideBaseError
from jailfs.jail import JailedFileSystem
from jailfs.memfs import MemoryFileSystem
from jailfs.paths import PathPolicy

DIR_SPECS = [
    ("/", "/", "/"),
    ("/", "/path2", "/"),
    ("/path1/dir", "/path2/dir/", "/path3/dir"),
    ("C:/path1", "path2/dir", "/path3/dir/"),
]


def lexical_join(*parts: str) -> str:
    """Concatenate path parts, even when a later part is absolute."""
    return posixpath.normpath("/".join(parts))


def build_layers(dir1: str, dir2: str, dir3: str):
    memfs = MemoryFileSystem()
    policy = PathPolicy.posix()
    level1 = JailedFileSystem(memfs, dir1, path_policy=policy)
    level2 = JailedFileSystem(level1, dir2, path_policy=policy)
    level3 = JailedFileSystem(level2, dir3, path_policy=policy)
    return memfs, level1, level2, level3


# =============================================================================
# Composition Tests
# =============================================================================

class TestNestedLayers:
    """Tests for three nested jails over one memory filesystem."""

    @pytest.mark.parametrize("dir1,dir2,dir3", DIR_SPECS)
    def test_each_layer_sees_the_next(self, dir1, dir2, dir3):
        """Test that an entry made at one layer is visible below it."""
        _, level1, level2, level3 = build_layers(dir1, dir2, dir3)

        for layer in (level3, level2, level1):
            layer.mkdir_all("f.txt", 0o755)
            layer.stat("f.txt")

            if layer is level3:
                level2.stat(lexical_join(dir3, "f.txt"))
            elif layer is level2:
                level1.stat(lexical_join(dir2, dir3, "f.txt"))

    @pytest.mark.parametrize("dir1,dir2,dir3", DIR_SPECS)
    def test_real_location_concatenates_bases(self, dir1, dir2, dir3):
        """Test that the real file lives at the join of all bases."""
        memfs, level1, level2, level3 = build_layers(dir1, dir2, dir3)
        level3.mkdir_all("/", 0o755)

        level3.create("f.txt").close()

        memfs.stat(lexical_join(dir1, dir2, dir3, "f.txt"))
        level1.stat(lexical_join(dir2, dir3, "f.txt"))
        level2.stat(lexical_join(dir3, "f.txt"))

    def test_real_path_per_layer(self):
        _, level1, level2, level3 = build_layers("/b1", "/b2", "/b3")

        assert level3.real_path("/f") == "/b3/f"
        assert level2.real_path(level3.real_path("/f")) == "/b2/b3/f"
        assert level1.real_path(level2.real_path(level3.real_path("/f"))) == "/b1/b2/b3/f"

    def test_traversal_caught_at_outer_layer(self):
        _, _, _, level3 = build_layers("/b1", "/b2", "/b3")

        with pytest.raises(PathOutsideBaseError) as exc_info:
            level3.create("../escape")

        assert exc_info.value.filename == "../escape"

    def test_traversal_caught_at_inner_layer(self):
        """Test that a middle layer's own check still applies to its callers."""
        _, _, level2, _ = build_layers("/b1", "/b2", "/b3")

        with pytest.raises(PathOutsideBaseError):
            level2.stat("a/../../b1")


# =============================================================================
# Name Hiding Tests
# =============================================================================

class TestNestedNames:
    """Tests that no layer's base leaks through nested layers."""

    def test_handle_names(self):
        memfs, _, _, level3 = build_layers("/base/path", "/base/path", "/base/path")
        level3.mkdir_all("/tmp", 0o755)

        handle = level3.create("/tmp/file.txt")

        assert handle.name == "/tmp/file.txt"
        assert "/base/path" not in handle.name
        assert memfs.stat("/base/path/base/path/base/path/tmp/file.txt")

    def test_entry_paths(self):
        _, _, _, level3 = build_layers("/base/path", "/inner", "/innermost")
        level3.mkdir_all("/docs/a", 0o755)

        entries = level3.read_dir("/docs")

        assert [entry.path for entry in entries] == ["/docs/a"]
        for entry in entries:
            assert "/base/path" not in entry.path
            assert "/inner" not in entry.path

    def test_errors(self):
        _, _, _, level3 = build_layers("/base/path", "/inner", "/innermost")

        with pytest.raises(FileNotFoundError) as exc_info:
            level3.open("/missing")

        assert exc_info.value.filename == "/missing"
        assert "/base/path" not in str(exc_info.value)
