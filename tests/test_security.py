import os

import pytest

from inferkit.core.security import real_root, resolve_within
from inferkit.domain.errors import PathTraversalDetected


def test_plain_entry_maps_under_root(tmp_path):
    root = real_root(tmp_path)
    assert resolve_within(root, "a/b/c.txt") == root / "a" / "b" / "c.txt"


def test_dot_segments_collapse_inside_root(tmp_path):
    root = real_root(tmp_path)
    assert resolve_within(root, "a/../b/./c.txt") == root / "b" / "c.txt"


def test_root_itself_is_allowed(tmp_path):
    root = real_root(tmp_path)
    assert resolve_within(root, "./") == root


@pytest.mark.parametrize("name", ["../evil.txt", "a/../../evil.txt", "/etc/passwd"])
def test_escaping_names_are_rejected(tmp_path, name):
    root = real_root(tmp_path / "dest")
    with pytest.raises(PathTraversalDetected) as exc:
        resolve_within(root, name)
    assert exc.value.entry_name == name


def test_sibling_with_common_prefix_is_rejected(tmp_path):
    root = real_root(tmp_path / "dest")
    with pytest.raises(PathTraversalDetected):
        resolve_within(root, "../dest-other/x")


def test_symlinked_parent_pointing_outside_is_rejected(tmp_path):
    root_dir = tmp_path / "dest"
    root_dir.mkdir()
    outside = tmp_path / "outside"
    outside.mkdir()
    os.symlink(outside, root_dir / "escape")

    with pytest.raises(PathTraversalDetected):
        resolve_within(real_root(root_dir), "escape/pwned.txt")


def test_leaf_symlink_is_not_followed(tmp_path):
    root_dir = tmp_path / "dest"
    root_dir.mkdir()
    os.symlink("/usr/bin/env", root_dir / "tool")

    root = real_root(root_dir)
    assert resolve_within(root, "tool") == root / "tool"
