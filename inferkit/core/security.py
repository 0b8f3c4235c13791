from __future__ import annotations

import os
from pathlib import Path

from inferkit.domain.errors import PathTraversalDetected


def real_root(dest: Path) -> Path:
    return Path(os.path.realpath(dest))


def is_within(path: Path, root: Path) -> bool:
    return path == root or root in path.parents


def resolve_within(root: Path, name: str) -> Path:
    """
    Map an archive entry name onto ``root`` and refuse anything that escapes it.

    ``..`` segments are collapsed and symlinks already present in the parent
    chain are followed; the leaf itself is not followed so a link entry can
    be replaced in place. ``root`` must already be a real path.
    """
    candidate = Path(os.path.normpath(root / name))
    if candidate == root:
        return root

    parent = Path(os.path.realpath(candidate.parent))
    target = parent / candidate.name
    if not is_within(target, root):
        raise PathTraversalDetected(name, root)
    return target
