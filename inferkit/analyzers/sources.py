from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from inferkit.domain.errors import SourceDiscoveryError

logger = logging.getLogger(__name__)


def discover_sources(roots: Iterable[Path], suffix: str) -> list[Path]:
    """
    Collect every file ending in ``suffix`` below the given roots.

    Roots that are not existing directories are skipped. The result holds
    absolute paths, sorted per root, with roots kept in the order given.
    """
    found: list[Path] = []
    for root in roots:
        if not root.is_dir():
            logger.debug("Skipping missing source root: %s", root, extra={"path": str(root)})
            continue
        found.extend(_walk(root.resolve(), suffix))
    return found


def _walk(root: Path, suffix: str) -> list[Path]:
    def _raise(err: OSError) -> None:
        raise err

    files: list[Path] = []
    try:
        for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise):
            for name in filenames:
                if name.endswith(suffix):
                    files.append(Path(dirpath) / name)
    except OSError as e:
        logger.error(
            "Error occurred when trying to find Java sources in: %s", root, extra={"path": str(root)}
        )
        raise SourceDiscoveryError(root) from e
    files.sort()
    return files


def write_argfile(path: Path, files: Iterable[Path]) -> Path:
    """Write one path per line, replacing any previous content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        for p in files:
            f.write(f"{p}\n")
    return path
