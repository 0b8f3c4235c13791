"""Streaming, traversal-safe extraction of tar archives.

Entries are read one at a time from a sequential tar stream (compression is
auto-detected) and materialised immediately; nothing is buffered. Hard
links are emulated by copying the already-extracted target, since the
extraction root may sit on a filesystem that cannot share inodes with it.
"""

from __future__ import annotations

import errno
import logging
import lzma
import shutil
import stat
import tarfile
import zlib
from pathlib import Path

from inferkit.core.security import real_root, resolve_within
from inferkit.domain.errors import ExtractionFailure
from inferkit.domain.models import EntryKind, ExtractionEntry

logger = logging.getLogger(__name__)

ANY_EXEC = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH

_ARCHIVE_ERRORS = (tarfile.TarError, lzma.LZMAError, zlib.error, EOFError, OSError)


def extract_archive(archive_path: Path, dest: Path) -> list[str]:
    """
    Extract ``archive_path`` into ``dest``.

    Returns the names of entries that could not be placed (degraded
    entries). Raises ``PathTraversalDetected`` on the first escaping entry
    and ``ExtractionFailure`` on archive or disk errors.
    """
    root = real_root(dest)
    degraded: list[str] = []
    logger.info("Extracting %s to %s", archive_path, root, extra={"path": str(archive_path)})

    try:
        with tarfile.open(archive_path, mode="r|*") as tar:
            for member in tar:
                entry = _to_entry(member, root)
                if entry is None:
                    logger.warning("Skipping unsupported archive entry: %s", member.name)
                    continue
                if not _apply(entry, tar, member, root):
                    degraded.append(entry.name)
    except _ARCHIVE_ERRORS as e:
        logger.error("Error untarring Infer: %s", e, exc_info=True)
        raise ExtractionFailure("Error occurred when untarring Infer tarball") from e

    return degraded


def _to_entry(member: tarfile.TarInfo, root: Path) -> ExtractionEntry | None:
    kind = EntryKind.of(member)
    if kind is None:
        return None
    # containment is checked before anything touches the filesystem
    target = resolve_within(root, member.name)
    return ExtractionEntry(
        name=member.name,
        kind=kind,
        target_path=target,
        link_target=member.linkname or None,
        mode=member.mode,
        size=member.size,
    )


def _apply(entry: ExtractionEntry, tar: tarfile.TarFile, member: tarfile.TarInfo, root: Path) -> bool:
    """Materialise one entry. Returns False when the entry was degraded."""
    if entry.kind is EntryKind.DIRECTORY:
        entry.target_path.mkdir(parents=True, exist_ok=True)
        return True

    entry.target_path.parent.mkdir(parents=True, exist_ok=True)

    if entry.kind is EntryKind.REGULAR_FILE:
        _write_file(entry, tar, member)
        return True
    if entry.kind is EntryKind.SYMLINK:
        return _place_symlink(entry)
    if entry.kind is EntryKind.HARDLINK:
        _copy_hardlink(entry, root)
        return True
    raise ExtractionFailure(f"Unhandled archive entry kind {entry.kind} for {entry.name}")


def _write_file(entry: ExtractionEntry, tar: tarfile.TarFile, member: tarfile.TarInfo) -> None:
    target = entry.target_path
    # never write through a link left at the leaf
    if target.is_symlink():
        target.unlink()

    src = tar.extractfile(member)
    if src is None:
        raise ExtractionFailure(f"Cannot read archive entry: {entry.name}")
    with src, target.open("wb") as f:
        shutil.copyfileobj(src, f)

    if entry.mode & ANY_EXEC:
        current = stat.S_IMODE(target.stat().st_mode)
        target.chmod(current | ANY_EXEC)


def _place_symlink(entry: ExtractionEntry) -> bool:
    target = entry.target_path
    try:
        _remove_existing(target)
    except OSError as e:
        logger.warning(
            "Symlink removal failed on: %s (%s)", target, e, extra={"path": str(target)}
        )
        return False
    target.symlink_to(entry.link_target or "")
    return True


def _remove_existing(target: Path) -> None:
    if target.is_symlink() or target.is_file():
        target.unlink()
    elif target.is_dir():
        # only empty directories; a populated one raises OSError
        target.rmdir()
    elif target.exists():
        target.unlink()


def _copy_hardlink(entry: ExtractionEntry, root: Path) -> None:
    link_name = entry.link_target or ""
    source = resolve_within(root, link_name)
    if not (source.exists() or source.is_symlink()):
        logger.warning("Hard link target does not exist yet: %s", link_name, extra={"path": str(source)})
        return
    if entry.target_path.is_symlink():
        entry.target_path.unlink()
    elif entry.target_path.is_dir():
        raise IsADirectoryError(errno.EISDIR, "Hard link entry collides with a directory", str(entry.target_path))
    shutil.copy2(source, entry.target_path, follow_symlinks=False)
