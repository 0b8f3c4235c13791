from __future__ import annotations

import tarfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class EntryKind(str, Enum):
    DIRECTORY = "directory"
    REGULAR_FILE = "file"
    SYMLINK = "symlink"
    HARDLINK = "hardlink"

    @classmethod
    def of(cls, member: tarfile.TarInfo) -> EntryKind | None:
        """Kind of a tar member, or ``None`` for FIFOs and device nodes."""
        if member.isdir():
            return cls.DIRECTORY
        if member.issym():
            return cls.SYMLINK
        if member.islnk():
            return cls.HARDLINK
        if member.isreg():
            return cls.REGULAR_FILE
        return None


@dataclass(frozen=True)
class ExtractionEntry:
    name: str
    kind: EntryKind
    target_path: Path
    link_target: str | None
    mode: int
    size: int


class Classification(str, Enum):
    SUCCESS = "success"
    FINDINGS_PRESENT = "findings_present"
    ERROR = "error"


@dataclass(frozen=True)
class ProcessInvocation:
    command: tuple[str, ...]
    working_dir: Path
    timeout_sec: float

    @property
    def command_line(self) -> str:
        return " ".join(self.command)


@dataclass(frozen=True)
class ProcessOutcome:
    exit_code: int
    classification: Classification
