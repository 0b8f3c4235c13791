"""Error taxonomy for installing and running Infer.

``InferError`` subclasses are hard errors: the step did not complete and
the caller must not carry on with its result. ``InferFailure`` subclasses
are expected outcomes (nothing to analyze, findings present, a degraded
install) that the caller may report differently or choose to tolerate.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


def _render(command: Sequence[str]) -> str:
    return " ".join(command)


class InferKitError(Exception):
    """Base exception for everything raised by inferkit."""


class InferError(InferKitError):
    """A defect or environment problem; the operation did not complete."""


class InferFailure(InferKitError):
    """An anticipated, non-defect outcome the caller decides how to treat."""


# ---------- Installer ----------


class DownloadFailure(InferError):
    """Raised when the archive cannot be fetched (network error or non-2xx status)."""

    def __init__(self, message: str, uri: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.uri = uri
        self.status_code = status_code


class PathTraversalDetected(InferError):
    """Raised when an archive entry resolves outside the extraction root."""

    def __init__(self, entry_name: str, root: Path) -> None:
        super().__init__(f"Blocked suspicious entry: {entry_name} (escapes {root})")
        self.entry_name = entry_name
        self.root = root


class ExtractionFailure(InferError):
    """Raised on unreadable or corrupt archives and disk errors while extracting."""


class MissingExpectedArtifact(InferError):
    """Raised when extraction finished but the executable is not where it should be."""

    def __init__(self, expected: Path) -> None:
        super().__init__(f"Expected executable not found after extraction: {expected}")
        self.expected = expected


class CleanupFailure(InferError):
    """
    Raised when the temporary download directory cannot be removed.

    ``primary`` holds the error that was already propagating when cleanup
    ran, if any.
    """

    def __init__(self, path: Path, primary: BaseException | None = None) -> None:
        super().__init__(f"Failed to cleanup tmp dir used to download Infer: {path}")
        self.path = path
        self.primary = primary


class DegradedExtraction(InferFailure):
    """
    Raised after an otherwise complete extraction in which some entries could
    not be placed. ``executable`` is usable but the install may be unstable.
    """

    def __init__(self, executable: Path, degraded_entries: Sequence[str]) -> None:
        super().__init__(
            "Failure occurred when untarring Infer tarball; "
            f"{len(degraded_entries)} entries could not be placed: {', '.join(degraded_entries)}"
        )
        self.executable = executable
        self.degraded_entries = list(degraded_entries)


# ---------- Runner ----------


class ClasspathResolutionFailure(InferError):
    """Raised when the compile classpath was not resolved upstream."""


class SourceDiscoveryError(InferError):
    def __init__(self, root: Path) -> None:
        super().__init__(f"Failed to find Java sources in: {root}")
        self.root = root


class NoInputFiles(InferFailure):
    def __init__(self, roots: Sequence[Path]) -> None:
        super().__init__("No Java sources found; skipping Infer analysis.")
        self.roots = list(roots)


class ProcessStartFailure(InferError):
    def __init__(self, command: Sequence[str]) -> None:
        super().__init__(f"Could not start: {_render(command)}")
        self.command = list(command)


class ProcessTimeout(InferError):
    def __init__(self, command: Sequence[str], timeout_sec: float) -> None:
        super().__init__(f"Timeout after {timeout_sec:g}s running: {_render(command)}")
        self.command = list(command)
        self.timeout_sec = timeout_sec


class ProcessInterrupted(InferError):
    def __init__(self, command: Sequence[str]) -> None:
        super().__init__(f"Interrupted running: {_render(command)}")
        self.command = list(command)


class UnexpectedExitCode(InferError):
    def __init__(self, command: Sequence[str], exit_code: int) -> None:
        super().__init__(
            f"Infer analysis errored with unexpected exit code {exit_code}: {_render(command)}"
        )
        self.command = list(command)
        self.exit_code = exit_code


class FindingsPresentFailure(InferFailure):
    def __init__(self, results_dir: Path) -> None:
        super().__init__(f"Infer analysis completed with issues. See: {results_dir}")
        self.results_dir = results_dir
