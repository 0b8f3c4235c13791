from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

import httpx

from inferkit.core.config import settings
from inferkit.domain.errors import (
    CleanupFailure,
    DegradedExtraction,
    DownloadFailure,
    MissingExpectedArtifact,
    PathTraversalDetected,
)
from inferkit.domain.schemas import InstallRequest
from inferkit.installer.archive import extract_archive

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIXES = (".tar.xz", ".txz", ".tar.gz", ".tgz", ".tar.bz2", ".tbz2", ".tar")


def download_filename(uri: str) -> str:
    name = PurePosixPath(urlparse(uri).path).name
    if not name:
        raise DownloadFailure(f"Cannot derive a file name from {uri}", uri=uri)
    return name


def archive_root_dir(filename: str) -> str:
    """``infer-linux-x86_64-v1.2.0.tar.xz`` -> ``infer-linux-x86_64-v1.2.0``"""
    for suffix in ARCHIVE_SUFFIXES:
        if filename.endswith(suffix):
            return filename[: -len(suffix)]
    return filename


class ArchiveInstaller:
    """
    Makes sure the Infer executable exists under an install root,
    downloading and extracting the release archive when it does not.
    """

    def __init__(self, http_client: httpx.Client, executable_name: str | None = None):
        self._http = http_client
        self._executable_name = executable_name or settings.INFER_EXECUTABLE

    def expected_executable(self, request: InstallRequest) -> Path:
        root_dir = archive_root_dir(download_filename(request.download_uri))
        return request.install_root.resolve() / root_dir / "bin" / self._executable_name

    def ensure_installed(self, request: InstallRequest) -> Path:
        exe = self.expected_executable(request)
        if exe.exists():
            logger.info("Infer already installed: %s", exe, extra={"path": str(exe)})
            return exe

        logger.info("Attempting to download Infer")
        tmp_dir = Path(tempfile.mkdtemp(prefix="infer-download-"))
        try:
            archive = self._download(request.download_uri, tmp_dir / download_filename(request.download_uri))
            degraded = self._extract(archive, request.install_root)
            if not exe.exists():
                logger.error("Infer executable missing after extraction: %s", exe, extra={"path": str(exe)})
                raise MissingExpectedArtifact(exe)
        except BaseException as e:
            self._cleanup(tmp_dir, primary=e)
            raise
        self._cleanup(tmp_dir)

        if degraded:
            logger.warning(
                "A failure occurred when untarring the Infer tarball. "
                "This could be due to corruption in extracting the files."
            )
            raise DegradedExtraction(exe, degraded)

        logger.info("Found infer executable: %s", exe, extra={"path": str(exe)})
        return exe

    def _download(self, uri: str, dest: Path) -> Path:
        logger.info("Downloading Infer from: %s", uri, extra={"uri": uri})
        try:
            with self._http.stream("GET", uri) as response:
                if not response.is_success:
                    msg = f"Failed to download Infer from {uri}. HTTP status {response.status_code}"
                    logger.error(msg, extra={"uri": uri})
                    raise DownloadFailure(msg, uri=uri, status_code=response.status_code)
                with dest.open("wb") as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)
        except (httpx.HTTPError, OSError) as e:
            logger.error("Unable to get Infer from URL: %s", uri, exc_info=True, extra={"uri": uri})
            raise DownloadFailure(f"Unable to get Infer from URL: {uri}", uri=uri) from e

        logger.info("Downloaded to temp: %s", dest, extra={"path": str(dest)})
        return dest

    def _extract(self, archive: Path, install_root: Path) -> list[str]:
        install_root.mkdir(parents=True, exist_ok=True)
        try:
            return extract_archive(archive, install_root)
        except PathTraversalDetected as e:
            logger.error("%s", e, extra={"path": str(archive)})
            raise

    def _cleanup(self, tmp_dir: Path, primary: BaseException | None = None) -> None:
        try:
            shutil.rmtree(tmp_dir)
        except OSError as e:
            logger.warning(
                "Failure occurred during cleanup of tmp dir used to download Infer. "
                "The tmp dir will need to be cleaned up manually: %s",
                tmp_dir,
                exc_info=True,
                extra={"path": str(tmp_dir)},
            )
            raise CleanupFailure(tmp_dir, primary=primary) from e
        logger.info("Cleaned up temp dir: %s", tmp_dir, extra={"path": str(tmp_dir)})
