from __future__ import annotations

import logging
from pathlib import Path

from inferkit.analyzers.base import StaticCodeAnalyzer
from inferkit.domain.errors import DegradedExtraction, InferError, InferFailure
from inferkit.domain.models import ProcessOutcome
from inferkit.domain.schemas import AnalysisRequest, InstallRequest
from inferkit.installer.installer import ArchiveInstaller

logger = logging.getLogger(__name__)


class AnalysisService:
    """
    Orchestrates: make sure Infer is installed → run it over the project.
    """

    def __init__(self, installer: ArchiveInstaller, analyzer: StaticCodeAnalyzer):
        self.installer = installer
        self.analyzer = analyzer

    def install(self, request: InstallRequest) -> Path:
        try:
            return self.installer.ensure_installed(request)
        except DegradedExtraction as e:
            logger.warning(
                "Failure occurred when attempting to install Infer. Continuing in potentially unstable state.",
                exc_info=True,
                extra={"path": str(e.executable)},
            )
            return e.executable
        except InferError:
            logger.error("Error occurred when attempting to install Infer", exc_info=True)
            raise

    def analyze(self, request: AnalysisRequest, executable: Path) -> ProcessOutcome:
        try:
            return self.analyzer.analyze(request, executable)
        except InferFailure:
            logger.warning("A failure occurred when running %s on the project.", self.analyzer.tool_name(), exc_info=True)
            raise
        except InferError:
            logger.error("An error occurred when running %s on the project.", self.analyzer.tool_name(), exc_info=True)
            raise

    def run(self, install: InstallRequest, request: AnalysisRequest) -> ProcessOutcome:
        executable = self.install(install)
        return self.analyze(request, executable)
