from __future__ import annotations

import httpx

from inferkit.analyzers.infer import InferAnalyzer
from inferkit.installer.installer import ArchiveInstaller
from inferkit.services.analysis_service import AnalysisService


def build_analysis_service(http_client: httpx.Client, executable_name: str | None = None) -> AnalysisService:
    return AnalysisService(ArchiveInstaller(http_client, executable_name), InferAnalyzer())
