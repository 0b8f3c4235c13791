from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path

from inferkit.domain.models import ProcessOutcome
from inferkit.domain.schemas import AnalysisRequest

class StaticCodeAnalyzer(ABC):
    @abstractmethod
    def tool_name(self) -> str: ...

    @abstractmethod
    def analyze(self, request: AnalysisRequest, executable: Path) -> ProcessOutcome: ...
