from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from inferkit.core.config import settings


class InstallRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    download_uri: str = settings.INFER_DOWNLOAD_URL
    install_root: Path = Path(settings.INFER_INSTALL_DIR)


class AnalysisRequest(BaseModel):
    """Project metadata handed to the analyzer for one run."""

    model_config = ConfigDict(frozen=True)

    source_roots: list[Path]
    # None means the upstream dependency metadata was never resolved
    classpath: list[str] | None = Field(default_factory=list)

    base_dir: Path
    build_dir: Path
    output_dir: Path
    results_dir: Path

    fail_on_findings: bool = True
    debug: bool = False

    source_suffix: str = ".java"
    argfile_name: str = settings.INFER_ARGFILE_NAME
    timeout_sec: float = settings.INFER_TIMEOUT_SEC
