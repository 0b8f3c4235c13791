import os
from pathlib import Path

from pydantic import BaseModel


class Settings(BaseModel):
    # Infer distribution
    INFER_DOWNLOAD_URL: str = os.getenv(
        "INFER_DOWNLOAD_URL",
        "https://github.com/facebook/infer/releases/download/v1.2.0/infer-linux-x86_64-v1.2.0.tar.xz",
    )
    INFER_INSTALL_DIR: str = os.getenv("INFER_INSTALL_DIR", str(Path.home() / "Downloads"))
    INFER_EXECUTABLE: str = os.getenv("INFER_EXECUTABLE", "infer")

    # Timeouts
    INFER_DOWNLOAD_TIMEOUT_SEC: float = float(os.getenv("INFER_DOWNLOAD_TIMEOUT_SEC", "60"))
    INFER_TIMEOUT_SEC: float = float(os.getenv("INFER_TIMEOUT_SEC", "60"))

    # Analysis
    INFER_ARGFILE_NAME: str = os.getenv("INFER_ARGFILE_NAME", "java-sources.args")


settings = Settings()
