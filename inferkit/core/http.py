from __future__ import annotations

import httpx

from inferkit.core.config import settings


def build_http_client(timeout_sec: float | None = None) -> httpx.Client:
    """
    Build the HTTP client used for downloads.

    One client per process is enough; the caller owns it and closes it
    (``with build_http_client() as client: ...``).
    """
    timeout = timeout_sec if timeout_sec is not None else settings.INFER_DOWNLOAD_TIMEOUT_SEC
    return httpx.Client(
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
    )
