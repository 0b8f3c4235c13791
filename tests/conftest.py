import io
import logging
import stat
import tarfile
from pathlib import Path

import httpx
import pytest

from inferkit.domain.schemas import AnalysisRequest

INFER_URI = "https://example.test/releases/download/v1.2.0/infer-linux-x86_64-v1.2.0.tar.xz"
INFER_ROOT = "infer-linux-x86_64-v1.2.0"


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """setup_logging() replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _add(tar: tarfile.TarFile, entry: dict) -> None:
    info = tarfile.TarInfo(entry["name"])
    info.mode = entry.get("mode", 0o644)
    kind = entry.get("kind", "file")
    if kind == "dir":
        info.type = tarfile.DIRTYPE
        info.mode = entry.get("mode", 0o755)
        tar.addfile(info)
    elif kind == "symlink":
        info.type = tarfile.SYMTYPE
        info.linkname = entry["link"]
        tar.addfile(info)
    elif kind == "hardlink":
        info.type = tarfile.LNKTYPE
        info.linkname = entry["link"]
        tar.addfile(info)
    else:
        data = entry.get("data", b"")
        info.size = len(data)
        tar.addfile(info, io.BytesIO(data))


@pytest.fixture
def make_tar():
    """
    Build an in-memory archive from entry dicts:
    ``{"name": ..., "kind": "file"|"dir"|"symlink"|"hardlink", "data": b"", "mode": 0o644, "link": ...}``
    """

    def _make(entries: list[dict], mode: str = "w:xz") -> bytes:
        buf = io.BytesIO()
        with tarfile.open(fileobj=buf, mode=mode) as tar:
            for entry in entries:
                _add(tar, entry)
        return buf.getvalue()

    return _make


@pytest.fixture
def infer_tar(make_tar) -> bytes:
    """A minimal Infer release: <root>/bin/infer (executable) and a lib file."""
    return make_tar(
        [
            {"name": f"{INFER_ROOT}/", "kind": "dir"},
            {"name": f"{INFER_ROOT}/bin/", "kind": "dir"},
            {"name": f"{INFER_ROOT}/bin/infer", "data": b"#!/bin/sh\nexit 0\n", "mode": 0o755},
            {"name": f"{INFER_ROOT}/lib/infer.jar", "data": b"jar"},
        ]
    )


class Recorder:
    def __init__(self, status: int, body: bytes):
        self.status = status
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, content=self.body)


@pytest.fixture
def http_for():
    """Return (client, recorder) serving ``body`` with ``status`` for every GET."""
    clients: list[httpx.Client] = []

    def _make(body: bytes = b"", status: int = 200):
        rec = Recorder(status, body)
        client = httpx.Client(transport=httpx.MockTransport(rec), follow_redirects=True)
        clients.append(client)
        return client, rec

    yield _make
    for c in clients:
        c.close()


@pytest.fixture
def make_script(tmp_path):
    """Write an executable POSIX shell script and return its path."""

    def _make(body: str, name: str = "infer") -> Path:
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir(exist_ok=True)
        p = bin_dir / name
        p.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
        p.chmod(p.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return p

    return _make


@pytest.fixture
def java_project(tmp_path) -> Path:
    """proj/src/main/java/example/Hello.java"""
    root = tmp_path / "proj"
    pkg = root / "src" / "main" / "java" / "example"
    pkg.mkdir(parents=True)
    (pkg / "Hello.java").write_text("package example;\nclass Hello {}\n", encoding="utf-8")
    return root


@pytest.fixture
def analysis_request(java_project):
    def _make(**overrides) -> AnalysisRequest:
        target = java_project / "target"
        fields = dict(
            source_roots=[java_project / "src" / "main" / "java"],
            classpath=[],
            base_dir=java_project,
            build_dir=target,
            output_dir=target / "classes",
            results_dir=java_project / "infer-results",
            fail_on_findings=False,
            timeout_sec=30,
        )
        fields.update(overrides)
        return AnalysisRequest(**fields)

    return _make
