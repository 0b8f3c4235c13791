"""Command line entry point: install Infer if needed, then run it over a Java project.

    inferkit --source-root src/main/java --classpath-file target/classpath.txt
"""

from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from pathlib import Path

from inferkit.core.config import settings
from inferkit.core.containers import build_analysis_service
from inferkit.core.http import build_http_client
from inferkit.core.logging import setup_logging
from inferkit.domain.errors import (
    ClasspathResolutionFailure,
    FindingsPresentFailure,
    InferKitError,
    NoInputFiles,
    ProcessInterrupted,
)
from inferkit.domain.schemas import AnalysisRequest, InstallRequest

logger = logging.getLogger("inferkit")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_FINDINGS = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="inferkit", description="Install and run Facebook Infer on a Java project.")
    ap.add_argument("--base-dir", type=Path, default=Path("."), help="project base directory (process cwd)")
    ap.add_argument("--source-root", type=Path, action="append", dest="source_roots",
                    help="compile source root; repeatable (default: <base>/src/main/java)")
    ap.add_argument("--classpath", help="compile classpath, os.pathsep separated")
    ap.add_argument("--classpath-file", type=Path, help="file holding the compile classpath")
    ap.add_argument("--build-dir", type=Path, help="build directory (default: <base>/target)")
    ap.add_argument("--output-dir", type=Path, help="javac class output (default: <build>/classes)")
    ap.add_argument("--results-dir", type=Path, help="Infer results (default: <build>/infer-out)")

    ap.add_argument("--install-dir", type=Path, default=Path(settings.INFER_INSTALL_DIR))
    ap.add_argument("--download-url", default=settings.INFER_DOWNLOAD_URL)
    ap.add_argument("--executable", type=Path, help="use this Infer binary and skip the install step")
    ap.add_argument("--timeout", type=float, default=settings.INFER_TIMEOUT_SEC, help="seconds before Infer is killed")

    ap.add_argument("--fail-on-findings", action=argparse.BooleanOptionalAction, default=True)
    ap.add_argument("--fail-if-no-sources", action="store_true", help="treat an empty source set as a failure")
    ap.add_argument("--log-level", default=None, help="overrides LOG_LEVEL")
    return ap


def read_classpath(args: argparse.Namespace) -> list[str]:
    if args.classpath_file is not None:
        try:
            text = args.classpath_file.read_text(encoding="utf-8")
        except OSError as e:
            raise ClasspathResolutionFailure(f"Compile classpath could not be resolved from {args.classpath_file}") from e
        return _split_classpath(text)
    if args.classpath:
        return _split_classpath(args.classpath)
    return []


def _split_classpath(text: str) -> list[str]:
    # elements separated by os.pathsep and/or newlines
    parts = re.split(rf"[\n{re.escape(os.pathsep)}]", text)
    return [p.strip() for p in parts if p.strip()]


def build_requests(args: argparse.Namespace) -> tuple[InstallRequest, AnalysisRequest]:
    base = args.base_dir.resolve()
    build_dir = args.build_dir or base / "target"

    install = InstallRequest(download_uri=args.download_url, install_root=args.install_dir)
    analysis = AnalysisRequest(
        source_roots=args.source_roots or [base / "src" / "main" / "java"],
        classpath=read_classpath(args),
        base_dir=base,
        build_dir=build_dir,
        output_dir=args.output_dir or build_dir / "classes",
        results_dir=args.results_dir or build_dir / "infer-out",
        fail_on_findings=args.fail_on_findings,
        debug=logging.getLogger().isEnabledFor(logging.DEBUG),
        timeout_sec=args.timeout,
    )
    return install, analysis


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        install, analysis = build_requests(args)
        with build_http_client() as client:
            service = build_analysis_service(client)
            exe = args.executable or service.install(install)
            service.analyze(analysis, exe)
    except NoInputFiles:
        return EXIT_FAILED if args.fail_if_no_sources else EXIT_OK
    except FindingsPresentFailure as e:
        logger.error("%s", e)
        return EXIT_FINDINGS
    except ProcessInterrupted:
        return EXIT_INTERRUPTED
    except InferKitError as e:
        logger.error("%s", e)
        return EXIT_FAILED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
