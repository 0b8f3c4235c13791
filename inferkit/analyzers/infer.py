from __future__ import annotations

import logging
import os
from pathlib import Path

from inferkit.analyzers.sources import discover_sources, write_argfile
from inferkit.core.util import stream_cmd
from inferkit.domain.errors import (
    ClasspathResolutionFailure,
    FindingsPresentFailure,
    NoInputFiles,
    UnexpectedExitCode,
)
from inferkit.domain.models import Classification, ProcessInvocation, ProcessOutcome
from inferkit.domain.schemas import AnalysisRequest
from inferkit.normalizers.failure_policy import classify_exit_code

from .base import StaticCodeAnalyzer

logger = logging.getLogger(__name__)


class InferAnalyzer(StaticCodeAnalyzer):
    """
    Runs ``infer -- javac ...`` over a project's sources.

    Sources go through an @argfile so large projects never hit the OS
    command-line limit. Infer observes the javac invocation; class output
    lands in the project's regular output directory.
    """

    def tool_name(self) -> str:
        return "infer"

    def analyze(self, request: AnalysisRequest, executable: Path) -> ProcessOutcome:
        sources = discover_sources(request.source_roots, request.source_suffix)
        if not sources:
            roots = ", ".join(str(r) for r in request.source_roots)
            logger.warning("No Java sources found in [%s]. Skipping Infer analysis.", roots)
            raise NoInputFiles(request.source_roots)
        logger.info("Found %d source files to analyze", len(sources))

        classpath = self._classpath(request)

        request.results_dir.mkdir(parents=True, exist_ok=True)
        request.output_dir.mkdir(parents=True, exist_ok=True)
        argfile = write_argfile(request.build_dir / request.argfile_name, sources)

        invocation = ProcessInvocation(
            command=tuple(build_command(executable, request, argfile, classpath)),
            working_dir=request.base_dir,
            timeout_sec=request.timeout_sec,
        )
        exit_code = stream_cmd(invocation, logger.info)

        classification = classify_exit_code(exit_code)
        if classification is Classification.ERROR:
            logger.error(
                "Infer exited with code %d",
                exit_code,
                extra={"exit_code": exit_code, "command": invocation.command_line},
            )
            raise UnexpectedExitCode(invocation.command, exit_code)

        if classification is Classification.FINDINGS_PRESENT:
            if request.fail_on_findings:
                logger.warning("Infer found issues. See: %s", request.results_dir, extra={"exit_code": exit_code})
                raise FindingsPresentFailure(request.results_dir)
            logger.warning("Infer found issues; not failing. See: %s", request.results_dir)

        logger.info("Infer analysis completed. Results in: %s", request.results_dir)
        return ProcessOutcome(exit_code=exit_code, classification=classification)

    @staticmethod
    def _classpath(request: AnalysisRequest) -> str:
        if request.classpath is None:
            logger.error("An error occurred when compiling the classpath and the classpath could not be resolved")
            raise ClasspathResolutionFailure("Compile classpath could not be resolved")
        return os.pathsep.join(request.classpath)


def build_command(executable: Path, request: AnalysisRequest, argfile: Path, classpath: str) -> list[str]:
    cmd = [str(executable), "--results-dir", str(request.results_dir)]
    if request.fail_on_findings:
        cmd.append("--fail-on-issue")
    cmd.append("--")
    cmd.extend(build_javac_args(request, argfile, classpath))
    return cmd


def build_javac_args(request: AnalysisRequest, argfile: Path, classpath: str) -> list[str]:
    args = ["javac"]
    if classpath:
        args += ["-classpath", classpath]
    if request.debug:
        args.append("-g")
    args += ["-d", str(request.output_dir)]
    args.append(f"@{argfile}")
    return args
