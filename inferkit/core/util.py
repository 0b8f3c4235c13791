from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
import time
from typing import Callable, IO

from inferkit.domain.errors import ProcessInterrupted, ProcessStartFailure, ProcessTimeout
from inferkit.domain.models import ProcessInvocation

logger = logging.getLogger(__name__)

# how long to wait for the drain thread once the process is gone
_DRAIN_GRACE_SEC = 5.0


def stream_cmd(invocation: ProcessInvocation, on_line: Callable[[str], None]) -> int:
    """
    Run ``invocation`` with stderr merged into stdout and hand every non-blank
    output line to ``on_line`` as it arrives.

    Output is drained on a separate thread while this thread waits for the
    process, so a full pipe can never stall the child. Returns the exit code.
    """
    logger.debug("Running: %s", invocation.command_line, extra={"command": invocation.command_line})
    try:
        proc = subprocess.Popen(
            list(invocation.command),
            cwd=str(invocation.working_dir),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            start_new_session=os.name == "posix",
        )
    except OSError as e:
        raise ProcessStartFailure(invocation.command) from e

    drain = threading.Thread(target=_drain, args=(proc.stdout, on_line), name="infer-output", daemon=True)
    drain.start()
    deadline = time.monotonic() + invocation.timeout_sec

    try:
        exit_code = proc.wait(timeout=invocation.timeout_sec)
    except subprocess.TimeoutExpired as e:
        _kill(proc)
        drain.join(_DRAIN_GRACE_SEC)
        logger.error(
            "Timeout running: %s", invocation.command_line, extra={"command": invocation.command_line}
        )
        raise ProcessTimeout(invocation.command, invocation.timeout_sec) from e
    except KeyboardInterrupt as e:
        _kill(proc)
        drain.join(_DRAIN_GRACE_SEC)
        logger.error(
            "Interrupted running: %s", invocation.command_line, extra={"command": invocation.command_line}
        )
        raise ProcessInterrupted(invocation.command) from e

    # children left behind can hold the pipe open after the tool exits
    drain.join(max(deadline - time.monotonic(), 0.0))
    if drain.is_alive():
        logger.warning(
            "Output still open after %s exited; killing its process group",
            invocation.command[0],
            extra={"command": invocation.command_line, "exit_code": exit_code},
        )
        _kill(proc)
        drain.join(_DRAIN_GRACE_SEC)
    return exit_code


def _drain(stream: IO[str], on_line: Callable[[str], None]) -> None:
    with stream:
        for raw in stream:
            line = raw.rstrip()
            if line.strip():
                on_line(line)


def _kill(proc: subprocess.Popen) -> None:
    """Forcibly stop the process and, on POSIX, everything in its session."""
    try:
        if os.name == "posix":
            os.killpg(proc.pid, signal.SIGKILL)
        else:
            proc.kill()
    except ProcessLookupError:
        pass
    proc.wait()
