"""One JSON object per log line on stdout.

Install and analysis runs are read back from CI logs, so each record keeps
the URI, path, exit code or command it concerns as a separate key:

    {"ts": "...", "level": "ERROR", "logger": "inferkit.analyzers.infer", "msg": "...", "exit_code": 3}
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone

_EXTRA_FIELDS = ("uri", "path", "exit_code", "command")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update({f: getattr(record, f) for f in _EXTRA_FIELDS if hasattr(record, f)})

        if record.exc_info and record.exc_info[0] is not None:
            payload["exc"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def setup_logging(level_name: str | None = None) -> None:
    """Route everything through a single stdout JSON handler.

    ``level_name`` (the CLI's ``--log-level``) beats ``LOG_LEVEL``; both fall
    back to ``INFO``.
    """
    name = (level_name or os.getenv("LOG_LEVEL") or "INFO").upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.setLevel(getattr(logging, name, logging.INFO))
    root.handlers[:] = [handler]

    # download progress chatter
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
