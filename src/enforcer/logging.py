from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator

_SENSITIVE_FRAGMENTS = ("token", "secret", "password", "api_key", "apikey")


def _escape_workflow_command(value: str) -> str:
    # https://docs.github.com/actions/using-workflows/workflow-commands-for-github-actions
    return str(value).replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _redact(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: "***" if any(fragment in key.lower() for fragment in _SENSITIVE_FRAGMENTS) else value
        for key, value in fields.items()
    }


class EnforcerLogger:
    """
    Writes one JSON record per event to stderr, keyed by the workflow run id.

    Warnings and errors are also echoed as ``::warning::``/``::error::`` workflow
    commands so they show up as annotations on the run. Fields named like
    credentials (``github_token`` and friends) are masked.
    """

    def __init__(self, run_id: str):
        self.run_id = run_id

    def info(self, message: str, **fields: Any) -> None:
        self._write("info", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._write("warning", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._write("error", message, fields)

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        """Bracket a step of the run with start/end records and its duration."""
        started = datetime.now(timezone.utc)
        self.info("stage_start", stage=name)
        status = "ok"
        try:
            yield
        except Exception as exc:
            status = "error"
            self.error("stage_error", stage=name, error=str(exc))
            raise
        finally:
            elapsed = datetime.now(timezone.utc) - started
            self.info("stage_end", stage=name, duration_ms=int(elapsed.total_seconds() * 1000), status=status)

    def _write(self, level: str, message: str, fields: Dict[str, Any]) -> None:
        record: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "run_id": self.run_id,
            "message": message,
            **_redact(fields),
        }
        out = sys.stderr
        out.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
        if level != "info":
            out.write(f"::{level}::{_escape_workflow_command(message)}\n")
        out.flush()
