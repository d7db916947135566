from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional


def write_report_file(report: str, directory: Optional[str] = None) -> Path:
    """Write the report to a fresh temporary markdown file and return its path."""
    directory = directory or os.environ.get("RUNNER_TEMP") or None
    fd, name = tempfile.mkstemp(prefix="evaluation-report-", suffix=".md", dir=directory)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(report)
    return Path(name)
