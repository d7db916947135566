from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..models import ActionResult


def _bool(value: bool) -> str:
    return "true" if value else "false"


def write_github_outputs(
    output_path: str,
    result: ActionResult,
    *,
    report_path: Optional[Path] = None,
) -> None:
    """Append step outputs to the $GITHUB_OUTPUT file. No-op outside a runner."""
    if not output_path:
        return

    with open(output_path, "a", encoding="utf-8") as f:
        f.write(f"pass={_bool(result.passed)}\n")
        f.write(f"fail_build={_bool(result.fail_build)}\n")
        if result.evaluation_id:
            f.write(f"evaluation_id={result.evaluation_id}\n")
        if report_path is not None:
            f.write(f"report_path={report_path}\n")
