from __future__ import annotations

from pathlib import Path

from enforcer.models import ActionResult
from enforcer.publish import write_github_outputs, write_report_file, write_step_summary


def test_outputs_written(tmp_path: Path) -> None:
    output = tmp_path / "output"
    output.write_text("earlier=step\n", encoding="utf-8")
    result = ActionResult(passed=True, fail_build=False, evaluation_report="report", evaluation_id="eval-1")

    write_github_outputs(str(output), result, report_path=Path("/tmp/report.md"))

    assert output.read_text(encoding="utf-8") == (
        "earlier=step\n"
        "pass=true\n"
        "fail_build=false\n"
        "evaluation_id=eval-1\n"
        "report_path=/tmp/report.md\n"
    )


def test_outputs_noop_without_path(tmp_path: Path) -> None:
    write_github_outputs("", ActionResult(passed=False, fail_build=True, evaluation_report=""))
    assert list(tmp_path.iterdir()) == []


def test_step_summary_appends(tmp_path: Path) -> None:
    summary = tmp_path / "summary.md"

    write_step_summary(str(summary), "# Report")
    write_step_summary(str(summary), "# Second\n")

    assert summary.read_text(encoding="utf-8") == "# Report\n# Second\n"


def test_report_file_written(tmp_path: Path) -> None:
    path = write_report_file("# Report\n", directory=str(tmp_path))

    assert path.parent == tmp_path
    assert path.suffix == ".md"
    assert path.read_text(encoding="utf-8") == "# Report\n"
