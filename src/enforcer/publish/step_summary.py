from __future__ import annotations


def write_step_summary(summary_path: str, report: str) -> None:
    """Append the evaluation report to the job summary page ($GITHUB_STEP_SUMMARY)."""
    if not summary_path:
        return

    with open(summary_path, "a", encoding="utf-8") as summary_file:
        summary_file.write(report)
        if not report.endswith("\n"):
            summary_file.write("\n")
