from __future__ import annotations

from .outputs import write_github_outputs
from .report_file import write_report_file
from .step_summary import write_step_summary

__all__ = [
    "write_github_outputs",
    "write_report_file",
    "write_step_summary",
]
