from __future__ import annotations

from typing import Callable, List, Sequence

from .constants import COMMENT_MARKER
from .models import EvaluationResult

PolicyNameLookup = Callable[[str], str]


def status_message(passed: bool) -> str:
    return "✅ (PASSED)" if passed else "❌ (FAILED)"


def status_word(passed: bool) -> str:
    return "PASSED" if passed else "FAILED"


def as_code(text: str) -> str:
    return f"`{text}`"


class MarkdownBuilder:
    """Line-oriented markdown writer; every method returns self for chaining."""

    def __init__(self) -> None:
        self._lines: List[str] = []

    def heading(self, depth: int, title: str) -> "MarkdownBuilder":
        self._lines.extend([f"{'#' * depth} {title}", ""])
        return self

    def quote(self, text: str) -> "MarkdownBuilder":
        self._lines.append(f"> {text}")
        return self

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> "MarkdownBuilder":
        self._lines.append(_table_row(headers))
        self._lines.append(_table_row(["--"] * len(headers)))
        self._lines.extend(_table_row(row) for row in rows)
        self._lines.append("")
        return self

    def bullet_list(self, items: Sequence[str]) -> "MarkdownBuilder":
        self._lines.extend(f"- {item}" for item in items)
        return self

    def code_block(self, lines: Sequence[str]) -> "MarkdownBuilder":
        self._lines.append("```")
        self._lines.extend(lines)
        self._lines.append("```")
        return self

    def comment(self, text: str) -> "MarkdownBuilder":
        self._lines.append(f"<!---{text}--->")
        return self

    def blank(self) -> "MarkdownBuilder":
        self._lines.append("")
        return self

    def render(self) -> str:
        return "\n".join(self._lines) + "\n"


def _table_row(cells: Sequence[str]) -> str:
    return "| " + " | ".join(cells) + " |"


def render_evaluation_report(result: EvaluationResult, policy_name: PolicyNameLookup) -> str:
    """
    Render the markdown report posted as the PR comment and step summary.

    ``policy_name`` maps a policy version id to its display name. Lookup errors
    propagate; no partial report is produced.
    """
    md = MarkdownBuilder()
    md.heading(1, f"Rode Resource Evaluation Report {status_message(result.passed)}")
    md.quote(f"report id: {result.id}")
    md.heading(2, "Resource Metadata")
    md.table(["Resource URI"], [[as_code(result.resource_version.version)]])

    if result.resource_version.names:
        md.heading(3, "Artifact Names")
        md.bullet_list([as_code(name) for name in result.resource_version.names]).blank()

    md.heading(2, "Policy Results")
    for evaluation in result.policy_evaluations:
        name = policy_name(evaluation.policy_version_id)
        md.heading(3, f"{name} {status_message(evaluation.passed)}")
        md.code_block([v.message for v in evaluation.violations]).blank()

    # Last line; lets the next run find and edit this comment.
    md.comment(COMMENT_MARKER)
    return md.render()


def render_summary_text(result: EvaluationResult, policy_name: PolicyNameLookup) -> str:
    """Plain-text variant of the report for logs; carries no marker."""
    lines = [
        f"Rode resource evaluation {status_word(result.passed)} (id: {result.id})",
        f"Resource: {result.resource_version.version}",
    ]
    if result.resource_version.names:
        lines.append(f"Artifact names: {', '.join(result.resource_version.names)}")
    for evaluation in result.policy_evaluations:
        lines.append(f"Policy {policy_name(evaluation.policy_version_id)}: {status_word(evaluation.passed)}")
        lines.extend(f"  - {v.message}" for v in evaluation.violations)
    return "\n".join(lines) + "\n"


def render_policy_summary(policy: str, resource_uri: str, passed: bool) -> str:
    return f"Policy {policy} {status_word(passed)} for resource {resource_uri}\n"
