from __future__ import annotations

from enum import Enum

SOURCE_NAME = "enforcer-action"

# Left as a hidden markdown comment so later runs can find their own PR comment.
COMMENT_MARKER = "generated-by: enforcer-action"

PULL_REQUEST_EVENTS = frozenset({"pull_request", "pull_request_target"})


class ExitCode(int, Enum):
    """Process exit codes."""

    SUCCESS = 0
    FAILED = 1
    ERROR = 2


class Limits:
    """Shared hard limits."""

    COMMENTS_PER_PAGE = 100
    POLICIES_PER_PAGE = 100
