from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from .constants import COMMENT_MARKER
from .github import GitHubClient
from .logging import EnforcerLogger
from .models import CommentUpsert


def find_marked_comment(comments: Iterable[Dict[str, Any]], marker: str = COMMENT_MARKER) -> Optional[int]:
    """Id of the first comment whose body carries ``marker``, or None."""
    for comment in comments:
        if marker in (comment.get("body") or ""):
            return int(comment["id"])
    return None


def upsert_pr_comment(
    gh: GitHubClient,
    pr_number: int,
    body: str,
    *,
    marker: str = COMMENT_MARKER,
    logger: Optional[EnforcerLogger] = None,
) -> CommentUpsert:
    """
    Idempotent PR comment: edit the comment left by a previous run if one
    exists, otherwise create a new one.

    The full comment list is read before deciding, and any API failure raises
    RemoteError without retrying.
    """
    existing_id = find_marked_comment(gh.list_issue_comments(pr_number), marker)

    if existing_id is not None:
        if logger:
            logger.info("Found existing comment, updating", comment_id=existing_id, pr_number=pr_number)
        updated = gh.update_issue_comment(existing_id, body)
        return CommentUpsert(action="updated", comment_id=existing_id, html_url=updated.get("html_url"))

    if logger:
        logger.info("Creating pull request comment", pr_number=pr_number)
    created = gh.create_issue_comment(pr_number, body)
    return CommentUpsert(action="created", comment_id=created.get("id"), html_url=created.get("html_url"))
