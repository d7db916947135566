from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from .constants import Limits
from .errors import RemoteError

DEFAULT_HTTP_TIMEOUT_SECONDS = 15.0


class GitHubClient:
    """Thin wrapper over the issue comments REST API."""

    def __init__(
        self,
        token: str,
        repo: str,
        *,
        api_url: str = "https://api.github.com",
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
    ):
        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "enforcer-action",
        })

    def list_issue_comments(self, issue_number: int) -> List[Dict[str, Any]]:
        """All comments on an issue or PR, following pagination until a short page."""
        url = f"{self.api_url}/repos/{self.repo}/issues/{issue_number}/comments"
        comments: List[Dict[str, Any]] = []
        page = 1
        while True:
            r = self._send(
                "get",
                url,
                "error searching for existing pull request comment",
                params={"per_page": Limits.COMMENTS_PER_PAGE, "page": page},
            )
            batch = r.json()
            if not isinstance(batch, list):
                raise RemoteError("error searching for existing pull request comment: expected a list")
            for item in batch:
                if not isinstance(item, dict) or not isinstance(item.get("id"), int):
                    raise RemoteError("error searching for existing pull request comment: malformed comment entry")
            comments.extend(batch)
            if len(batch) < Limits.COMMENTS_PER_PAGE:
                return comments
            page += 1

    def create_issue_comment(self, issue_number: int, body: str) -> Dict[str, Any]:
        # The issues API posts a conversation comment rather than one tied to a diff line.
        url = f"{self.api_url}/repos/{self.repo}/issues/{issue_number}/comments"
        r = self._send("post", url, "error decorating pull request", json={"body": body})
        return _json_or_empty(r)

    def update_issue_comment(self, comment_id: int, body: str) -> Dict[str, Any]:
        url = f"{self.api_url}/repos/{self.repo}/issues/comments/{comment_id}"
        r = self._send("patch", url, f"error updating comment (id: {comment_id})", json={"body": body})
        return _json_or_empty(r)

    def _send(self, method: str, url: str, context: str, **kwargs: Any) -> requests.Response:
        try:
            r = self.session.request(method, url, timeout=self.timeout, **kwargs)
            r.raise_for_status()
        except requests.RequestException as exc:
            raise RemoteError(f"{context}: {exc}") from exc
        return r


def _json_or_empty(response: requests.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
