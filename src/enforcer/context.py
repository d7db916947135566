from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, StrictInt, ValidationError

from .config import GitHubEnvironment
from .errors import PayloadError

FileReader = Callable[[Path], str]


def read_text_file(path: Path) -> str:
    return path.read_text(encoding="utf-8")


class _PullRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    number: StrictInt


class PullRequestEvent(BaseModel):
    """The single field of a pull_request event payload that the action consumes."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    pull_request: _PullRequest

    @classmethod
    def parse(cls, raw: str) -> "PullRequestEvent":
        try:
            return cls.model_validate_json(raw)
        except ValidationError as exc:
            raise PayloadError(f"error unmarshalling event json: {exc}") from exc


def resolve_pull_request_number(
    env: GitHubEnvironment,
    explicit_number: Optional[int] = None,
    read_file: FileReader = read_text_file,
) -> Optional[int]:
    """
    Work out which pull request to comment on.

    Returns None when the triggering event is not a pull request event, or when
    no event payload path is provided. Raises PayloadError when a pull request
    event is declared but its payload can't be read or has an unexpected shape.
    """
    if not env.is_pull_request_event:
        return None
    if explicit_number is not None:
        return explicit_number
    if not env.event_path:
        return None

    path = Path(env.event_path)
    try:
        raw = read_file(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise PayloadError(f"error reading event payload at {path}: {exc}") from exc

    return PullRequestEvent.parse(raw).pull_request.number
