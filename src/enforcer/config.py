from __future__ import annotations

from typing import Literal, Optional, Tuple

from pydantic import Field, SecretStr, ValidationError, confloat, conint, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import PULL_REQUEST_EVENTS
from .errors import ConfigError

EvaluationMode = Literal["policy_group", "policy"]


class EnforcerConfig(BaseSettings):
    """Configuration loaded from GitHub Actions inputs."""

    model_config = SettingsConfigDict(
        env_prefix="INPUT_",
        frozen=True,
        extra="ignore",
    )

    # Policy selection: exactly one of these must be set
    policy_group: str = Field(default="", description="Policy group to evaluate the resource against")
    policy_id: str = Field(default="", description="Single policy id to evaluate the resource against")
    policy_name: str = Field(default="", description="Single policy name, resolved to an id before evaluating")

    resource_uri: str = Field(description="URI of the resource (e.g. an image reference) to evaluate")
    enforce: bool = Field(default=True, description="Fail the build when the evaluation does not pass")

    # Evaluation service
    rode_host: str = Field(description="Host (and optional port) of the Rode API")
    rode_insecure: bool = Field(default=False, description="Talk to Rode over plain HTTP")
    rode_timeout_seconds: confloat(ge=1) = Field(default=15.0)

    # GitHub integration
    github_token: SecretStr = Field(default="", description="GitHub token used to comment on pull requests")
    comment_on_pr: bool = Field(default=True, description="Upsert the evaluation report as a PR comment")
    pull_request_number: Optional[conint(ge=1)] = Field(
        default=None,
        description="Pull request to comment on; read from the event payload when unset",
    )
    write_report_file: bool = Field(default=False, description="Write the report to a temporary file")

    @field_validator("policy_group", "policy_id", "policy_name", "resource_uri", "rode_host", mode="before")
    @classmethod
    def _strip(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("pull_request_number", mode="before")
    @classmethod
    def _empty_as_unset(cls, value):
        # Unset action inputs still arrive as empty strings.
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _validate_selection(self) -> "EnforcerConfig":
        if not self.resource_uri:
            raise ValueError("resource_uri must not be empty")
        if not self.rode_host:
            raise ValueError("rode_host must not be empty")

        selected = [name for name in ("policy_group", "policy_id", "policy_name") if getattr(self, name)]
        if not selected:
            raise ValueError("must set one of policy_group, policy_id or policy_name")
        if len(selected) > 1:
            raise ValueError(f"only one of policy_group, policy_id or policy_name should be specified (got {', '.join(selected)})")
        return self

    @property
    def mode(self) -> EvaluationMode:
        return "policy_group" if self.policy_group else "policy"

    @property
    def rode_base_url(self) -> str:
        if "://" in self.rode_host:
            return self.rode_host.rstrip("/")
        scheme = "http" if self.rode_insecure else "https"
        return f"{scheme}://{self.rode_host.rstrip('/')}"


class GitHubEnvironment(BaseSettings):
    """Default environment variables set by the GitHub Actions runner."""

    model_config = SettingsConfigDict(
        env_prefix="GITHUB_",
        frozen=True,
        extra="ignore",
    )

    server_url: str = "https://github.com"
    api_url: str = "https://api.github.com"
    repository: str = ""
    run_id: str = ""
    event_name: str = ""
    event_path: str = ""
    output: str = ""
    step_summary: str = ""

    @field_validator("repository")
    @classmethod
    def _validate_repository(cls, value: str) -> str:
        value = value.strip()
        if value and (value.count("/") != 1 or not all(value.split("/"))):
            raise ValueError(f"repository must be an owner/name slug, got {value!r}")
        return value

    @property
    def is_pull_request_event(self) -> bool:
        return self.event_name in PULL_REQUEST_EVENTS

    @property
    def workflow_run_url(self) -> str:
        return f"{self.server_url.rstrip('/')}/{self.repository}/actions/runs/{self.run_id}"


def load_settings() -> Tuple[EnforcerConfig, GitHubEnvironment]:
    """Load both settings objects from the environment, failing with ConfigError."""
    try:
        return EnforcerConfig(), GitHubEnvironment()
    except ValidationError as exc:
        raise ConfigError(f"unable to build config: {exc}") from exc
