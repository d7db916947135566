from __future__ import annotations

from .constants import ExitCode


class EnforcerError(Exception):
    """Base exception for all enforcer errors."""

    exit_code: ExitCode = ExitCode.ERROR


class ConfigError(EnforcerError):
    """Configuration validation failed."""


class RemoteError(EnforcerError):
    """Evaluation service or GitHub API call failed."""


class NotFoundError(EnforcerError):
    """A named policy did not resolve to any policy."""


class PayloadError(EnforcerError):
    """GitHub event payload missing or malformed for a pull request event."""
