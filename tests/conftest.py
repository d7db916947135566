from __future__ import annotations

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from enforcer.logging import EnforcerLogger


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def event_pr_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "event_pr.json"


@pytest.fixture
def event_push_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "event_push.json"


@pytest.fixture
def event_malformed_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "event_malformed.json"


@pytest.fixture
def logger() -> EnforcerLogger:
    return EnforcerLogger("test-run")


@pytest.fixture
def action_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Minimal inputs and runner environment for a policy group evaluation."""
    for name in ("INPUT_POLICY_ID", "INPUT_POLICY_NAME", "INPUT_PULL_REQUEST_NUMBER", "INPUT_GITHUB_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("INPUT_POLICY_GROUP", "security")
    monkeypatch.setenv("INPUT_RESOURCE_URI", "registry/image:v1")
    monkeypatch.setenv("INPUT_RODE_HOST", "rode.example.com:50051")
    monkeypatch.setenv("GITHUB_SERVER_URL", "https://github.com")
    monkeypatch.setenv("GITHUB_REPOSITORY", "octo/repo")
    monkeypatch.setenv("GITHUB_RUN_ID", "1234")
    monkeypatch.setenv("GITHUB_EVENT_NAME", "push")
    monkeypatch.delenv("GITHUB_EVENT_PATH", raising=False)
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
    monkeypatch.delenv("GITHUB_STEP_SUMMARY", raising=False)
