from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from enforcer.action import EnforcerAction
from enforcer.config import EnforcerConfig, GitHubEnvironment
from enforcer.constants import COMMENT_MARKER
from enforcer.errors import ConfigError, NotFoundError, PayloadError, RemoteError
from enforcer.logging import EnforcerLogger
from enforcer.models import CommentUpsert, EvaluationResult, PolicyEvaluation, ResourceVersion, Violation


def _evaluation(passed: bool) -> EvaluationResult:
    return EvaluationResult(
        id="eval-1",
        passed=passed,
        resource_version=ResourceVersion(version="registry/image:v1"),
        policy_evaluations=(
            PolicyEvaluation(
                policy_version_id="policy-a.1",
                passed=passed,
                violations=() if passed else (Violation("CVE-2023-1111 present"),),
            ),
        ),
    )


class DummyRode:
    def __init__(self, result: Optional[EvaluationResult] = None, error: Optional[Exception] = None) -> None:
        self.result = result
        self.error = error
        self.evaluate_calls: List[Dict[str, Any]] = []
        self.policy_calls: List[Dict[str, Any]] = []
        self.name_lookups: List[str] = []

    def evaluate_resource(self, policy_group: str, resource_uri: str, source: Dict[str, str]) -> EvaluationResult:
        self.evaluate_calls.append({"policy_group": policy_group, "resource_uri": resource_uri, "source": source})
        if self.error:
            raise self.error
        return self.result

    def evaluate_policy(self, resource_uri: str, *, policy_id=None, policy_name=None) -> bool:
        self.policy_calls.append({"resource_uri": resource_uri, "policy_id": policy_id, "policy_name": policy_name})
        if self.error:
            raise self.error
        return self.result.passed

    def get_policy_name(self, policy_version_id: str) -> str:
        self.name_lookups.append(policy_version_id)
        return "No critical CVEs"


class DummyGitHub:
    def __init__(self, comments: Optional[List[Dict[str, Any]]] = None) -> None:
        self.comments = comments or []
        self.created: List[Dict[str, Any]] = []
        self.updated: List[Dict[str, Any]] = []

    def list_issue_comments(self, issue_number: int) -> List[Dict[str, Any]]:
        return self.comments

    def create_issue_comment(self, issue_number: int, body: str) -> Dict[str, Any]:
        self.created.append({"issue_number": issue_number, "body": body})
        return {"id": 99}

    def update_issue_comment(self, comment_id: int, body: str) -> Dict[str, Any]:
        self.updated.append({"comment_id": comment_id, "body": body})
        return {}


def _config(**overrides: Any) -> EnforcerConfig:
    values: Dict[str, Any] = {
        "policy_group": "security",
        "resource_uri": "registry/image:v1",
        "rode_host": "rode.example.com",
    }
    values.update(overrides)
    return EnforcerConfig(**values)


def _env(event_name: str = "push", event_path: str = "") -> GitHubEnvironment:
    return GitHubEnvironment(
        server_url="https://github.com",
        repository="octo/repo",
        run_id="1234",
        event_name=event_name,
        event_path=event_path,
    )


def _action(rode, config=None, env=None, github=None, **kwargs) -> EnforcerAction:
    return EnforcerAction(
        config or _config(),
        env or _env(),
        rode,
        EnforcerLogger("test-run"),
        github=github,
        **kwargs,
    )


def test_failing_evaluation_fails_build_and_reports_violation() -> None:
    rode = DummyRode(_evaluation(passed=False))

    result = _action(rode).run()

    assert rode.evaluate_calls == [
        {
            "policy_group": "security",
            "resource_uri": "registry/image:v1",
            "source": {"name": "enforcer-action", "url": "https://github.com/octo/repo/actions/runs/1234"},
        }
    ]
    assert result.passed is False
    assert result.fail_build is True
    assert result.evaluation_id == "eval-1"
    assert "Rode Resource Evaluation Report ❌ (FAILED)" in result.evaluation_report
    assert "No critical CVEs" in result.evaluation_report
    assert "CVE-2023-1111 present" in result.evaluation_report
    assert "policy-a.1" in rode.name_lookups


@pytest.mark.parametrize(
    ("enforce", "passed", "fail_build"),
    [(True, True, False), (True, False, True), (False, True, False), (False, False, False)],
)
def test_fail_build_is_enforce_and_not_pass(enforce: bool, passed: bool, fail_build: bool) -> None:
    result = _action(DummyRode(_evaluation(passed)), config=_config(enforce=enforce)).run()

    assert result.passed is passed
    assert result.fail_build is fail_build


def test_evaluation_error_aborts() -> None:
    rode = DummyRode(error=RemoteError("error evaluating resource: unavailable"))

    with pytest.raises(RemoteError, match="error evaluating resource"):
        _action(rode).run()


def test_non_pr_event_skips_decoration() -> None:
    github = DummyGitHub()

    result = _action(DummyRode(_evaluation(True)), github=github).run()

    assert result.comment is None
    assert github.created == [] and github.updated == []


def test_pr_event_creates_comment(event_pr_path: Path) -> None:
    github = DummyGitHub([{"id": 1, "body": "unrelated"}])
    env = _env("pull_request", str(event_pr_path))

    result = _action(DummyRode(_evaluation(False)), env=env, github=github).run()

    assert len(github.created) == 1
    assert github.created[0]["issue_number"] == 42
    assert github.created[0]["body"] == result.evaluation_report
    assert github.updated == []
    assert result.comment == CommentUpsert(action="created", comment_id=99)


def test_pr_event_edits_previous_comment(event_pr_path: Path) -> None:
    github = DummyGitHub([{"id": 7, "body": f"stale\n<!---{COMMENT_MARKER}--->"}])
    env = _env("pull_request", str(event_pr_path))

    result = _action(DummyRode(_evaluation(True)), env=env, github=github).run()

    assert github.created == []
    assert [u["comment_id"] for u in github.updated] == [7]
    assert result.comment.action == "updated"


def test_explicit_pull_request_number(event_pr_path: Path) -> None:
    github = DummyGitHub()
    env = _env("pull_request", str(event_pr_path))

    _action(DummyRode(_evaluation(True)), config=_config(pull_request_number=8), env=env, github=github).run()

    assert github.created[0]["issue_number"] == 8


def test_comment_on_pr_disabled(event_pr_path: Path) -> None:
    github = DummyGitHub()
    env = _env("pull_request", str(event_pr_path))

    result = _action(DummyRode(_evaluation(True)), config=_config(comment_on_pr=False), env=env, github=github).run()

    assert result.comment is None
    assert github.created == []


def test_pr_event_with_unreadable_payload_fails() -> None:
    def read_file(path: Path) -> str:
        raise FileNotFoundError(str(path))

    env = _env("pull_request", "/github/workflow/event.json")

    with pytest.raises(PayloadError):
        _action(DummyRode(_evaluation(True)), env=env, github=DummyGitHub(), read_file=read_file).run()


def test_pr_event_without_github_token_fails(event_pr_path: Path) -> None:
    env = _env("pull_request", str(event_pr_path))

    with pytest.raises(ConfigError, match="github_token"):
        _action(DummyRode(_evaluation(True)), env=env, github=None).run()


def test_single_policy_mode_by_name() -> None:
    rode = DummyRode(_evaluation(passed=False))
    config = _config(policy_group="", policy_name="Harbor")

    result = _action(rode, config=config).run()

    assert rode.evaluate_calls == []
    assert rode.policy_calls == [{"resource_uri": "registry/image:v1", "policy_id": None, "policy_name": "Harbor"}]
    assert result.passed is False
    assert result.fail_build is True
    assert result.evaluation_report == "Policy Harbor FAILED for resource registry/image:v1\n"


def test_single_policy_mode_not_found_propagates() -> None:
    rode = DummyRode(error=NotFoundError("unable to find a policy with name 'Harbor'"))
    config = _config(policy_group="", policy_name="Harbor")

    with pytest.raises(NotFoundError, match="unable to find a policy"):
        _action(rode, config=config).run()


def test_pr_event_without_repository_fails(event_pr_path: Path) -> None:
    env = GitHubEnvironment(repository="", run_id="1234", event_name="pull_request", event_path=str(event_pr_path))
    github = DummyGitHub()

    with pytest.raises(ConfigError, match="GITHUB_REPOSITORY"):
        _action(DummyRode(_evaluation(True)), env=env, github=github).run()
    assert github.created == []
