from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, Tuple

CommentAction = Literal["created", "updated"]


@dataclass(frozen=True)
class Violation:
    message: str


@dataclass(frozen=True)
class PolicyEvaluation:
    policy_version_id: str
    passed: bool
    violations: Tuple[Violation, ...] = ()

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "PolicyEvaluation":
        return cls(
            policy_version_id=str(data["policyVersionId"]),
            passed=bool(data.get("pass", False)),
            violations=tuple(
                Violation(message=str(v.get("message", ""))) for v in data.get("violations") or []
            ),
        )


@dataclass(frozen=True)
class ResourceVersion:
    version: str
    names: Tuple[str, ...] = ()

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ResourceVersion":
        return cls(
            version=str(data.get("version", "")),
            names=tuple(str(name) for name in data.get("names") or []),
        )


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of evaluating a resource against a policy group."""

    id: str
    passed: bool
    resource_version: ResourceVersion
    policy_evaluations: Tuple[PolicyEvaluation, ...] = ()

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "EvaluationResult":
        """
        Build from the gateway's JSON response.

        Proto3 JSON omits default values, so a missing ``pass`` means false and
        missing lists mean empty.
        """
        evaluation = data["resourceEvaluation"]
        return cls(
            id=str(evaluation["id"]),
            passed=bool(evaluation.get("pass", False)),
            resource_version=ResourceVersion.from_api(evaluation.get("resourceVersion") or {}),
            policy_evaluations=tuple(
                PolicyEvaluation.from_api(item) for item in data.get("policyEvaluations") or []
            ),
        )


@dataclass(frozen=True)
class Policy:
    id: str
    name: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Policy":
        return cls(id=str(data["id"]), name=str(data.get("name", "")))


@dataclass(frozen=True)
class CommentUpsert:
    action: CommentAction
    comment_id: Optional[int] = None
    html_url: Optional[str] = None


@dataclass
class ActionResult:
    passed: bool
    fail_build: bool
    evaluation_report: str
    evaluation_id: Optional[str] = None
    comment: Optional[CommentUpsert] = None
