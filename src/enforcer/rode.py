from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .constants import Limits
from .errors import NotFoundError, RemoteError
from .logging import EnforcerLogger
from .models import EvaluationResult, Policy

API_PREFIX = "/v1alpha1"


class RodeClient:
    """
    Client for the Rode evaluation API, spoken through its HTTP/JSON gateway.

    Every failure (transport, non-2xx, unparseable body) surfaces as RemoteError.
    Nothing is retried.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 15.0,
        logger: Optional[EnforcerLogger] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url
        self.logger = logger
        self._policy_names: Dict[str, str] = {}
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json", "User-Agent": "enforcer-action"},
        )

    def __enter__(self) -> "RodeClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def evaluate_resource(self, policy_group: str, resource_uri: str, source: Dict[str, str]) -> EvaluationResult:
        payload = {
            "policyGroup": policy_group,
            "resourceUri": resource_uri,
            "source": source,
        }
        data = self._request("POST", f"{API_PREFIX}/resource-evaluations", "error evaluating resource", json=payload)
        try:
            return EvaluationResult.from_api(data)
        except (KeyError, TypeError, AttributeError) as exc:
            raise RemoteError(f"error evaluating resource: malformed response ({exc!r})") from exc

    def evaluate_policy(
        self,
        resource_uri: str,
        *,
        policy_id: Optional[str] = None,
        policy_name: Optional[str] = None,
    ) -> bool:
        """Evaluate a single policy, resolving ``policy_name`` to an id when no id is given."""
        if not policy_id:
            if not policy_name:
                raise ValueError("either policy_id or policy_name is required")
            policy_id = self.find_policy_id(policy_name)

        data = self._request(
            "POST",
            f"{API_PREFIX}/policies/{quote(policy_id, safe='')}:attest",
            f"error evaluating policy {policy_id}",
            json={"resourceUri": resource_uri},
        )
        return bool(data.get("pass", False))

    def find_policy_id(self, policy_name: str) -> str:
        escaped = policy_name.replace("\\", "\\\\").replace('"', '\\"')
        policies = self.list_policies(f'name == "{escaped}"')
        if not policies:
            raise NotFoundError(f"unable to find a policy with name {policy_name!r}")
        if len(policies) > 1 and self.logger:
            # The service gives no ordering guarantee, so the pick may change between calls.
            self.logger.warning(
                "Multiple policies match name, using the first",
                policy_name=policy_name,
                policy_ids=[p.id for p in policies],
            )
        return policies[0].id

    def list_policies(self, filter_expression: str = "") -> List[Policy]:
        policies: List[Policy] = []
        page_token = ""
        while True:
            params: Dict[str, Any] = {"pageSize": Limits.POLICIES_PER_PAGE}
            if filter_expression:
                params["filter"] = filter_expression
            if page_token:
                params["pageToken"] = page_token
            data = self._request("GET", f"{API_PREFIX}/policies", "error listing policies", params=params)
            try:
                policies.extend(Policy.from_api(item) for item in data.get("policies") or [])
            except (KeyError, TypeError, AttributeError) as exc:
                raise RemoteError(f"error listing policies: malformed response ({exc!r})") from exc
            page_token = data.get("nextPageToken") or ""
            if not page_token:
                return policies

    def get_policy(self, policy_id: str) -> Policy:
        data = self._request(
            "GET",
            f"{API_PREFIX}/policies/{quote(policy_id, safe='')}",
            f"error fetching policy {policy_id}",
        )
        try:
            return Policy.from_api(data)
        except (KeyError, TypeError, AttributeError) as exc:
            raise RemoteError(f"error fetching policy {policy_id}: malformed response ({exc!r})") from exc

    def get_policy_name(self, policy_version_id: str) -> str:
        if policy_version_id not in self._policy_names:
            self._policy_names[policy_version_id] = self.get_policy(policy_version_id).name
        return self._policy_names[policy_version_id]

    def _request(self, method: str, path: str, context: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise RemoteError(f"{context}: {exc.response.status_code} {_error_message(exc.response)}") from exc
        except httpx.HTTPError as exc:
            raise RemoteError(f"{context}: {exc}") from exc
        except ValueError as exc:
            raise RemoteError(f"{context}: invalid JSON response") from exc

        if not isinstance(data, dict):
            raise RemoteError(f"{context}: expected a JSON object")
        return data


def _error_message(response: httpx.Response) -> str:
    """The gateway reports errors as a google.rpc.Status JSON body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase
