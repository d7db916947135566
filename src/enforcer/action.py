from __future__ import annotations

from typing import Optional

from .comment import upsert_pr_comment
from .config import EnforcerConfig, GitHubEnvironment
from .constants import SOURCE_NAME
from .context import FileReader, read_text_file, resolve_pull_request_number
from .errors import ConfigError
from .github import GitHubClient
from .logging import EnforcerLogger
from .models import ActionResult, CommentUpsert
from .report import render_evaluation_report, render_policy_summary, render_summary_text
from .rode import RodeClient


class EnforcerAction:
    """Evaluates the configured resource and reports the outcome."""

    def __init__(
        self,
        config: EnforcerConfig,
        github_env: GitHubEnvironment,
        rode: RodeClient,
        logger: EnforcerLogger,
        github: Optional[GitHubClient] = None,
        read_file: FileReader = read_text_file,
    ):
        self.config = config
        self.github_env = github_env
        self.rode = rode
        self.logger = logger
        self.github = github
        self.read_file = read_file

    def run(self) -> ActionResult:
        if self.config.mode == "policy_group":
            return self._evaluate_resource()
        return self._evaluate_policy()

    def _evaluate_resource(self) -> ActionResult:
        self.logger.info(
            "Evaluating resource",
            policy_group=self.config.policy_group,
            resource_uri=self.config.resource_uri,
        )
        result = self.rode.evaluate_resource(
            self.config.policy_group,
            self.config.resource_uri,
            {"name": SOURCE_NAME, "url": self.github_env.workflow_run_url},
        )

        report = render_evaluation_report(result, self.rode.get_policy_name)
        self.logger.info(
            "Resource evaluation complete",
            evaluation_id=result.id,
            passed=result.passed,
            summary=render_summary_text(result, self.rode.get_policy_name),
        )

        comment = self._decorate_pull_request(report)

        return ActionResult(
            passed=result.passed,
            fail_build=self.config.enforce and not result.passed,
            evaluation_report=report,
            evaluation_id=result.id,
            comment=comment,
        )

    def _evaluate_policy(self) -> ActionResult:
        policy = self.config.policy_id or self.config.policy_name
        self.logger.info("Evaluating policy", policy=policy, resource_uri=self.config.resource_uri)
        passed = self.rode.evaluate_policy(
            self.config.resource_uri,
            policy_id=self.config.policy_id or None,
            policy_name=self.config.policy_name or None,
        )
        return ActionResult(
            passed=passed,
            fail_build=self.config.enforce and not passed,
            evaluation_report=render_policy_summary(policy, self.config.resource_uri, passed),
        )

    def _decorate_pull_request(self, report: str) -> Optional[CommentUpsert]:
        if not self.config.comment_on_pr:
            self.logger.info("Skipping pull request decoration", reason="disabled")
            return None

        pr_number = resolve_pull_request_number(
            self.github_env,
            self.config.pull_request_number,
            self.read_file,
        )
        if pr_number is None:
            self.logger.info("Skipping pull request decoration", event_name=self.github_env.event_name)
            return None

        if not self.github_env.repository:
            raise ConfigError("GITHUB_REPOSITORY is required to comment on pull requests")
        if self.github is None:
            raise ConfigError("github_token is required to comment on pull requests")

        self.logger.info("Decorating pull request", pr_number=pr_number)
        return upsert_pr_comment(self.github, pr_number, report, logger=self.logger)
