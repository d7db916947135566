from __future__ import annotations

import os
import sys
import uuid
from pathlib import Path
from typing import Optional

from .action import EnforcerAction
from .config import EnforcerConfig, GitHubEnvironment, load_settings
from .constants import ExitCode
from .errors import EnforcerError
from .github import GitHubClient
from .logging import EnforcerLogger
from .models import ActionResult
from .publish import write_github_outputs, write_report_file, write_step_summary
from .rode import RodeClient


def main() -> int:
    """Run the action once and return the process exit code."""
    logger = EnforcerLogger(os.environ.get("GITHUB_RUN_ID") or str(uuid.uuid4()))

    try:
        config, github_env = load_settings()
        result = _run(config, github_env, logger)
    except EnforcerError as exc:
        logger.error(str(exc), error_type=type(exc).__name__)
        return int(exc.exit_code)
    except Exception as exc:
        # Exit code 1 means a failed policy evaluation, so anything unexpected maps to ERROR.
        logger.error(f"Unexpected error: {exc}", error_type=type(exc).__name__)
        return int(ExitCode.ERROR)

    return int(_exit_code(result, logger))


def _run(config: EnforcerConfig, github_env: GitHubEnvironment, logger: EnforcerLogger) -> ActionResult:
    token = config.github_token.get_secret_value()
    github: Optional[GitHubClient] = None
    if token:
        github = GitHubClient(token, github_env.repository, api_url=github_env.api_url)

    try:
        with RodeClient(
            config.rode_base_url,
            timeout=config.rode_timeout_seconds,
            logger=logger,
        ) as rode:
            action = EnforcerAction(config, github_env, rode, logger, github=github)
            with logger.stage("evaluate"):
                result = action.run()
    finally:
        if github is not None:
            github.session.close()

    report_path: Optional[Path] = None
    if config.write_report_file:
        report_path = write_report_file(result.evaluation_report)
        logger.info("Wrote evaluation report", path=str(report_path))

    write_step_summary(github_env.step_summary, result.evaluation_report)
    write_github_outputs(github_env.output, result, report_path=report_path)
    return result


def _exit_code(result: ActionResult, logger: EnforcerLogger) -> ExitCode:
    if result.fail_build:
        logger.error("Policy evaluation failed", evaluation_id=result.evaluation_id)
        return ExitCode.FAILED
    if not result.passed:
        logger.warning("Policy evaluation failed, not enforcing", evaluation_id=result.evaluation_id)
    else:
        logger.info("Policy evaluation passed", evaluation_id=result.evaluation_id)
    return ExitCode.SUCCESS


if __name__ == "__main__":
    sys.exit(main())
