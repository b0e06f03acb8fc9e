from __future__ import annotations

import logging

from github import Github, GithubException

from lintrelay_core.config import ConfigError, RunConfig
from lintrelay_core.process import Deadline, run_command
from lintrelay_core.report import build_issue_comment

logger = logging.getLogger(__name__)


class CommentError(RuntimeError):
    """Posting the issue comment through the GitHub API failed."""


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_issue(repo, issue_id: str):
    try:
        number = int(issue_id)
    except ValueError:
        raise ConfigError(f"issue_id must be numeric for the api backend, got {issue_id!r}") from None
    return repo.get_issue(number)


def _comment_with_gh(cfg: RunConfig, body: str, deadline: Deadline | None) -> None:
    args = [*cfg.comment_command, cfg.issue_id, "--body", body]
    if cfg.issue_repo:
        args += ["--repo", cfg.issue_repo]
    run_command(args, cwd=".", deadline=deadline)


def _comment_with_api(cfg: RunConfig, body: str) -> None:
    if not cfg.github_token:
        raise ConfigError("The api comment backend needs GITHUB_TOKEN or a `gh auth login` session.")
    if not cfg.issue_repo:
        raise ConfigError("The api comment backend needs issue_repo (or GITHUB_REPOSITORY) to be set.")
    try:
        issue = get_issue(get_repo(cfg.issue_repo, token=cfg.github_token), cfg.issue_id)
        issue.create_comment(body)
    except GithubException as exc:
        raise CommentError(f"comment on {cfg.issue_repo}#{cfg.issue_id} failed: {exc}") from exc


def create_issue_comment(cfg: RunConfig, lines: list[str], deadline: Deadline | None = None) -> None:
    """Post the report for ``lines`` as a comment on the configured issue."""
    body = build_issue_comment(cfg, lines)
    logger.info("comment on issue #%s", cfg.issue_id)
    if cfg.comment_backend == "api":
        _comment_with_api(cfg, body)
    else:
        _comment_with_gh(cfg, body, deadline)
