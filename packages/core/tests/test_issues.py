"""Tests for posting the report as an issue comment."""

from unittest.mock import MagicMock

import pytest
from github import GithubException

from lintrelay_core.config import ConfigError, RunConfig
from lintrelay_core.gh.issues import CommentError, create_issue_comment
from lintrelay_core.process import CommandError

LINES = ["https://github.com/org/repo/blob/main/a.go#L1:2: msg"]


def make_cfg(**overrides) -> RunConfig:
    config = {
        "repo_url": "https://github.com/org/repo",
        "workdir": "/tmp",
        "linter_command": "staticcheck",
        "issue_id": "42",
        "comment": True,
    }
    config.update(overrides)
    cfg = RunConfig.from_config(config)
    cfg.repo_target = "https://github.com/org/repo/blob/main"
    return cfg


class TestGhBackend:
    def test_runs_gh_issue_comment(self, mocker):
        mock_run = mocker.patch("lintrelay_core.gh.issues.run_command", return_value="")

        create_issue_comment(make_cfg(), LINES)

        args = mock_run.call_args.args[0]
        assert args[:4] == ["gh", "issue", "comment", "42"]
        assert args[4] == "--body"
        assert "[a.go#L1:2:](" in args[5]
        assert mock_run.call_args.kwargs["cwd"] == "."

    def test_issue_repo_passed_when_set(self, mocker):
        mock_run = mocker.patch("lintrelay_core.gh.issues.run_command", return_value="")

        create_issue_comment(make_cfg(issue_repo="me/tracker"), LINES)

        assert mock_run.call_args.args[0][-2:] == ["--repo", "me/tracker"]

    def test_failure_propagates(self, mocker):
        mocker.patch("lintrelay_core.gh.issues.run_command", side_effect=CommandError(["gh"], "exit status 1"))
        with pytest.raises(CommandError):
            create_issue_comment(make_cfg(), LINES)


class TestApiBackend:
    def test_creates_comment_through_pygithub(self, mocker):
        repo = MagicMock()
        mock_get_repo = mocker.patch("lintrelay_core.gh.issues.get_repo", return_value=repo)
        cfg = make_cfg(comment_backend="api", issue_repo="me/tracker", github_token="tok")

        create_issue_comment(cfg, LINES)

        mock_get_repo.assert_called_once_with("me/tracker", token="tok")
        repo.get_issue.assert_called_once_with(42)
        body = repo.get_issue.return_value.create_comment.call_args.args[0]
        assert body.startswith("Run `staticcheck` on Repo: https://github.com/org/repo")

    def test_requires_token(self):
        cfg = make_cfg(comment_backend="api", issue_repo="me/tracker", github_token=None)
        with pytest.raises(ConfigError, match="GITHUB_TOKEN"):
            create_issue_comment(cfg, LINES)

    def test_requires_issue_repo(self):
        cfg = make_cfg(comment_backend="api", issue_repo=None, github_token="tok")
        with pytest.raises(ConfigError, match="issue_repo"):
            create_issue_comment(cfg, LINES)

    def test_non_numeric_issue_rejected(self, mocker):
        mocker.patch("lintrelay_core.gh.issues.get_repo", return_value=MagicMock())
        cfg = make_cfg(comment_backend="api", issue_repo="me/tracker", github_token="tok", issue_id="abc")
        with pytest.raises(ConfigError):
            create_issue_comment(cfg, LINES)

    def test_github_exception_wrapped(self, mocker):
        repo = MagicMock()
        repo.get_issue.side_effect = GithubException(404, {"message": "Not Found"}, None)
        mocker.patch("lintrelay_core.gh.issues.get_repo", return_value=repo)
        cfg = make_cfg(comment_backend="api", issue_repo="me/tracker", github_token="tok")

        with pytest.raises(CommentError, match="me/tracker#42"):
            create_issue_comment(cfg, LINES)
