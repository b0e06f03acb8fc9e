"""run command: lint a cloned repository and relay the findings."""

from __future__ import annotations

import logging

import click

from lintrelay_core.config import ConfigError, RunConfig, load_config
from lintrelay_core.gh.issues import CommentError, create_issue_comment
from lintrelay_core.process import CommandError, Deadline
from lintrelay_core.report import print_output
from lintrelay_core.runner import SkipRepository, build, parse, prepare, run

logger = logging.getLogger(__name__)


def _overrides(**options) -> dict:
    """Map CLI options to config keys; unset options (None or empty) are dropped."""
    overrides = {}
    for key, value in options.items():
        if value is None or value == ():
            continue
        overrides[key] = list(value) if isinstance(value, tuple) else value
    return overrides


@click.command("run")
@click.option("--repo", "repo_url", default=None, help="Repository URL, e.g. https://github.com/owner/name.")
@click.option("--workdir", default=None, help="Directory the repository is cloned into.")
@click.option("--linter", "linter_command", default=None, help="Linter command; the scan target is appended.")
@click.option("--install", "install_command", default=None, help="Command that installs the linter.")
@click.option("--include", "includes", multiple=True, help="Keep only lines containing this text. Repeatable.")
@click.option("--exclude", "excludes", multiple=True, help="Drop lines containing this text. Repeatable.")
@click.option("--collect-stderr/--no-collect-stderr", default=None, help="Also parse the linter's stderr.")
@click.option("--issue", "issue_id", default=None, help="Issue number to comment on.")
@click.option("--comment/--no-comment", default=None, help="Post the report as an issue comment.")
@click.option("--exit-fail/--no-exit-fail", default=None, help="Exit 1 when the linter reported anything.")
@click.option("--build/--no-build", "build_first", default=None, help="Build the repository before linting.")
@click.option("--timeout", default=None, help="Deadline for the whole run, e.g. 600, 90s or 10m.")
@click.pass_context
def run_cmd(
    ctx,
    repo_url: str | None,
    workdir: str | None,
    linter_command: str | None,
    install_command: str | None,
    includes: tuple[str, ...],
    excludes: tuple[str, ...],
    collect_stderr: bool | None,
    issue_id: str | None,
    comment: bool | None,
    exit_fail: bool | None,
    build_first: bool | None,
    timeout: str | None,
):
    """Clone a repository, run a linter on it and report the findings.

    Lines that mention the local clone are rewritten into links to the
    repository's files on the checked-out branch.

    \b
    Exit status:
      0  findings printed, nothing to report, repository skipped, or a step failed
      1  findings printed and exit_fail is set
    """
    from lintrelay_cli.auth import resolve_github_token

    config_path = (ctx.obj or {}).get("config_path", ".lintrelay.yml")
    overrides = _overrides(
        repo_url=repo_url,
        workdir=workdir,
        linter_command=linter_command,
        install_command=install_command,
        includes=includes,
        excludes=excludes,
        collect_stderr=collect_stderr,
        issue_id=issue_id,
        comment=comment,
        exit_fail=exit_fail,
        build=build_first,
        timeout=timeout,
    )
    try:
        config = load_config(config_path, cli_overrides=overrides)
        if config.get("comment_backend") == "api" and not config.get("github_token"):
            config["github_token"] = resolve_github_token()
        cfg = RunConfig.from_config(config)
    except ConfigError as exc:
        raise click.UsageError(str(exc)) from exc

    deadline = Deadline(cfg.timeout)

    try:
        prepare(cfg, deadline)
    except SkipRepository as exc:
        logger.info("%s", exc)
        return
    except (CommandError, OSError) as exc:
        logger.error("failed in prepare linter: %s", exc)
        return

    if cfg.build:
        try:
            build(cfg, deadline)
        except CommandError as exc:
            logger.error("failed in build repo: %s", exc)
            return

    try:
        lines = run(cfg, deadline)
    except CommandError as exc:
        logger.error("failed in run linter: %s", exc)
        return
    if not lines:
        logger.info("no valid output after run")
        return

    lines = parse(cfg, lines)
    print_output(cfg, lines)

    if cfg.should_comment:
        try:
            create_issue_comment(cfg, lines, deadline)
        except (CommandError, CommentError, ConfigError) as exc:
            logger.error("failed to create issue comment: %s", exc)
            return

    if cfg.exit_fail:
        ctx.exit(1)
