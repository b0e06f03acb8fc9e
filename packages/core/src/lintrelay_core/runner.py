"""Linter pipeline: prepare the clone, optionally build, run the linter, rewrite its output."""

from __future__ import annotations

import logging
import shutil

from rich.console import Console

from lintrelay_core.config import RunConfig
from lintrelay_core.process import CommandError, Deadline, capture_command, echo, run_command
from lintrelay_core.utils.lines import build_target, filter_lines, rewrite_links, split_output

console = Console()
logger = logging.getLogger(__name__)


class SkipRepository(Exception):
    """The clone is not a project this runner knows how to lint.

    Not a failure: the caller logs it and exits cleanly.
    """


def prepare(cfg: RunConfig, deadline: Deadline | None = None) -> None:
    """Install the linter, clone the repo and resolve its browse-URL prefix.

    Raises SkipRepository when the manifest file is missing from the clone,
    CommandError when any command fails.
    """
    if cfg.install_command:
        run_command(cfg.install_command, cwd=cfg.workdir, deadline=deadline)
    else:
        logger.info("No install command configured, assuming the linter is on PATH")

    if cfg.repo_dir.exists():
        logger.info("Removing existing clone at %s", cfg.repo_dir)
        shutil.rmtree(cfg.repo_dir)
    run_command(["git", "clone", cfg.repo_url, str(cfg.repo_dir)], cwd=cfg.workdir, deadline=deadline)

    manifest = cfg.repo_dir / cfg.manifest_file
    if not manifest.is_file():
        raise SkipRepository(f"skip this repo for no {cfg.manifest_file} file exists")

    if cfg.download_command:
        run_command(cfg.download_command, cwd=cfg.repo_dir, deadline=deadline)

    args = ["git", "branch", "--show-current"]
    result = capture_command(args, cwd=cfg.repo_dir, deadline=deadline)
    if result.returncode != 0:
        raise CommandError(args, f"git branch failed: {result.stderr.strip()}", returncode=result.returncode)
    cfg.repo_branch = result.stdout.strip()
    cfg.repo_target = build_target(cfg.repo_url, cfg.repo_branch)
    logger.info("Resolved branch %r, links point to %s", cfg.repo_branch, cfg.repo_target)


def build(cfg: RunConfig, deadline: Deadline | None = None) -> None:
    """Compile the clone so broken builds surface before lint output is trusted."""
    run_command(cfg.build_command, cwd=cfg.repo_dir, deadline=deadline)


def run(cfg: RunConfig, deadline: Deadline | None = None) -> list[str]:
    """Run the linter over the clone and return its filtered output lines.

    Linters usually exit non-zero when they report findings, so a failing run
    is only an error when it wrote nothing to stdout.
    """
    args = list(cfg.linter_command)
    if cfg.scan_target:
        args.append(cfg.scan_target)

    result = capture_command(args, cwd=cfg.repo_dir, deadline=deadline)
    stdout = result.stdout or ""
    stderr = result.stderr or ""
    if result.returncode != 0:
        logger.info("run %s got exit status %d", args, result.returncode)
        echo(f"stdout:\n{stdout}", console)
        echo(f"stderr:\n{stderr}", console)
        if not stdout:
            raise CommandError(args, f"exit status {result.returncode}", returncode=result.returncode)

    output = stdout
    if cfg.collect_stderr:
        output = output + "\n" + stderr

    output = output.strip()
    if not output:
        return []

    return filter_lines(split_output(output), cfg.includes, cfg.excludes)


def parse(cfg: RunConfig, lines: list[str]) -> list[str]:
    """Rewrite local paths in ``lines`` into links under ``cfg.repo_target``."""
    return rewrite_links(lines, cfg.repo_dir, cfg.repo_target, cfg.source_suffix)
