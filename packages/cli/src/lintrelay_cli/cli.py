"""CLI entry point for lintrelay.

Commands:
  run   clone a repository, lint it, print the report and optionally comment on an issue
  init  write a starter .lintrelay.yml and GitHub Actions workflow
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from lintrelay_cli.commands.init import init_cmd
from lintrelay_cli.commands.run import run_cmd

console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("lintrelay"),
    prog_name="lintrelay",
)
@click.option(
    "--config",
    "config_path",
    default=".lintrelay.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="LINTRELAY_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Run a linter over a cloned repository and relay its findings."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(run_cmd)
main.add_command(init_cmd)
