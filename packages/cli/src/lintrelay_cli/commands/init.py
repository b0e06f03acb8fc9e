"""init command: write a starter config and GitHub Actions workflow.

The workflow is triggered by hand (workflow_dispatch) with the repository to
lint and the issue to report on, which is how the runner is driven in CI:
one issue per linter, one comment per repository scanned.
"""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console

console = Console()

_CONFIG_PATH = Path(".lintrelay.yml")
_WORKFLOW_PATH = Path(".github/workflows/lintrelay.yml")

_WORKFLOW_TEMPLATE = """\
name: Lint Relay

on:
  workflow_dispatch:
    inputs:
      repo_url:
        description: "Repository to lint, e.g. https://github.com/owner/name"
        required: true
      issue_id:
        description: "Issue to comment on"
        required: false
        default: ""

jobs:
  lint:
    runs-on: ubuntu-latest
    timeout-minutes: 30
    permissions:
      contents: read
      issues: write

    steps:
      - uses: actions/checkout@v4

      - name: Set up Go
        uses: actions/setup-go@v5
        with:
          go-version: "stable"

      - name: Set up Python
        uses: actions/setup-python@v5
        with:
          python-version: "3.12"

      - name: Install lintrelay
        run: pip install "lintrelay=={version}"

      - name: Run linter
        env:
          GH_TOKEN: ${{{{ secrets.GITHUB_TOKEN }}}}
          GH_ACTION_LINK: ${{{{ github.server_url }}}}/${{{{ github.repository }}}}/actions/runs/${{{{ github.run_id }}}}
        run: |
          lintrelay run \\
            --repo "${{{{ inputs.repo_url }}}}" \\
            --issue "${{{{ inputs.issue_id }}}}" \\
            --workdir "${{{{ runner.temp }}}}"
"""


@click.command("init")
@click.option("--linter", "linter_command", default=None, help="Linter command, e.g. 'staticcheck'.")
@click.option("--install", "install_command", default=None, help="Command that installs the linter.")
@click.option("--workflow/--no-workflow", default=None, help="Generate a GitHub Actions workflow.")
@click.option("--force", is_flag=True, help="Overwrite an existing workflow file.")
def init_cmd(linter_command: str | None, install_command: str | None, workflow: bool | None, force: bool):
    """Create .lintrelay.yml and, optionally, a GitHub Actions workflow."""
    console.print("\n[bold cyan]lintrelay init[/bold cyan]: runner setup\n")

    if linter_command is None:
        linter_command = click.prompt("Linter command (the scan target is appended)", default="go vet")
    if install_command is None:
        install_command = click.prompt("Install command (leave empty if the linter is on PATH)", default="")

    config: dict = {"linter_command": linter_command}
    if install_command:
        config["install_command"] = install_command
    config["comment"] = True
    config["exit_fail"] = False

    _write_config(config)
    console.print(f"[green]Wrote {_CONFIG_PATH}[/green]")

    if workflow is None:
        workflow = click.confirm(f"\nGenerate {_WORKFLOW_PATH} for GitHub Actions?", default=True)
    if workflow:
        if _WORKFLOW_PATH.exists() and not force:
            raise click.ClickException(f"{_WORKFLOW_PATH} already exists. Pass --force to overwrite it.")
        _write_workflow()
        console.print(f"[green]Created {_WORKFLOW_PATH}[/green]")

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Lint a repository with: [bold]lintrelay run --repo https://github.com/<owner>/<name>[/bold]")


def _write_config(config: dict) -> None:
    """Write or update .lintrelay.yml, preserving any existing keys."""
    existing: dict = {}
    if _CONFIG_PATH.exists():
        existing = yaml.safe_load(_CONFIG_PATH.read_text()) or {}
    existing.update(config)
    _CONFIG_PATH.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))


def _get_version() -> str:
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("lintrelay")
    except PackageNotFoundError:
        return "0.1.0"


def _write_workflow() -> None:
    _WORKFLOW_PATH.parent.mkdir(parents=True, exist_ok=True)
    _WORKFLOW_PATH.write_text(_WORKFLOW_TEMPLATE.format(version=_get_version()))
