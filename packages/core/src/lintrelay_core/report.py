"""Console report and issue-comment body for a finished linter run."""

from __future__ import annotations

from rich.console import Console

from lintrelay_core.config import RunConfig
from lintrelay_core.process import echo

DIVIDER = "=" * 100

console = Console()


def print_output(
    cfg: RunConfig,
    lines: list[str],
    out: Console | None = None,
    divider: str = DIVIDER,
) -> None:
    out = out or console
    echo(f"Run linter `{cfg.linter_display}` got {len(lines)} line outputs", out)
    echo(divider, out)
    echo(f"runner config: {cfg!r}", out)
    echo(divider, out)
    for line in lines:
        echo(line, out)
    echo(divider, out)
    echo(f"Report issue: {cfg.repo_url}/issues", out)


def split_comment_line(line: str, target: str) -> tuple[str, str]:
    """Split ``line`` into the remote code path and the surrounding text.

    The code path runs from ``target`` up to the next space. Returns
    ``("", line)`` when ``target`` does not occur in the line.
    """
    if not target:
        return "", line
    index = line.find(target)
    if index < 0:
        return "", line
    other = line[:index]
    tail = line[index:]
    space = tail.find(" ")
    if space < 0:
        return tail.strip(), other.strip()
    return tail[:space].strip(), (other + tail[space:]).strip()


def format_comment_line(line: str, target: str) -> str:
    code_path, other = split_comment_line(line, target)
    if not code_path:
        return line
    path_text = code_path.replace(target, "").lstrip("/:")
    return f"[{path_text}]({code_path}) {other}".rstrip()


def build_issue_comment(cfg: RunConfig, lines: list[str]) -> str:
    """Markdown body for the issue comment, findings folded in a details block."""
    parts = [
        f"Run `{cfg.linter_display}` on Repo: {cfg.repo_url}\n",
        "\n",
        f"Got total {len(lines)} line output in action: {cfg.action_link}\n",
        "<details>\n",
        "<summary>Expand</summary>\n\n",
    ]
    for i, line in enumerate(lines, start=1):
        parts.append(f"{i}. {format_comment_line(line, cfg.repo_target)}\n")
    parts.append("\n")
    parts.append("</details>\n\n")
    parts.append(f"Report issue: {cfg.repo_url}/issues\n")
    return "".join(parts)
