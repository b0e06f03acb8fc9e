"""Line filtering and local-path to remote-link rewriting for linter output."""

from __future__ import annotations

from pathlib import Path


def include_line(includes: list[str], line: str) -> bool:
    if not includes:
        return True
    return any(v in line for v in includes)


def exclude_line(excludes: list[str], line: str) -> bool:
    if not excludes:
        return False
    return any(v in line for v in excludes)


def split_output(output: str) -> list[str]:
    """Split raw output into stripped, non-blank lines."""
    lines = []
    for line in output.split("\n"):
        line = line.strip()
        if line:
            lines.append(line)
    return lines


def filter_lines(lines: list[str], includes: list[str], excludes: list[str]) -> list[str]:
    """Keep lines matching an include (if any are set) and no exclude.

    Matching is plain, case-sensitive substring containment. Order is kept.
    """
    return [line for line in lines if include_line(includes, line) and not exclude_line(excludes, line)]


def build_target(repo_url: str, branch: str) -> str:
    """Browse-URL prefix for files on ``branch``, e.g. ``https://github.com/org/repo/blob/main``."""
    return f"{repo_url}/blob/{branch}"


def rewrite_links(
    lines: list[str],
    repo_dir: Path | str,
    repo_target: str,
    source_suffix: str = ".go",
) -> list[str]:
    """Turn local file locators into browsable links.

    ``/tmp/repo/main.go:10:5: msg`` becomes
    ``https://github.com/org/repo/blob/main/main.go#L10:5: msg``.
    The local path is replaced first so the anchor is applied to the remote path.
    """
    local = str(repo_dir)
    marker = f"{source_suffix}:" if source_suffix else ""
    anchor = f"{source_suffix}#L"

    rewritten = []
    for line in lines:
        if local and local in line:
            line = line.replace(local, repo_target)
        if marker and marker in line:
            line = line.replace(marker, anchor)
        rewritten.append(line)
    return rewritten
