"""Subprocess boundary shared by every pipeline stage.

All external commands (installer, git, go, the linter, gh) go through the two
helpers here so that a single deadline bounds the whole run: each call gets
whatever time is left, and ``subprocess.run`` kills the child when it runs out.
"""

from __future__ import annotations

import logging
import subprocess
import time
from pathlib import Path

from rich.console import Console

logger = logging.getLogger(__name__)

console = Console()


class CommandError(RuntimeError):
    """An external command could not be run or exited non-zero."""

    def __init__(self, args: list[str], message: str, returncode: int | None = None):
        self.args_list = list(args)
        self.returncode = returncode
        super().__init__(f"run {self.args_list[0] if self.args_list else ''} {self.args_list} failed: {message}")


class CommandTimeout(CommandError):
    """The deadline elapsed before the command finished."""


class Deadline:
    def __init__(self, seconds: float):
        self.seconds = seconds
        self._expires_at = time.monotonic() + seconds

    def remaining(self) -> float:
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    def __repr__(self) -> str:
        return f"Deadline(seconds={self.seconds}, remaining={self.remaining():.1f})"


def echo(text: str, out: Console | None = None) -> None:
    """Write ``text`` and a newline to the console's file untouched.

    Bypasses Rich rendering, which would expand tabs and drop control
    characters from linter output.
    """
    stream = (out or console).file
    stream.write(text + "\n")
    stream.flush()


def _check_deadline(args: list[str], deadline: Deadline | None) -> float | None:
    if deadline is None:
        return None
    if deadline.expired:
        raise CommandTimeout(args, f"deadline of {deadline.seconds:g}s exceeded before start")
    return deadline.remaining()


def capture_command(args: list[str], cwd: Path | str, deadline: Deadline | None = None) -> subprocess.CompletedProcess:
    """Run a command capturing stdout and stderr separately.

    A non-zero exit is reported through ``returncode``, not raised: the caller
    decides whether the output is still usable.
    """
    if not args:
        raise CommandError(args, "empty command")
    timeout = _check_deadline(args, deadline)
    logger.debug("run %s in %s", args, cwd)
    try:
        return subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise CommandTimeout(args, f"timed out after {exc.timeout:.0f}s") from exc
    except OSError as exc:
        raise CommandError(args, str(exc)) from exc


def run_command(
    args: list[str],
    cwd: Path | str,
    deadline: Deadline | None = None,
    out: Console | None = None,
) -> str:
    """Run a command with stdout and stderr combined and print what it wrote.

    Raises CommandError on a non-zero exit.
    """
    if not args:
        raise CommandError(args, "empty command")
    out = out or console
    timeout = _check_deadline(args, deadline)
    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise CommandTimeout(args, f"timed out after {exc.timeout:.0f}s") from exc
    except OSError as exc:
        raise CommandError(args, str(exc)) from exc

    output = result.stdout or ""
    logger.info("run %s got len(output)=%d and exit status %d", args, len(output), result.returncode)
    echo(output, out)
    if result.returncode != 0:
        raise CommandError(args, f"exit status {result.returncode}", returncode=result.returncode)
    return output
