from __future__ import annotations

import os
import re
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "repo_url": None,
    "workdir": ".",
    "install_command": [],  # e.g. "go install honnef.co/go/tools/cmd/staticcheck@latest"
    "linter_command": None,  # e.g. "staticcheck"; the scan target is appended
    "download_command": ["go", "mod", "download"],
    "build_command": ["go", "build", "./..."],
    "comment_command": ["gh", "issue", "comment"],
    "comment_backend": "gh",  # "gh" shells out to the GitHub CLI, "api" uses PyGithub
    "manifest_file": "go.mod",
    "scan_target": "./...",
    "source_suffix": ".go",
    "includes": [],  # plain substrings, a line must contain one of them
    "excludes": [],  # plain substrings, a line containing any of them is dropped
    "collect_stderr": False,
    "build": False,
    "issue_id": None,
    "issue_repo": None,  # owner/name of the repo holding the issue; defaults to GITHUB_REPOSITORY
    "comment": False,
    "exit_fail": False,
    "timeout": 600,
}

_LIST_KEYS = (
    "install_command",
    "download_command",
    "build_command",
    "comment_command",
    "includes",
    "excludes",
)

_TRUE_STRINGS = {"true", "yes", "y", "on", "1"}
_FALSE_STRINGS = {"false", "no", "n", "off", "0", ""}

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1, "m": 60, "h": 3600, None: 1}


class ConfigError(ValueError):
    """Raised when the runner configuration is missing or malformed."""


def load_config(config_path: str = ".lintrelay.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .lintrelay.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG}
    for key in _LIST_KEYS:
        config[key] = list(DEFAULT_CONFIG[key])

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ConfigError(f"{config_path} must contain a mapping, got {type(file_config).__name__}")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Values supplied by the CI environment
    config["action_link"] = os.environ.get("GH_ACTION_LINK", "")
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    if not config.get("issue_repo"):
        config["issue_repo"] = os.environ.get("GITHUB_REPOSITORY") or None

    return config


def split_command(value) -> list[str]:
    """Return a command as an argument list.

    Lists are taken verbatim; strings are tokenised with shell quoting rules
    so that ``golangci-lint run --out-format "line-number"`` keeps its quoted
    argument intact.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return shlex.split(value)
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    raise ConfigError(f"Expected a command string or list, got {value!r}")


def string_list(value) -> list[str]:
    """Normalise an include/exclude filter to a list of non-empty strings.

    CI action inputs only deliver strings, so a string is split on newlines
    and commas.
    """
    if value is None:
        return []
    if isinstance(value, str):
        items = re.split(r"[\n,]", value)
    elif isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        raise ConfigError(f"Expected a string or list of strings, got {value!r}")
    return [item.strip() for item in items if item.strip()]


def as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ConfigError(f"Cannot interpret {value!r} as a boolean")


def parse_timeout(value, default: float = 600) -> float:
    """Return a timeout in seconds from a number or a duration like ``10m``."""
    if value is None or value == "":
        return float(default)
    if isinstance(value, bool):
        raise ConfigError(f"Invalid timeout: {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        match = _DURATION_RE.match(str(value))
        if not match:
            raise ConfigError(f"Invalid timeout: {value!r}")
        seconds = float(match.group(1)) * _DURATION_UNITS[match.group(2)]
    if seconds <= 0:
        raise ConfigError(f"Timeout must be positive, got {value!r}")
    return seconds


def _issue_id(value) -> str:
    if value is None or isinstance(value, bool):
        return ""
    text = str(value).strip().lstrip("#")
    return "" if text in ("", "0") else text


def _repo_name(repo_url: str) -> str:
    name = repo_url.rsplit("/", 1)[-1]
    if not name:
        raise ConfigError(f"Cannot derive a directory name from repo_url {repo_url!r}")
    return name


@dataclass
class RunConfig:
    """Resolved settings for one linter run.

    Built once from the merged config dict. Only ``repo_branch`` and
    ``repo_target`` change afterwards, when preparation discovers the
    checked-out branch.
    """

    repo_url: str
    workdir: Path
    repo_dir: Path
    linter_command: list[str]
    install_command: list[str] = field(default_factory=list)
    download_command: list[str] = field(default_factory=list)
    build_command: list[str] = field(default_factory=list)
    comment_command: list[str] = field(default_factory=list)
    comment_backend: str = "gh"
    manifest_file: str = "go.mod"
    scan_target: str = "./..."
    source_suffix: str = ".go"
    includes: list[str] = field(default_factory=list)
    excludes: list[str] = field(default_factory=list)
    collect_stderr: bool = False
    build: bool = False
    issue_id: str = ""
    issue_repo: Optional[str] = None
    comment: bool = False
    exit_fail: bool = False
    timeout: float = 600.0
    action_link: str = ""
    repo_branch: str = ""
    repo_target: str = ""
    github_token: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_config(cls, config: dict) -> "RunConfig":
        repo_url = config.get("repo_url") or ""
        if not isinstance(repo_url, str):
            raise ConfigError(f"repo_url must be a URL string, got {repo_url!r}")
        repo_url = repo_url.strip()
        if not repo_url:
            raise ConfigError("repo_url is required")
        repo_url = repo_url.rstrip("/")
        if repo_url.endswith(".git"):
            repo_url = repo_url[: -len(".git")]

        linter_command = split_command(config.get("linter_command"))
        if not linter_command:
            raise ConfigError("linter_command is required")

        backend = config.get("comment_backend") or "gh"
        if backend not in ("gh", "api"):
            raise ConfigError(f"Unknown comment_backend: {backend!r}. Choose 'gh' or 'api'.")

        workdir = Path(config.get("workdir") or ".").expanduser().resolve()
        return cls(
            repo_url=repo_url,
            workdir=workdir,
            repo_dir=workdir / _repo_name(repo_url),
            linter_command=linter_command,
            install_command=split_command(config.get("install_command")),
            download_command=split_command(config.get("download_command", DEFAULT_CONFIG["download_command"])),
            build_command=split_command(config.get("build_command", DEFAULT_CONFIG["build_command"])),
            comment_command=split_command(config.get("comment_command", DEFAULT_CONFIG["comment_command"])),
            comment_backend=backend,
            manifest_file=config.get("manifest_file") or "go.mod",
            scan_target=config.get("scan_target", "./...") or "",
            source_suffix=config.get("source_suffix", ".go") or "",
            includes=string_list(config.get("includes")),
            excludes=string_list(config.get("excludes")),
            collect_stderr=as_bool(config.get("collect_stderr")),
            build=as_bool(config.get("build")),
            issue_id=_issue_id(config.get("issue_id")),
            issue_repo=config.get("issue_repo") or None,
            comment=as_bool(config.get("comment")),
            exit_fail=as_bool(config.get("exit_fail")),
            timeout=parse_timeout(config.get("timeout")),
            action_link=config.get("action_link") or "",
            github_token=config.get("github_token"),
        )

    @property
    def linter_display(self) -> str:
        return shlex.join(self.linter_command)

    @property
    def should_comment(self) -> bool:
        return self.comment and bool(self.issue_id)
