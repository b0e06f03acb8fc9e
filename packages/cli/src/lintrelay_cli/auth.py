"""GitHub token lookup for the ``api`` comment backend.

The default ``gh`` backend never needs this: the GitHub CLI authenticates
itself from GH_TOKEN or its own session.
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

_TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")


def _token_from_gh() -> str | None:
    try:
        result = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, timeout=5)
    except (FileNotFoundError, subprocess.TimeoutExpired):
        logger.debug("gh CLI unavailable for token lookup.")
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def resolve_github_token() -> str | None:
    """Return the first token found in the environment or the gh CLI session, else None."""
    for name in _TOKEN_ENV_VARS:
        token = os.environ.get(name)
        if token:
            return token

    token = _token_from_gh()
    if token:
        logger.debug("Resolved GitHub token via gh CLI session.")
    return token
