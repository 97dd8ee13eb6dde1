"""GitHub token lookup for the comment command.

Resolution order (stops at first success):
  1. GITHUB_TOKEN, then GH_TOKEN (GitHub Actions / explicit override)
  2. `gh auth token` (local GitHub CLI session)
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

_TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")


def resolve_github_token() -> str | None:
    """Return a GitHub token, or None when no source provides one.

    Never raises: the caller decides whether a missing token is an error
    (shadow mode and `render` do not need one).
    """
    for name in _TOKEN_ENV_VARS:
        token = os.environ.get(name)
        if token:
            return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None

    token = result.stdout.strip() if result.returncode == 0 else ""
    if token:
        logger.debug("Using GitHub token from the gh CLI session.")
        return token
    return None
