"""GitHub Actions environment: default repo/PR and step outputs."""

from __future__ import annotations

import json
import logging
import os
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)


def detect_repo() -> str | None:
    return os.environ.get("GITHUB_REPOSITORY") or None


def detect_pr_number() -> int | None:
    """Read the pull request number from the Actions event payload, if any.

    Covers pull_request / pull_request_target events and issue_comment events
    raised on a pull request.
    """
    event_path = os.environ.get("GITHUB_EVENT_PATH")
    if not event_path or not Path(event_path).is_file():
        return None
    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read event payload %s: %s", event_path, e)
        return None

    if not isinstance(payload, dict):
        logger.warning("Event payload %s is not a JSON object", event_path)
        return None
    if isinstance(payload.get("pull_request"), dict) and payload["pull_request"].get("number"):
        return int(payload["pull_request"]["number"])
    issue = payload.get("issue")
    if isinstance(issue, dict) and "pull_request" in issue and issue.get("number"):
        return int(issue["number"])
    return None


def write_outputs(outputs: dict[str, str]) -> bool:
    """Append step outputs to $GITHUB_OUTPUT. Returns False outside Actions.

    Values go through the heredoc form so multi-line markdown survives.
    """
    output_path = os.environ.get("GITHUB_OUTPUT")
    if not output_path:
        return False
    with open(output_path, "a", encoding="utf-8") as f:
        for name, value in outputs.items():
            delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
    return True
