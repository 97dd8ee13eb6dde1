"""Read plan output and work out whether it proposes any changes.

Two inputs are understood:
  - human-readable plan text, as printed by ``terraform plan`` or
    ``terraform show`` (colour codes are stripped)
  - a JSON plan, as printed by ``terraform show -json``

Saved binary plans are rejected with a FormatError: they must be rendered with
``terraform show`` first (the CLI's ``--plan-file`` option does that).
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from plancomment_core.errors import FormatError, ReadError

logger = logging.getLogger(__name__)

NO_CHANGES_TEXT = "No changes."

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")
_ZIP_MAGIC = b"PK\x03\x04"

# "# aws_instance.web will be created", "# module.db.aws_db_instance.main must be replaced"
_RESOURCE_HEADER_RE = re.compile(
    r"^\s*# \S+.*\b(will be created|will be updated in-place|will be destroyed|will be replaced|must be replaced)",
    re.MULTILINE,
)
_PLAN_SUMMARY_RE = re.compile(r"^\s*Plan:.*$", re.MULTILINE)
_SUMMARY_COUNT_RE = re.compile(r"(\d+) to (add|change|destroy)")
_DIFF_ACTION_RE = re.compile(r"^\s*(-/\+|\+/-|[+~-])\s+\S")
_PLAN_START_MARKER = "Terraform used the selected providers to generate the following execution"
_OUTPUTS_SECTION = "Changes to Outputs:"

# JSON plan actions → (diff symbol, verb). Replacements arrive as two actions.
_ACTION_SYMBOLS = {
    ("create",): ("+", "create"),
    ("update",): ("~", "update"),
    ("delete",): ("-", "delete"),
    ("delete", "create"): ("-/+", "replace"),
    ("create", "delete"): ("+/-", "replace"),
}


@dataclass(frozen=True)
class PlanResult:
    """Plan output ready for formatting, plus the has-changes signal."""

    raw_markdown: str
    has_changes: bool


def read_plan(path: str | Path) -> PlanResult:
    """Read a plan file and return its text and has-changes signal.

    Raises ReadError when the file cannot be read and FormatError when its
    content is not plan output.
    """
    p = Path(path)
    try:
        data = p.read_bytes()
    except OSError as e:
        raise ReadError(str(path), e) from e

    if data.startswith(_ZIP_MAGIC):
        raise FormatError(
            f"{path} is a saved binary plan. Render it with `terraform show` (or pass it via --plan-file) first."
        )
    if b"\x00" in data:
        raise FormatError(f"{path} contains binary data and is not plan output.")
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise FormatError(f"{path} is not valid UTF-8 text: {e}") from e

    text = _ANSI_RE.sub("", text)
    if text.lstrip().startswith("{"):
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise FormatError(f"{path} looks like JSON but could not be parsed: {e}") from e
        result = parse_plan_json(document)
    else:
        result = parse_plan_text(text)

    logger.debug("Read plan from %s (has_changes=%s, %d chars)", path, result.has_changes, len(result.raw_markdown))
    return result


def parse_plan_text(text: str) -> PlanResult:
    """Interpret human-readable plan output.

    Init and refresh noise before the execution plan header is dropped so the
    comment starts at the part reviewers care about.
    """
    start = text.find(_PLAN_START_MARKER)
    if start != -1:
        line_start = text.rfind("\n", 0, start) + 1
        text = text[line_start:]
    body = text.strip("\n").rstrip()
    return PlanResult(raw_markdown=body, has_changes=_text_has_changes(body))


def _text_has_changes(text: str) -> bool:
    # The "Plan:" summary is authoritative when present.
    summaries = _PLAN_SUMMARY_RE.findall(text)
    if summaries:
        counts = [int(n) for line in summaries for n, _ in _SUMMARY_COUNT_RE.findall(line)]
        return any(counts)

    if _RESOURCE_HEADER_RE.search(text):
        return True
    if NO_CHANGES_TEXT in text:
        return False

    for line in text.splitlines():
        if line.strip() == _OUTPUTS_SECTION:
            break  # output-only changes are not resource actions
        if _DIFF_ACTION_RE.match(line):
            return True
    return False


def parse_plan_json(document) -> PlanResult:
    """Interpret a ``terraform show -json`` document.

    The comment text is a diff-style line per changed resource followed by a
    ``Plan:`` summary, mirroring what the human-readable output would show.
    """
    if not isinstance(document, dict) or not ({"format_version", "resource_changes"} & document.keys()):
        raise FormatError("JSON document is not a Terraform plan (no format_version or resource_changes).")

    resource_changes = document.get("resource_changes") or []
    if not isinstance(resource_changes, list):
        raise FormatError("Terraform plan field 'resource_changes' must be a list.")

    lines: list[str] = []
    to_add = to_change = to_destroy = 0
    for rc in resource_changes:
        if not isinstance(rc, dict):
            raise FormatError("Terraform plan 'resource_changes' entries must be objects.")
        address = rc.get("address", "<unknown>")
        change = rc.get("change") or {}
        if not isinstance(change, dict):
            raise FormatError(f"Terraform plan entry {address!r} has a malformed 'change' field.")
        actions = change.get("actions") or []
        if not isinstance(actions, list) or not all(isinstance(a, str) for a in actions):
            raise FormatError(f"Terraform plan entry {address!r} must list its actions as strings.")
        actions = tuple(actions)
        symbol = _ACTION_SYMBOLS.get(actions)
        if symbol is None:
            continue  # no-op, read
        sign, verb = symbol
        lines.append(f"{sign} {address} ({verb})")
        if "create" in actions:
            to_add += 1
        if "update" in actions:
            to_change += 1
        if "delete" in actions:
            to_destroy += 1

    if not lines:
        return PlanResult(raw_markdown=NO_CHANGES_TEXT, has_changes=False)

    lines.append("")
    lines.append(f"Plan: {to_add} to add, {to_change} to change, {to_destroy} to destroy.")
    return PlanResult(raw_markdown="\n".join(lines), has_changes=True)
