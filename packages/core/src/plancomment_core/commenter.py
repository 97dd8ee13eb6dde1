"""End-to-end plan comment pipeline.

    read_plan() → format_comment() → client.list_comments() → find_comment()
                → CommentReconciler.reconcile() → one create/update call

Each stage feeds the next, so the run is a plain sequence of blocking calls.

Two runs on the same pull request that both find no existing comment will
each create one. Nothing here locks across runs; later runs converge on the
earliest of those comments because find_comment() takes the first match.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from plancomment_core.formatter import MAX_COMMENT_SIZE, CommentBody, format_comment
from plancomment_core.gh.comments import CommentClient
from plancomment_core.locator import find_comment
from plancomment_core.plan import read_plan
from plancomment_core.reconciler import CommentReconciler, ReconciliationOutcome

console = Console()
logger = logging.getLogger(__name__)


@dataclass
class CommentSummary:
    """What a run produced: the outcome plus the values exposed as run outputs.

    ``outcome`` is None in shadow mode, where nothing is sent to GitHub.
    """

    comment: CommentBody
    has_changes: bool
    outcome: ReconciliationOutcome | None = None

    @property
    def markdown(self) -> str:
        return self.comment.content


def build_comment(plan_path: str | Path, config: dict) -> tuple[CommentBody, bool]:
    """Read the plan and render its comment; returns (comment, has_changes)."""
    plan = read_plan(plan_path)
    budget = config.get("max_comment_size") or MAX_COMMENT_SIZE
    comment = format_comment(plan, header=config.get("header"), budget=budget)
    if comment.truncated:
        logger.warning("Plan output exceeded the %d character comment limit and was truncated.", budget)
    return comment, plan.has_changes


def print_shadow_comment(comment: CommentBody, has_changes: bool) -> None:
    """Print the comment that would be posted, without contacting GitHub."""
    state = "[yellow]changes[/yellow]" if has_changes else "[green]no changes[/green]"
    console.print(f"\n[bold]Shadow mode: plan has {state}, comment not posted[/bold]\n")
    console.print(escape(comment.render()), highlight=False, soft_wrap=True)


def run_plan_comment(
    plan_path: str | Path,
    config: dict,
    client: CommentClient | None = None,
    shadow: bool = False,
) -> CommentSummary:
    """Post or refresh the plan comment and return a CommentSummary.

    ``client`` may only be None in shadow mode. Raises ReadError, FormatError
    or RemoteError; no partial writes happen on failure.
    """
    comment, has_changes = build_comment(plan_path, config)

    if shadow:
        print_shadow_comment(comment, has_changes)
        return CommentSummary(comment=comment, has_changes=has_changes)

    if client is None:
        raise ValueError("A comment client is required unless running in shadow mode.")

    skip_on_no_changes = bool(config.get("skip_on_no_changes", False))
    reconciler = CommentReconciler(client)

    # Skipping never needs the comment listing.
    if skip_on_no_changes and not has_changes:
        outcome = reconciler.reconcile(comment, None, skip_on_no_changes, has_changes)
        return CommentSummary(comment=comment, has_changes=has_changes, outcome=outcome)

    existing = find_comment(client.list_comments(), comment.marker)
    outcome = reconciler.reconcile(comment, existing, skip_on_no_changes, has_changes)
    return CommentSummary(comment=comment, has_changes=has_changes, outcome=outcome)
