"""Decide between creating, updating or skipping the plan comment."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from plancomment_core.formatter import CommentBody
from plancomment_core.gh.comments import CommentClient
from plancomment_core.locator import ExistingComment

logger = logging.getLogger(__name__)

CREATED = "created"
UPDATED = "updated"
SKIPPED = "skipped"

NO_CHANGES_REASON = "no changes"


@dataclass(frozen=True)
class ReconciliationOutcome:
    action: str  # "created" | "updated" | "skipped"
    comment_id: int | None = None
    reason: str | None = None

    @classmethod
    def created(cls, comment_id: int) -> ReconciliationOutcome:
        return cls(action=CREATED, comment_id=comment_id)

    @classmethod
    def updated(cls, comment_id: int) -> ReconciliationOutcome:
        return cls(action=UPDATED, comment_id=comment_id)

    @classmethod
    def skipped(cls, reason: str) -> ReconciliationOutcome:
        return cls(action=SKIPPED, reason=reason)


class CommentReconciler:
    """Issues at most one remote write per run.

    Errors from the client (RemoteError) propagate untouched: retrying is the
    caller's business.
    """

    def __init__(self, client: CommentClient):
        self._client = client

    def reconcile(
        self,
        comment: CommentBody,
        existing: ExistingComment | None,
        skip_on_no_changes: bool,
        has_changes: bool,
    ) -> ReconciliationOutcome:
        # A comment left by an earlier run stays as it was; it is never deleted.
        if skip_on_no_changes and not has_changes:
            logger.info("Plan has no changes; skipping comment.")
            return ReconciliationOutcome.skipped(NO_CHANGES_REASON)

        body = comment.render()
        if existing is not None:
            self._client.update_comment(existing.id, body)
            logger.info("Updated plan comment %s.", existing.id)
            return ReconciliationOutcome.updated(existing.id)

        comment_id = self._client.create_comment(body)
        logger.info("Created plan comment %s.", comment_id)
        return ReconciliationOutcome.created(comment_id)
