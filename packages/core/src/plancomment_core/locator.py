"""Find the comment a previous run posted for the same marker."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExistingComment:
    """A comment as returned by the remote listing. Never cached across runs."""

    id: int
    body: str | None


def has_marker(body: str | None, marker: str) -> bool:
    """Return True if a comment body carries the identity marker."""
    return bool(body) and marker in body


def find_comment(existing: Iterable[ExistingComment], marker: str) -> ExistingComment | None:
    """Return the earliest comment carrying ``marker``, or None.

    ``existing`` must be in creation order (oldest first), which is how the
    GitHub listing delivers it. Taking the first match means duplicates made
    by hand or by a create race are left alone and every later run keeps
    updating the same comment.
    """
    match = None
    duplicates = 0
    for comment in existing:
        if not has_marker(comment.body, marker):
            continue
        if match is None:
            match = comment
        else:
            duplicates += 1

    if duplicates:
        logger.warning(
            "Found %d additional comment(s) with the same marker; only comment %s will be updated.",
            duplicates,
            match.id,
        )
    return match
