"""Error taxonomy for a plan-comment run.

Every failure is terminal for the run: nothing here is retried internally.
The CLI catches PlanCommentError and turns it into a single-line message.
"""

from __future__ import annotations


class PlanCommentError(Exception):
    """Base class for all plancomment failures."""


class ReadError(PlanCommentError):
    """The plan file is missing or cannot be read."""

    def __init__(self, path: str, cause: Exception | None = None):
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Could not read plan file {path}{detail}")


class FormatError(PlanCommentError):
    """The plan content cannot be interpreted as plan output."""


class RemoteError(PlanCommentError):
    """A call to the comment API failed.

    ``operation`` is one of ``"connect"`` (repository lookup), ``"list"``,
    ``"create"`` or ``"update"``.
    """

    _ACTIONS = {
        "connect": "open the repository for pull request comments",
        "list": "list pull request comments",
        "create": "create pull request comment",
        "update": "update pull request comment",
    }

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        action = self._ACTIONS.get(operation, f"{operation} pull request comment")
        super().__init__(f"Failed to {action}{detail}")
