"""Pull request comment API.

The reconciler depends on CommentClient, not on PyGithub, so tests and other
hosting platforms can supply their own implementation. GitHubCommentClient
talks to the issue-comment endpoints (pull request conversation comments,
not inline review comments).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import requests
from github import Github, GithubException

from plancomment_core.errors import RemoteError
from plancomment_core.locator import ExistingComment

logger = logging.getLogger(__name__)

_REMOTE_ERRORS = (GithubException, requests.RequestException)


class CommentClient(ABC):
    """Remote comment store scoped to one pull request.

    Implementations raise RemoteError (with the operation name) on failure
    and never retry.
    """

    @abstractmethod
    def list_comments(self) -> list[ExistingComment]:
        """Return all comments on the pull request, oldest first."""

    @abstractmethod
    def create_comment(self, body: str) -> int:
        """Create a comment and return its id."""

    @abstractmethod
    def update_comment(self, comment_id: int, body: str) -> None:
        """Replace the body of an existing comment."""


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


class GitHubCommentClient(CommentClient):
    """CommentClient backed by PyGithub.

    The pull request is fetched on first use. PyGithub's paginated listing
    yields comments in creation order across every page.
    """

    def __init__(self, repo, pr_number: int):
        self._repo = repo
        self.pr_number = pr_number
        self._pr = None

    @classmethod
    def from_token(cls, repo_name: str, pr_number: int, token: str) -> GitHubCommentClient:
        try:
            return cls(get_repo(repo_name, token), pr_number)
        except _REMOTE_ERRORS as e:
            raise RemoteError("connect", e) from e

    def _pull(self):
        if self._pr is None:
            self._pr = self._repo.get_pull(self.pr_number)
        return self._pr

    def list_comments(self) -> list[ExistingComment]:
        try:
            comments = [ExistingComment(id=c.id, body=c.body) for c in self._pull().get_issue_comments()]
        except _REMOTE_ERRORS as e:
            raise RemoteError("list", e) from e
        logger.debug("Listed %d comment(s) on #%d", len(comments), self.pr_number)
        return comments

    def create_comment(self, body: str) -> int:
        try:
            comment = self._pull().create_issue_comment(body)
        except _REMOTE_ERRORS as e:
            raise RemoteError("create", e) from e
        logger.debug("Created comment %s on #%d", comment.id, self.pr_number)
        return comment.id

    def update_comment(self, comment_id: int, body: str) -> None:
        try:
            self._pull().get_issue_comment(comment_id).edit(body)
        except _REMOTE_ERRORS as e:
            raise RemoteError("update", e) from e
        logger.debug("Updated comment %s on #%d", comment_id, self.pr_number)
