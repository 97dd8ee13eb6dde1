"""Turn plan output into a bounded pull request comment body.

Layout of a rendered comment::

    <!-- plancomment:<sha256 of header> -->
    <header>                      (only when a header was configured)

    ```diff
    <plan output>
    ```
    _Plan output truncated ..._   (only when the plan did not fit)

The marker line is what later runs search for (see ``locator.has_marker``).
It is derived from the header alone, so changing the header starts a new
comment stream and keeping it reuses the old one.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass

from plancomment_core.plan import NO_CHANGES_TEXT, PlanResult

# GitHub rejects issue comment bodies longer than this many characters.
MAX_COMMENT_SIZE = 65536
DEFAULT_HEADER = "Terraform Plan"
TRUNCATION_NOTICE = "\n_Plan output truncated to fit the comment size limit. See the workflow logs for the full plan._"

_MARKER_PREFIX = "plancomment"
_BACKTICK_RUN_RE = re.compile(r"`{3,}")


@dataclass(frozen=True)
class CommentBody:
    marker: str
    header: str
    content: str
    truncated: bool = False

    def render(self) -> str:
        """Return the full comment text sent to GitHub."""
        return _preamble(self.marker, self.header) + self.content


def make_marker(header: str | None) -> str:
    """Return the identity marker for a header (or the default header).

    The hex digest keeps arbitrary header text, including ``-->``, out of the
    HTML comment while staying unique per header.
    """
    seed = header if header and header.strip() else DEFAULT_HEADER
    digest = hashlib.sha256(seed.encode("utf-8")).hexdigest()
    return f"<!-- {_MARKER_PREFIX}:{digest} -->"


def format_comment(plan: PlanResult, header: str | None = None, budget: int = MAX_COMMENT_SIZE) -> CommentBody:
    """Build the comment body for a plan, truncating the plan text to fit ``budget``.

    Only the plan text is ever shortened. Its head is kept verbatim since plan
    output puts the resource list and summary first.
    """
    marker = make_marker(header)
    visible_header = header if header and header.strip() else ""
    text = plan.raw_markdown if plan.raw_markdown.strip() else NO_CHANGES_TEXT
    fence = _fence_for(text)

    preamble_len = len(_preamble(marker, visible_header))
    content = _fenced(text, fence)
    if preamble_len + len(content) <= budget:
        return CommentBody(marker=marker, header=visible_header, content=content)

    overhead = preamble_len + len(_fenced("", fence)) + len(TRUNCATION_NOTICE)
    available = budget - overhead
    if available <= 0:
        raise ValueError(
            f"Comment size budget of {budget} characters cannot hold the marker, header and truncation notice."
        )
    content = _fenced(text[:available], fence) + TRUNCATION_NOTICE
    return CommentBody(marker=marker, header=visible_header, content=content, truncated=True)


def _preamble(marker: str, header: str) -> str:
    if header:
        return f"{marker}\n{header}\n\n"
    return f"{marker}\n\n"


def _fenced(text: str, fence: str) -> str:
    return f"{fence}diff\n{text}\n{fence}"


def _fence_for(text: str) -> str:
    """Return a backtick fence longer than any backtick run inside ``text``."""
    longest = max((len(m.group(0)) for m in _BACKTICK_RUN_RE.finditer(text)), default=2)
    return "`" * max(3, longest + 1)
