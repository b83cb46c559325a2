"""Composing and posting the coverage comment on a pull request.

The comment starts with an HTML watermark naming the job (and an optional
unique id). Later runs of the same job find the comment by that prefix and
edit it in place instead of adding another.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from covcomment.utils.git import GitHubAPI, GitHubAPIError

if TYPE_CHECKING:
    from covcomment.utils.git import GitHubPRInfo

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 65536
"""GitHub's limit on an issue comment body."""

# Events that never target a pull request, so long bodies are not a problem
_LENGTH_EXEMPT_EVENTS = frozenset({"workflow_dispatch", "workflow_run"})


def build_watermark(job: str, unique_id: str = "") -> str:
    """Return the hidden marker that identifies this job's comment.

    >>> build_watermark("test", "unit")
    '<!-- Coverage Comment: test | unit -->\\n'
    """
    unique = f"| {unique_id} " if unique_id else ""
    return f"<!-- Coverage Comment: {job} {unique}-->\n"


def compose_comment_body(
    watermark: str,
    coverage: str = "",
    test_results: str = "",
    last_run: str = "",
    multiple_files: str = "",
) -> str:
    """Join the sections in their fixed order behind the watermark."""
    return "\n\n".join([watermark, coverage, test_results, last_run, multiple_files])


def check_comment_length(sections: list[str], event_name: str) -> bool:
    """Warn when the sections exceed :data:`MAX_COMMENT_LENGTH`.

    Returns:
        True if the body fits (or the event is exempt from the check).
    """
    total = sum(len(section) for section in sections)
    if total <= MAX_COMMENT_LENGTH or event_name in _LENGTH_EXEMPT_EVENTS:
        return True

    logger.warning(
        "Your comment is too long (maximum is %d characters), some sections will be truncated.",
        MAX_COMMENT_LENGTH,
    )
    logger.warning(
        'Try adding "hide-report: true" or "include-file-details: false" to reduce comment size.'
    )
    return False


class CoverageCommentReporter:
    """Posts the composed body and fetches a pull request's changed files."""

    def __init__(self, api: GitHubAPI) -> None:
        self._api = api

    def post(
        self,
        pr_info: GitHubPRInfo,
        body: str,
        watermark: str,
        create_new: bool = False,
    ) -> dict[str, str]:
        """Create or update the watermarked comment.

        Returns:
            Dict with status and comment URL.

        Raises:
            GitHubAPIError: If posting the comment fails.
        """
        logger.info(
            "Posting coverage comment to #%d in %s/%s",
            pr_info.pr_number,
            pr_info.owner,
            pr_info.repo,
        )
        result = self._api.upsert_comment(pr_info, body, watermark, create_new=create_new)
        logger.info("Successfully posted comment: %s", result.get("html_url"))
        return {
            "status": "success",
            "comment_url": result.get("html_url", ""),
        }

    def changed_files(self, pr_info: GitHubPRInfo, extensions: list[str]) -> list[str]:
        """Paths changed by the pull request, filtered by suffix.

        An API failure is logged and treated as "no changed files".
        """
        try:
            paths = self._api.list_pull_request_files(pr_info)
        except GitHubAPIError as exc:
            logger.warning("Could not fetch changed files: %s", exc)
            return []

        if extensions:
            paths = [path for path in paths if path.endswith(tuple(extensions))]
        logger.info("Changed files: %s", paths)
        return paths
