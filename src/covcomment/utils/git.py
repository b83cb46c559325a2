"""GitHub REST API utilities for covcomment.

Only the handful of endpoints the comment workflow needs: listing, creating
and updating issue comments, and listing the files changed by a pull request.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

import requests

logger = logging.getLogger(__name__)

# GitHub API constants
GITHUB_API_BASE = "https://api.github.com"
_GITHUB_AUTH_ENV_KEY = "GITHUB_" + "TOKEN"

_REQUEST_TIMEOUT = 30
_PER_PAGE = 100

# Expected number of parts when splitting "owner/repo"
_OWNER_REPO_PARTS = 2


@dataclass
class GitHubPRInfo:
    """Target issue or pull request for a comment."""

    owner: str
    """Repository owner (username or organization)."""

    repo: str
    """Repository name."""

    pr_number: int
    """Pull request (or issue) number."""


class GitHubAPIError(Exception):
    """Exception raised when GitHub API operations fail."""


class GitHubAPI:
    """Client for the GitHub issue-comment and pull-request-files endpoints."""

    def __init__(self, token: str | None = None, api_base: str | None = None) -> None:
        """Initialize the GitHub API client.

        Args:
            token: GitHub token. Falls back to the GITHUB_TOKEN environment variable.
            api_base: API root, for GitHub Enterprise. Defaults to ``GITHUB_API_URL``
                or the public API.

        Raises:
            GitHubAPIError: If no token is available.
        """
        self._token = token or os.environ.get(_GITHUB_AUTH_ENV_KEY)
        if not self._token:
            raise GitHubAPIError(
                f"GitHub token required. Set {_GITHUB_AUTH_ENV_KEY} environment variable "
                "or pass github-token."
            )

        self._api_base = (api_base or os.environ.get("GITHUB_API_URL") or GITHUB_API_BASE).rstrip(
            "/"
        )
        self._session_headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _issue_url(self, pr_info: GitHubPRInfo, suffix: str) -> str:
        return f"{self._api_base}/repos/{pr_info.owner}/{pr_info.repo}/{suffix}"

    def list_comments(self, pr_info: GitHubPRInfo) -> list[dict[str, Any]]:
        """Return every comment on the issue, following pagination.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        url = self._issue_url(pr_info, f"issues/{pr_info.pr_number}/comments")
        return self._get_all(url)

    def create_comment(self, pr_info: GitHubPRInfo, body: str) -> dict[str, Any]:
        """Create a new comment on an issue or pull request.

        Args:
            pr_info: Target issue.
            body: Comment body (markdown formatted).

        Returns:
            GitHub API response as a dictionary.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        url = self._issue_url(pr_info, f"issues/{pr_info.pr_number}/comments")
        result: dict[str, Any] = self._post(url, {"body": body})
        return result

    def update_comment(self, pr_info: GitHubPRInfo, comment_id: int, body: str) -> dict[str, Any]:
        """Replace the body of an existing comment.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        url = self._issue_url(pr_info, f"issues/comments/{comment_id}")
        result: dict[str, Any] = self._patch(url, {"body": body})
        return result

    def find_comment_by_prefix(self, pr_info: GitHubPRInfo, prefix: str) -> dict[str, Any] | None:
        """Find the first comment whose body starts with *prefix*.

        Returns:
            Comment dict if found, None otherwise.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        for comment in self.list_comments(pr_info):
            if (comment.get("body") or "").startswith(prefix):
                return comment
        return None

    def upsert_comment(
        self,
        pr_info: GitHubPRInfo,
        body: str,
        marker: str,
        create_new: bool = False,
    ) -> dict[str, Any]:
        """Create or update the comment identified by *marker*.

        Args:
            pr_info: Target issue.
            body: Comment body. Must start with the marker to be found again.
            marker: Watermark prefix of the managed comment.
            create_new: Always create a new comment instead of updating.

        Returns:
            GitHub API response as a dictionary.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        if not body.startswith(marker):
            logger.warning("Comment body does not start with its marker. Adding it.")
            body = f"{marker}{body}"

        if create_new:
            logger.info("Creating new comment on #%d", pr_info.pr_number)
            return self.create_comment(pr_info, body)

        existing = self.find_comment_by_prefix(pr_info, marker)
        if existing:
            logger.info("Updating existing comment %d", existing["id"])
            return self.update_comment(pr_info, existing["id"], body)

        logger.info("Creating new comment on #%d", pr_info.pr_number)
        return self.create_comment(pr_info, body)

    def list_pull_request_files(self, pr_info: GitHubPRInfo) -> list[str]:
        """Return the paths of every file changed by the pull request.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        url = self._issue_url(pr_info, f"pulls/{pr_info.pr_number}/files")
        return [item["filename"] for item in self._get_all(url) if "filename" in item]

    def _get_all(self, url: str) -> list[dict[str, Any]]:
        """GET every page of a list endpoint."""
        items: list[dict[str, Any]] = []
        page = 1
        while True:
            batch = self._get(url, {"per_page": _PER_PAGE, "page": page})
            if not isinstance(batch, list):
                raise GitHubAPIError(f"Expected a list from {url}, got {type(batch).__name__}")
            items.extend(batch)
            if len(batch) < _PER_PAGE:
                return items
            page += 1

    def _get(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """Make a GET request to the GitHub API.

        Raises:
            GitHubAPIError: If the request fails.
        """
        try:
            response = requests.get(
                url, params=params, headers=self._session_headers, timeout=_REQUEST_TIMEOUT
            )
            response.raise_for_status()
            return response.json()
        except Exception as exc:
            raise GitHubAPIError(f"GET request failed: {exc}") from exc

    def _post(self, url: str, data: dict[str, Any]) -> Any:
        """Make a POST request to the GitHub API.

        Raises:
            GitHubAPIError: If the request fails.
        """
        try:
            response = requests.post(
                url, json=data, headers=self._session_headers, timeout=_REQUEST_TIMEOUT
            )
            response.raise_for_status()
            return response.json()
        except Exception as exc:
            raise GitHubAPIError(f"POST request failed: {exc}") from exc

    def _patch(self, url: str, data: dict[str, Any]) -> Any:
        """Make a PATCH request to the GitHub API.

        Raises:
            GitHubAPIError: If the request fails.
        """
        try:
            response = requests.patch(
                url, json=data, headers=self._session_headers, timeout=_REQUEST_TIMEOUT
            )
            response.raise_for_status()
            return response.json()
        except Exception as exc:
            raise GitHubAPIError(f"PATCH request failed: {exc}") from exc


def split_repository(repository: str | None) -> tuple[str, str] | None:
    """Split ``owner/repo`` into its two parts."""
    if not repository:
        return None
    parts = repository.split("/")
    if len(parts) != _OWNER_REPO_PARTS or not all(parts):
        return None
    return parts[0], parts[1]


def get_pr_info_from_env() -> GitHubPRInfo | None:
    """Get PR information from GitHub Actions environment variables.

    Returns:
        GitHubPRInfo if running in a PR context, None otherwise.
    """
    github_event_name = os.environ.get("GITHUB_EVENT_NAME")
    github_ref = os.environ.get("GITHUB_REF")

    repository = split_repository(os.environ.get("GITHUB_REPOSITORY"))
    if repository is None or github_event_name not in ("pull_request", "pull_request_target"):
        return None

    # Format: refs/pull/<number>/merge
    if not github_ref or not github_ref.startswith("refs/pull/"):
        return None

    try:
        pr_number = int(github_ref.split("/")[2])
    except (IndexError, ValueError):
        return None

    owner, repo = repository
    return GitHubPRInfo(owner=owner, repo=repo, pr_number=pr_number)
