"""GitHub Actions context detection."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from covcomment.utils.git import get_pr_info_from_env, split_repository

logger = logging.getLogger(__name__)

_PR_EVENTS = ("pull_request", "pull_request_target")


@dataclass
class CIContext:
    """Detected GitHub Actions execution context."""

    is_ci: bool
    """Running inside GitHub Actions."""

    event_name: str
    """Triggering event (``pull_request``, ``push``, ``workflow_run``, ...)."""

    job: str
    """Job id, used to tell comments from different jobs apart."""

    issue_number: int | None
    """Pull request or issue number taken from the event payload."""

    commit_sha: str | None
    """Head commit of the pull request, else ``GITHUB_SHA``."""

    repo_owner: str | None
    """Repository owner (org or user)."""

    repo_name: str | None
    """Repository name."""

    server_url: str
    """Web root, ``https://github.com`` unless on GitHub Enterprise."""

    workspace: str | None
    """Checkout directory (``GITHUB_WORKSPACE``)."""

    @property
    def is_pr(self) -> bool:
        return self.event_name in _PR_EVENTS

    @property
    def repo_url(self) -> str:
        """Browser URL of the repository, or an empty string if unknown."""
        if not self.repo_owner or not self.repo_name:
            return ""
        return f"{self.server_url}/{self.repo_owner}/{self.repo_name}"


def detect_ci_context() -> CIContext:
    """Detect the GitHub Actions context from environment variables.

    The pull request or issue number and the head SHA come from the event
    payload at ``GITHUB_EVENT_PATH`` when one is present; the number falls
    back to ``GITHUB_REF``.

    Returns:
        CIContext with detected values.
    """
    payload = load_event_payload(os.getenv("GITHUB_EVENT_PATH"))

    repository = split_repository(os.getenv("GITHUB_REPOSITORY"))

    pull_request = payload.get("pull_request")
    head = pull_request.get("head") if isinstance(pull_request, dict) else None
    head_sha = head.get("sha") if isinstance(head, dict) else None

    issue_number = issue_number_from_payload(payload)
    if issue_number is None:
        # refs/pull/<number>/merge when the payload is unavailable
        pr_info = get_pr_info_from_env()
        issue_number = pr_info.pr_number if pr_info else None

    return CIContext(
        is_ci=os.getenv("GITHUB_ACTIONS") == "true",
        event_name=os.getenv("GITHUB_EVENT_NAME", ""),
        job=os.getenv("GITHUB_JOB", ""),
        issue_number=issue_number,
        commit_sha=head_sha or os.getenv("GITHUB_SHA"),
        repo_owner=repository[0] if repository else None,
        repo_name=repository[1] if repository else None,
        server_url=os.getenv("GITHUB_SERVER_URL", "https://github.com").rstrip("/"),
        workspace=os.getenv("GITHUB_WORKSPACE"),
    )


def load_event_payload(event_path: str | Path | None) -> dict[str, Any]:
    """Read the webhook payload GitHub Actions writes for the run."""
    if not event_path:
        return {}
    try:
        data = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read event payload %s: %s", event_path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def issue_number_from_payload(payload: dict[str, Any]) -> int | None:
    """Return ``pull_request.number``, else ``issue.number``."""
    for key in ("pull_request", "issue"):
        section = payload.get(key)
        if isinstance(section, dict):
            number = _parse_int(section.get("number"))
            if number is not None:
                return number
    return None


def _parse_int(value: Any) -> int | None:
    """Parse a value to int, return None if invalid."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
