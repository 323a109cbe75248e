"""
Client for the GitHub issues REST API.

Only a single endpoint is needed: ``GET /repos/{owner}/{repo}/issues/{number}``.
On error conditions (connection errors, timeouts, non-200 responses or
malformed payloads) a :class:`TrackerError` is raised so the batch
fetcher can decide whether to retry.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

import requests

from vc_changelog.tracker.models import Issue


logger = logging.getLogger(__name__)
# Attach a null handler to avoid errors when the root logger is missing a
# stream. Messages will still propagate to the root logger if configured.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


DEFAULT_BASE_URL = "https://api.github.com"


class TrackerError(Exception):
    """Raised when communication with the issue tracker fails."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class GitHubClient:
    """Client for reading issues from GitHub.

    Parameters
    ----------
    token : str, optional
        Personal access token. Anonymous requests are heavily rate limited,
        so a token is recommended for anything but tiny releases.
    base_url : str, optional
        API root, e.g. ``"https://github.example.com/api/v3"`` for GitHub
        Enterprise. Defaults to the public API.
    request_timeout : float, optional
        Timeout in seconds for HTTP requests. Defaults to 7 seconds.
    """

    token: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = 7.0
    session: requests.Session = field(default_factory=requests.Session, repr=False)

    def __post_init__(self) -> None:
        self.session.headers.update({"Accept": "application/vnd.github+json"})
        if self.token:
            self.session.headers["Authorization"] = f"token {self.token}"

    def _endpoint(self, owner: str, repo: str, number: Any) -> str:
        return f"{self.base_url.rstrip('/')}/repos/{owner}/{repo}/issues/{number}"

    def get_issue(self, owner: str, repo: str, number: Any) -> Dict[str, Any]:
        """Fetch a single issue.

        Parameters
        ----------
        owner : str
            Repository owner (user or organisation).
        repo : str
            Repository name.
        number : int or str
            Issue number.

        Returns
        -------
        Dict[str, Any]
            The decoded JSON payload of the issue.

        Raises
        ------
        TrackerError
            If the request fails or the server returns an error.
        """
        url = self._endpoint(owner, repo, number)
        logger.debug("Requesting issue %s", url)
        try:
            response = self.session.get(url, timeout=self.request_timeout)
        except requests.RequestException as exc:
            logger.error("Failed to connect to GitHub: %s", exc)
            raise TrackerError(f"Failed connecting to GitHub: {exc}") from exc
        if response.status_code != 200:
            logger.error(
                "GitHub returned non-200 status %s for issue #%s: %s",
                response.status_code,
                number,
                response.text,
            )
            raise TrackerError(
                f"GitHub returned status {response.status_code} for issue #{number}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            logger.error("Failed to parse GitHub response: %s", exc)
            raise TrackerError(f"Failed to parse GitHub response for issue #{number}") from exc
        if not isinstance(data, dict):
            raise TrackerError(f"Unexpected response structure for issue #{number}")
        return data


def parse_issue(payload: Dict[str, Any]) -> Issue:
    """Convert a GitHub issue payload into an :class:`Issue`.

    Labels may be given as objects with a ``name`` key (the REST shape) or
    as plain strings.
    """
    labels = []
    for label in payload.get("labels") or []:
        if isinstance(label, dict):
            name = label.get("name")
        else:
            name = label
        if name:
            labels.append(str(name))
    return Issue(
        number=int(payload["number"]),
        title=payload.get("title") or "",
        labels=frozenset(labels),
    )


def parse_issues(payloads: Iterable[Dict[str, Any]]) -> Dict[int, Issue]:
    """Build the ``number -> Issue`` mapping from raw payloads."""
    issues: Dict[int, Issue] = {}
    for payload in payloads:
        issue = parse_issue(payload)
        issues[issue.number] = issue
    return issues
