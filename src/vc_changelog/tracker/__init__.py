"""
Issue tracker integration for vc_changelog.

This package contains the :class:`GitHubClient` used to read issues and
the batch fetcher which retrieves many issues with bounded concurrency
and retries.
"""

from .batch_fetcher import fetch_all, with_retry  # noqa: F401
from .github_client import GitHubClient, TrackerError, parse_issue, parse_issues  # noqa: F401
from .models import Issue  # noqa: F401
