"""
Retrieval of linked issues and classification of commits.

:func:`retrieve` is the top-level entry point handed to the renderer:
it re-extracts issue references from the commit subjects, fetches the
referenced issues from the tracker and sorts the commits into groups.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Pattern, Protocol, Sequence, Union

from vc_changelog.grouping.classifier import classify
from vc_changelog.grouping.group_model import CommitGroup
from vc_changelog.grouping.matcher import LabelRule
from vc_changelog.tracker.batch_fetcher import fetch_all
from vc_changelog.tracker.github_client import parse_issues
from vc_changelog.tracker.models import Issue
from vc_changelog.vcs.models import Commit
from vc_changelog.vcs.parsers import flatten, match_issues


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class IssueTracker(Protocol):
    def get_issue(self, owner: str, repo: str, number: Any) -> Dict[str, Any]:
        ...


@dataclass
class RetrievalResult:
    """Issues fetched for a release and the grouped commits."""

    issues: Dict[int, Issue]
    grouped_commits: List[CommitGroup]


def unique(numbers: Iterable[str]) -> List[str]:
    """Drop repeated issue numbers, keeping first-seen order."""
    return list(dict.fromkeys(numbers))


def retrieve(
    commits: Sequence[Commit],
    issue_pattern: Union[str, Pattern[str], None],
    external_rules: Sequence[LabelRule],
    local_rules: Sequence[LabelRule],
    tracker: IssueTracker,
    owner: str,
    repo: str,
    *,
    log: Optional[logging.Logger] = None,
    **fetch_options: Any,
) -> RetrievalResult:
    """Fetch the issues linked from ``commits`` and group the commits.

    Parameters
    ----------
    commits : Sequence[Commit]
        Commits of the release window.
    issue_pattern : str or Pattern, optional
        Pattern whose second group captures an issue number. The issues
        of every commit are re-extracted with it.
    external_rules : Sequence[LabelRule]
        Rules matched against issue labels.
    local_rules : Sequence[LabelRule]
        Rules matched against subjects of commits without issues.
    tracker : IssueTracker
        Object providing ``get_issue(owner, repo, number)``.
    owner, repo : str
        Repository on the tracker.
    log : logging.Logger, optional
        Progress logger, defaults to this module's logger.
    **fetch_options
        Passed to :func:`vc_changelog.tracker.batch_fetcher.fetch_all`.

    Returns
    -------
    RetrievalResult
        The ``number -> Issue`` mapping and the groups, external first.
    """
    log = log or logger

    commits = [replace(c, issues=tuple(match_issues(c.name, issue_pattern))) for c in commits]
    numbers = unique(flatten(c.issues for c in commits))
    log.info("Getting %d issues from %s/%s", len(numbers), owner, repo)

    payloads = fetch_all(
        numbers, lambda number: tracker.get_issue(owner, repo, number), **fetch_options
    )
    issues = parse_issues(payloads)

    grouped_commits = classify(commits, issues, external_rules, local_rules)
    for group in grouped_commits:
        log.info("%d %s", len(group.commits), group.name)
    return RetrievalResult(issues=issues, grouped_commits=grouped_commits)
