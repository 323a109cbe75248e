"""
Rule based classification of commits into labelled groups.

Two passes are made. The external pass looks at the labels of the issues
a commit references; the local pass looks at the subject of commits that
reference no issue at all. Groups are returned in rule order, external
groups first. Membership is not exclusive: a commit can land in several
groups, and a commit matching no rule is left out.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Mapping, Optional, Sequence

from vc_changelog.grouping.group_model import ClassifiedCommit, CommitGroup
from vc_changelog.grouping.matcher import LabelRule
from vc_changelog.tracker.models import Issue
from vc_changelog.vcs.models import Commit


def _lookup(issues: Mapping[int, Issue], number: str) -> Optional[Issue]:
    if not number.isdecimal():
        return None
    return issues.get(int(number))


def filter_external(
    commits: Iterable[Commit], issues: Mapping[int, Issue], rule: LabelRule
) -> CommitGroup:
    """Collect ``(commit, issue)`` pairs whose issue carries the rule's label.

    A commit referencing several qualifying issues appears once per issue.
    Issues missing from ``issues`` are skipped.
    """
    group = CommitGroup(name=rule.name)
    for commit in commits:
        for number in commit.issues:
            issue = _lookup(issues, number)
            if issue is not None and rule.match.matches_label(issue.labels):
                group.commits.append(ClassifiedCommit(commit=commit, issue_number=issue.number))
    return group


def filter_local(commits: Iterable[Commit], rule: LabelRule) -> CommitGroup:
    """Collect commits without issues whose subject matches the rule.

    The matched text is removed from the subject of the grouped copy.
    """
    group = CommitGroup(name=rule.name)
    for commit in commits:
        if commit.issues or not rule.match.matches(commit.name):
            continue
        cleaned = replace(commit, name=rule.match.strip(commit.name))
        group.commits.append(ClassifiedCommit(commit=cleaned))
    return group


def classify_external(
    commits: Sequence[Commit], issues: Mapping[int, Issue], rules: Iterable[LabelRule]
) -> List[CommitGroup]:
    return [filter_external(commits, issues, rule) for rule in rules]


def classify_local(commits: Sequence[Commit], rules: Iterable[LabelRule]) -> List[CommitGroup]:
    return [filter_local(commits, rule) for rule in rules]


def classify(
    commits: Sequence[Commit],
    issues: Mapping[int, Issue],
    external_rules: Iterable[LabelRule],
    local_rules: Iterable[LabelRule],
) -> List[CommitGroup]:
    """Run both passes and concatenate their groups, external first."""
    return classify_external(commits, issues, external_rules) + classify_local(commits, local_rules)
