"""
Data models for grouped commits.

A :class:`CommitGroup` pairs a label rule's name with the commits that
satisfied it. Each entry is a :class:`ClassifiedCommit`, which records
the issue that triggered the match when the rule is issue driven.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from vc_changelog.vcs.models import Commit


@dataclass(frozen=True)
class ClassifiedCommit:
    """A commit placed in a group.

    Attributes
    ----------
    commit : Commit
        The commit, possibly with a cleaned up subject.
    issue_number : Optional[int]
        Issue whose labels matched, ``None`` for message driven rules.
    """

    commit: Commit
    issue_number: Optional[int] = None

    @property
    def hash(self) -> str:
        return self.commit.hash

    @property
    def name(self) -> str:
        return self.commit.name


@dataclass
class CommitGroup:
    """Representation of a labelled group of commits.

    Attributes
    ----------
    name : str
        The label rule's name, e.g. ``Bugs``.
    commits : List[ClassifiedCommit]
        The commits matching the rule, in history order.
    """

    name: str
    commits: List[ClassifiedCommit] = field(default_factory=list)
