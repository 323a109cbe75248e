"""
Data models for version control history.

A :class:`Tag` marks a release point and a :class:`Commit` is a single
recorded change. Both are immutable; later pipeline stages derive new
copies with :func:`dataclasses.replace` instead of mutating them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Tuple


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z`` for UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class Tag:
    """A named, dated release marker.

    Attributes
    ----------
    name : str
        The tag name, e.g. ``v1.3.0``.
    date : str
        ISO-8601 creation timestamp of the tag.
    """

    name: str
    date: str

    @property
    def timestamp(self) -> datetime:
        return parse_timestamp(self.date)


@dataclass(frozen=True)
class Commit:
    """A single commit between two tags.

    Attributes
    ----------
    hash : str
        Abbreviated commit hash (fixed width).
    date : str
        ISO-8601 author timestamp.
    name : str
        The commit subject line.
    issues : Tuple[str, ...]
        Issue numbers referenced by the subject, in order of appearance.
    """

    hash: str
    date: str
    name: str
    issues: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class History:
    """Commits of a release window together with its bounding tags."""

    commits: List[Commit]
    newer: Tag
    older: Tag
