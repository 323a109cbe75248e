"""Data model for issues fetched from the issue tracker."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet


@dataclass(frozen=True)
class Issue:
    """An externally tracked work item.

    Attributes
    ----------
    number : int
        The issue number.
    title : str
        The issue title, used in place of the commit subject when rendering.
    labels : FrozenSet[str]
        Names of the labels attached to the issue.
    """

    number: int
    title: str
    labels: FrozenSet[str] = field(default_factory=frozenset)
