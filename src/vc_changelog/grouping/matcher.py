"""
Label rules and the matchers they use.

A label rule's ``match`` value is either literal text or a regular
expression. It is resolved once, when the rule is built, into a
:class:`LiteralMatcher` or a :class:`PatternMatcher` so that the
classifier can treat both the same way.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Pattern, Union


class Matcher:
    """Interface shared by literal and pattern matchers."""

    def matches(self, text: str) -> bool:
        raise NotImplementedError

    def strip(self, text: str) -> str:
        """Remove the first occurrence of the match from ``text``."""
        raise NotImplementedError

    def matches_label(self, labels: Iterable[str]) -> bool:
        """Return True if any of ``labels`` satisfies the matcher."""
        raise NotImplementedError


@dataclass(frozen=True)
class LiteralMatcher(Matcher):
    """Matches by substring containment."""

    text: str

    def matches(self, text: str) -> bool:
        return self.text in text

    def strip(self, text: str) -> str:
        return text.replace(self.text, "", 1)

    def matches_label(self, labels: Iterable[str]) -> bool:
        # labels are compared whole, not by substring
        return self.text in set(labels)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class PatternMatcher(Matcher):
    """Matches with ``re.search``."""

    pattern: Pattern[str]

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None

    def strip(self, text: str) -> str:
        return self.pattern.sub("", text, count=1)

    def matches_label(self, labels: Iterable[str]) -> bool:
        return any(self.matches(label) for label in labels)

    def __str__(self) -> str:
        return f"/{self.pattern.pattern}/"


def make_matcher(value: Union[str, Pattern[str], Mapping[str, Any], Matcher]) -> Matcher:
    """Resolve a configured ``match`` value into a :class:`Matcher`.

    Accepts literal text, a compiled pattern, an existing matcher, or a
    mapping of the form ``{"regex": "..."}`` as found in JSON
    configuration files.

    Raises
    ------
    ValueError
        If the value has an unsupported type or the regex is invalid.
    """
    if isinstance(value, Matcher):
        return value
    if isinstance(value, str):
        return LiteralMatcher(value)
    if isinstance(value, re.Pattern):
        return PatternMatcher(value)
    if isinstance(value, Mapping) and set(value) == {"regex"} and isinstance(value["regex"], str):
        try:
            return PatternMatcher(re.compile(value["regex"]))
        except re.error as exc:
            raise ValueError(f"invalid regex {value['regex']!r}: {exc}") from exc
    raise ValueError(f"unsupported match value: {value!r}")


@dataclass(frozen=True)
class LabelRule:
    """Maps matching issue labels or commit subjects to a named group."""

    match: Matcher
    name: str

    @classmethod
    def from_config(cls, data: Mapping[str, Any]) -> "LabelRule":
        return cls(match=make_matcher(data["match"]), name=str(data["name"]))
