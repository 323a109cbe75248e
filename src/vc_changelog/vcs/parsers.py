"""
Parsers for raw ``git`` output.

Both parsers work one line at a time and tolerate noise: a line that
does not have the expected shape simply yields nothing. Only the
aggregate tag parse can fail, because a release window needs at least
two tags.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, List, Optional, Pattern, TypeVar, Union

from vc_changelog.vcs.models import Commit, Tag, parse_timestamp


T = TypeVar("T")

HASH_WIDTH = 9
DEFAULT_ISSUE_PATTERN = re.compile(r"(Fix|Close|Resolve) #(\d+)")

_TAG_LINE = re.compile(r"^(\S+) (.*)$")
_COMMIT_LINE = re.compile(r"^([0-9a-f]{%d}) (\S+) (.*)$" % HASH_WIDTH)
_TAG_PREFIX = "tag: "


class HistoryError(Exception):
    """Base class for errors that prevent selecting a release window."""

    pass


class InsufficientTagHistoryError(HistoryError):
    """Raised when fewer than two matching tags are available."""

    pass


def _compile(pattern: Union[str, Pattern[str], None]) -> Optional[Pattern[str]]:
    if pattern is None or isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern)


def parse_tag_line(line: str, pattern: Union[str, Pattern[str], None] = None) -> List[Tag]:
    """Parse one line of tag listing output.

    The line has the form ``<iso-date> <decorations>`` where the
    decorations are a comma separated list of refs such as
    ``tag: v1.3.0`` or ``HEAD -> main, tag: v1.3.0, origin/main``. Only
    ``tag: `` entries are kept, so a single line may produce several tags.

    Parameters
    ----------
    line : str
        A single line of output.
    pattern : str or Pattern, optional
        Tag names must match this pattern (``re.search``) to be kept.

    Returns
    -------
    List[Tag]
        The tags found on the line, possibly empty.
    """
    match = _TAG_LINE.match(line.strip())
    if not match:
        return []
    date, decorations = match.groups()
    try:
        parse_timestamp(date)
    except ValueError:
        return []
    regex = _compile(pattern)
    tags = []
    for ref in decorations.split(","):
        ref = ref.strip()
        if not ref.startswith(_TAG_PREFIX):
            continue
        name = ref[len(_TAG_PREFIX):].strip()
        if not name:
            continue
        if regex is not None and not regex.search(name):
            continue
        tags.append(Tag(name=name, date=date))
    return tags


def parse_tags(text: str, pattern: Union[str, Pattern[str], None] = None) -> List[Tag]:
    """Parse a full tag listing into tags sorted newest first.

    Raises
    ------
    InsufficientTagHistoryError
        If fewer than two tags match.
    """
    tags = [tag for line in text.splitlines() for tag in parse_tag_line(line, pattern)]
    # sorted() is stable, co-located tags keep their listing order
    tags = sorted(tags, key=lambda tag: tag.timestamp, reverse=True)
    if len(tags) < 2:
        wanted = f" matching {_compile(pattern).pattern!r}" if pattern is not None else ""
        raise InsufficientTagHistoryError(
            f"Insufficient tag history: found {len(tags)} tag(s){wanted}, at least 2 are required"
        )
    return tags


def match_issues(message: str, pattern: Union[str, Pattern[str], None] = None) -> List[str]:
    """Extract issue numbers referenced by a commit message.

    The issue number is taken from the second capture group of each
    non-overlapping match, left to right. Duplicates are preserved.
    """
    regex = _compile(pattern) or DEFAULT_ISSUE_PATTERN
    return [match.group(2) for match in regex.finditer(message)]


def parse_commit_line(
    line: str, issue_pattern: Union[str, Pattern[str], None] = None
) -> Optional[Commit]:
    """Parse one ``<hash> <iso-date> <subject>`` line into a :class:`Commit`.

    Returns ``None`` for lines that do not have that shape.
    """
    match = _COMMIT_LINE.match(line.rstrip("\r\n"))
    if not match:
        return None
    commit_hash, date, name = match.groups()
    return Commit(
        hash=commit_hash,
        date=date,
        name=name,
        issues=tuple(match_issues(name, issue_pattern)),
    )


def parse_output(parser: Callable[[str], Optional[T]], text: str) -> List[T]:
    """Apply ``parser`` to every line of ``text`` and drop empty results."""
    results = (parser(line) for line in text.splitlines())
    return [result for result in results if result]


def parse_commits(text: str, issue_pattern: Union[str, Pattern[str], None] = None) -> List[Commit]:
    return parse_output(lambda line: parse_commit_line(line, issue_pattern), text)


def flatten(items: Iterable[Iterable[T]]) -> List[T]:
    return [item for group in items for item in group]
