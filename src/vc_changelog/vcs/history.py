"""
Release window selection and history reading.

:func:`read_history` is the entry point: it lists recent tags, picks the
two adjacent tags bounding the release and reads the commits between
them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Pattern, Sequence, Union

from vc_changelog.vcs.git_client import DEFAULT_TAG_COUNT, GitClient
from vc_changelog.vcs.models import History, Tag
from vc_changelog.vcs.parsers import (
    HistoryError,
    InsufficientTagHistoryError,
    parse_commits,
    parse_tags,
)


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class NoReleaseWindowError(HistoryError):
    """Raised when no pair of adjacent tags can bound the release."""

    pass


@dataclass(frozen=True)
class ReleaseWindow:
    """Two adjacent tags; ``newer`` is the release, ``older`` the previous one."""

    newer: Tag
    older: Tag


def select_window(tags: Sequence[Tag], target: Optional[str] = None) -> Optional[ReleaseWindow]:
    """Pick the release window from tags sorted newest first.

    Without a target the two newest tags are used. With a target the
    window is the target and the tag immediately older than it.

    Returns
    -------
    Optional[ReleaseWindow]
        ``None`` if the target is unknown or is the oldest tag.
    """
    if target is None:
        index = 0
    else:
        index = next((i for i, tag in enumerate(tags) if tag.name == target), -1)
    if index == -1 or index + 1 >= len(tags):
        return None
    return ReleaseWindow(newer=tags[index], older=tags[index + 1])


def read_history(
    client: GitClient,
    tag: Optional[str] = None,
    tag_pattern: Union[str, Pattern[str], None] = None,
    issue_pattern: Union[str, Pattern[str], None] = None,
    count: int = DEFAULT_TAG_COUNT,
) -> History:
    """Read the commits of a release window.

    Parameters
    ----------
    client : GitClient
        Client bound to the repository to read.
    tag : str, optional
        Tag to build the changelog for. Defaults to the newest tag.
    tag_pattern : str or Pattern, optional
        Pattern that tag names must match.
    issue_pattern : str or Pattern, optional
        Pattern used to extract issue references from commit subjects.
    count : int
        How many of the most recently created tags to consider.

    Raises
    ------
    InsufficientTagHistoryError
        If fewer than two matching tags exist.
    NoReleaseWindowError
        If ``tag`` is unknown or has no older tag.
    GitError
        If a Git command fails.
    """
    tags = parse_tags(client.get_tag_listing(count=count), tag_pattern)
    logger.debug("Parsed %d tags: %s", len(tags), ", ".join(t.name for t in tags))

    window = select_window(tags, tag)
    if window is None:
        if tag is None:
            raise NoReleaseWindowError("No release window: could not select two adjacent tags")
        raise NoReleaseWindowError(
            f"No release window for tag {tag!r}: tag not found or no older tag exists"
        )

    commits = parse_commits(
        client.get_commit_listing(window.older.name, window.newer.name), issue_pattern
    )
    logger.debug(
        "Read %d commits between %s and %s", len(commits), window.older.name, window.newer.name
    )
    return History(commits=commits, newer=window.newer, older=window.older)
