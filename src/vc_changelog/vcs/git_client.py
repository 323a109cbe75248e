"""
Git client implementation for vc_changelog.

This module wraps the two read-only Git queries needed to build a
changelog: listing recent tags and listing the commits between two
tags. All subprocess calls go through :meth:`GitClient._run` so that
unit tests can mock them easily.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List

from vc_changelog.vcs.parsers import HASH_WIDTH


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


DEFAULT_TAG_COUNT = 20


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class GitClient:
    """Client for reading tags and commits from a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def is_repo(path: Path) -> bool:
        """Return True if the given path is the root of a Git repository."""
        return (path / ".git").exists()

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(self, args: List[str]) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If the command exits with a non-zero status, or if the ``git``
            executable cannot be found.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            logger.error("Git executable not found: %s", e)
            raise GitError(f"Failed to run git: {e}") from e

        if result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # History queries
    # ------------------------------------------------------------------
    def get_tag_listing(self, count: int = DEFAULT_TAG_COUNT) -> str:
        """List the most recently created tags.

        Only refs under ``refs/tags`` are considered, so branch heads never
        use up the ``count`` budget. Each output line has the form
        ``<iso-date> tag: <name>``, e.g. ``2018-01-02T19:32:20+01:00 tag: v1.3.0``,
        where the date is the tag creation time (tagger date for annotated
        tags, commit date for lightweight ones).

        Parameters
        ----------
        count : int
            Maximum number of tags to list.

        Returns
        -------
        str
            Raw ``git for-each-ref`` output.
        """
        result = self._run(
            [
                "for-each-ref",
                "--sort=-creatordate",
                f"--count={count}",
                "--format=%(creatordate:iso-strict) tag: %(refname:lstrip=2)",
                "refs/tags",
            ]
        )
        return result.stdout

    def get_commit_listing(self, older: str, newer: str) -> str:
        """List commits reachable from ``newer`` but not from ``older``.

        Each output line has the form ``<hash> <iso-date> <subject>``.
        """
        result = self._run(
            [
                "log",
                f"--abbrev={HASH_WIDTH}",
                "--pretty=format:%h %aI %s",
                f"{older}..{newer}",
            ]
        )
        return result.stdout
