"""
Version control system (VCS) integration.

This package reads tags and commits from a Git repository and parses
them into :class:`Tag` and :class:`Commit` records. See
:mod:`vc_changelog.vcs.history` for the release window logic.
"""

from .git_client import GitClient, GitError  # noqa: F401
from .history import NoReleaseWindowError, ReleaseWindow, read_history, select_window  # noqa: F401
from .models import Commit, History, Tag  # noqa: F401
from .parsers import HistoryError, InsufficientTagHistoryError  # noqa: F401
