"""
Command line interface for the vc_changelog tool.

This module defines the ``main`` function which is used as the entry
point when executing the ``vcchangelog`` command. It loads the
configuration, reads the release window from Git, retrieves linked
issues from GitHub, groups the commits and renders the changelog.

Progress is reported on stderr so that stdout carries only the
changelog text.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import click

from vc_changelog import __version__
from vc_changelog.config.loader import ConfigError, load_config
from vc_changelog.render.markdown import render_changelog
from vc_changelog.retrieval import retrieve
from vc_changelog.tracker.github_client import GitHubClient, TrackerError
from vc_changelog.vcs.git_client import GitClient, GitError
from vc_changelog.vcs.history import read_history
from vc_changelog.vcs.parsers import HistoryError
from vc_changelog.versioning import BUMP_PARTS, VersionError, bump_version

# Create a module-level logger. Attach a null handler and disable
# propagation to avoid logging errors when the root logger's stream is
# closed (such as during unit tests).
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6
EXIT_TRACKER_FAILURE = 7
EXIT_NO_RELEASE_WINDOW = 9


# ---------------------------------------------------------------------------
# Status display utilities
# ---------------------------------------------------------------------------
# Verbosity levels: 1 shows errors, 2 adds progress, 3 adds successes.
_verbosity = 3


def set_verbosity(level: int) -> None:
    global _verbosity
    _verbosity = level


def print_info(message: str, indent: int = 0):
    """Print a progress message."""
    if _verbosity >= 2:
        click.echo(f"{'  ' * indent}. {message}", err=True)


def print_success(message: str, indent: int = 0):
    """Print a success message."""
    if _verbosity >= 3:
        click.echo(f"{'  ' * indent}✓ {message}", err=True)


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    if _verbosity >= 1:
        click.echo(f"{'  ' * indent}⚠ {message}", err=True)


class ProgressIndicator:
    """Report a step and how long it took."""

    def __init__(self, message: str):
        self.message = message
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        print_info(f"{self.message}...")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            elapsed = time.time() - self.start_time
            print_success(f"{self.message} (took {elapsed:.1f}s)")
        return False


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

@click.command()
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              help="JSON configuration file.")
@click.option("--dir", "repo_dir", help="Read commits and tags from this local git directory.")
@click.option("--upstream", help="GitHub repository as <owner>/<repo>.")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token (defaults to $GITHUB_TOKEN).")
@click.option("--tag", help="Build the changelog for this tag instead of the newest one.")
@click.option("--tag-pattern", help="Regular expression tag names must match.")
@click.option("--bump", type=click.Choice(BUMP_PARTS), help="Version part to increment for the heading.")
@click.option("--verbosity", type=click.IntRange(0, 3), help="0 silent, 1 errors, 2 progress, 3 all.")
@click.option("--output", "output", type=click.Path(dir_okay=False, writable=True, path_type=Path),
              help="Write the changelog to this file instead of stdout.")
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) logging.")
@click.version_option(version=__version__, prog_name="vcchangelog")
def main(
    config_path: Optional[Path],
    repo_dir: Optional[str],
    upstream: Optional[str],
    token: Optional[str],
    tag: Optional[str],
    tag_pattern: Optional[str],
    bump: Optional[str],
    verbosity: Optional[int],
    output: Optional[Path],
    verbose: bool,
) -> None:
    """Generate a changelog from the commits between two git tags.

    Commits referencing GitHub issues are grouped by the labels of those
    issues; other commits are grouped by patterns in their subject.
    """
    # Use force=True to ensure handlers are reconfigured on subsequent
    # invocations (important for tests).
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        force=True,
    )

    ctx = click.get_current_context(silent=True)
    set_verbosity(3 if verbosity is None else verbosity)

    try:
        try:
            config = load_config(
                config_path,
                {
                    "dir": repo_dir,
                    "upstream": upstream,
                    "token": token,
                    "tag": tag,
                    "tag_pattern": tag_pattern,
                    "bump": bump,
                    "verbosity": verbosity,
                },
            )
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        set_verbosity(config.verbosity)
        print_info(f"Loading {config.dir}")

        try:
            with ProgressIndicator("Reading tags and commits"):
                history = read_history(
                    GitClient(config.dir),
                    tag=config.tag,
                    tag_pattern=config.tag_pattern,
                    issue_pattern=config.issue_pattern,
                )
        except HistoryError as exc:
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_NO_RELEASE_WINDOW)
        except GitError as exc:
            print_error(f"Git error: {exc}")
            raise click.exceptions.Exit(EXIT_VCS_FAILURE)

        newer, older = history.newer, history.older
        print_success(f"Found tags from {newer.name} {newer.date} to {older.name} {older.date}")
        print_success(f"With {len(history.commits)} commits")

        try:
            version = bump_version(newer.name, config.bump)
        except VersionError as exc:
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        try:
            with ProgressIndicator(f"Getting issues from GitHub {config.owner}/{config.repo}"):
                result = retrieve(
                    history.commits,
                    config.issue_pattern,
                    config.external_labels,
                    config.local_labels,
                    GitHubClient(token=config.token),
                    config.owner,
                    config.repo,
                    log=logger,
                )
        except TrackerError as exc:
            print_error(f"Failed connecting to GitHub: {exc}")
            raise click.exceptions.Exit(EXIT_TRACKER_FAILURE)

        for group in result.grouped_commits:
            print_success(f"{len(group.commits)} {group.name}", indent=1)

        text = render_changelog(
            config.renderer, version, newer.date, result.grouped_commits, result.issues
        )
        if output is not None:
            output.write_text(text, encoding="utf-8")
            print_success(f"Changelog written to {output}")
        else:
            click.echo(text, nl=False)

        raise click.exceptions.Exit(EXIT_SUCCESS)

    except click.exceptions.Exit:
        # Click uses its own Exit exception; re-raise to let Click handle it
        raise
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        ctx.exit(EXIT_GENERIC_ERROR)
