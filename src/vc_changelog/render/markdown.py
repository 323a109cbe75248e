"""
Rendering of grouped commits into changelog text.

A renderer is any object providing the four methods of :class:`Renderer`.
:class:`MarkdownRenderer` is the default; custom renderers can be
loaded from an import path with :func:`load_renderer`.
"""

from __future__ import annotations

import importlib
from typing import Any, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

from vc_changelog.grouping.group_model import ClassifiedCommit, CommitGroup
from vc_changelog.tracker.models import Issue
from vc_changelog.vcs.models import parse_timestamp


RENDERER_METHODS = ("render_commit", "render_group", "render_version", "combine")


class RendererError(Exception):
    """Raised when a custom renderer cannot be loaded."""

    pass


@runtime_checkable
class Renderer(Protocol):
    def render_commit(self, entry: ClassifiedCommit, issue: Optional[Issue]) -> str:
        ...

    def render_group(self, name: str, lines: List[str]) -> List[str]:
        ...

    def render_version(self, version: str, date: str) -> str:
        ...

    def combine(self, heading: str, sections: List[List[str]]) -> str:
        ...


class MarkdownRenderer:
    """Render a release as a markdown section.

    Example output::

        # v1.3.1 - 2018-01-02

        ### Bugs
        * (72d9d941d) #10 Crash on load
    """

    def render_commit(self, entry: ClassifiedCommit, issue: Optional[Issue]) -> str:
        reference = f"#{entry.issue_number} " if entry.issue_number is not None else ""
        title = issue.title if issue is not None and issue.title else entry.name
        return f"* ({entry.hash}) {reference}{title.strip()}"

    def render_group(self, name: str, lines: List[str]) -> List[str]:
        if not lines:
            return []
        return [f"### {name}", *lines, ""]

    def render_version(self, version: str, date: str) -> str:
        return f"# {version} - {format_date(date)}"

    def combine(self, heading: str, sections: List[List[str]]) -> str:
        lines = [heading, ""]
        for section in sections:
            lines.extend(section)
        return "\n".join(lines).strip() + "\n"


def format_date(date: str) -> str:
    """Shorten an ISO-8601 timestamp to ``YYYY-MM-DD``; other text is kept."""
    try:
        return parse_timestamp(date).date().isoformat()
    except ValueError:
        return date


def render_changelog(
    renderer: Renderer,
    version: str,
    date: str,
    groups: Sequence[CommitGroup],
    issues: Mapping[int, Issue],
) -> str:
    """Drive ``renderer`` over the grouped commits of one release."""
    sections = []
    for group in groups:
        lines = [
            renderer.render_commit(entry, issues.get(entry.issue_number))
            for entry in group.commits
        ]
        sections.append(renderer.render_group(group.name, lines))
    return renderer.combine(renderer.render_version(version, date), sections)


def load_renderer(path: str) -> Any:
    """Import a renderer from ``"package.module:attribute"``.

    A class is instantiated without arguments; any other attribute is
    used as is. The result must provide every method in
    :data:`RENDERER_METHODS`.

    Raises
    ------
    RendererError
        If the path is malformed, cannot be imported, or the object lacks
        one of the renderer methods.
    """
    module_name, sep, attribute = path.partition(":")
    if not sep or not module_name or not attribute:
        raise RendererError(f"Renderer must be given as 'module:attribute', got {path!r}")
    try:
        module = importlib.import_module(module_name)
        target = getattr(module, attribute)
    except (ImportError, AttributeError) as exc:
        raise RendererError(f"Cannot import renderer {path!r}: {exc}") from exc
    renderer = target() if isinstance(target, type) else target
    missing = [name for name in RENDERER_METHODS if not callable(getattr(renderer, name, None))]
    if missing:
        raise RendererError(f"Renderer {path!r} is missing: {', '.join(missing)}")
    return renderer
