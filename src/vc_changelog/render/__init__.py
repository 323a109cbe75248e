"""
Changelog rendering.

See :mod:`vc_changelog.render.markdown` for the renderer interface and
the default markdown output.
"""

from .markdown import MarkdownRenderer, Renderer, RendererError, load_renderer, render_changelog  # noqa: F401
