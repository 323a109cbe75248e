"""
Configuration loading for vc_changelog.

Merges defaults, an optional JSON file and command line options into a
validated :class:`ChangelogConfig`. See :mod:`vc_changelog.config.loader`
for implementation details.
"""

from .loader import ChangelogConfig, ConfigError, load_config  # noqa: F401
