"""
Grouping logic for changelog entries.

This package provides the label rules and the classifier that sorts
commits into named groups. See :mod:`vc_changelog.grouping.classifier`
and :mod:`vc_changelog.grouping.group_model` for details.
"""

from .classifier import classify  # noqa: F401
from .group_model import ClassifiedCommit, CommitGroup  # noqa: F401
from .matcher import LabelRule, LiteralMatcher, Matcher, PatternMatcher, make_matcher  # noqa: F401
