"""
Configuration loader for vc_changelog.

Settings come from three layers, later ones winning: built-in defaults,
an optional JSON configuration file, and command line options. The
merged settings are validated into a :class:`ChangelogConfig`.

A configuration file looks like::

    {
        "upstream": "owner/repo",
        "tag_pattern": "v\\\\d+\\\\.\\\\d+\\\\.\\\\d+",
        "labels": {
            "external": [{"match": "Bug", "name": "Bugs"}],
            "local": [{"match": {"regex": "Hotfix [-~]? ?"}, "name": "Others"}]
        }
    }

If the file is missing, malformed, or any setting is invalid, a
:class:`ConfigError` is raised.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Pattern, Tuple

from vc_changelog.grouping.matcher import LabelRule
from vc_changelog.render.markdown import MarkdownRenderer, RendererError, load_renderer
from vc_changelog.vcs.git_client import GitClient
from vc_changelog.versioning import BUMP_PARTS


logger = logging.getLogger(__name__)
# Attach a null handler to avoid "No handler" warnings in environments
# where logging has not been configured.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""

    pass


DEFAULTS: Dict[str, Any] = {
    "dir": ".",
    "upstream": None,
    "token": None,
    "tag": None,
    "tag_pattern": r"v\d+\.\d+\.\d+",
    "issue_pattern": r"(Fix|Close|Resolve) #(\d+)",
    "labels": {
        "external": [
            {"match": "Feature", "name": "Features"},
            {"match": "Bug", "name": "Bugs"},
        ],
        "local": [
            {"match": {"regex": r"Hotfix [-~]? ?"}, "name": "Others"},
        ],
    },
    "bump": "patch",
    "verbosity": 3,
    "renderer": None,
}

_STRING_KEYS = ("dir", "upstream", "token", "tag", "tag_pattern", "issue_pattern", "bump", "renderer")


@dataclass(frozen=True)
class ChangelogConfig:
    """Validated settings for one changelog run."""

    dir: Path
    owner: str
    repo: str
    token: Optional[str]
    tag: Optional[str]
    tag_pattern: Pattern[str]
    issue_pattern: Pattern[str]
    external_labels: Tuple[LabelRule, ...]
    local_labels: Tuple[LabelRule, ...]
    bump: str = "patch"
    verbosity: int = 3
    renderer: Any = field(default_factory=MarkdownRenderer, compare=False)


def read_config_file(path: Path) -> Dict[str, Any]:
    """Read a JSON configuration file.

    Raises
    ------
    ConfigError
        If the file does not exist, cannot be parsed, or is not an object.
    """
    if not path.exists():
        logger.error("Configuration file '%s' does not exist", path)
        raise ConfigError(f"Missing configuration file: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path.name} must contain a JSON object")
    logger.debug("Loaded configuration from: %s", path)
    return data


def merge_settings(*layers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge setting layers; ``None`` values never override earlier layers.

    ``labels`` is merged per kind so a file can override only the
    external or only the local rules.
    """
    merged = copy.deepcopy(DEFAULTS)
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            if value is None:
                continue
            if key == "labels" and isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = {**merged[key], **value}
            else:
                merged[key] = value
    return merged


def _compile(key: str, value: str, min_groups: int = 0) -> Pattern[str]:
    try:
        pattern = re.compile(value)
    except re.error as exc:
        raise ConfigError(f"'{key}' is not a valid regular expression: {exc}") from exc
    if pattern.groups < min_groups:
        raise ConfigError(f"'{key}' must have at least {min_groups} capture groups")
    return pattern


def _parse_upstream(upstream: Optional[str]) -> Tuple[str, str]:
    parts = (upstream or "").split("/")
    if len(parts) != 2 or not all(parts):
        raise ConfigError(f"'{upstream}' is not a valid GitHub repository, expected <owner>/<repo>")
    return parts[0], parts[1]


def _parse_rules(kind: str, rules: Any) -> Tuple[LabelRule, ...]:
    if not isinstance(rules, list):
        raise ConfigError(f"'labels.{kind}' must be a list")
    parsed: List[LabelRule] = []
    for index, rule in enumerate(rules):
        if not isinstance(rule, dict) or set(rule) != {"match", "name"}:
            raise ConfigError(f"'labels.{kind}[{index}]' must be an object with 'match' and 'name'")
        if not isinstance(rule["name"], str):
            raise ConfigError(f"'labels.{kind}[{index}].name' must be a string")
        try:
            parsed.append(LabelRule.from_config(rule))
        except ValueError as exc:
            raise ConfigError(f"'labels.{kind}[{index}].match': {exc}") from exc
    return tuple(parsed)


def validate(settings: Mapping[str, Any]) -> ChangelogConfig:
    """Validate merged settings and resolve them into a :class:`ChangelogConfig`."""
    unknown = sorted(set(settings) - set(DEFAULTS))
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
    for key in _STRING_KEYS:
        if settings.get(key) is not None and not isinstance(settings[key], str):
            raise ConfigError(f"'{key}' must be a string")
    verbosity = settings.get("verbosity")
    if not isinstance(verbosity, int) or isinstance(verbosity, bool) or not 0 <= verbosity <= 3:
        raise ConfigError("'verbosity' must be an integer between 0 and 3")
    if settings["bump"] not in BUMP_PARTS:
        raise ConfigError(f"'bump' must be one of {', '.join(BUMP_PARTS)}")

    labels = settings.get("labels")
    if not isinstance(labels, dict) or set(labels) - {"external", "local"}:
        raise ConfigError("'labels' must be an object with 'external' and/or 'local' lists")

    repo_dir = Path(settings["dir"]).resolve()
    if not repo_dir.is_dir() or not GitClient.is_repo(repo_dir):
        raise ConfigError(f"{repo_dir} does not exist, or is not a valid git repo.")

    owner, repo = _parse_upstream(settings.get("upstream"))

    renderer: Any = MarkdownRenderer()
    if settings.get("renderer"):
        try:
            renderer = load_renderer(settings["renderer"])
        except RendererError as exc:
            raise ConfigError(str(exc)) from exc

    return ChangelogConfig(
        dir=repo_dir,
        owner=owner,
        repo=repo,
        token=settings.get("token"),
        tag=settings.get("tag"),
        tag_pattern=_compile("tag_pattern", settings["tag_pattern"]),
        issue_pattern=_compile("issue_pattern", settings["issue_pattern"], min_groups=2),
        external_labels=_parse_rules("external", labels.get("external", [])),
        local_labels=_parse_rules("local", labels.get("local", [])),
        bump=settings["bump"],
        verbosity=verbosity,
        renderer=renderer,
    )


def load_config(
    config_path: Optional[Path] = None, overrides: Optional[Mapping[str, Any]] = None
) -> ChangelogConfig:
    """Load, merge and validate the configuration for a run.

    Args:
        config_path: Optional JSON configuration file.
        overrides: Settings given on the command line; ``None`` values are ignored.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If the file or any setting is invalid.
    """
    file_settings = read_config_file(config_path) if config_path is not None else None
    return validate(merge_settings(file_settings, overrides))
