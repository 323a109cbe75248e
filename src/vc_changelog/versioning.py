"""Computation of the version named in the changelog heading."""

from __future__ import annotations

from packaging.version import InvalidVersion, Version


BUMP_PARTS = ("major", "minor", "patch")


class VersionError(Exception):
    """Raised when a tag name cannot be read as a semantic version."""

    pass


def bump_version(tag_name: str, part: str = "patch") -> str:
    """Increment ``part`` of the version in ``tag_name``.

    A leading ``v`` is kept, pre-release and local segments are dropped:

    >>> bump_version("v1.3.0")
    'v1.3.1'
    >>> bump_version("2.0.9", "minor")
    '2.1.0'
    """
    if part not in BUMP_PARTS:
        raise VersionError(f"Unknown version part {part!r}; expected one of {', '.join(BUMP_PARTS)}")
    prefix = "v" if tag_name[:1] in ("v", "V") else ""
    try:
        version = Version(tag_name[len(prefix):])
    except InvalidVersion as exc:
        raise VersionError(f"Tag {tag_name!r} is not a valid version") from exc

    major, minor, patch = (list(version.release) + [0, 0, 0])[:3]
    if part == "major":
        major, minor, patch = major + 1, 0, 0
    elif part == "minor":
        minor, patch = minor + 1, 0
    else:
        patch += 1
    return f"{prefix}{major}.{minor}.{patch}"
