"""Semantic version parsing, ordering, and bumping.

All version strings follow semantic versioning: MAJOR.MINOR.PATCH with an
optional ``-prerelease`` suffix and ignored ``+build`` metadata. Git tags may
carry a prefix (e.g., 'v1.2.3').
"""

import functools
import re
from dataclasses import dataclass
from enum import Enum

from autokit.exceptions import VersionComputeError

# MAJOR.MINOR.PATCH[-prerelease][+build], optional leading 'v'
SEMVER_PATTERN = re.compile(
    r"^v?(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?(?:\+[0-9A-Za-z.-]+)?$"
)


class BumpLevel(Enum):
    """Semantic version increment."""

    PRERELEASE = "prerelease"
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"


def _prerelease_key(prerelease: str | None) -> tuple[int, tuple[tuple[int, int | str], ...]]:
    # A release sorts after any of its prereleases; numeric identifiers sort
    # before alphanumeric ones.
    if prerelease is None:
        return (1, ())
    parts: list[tuple[int, int | str]] = []
    for identifier in prerelease.split("."):
        if identifier.isdigit():
            parts.append((0, int(identifier)))
        else:
            parts.append((1, identifier))
    return (0, tuple(parts))


@functools.total_ordering
@dataclass(frozen=True)
class VersionState:
    """A semantic version with total order.

    Attributes:
        major: Major component
        minor: Minor component
        patch: Patch component
        prerelease: Dot-separated prerelease identifiers (e.g., 'beta.2')
    """

    major: int
    minor: int
    patch: int
    prerelease: str | None = None

    def __str__(self) -> str:
        core = f"{self.major}.{self.minor}.{self.patch}"
        return f"{core}-{self.prerelease}" if self.prerelease else core

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, VersionState):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def _sort_key(self) -> tuple[object, ...]:
        return (self.major, self.minor, self.patch, _prerelease_key(self.prerelease))

    def tag(self, prefix: str = "v") -> str:
        """Render the git tag name for this version."""
        return f"{prefix}{self}"


ZERO_VERSION = VersionState(0, 0, 0)


def parse_version(version_str: str, prefix: str = "v") -> VersionState:
    """Parse a version string or tag name into a VersionState.

    Args:
        version_str: Version or tag (e.g., '1.2.3', 'v1.2.3', 'v2.0.0-rc.1')
        prefix: Tag prefix to strip before parsing

    Returns:
        Parsed VersionState

    Raises:
        VersionComputeError: If the string is not a semantic version

    Examples:
        >>> parse_version('v1.2.3')
        VersionState(major=1, minor=2, patch=3, prerelease=None)
        >>> str(parse_version('2.0.0-beta.1'))
        '2.0.0-beta.1'
    """
    if not version_str or not version_str.strip():
        raise VersionComputeError(
            "Empty version string",
            details="Version string cannot be empty or whitespace",
            fix_hint="Provide a valid semantic version (e.g., '1.2.3')",
        )

    text = version_str.strip()
    if prefix and text.startswith(prefix):
        text = text[len(prefix) :]

    match = SEMVER_PATTERN.match(text)
    if not match:
        raise VersionComputeError(
            f"Invalid version format: '{version_str}'",
            details="Version must follow semantic versioning: MAJOR.MINOR.PATCH[-PRERELEASE]",
            fix_hint="Use format like '1.2.3' or 'v1.2.3'",
        )

    return VersionState(
        major=int(match.group(1)),
        minor=int(match.group(2)),
        patch=int(match.group(3)),
        prerelease=match.group(4),
    )


def is_valid_version(version_str: str, prefix: str = "v") -> bool:
    """Check if a version string is valid.

    Examples:
        >>> is_valid_version('1.2.3')
        True
        >>> is_valid_version('1.2')
        False
    """
    try:
        parse_version(version_str, prefix=prefix)
    except VersionComputeError:
        return False
    return True


def _next_prerelease(current: VersionState, preid: str | None) -> VersionState:
    if current.prerelease is None:
        ident = f"{preid}.0" if preid else "0"
        return VersionState(current.major, current.minor, current.patch + 1, ident)

    parts = current.prerelease.split(".")
    if preid and parts[0] != preid:
        return VersionState(current.major, current.minor, current.patch, f"{preid}.0")

    for index in range(len(parts) - 1, -1, -1):
        if parts[index].isdigit():
            parts[index] = str(int(parts[index]) + 1)
            break
    else:
        parts.append("0")
    return VersionState(current.major, current.minor, current.patch, ".".join(parts))


def bump_version(
    current: VersionState,
    level: BumpLevel,
    preid: str | None = None,
) -> VersionState:
    """Apply a bump to a version.

    A prerelease graduates to its own release when the bump does not
    need to go further: 1.3.0-rc.1 + minor -> 1.3.0, but + patch -> 1.3.0
    as well, while 1.3.1-rc.1 + minor -> 1.4.0.

    Args:
        current: Version to bump
        level: Increment to apply
        preid: Prerelease identifier for PRERELEASE bumps (e.g., 'beta')

    Returns:
        New VersionState, always strictly greater than ``current``

    Examples:
        >>> str(bump_version(parse_version('1.2.3'), BumpLevel.MINOR))
        '1.3.0'
        >>> str(bump_version(parse_version('1.2.3'), BumpLevel.PRERELEASE, 'beta'))
        '1.2.4-beta.0'
    """
    pre = current.prerelease is not None
    if level is BumpLevel.MAJOR:
        if pre and current.minor == 0 and current.patch == 0:
            return VersionState(current.major, 0, 0)
        return VersionState(current.major + 1, 0, 0)
    if level is BumpLevel.MINOR:
        if pre and current.patch == 0:
            return VersionState(current.major, current.minor, 0)
        return VersionState(current.major, current.minor + 1, 0)
    if level is BumpLevel.PATCH:
        if pre:
            return VersionState(current.major, current.minor, current.patch)
        return VersionState(current.major, current.minor, current.patch + 1)
    return _next_prerelease(current, preid)


__all__ = [
    "SEMVER_PATTERN",
    "ZERO_VERSION",
    "BumpLevel",
    "VersionState",
    "bump_version",
    "is_valid_version",
    "parse_version",
]
