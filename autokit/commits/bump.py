"""Version bump decisions from classified commits."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from autokit.commits.parser import CommitRecord, CommitType
from autokit.config.models import DEFAULT_NON_RELEASE_TYPES
from autokit.exceptions import VersionComputeError
from autokit.utils.version import BumpLevel, VersionState, bump_version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReleaseDecision:
    """A release is due.

    Attributes:
        current: Version of the last release
        level: Bump that was applied
        next_version: Version to release
        explicit: The level was requested rather than derived
    """

    current: VersionState
    level: BumpLevel
    next_version: VersionState
    explicit: bool = False


@dataclass(frozen=True)
class NothingToRelease:
    """No release is due; ``reason`` says why."""

    current: VersionState
    reason: str


VersionDecision = ReleaseDecision | NothingToRelease


def determine_bump(
    records: Iterable[CommitRecord],
    non_release_types: Sequence[str] = DEFAULT_NON_RELEASE_TYPES,
) -> BumpLevel | None:
    """Derive the bump level from classified commits.

    Any breaking change gives MAJOR; otherwise any feature gives MINOR;
    otherwise any commit whose type is not a non-release type gives PATCH.

    Returns:
        Bump level, or None when only non-release commits are present
    """
    level: BumpLevel | None = None
    for record in records:
        if record.is_breaking or record.type is CommitType.BREAKING:
            return BumpLevel.MAJOR
        if record.type is CommitType.FEAT:
            level = BumpLevel.MINOR
        elif level is None and record.type_token not in non_release_types:
            level = BumpLevel.PATCH
    return level


def compute_bump(
    records: Sequence[CommitRecord],
    current: VersionState,
    non_release_types: Sequence[str] = DEFAULT_NON_RELEASE_TYPES,
) -> VersionState | None:
    """Next version implied by the commits, or None when nothing is due.

    Raises:
        VersionComputeError: If the result would not exceed ``current``
    """
    decision = decide_version(records, current, non_release_types=non_release_types)
    if isinstance(decision, NothingToRelease):
        return None
    return decision.next_version


def decide_version(
    records: Sequence[CommitRecord],
    current: VersionState,
    level: BumpLevel | None = None,
    non_release_types: Sequence[str] = DEFAULT_NON_RELEASE_TYPES,
    preid: str | None = None,
) -> VersionDecision:
    """Decide whether and how to release.

    An explicit ``level`` overrides a "no bump" verdict from the commits,
    but never an empty range: with no commits there is nothing to release.

    Args:
        records: Commits since the last release
        current: Version of the last release
        level: Requested bump; None derives it from the commits
        non_release_types: Types that do not trigger a release alone
        preid: Prerelease identifier for PRERELEASE bumps

    Returns:
        ReleaseDecision or NothingToRelease

    Raises:
        VersionComputeError: If the next version would not exceed ``current``
    """
    if not records:
        return NothingToRelease(current=current, reason="no commits since the last release")

    explicit = level is not None
    if level is None:
        level = determine_bump(records, non_release_types)
        if level is None:
            return NothingToRelease(
                current=current,
                reason=f"only non-release commits ({', '.join(non_release_types)})",
            )

    next_version = bump_version(current, level, preid=preid)
    if not next_version > current:
        raise VersionComputeError(
            f"Computed version {next_version} does not exceed {current}",
            fix_hint="Choose a higher bump level",
        )

    logger.info("Version %s -> %s (%s)", current, next_version, level.value)
    return ReleaseDecision(
        current=current,
        level=level,
        next_version=next_version,
        explicit=explicit,
    )
