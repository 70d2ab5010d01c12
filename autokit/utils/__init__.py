"""Utility modules for the automation orchestrator."""

from autokit.utils.shell import (
    CommandResult,
    CommandRunner,
    ShellError,
    SubprocessRunner,
    run,
    strip_ansi,
)
from autokit.utils.version import (
    SEMVER_PATTERN,
    ZERO_VERSION,
    BumpLevel,
    VersionState,
    bump_version,
    is_valid_version,
    parse_version,
)

__all__ = [
    # Shell utilities
    "run",
    "strip_ansi",
    "ShellError",
    "CommandResult",
    "CommandRunner",
    "SubprocessRunner",
    # Version utilities
    "parse_version",
    "is_valid_version",
    "bump_version",
    "BumpLevel",
    "VersionState",
    "SEMVER_PATTERN",
    "ZERO_VERSION",
]
