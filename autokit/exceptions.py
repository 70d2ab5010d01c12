"""Custom exception hierarchy for the automation orchestrator.

Exit codes follow the CLI contract:
- 1: General error (detection, git, ecosystem)
- 2: Configuration error
- 3: Release aborted before any irreversible step
- 4: Release failed after an irreversible step (manual remediation)
"""


class AutomationError(Exception):
    """Base exception for all automation errors.

    All orchestrator exceptions inherit from this class.
    Each subclass defines an exit_code for CLI error reporting.
    """

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        details: str | None = None,
        fix_hint: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Brief error message
            details: Detailed explanation of what went wrong
            fix_hint: Suggested command or action to fix the issue
        """
        super().__init__(message)
        self.message = message
        self.details = details
        self.fix_hint = fix_hint

    def __str__(self) -> str:
        parts = [self.message]
        if self.details:
            parts.append(f"\nDetails: {self.details}")
        if self.fix_hint:
            parts.append(f"\nFix: {self.fix_hint}")
        return "".join(parts)


class DetectionError(AutomationError):
    """The project root cannot be inspected.

    Raised when:
    - Root path does not exist or is not a directory
    - Directory listing is not permitted
    """

    exit_code = 1


class DetectionAmbiguous(AutomationError):
    """Markers of several ecosystems are present at once.

    Non-fatal: the detector records it and falls back to the fixed
    ecosystem priority order.
    """

    exit_code = 0


class ConfigParseError(AutomationError):
    """A configuration layer cannot be used.

    Raised when:
    - Override file has invalid syntax (YAML/TOML)
    - Layer values fail model validation
    - Cache file is unreadable

    The config store skips the offending layer and surfaces a warning.
    """

    exit_code = 2


class EcosystemError(AutomationError):
    """Ecosystem-specific operation failures.

    Raised when:
    - Manifest cannot be read or parsed
    - Version field is missing
    - Version file update fails
    """

    exit_code = 1


class GitError(AutomationError):
    """Git operation failures.

    Raised when:
    - Git commands fail
    - Tag creation fails
    - Push operations fail
    """

    exit_code = 1


class NoTestFrameworkDetected(AutomationError):
    """No usable test framework was found for the project.

    Fatal only in strict mode; flexible mode treats it as a skip.
    """

    exit_code = 3


class TestFailure(AutomationError):
    """The test run reported failures or timed out."""

    __test__ = False  # keep pytest from collecting this class
    exit_code = 3


class CoverageBelowThreshold(AutomationError):
    """Measured coverage is under the configured threshold."""

    exit_code = 3


class VersionComputeError(AutomationError):
    """The next version cannot be computed.

    Raised when:
    - The latest release tag is not a valid semantic version
    - The computed version would not exceed the last release
    - The target tag already exists
    """

    exit_code = 3


class GitStateDirty(AutomationError):
    """The working tree has uncommitted changes."""

    exit_code = 3


class ReleaseLocked(AutomationError):
    """Another release pipeline holds the repository lock."""

    exit_code = 3


class PlanInvariantError(AutomationError):
    """A release plan transition would undo an irreversible step."""

    exit_code = 4


class PublishFailure(AutomationError):
    """Publishing failed after the tag was created and pushed.

    Never retried automatically; surfaced with manual remediation steps.
    """

    exit_code = 4
