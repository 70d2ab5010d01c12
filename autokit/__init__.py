"""Automation orchestrator: project detection, commit gate and releases."""

__version__ = "0.1.0"

from autokit.exceptions import (
    AutomationError,
    ConfigParseError,
    CoverageBelowThreshold,
    DetectionAmbiguous,
    DetectionError,
    EcosystemError,
    GitError,
    GitStateDirty,
    NoTestFrameworkDetected,
    PlanInvariantError,
    PublishFailure,
    ReleaseLocked,
    TestFailure,
    VersionComputeError,
)

__all__ = [
    "__version__",
    "AutomationError",
    "DetectionError",
    "DetectionAmbiguous",
    "ConfigParseError",
    "EcosystemError",
    "GitError",
    "NoTestFrameworkDetected",
    "TestFailure",
    "CoverageBelowThreshold",
    "VersionComputeError",
    "GitStateDirty",
    "ReleaseLocked",
    "PlanInvariantError",
    "PublishFailure",
]
