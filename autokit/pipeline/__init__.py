"""Release pipeline: plan state machine, cancellation and orchestration."""

from autokit.pipeline.cancel import CancellationToken
from autokit.pipeline.orchestrator import (
    EXIT_ABORTED,
    EXIT_REMEDIATION,
    EXIT_SUCCESS,
    RELEASE_STEPS,
    ReleasePipeline,
    ReleaseReport,
    ReleaseRequest,
)
from autokit.pipeline.plan import PlanStep, ReleasePlan, StepStatus

__all__ = [
    "EXIT_ABORTED",
    "EXIT_REMEDIATION",
    "EXIT_SUCCESS",
    "RELEASE_STEPS",
    "CancellationToken",
    "PlanStep",
    "ReleasePipeline",
    "ReleasePlan",
    "ReleaseReport",
    "ReleaseRequest",
    "StepStatus",
]
