"""Release plan state machine.

A ReleasePlan is the ordered list of pipeline steps and their status.
It is the audit record of a release attempt: what ran, what failed and
what was skipped. Steps complete strictly in order, and a step can only
return to pending while no irreversible step at or after it is done.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from autokit.exceptions import PlanInvariantError


class StepStatus(Enum):
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class PlanStep:
    """One step of a release plan.

    Attributes:
        name: Step identifier (e.g., "create_tag")
        irreversible: Completing the step has effects outside the checkout
        status: Current status
        message: What happened, or why the step was skipped
    """

    name: str
    irreversible: bool = False
    status: StepStatus = StepStatus.PENDING
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "irreversible": self.irreversible,
            "message": self.message,
        }


class ReleasePlan:
    """Ordered release steps with enforced transitions.

    Args:
        steps: (name, irreversible) pairs in execution order
    """

    def __init__(self, steps: Iterable[tuple[str, bool]]) -> None:
        self.steps = [PlanStep(name=name, irreversible=irreversible) for name, irreversible in steps]
        self._index = {step.name: i for i, step in enumerate(self.steps)}
        if len(self._index) != len(self.steps):
            raise PlanInvariantError("Release plan step names must be unique")

    def __iter__(self) -> Iterator[PlanStep]:
        return iter(self.steps)

    def __getitem__(self, name: str) -> PlanStep:
        return self.steps[self._position(name)]

    def _position(self, name: str) -> int:
        try:
            return self._index[name]
        except KeyError:
            raise PlanInvariantError(f"Unknown release step '{name}'") from None

    def mark(self, name: str, status: StepStatus, message: str = "") -> PlanStep:
        """Move a step to a new status.

        Raises:
            PlanInvariantError: If an earlier step is still pending, or the
                step would return to pending behind a done irreversible step
        """
        position = self._position(name)
        step = self.steps[position]

        if status is StepStatus.PENDING:
            blocker = next(
                (
                    s
                    for s in self.steps[position:]
                    if s.irreversible and s.status is StepStatus.DONE
                ),
                None,
            )
            if blocker is not None:
                raise PlanInvariantError(
                    f"Cannot reset '{name}': irreversible step '{blocker.name}' is done",
                    fix_hint="Remediate forward; completed irreversible steps cannot be undone",
                )
        else:
            waiting = [s.name for s in self.steps[:position] if s.status is StepStatus.PENDING]
            if waiting:
                raise PlanInvariantError(
                    f"Cannot complete '{name}' before {', '.join(waiting)}"
                )

        step.status = status
        step.message = message
        return step

    def done(self, name: str, message: str = "") -> PlanStep:
        return self.mark(name, StepStatus.DONE, message)

    def fail(self, name: str, message: str = "") -> PlanStep:
        return self.mark(name, StepStatus.FAILED, message)

    def skip(self, name: str, message: str = "") -> PlanStep:
        return self.mark(name, StepStatus.SKIPPED, message)

    def skip_pending(self, message: str) -> None:
        """Skip every step that has not run yet."""
        for step in self.steps:
            if step.status is StepStatus.PENDING:
                self.skip(step.name, message)

    @property
    def next_pending(self) -> PlanStep | None:
        return next((s for s in self.steps if s.status is StepStatus.PENDING), None)

    @property
    def failed_step(self) -> PlanStep | None:
        return next((s for s in self.steps if s.status is StepStatus.FAILED), None)

    @property
    def crossed_irreversible(self) -> bool:
        """An irreversible step has started (done or failed)."""
        return any(
            s.irreversible and s.status in (StepStatus.DONE, StepStatus.FAILED)
            for s in self.steps
        )

    def statuses(self) -> dict[str, str]:
        return {step.name: step.status.value for step in self.steps}

    def to_dict(self) -> list[dict[str, Any]]:
        return [step.to_dict() for step in self.steps]
