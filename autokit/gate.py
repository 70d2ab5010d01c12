"""Commit gate.

Runs on every commit attempt:
1. Static checks (message format, staged content, ecosystem lint/format)
2. Tests, unless disabled by configuration or bypassed
3. Accept or reject

The gate moves IDLE -> CHECKING -> ACCEPTED | REJECTED exactly once;
a rejected commit is retried by evaluating a new gate.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from autokit.commits.suggest import CommitSuggestion, suggest_commit_type
from autokit.config.models import AutomationConfig
from autokit.detection import ProjectProfile
from autokit.exceptions import AutomationError, NoTestFrameworkDetected, TestFailure
from autokit.git.vcs import VersionControl
from autokit.testing import TestOutcome, primary_candidate, run_tests
from autokit.utils.shell import CommandRunner, SubprocessRunner
from autokit.validators import CheckContext, ValidationResult, ValidatorRegistry
from autokit.validators import commit, lint, staged  # noqa: F401

logger = logging.getLogger(__name__)

STATIC_CATEGORIES = ("message", "staged", "lint")

EXIT_ACCEPTED = 0
EXIT_REJECTED_LINT = 1
EXIT_REJECTED_TESTS = 2


class GateState(Enum):
    IDLE = "idle"
    CHECKING = "checking"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class TestMode(Enum):
    """How test results affect the decision."""

    __test__ = False  # keep pytest from collecting this class

    STRICT = "strict"  # failures and missing frameworks reject
    FLEXIBLE = "flexible"  # failures are reported only
    BYPASS = "bypass"  # tests skipped on request
    DISABLED = "disabled"  # testing.enabled is false


def resolve_test_mode(
    config: AutomationConfig, strict_tests: bool = False, skip_tests: bool = False
) -> TestMode:
    """Pick the test mode for one commit attempt.

    A bypass request wins over strictness from either the flag or
    ``testing.strict_mode``.
    """
    if not config.testing.enabled:
        return TestMode.DISABLED
    if skip_tests:
        return TestMode.BYPASS
    if strict_tests or config.testing.strict_mode:
        return TestMode.STRICT
    return TestMode.FLEXIBLE


@dataclass
class GateDecision:
    """Outcome of a commit gate evaluation.

    Attributes:
        state: ACCEPTED or REJECTED
        mode: Test mode that applied
        results: Static check results, in check order
        test_outcome: Test run result, when tests ran
        rejected_by: "lint" or "tests" for a rejection
        error: The error behind a test rejection or report
        events: Transitions and decisions, in order
        suggestion: Likely commit type, for a rejected message
        fix_hint: Corrected command line built from the suggestion
    """

    state: GateState
    mode: TestMode
    results: list[ValidationResult] = field(default_factory=list)
    test_outcome: TestOutcome | None = None
    rejected_by: str | None = None
    error: AutomationError | None = None
    events: list[str] = field(default_factory=list)
    suggestion: CommitSuggestion | None = None
    fix_hint: str | None = None

    @property
    def accepted(self) -> bool:
        return self.state is GateState.ACCEPTED

    @property
    def reason(self) -> str | None:
        """Name of the error that decided a test rejection."""
        return type(self.error).__name__ if self.error else None

    @property
    def errors(self) -> list[ValidationResult]:
        return [r for r in self.results if r.is_error]

    @property
    def exit_code(self) -> int:
        if self.accepted:
            return EXIT_ACCEPTED
        if self.rejected_by == "tests":
            return EXIT_REJECTED_TESTS
        return EXIT_REJECTED_LINT


class CommitGate:
    """Pre-commit enforcement for one commit attempt.

    Args:
        project_root: Repository root
        config: Merged configuration
        profile: Detected project profile
        vcs: Version control capability
        runner: Command runner for lint tools and tests
    """

    def __init__(
        self,
        project_root: Path,
        config: AutomationConfig,
        profile: ProjectProfile,
        vcs: VersionControl,
        runner: CommandRunner | None = None,
    ) -> None:
        self.project_root = project_root
        self.config = config
        self.profile = profile
        self.vcs = vcs
        self.runner = runner or SubprocessRunner()
        self.state = GateState.IDLE
        self.events: list[str] = []

    def _record(self, event: str) -> None:
        self.events.append(event)
        logger.info("commit gate: %s", event)

    def _transition(self, state: GateState, note: str = "") -> None:
        previous = self.state
        self.state = state
        self._record(f"{previous.value} -> {state.value}" + (f" ({note})" if note else ""))

    def evaluate(
        self, message: str, strict_tests: bool = False, skip_tests: bool = False
    ) -> GateDecision:
        """Evaluate a commit attempt.

        Args:
            message: Proposed commit message
            strict_tests: Reject on test failure or missing framework
            skip_tests: Bypass the test step (wins over strict)

        Returns:
            GateDecision in a terminal state

        Raises:
            RuntimeError: If this gate was already evaluated
        """
        if self.state is not GateState.IDLE:
            raise RuntimeError("Commit gate already evaluated; create a new gate to retry")

        mode = resolve_test_mode(self.config, strict_tests, skip_tests)
        self._transition(GateState.CHECKING)
        if skip_tests and (strict_tests or self.config.testing.strict_mode):
            self._record("bypass requested together with strict mode: bypass wins")
        self._record(f"test mode: {mode.value}")

        decision = GateDecision(state=self.state, mode=mode, events=self.events)

        context = CheckContext(
            project_root=self.project_root,
            config=self.config,
            profile=self.profile,
            vcs=self.vcs,
            runner=self.runner,
            message=message,
        )
        for category in STATIC_CATEGORIES:
            decision.results.extend(ValidatorRegistry.run_category(category, context))

        if decision.errors:
            decision.rejected_by = "lint"
            if any(r.check == "commit_message" for r in decision.errors):
                self._suggest(decision, message)
            return self._finish(decision, GateState.REJECTED, f"{len(decision.errors)} check(s) failed")

        if mode is TestMode.DISABLED:
            self._record("tests disabled by configuration")
        elif mode is TestMode.BYPASS:
            self._record("tests bypassed (--skip-tests)")
        else:
            self._run_tests(decision)
            if decision.rejected_by:
                return self._finish(decision, GateState.REJECTED, decision.reason or "tests")

        return self._finish(decision, GateState.ACCEPTED)

    def _suggest(self, decision: GateDecision, message: str) -> None:
        try:
            staged_files = self.vcs.staged_files()
        except AutomationError as e:
            logger.debug("No staged files for the type suggestion: %s", e.message)
            staged_files = []

        suggestion = suggest_commit_type(staged_files, message)
        # keep what the author wrote when it is a usable description
        first = message.strip().splitlines()[0].strip() if message.strip() else ""
        subject = first.partition(":")[2].strip() if ":" in first else first
        if len(subject) < self.config.commits.min_description_length:
            subject = suggestion.description

        decision.suggestion = suggestion
        text = suggestion.message(subject).replace('"', "'")
        decision.fix_hint = f'autokit commit "{text}"'
        self._record(f"suggested type: {suggestion.type} ({suggestion.reason or 'no evidence'})")

    def _run_tests(self, decision: GateDecision) -> None:
        strict = decision.mode is TestMode.STRICT
        try:
            candidate = primary_candidate(self.profile, self.project_root, self.config)
        except NoTestFrameworkDetected as e:
            decision.error = e
            if strict:
                decision.rejected_by = "tests"
            else:
                self._record("no test framework detected: tests skipped")
            return

        outcome = run_tests(candidate, self.config, self.runner, self.project_root)
        decision.test_outcome = outcome
        self._record(f"tests {outcome.summary()}")
        if outcome.passed:
            return

        decision.error = TestFailure(
            f"Tests failed: {outcome.summary()}",
            details=outcome.raw[-2000:] or None,
            fix_hint="Fix the failing tests or commit with --skip-tests",
        )
        if strict:
            decision.rejected_by = "tests"
        else:
            self._record("test failures reported; accepted in flexible mode")

    def _finish(self, decision: GateDecision, state: GateState, note: str = "") -> GateDecision:
        self._transition(state, note)
        decision.state = state
        return decision
