"""Release workflow orchestration.

Runs the release plan step by step:
1. Verify the working tree is clean
2. Compute the next version from the commits since the last tag
3. Run the tests
4. Check coverage
5. Render the changelog
6. Commit version files and changelog (irreversible from here on)
7. Create the tag
8. Push branch and tag
9. Publish the package

Steps 1-5 never touch the repository, so a failure there aborts with
nothing to undo. From step 6 on nothing is rolled back: a failure stops
the plan and the report lists the commands that finish the release by
hand.
"""

import logging
import shlex
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rich.console import Console

from autokit.commits import (
    CommitRecord,
    NothingToRelease,
    ReleaseDecision,
    classify,
    decide_version,
    prepend_changelog,
    render_changelog,
)
from autokit.config.models import AutomationConfig
from autokit.config.store import STATE_FILES, ConfigStore
from autokit.detection import ProjectProfile
from autokit.ecosystems import EcosystemRegistry
from autokit.exceptions import (
    AutomationError,
    CoverageBelowThreshold,
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
from autokit.git.vcs import VersionControl
from autokit.pipeline.cancel import CancellationToken
from autokit.pipeline.plan import ReleasePlan, StepStatus
from autokit.publishers import PublishContext, PublisherRegistry, PublishStatus
from autokit.testing import TestOutcome, primary_candidate, run_tests
from autokit.utils.locking import RepositoryLock
from autokit.utils.logging import step_timer
from autokit.utils.shell import CommandRunner, SubprocessRunner
from autokit.utils.version import ZERO_VERSION, BumpLevel, VersionState, parse_version
from autokit.validators import CheckContext, ValidatorRegistry
from autokit.validators import git as git_checks  # noqa: F401

logger = logging.getLogger(__name__)

# (name, irreversible) in execution order
RELEASE_STEPS: list[tuple[str, bool]] = [
    ("verify_clean", False),
    ("compute_version", False),
    ("run_tests", False),
    ("check_coverage", False),
    ("generate_changelog", False),
    ("commit_release", True),
    ("create_tag", True),
    ("push", True),
    ("publish", True),
]

EXIT_SUCCESS = 0
EXIT_ABORTED = 3
EXIT_REMEDIATION = 4

RELEASE_COMMIT_TYPE = "chore(release)"


@dataclass
class StepResult:
    """Result of one pipeline step.

    A step that cannot succeed raises an AutomationError instead.
    """

    message: str
    skipped: bool = False
    stop: bool = False  # end the plan successfully after this step


@dataclass
class ReleaseRequest:
    """Options for one release attempt.

    Attributes:
        level: Explicit bump; None derives it from the commits
        dry_run: Run the reversible steps only
        coverage_report: Measure coverage even without a threshold
        preid: Prerelease identifier (e.g., "rc")
    """

    level: BumpLevel | None = None
    dry_run: bool = False
    coverage_report: bool = False
    preid: str | None = None


@dataclass
class ReleaseReport:
    """Terminal state of a release attempt.

    Attributes:
        plan: Step statuses, the audit record of the attempt
        outcome: released, dry_run, nothing_to_release, aborted or
            remediation_required
        exit_code: 0, 3 or 4
        current_version: Version of the last release
        next_version: Version being released, when one was computed
        tag_name: Release tag name, when one was computed
        changelog: Rendered changelog section ("" when not generated)
        error: The error that stopped the plan
        remediation: Commands that finish the release by hand
        test_outcome: Result of the test step, when tests ran
    """

    plan: ReleasePlan
    outcome: str
    exit_code: int
    current_version: str | None = None
    next_version: str | None = None
    tag_name: str | None = None
    changelog: str = ""
    error: AutomationError | None = None
    remediation: list[str] = field(default_factory=list)
    test_outcome: TestOutcome | None = None

    @property
    def failed_step(self) -> str | None:
        step = self.plan.failed_step
        return step.name if step else None

    def summary(self) -> dict[str, Any]:
        """Compact form stored as the cache's ``last_release``."""
        return {
            "finished_at": datetime.now(timezone.utc).isoformat(),
            "outcome": self.outcome,
            "exit_code": self.exit_code,
            "version": self.next_version,
            "tag": self.tag_name,
            "steps": self.plan.statuses(),
            "error": self.error.message if self.error else None,
        }


class ReleasePipeline:
    """Orchestrates one release attempt.

    Args:
        project_root: Repository root
        config: Merged configuration
        profile: Detected project profile
        vcs: Version control capability
        runner: Command runner for tests and publishers
        cancel_token: Token checked between steps (a fresh one by default)
        console: Where step progress is printed (nothing when None)
    """

    def __init__(
        self,
        project_root: Path,
        config: AutomationConfig,
        profile: ProjectProfile,
        vcs: VersionControl,
        runner: CommandRunner | None = None,
        cancel_token: CancellationToken | None = None,
        console: Console | None = None,
    ) -> None:
        self.project_root = project_root
        self.config = config
        self.profile = profile
        self.vcs = vcs
        self.runner = runner or SubprocessRunner()
        self.cancel_token = cancel_token or CancellationToken()
        self.console = console

        self.request = ReleaseRequest()
        self.current: VersionState | None = None
        self.decision: ReleaseDecision | None = None
        self.records: list[CommitRecord] = []
        self.tag_name: str | None = None
        self.changelog = ""
        self.test_outcome: TestOutcome | None = None
        self.release_sha: str | None = None
        self.release_files: list[Path] = []
        self.manual_publish: str | None = None

    @property
    def strict(self) -> bool:
        return self.config.testing.strict_mode

    def _require_decision(self) -> ReleaseDecision:
        if self.decision is None or self.tag_name is None:
            raise PlanInvariantError("No version decision; compute_version has not completed")
        return self.decision

    def _echo(self, text: str) -> None:
        if self.console is not None:
            self.console.print(text)

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def run(self, request: ReleaseRequest | None = None) -> ReleaseReport:
        """Execute the release plan.

        Never raises for step failures; the report carries the outcome.
        """
        self.request = request or ReleaseRequest()
        plan = ReleasePlan(RELEASE_STEPS)
        lock = RepositoryLock(self.project_root, grace_period=self.config.lock.grace_period)

        try:
            lock.acquire()
        except ReleaseLocked as e:
            plan.fail("verify_clean", e.message)
            plan.skip_pending("not run: repository is locked")
            return self._report(plan, error=e)

        try:
            with self.cancel_token:
                report = self._execute(plan)
            if not self.request.dry_run:
                self._record(report, ConfigStore(self.project_root, lock=lock))
            return report
        finally:
            lock.release()

    def _execute(self, plan: ReleasePlan) -> ReleaseReport:
        steps = {
            "verify_clean": self.verify_clean,
            "compute_version": self.compute_version,
            "run_tests": self.run_tests,
            "check_coverage": self.check_coverage,
            "generate_changelog": self.generate_changelog,
            "commit_release": self.commit_release,
            "create_tag": self.create_tag,
            "push": self.push,
            "publish": self.publish,
        }

        for step in plan:
            if self.cancel_token.cancelled:
                error = AutomationError(
                    f"Release cancelled ({self.cancel_token.reason}) before {step.name}"
                )
                plan.skip_pending("not run: cancelled")
                return self._report(plan, error=error)

            self._echo(f"\n[bold cyan]>[/bold cyan] {step.name}...")
            try:
                with step_timer(step.name):
                    result = steps[step.name]()
            except AutomationError as e:
                plan.fail(step.name, e.message)
                self._echo(f"[red]  Failed: {e.message}[/red]")
                if e.details:
                    self._echo(f"[dim]  {e.details}[/dim]")
                plan.skip_pending(f"not run: {step.name} failed")
                return self._report(plan, error=e)

            if result.skipped:
                plan.skip(step.name, result.message)
                self._echo(f"[yellow]  Skipped: {result.message}[/yellow]")
            else:
                plan.done(step.name, result.message)
                self._echo(f"[green]  {result.message}[/green]")

            if result.stop:
                plan.skip_pending("not run: nothing to release")
                return self._report(plan, outcome="nothing_to_release")

        return self._report(plan, outcome="dry_run" if self.request.dry_run else "released")

    def _report(
        self,
        plan: ReleasePlan,
        outcome: str | None = None,
        error: AutomationError | None = None,
    ) -> ReleaseReport:
        if error is None:
            exit_code = EXIT_SUCCESS
        elif plan.crossed_irreversible:
            exit_code = EXIT_REMEDIATION
            outcome = "remediation_required"
        else:
            exit_code = EXIT_ABORTED
            outcome = "aborted"

        report = ReleaseReport(
            plan=plan,
            outcome=outcome or "aborted",
            exit_code=exit_code,
            current_version=str(self.current) if self.current else None,
            next_version=str(self.decision.next_version) if self.decision else None,
            tag_name=self.tag_name,
            changelog=self.changelog,
            error=error,
            test_outcome=self.test_outcome,
        )
        if exit_code == EXIT_REMEDIATION:
            report.remediation = self.remediation_commands(plan)
        logger.info("Release %s (exit %d): %s", report.outcome, exit_code, plan.statuses())
        return report

    def _record(self, report: ReleaseReport, store: ConfigStore) -> None:
        try:
            store.record_release(report.summary())
        except (AutomationError, OSError) as e:
            logger.warning("Release outcome not recorded: %s", getattr(e, "message", e))

    def remediation_commands(self, plan: ReleasePlan) -> list[str]:
        """Manual commands that finish the release from where it stopped.

        Completed irreversible steps are never undone; only the steps that
        failed or did not run get a command.
        """
        remote = self.config.git.remote
        branch = self.config.git.branch or "<branch>"
        tag = self.tag_name or "<tag>"
        commands: list[str] = []

        for step in plan:
            if not step.irreversible or step.status is StepStatus.DONE:
                continue
            if step.name == "commit_release":
                if step.status is StepStatus.SKIPPED and step.message.startswith("nothing"):
                    continue
                commands.append("git status  # inspect version files and changelog")
                if self.release_files:
                    paths = " ".join(shlex.quote(str(p)) for p in self.release_files)
                    commands.append(f"git add {paths}")
                commands.append(f'git commit -am "{RELEASE_COMMIT_TYPE}: {tag}"')
            elif step.name == "create_tag":
                if not self.config.release.auto_tag:
                    continue
                commands.append(f'git tag -a {tag} -m "Release {tag}"')
            elif step.name == "push":
                commands.append(f"git push {remote} {branch}")
                if self.config.release.auto_tag:
                    commands.append(f"git push {remote} refs/tags/{tag}")
            elif step.name == "publish":
                if not self.config.release.auto_publish:
                    continue
                if self.manual_publish:
                    commands.append(self.manual_publish)
        return commands

    # ------------------------------------------------------------------
    # Reversible steps
    # ------------------------------------------------------------------

    def verify_clean(self) -> StepResult:
        context = CheckContext(
            project_root=self.project_root,
            config=self.config,
            profile=self.profile,
            vcs=self.vcs,
            runner=self.runner,
            ignored_paths=STATE_FILES,
        )
        for result in ValidatorRegistry.run_category("release", context):
            if not result.is_error:
                continue
            error_class = GitStateDirty if result.check == "git_clean" else GitError
            raise error_class(result.message, details=result.details, fix_hint=result.fix_command)
        return StepResult("Working directory is clean")

    def _current_version(self, tag: str | None) -> VersionState:
        prefix = self.config.versioning.tag_prefix
        if tag:
            return parse_version(tag, prefix)
        ecosystem = EcosystemRegistry.create(self.profile.ecosystem_kind, self.project_root)
        try:
            manifest_version = ecosystem.get_version()
        except EcosystemError:
            logger.info("No release tag and no version file; starting from %s", ZERO_VERSION)
            return ZERO_VERSION
        return parse_version(manifest_version, prefix)

    def compute_version(self) -> StepResult:
        prefix = self.config.versioning.tag_prefix
        last_tag = self.vcs.latest_tag(prefix)
        self.current = self._current_version(last_tag)

        commit_range = f"{last_tag}..HEAD" if last_tag else None
        self.records = classify(commit_range, self.vcs)
        decision = decide_version(
            self.records,
            self.current,
            level=self.request.level,
            non_release_types=self.config.commits.non_release_types,
            preid=self.request.preid,
        )
        if isinstance(decision, NothingToRelease):
            return StepResult(f"no bump: {decision.reason}", stop=True)

        self.decision = decision
        self.tag_name = decision.next_version.tag(prefix)
        if self.vcs.tag_exists(self.tag_name):
            raise VersionComputeError(
                f"Tag {self.tag_name} already exists",
                fix_hint="Choose a higher bump level or delete the stale tag",
            )
        how = "requested" if decision.explicit else "from commits"
        return StepResult(
            f"{decision.current} -> {decision.next_version} "
            f"({decision.level.value}, {how}, {len(self.records)} commit(s))"
        )

    def run_tests(self) -> StepResult:
        if not self.config.testing.enabled:
            return StepResult("testing disabled", skipped=True)

        try:
            candidate = primary_candidate(self.profile, self.project_root, self.config)
        except NoTestFrameworkDetected:
            if self.strict:
                raise
            return StepResult("no test framework detected (flexible mode)", skipped=True)

        coverage = self.request.coverage_report or self.config.testing.coverage_threshold is not None
        outcome = run_tests(candidate, self.config, self.runner, self.project_root, coverage=coverage)
        self.test_outcome = outcome

        if outcome.tool_missing and not self.strict:
            return StepResult(f"{outcome.summary()} (flexible mode)", skipped=True)
        if not outcome.passed:
            raise TestFailure(
                f"Tests failed: {outcome.summary()}",
                details=outcome.raw[-2000:] or None,
                fix_hint="Fix the failing tests, then run the release again",
            )
        return StepResult(outcome.summary())

    def check_coverage(self) -> StepResult:
        threshold = self.config.testing.coverage_threshold
        if threshold is None and not self.request.coverage_report:
            return StepResult("no coverage threshold configured", skipped=True)

        outcome = self.test_outcome
        percent = outcome.coverage_percent if outcome else None
        if percent is None:
            if threshold is not None and self.strict:
                raise CoverageBelowThreshold(
                    "No coverage data reported",
                    details=f"Threshold is {threshold:.1f}%",
                    fix_hint="Configure a coverage command for the test framework",
                )
            return StepResult("no coverage data", skipped=True)

        if threshold is None:
            return StepResult(f"coverage {percent:.1f}% (report only)")
        if percent < threshold:
            raise CoverageBelowThreshold(
                f"Coverage {percent:.1f}% is below the {threshold:.1f}% threshold",
                fix_hint="Add tests or lower testing.coverage_threshold",
            )
        return StepResult(f"coverage {percent:.1f}% >= {threshold:.1f}%")

    def generate_changelog(self) -> StepResult:
        if not self.config.release.auto_changelog:
            return StepResult("auto_changelog disabled", skipped=True)
        decision = self._require_decision()
        self.changelog = render_changelog(decision.next_version, self.records)
        return StepResult(f"changelog rendered ({len(self.records)} commit(s))")

    # ------------------------------------------------------------------
    # Irreversible steps
    # ------------------------------------------------------------------

    def commit_release(self) -> StepResult:
        message = f"{RELEASE_COMMIT_TYPE}: {self.tag_name}"
        if self.request.dry_run:
            return StepResult(f"would write version files and commit '{message}'", skipped=True)
        decision = self._require_decision()

        # relative paths of everything written so far, for remediation
        written = self.release_files
        if self.config.versioning.update_version_file:
            ecosystem = EcosystemRegistry.create(self.profile.ecosystem_kind, self.project_root)
            for path in ecosystem.update_versions(str(decision.next_version)):
                written.append(path.relative_to(self.project_root))
        if self.changelog:
            changelog_path = self.project_root / self.config.versioning.changelog_file
            prepend_changelog(changelog_path, self.changelog)
            written.append(changelog_path.relative_to(self.project_root))

        if not written:
            return StepResult("nothing to commit (no version files or changelog)", skipped=True)

        self.vcs.add(written)
        self.release_sha = self.vcs.commit(message)
        return StepResult(f"committed {len(written)} file(s) as {self.release_sha[:7]}")

    def create_tag(self) -> StepResult:
        if not self.config.release.auto_tag:
            return StepResult("auto_tag disabled", skipped=True)
        if self.request.dry_run:
            return StepResult(f"would create tag {self.tag_name}", skipped=True)
        self._require_decision()
        self.vcs.tag(self.tag_name, f"Release {self.tag_name}")
        return StepResult(f"created tag {self.tag_name}")

    def push(self) -> StepResult:
        remote = self.config.git.remote
        tag = self.tag_name if self.config.release.auto_tag else None
        if self.request.dry_run:
            target = f"branch and tag {tag}" if tag else "branch"
            return StepResult(f"would push {target} to {remote}", skipped=True)

        branch = self.config.git.branch or self.vcs.current_branch()
        self.vcs.push(remote, branch=branch, tag=tag)
        return StepResult(f"pushed {branch}" + (f" and {tag}" if tag else "") + f" to {remote}")

    def publish(self) -> StepResult:
        if not self.config.release.auto_publish:
            return StepResult("auto_publish disabled", skipped=True)
        if self.request.dry_run:
            return StepResult(f"would publish {self.tag_name}", skipped=True)

        publisher = PublisherRegistry.for_ecosystem(self.profile.ecosystem_kind)
        if publisher is None:
            return StepResult(f"no publisher for {self.profile.ecosystem_kind} projects", skipped=True)

        decision = self._require_decision()
        context = PublishContext(
            project_root=self.project_root,
            version=str(decision.next_version),
            tag_name=self.tag_name,
            runner=self.runner,
            timeout=self.config.timeouts.publish,
        )
        if not publisher.should_publish(context):
            return StepResult(f"{publisher.display_name}: not publishable", skipped=True)

        result = publisher.publish(context)
        if result.status is PublishStatus.FAILED:
            self.manual_publish = result.manual_command
            raise PublishFailure(result.message, details=result.details, fix_hint=result.manual_command)
        if result.status is PublishStatus.SKIPPED:
            return StepResult(result.message, skipped=True)
        if result.package_url:
            return StepResult(f"{result.message} ({result.package_url})")
        return StepResult(result.message)
