"""Command-line interface for the automation orchestrator.

Provides commands for:
- detect: Detect and cache the project profile
- commit: Run the commit gate, then commit
- release: Run the release pipeline
- show-config: Print the merged configuration
- init-config: Generate the override file
- status: Show profile, version and last release
"""

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from autokit import __version__
from autokit.config import ConfigStore, LoadedConfig, cli_layer
from autokit.config.defaults import write_default_config
from autokit.config.loader import OVERRIDE_FILE_NAMES
from autokit.detection import ProjectProfile
from autokit.exceptions import AutomationError, VersionComputeError
from autokit.gate import CommitGate, GateDecision, TestMode
from autokit.git import GitVersionControl
from autokit.pipeline import (
    EXIT_ABORTED,
    CancellationToken,
    ReleasePipeline,
    ReleaseReport,
    ReleaseRequest,
    StepStatus,
)
from autokit.utils.logging import configure_logging
from autokit.utils.version import BumpLevel, parse_version
from autokit.validators import ValidationResult, ValidationSeverity

# Create Typer app
app = typer.Typer(
    name="autokit",
    help="Project detection, commit gate and release automation",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()


@dataclass
class CLIState:
    """Options shared by every command."""

    project_root: Path
    verbose: bool = False


class ReleaseLevel(str, Enum):
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"
    PRERELEASE = "prerelease"
    AUTO = "auto"

    def bump_level(self) -> BumpLevel | None:
        return None if self is ReleaseLevel.AUTO else BumpLevel(self.value)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"autokit version {__version__}")
        raise typer.Exit()


def print_error(error: AutomationError) -> None:
    console.print(f"[red]Error:[/red] {error.message}")
    if error.details:
        console.print(f"[dim]  {error.details}[/dim]")
    if error.fix_hint:
        console.print(f"[yellow]Fix:[/yellow] {error.fix_hint}")


def load_session(
    state: CLIState, overrides: dict | None = None
) -> tuple[ConfigStore, ProjectProfile, LoadedConfig]:
    """Profile and merged config for one invocation.

    Raises:
        DetectionError: If the project root cannot be inspected
    """
    store = ConfigStore(state.project_root)
    profile = store.current_profile()
    loaded = store.load(overrides=overrides, profile=profile)
    for warning in loaded.warnings:
        console.print(f"[yellow]Config warning:[/yellow] {warning}")
    ambiguity = store.ambiguity()
    if ambiguity is not None:
        console.print(f"[yellow]{ambiguity.message}[/yellow] {ambiguity.details or ''}")
    return store, profile, loaded


def strict_overrides(strict_tests: bool) -> dict:
    """CLI layer for --strict-tests.

    The flag turns testing on even where the project profile switched it
    off, so a generic project without a framework is rejected.
    """
    if not strict_tests:
        return {}
    return cli_layer(testing__enabled=True, testing__strict_mode=True)


def display_validation_results(
    results: list[ValidationResult],
    title: str = "Checks",
) -> None:
    """Display validation results in a formatted table."""
    table = Table(title=title)
    table.add_column("Status", style="bold", width=8)
    table.add_column("Check", style="cyan")
    table.add_column("Message")

    for result in results:
        if result.is_error:
            status = "[red]FAIL[/red]"
        elif result.severity == ValidationSeverity.WARNING:
            status = "[yellow]WARN[/yellow]"
        elif result.not_run:
            status = "[dim]SKIP[/dim]"
        else:
            status = "[green]PASS[/green]"
        table.add_row(status, result.check, result.message)

    console.print(table)

    # Show details for failures and warnings
    for result in results:
        if result.passed and result.severity != ValidationSeverity.WARNING:
            continue
        if result.details:
            console.print(f"\n[red]{result.check}:[/red] {result.details}")
        if result.fix_command:
            console.print(f"[yellow]Fix:[/yellow] {result.fix_command}")


def display_gate_decision(decision: GateDecision) -> None:
    display_validation_results(decision.results, "Commit Checks")

    mode_notes = {
        TestMode.STRICT: "[bold]strict[/bold]: failures reject the commit",
        TestMode.FLEXIBLE: "flexible: failures are reported only",
        TestMode.BYPASS: "[yellow]bypassed[/yellow] (--skip-tests)",
        TestMode.DISABLED: "disabled by configuration",
    }
    console.print(f"\nTests: {mode_notes[decision.mode]}")
    for event in decision.events:
        if "bypass wins" in event:
            console.print(f"[yellow]  {event}[/yellow]")
    if decision.test_outcome is not None:
        console.print(f"  {decision.test_outcome.summary()}")
    if decision.error is not None:
        style = "red" if decision.rejected_by == "tests" else "yellow"
        console.print(f"[{style}]  {decision.reason}: {decision.error.message}[/{style}]")


def display_release_report(report: ReleaseReport) -> None:
    table = Table(title="Release Plan")
    table.add_column("Step", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Message")

    styles = {
        StepStatus.DONE: "green",
        StepStatus.FAILED: "red",
        StepStatus.SKIPPED: "yellow",
        StepStatus.PENDING: "dim",
    }
    for step in report.plan:
        style = styles[step.status]
        name = f"{step.name} (irreversible)" if step.irreversible else step.name
        table.add_row(name, f"[{style}]{step.status.value}[/{style}]", step.message)
    console.print(table)

    if report.changelog:
        console.print(Panel(report.changelog.rstrip(), title="Changelog", border_style="cyan"))

    if report.error is not None:
        print_error(report.error)

    if report.remediation:
        console.print(
            Panel(
                "Completed steps were not rolled back. To finish the release:\n\n"
                + "\n".join(f"  {cmd}" for cmd in report.remediation),
                title="Manual remediation required",
                border_style="red",
            )
        )

    outcome_styles = {
        "released": "bold green",
        "dry_run": "yellow",
        "nothing_to_release": "green",
    }
    style = outcome_styles.get(report.outcome, "bold red")
    tag = f" {report.tag_name}" if report.tag_name else ""
    console.print(f"\n[{style}]Release{tag}: {report.outcome.replace('_', ' ')}[/{style}]")


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(  # noqa: B008
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    project: Path = typer.Option(  # noqa: B008
        Path("."),
        "--project",
        "-C",
        help="Project root directory",
    ),
) -> None:
    """Project detection, commit gate and release automation.

    Detects the project's ecosystem, enforces commit-time checks and
    drives the release pipeline (version, tests, changelog, tag, push,
    publish).
    """
    configure_logging(verbose)
    ctx.obj = CLIState(project_root=project.resolve(), verbose=verbose)


@app.command()
def detect(
    ctx: typer.Context,
    as_json: bool = typer.Option(  # noqa: B008
        False,
        "--json",
        help="Print the profile as JSON",
    ),
) -> None:
    """Detect the project type and cache the profile.

    The cached profile is reused while no marker file changes.
    """
    state: CLIState = ctx.obj
    store = ConfigStore(state.project_root)
    try:
        profile = store.current_profile()
    except AutomationError as e:
        print_error(e)
        raise typer.Exit(code=e.exit_code) from None

    cached = store.last_detection is None
    ambiguity = store.ambiguity()

    if as_json:
        payload = {
            **profile.to_dict(),
            "cached": cached,
            "matches": store.last_detection.matches if store.last_detection else store.cached_matches(),
            "ambiguous": ambiguity is not None,
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    table = Table(title="Project Profile")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Ecosystem", profile.ecosystem_kind)
    table.add_row("Manifest", str(profile.manifest_path or "-"))
    table.add_row("Lock file", str(profile.lock_file_path or "-"))
    table.add_row("Build tool", profile.build_tool_hint or "-")
    table.add_row("Confidence", f"{profile.confidence:.1f}")
    table.add_row("Source", "cache" if cached else "scan")
    console.print(table)

    if ambiguity is not None:
        console.print(f"[yellow]{ambiguity.message}[/yellow]")
        if ambiguity.details:
            console.print(f"[dim]  {ambiguity.details}[/dim]")
    if profile.is_generic:
        console.print(
            "[yellow]No ecosystem detected:[/yellow] commit validation and generic "
            "release tags only, no test auto-run"
        )


@app.command()
def commit(
    ctx: typer.Context,
    message: str = typer.Argument(  # noqa: B008
        ...,
        help="Commit message (type(scope): description)",
    ),
    strict_tests: bool = typer.Option(  # noqa: B008
        False,
        "--strict-tests",
        help="Reject the commit on test failure or missing test framework",
    ),
    skip_tests: bool = typer.Option(  # noqa: B008
        False,
        "--skip-tests",
        help="Skip the test step (recorded as a bypass)",
    ),
    no_commit: bool = typer.Option(  # noqa: B008
        False,
        "--no-commit",
        help="Only run the checks",
    ),
) -> None:
    """Check a commit and create it when accepted.

    Exit codes: 0 accepted, 1 rejected by lint/format checks,
    2 rejected by tests.

    Examples:
        autokit commit "feat(auth): add login endpoint"
        autokit commit "fix: handle empty input" --strict-tests
    """
    state: CLIState = ctx.obj
    try:
        _, profile, loaded = load_session(state, overrides=strict_overrides(strict_tests))
        vcs = GitVersionControl(state.project_root, timeout=loaded.config.timeouts.git)
        gate = CommitGate(state.project_root, loaded.config, profile, vcs)
        decision = gate.evaluate(message, strict_tests=strict_tests, skip_tests=skip_tests)
    except AutomationError as e:
        print_error(e)
        raise typer.Exit(code=1) from None

    display_gate_decision(decision)
    if not decision.accepted:
        console.print(f"\n[red]Commit rejected by {decision.rejected_by} checks[/red]")
        if decision.suggestion is not None:
            console.print(
                f"[yellow]Suggested type:[/yellow] {decision.suggestion.type} "
                f"({decision.suggestion.reason or 'no staged file evidence'})"
            )
            console.print(f"[yellow]Try:[/yellow] {decision.fix_hint}")
        raise typer.Exit(code=decision.exit_code)

    if no_commit:
        console.print("\n[green]Commit accepted[/green] (--no-commit: nothing committed)")
        return

    try:
        sha = vcs.commit(message)
    except AutomationError as e:
        print_error(e)
        raise typer.Exit(code=1) from None
    console.print(f"\n[green]Committed {sha[:7]}[/green]")


@app.command()
def release(
    ctx: typer.Context,
    level: ReleaseLevel = typer.Argument(  # noqa: B008
        ReleaseLevel.AUTO,
        help="Bump level; auto derives it from the commits",
    ),
    coverage_report: bool = typer.Option(  # noqa: B008
        False,
        "--coverage-report",
        help="Measure and report coverage",
    ),
    dry_run: bool = typer.Option(  # noqa: B008
        False,
        "--dry-run",
        "-n",
        help="Run the checks and show what would be done",
    ),
    preid: str | None = typer.Option(  # noqa: B008
        None,
        "--preid",
        help="Prerelease identifier (e.g., rc, beta)",
    ),
) -> None:
    """Run the release pipeline.

    Exit codes: 0 released or nothing to release, 3 aborted before any
    irreversible step, 4 failed after an irreversible step (see the
    remediation report).

    Examples:
        autokit release              # bump derived from commits
        autokit release minor
        autokit release prerelease --preid rc
        autokit release --dry-run
    """
    state: CLIState = ctx.obj
    try:
        _, profile, loaded = load_session(state)
    except AutomationError as e:
        print_error(e)
        raise typer.Exit(code=EXIT_ABORTED) from None

    if dry_run:
        console.print(Panel("[yellow]DRY RUN MODE[/yellow] - irreversible steps are skipped"))
    console.print(
        f"Tests: {'strict' if loaded.config.testing.strict_mode else 'flexible'} mode"
        + ("" if loaded.config.testing.enabled else " (testing disabled)")
    )

    vcs = GitVersionControl(state.project_root, timeout=loaded.config.timeouts.git)
    pipeline = ReleasePipeline(
        state.project_root,
        loaded.config,
        profile,
        vcs,
        cancel_token=CancellationToken(),
        console=console,
    )
    request = ReleaseRequest(
        level=level.bump_level(),
        dry_run=dry_run,
        coverage_report=coverage_report,
        preid=preid,
    )
    report = pipeline.run(request)
    display_release_report(report)
    if report.exit_code:
        raise typer.Exit(code=report.exit_code)


@app.command(name="show-config")
def show_config(ctx: typer.Context) -> None:
    """Print the merged configuration and where it came from."""
    state: CLIState = ctx.obj
    try:
        _, profile, loaded = load_session(state)
    except AutomationError as e:
        print_error(e)
        raise typer.Exit(code=e.exit_code) from None

    text = yaml.safe_dump(loaded.config.model_dump(mode="json"), sort_keys=False)
    console.print(
        Panel(
            text.rstrip(),
            title=f"Configuration ({profile.ecosystem_kind})",
            subtitle=" < ".join(loaded.sources),
            border_style="cyan",
        )
    )


@app.command(name="init-config")
def init_config(
    ctx: typer.Context,
    output: Path | None = typer.Option(  # noqa: B008
        None,
        "--output",
        "-o",
        help=f"Output path (default: {OVERRIDE_FILE_NAMES[0]} in the project root)",
    ),
    force: bool = typer.Option(  # noqa: B008
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration",
    ),
) -> None:
    """Generate the project override file with commented defaults.

    Examples:
        autokit init-config
        autokit init-config -o ci/automation.yml
    """
    state: CLIState = ctx.obj
    output = output or state.project_root / OVERRIDE_FILE_NAMES[0]
    if output.exists() and not force:
        console.print(f"[red]Configuration already exists:[/red] {output}")
        console.print("Use --force to overwrite")
        raise typer.Exit(code=1)

    try:
        profile = ConfigStore(state.project_root).current_profile()
        write_default_config(output, profile)
    except AutomationError as e:
        print_error(e)
        raise typer.Exit(code=e.exit_code) from None
    console.print(f"[green]Configuration written to:[/green] {output}")


@app.command()
def status(ctx: typer.Context) -> None:
    """Show the project profile, current version and last release."""
    state: CLIState = ctx.obj
    try:
        store, profile, loaded = load_session(state)
        vcs = GitVersionControl(state.project_root, timeout=loaded.config.timeouts.git)
        prefix = loaded.config.versioning.tag_prefix
        latest_tag = vcs.latest_tag(prefix)
    except AutomationError as e:
        print_error(e)
        raise typer.Exit(code=e.exit_code) from None

    version = "-"
    if latest_tag:
        try:
            version = str(parse_version(latest_tag, prefix))
        except VersionComputeError:
            version = f"{latest_tag} (not a semantic version)"

    table = Table(title="Automation Status")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Project", str(state.project_root))
    table.add_row("Ecosystem", f"{profile.ecosystem_kind} ({profile.build_tool_hint or '-'})")
    table.add_row("Latest tag", latest_tag or "-")
    table.add_row("Current version", version)
    table.add_row("Tag prefix", prefix)
    table.add_row("Testing", "strict" if loaded.config.testing.strict_mode else "flexible")

    last = store.last_release()
    if last:
        table.add_row(
            "Last release",
            f"{last.get('tag') or '-'}: {last.get('outcome')} ({last.get('finished_at', '')})",
        )
    else:
        table.add_row("Last release", "-")
    console.print(table)


if __name__ == "__main__":
    app()
