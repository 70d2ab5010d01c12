"""Pytest fixtures for automation tests.

Provides common fixtures for:
- Temporary project directories
- Git repository setup
- Ecosystem-specific test projects
- In-memory stand-ins for the command runner and version control
"""

import json
import os
import subprocess
from collections.abc import Sequence
from pathlib import Path

import pytest

from autokit.config import AutomationConfig
from autokit.detection import ProjectProfile
from autokit.exceptions import AutomationError
from autokit.git import LogEntry, VersionControl
from autokit.utils.shell import EXIT_NOT_FOUND, CommandResult, CommandRunner
from autokit.validators import CheckContext


def git(repo: Path, *args: str) -> str:
    """Run git in a test repository and return its stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


class FakeRunner(CommandRunner):
    """CommandRunner returning scripted results.

    Results are matched by the longest command prefix; unmatched
    commands succeed with empty output. Every call is recorded.
    """

    def __init__(self, default: CommandResult | None = None) -> None:
        self.responses: dict[str, CommandResult] = {}
        self.default = default or CommandResult(exit_code=0)
        self.calls: list[list[str]] = []

    def respond(
        self,
        prefix: str,
        exit_code: int = 0,
        stdout: str = "",
        stderr: str = "",
        timed_out: bool = False,
    ) -> None:
        self.responses[prefix] = CommandResult(
            exit_code=exit_code, stdout=stdout, stderr=stderr, timed_out=timed_out
        )

    def missing(self, prefix: str) -> None:
        self.respond(prefix, exit_code=EXIT_NOT_FOUND, stderr=f"{prefix}: command not found")

    def run(self, cmd: list[str], cwd: Path | None = None, timeout: int = 300) -> CommandResult:
        self.calls.append(list(cmd))
        joined = " ".join(cmd)
        for prefix in sorted(self.responses, key=len, reverse=True):
            if joined == prefix or joined.startswith(prefix + " "):
                return self.responses[prefix]
        return self.default

    def ran(self, prefix: str) -> bool:
        return any(" ".join(call).startswith(prefix) for call in self.calls)


class FakeVCS(VersionControl):
    """In-memory version control.

    ``fail_on`` maps an operation ("commit", "tag", "push_branch",
    "push_tag", "log") to the error it raises.
    """

    def __init__(self) -> None:
        self.history: list[LogEntry] = []
        self.tags: dict[str, int] = {}
        self.dirty: list[str] = []
        self.staged: list[str] = []
        self.added: list[str] = []
        self.pushed: list[str] = []
        self.branch = "main"
        self.fail_on: dict[str, AutomationError] = {}

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise self.fail_on[operation]

    def add_commit(self, message: str) -> str:
        sha = f"{len(self.history) + 1:040x}"
        self.history.append(LogEntry(hash=sha, message=message))
        return sha

    def add_tag(self, name: str) -> None:
        self.tags[name] = len(self.history)

    def status(self) -> list[str]:
        return list(self.dirty)

    def staged_files(self) -> list[str]:
        return list(self.staged)

    def log(self, commit_range: str | None = None) -> list[LogEntry]:
        self._maybe_fail("log")
        if commit_range is None:
            return list(self.history)
        start = self.tags[commit_range.split("..")[0]]
        return self.history[start:]

    def latest_tag(self, prefix: str = "v") -> str | None:
        matching = [(index, name) for name, index in self.tags.items() if name.startswith(prefix)]
        return max(matching)[1] if matching else None

    def tag_exists(self, name: str) -> bool:
        return name in self.tags

    def add(self, paths: Sequence[str | Path]) -> None:
        self.added.extend(str(p) for p in paths)

    def commit(self, message: str) -> str:
        self._maybe_fail("commit")
        self.staged = []
        return self.add_commit(message)

    def tag(self, name: str, message: str | None = None) -> None:
        self._maybe_fail("tag")
        self.add_tag(name)

    def push(self, remote: str = "origin", branch: str | None = None, tag: str | None = None) -> None:
        if branch:
            self._maybe_fail("push_branch")
            self.pushed.append(branch)
        if tag:
            self._maybe_fail("push_tag")
            self.pushed.append(tag)

    def current_branch(self) -> str:
        return self.branch


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create a temporary project directory.

    Returns:
        Path to project directory
    """
    project = tmp_path / "test-project"
    project.mkdir()
    return project


@pytest.fixture
def git_repo(project_dir: Path) -> Path:
    """Create a git repository in the project directory.

    Returns:
        Path to git repository
    """
    git(project_dir, "init", "-b", "main")
    git(project_dir, "config", "user.email", "test@test.com")
    git(project_dir, "config", "user.name", "Test User")
    git(project_dir, "config", "commit.gpgsign", "false")
    git(project_dir, "config", "tag.gpgsign", "false")
    return project_dir


@pytest.fixture
def nodejs_project(git_repo: Path) -> Path:
    """Create a Node.js project with package.json.

    Returns:
        Path to project directory
    """
    package_json = {
        "name": "test-package",
        "version": "1.0.0",
        "description": "Test package",
        "main": "index.js",
        "scripts": {
            "test": "echo 'test'",
            "lint": "echo 'lint'",
        },
    }
    (git_repo / "package.json").write_text(json.dumps(package_json, indent=2))
    (git_repo / "index.js").write_text("module.exports = {};\n")

    git(git_repo, "add", ".")
    git(git_repo, "commit", "-m", "chore: initial commit")
    return git_repo


@pytest.fixture
def python_project(git_repo: Path) -> Path:
    """Create a Python project with pyproject.toml.

    Returns:
        Path to project directory
    """
    pyproject = {
        "project": {
            "name": "test-package",
            "version": "1.0.0",
            "description": "Test package",
        },
        "build-system": {
            "requires": ["hatchling"],
            "build-backend": "hatchling.build",
        },
    }

    # Write as TOML
    import tomli_w

    (git_repo / "pyproject.toml").write_text(tomli_w.dumps(pyproject))
    (git_repo / "src").mkdir()
    (git_repo / "src" / "__init__.py").write_text('__version__ = "1.0.0"\n')

    git(git_repo, "add", ".")
    git(git_repo, "commit", "-m", "chore: initial commit")
    return git_repo


@pytest.fixture
def config() -> AutomationConfig:
    """Compiled defaults."""
    return AutomationConfig()


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def vcs() -> FakeVCS:
    return FakeVCS()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove AUTOKIT_* environment variables during tests."""
    for key in list(os.environ):
        if key.startswith("AUTOKIT_"):
            monkeypatch.delenv(key)


@pytest.fixture
def make_context(project_dir: Path, config: AutomationConfig, vcs: FakeVCS, runner: FakeRunner):
    """Build a CheckContext over the fake VCS and runner.

    Returns:
        Factory accepting CheckContext field overrides
    """

    def factory(**overrides) -> CheckContext:
        fields = {
            "project_root": project_dir,
            "config": config,
            "profile": ProjectProfile(ecosystem_kind="generic", manifest_path=None),
            "vcs": vcs,
            "runner": runner,
        }
        fields.update(overrides)
        return CheckContext(**fields)

    return factory
