"""Git commands that change repository state.

Used only by the release pipeline's irreversible steps and by the
``commit`` command. Every failure becomes a GitError carrying the git
output and a hint for finishing the step by hand.
"""

import subprocess
from collections.abc import Sequence
from pathlib import Path

from autokit.exceptions import GitError
from autokit.utils.shell import ShellError, run


def _git(args: list[str], cwd: Path | None, timeout: int, error: str, fix_hint: str) -> str:
    try:
        return run(["git", *args], cwd=cwd, check=True, timeout=timeout).stdout
    except (ShellError, subprocess.TimeoutExpired, FileNotFoundError) as e:
        raise GitError(error, details=str(e), fix_hint=fix_hint) from e


def add(paths: Sequence[str | Path], cwd: Path | None = None, timeout: int = 30) -> None:
    """Stage files (no-op for an empty list)."""
    if not paths:
        return
    # "--" keeps file names that look like options from being parsed
    _git(
        ["add", "--", *(str(p) for p in paths)],
        cwd,
        timeout,
        "Failed to stage files",
        "Run 'git status' to check the listed paths",
    )


def commit(message: str, cwd: Path | None = None, timeout: int = 30) -> str:
    """Commit the staged changes.

    Returns:
        SHA of the new commit

    Raises:
        GitError: If nothing is staged or a hook rejects the commit
    """
    hint = "Ensure you have changes staged. Run 'git status' to check."
    _git(["commit", "-m", message], cwd, timeout, "Failed to create git commit", hint)
    return _git(["rev-parse", "HEAD"], cwd, timeout, "Failed to create git commit", hint).strip()


def tag(name: str, message: str | None = None, cwd: Path | None = None, timeout: int = 30) -> None:
    """Create an annotated tag; the annotation defaults to the tag name."""
    _git(
        ["tag", "-a", name, "-m", message if message is not None else name],
        cwd,
        timeout,
        f"Failed to create git tag '{name}'",
        f"Ensure tag '{name}' doesn't already exist. Run 'git tag -l {name}'.",
    )


def push(remote: str = "origin", branch: str | None = None, cwd: Path | None = None, timeout: int = 30) -> None:
    """Push a branch, or the current branch when ``branch`` is None."""
    _git(
        ["push", remote, *([branch] if branch else [])],
        cwd,
        timeout,
        f"Failed to push {branch or 'current branch'} to remote '{remote}'",
        "Ensure remote exists and you have push access. Check network connectivity.",
    )


def push_tag(tag: str, remote: str = "origin", cwd: Path | None = None, timeout: int = 30) -> None:
    """Push a single tag by its full ref."""
    _git(
        ["push", remote, f"refs/tags/{tag}"],
        cwd,
        timeout,
        f"Failed to push tag '{tag}' to remote '{remote}'",
        f"Ensure tag '{tag}' exists locally. Run 'git tag' to list tags.",
    )
