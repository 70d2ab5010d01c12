"""Git state query operations.

Read-only git commands used to inspect repository state.
All functions use autokit.utils.shell.run() for command execution and raise
GitError on failures.
"""

import subprocess
from pathlib import Path

from autokit.exceptions import GitError
from autokit.utils.shell import ShellError, run

# Field and record separators for "git log" output
FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"


def _porcelain_path(line: str) -> str:
    """Path part of one "git status --porcelain" line ("XY path")."""
    path = line[3:]
    if " -> " in path:
        # Renames are reported as "old -> new"
        path = path.split(" -> ", 1)[1]
    return path.strip().strip('"')


def get_uncommitted_files(cwd: Path | None = None, timeout: int = 30) -> list[str]:
    """Get list of files with uncommitted changes.

    Untracked files count as uncommitted.

    Args:
        cwd: Working directory (defaults to current directory)
        timeout: Seconds before the git call is abandoned

    Returns:
        List of file paths with uncommitted changes
        Returns empty list if the working tree is clean

    Raises:
        GitError: If git command fails
    """
    try:
        result = run(
            ["git", "status", "--porcelain", "--untracked-files=all"],
            cwd=cwd,
            check=True,
            timeout=timeout,
        )
        return [_porcelain_path(line) for line in result.stdout.splitlines() if line.strip()]
    except (ShellError, subprocess.TimeoutExpired, FileNotFoundError) as e:
        raise GitError(
            "Failed to get uncommitted files",
            details=str(e),
            fix_hint="Ensure you are in a git repository and git is installed",
        ) from e


def get_staged_files(cwd: Path | None = None, timeout: int = 30) -> list[str]:
    """Get the files staged for the next commit.

    Deleted files are left out; callers inspect staged content.

    Raises:
        GitError: If git command fails
    """
    try:
        result = run(
            ["git", "diff", "--cached", "--name-only", "--diff-filter=ACMR"],
            cwd=cwd,
            check=True,
            timeout=timeout,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]
    except (ShellError, subprocess.TimeoutExpired, FileNotFoundError) as e:
        raise GitError(
            "Failed to list staged files",
            details=str(e),
            fix_hint="Ensure you are in a git repository",
        ) from e


def get_current_branch(cwd: Path | None = None, timeout: int = 30) -> str:
    """Get the name of the current git branch.

    Args:
        cwd: Working directory (defaults to current directory)
        timeout: Seconds before the git call is abandoned

    Returns:
        Current branch name (e.g., "main", "develop")

    Raises:
        GitError: If unable to determine current branch
    """
    try:
        result = run(["git", "branch", "--show-current"], cwd=cwd, check=True, timeout=timeout)
        branch = result.stdout.strip()
        if not branch:
            # Fallback for detached HEAD state
            result = run(
                ["git", "rev-parse", "--abbrev-ref", "HEAD"],
                cwd=cwd,
                check=True,
                timeout=timeout,
            )
            branch = result.stdout.strip()
        return branch
    except (ShellError, subprocess.TimeoutExpired, FileNotFoundError) as e:
        raise GitError(
            "Failed to get current branch name",
            details=str(e),
            fix_hint="Ensure you are in a git repository with at least one commit",
        ) from e


def get_latest_tag(
    prefix: str = "v", cwd: Path | None = None, timeout: int = 30
) -> str | None:
    """Get the most recent release tag reachable from HEAD.

    Only tags that start with ``prefix`` followed by a digit are
    considered release tags.

    Args:
        prefix: Release tag prefix
        cwd: Working directory (defaults to current directory)
        timeout: Seconds before the git call is abandoned

    Returns:
        Most recent tag name (e.g., "v1.0.12"), or None if no tags exist

    Raises:
        GitError: If git command fails (excluding "no tags found" case)
    """
    try:
        result = run(
            ["git", "describe", "--tags", "--abbrev=0", f"--match={prefix}[0-9]*"],
            cwd=cwd,
            check=False,
            timeout=timeout,
        )
        if result.returncode == 0:
            return result.stdout.strip() or None
        # No tags (or no commits yet) - this is not an error
        return None
    except (ShellError, subprocess.TimeoutExpired, FileNotFoundError) as e:
        raise GitError(
            "Failed to get latest git tag",
            details=str(e),
            fix_hint="Ensure you are in a git repository",
        ) from e


def tag_exists(tag: str, cwd: Path | None = None, timeout: int = 30) -> bool:
    """Check if a git tag exists locally.

    Raises:
        GitError: If git command fails
    """
    try:
        result = run(
            ["git", "rev-parse", "--verify", "--quiet", f"refs/tags/{tag}"],
            cwd=cwd,
            check=False,
            timeout=timeout,
        )
        return result.returncode == 0
    except (ShellError, subprocess.TimeoutExpired, FileNotFoundError) as e:
        raise GitError(
            f"Failed to check if tag '{tag}' exists",
            details=str(e),
            fix_hint="Ensure you are in a git repository",
        ) from e


def has_commits(cwd: Path | None = None, timeout: int = 30) -> bool:
    """Check whether HEAD points at a commit (False in a fresh repository)."""
    try:
        result = run(
            ["git", "rev-parse", "--verify", "--quiet", "HEAD"],
            cwd=cwd,
            check=False,
            timeout=timeout,
        )
        return result.returncode == 0
    except (ShellError, subprocess.TimeoutExpired, FileNotFoundError) as e:
        raise GitError(
            "Failed to resolve HEAD",
            details=str(e),
            fix_hint="Ensure you are in a git repository",
        ) from e


def get_log(
    commit_range: str | None = None, cwd: Path | None = None, timeout: int = 30
) -> list[tuple[str, str]]:
    """Get commits in a revision range, oldest first.

    Args:
        commit_range: Revision range (e.g., "v1.0.11..HEAD"); None for
            all of HEAD's history
        cwd: Working directory (defaults to current directory)
        timeout: Seconds before the git call is abandoned

    Returns:
        List of (sha, full message) tuples; empty for a repository
        without commits

    Raises:
        GitError: If the range is invalid or git command fails
    """
    if not has_commits(cwd=cwd, timeout=timeout):
        return []
    try:
        # %H = full SHA, %B = raw body (subject + message)
        result = run(
            [
                "git",
                "log",
                "--reverse",
                f"--format=%H{FIELD_SEP}%B{RECORD_SEP}",
                commit_range or "HEAD",
            ],
            cwd=cwd,
            check=True,
            timeout=timeout,
            # the separators are control characters
            strip_output=False,
        )
    except (ShellError, subprocess.TimeoutExpired, FileNotFoundError) as e:
        raise GitError(
            f"Failed to read commits in '{commit_range or 'HEAD'}'",
            details=str(e),
            fix_hint="Ensure the range exists. Run 'git tag' to list tags.",
        ) from e

    commits = []
    for record in result.stdout.split(RECORD_SEP):
        record = record.strip("\n")
        if not record.strip():
            continue
        sha, _, message = record.partition(FIELD_SEP)
        commits.append((sha.strip(), message.strip()))
    return commits
