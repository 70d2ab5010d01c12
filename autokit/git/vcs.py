"""Version control capability.

Components never shell out to git directly; they receive a
VersionControl and call its methods. GitVersionControl is the real
implementation; tests substitute an in-memory one.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from autokit.git import operations, queries


@dataclass(frozen=True)
class LogEntry:
    """One commit as returned by ``log``."""

    hash: str
    message: str


class VersionControl(ABC):
    """Abstract version-control capability."""

    @abstractmethod
    def status(self) -> list[str]:
        """Paths with uncommitted changes (untracked included)."""

    @abstractmethod
    def staged_files(self) -> list[str]:
        """Paths staged for the next commit."""

    @abstractmethod
    def log(self, commit_range: str | None = None) -> list[LogEntry]:
        """Commits in ``commit_range``, oldest first."""

    @abstractmethod
    def latest_tag(self, prefix: str = "v") -> str | None:
        """Most recent release tag reachable from HEAD."""

    @abstractmethod
    def tag_exists(self, name: str) -> bool: ...

    @abstractmethod
    def add(self, paths: Sequence[str | Path]) -> None: ...

    @abstractmethod
    def commit(self, message: str) -> str:
        """Commit the staged changes and return the new commit id."""

    @abstractmethod
    def tag(self, name: str, message: str | None = None) -> None: ...

    @abstractmethod
    def push(self, remote: str = "origin", branch: str | None = None, tag: str | None = None) -> None:
        """Push ``branch`` and then ``tag`` (either may be None)."""

    @abstractmethod
    def current_branch(self) -> str: ...


class GitVersionControl(VersionControl):
    """VersionControl backed by the git command line.

    Args:
        root: Repository root
        timeout: Seconds allowed per git call
    """

    def __init__(self, root: Path, timeout: int = 30) -> None:
        self.root = root
        self.timeout = timeout

    def status(self) -> list[str]:
        return queries.get_uncommitted_files(cwd=self.root, timeout=self.timeout)

    def staged_files(self) -> list[str]:
        return queries.get_staged_files(cwd=self.root, timeout=self.timeout)

    def log(self, commit_range: str | None = None) -> list[LogEntry]:
        return [
            LogEntry(hash=sha, message=message)
            for sha, message in queries.get_log(commit_range, cwd=self.root, timeout=self.timeout)
        ]

    def latest_tag(self, prefix: str = "v") -> str | None:
        return queries.get_latest_tag(prefix, cwd=self.root, timeout=self.timeout)

    def tag_exists(self, name: str) -> bool:
        return queries.tag_exists(name, cwd=self.root, timeout=self.timeout)

    def add(self, paths: Sequence[str | Path]) -> None:
        operations.add(paths, cwd=self.root, timeout=self.timeout)

    def commit(self, message: str) -> str:
        return operations.commit(message, cwd=self.root, timeout=self.timeout)

    def tag(self, name: str, message: str | None = None) -> None:
        operations.tag(name, message, cwd=self.root, timeout=self.timeout)

    def push(self, remote: str = "origin", branch: str | None = None, tag: str | None = None) -> None:
        if branch:
            operations.push(remote, branch, cwd=self.root, timeout=self.timeout)
        if tag:
            operations.push_tag(tag, remote, cwd=self.root, timeout=self.timeout)

    def current_branch(self) -> str:
        return queries.get_current_branch(cwd=self.root, timeout=self.timeout)
