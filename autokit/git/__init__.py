"""Git implementation of the version-control capability.

All operations use autokit.utils.shell.run() for safe command execution
and raise GitError on failures.
"""

from autokit.git.vcs import GitVersionControl, LogEntry, VersionControl

__all__ = [
    "GitVersionControl",
    "LogEntry",
    "VersionControl",
]
