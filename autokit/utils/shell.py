"""Running external commands.

Everything the orchestrator learns from the outside world (git, test
runners, linters, package managers) goes through this module. Output is
stripped of ANSI escapes so parsers and tag names only see plain text.

Children start in their own session: a Ctrl-C at the terminal reaches
only the orchestrator, which stops between steps, and never kills a
push or publish halfway.
"""

import logging
import re
import shlex
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Conventional shell exit codes for synthesized results
EXIT_TIMEOUT = 124
EXIT_NOT_FOUND = 127

# CSI sequences, OSC sequences and DCS/SOS/PM/APC strings
ANSI_PATTERN = re.compile(
    r"\x1b\[[0-9;]*[a-zA-Z]|\x1b\][^\x07]*\x07|\x1b[PX^_][^\x1b]*\x1b\\"
)
CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


class ShellError(Exception):
    """A command checked with ``check=True`` exited non-zero."""

    def __init__(self, cmd: str, returncode: int, stdout: str, stderr: str) -> None:
        self.cmd = cmd
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"Command failed with exit code {returncode}: {cmd}")

    def __str__(self) -> str:
        lines = [f"Command failed: {self.cmd}", f"Exit code: {self.returncode}"]
        if self.stderr:
            lines.append(f"Stderr: {self.stderr}")
        if self.stdout:
            lines.append(f"Stdout: {self.stdout}")
        return "\n".join(lines)


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences and stray control characters.

    Test runners colorize their summaries; parsers and tag names must
    only ever see plain text.
    """
    if not text:
        return ""
    return CONTROL_CHARS_PATTERN.sub("", ANSI_PATTERN.sub("", text))


def run(
    cmd: str | list[str],
    cwd: Path | None = None,
    check: bool = True,
    timeout: int = 300,
    strip_output: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Run a command without a shell and capture its output.

    Args:
        cmd: Argument vector, or a string split with shlex
        cwd: Working directory
        check: Raise ShellError on a non-zero exit
        timeout: Seconds before subprocess.TimeoutExpired is raised
        strip_output: Strip ANSI codes from stdout and stderr

    Raises:
        ShellError: If the command fails and check is True
        subprocess.TimeoutExpired: If the command exceeds timeout
        FileNotFoundError: If the executable does not exist
    """
    cmd_list = shlex.split(cmd) if isinstance(cmd, str) else list(cmd)

    logger.debug("run: %s (cwd=%s, timeout=%ss)", " ".join(cmd_list), cwd, timeout)
    result = subprocess.run(
        cmd_list,
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=timeout,
        start_new_session=True,
    )

    result.stdout = result.stdout or ""
    result.stderr = result.stderr or ""
    if strip_output:
        result.stdout = strip_ansi(result.stdout)
        result.stderr = strip_ansi(result.stderr)

    if check and result.returncode != 0:
        raise ShellError(" ".join(cmd_list), result.returncode, result.stdout, result.stderr)
    return result


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command invocation.

    Attributes:
        exit_code: Process exit code (124 on timeout, 127 if not found)
        stdout: Standard output (ANSI stripped)
        stderr: Standard error (ANSI stripped)
        timed_out: True when the command was killed by its timeout
    """

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out

    @property
    def not_found(self) -> bool:
        return self.exit_code == EXIT_NOT_FOUND and not self.timed_out

    @property
    def output(self) -> str:
        """Combined stdout and stderr, for output parsers."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


class CommandRunner(ABC):
    """Abstract "run external command" capability.

    Implementations never raise for non-zero exits, missing binaries or
    timeouts; every outcome is a CommandResult.
    """

    @abstractmethod
    def run(
        self,
        cmd: list[str],
        cwd: Path | None = None,
        timeout: int = 300,
    ) -> CommandResult:
        """Run a command to completion.

        Args:
            cmd: Argument vector
            cwd: Working directory
            timeout: Maximum execution time in seconds

        Returns:
            CommandResult describing the outcome
        """


class SubprocessRunner(CommandRunner):
    """CommandRunner backed by subprocess via run()."""

    def run(
        self,
        cmd: list[str],
        cwd: Path | None = None,
        timeout: int = 300,
    ) -> CommandResult:
        try:
            result = run(cmd, cwd=cwd, check=False, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            logger.warning("Command timed out after %ss: %s", timeout, " ".join(cmd))
            stdout = e.stdout.decode() if isinstance(e.stdout, bytes) else e.stdout
            return CommandResult(
                exit_code=EXIT_TIMEOUT,
                stdout=strip_ansi(stdout or ""),
                stderr=f"Timed out after {timeout}s",
                timed_out=True,
            )
        except FileNotFoundError:
            logger.debug("Command not found: %s", cmd[0] if cmd else "")
            return CommandResult(
                exit_code=EXIT_NOT_FOUND,
                stderr=f"{cmd[0] if cmd else ''}: command not found",
            )
        return CommandResult(
            exit_code=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
