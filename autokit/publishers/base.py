"""Package publishers.

Publishing is the last release step and the only one that talks to a
package registry. One publisher serves each publishable ecosystem; a
failure is reported together with the command that publishes by hand.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import ClassVar

from autokit.utils.shell import CommandResult, CommandRunner, SubprocessRunner


class PublishStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class PublishResult:
    """Outcome of a publish attempt.

    Attributes:
        status: SUCCESS, FAILED or SKIPPED
        message: One-line summary
        package_url: Registry page of the published version
        version: Version that was published
        details: Exit code and output tail of the failing command
        manual_command: Command an operator can run to publish by hand
    """

    status: PublishStatus
    message: str
    package_url: str | None = None
    version: str | None = None
    details: str | None = None
    manual_command: str | None = None

    @classmethod
    def success(
        cls, message: str, package_url: str | None = None, version: str | None = None
    ) -> "PublishResult":
        return cls(PublishStatus.SUCCESS, message, package_url=package_url, version=version)

    @classmethod
    def failed(
        cls, message: str, details: str | None = None, manual_command: str | None = None
    ) -> "PublishResult":
        return cls(PublishStatus.FAILED, message, details=details, manual_command=manual_command)

    @classmethod
    def skipped(cls, message: str) -> "PublishResult":
        return cls(PublishStatus.SKIPPED, message)


@dataclass
class PublishContext:
    """What a publisher needs: where, which version, and how to run commands."""

    project_root: Path
    version: str
    tag_name: str
    runner: CommandRunner = field(default_factory=SubprocessRunner)
    timeout: int = 300

    def run(self, cmd: list[str]) -> CommandResult:
        return self.runner.run(cmd, cwd=self.project_root, timeout=self.timeout)


def failure_details(result: CommandResult) -> str:
    """Exit code plus the tail of a failed command's output."""
    tail = "\n".join(result.output.strip().splitlines()[-20:])
    return f"Exit code: {result.exit_code}\n{tail}".rstrip()


class Publisher(ABC):
    """Uploads a released package to one ecosystem's registry.

    ``ecosystem`` matches ProjectProfile.ecosystem_kind.
    """

    name: ClassVar[str]
    display_name: ClassVar[str]
    ecosystem: ClassVar[str]

    @abstractmethod
    def publish(self, context: PublishContext) -> PublishResult:
        """Upload the package; never raises for command failures."""

    def should_publish(self, context: PublishContext) -> bool:
        """False for projects that must never be uploaded (e.g., private packages)."""
        return True


class PublisherRegistry:
    """Publishers keyed by name, looked up by ecosystem."""

    _publishers: dict[str, type[Publisher]] = {}

    @classmethod
    def register(cls, publisher_class: type[Publisher]) -> type[Publisher]:
        """Class decorator adding a publisher.

        Raises:
            TypeError: If name, display_name or ecosystem is missing
            ValueError: If another class already uses the name
        """
        missing = [
            attr
            for attr in ("name", "display_name", "ecosystem")
            if not hasattr(publisher_class, attr)
        ]
        if missing:
            raise TypeError(
                f"Publisher class {publisher_class.__name__} missing required "
                f"class attributes: {', '.join(missing)}"
            )

        name = publisher_class.name
        existing = cls._publishers.get(name)
        if existing is publisher_class:
            return publisher_class
        if existing is not None:
            raise ValueError(
                f"Publisher name '{name}' already registered by {existing.__name__}"
            )

        cls._publishers[name] = publisher_class
        return publisher_class

    @classmethod
    def for_ecosystem(cls, ecosystem: str) -> Publisher | None:
        """The publisher serving an ecosystem, or None."""
        for publisher_class in cls._publishers.values():
            if publisher_class.ecosystem == ecosystem:
                return publisher_class()
        return None
