"""Check framework shared by the commit gate and the release pipeline.

Each check is a Validator registered under a category. The gate runs
the "message", "staged" and "lint" categories; the pipeline runs
"release". Results carry a severity: only errors block.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from autokit.utils.shell import CommandRunner, SubprocessRunner

if TYPE_CHECKING:
    from autokit.config.models import AutomationConfig
    from autokit.detection import ProjectProfile
    from autokit.git.vcs import VersionControl


class ValidationSeverity(Enum):
    """How a failed check affects the caller (only ERROR blocks)."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class ValidationResult:
    """Outcome of one check.

    Attributes:
        passed: False only for blocking problems
        message: One-line summary
        severity: ERROR, WARNING or INFO
        details: Extra output (e.g., the tail of a lint run)
        fix_command: Command the user can run to fix the problem
        file_path: Offending file, for content checks
        line_number: Offending line within file_path
        check: Validator name, filled in by the registry
        not_run: The check was skipped because its tool is unavailable
    """

    passed: bool
    message: str
    severity: ValidationSeverity = ValidationSeverity.ERROR
    details: str | None = None
    fix_command: str | None = None
    file_path: Path | None = None
    line_number: int | None = None
    check: str = ""
    not_run: bool = False

    @classmethod
    def success(cls, message: str = "Validation passed") -> "ValidationResult":
        return cls(passed=True, message=message, severity=ValidationSeverity.INFO)

    @classmethod
    def error(
        cls,
        message: str,
        details: str | None = None,
        fix_command: str | None = None,
        file_path: Path | None = None,
        line_number: int | None = None,
    ) -> "ValidationResult":
        return cls(
            passed=False,
            message=message,
            details=details,
            fix_command=fix_command,
            file_path=file_path,
            line_number=line_number,
        )

    @classmethod
    def warning(
        cls, message: str, details: str | None = None, fix_command: str | None = None
    ) -> "ValidationResult":
        """Reported to the user but never blocks."""
        return cls(
            passed=True,
            message=message,
            severity=ValidationSeverity.WARNING,
            details=details,
            fix_command=fix_command,
        )

    @classmethod
    def skipped(cls, message: str, details: str | None = None) -> "ValidationResult":
        """A check that could not run (e.g., its tool is not installed)."""
        return cls(
            passed=True,
            message=message,
            severity=ValidationSeverity.INFO,
            details=details,
            not_run=True,
        )

    @property
    def is_error(self) -> bool:
        return not self.passed and self.severity is ValidationSeverity.ERROR


@dataclass
class CheckContext:
    """Everything a validator may look at.

    ``message`` is only set when a commit message is being checked;
    ``ignored_paths`` holds files the content checks must skip.
    """

    project_root: Path
    config: "AutomationConfig"
    profile: "ProjectProfile"
    vcs: "VersionControl"
    runner: CommandRunner = field(default_factory=SubprocessRunner)
    message: str | None = None
    ignored_paths: tuple[str, ...] = ()


class Validator(ABC):
    """A single named check belonging to one category."""

    name: ClassVar[str]
    description: ClassVar[str]
    category: ClassVar[str]

    @abstractmethod
    def validate(self, context: CheckContext) -> list[ValidationResult]:
        """Run the check and return one or more results."""

    def should_run(self, context: CheckContext) -> bool:
        """Override to skip the check for some configurations."""
        return True


class ValidatorRegistry:
    """Validators by category, run in registration order."""

    _validators: dict[str, type[Validator]] = {}
    _categories: dict[str, list[type[Validator]]] = {}

    @classmethod
    def register(cls, validator_class: type[Validator]) -> type[Validator]:
        """Class decorator adding a validator to its category.

        Raises:
            TypeError: If name, description or category is missing
            ValueError: If another class already uses the name
        """
        missing = [
            attr
            for attr in ("name", "description", "category")
            if not hasattr(validator_class, attr)
        ]
        if missing:
            raise TypeError(
                f"Validator class {validator_class.__name__} missing required "
                f"class attributes: {', '.join(missing)}"
            )

        name = validator_class.name
        existing = cls._validators.get(name)
        if existing is validator_class:
            return validator_class
        if existing is not None:
            raise ValueError(
                f"Validator name '{name}' already registered by {existing.__name__}"
            )

        cls._validators[name] = validator_class
        cls._categories.setdefault(validator_class.category, []).append(validator_class)
        return validator_class

    @classmethod
    def get_by_category(cls, category: str) -> list[type[Validator]]:
        return cls._categories.get(category, [])

    @classmethod
    def run_category(cls, category: str, context: CheckContext) -> list[ValidationResult]:
        """Run every validator of a category.

        Returns:
            Flat list of results, each tagged with its check name
        """
        results = []
        for validator_class in cls.get_by_category(category):
            validator = validator_class()
            if not validator.should_run(context):
                continue
            for result in validator.validate(context):
                result.check = result.check or validator.name
                results.append(result)
        return results
