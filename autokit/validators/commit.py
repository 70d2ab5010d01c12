"""Commit message validator for the commit gate."""

from typing import ClassVar

from autokit.commits.message import validate_message
from autokit.validators.base import (
    CheckContext,
    ValidationResult,
    Validator,
    ValidatorRegistry,
)


@ValidatorRegistry.register
class CommitMessageValidator(Validator):
    """Validates the proposed commit message against the commit policy."""

    name: ClassVar[str] = "commit_message"
    description: ClassVar[str] = "Check conventional commit format"
    category: ClassVar[str] = "message"

    def should_run(self, context: CheckContext) -> bool:
        return context.message is not None

    def validate(self, context: CheckContext) -> list[ValidationResult]:
        return validate_message(context.message or "", context.config.commits)
