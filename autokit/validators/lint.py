"""Ecosystem lint and format checks for the commit gate."""

import logging
from typing import ClassVar

from autokit.ecosystems import EcosystemRegistry
from autokit.validators.base import (
    CheckContext,
    ValidationResult,
    Validator,
    ValidatorRegistry,
)

logger = logging.getLogger(__name__)

# Lines of tool output kept in a failure report
OUTPUT_TAIL = 20


def _tail(text: str) -> str:
    lines = text.strip().splitlines()
    return "\n".join(lines[-OUTPUT_TAIL:])


@ValidatorRegistry.register
class EcosystemLintValidator(Validator):
    """Runs the detected ecosystem's lint and format commands.

    A tool that is not installed is skipped with a note instead of
    failing the commit.
    """

    name: ClassVar[str] = "lint"
    description: ClassVar[str] = "Run ecosystem lint/format checks"
    category: ClassVar[str] = "lint"

    def validate(self, context: CheckContext) -> list[ValidationResult]:
        ecosystem = EcosystemRegistry.create(context.profile.ecosystem_kind, context.project_root)
        commands = ecosystem.lint_commands()
        if not commands:
            return [
                ValidationResult.skipped(
                    f"No lint checks for {ecosystem.display_name} projects"
                )
            ]

        results = []
        for cmd in commands:
            display = " ".join(cmd)
            outcome = context.runner.run(
                cmd,
                cwd=context.project_root,
                timeout=context.config.timeouts.command,
            )
            if outcome.not_found:
                logger.info("Skipping %s: %s is not installed", display, cmd[0])
                results.append(
                    ValidationResult.skipped(
                        f"Skipped {display}",
                        details=f"{cmd[0]} is not installed",
                    )
                )
            elif outcome.timed_out:
                results.append(
                    ValidationResult.error(
                        message=f"Timed out: {display}",
                        details=f"No result within {context.config.timeouts.command}s",
                    )
                )
            elif not outcome.ok:
                results.append(
                    ValidationResult.error(
                        message=f"Failed: {display}",
                        details=_tail(outcome.output) or f"exit code {outcome.exit_code}",
                        fix_command=display,
                    )
                )
            else:
                results.append(ValidationResult.success(f"Passed: {display}"))
        return results
