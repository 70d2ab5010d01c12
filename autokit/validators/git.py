"""Git state validators for release checks.

Validates git repository state before release:
- Working directory cleanliness
- Branch requirements
"""

from typing import ClassVar

from autokit.exceptions import GitError
from autokit.validators.base import (
    CheckContext,
    ValidationResult,
    Validator,
    ValidatorRegistry,
)


@ValidatorRegistry.register
class GitCleanValidator(Validator):
    """Validates that the git working directory is clean.

    Ensures no uncommitted changes exist before release to prevent
    releasing code that hasn't been committed to version control.
    Automation state files (``context.ignored_paths``) do not count.
    """

    name: ClassVar[str] = "git_clean"
    description: ClassVar[str] = "Check if working directory is clean"
    category: ClassVar[str] = "release"

    def validate(self, context: CheckContext) -> list[ValidationResult]:
        try:
            changed = [f for f in context.vcs.status() if f not in context.ignored_paths]
        except GitError as e:
            return [
                ValidationResult.error(
                    message="Failed to check git status",
                    details=str(e),
                    fix_command="git status",
                )
            ]

        if not changed:
            return [ValidationResult.success("Working directory is clean")]

        file_list = "\n".join(f"  - {f}" for f in changed[:10])
        if len(changed) > 10:
            file_list += f"\n  ... and {len(changed) - 10} more"

        return [
            ValidationResult.error(
                message="Working directory has uncommitted changes",
                details=f"Uncommitted changes detected:\n{file_list}",
                fix_command="git status",
            )
        ]


@ValidatorRegistry.register
class GitBranchValidator(Validator):
    """Validates that the current branch is the configured release branch.

    Prevents accidental releases from feature branches.
    """

    name: ClassVar[str] = "git_branch"
    description: ClassVar[str] = "Check if on the release branch"
    category: ClassVar[str] = "release"

    def should_run(self, context: CheckContext) -> bool:
        return bool(context.config.git.branch)

    def validate(self, context: CheckContext) -> list[ValidationResult]:
        expected = context.config.git.branch
        try:
            current = context.vcs.current_branch()
        except GitError as e:
            return [
                ValidationResult.error(
                    message="Failed to determine current branch",
                    details=str(e),
                    fix_command="git branch --show-current",
                )
            ]

        if current == expected:
            return [ValidationResult.success(f"On release branch: {current}")]

        return [
            ValidationResult.error(
                message=f"Not on release branch (expected: {expected}, current: {current})",
                details=f"Releases must be made from the '{expected}' branch",
                fix_command=f"git checkout {expected}",
            )
        ]
