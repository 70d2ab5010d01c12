"""Validators for the content of staged files.

Checks run by the commit gate before any external tool:
- Something is staged at all
- No merge conflict markers
- No trailing whitespace (warning only)
"""

import re
from pathlib import Path
from typing import ClassVar

from autokit.exceptions import GitError
from autokit.validators.base import (
    CheckContext,
    ValidationResult,
    Validator,
    ValidatorRegistry,
)

CONFLICT_PATTERN = re.compile(r"^(<{7} |={7}$|>{7} )")

# Larger files are skipped (generated or binary content)
MAX_SCAN_BYTES = 1_000_000


def read_staged_lines(project_root: Path, file_name: str) -> list[str] | None:
    """Lines of a staged file, or None when it should not be scanned."""
    path = project_root / file_name
    try:
        if not path.is_file() or path.stat().st_size > MAX_SCAN_BYTES:
            return None
        data = path.read_bytes()
    except OSError:
        return None
    if b"\x00" in data[:8192]:
        return None
    return data.decode("utf-8", errors="ignore").splitlines()


@ValidatorRegistry.register
class StagedFilesValidator(Validator):
    """Validates that there is something to commit."""

    name: ClassVar[str] = "staged_files"
    description: ClassVar[str] = "Check that files are staged"
    category: ClassVar[str] = "staged"

    def validate(self, context: CheckContext) -> list[ValidationResult]:
        try:
            staged = context.vcs.staged_files()
        except GitError as e:
            return [
                ValidationResult.error(
                    message="Failed to list staged files",
                    details=str(e),
                    fix_command="git status",
                )
            ]
        if not staged:
            return [
                ValidationResult.error(
                    message="No files staged for commit",
                    fix_command="git add <files>",
                )
            ]
        return [ValidationResult.success(f"{len(staged)} file(s) staged")]


@ValidatorRegistry.register
class ConflictMarkerValidator(Validator):
    """Detects leftover merge conflict markers in staged files."""

    name: ClassVar[str] = "merge_conflicts"
    description: ClassVar[str] = "Check for merge conflict markers"
    category: ClassVar[str] = "staged"

    def validate(self, context: CheckContext) -> list[ValidationResult]:
        try:
            staged = context.vcs.staged_files()
        except GitError:
            # staged_files already reported the failure
            return []

        results = []
        for file_name in staged:
            lines = read_staged_lines(context.project_root, file_name)
            for line_num, line in enumerate(lines or [], start=1):
                if CONFLICT_PATTERN.match(line):
                    results.append(
                        ValidationResult.error(
                            message=f"Merge conflict marker in {file_name}:{line_num}",
                            details="Resolve the conflict before committing",
                            file_path=Path(file_name),
                            line_number=line_num,
                        )
                    )
                    break

        return results or [ValidationResult.success("No merge conflict markers")]


@ValidatorRegistry.register
class TrailingWhitespaceValidator(Validator):
    """Warns about trailing whitespace in staged files."""

    name: ClassVar[str] = "trailing_whitespace"
    description: ClassVar[str] = "Check for trailing whitespace"
    category: ClassVar[str] = "staged"

    def validate(self, context: CheckContext) -> list[ValidationResult]:
        try:
            staged = context.vcs.staged_files()
        except GitError:
            return []

        offenders = []
        for file_name in staged:
            lines = read_staged_lines(context.project_root, file_name) or []
            if any(line != line.rstrip() for line in lines):
                offenders.append(file_name)

        if not offenders:
            return [ValidationResult.success("No trailing whitespace")]

        file_list = "\n".join(f"  - {f}" for f in offenders[:10])
        if len(offenders) > 10:
            file_list += f"\n  ... and {len(offenders) - 10} more"
        return [
            ValidationResult.warning(
                message=f"Trailing whitespace in {len(offenders)} file(s)",
                details=file_list,
            )
        ]
