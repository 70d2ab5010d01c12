"""Commit message validation."""

from autokit.commits.parser import BREAKING_PREFIXES, CONVENTIONAL_PATTERN
from autokit.config.models import CommitsConfig
from autokit.validators.base import ValidationResult


def validate_message(message: str, settings: CommitsConfig) -> list[ValidationResult]:
    """Check a commit message against the commit policy.

    Errors: empty message, non-conventional format or unknown type (when
    enforced), description shorter than the minimum. Warning: first line
    longer than the maximum.

    Args:
        message: Full commit message
        settings: Commit policy

    Returns:
        Results; any result with ``is_error`` rejects the message
    """
    lines = message.strip().splitlines()
    first = lines[0].strip() if lines else ""
    if not first:
        return [ValidationResult.error("Commit message is empty")]

    results: list[ValidationResult] = []
    description = first

    if first.startswith(BREAKING_PREFIXES):
        description = first.partition(":")[2].strip()
    else:
        match = CONVENTIONAL_PATTERN.match(first)
        if match:
            description = match.group("subject").strip()
            token = match.group("type").lower()
            if settings.enforce_conventional and token not in settings.valid_types:
                results.append(
                    ValidationResult.error(
                        f"Unknown commit type '{token}'",
                        details=f"Valid types: {', '.join(settings.valid_types)}",
                        fix_command=f'autokit commit "feat: {description or "describe the change"}"',
                    )
                )
        elif settings.enforce_conventional:
            results.append(
                ValidationResult.error(
                    "Invalid commit format",
                    details=(
                        "Expected format: type(scope): description "
                        "(e.g. 'feat(auth): add login functionality')"
                    ),
                )
            )

    if len(description) < settings.min_description_length:
        results.append(
            ValidationResult.error(
                f"Description too short ({len(description)} chars)",
                details=f"Minimum {settings.min_description_length} characters",
            )
        )

    if len(first) > settings.max_first_line_length:
        results.append(
            ValidationResult.warning(
                f"First line is long ({len(first)} chars)",
                details=f"Consider keeping it under {settings.max_first_line_length}",
            )
        )

    if not results:
        results.append(ValidationResult.success("Commit format is valid"))
    return results
