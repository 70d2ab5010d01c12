"""Validation modules for commit-time and pre-release checks.

Concrete validators register themselves on import; callers import the
modules they need (see autokit.gate and autokit.pipeline).
"""

from autokit.validators.base import (
    CheckContext,
    ValidationResult,
    ValidationSeverity,
    Validator,
    ValidatorRegistry,
)

__all__ = [
    "CheckContext",
    "ValidationResult",
    "ValidationSeverity",
    "Validator",
    "ValidatorRegistry",
]
