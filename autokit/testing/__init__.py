"""Test capability resolution, execution and output parsing."""

from autokit.testing.parsers import parse_coverage, parse_failed_count
from autokit.testing.resolver import (
    CUSTOM_FRAMEWORK,
    TestOutcome,
    primary_candidate,
    resolve_candidates,
    run_tests,
)

__all__ = [
    "CUSTOM_FRAMEWORK",
    "TestOutcome",
    "parse_coverage",
    "parse_failed_count",
    "primary_candidate",
    "resolve_candidates",
    "run_tests",
]
