"""Test runner output parsers.

Each framework family prints its own summary. Parsers extract the number
of failed tests and the total coverage percentage from plain (ANSI
stripped) output; both are None when the output does not say.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

CountParser = Callable[[str], int | None]
CoverageParser = Callable[[str], float | None]


def _sum_of(pattern: str, flags: int = 0) -> CountParser:
    regex = re.compile(pattern, flags)

    def parse(output: str) -> int | None:
        matches = regex.findall(output)
        if not matches:
            return None
        total = 0
        for match in matches:
            groups = match if isinstance(match, tuple) else (match,)
            total += sum(int(g) for g in groups if g)
        return total

    return parse


def _last_of(pattern: str, flags: int = 0) -> CountParser:
    regex = re.compile(pattern, flags)

    def parse(output: str) -> int | None:
        matches = regex.findall(output)
        if not matches:
            return None
        last = matches[-1]
        groups = last if isinstance(last, tuple) else (last,)
        return sum(int(g) for g in groups if g)

    return parse


def _summary_sum(line_pattern: str, count_pattern: str) -> CountParser:
    line_regex = re.compile(line_pattern, re.MULTILINE)
    count_regex = re.compile(count_pattern)

    def parse(output: str) -> int | None:
        lines = line_regex.findall(output)
        if not lines:
            return None
        return sum(int(n) for n in count_regex.findall(lines[-1]))

    return parse


def _count_of(pattern: str, flags: int = 0) -> CountParser:
    regex = re.compile(pattern, flags)

    def parse(output: str) -> int | None:
        return len(regex.findall(output)) if output else None

    return parse


def _percent(pattern: str, flags: int = 0, average: bool = False) -> CoverageParser:
    regex = re.compile(pattern, flags)

    def parse(output: str) -> float | None:
        values = [float(v) for v in regex.findall(output)]
        if not values:
            return None
        if average:
            return round(sum(values) / len(values), 2)
        return values[-1]

    return parse


# "TOTAL  120  12  90%" (coverage.py) or "coverage: 85.0%" lines
generic_coverage = _percent(r"(?i)\bcoverage\b[^\d\n]*?(\d+(?:\.\d+)?)\s*%")


@dataclass(frozen=True)
class OutputParser:
    failed: CountParser
    coverage: CoverageParser = generic_coverage


_ISTANBUL_TABLE = _percent(r"^All files\s*\|\s*(\d+(?:\.\d+)?)", re.MULTILINE)

PARSERS: dict[str, OutputParser] = {
    "pytest": OutputParser(
        failed=_summary_sum(
            r"^=*\s*(.*\b(?:passed|failed|errors?|skipped|no tests ran)\b.*) in [\d.]+s",
            r"(\d+) (?:failed|errors?)\b",
        ),
        coverage=_percent(r"^TOTAL\s.*?(\d+(?:\.\d+)?)%\s*$", re.MULTILINE),
    ),
    "unittest": OutputParser(
        failed=_last_of(r"FAILED \((?:failures=(\d+))?(?:, )?(?:errors=(\d+))?"),
        coverage=_percent(r"^TOTAL\s.*?(\d+(?:\.\d+)?)%\s*$", re.MULTILINE),
    ),
    "jest": OutputParser(
        failed=_last_of(r"^Tests:\s+(\d+) failed", re.MULTILINE),
        coverage=_ISTANBUL_TABLE,
    ),
    "vitest": OutputParser(
        failed=_last_of(r"^\s*Tests\s+(\d+) failed", re.MULTILINE),
        coverage=_ISTANBUL_TABLE,
    ),
    "mocha": OutputParser(
        failed=_last_of(r"^\s*(\d+) failing", re.MULTILINE),
        coverage=_percent(r"^Lines\s*:\s*(\d+(?:\.\d+)?)%", re.MULTILINE),
    ),
    "go-test": OutputParser(
        failed=_count_of(r"^\s*--- FAIL:", re.MULTILINE),
        coverage=_percent(r"coverage: (\d+(?:\.\d+)?)% of statements", average=True),
    ),
    "cargo-test": OutputParser(
        failed=_sum_of(r"test result: \w+\. \d+ passed; (\d+) failed"),
        coverage=_percent(r"(\d+(?:\.\d+)?)% coverage"),
    ),
    "phpunit": OutputParser(
        failed=_summary_sum(r"^(Tests: \d+, Assertions: .*)$", r"(?:Failures|Errors): (\d+)"),
        coverage=_percent(r"^\s*Lines:\s+(\d+(?:\.\d+)?)%", re.MULTILINE),
    ),
    "pest": OutputParser(
        failed=_last_of(r"^\s*Tests:\s+(\d+) failed", re.MULTILINE),
        coverage=_percent(r"Total:\s*(\d+(?:\.\d+)?)\s*%"),
    ),
    "rspec": OutputParser(
        failed=_last_of(r"\d+ examples?, (\d+) failures?"),
        coverage=_percent(r"\((\d+(?:\.\d+)?)%\) covered"),
    ),
    "minitest": OutputParser(
        failed=_last_of(r"\d+ runs, \d+ assertions, (\d+) failures, (\d+) errors"),
        coverage=_percent(r"\((\d+(?:\.\d+)?)%\) covered"),
    ),
    "maven": OutputParser(
        failed=_summary_sum(r"^(.*Tests run: \d+, Failures: .*)$", r"(?:Failures|Errors): (\d+)"),
    ),
    "gradle": OutputParser(
        failed=_last_of(r"\d+ tests? completed, (\d+) failed"),
    ),
    "dotnet-test": OutputParser(
        failed=_last_of(r"Failed:\s+(\d+), Passed:"),
    ),
    "npm-script": OutputParser(
        failed=_last_of(r"^Tests:\s+(\d+) failed|^\s*(\d+) failing", re.MULTILINE),
        coverage=_ISTANBUL_TABLE,
    ),
}

_FALLBACK = OutputParser(failed=lambda output: None)


def parser_for(framework_id: str) -> OutputParser:
    return PARSERS.get(framework_id, _FALLBACK)


def parse_failed_count(framework_id: str, output: str) -> int | None:
    """Number of failed tests reported in the output, if stated."""
    return parser_for(framework_id).failed(output)


def parse_coverage(framework_id: str, output: str) -> float | None:
    """Total coverage percent reported in the output, if stated.

    Falls back to any "coverage ... NN%" line when the framework's own
    report format is not found.
    """
    value = parser_for(framework_id).coverage(output)
    if value is None:
        value = generic_coverage(output)
    return value
