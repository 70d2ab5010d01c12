"""Unit tests for test runner output parsers."""

import pytest

from autokit.testing import parse_coverage, parse_failed_count

PYTEST_FAILED = """\
tests/test_app.py ..F.F                                                  [100%]

---------- coverage: platform linux, python 3.12.1-final-0 -----------
Name              Stmts   Miss  Cover
-------------------------------------
src/app.py           40      6    85%
TOTAL                40      6    85%

=================== 2 failed, 3 passed, 1 error in 0.42s ====================
"""

JEST_OUTPUT = """\
----------|---------|----------|---------|---------|
File      | % Stmts | % Branch | % Funcs | % Lines |
----------|---------|----------|---------|---------|
All files |   72.5  |    60    |   80    |   72.5  |
----------|---------|----------|---------|---------|
Test Suites: 1 failed, 2 passed, 3 total
Tests:       4 failed, 10 passed, 14 total
"""

GO_OUTPUT = """\
--- FAIL: TestParse (0.00s)
--- FAIL: TestRender (0.00s)
FAIL
coverage: 80.0% of statements
ok  	example.com/other	0.01s	coverage: 60.0% of statements
"""


class TestParseFailedCount:
    def test_pytest_counts_failures_and_errors(self) -> None:
        assert parse_failed_count("pytest", PYTEST_FAILED) == 3

    def test_pytest_all_passed(self) -> None:
        assert parse_failed_count("pytest", "==== 12 passed in 1.02s ====") == 0

    def test_jest(self) -> None:
        assert parse_failed_count("jest", JEST_OUTPUT) == 4

    def test_go_counts_fail_lines(self) -> None:
        assert parse_failed_count("go-test", GO_OUTPUT) == 2

    @pytest.mark.parametrize(
        ("framework", "output", "expected"),
        [
            ("cargo-test", "test result: FAILED. 8 passed; 2 failed; 0 ignored", 2),
            ("mocha", "  5 passing (20ms)\n  1 failing\n", 1),
            ("rspec", "12 examples, 3 failures", 3),
            ("unittest", "FAILED (failures=2, errors=1)", 3),
            ("gradle", "10 tests completed, 4 failed", 4),
            ("dotnet-test", "Failed!  - Failed:     2, Passed:    40, Skipped: 0", 2),
        ],
    )
    def test_framework_summaries(self, framework: str, output: str, expected: int) -> None:
        assert parse_failed_count(framework, output) == expected

    def test_unknown_framework_says_nothing(self) -> None:
        assert parse_failed_count("custom", "3 failed") is None

    def test_missing_summary(self) -> None:
        assert parse_failed_count("jest", "Segmentation fault") is None


class TestParseCoverage:
    def test_pytest_total_line(self) -> None:
        assert parse_coverage("pytest", PYTEST_FAILED) == 85.0

    def test_istanbul_table(self) -> None:
        assert parse_coverage("jest", JEST_OUTPUT) == 72.5

    def test_go_averages_packages(self) -> None:
        assert parse_coverage("go-test", GO_OUTPUT) == 70.0

    def test_generic_fallback(self) -> None:
        """Custom commands still report coverage through a generic line."""
        assert parse_coverage("custom", "Total coverage: 91.5%") == 91.5

    def test_no_coverage(self) -> None:
        assert parse_coverage("pytest", "==== 3 passed in 0.1s ====") is None
