"""Unit tests for version bump decisions."""

import pytest

from autokit.commits import (
    NothingToRelease,
    ReleaseDecision,
    compute_bump,
    decide_version,
    determine_bump,
    parse_commit,
)
from autokit.exceptions import VersionComputeError
from autokit.utils.version import BumpLevel, VersionState, parse_version


def records(*messages: str):
    return [parse_commit(f"{i:040x}", message) for i, message in enumerate(messages)]


class TestDetermineBump:
    def test_breaking_wins(self) -> None:
        """fix + feat + feat! since 1.2.3 releases 2.0.0."""
        commits = records("fix: handle empty input", "feat: add export", "feat!: drop v1 API")

        assert determine_bump(commits) is BumpLevel.MAJOR
        assert compute_bump(commits, parse_version("1.2.3")) == VersionState(2, 0, 0)

    def test_feature_gives_minor(self) -> None:
        assert determine_bump(records("fix: typo in output", "feat: add flag")) is BumpLevel.MINOR

    def test_fix_gives_patch(self) -> None:
        assert determine_bump(records("fix: typo in output")) is BumpLevel.PATCH

    def test_other_types_give_patch(self) -> None:
        """Any type outside the non-release list releases a patch."""
        assert determine_bump(records("refactor: split module")) is BumpLevel.PATCH
        assert determine_bump(records("Update vendored files")) is BumpLevel.PATCH

    def test_docs_only_gives_none(self) -> None:
        assert determine_bump(records("docs: explain config", "chore: bump deps", "ci: cache")) is None

    def test_custom_non_release_types(self) -> None:
        commits = records("refactor: split module")
        assert determine_bump(commits, non_release_types=["refactor"]) is None


class TestDecideVersion:
    def test_docs_only_is_nothing_to_release(self) -> None:
        decision = decide_version(records("docs: explain config"), parse_version("1.2.3"))

        assert isinstance(decision, NothingToRelease)
        assert "non-release" in decision.reason

    def test_empty_range_is_nothing_even_with_explicit_level(self) -> None:
        decision = decide_version([], parse_version("1.2.3"), level=BumpLevel.MAJOR)

        assert isinstance(decision, NothingToRelease)

    def test_explicit_level_overrides_no_bump(self) -> None:
        decision = decide_version(
            records("docs: explain config"), parse_version("1.2.3"), level=BumpLevel.MINOR
        )

        assert isinstance(decision, ReleaseDecision)
        assert decision.explicit
        assert str(decision.next_version) == "1.3.0"

    def test_explicit_level_overrides_derived(self) -> None:
        decision = decide_version(
            records("feat!: drop v1 API"), parse_version("1.2.3"), level=BumpLevel.PATCH
        )

        assert isinstance(decision, ReleaseDecision)
        assert str(decision.next_version) == "1.2.4"

    def test_prerelease_with_preid(self) -> None:
        decision = decide_version(
            records("feat: add export"),
            parse_version("1.2.3"),
            level=BumpLevel.PRERELEASE,
            preid="rc",
        )

        assert isinstance(decision, ReleaseDecision)
        assert str(decision.next_version) == "1.2.4-rc.0"

    def test_result_exceeds_current(self) -> None:
        decision = decide_version(records("fix: handle empty input"), parse_version("0.9.0"))

        assert isinstance(decision, ReleaseDecision)
        assert decision.next_version > decision.current

    def test_never_goes_backwards(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            "autokit.commits.bump.bump_version", lambda current, level, preid=None: current
        )

        with pytest.raises(VersionComputeError, match="does not exceed"):
            decide_version(records("fix: handle empty input"), parse_version("1.0.0"))
