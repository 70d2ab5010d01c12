"""Unit tests for changelog rendering."""

import datetime
from pathlib import Path

import pytest

from autokit.commits import parse_commit, prepend_changelog, render_changelog
from autokit.commits.changelog import CHANGELOG_HEADER, prepend_changelog_text
from autokit.exceptions import EcosystemError

RELEASE_DATE = datetime.date(2024, 5, 1)


def records(*messages: str):
    return [parse_commit(f"{i + 1:07d}", message) for i, message in enumerate(messages)]


class TestRenderChangelog:
    def test_sections_in_fixed_order(self) -> None:
        text = render_changelog(
            "1.3.0",
            records("fix: handle empty input", "docs: document flags", "feat(cli): add export"),
            date=RELEASE_DATE,
        )

        assert text.startswith("## [1.3.0] - 2024-05-01\n")
        assert text.index("### Features") < text.index("### Bug Fixes") < text.index("### Documentation")
        assert "- **cli:** add export (0000003)" in text

    def test_breaking_callout_first(self) -> None:
        text = render_changelog(
            "2.0.0",
            records("feat: add export", "feat!: drop v1 API", "BREAKING CHANGE: new config format"),
            date=RELEASE_DATE,
        )

        assert text.index("BREAKING CHANGES") < text.index("### Features")
        assert "- drop v1 API" in text
        # Typed breaking commits appear only in the callout
        assert text.count("new config format") == 1

    def test_unknown_types_under_other(self) -> None:
        text = render_changelog("1.0.1", records("refactor: split parser", "Tidy up"), date=RELEASE_DATE)

        assert "### Other Changes" in text
        assert "- split parser" in text
        assert "- Tidy up" in text

    def test_ends_with_single_newline(self) -> None:
        text = render_changelog("1.0.1", records("fix: handle empty input"), date=RELEASE_DATE)
        assert text.endswith(")\n")


class TestPrependChangelog:
    def test_new_file_gets_header(self) -> None:
        text = prepend_changelog_text(None, "## [1.0.0] - 2024-05-01\n")
        assert text.startswith(CHANGELOG_HEADER)
        assert text.endswith("## [1.0.0] - 2024-05-01\n")

    def test_new_section_above_previous(self, tmp_path: Path) -> None:
        path = tmp_path / "CHANGELOG.md"
        path.write_text(f"{CHANGELOG_HEADER}\n## [1.0.0] - 2024-01-01\n\n- first\n")

        prepend_changelog(path, "## [1.1.0] - 2024-05-01\n\n- second\n")

        content = path.read_text()
        assert content.startswith("# Changelog")
        assert content.index("[1.1.0]") < content.index("[1.0.0]")
        assert content.count("# Changelog") == 1

    def test_missing_directory(self, tmp_path: Path) -> None:
        path = tmp_path / "docs" / "CHANGELOG.md"

        with pytest.raises(EcosystemError, match="Failed to write changelog") as exc_info:
            prepend_changelog(path, "## [1.0.0]\n")

        assert exc_info.value.fix_hint is not None
        assert not path.parent.exists()

    def test_headerless_file(self) -> None:
        text = prepend_changelog_text("## [1.0.0]\n\n- first\n", "## [1.1.0]\n")
        assert text.startswith(CHANGELOG_HEADER)
        assert text.index("[1.1.0]") < text.index("[1.0.0]")
