"""Unit tests for Pydantic configuration models.

Tests cover:
- Default values (the lowest configuration layer)
- Field validators and constraints
- Unknown keys from older override files
- Environment variable overrides (EnvironmentOverrides)
"""

import pytest
from pydantic import ValidationError

from autokit.config.models import (
    AutomationConfig,
    CommitsConfig,
    EnvironmentOverrides,
    TestingConfig,
    TimeoutsConfig,
    VersioningConfig,
)


class TestAutomationConfigDefaults:
    """Tests for compiled defaults."""

    def test_testing_defaults(self) -> None:
        """Testing runs in flexible mode with auto-detection by default."""
        config = AutomationConfig()
        assert config.testing.enabled is True
        assert config.testing.strict_mode is False
        assert config.testing.auto_detect is True
        assert config.testing.per_ecosystem_command == {}
        assert config.testing.coverage_threshold is None

    def test_release_toggles_default_on(self) -> None:
        """Tag, changelog and publish all run unless turned off."""
        release = AutomationConfig().release
        assert (release.auto_tag, release.auto_changelog, release.auto_publish) == (True, True, True)

    def test_non_release_types(self) -> None:
        """docs, chore, style, test and ci never release on their own."""
        assert AutomationConfig().commits.non_release_types == ["docs", "chore", "style", "test", "ci"]

    def test_unknown_sections_ignored(self) -> None:
        """Sections from older override files do not break loading."""
        config = AutomationConfig.model_validate({"notifications": {"slack": True}})
        assert config.git.remote == "origin"


class TestTestingConfig:
    """Tests for TestingConfig constraints."""

    def test_coverage_threshold_bounds(self) -> None:
        """Coverage threshold must be a percentage."""
        assert TestingConfig(coverage_threshold=80).coverage_threshold == 80.0
        with pytest.raises(ValidationError):
            TestingConfig(coverage_threshold=120)
        with pytest.raises(ValidationError):
            TestingConfig(coverage_threshold=-1)

    def test_strict_mode_from_string(self) -> None:
        """Boolean fields accept the strings YAML and env values produce."""
        assert TestingConfig.model_validate({"strict_mode": "true"}).strict_mode is True


class TestVersioningConfig:
    """Tests for VersioningConfig with tag_prefix validator."""

    def test_empty_tag_prefix(self) -> None:
        """Empty tag prefix gives bare version tags."""
        assert VersioningConfig(tag_prefix="").tag_prefix == ""

    def test_custom_tag_prefix(self) -> None:
        assert VersioningConfig(tag_prefix="release-").tag_prefix == "release-"

    @pytest.mark.parametrize("prefix", ["v ", "v:", "rel^", "a*b"])
    def test_invalid_tag_prefix(self, prefix: str) -> None:
        """Characters git refuses in tag names are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            VersioningConfig(tag_prefix=prefix)
        assert "tag_prefix" in str(exc_info.value)


class TestTimeoutsConfig:
    """Tests for TimeoutsConfig with minimum value constraints."""

    def test_default_values(self) -> None:
        config = TimeoutsConfig()
        assert config.command == 120
        assert config.tests == 600
        assert config.git == 30
        assert config.publish == 300

    def test_zero_timeout_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TimeoutsConfig(tests=0)


class TestCommitsConfig:
    def test_short_first_line_limit_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CommitsConfig(max_first_line_length=10)


class TestEnvironmentOverrides:
    """Tests for AUTOKIT_* environment variables."""

    def test_nested_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """AUTOKIT_<SECTION>__<KEY> lands in the matching section."""
        monkeypatch.setenv("AUTOKIT_TESTING__STRICT_MODE", "true")
        monkeypatch.setenv("AUTOKIT_GIT__REMOTE", "upstream")

        layer = EnvironmentOverrides().as_layer()

        assert layer == {"testing": {"strict_mode": "true"}, "git": {"remote": "upstream"}}

    def test_no_variables_gives_empty_layer(self) -> None:
        assert EnvironmentOverrides().as_layer() == {}
