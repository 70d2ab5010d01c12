"""Pydantic v2 configuration models for .automation-config.yml.

These models provide:
- Type-safe configuration loading
- Automatic validation
- Default values (the lowest configuration layer)
- Environment variable overrides (EnvironmentOverrides)

Unknown keys are ignored so that override files written for older
versions of the kit (detection, hooks, notifications sections) still load.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_NON_RELEASE_TYPES = ["docs", "chore", "style", "test", "ci"]

DEFAULT_VALID_TYPES = [
    "feat",
    "fix",
    "docs",
    "style",
    "refactor",
    "perf",
    "test",
    "build",
    "ci",
    "chore",
    "revert",
]


class _Section(BaseModel):
    model_config = ConfigDict(extra="ignore")


class TestingConfig(_Section):
    """Test execution policy."""

    __test__ = False  # keep pytest from collecting this class

    enabled: bool = Field(default=True, description="Run tests at commit and release time")
    strict_mode: bool = Field(
        default=False,
        description="Reject when tests fail or no framework is found",
    )
    auto_detect: bool = Field(
        default=True,
        description="Probe the project for known test frameworks",
    )
    per_ecosystem_command: dict[str, str] = Field(
        default_factory=dict,
        description="Explicit test command per ecosystem (e.g., python: 'pytest -q')",
    )
    coverage_threshold: float | None = Field(
        default=None,
        ge=0,
        le=100,
        description="Minimum coverage percent required to release",
    )


class ReleaseToggles(_Section):
    """Which release steps run automatically."""

    auto_tag: bool = Field(default=True, description="Create the release tag")
    auto_changelog: bool = Field(default=True, description="Generate the changelog")
    auto_publish: bool = Field(default=True, description="Publish to the package registry")


class CommitsConfig(_Section):
    """Commit message policy."""

    enforce_conventional: bool = Field(
        default=True,
        description="Require the conventional commit format",
    )
    valid_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_VALID_TYPES),
        description="Allowed conventional commit types",
    )
    non_release_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_NON_RELEASE_TYPES),
        description="Commit types that never trigger a release on their own",
    )
    min_description_length: int = Field(
        default=10,
        ge=0,
        description="Minimum description length after the type prefix",
    )
    max_first_line_length: int = Field(
        default=72,
        ge=20,
        description="First line length above which a warning is shown",
    )


class VersioningConfig(_Section):
    """Version and changelog files."""

    tag_prefix: str = Field(
        default="v",
        description="Prefix for git tags (e.g., 'v' for v1.0.0)",
    )
    changelog_file: str = Field(
        default="CHANGELOG.md",
        description="Changelog file relative to the project root",
    )
    update_version_file: bool = Field(
        default=True,
        description="Write the new version into the ecosystem manifest",
    )

    @field_validator("tag_prefix")
    @classmethod
    def validate_tag_prefix(cls, v: str) -> str:
        if any(ch.isspace() for ch in v) or any(ch in v for ch in "~^:?*[\\"):
            raise ValueError("tag_prefix contains characters not allowed in git tags")
        return v


class GitConfig(_Section):
    """Git workflow configuration."""

    remote: str = Field(default="origin", description="Git remote name")
    branch: str | None = Field(
        default=None,
        description="Branch to push (defaults to the current branch)",
    )


class TimeoutsConfig(_Section):
    """Timeout settings in seconds."""

    command: int = Field(default=120, ge=1, description="Lint/format command timeout")
    tests: int = Field(default=600, ge=1, description="Test execution timeout")
    git: int = Field(default=30, ge=1, description="Git operation timeout")
    publish: int = Field(default=300, ge=1, description="Publish command timeout")


class LockConfig(_Section):
    """Repository lock settings."""

    grace_period: int = Field(
        default=3600,
        ge=1,
        description="Seconds after which a held lock is considered stale",
    )


class AutomationConfig(BaseModel):
    """Root configuration model: the merged result of all layers."""

    model_config = ConfigDict(extra="ignore")

    testing: TestingConfig = Field(default_factory=TestingConfig)
    release: ReleaseToggles = Field(default_factory=ReleaseToggles)
    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    versioning: VersioningConfig = Field(default_factory=VersioningConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)
    lock: LockConfig = Field(default_factory=LockConfig)


SECTIONS = tuple(AutomationConfig.model_fields)


class EnvironmentOverrides(BaseSettings):
    """Environment layer.

    Supports environment variable overrides with AUTOKIT_ prefix.
    Example: AUTOKIT_TESTING__STRICT_MODE=true

    Values stay raw here; they are validated when merged into
    AutomationConfig, like every other layer.
    """

    testing: dict[str, Any] = Field(default_factory=dict)
    release: dict[str, Any] = Field(default_factory=dict)
    commits: dict[str, Any] = Field(default_factory=dict)
    versioning: dict[str, Any] = Field(default_factory=dict)
    git: dict[str, Any] = Field(default_factory=dict)
    timeouts: dict[str, Any] = Field(default_factory=dict)
    lock: dict[str, Any] = Field(default_factory=dict)

    model_config = SettingsConfigDict(
        env_prefix="AUTOKIT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    def as_layer(self) -> dict[str, Any]:
        return {section: values for section, values in self.model_dump().items() if values}
