"""Configuration management for the automation orchestrator."""

from autokit.config.layers import cli_layer, merge_layers
from autokit.config.models import (
    AutomationConfig,
    CommitsConfig,
    EnvironmentOverrides,
    GitConfig,
    LockConfig,
    ReleaseToggles,
    TestingConfig,
    TimeoutsConfig,
    VersioningConfig,
)
from autokit.config.store import CACHE_FILE_NAME, STATE_FILES, ConfigStore, LoadedConfig

__all__ = [
    "AutomationConfig",
    "TestingConfig",
    "ReleaseToggles",
    "CommitsConfig",
    "VersioningConfig",
    "GitConfig",
    "TimeoutsConfig",
    "LockConfig",
    "EnvironmentOverrides",
    "ConfigStore",
    "LoadedConfig",
    "CACHE_FILE_NAME",
    "STATE_FILES",
    "cli_layer",
    "merge_layers",
]
