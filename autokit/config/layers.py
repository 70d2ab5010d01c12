"""Configuration layers and their merge.

Precedence, lowest first:
1. compiled defaults (AutomationConfig field defaults)
2. profile-derived layer (e.g., generic projects do not run tests)
3. project override file (.automation-config.yml)
4. environment (AUTOKIT_<SECTION>__<KEY>)
5. CLI flags

Everything in this module is pure except ``environment_layer``.
"""

import copy
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from autokit.config.models import AutomationConfig, EnvironmentOverrides
from autokit.detection import ProjectProfile
from autokit.exceptions import ConfigParseError

Layer = dict[str, Any]


def merge_layers(*layers: Mapping[str, Any]) -> Layer:
    """Deep-merge configuration layers, later layers winning per leaf.

    Mappings merge recursively; every other value (scalars and lists
    alike) is a leaf and replaces the lower value wholesale.

    Args:
        *layers: Layers in increasing precedence

    Returns:
        New merged dictionary; inputs are not modified

    Examples:
        >>> merge_layers({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}})
        {'a': {'x': 1, 'y': 3}}
    """
    merged: Layer = {}
    for layer in layers:
        for key, value in layer.items():
            current = merged.get(key)
            if isinstance(value, Mapping) and isinstance(current, Mapping):
                merged[key] = merge_layers(current, value)
            elif isinstance(value, Mapping):
                merged[key] = merge_layers(value)
            else:
                merged[key] = copy.deepcopy(value)
    return merged


def default_layer() -> Layer:
    return AutomationConfig().model_dump()


def profile_layer(profile: ProjectProfile) -> Layer:
    """Layer derived from the detected project.

    A generic project has no known test framework and nothing to publish.
    """
    if profile.is_generic:
        return {
            "testing": {"enabled": False, "auto_detect": False},
            "release": {"auto_publish": False},
        }
    return {}


def environment_layer() -> Layer:
    """Read AUTOKIT_* environment variables into a layer.

    Raises:
        ConfigParseError: If an environment value cannot be decoded
    """
    try:
        return EnvironmentOverrides().as_layer()
    except (ValidationError, ValueError) as e:
        raise ConfigParseError(
            "Invalid AUTOKIT_* environment variable",
            details=str(e),
            fix_hint="Use AUTOKIT_<SECTION>__<KEY>=value, e.g. AUTOKIT_TESTING__STRICT_MODE=true",
        ) from e


def validate_layer(base: Mapping[str, Any], layer: Mapping[str, Any], source: str) -> Layer:
    """Check that a layer produces a valid config on top of ``base``.

    Args:
        base: Already accepted lower layers, merged
        layer: Candidate layer
        source: Layer name for error messages

    Returns:
        The merge of base and layer

    Raises:
        ConfigParseError: If the layer is not a mapping or fails validation
    """
    if not isinstance(layer, Mapping):
        raise ConfigParseError(
            f"Configuration from {source} must be a mapping",
            details=f"Got {type(layer).__name__}",
        )
    merged = merge_layers(base, layer)
    try:
        AutomationConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigParseError(
            f"Invalid configuration in {source}",
            details=str(e),
            fix_hint="Check the configuration values match expected types",
        ) from e
    return merged


def cli_layer(**flags: Any) -> Layer:
    """Build the CLI layer from ``section__key=value`` keyword flags.

    ``None`` values mean "flag not given" and are dropped.

    Examples:
        >>> cli_layer(testing__strict_mode=True, testing__enabled=None)
        {'testing': {'strict_mode': True}}
    """
    layer: Layer = {}
    for name, value in flags.items():
        if value is None:
            continue
        section, _, key = name.partition("__")
        layer.setdefault(section, {})[key] = value
    return layer
