"""Override file loading utilities.

Supports loading the project override file from YAML or TOML with:
- Automatic format detection
- Error reporting with file location
"""

import tomllib
from pathlib import Path
from typing import Any

import yaml

from autokit.exceptions import ConfigParseError

# Searched in order; the first existing file is the override layer
OVERRIDE_FILE_NAMES = (
    ".automation-config.yml",
    ".automation-config.yaml",
    ".automation-config.toml",
)


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML configuration file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed YAML as dictionary (empty for an empty file)

    Raises:
        ConfigParseError: If file cannot be read or parsed
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigParseError(
            f"Configuration file not found: {path}",
            fix_hint="Create the file or use 'autokit init-config' to generate one",
        ) from None
    except yaml.YAMLError as e:
        raise ConfigParseError(
            f"Invalid YAML in {path}",
            details=str(e),
            fix_hint="Check YAML syntax at the indicated line",
        ) from e
    except OSError as e:
        raise ConfigParseError(f"Cannot read {path}", details=str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigParseError(
            f"Top level of {path} must be a mapping",
            details=f"Got {type(data).__name__}",
        )
    return data


def load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML configuration file.

    Args:
        path: Path to the TOML file

    Returns:
        Parsed TOML as dictionary

    Raises:
        ConfigParseError: If file cannot be read or parsed
    """
    try:
        with open(path, "rb") as f:
            data: dict[str, Any] = tomllib.load(f)
            return data
    except FileNotFoundError:
        raise ConfigParseError(
            f"Configuration file not found: {path}",
            fix_hint="Create the file or use 'autokit init-config' to generate one",
        ) from None
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(
            f"Invalid TOML in {path}",
            details=str(e),
            fix_hint="Check TOML syntax at the indicated line",
        ) from e
    except OSError as e:
        raise ConfigParseError(f"Cannot read {path}", details=str(e)) from e


def find_override_file(project_root: Path) -> Path | None:
    """Locate the project override file, if any."""
    for name in OVERRIDE_FILE_NAMES:
        candidate = project_root / name
        if candidate.is_file():
            return candidate
    return None


def load_override_file(path: Path) -> dict[str, Any]:
    """Load an override file based on its extension.

    Raises:
        ConfigParseError: If the format is unsupported or the file is invalid
    """
    if path.suffix in (".yml", ".yaml"):
        return load_yaml(path)
    if path.suffix == ".toml":
        return load_toml(path)
    raise ConfigParseError(
        f"Unsupported config format: {path.suffix}",
        fix_hint="Use .yml, .yaml, or .toml extension",
    )
