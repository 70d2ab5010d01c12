"""Default override file generation (``autokit init-config``).

Writes a commented .automation-config.yml holding the effective defaults
for the detected project, ready to be edited.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from autokit.config.layers import default_layer, merge_layers, profile_layer
from autokit.config.loader import OVERRIDE_FILE_NAMES
from autokit.detection import ProjectProfile
from autokit.exceptions import ConfigParseError

SECTION_TITLES = [
    ("testing", "Test Execution"),
    ("release", "Release Steps"),
    ("commits", "Commit Message Policy"),
    ("versioning", "Version Management"),
    ("git", "Git & Repository Configuration"),
    ("timeouts", "Timeouts (seconds)"),
    ("lock", "Repository Lock"),
]


def generate_default_config(profile: ProjectProfile) -> dict[str, Any]:
    """Generate the default configuration for a detected project.

    Args:
        profile: Detected project profile

    Returns:
        Configuration dictionary matching the AutomationConfig schema
    """
    return merge_layers(default_layer(), profile_layer(profile))


def generate_config_header(profile: ProjectProfile) -> str:
    """Generate the YAML header comment."""
    now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
    tool = f" ({profile.build_tool_hint})" if profile.build_tool_hint else ""
    return f"""# ============================================================================
# Automation Configuration - {OVERRIDE_FILE_NAMES[0]}
# ============================================================================
# Auto-generated on {now}
# Ecosystem: {profile.ecosystem_kind}{tool}
#
# Values here override the built-in defaults. Environment variables
# (AUTOKIT_<SECTION>__<KEY>) and command line flags override this file.
#
# To regenerate:
#   autokit init-config --force
# ============================================================================

"""


def write_default_config(output_path: Path, profile: ProjectProfile) -> None:
    """Generate and write the default override file.

    Args:
        output_path: Path to write configuration
        profile: Detected project profile

    Raises:
        ConfigParseError: If file cannot be written
    """
    config = generate_default_config(profile)
    header = generate_config_header(profile)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            f.write(header)

            for section_key, section_title in SECTION_TITLES:
                if section_key not in config:
                    continue

                f.write(f"# {'-' * 76}\n")
                f.write(f"# {section_title}\n")
                f.write(f"# {'-' * 76}\n")

                yaml_str = yaml.safe_dump(
                    {section_key: config[section_key]},
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True,
                )
                f.write(yaml_str)
                f.write("\n")

    except PermissionError:
        raise ConfigParseError(
            f"Permission denied writing config to {output_path}",
            fix_hint="Check file permissions or use a different location",
        ) from None
    except OSError as e:
        raise ConfigParseError(
            f"Failed to write config to {output_path}",
            details=str(e),
            fix_hint="Check disk space and path validity",
        ) from e
