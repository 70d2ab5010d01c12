"""Unit tests for override file loading.

Tests cover:
- YAML and TOML parsing
- Error reporting for missing, invalid and non-mapping files
- Override file discovery order
"""

from pathlib import Path

import pytest

from autokit.config.loader import (
    OVERRIDE_FILE_NAMES,
    find_override_file,
    load_override_file,
    load_toml,
    load_yaml,
)
from autokit.exceptions import ConfigParseError


class TestLoadYaml:
    def test_valid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yml"
        path.write_text("testing:\n  strict_mode: true\n")

        assert load_yaml(path) == {"testing": {"strict_mode": True}}

    def test_empty_file_is_empty_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yml"
        path.write_text("")

        assert load_yaml(path) == {}

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Malformed YAML raises ConfigParseError with a fix hint."""
        path = tmp_path / "config.yml"
        path.write_text("testing: [unclosed\n")

        with pytest.raises(ConfigParseError) as exc_info:
            load_yaml(path)

        assert "Invalid YAML" in exc_info.value.message
        assert exc_info.value.fix_hint is not None

    def test_top_level_list_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yml"
        path.write_text("- one\n- two\n")

        with pytest.raises(ConfigParseError, match="must be a mapping"):
            load_yaml(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigParseError, match="not found"):
            load_yaml(tmp_path / "absent.yml")


class TestLoadToml:
    def test_valid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[git]\nremote = "upstream"\n')

        assert load_toml(path) == {"git": {"remote": "upstream"}}

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[git\nremote = \n")

        with pytest.raises(ConfigParseError, match="Invalid TOML"):
            load_toml(path)


class TestOverrideFile:
    def test_no_override_file(self, tmp_path: Path) -> None:
        assert find_override_file(tmp_path) is None

    def test_yml_preferred_over_toml(self, tmp_path: Path) -> None:
        """Discovery follows OVERRIDE_FILE_NAMES order."""
        (tmp_path / ".automation-config.toml").write_text("")
        (tmp_path / ".automation-config.yml").write_text("")

        found = find_override_file(tmp_path)

        assert found is not None
        assert found.name == OVERRIDE_FILE_NAMES[0]

    def test_dispatch_by_extension(self, tmp_path: Path) -> None:
        path = tmp_path / ".automation-config.toml"
        path.write_text("[testing]\nenabled = false\n")

        assert load_override_file(path) == {"testing": {"enabled": False}}

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{}")

        with pytest.raises(ConfigParseError, match="Unsupported config format"):
            load_override_file(path)
