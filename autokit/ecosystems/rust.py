"""Rust ecosystem adapter (cargo)."""

import re
import tomllib
from pathlib import Path
from typing import Any

from autokit.ecosystems.base import Ecosystem, EcosystemRegistry, FrameworkProbe
from autokit.exceptions import EcosystemError


@EcosystemRegistry.register
class RustEcosystem(Ecosystem):
    """Rust ecosystem with cargo support. Priority 40."""

    name = "rust"
    display_name = "Rust"
    priority = 40
    config_files = ["Cargo.toml"]
    lock_files = ["Cargo.lock"]
    build_tool = "cargo"
    default_package_manager = "cargo"
    test_frameworks = [
        FrameworkProbe(
            framework_id="cargo-test",
            run_command=("cargo", "test"),
            coverage_command=("cargo", "tarpaulin", "--out", "Stdout"),
            markers=("Cargo.toml",),
        ),
    ]

    def _read_cargo_toml(self) -> dict[str, Any]:
        """Read and parse Cargo.toml.

        Raises:
            EcosystemError: If file not found or invalid TOML
        """
        content = self._read_text("Cargo.toml")
        try:
            return tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise EcosystemError(
                "Invalid TOML in Cargo.toml",
                details=str(e),
                fix_hint="Fix TOML syntax errors in Cargo.toml",
            ) from e

    def get_version(self) -> str:
        """Get current version from Cargo.toml [package].version.

        Raises:
            EcosystemError: If Cargo.toml not found or version missing
        """
        package = self._read_cargo_toml().get("package")
        if not isinstance(package, dict):
            raise EcosystemError(
                "No [package] section in Cargo.toml",
                fix_hint=(
                    "Add a [package] section with version field, "
                    "or this may be a workspace root"
                ),
            )

        version = package.get("version")
        if isinstance(version, dict) and version.get("workspace"):
            raise EcosystemError(
                "Version is inherited from workspace",
                details="This crate uses `version.workspace = true`",
                fix_hint="Set version in the workspace Cargo.toml instead",
            )
        if not isinstance(version, str) or not version:
            raise EcosystemError(
                "No version field in Cargo.toml [package] section",
                fix_hint='Add version = "0.1.0" to [package] section',
            )
        return version

    def set_version(self, version: str) -> list[Path]:
        """Set version in Cargo.toml [package].version.

        Only the [package] table is touched; dependency versions further
        down the file keep their values. Comments and formatting survive
        because the raw text is edited in place.
        """
        content = self._read_text("Cargo.toml")

        package_match = re.search(r"^\[package\]", content, flags=re.MULTILINE)
        if not package_match:
            raise EcosystemError(
                "No [package] section found in Cargo.toml",
                fix_hint="Add a [package] section with version field",
            )
        start = package_match.end()
        next_section = re.search(r"\n\[", content[start:])
        end = start + next_section.start() if next_section else len(content)

        section = content[start:end]
        new_section, count = re.subn(
            r'(^\s*version\s*=\s*)(["\'])[^"\']*\2',
            rf"\g<1>\g<2>{version}\g<2>",
            section,
            count=1,
            flags=re.MULTILINE,
        )
        if not count:
            raise EcosystemError(
                "No version field found in [package] section",
                fix_hint='Add version = "0.1.0" to [package] section',
            )
        return [self._write_text("Cargo.toml", content[:start] + new_section + content[end:])]

    def lint_commands(self) -> list[list[str]]:
        return [
            ["cargo", "fmt", "--", "--check"],
            ["cargo", "clippy", "--", "-D", "warnings"],
        ]
