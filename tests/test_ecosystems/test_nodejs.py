"""Unit tests for the JavaScript ecosystem adapter.

Tests cover:
- Detection and manifest lookup
- Reading and writing package.json versions
- Package manager resolution (packageManager field, lock files)
- Test candidates and lint scripts
"""

import json
from pathlib import Path

import pytest

from autokit.ecosystems.nodejs import NodeJSEcosystem
from autokit.exceptions import EcosystemError


def write_package(root: Path, **fields) -> Path:
    data = {"name": "widgets", "version": "1.0.0", **fields}
    path = root / "package.json"
    path.write_text(json.dumps(data, indent=2))
    return path


class TestDetectAndVersion:
    def test_detects_package_json(self, tmp_path: Path) -> None:
        write_package(tmp_path)

        ecosystem = NodeJSEcosystem(tmp_path)

        assert ecosystem.detect() is True
        assert ecosystem.manifest_path() == tmp_path / "package.json"

    def test_no_manifest(self, tmp_path: Path) -> None:
        ecosystem = NodeJSEcosystem(tmp_path)

        assert ecosystem.detect() is False
        with pytest.raises(EcosystemError, match="package.json not found"):
            ecosystem.get_version()

    def test_reads_version(self, tmp_path: Path) -> None:
        write_package(tmp_path, version="2.3.4")

        assert NodeJSEcosystem(tmp_path).get_version() == "2.3.4"

    def test_missing_version_field(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text('{"name": "widgets", "private": true}')

        with pytest.raises(EcosystemError, match="No version field") as exc_info:
            NodeJSEcosystem(tmp_path).get_version()

        assert exc_info.value.fix_hint is not None

    def test_invalid_json(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text("{not json")

        with pytest.raises(EcosystemError, match="Invalid JSON"):
            NodeJSEcosystem(tmp_path).get_version()

    def test_set_version_keeps_other_fields(self, tmp_path: Path) -> None:
        path = write_package(tmp_path, dependencies={"lodash": "^4.17.21"}, license="MIT")

        written = NodeJSEcosystem(tmp_path).set_version("1.1.0")

        data = json.loads(path.read_text())
        assert written == [path]
        assert data["version"] == "1.1.0"
        assert data["dependencies"] == {"lodash": "^4.17.21"}
        assert path.read_text().endswith("}\n")

    def test_update_versions_syncs_version_file(self, tmp_path: Path) -> None:
        write_package(tmp_path)
        (tmp_path / "VERSION").write_text("1.0.0\n")

        written = NodeJSEcosystem(tmp_path).update_versions("1.0.1")

        assert [p.name for p in written] == ["package.json", "VERSION"]
        assert (tmp_path / "VERSION").read_text() == "1.0.1\n"


class TestPackageManager:
    @pytest.mark.parametrize(
        "lock_file, expected",
        [
            ("package-lock.json", "npm"),
            ("pnpm-lock.yaml", "pnpm"),
            ("yarn.lock", "yarn"),
            ("bun.lockb", "bun"),
        ],
    )
    def test_from_lock_file(self, tmp_path: Path, lock_file: str, expected: str) -> None:
        write_package(tmp_path)
        (tmp_path / lock_file).write_text("")

        ecosystem = NodeJSEcosystem(tmp_path)

        assert ecosystem.get_package_manager() == expected
        assert ecosystem.lock_file_path() == tmp_path / lock_file

    def test_package_manager_field_wins(self, tmp_path: Path) -> None:
        write_package(tmp_path, packageManager="pnpm@8.6.0")
        (tmp_path / "yarn.lock").write_text("")

        assert NodeJSEcosystem(tmp_path).get_package_manager() == "pnpm"

    def test_pnpm_lock_before_npm_lock(self, tmp_path: Path) -> None:
        write_package(tmp_path)
        (tmp_path / "pnpm-lock.yaml").write_text("lockfileVersion: 6.0")
        (tmp_path / "package-lock.json").write_text("{}")

        assert NodeJSEcosystem(tmp_path).get_package_manager() == "pnpm"

    def test_defaults_to_npm(self, tmp_path: Path) -> None:
        write_package(tmp_path, packageManager="deno@1.0.0")

        ecosystem = NodeJSEcosystem(tmp_path)

        assert ecosystem.get_package_manager() == "npm"
        assert ecosystem.build_tool_hint() == "npm"


class TestChecks:
    def test_jest_dependency_then_test_script(self, tmp_path: Path) -> None:
        """Framework probes come first; the test script is the last resort."""
        write_package(tmp_path, scripts={"test": "jest"}, devDependencies={"jest": "^29.0.0"})

        candidates = NodeJSEcosystem(tmp_path).test_candidates()

        assert [c.framework_id for c in candidates] == ["jest", "npm-script"]
        assert candidates[0].coverage_command == ("npx", "jest", "--coverage")
        assert candidates[1].run_command == ("npm", "test")

    def test_vitest_config_file(self, tmp_path: Path) -> None:
        write_package(tmp_path)
        (tmp_path / "vitest.config.ts").write_text("export default {}\n")

        candidates = NodeJSEcosystem(tmp_path).test_candidates()

        assert [c.framework_id for c in candidates] == ["vitest"]

    def test_no_test_script_no_candidates(self, tmp_path: Path) -> None:
        write_package(tmp_path)

        assert NodeJSEcosystem(tmp_path).test_candidates() == []

    def test_lint_commands_use_existing_scripts(self, tmp_path: Path) -> None:
        write_package(tmp_path, scripts={"lint": "eslint .", "format:check": "prettier --check ."})
        (tmp_path / "yarn.lock").write_text("")

        commands = NodeJSEcosystem(tmp_path).lint_commands()

        assert commands == [["yarn", "run", "lint"], ["yarn", "run", "format:check"]]

    def test_no_lint_scripts(self, tmp_path: Path) -> None:
        write_package(tmp_path, scripts={"build": "tsc"})

        assert NodeJSEcosystem(tmp_path).lint_commands() == []
