"""Unit tests for PythonEcosystem class.

Tests cover:
- Project detection via pyproject.toml, setup.py or requirements.txt
- Version reading from pyproject.toml (PEP 621 and Poetry formats)
- Version writing that keeps dependency versions intact
- Package manager detection (pip, uv, poetry, pdm, pipenv)
- Test framework probes
"""

from pathlib import Path

import pytest

from autokit.ecosystems.python import PythonEcosystem
from autokit.exceptions import EcosystemError


class TestPythonEcosystemDetect:
    """Tests for PythonEcosystem.detect() method."""

    def test_detect_returns_true_when_pyproject_toml_exists(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "test"\nversion = "1.0.0"\n')

        assert PythonEcosystem(tmp_path).detect() is True

    def test_detect_returns_true_for_requirements_only(self, tmp_path: Path) -> None:
        """A bare requirements.txt is enough evidence."""
        (tmp_path / "requirements.txt").write_text("requests\n")

        assert PythonEcosystem(tmp_path).detect() is True

    def test_detect_returns_false_when_no_config_files(self, tmp_path: Path) -> None:
        assert PythonEcosystem(tmp_path).detect() is False


class TestPythonEcosystemGetVersion:
    """Tests for PythonEcosystem.get_version() method."""

    def test_get_version_reads_pep621_format(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[project]\nname = "my-package"\nversion = "3.2.1"\n'
        )

        assert PythonEcosystem(tmp_path).get_version() == "3.2.1"

    def test_get_version_reads_poetry_format(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.poetry]\nname = "my-package"\nversion = "2.5.0"\n'
        )

        assert PythonEcosystem(tmp_path).get_version() == "2.5.0"

    def test_get_version_reads_setup_py(self, tmp_path: Path) -> None:
        (tmp_path / "setup.py").write_text(
            'from setuptools import setup\nsetup(name="legacy", version="0.9.1")\n'
        )

        assert PythonEcosystem(tmp_path).get_version() == "0.9.1"

    def test_get_version_dynamic_raises(self, tmp_path: Path) -> None:
        """Dynamic versions cannot be read from the manifest."""
        (tmp_path / "pyproject.toml").write_text(
            '[project]\nname = "dyn"\ndynamic = ["version"]\n'
        )

        with pytest.raises(EcosystemError, match="dynamic"):
            PythonEcosystem(tmp_path).get_version()

    def test_get_version_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text("[project\nname=")

        with pytest.raises(EcosystemError, match="Invalid TOML"):
            PythonEcosystem(tmp_path).get_version()


class TestPythonEcosystemSetVersion:
    def test_set_version_updates_project_table_only(self, tmp_path: Path) -> None:
        """Dependency tables keep their own version keys."""
        content = (
            '[project]\nname = "pkg"\nversion = "1.0.0"\n\n'
            '[tool.other]\nversion = "9.9.9"\n'
        )
        (tmp_path / "pyproject.toml").write_text(content)
        ecosystem = PythonEcosystem(tmp_path)

        written = ecosystem.set_version("1.1.0")

        assert written == [tmp_path / "pyproject.toml"]
        updated = (tmp_path / "pyproject.toml").read_text()
        assert 'version = "1.1.0"' in updated
        assert 'version = "9.9.9"' in updated
        assert ecosystem.get_version() == "1.1.0"

    def test_update_versions_includes_version_file(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "pkg"\nversion = "1.0.0"\n')
        (tmp_path / "VERSION").write_text("1.0.0\n")

        written = PythonEcosystem(tmp_path).update_versions("2.0.0")

        assert written == [tmp_path / "pyproject.toml", tmp_path / "VERSION"]
        assert (tmp_path / "VERSION").read_text() == "2.0.0\n"

    def test_set_version_without_field(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "pkg"\n')

        with pytest.raises(EcosystemError, match="Could not find version field"):
            PythonEcosystem(tmp_path).set_version("1.0.0")


class TestPythonEcosystemPackageManager:
    @pytest.mark.parametrize(
        ("lock_file", "manager"),
        [
            ("poetry.lock", "poetry"),
            ("uv.lock", "uv"),
            ("pdm.lock", "pdm"),
            ("Pipfile.lock", "pipenv"),
        ],
    )
    def test_lock_file_selects_manager(self, tmp_path: Path, lock_file: str, manager: str) -> None:
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "pkg"\n')
        (tmp_path / lock_file).write_text("")

        assert PythonEcosystem(tmp_path).get_package_manager() == manager

    def test_default_pip(self, tmp_path: Path) -> None:
        assert PythonEcosystem(tmp_path).get_package_manager() == "pip"


class TestPythonEcosystemTestCandidates:
    def test_pytest_from_pyproject_section(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[project]\nname = "pkg"\n\n[tool.pytest.ini_options]\naddopts = "-q"\n'
        )

        candidates = PythonEcosystem(tmp_path).test_candidates()

        assert [c.framework_id for c in candidates] == ["pytest"]
        assert candidates[0].coverage_command is not None

    def test_pytest_before_unittest(self, tmp_path: Path) -> None:
        """Probe order is fixed: pytest wins when both match."""
        (tmp_path / "tests").mkdir()
        (tmp_path / "tests" / "conftest.py").write_text("")
        (tmp_path / "tests" / "test_app.py").write_text("")

        ids = [c.framework_id for c in PythonEcosystem(tmp_path).test_candidates()]

        assert ids == ["pytest", "unittest"]

    def test_no_markers(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "pkg"\n')

        assert PythonEcosystem(tmp_path).test_candidates() == []
