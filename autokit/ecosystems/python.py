"""Python ecosystem adapter.

Supports pip, uv, poetry, pdm and pipenv with lock-file based detection.
"""

import re
import tomllib
from pathlib import Path
from typing import Any

from autokit.ecosystems.base import Ecosystem, EcosystemRegistry, FrameworkProbe
from autokit.exceptions import EcosystemError

# version = "x.y.z" inside a given TOML table, up to the next table header
_TABLE_VERSION = r'(\[{table}\][^\[]*?\bversion\s*=\s*)["\']([^"\']*)["\']'
_SETUP_PY_VERSION = re.compile(r'(\bversion\s*=\s*)["\']([^"\']+)["\']')


@EcosystemRegistry.register
class PythonEcosystem(Ecosystem):
    """Python ecosystem with multi-package-manager support.

    Priority 20. Package manager detection priority:
    1. poetry.lock -> poetry
    2. uv.lock -> uv
    3. pdm.lock -> pdm
    4. Pipfile.lock -> pipenv
    5. otherwise pip
    """

    name = "python"
    display_name = "Python"
    priority = 20
    config_files = ["pyproject.toml", "setup.py", "setup.cfg", "requirements.txt", "Pipfile"]
    lock_files = ["poetry.lock", "uv.lock", "pdm.lock", "Pipfile.lock"]
    package_managers = {
        "poetry.lock": "poetry",
        "uv.lock": "uv",
        "pdm.lock": "pdm",
        "Pipfile.lock": "pipenv",
    }
    default_package_manager = "pip"
    test_frameworks = [
        FrameworkProbe(
            framework_id="pytest",
            run_command=("python", "-m", "pytest"),
            coverage_command=("python", "-m", "pytest", "--cov", "--cov-report=term"),
            markers=("pytest.ini", "conftest.py", "tests/conftest.py"),
            fragments=(
                ("pyproject.toml", "[tool.pytest"),
                ("setup.cfg", "[tool:pytest]"),
                ("tox.ini", "[pytest]"),
                ("requirements.txt", "pytest"),
                ("requirements-dev.txt", "pytest"),
            ),
        ),
        FrameworkProbe(
            framework_id="unittest",
            run_command=("python", "-m", "unittest", "discover"),
            coverage_command=(
                "python", "-m", "coverage", "run", "-m", "unittest", "discover",
            ),
            markers=("test_*.py", "tests/test_*.py", "tests/__init__.py"),
        ),
    ]

    def _read_pyproject(self) -> dict[str, Any]:
        """Read and parse pyproject.toml.

        Returns:
            Parsed TOML data as dictionary

        Raises:
            EcosystemError: If file not found or invalid TOML
        """
        content = self._read_text("pyproject.toml")
        try:
            return tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise EcosystemError(
                "Invalid TOML in pyproject.toml",
                details=str(e),
                fix_hint="Fix TOML syntax errors in pyproject.toml",
            ) from e

    def get_version(self) -> str:
        """Get current version from pyproject.toml or setup.py.

        Checks for version in this order:
        1. [project].version (PEP 621 standard)
        2. [tool.poetry].version (Poetry format)
        3. version= keyword in setup.py

        Returns:
            Version string (e.g., "1.0.0")

        Raises:
            EcosystemError: If version cannot be determined
        """
        if (self.project_root / "pyproject.toml").exists():
            data = self._read_pyproject()

            project = data.get("project")
            if isinstance(project, dict):
                version = project.get("version")
                if isinstance(version, str) and version:
                    return version
                dynamic = project.get("dynamic", [])
                if isinstance(dynamic, list) and "version" in dynamic:
                    raise EcosystemError(
                        "Version is marked as dynamic in pyproject.toml",
                        details="[project].dynamic contains 'version'",
                        fix_hint="Use a version management tool like setuptools-scm or hatch-vcs",
                    )

            poetry = data.get("tool", {}).get("poetry")
            if isinstance(poetry, dict):
                version = poetry.get("version")
                if isinstance(version, str) and version:
                    return version

        if (self.project_root / "setup.py").exists():
            match = _SETUP_PY_VERSION.search(self._read_text("setup.py"))
            if match:
                return match.group(2)

        raise EcosystemError(
            "No version found in Python project metadata",
            details="Checked [project].version, [tool.poetry].version and setup.py",
            fix_hint='Add version = "1.0.0" to the [project] section',
        )

    def set_version(self, version: str) -> list[Path]:
        """Set version in pyproject.toml (or setup.py).

        Preserves file formatting by regex replacement inside the table
        that holds the version.

        Raises:
            EcosystemError: If no version field can be updated
        """
        if (self.project_root / "pyproject.toml").exists():
            content = self._read_text("pyproject.toml")
            for table in (r"project", r"tool\.poetry"):
                pattern = _TABLE_VERSION.format(table=table)
                new_content, count = re.subn(
                    pattern, rf'\g<1>"{version}"', content, count=1, flags=re.DOTALL
                )
                if count:
                    return [self._write_text("pyproject.toml", new_content)]

        if (self.project_root / "setup.py").exists():
            content = self._read_text("setup.py")
            new_content, count = _SETUP_PY_VERSION.subn(
                rf'\g<1>"{version}"', content, count=1
            )
            if count:
                return [self._write_text("setup.py", new_content)]

        raise EcosystemError(
            "Could not find version field to update",
            details="No version field found in [project], [tool.poetry] or setup.py",
            fix_hint="Add a version field before releasing",
        )

    def lint_commands(self) -> list[list[str]]:
        return [["flake8", "."], ["black", "--check", "."], ["isort", "--check-only", "."]]
