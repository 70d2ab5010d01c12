"""JavaScript/Node.js ecosystem adapter.

Supports npm, pnpm, yarn, and bun package managers with automatic detection.
"""

import json
from pathlib import Path
from typing import Any

from autokit.ecosystems.base import Ecosystem, EcosystemRegistry, FrameworkProbe, TestCandidate
from autokit.exceptions import EcosystemError


@EcosystemRegistry.register
class NodeJSEcosystem(Ecosystem):
    """JavaScript ecosystem with multi-package-manager support.

    Priority 10: first in the detection order, so a Python project that
    also ships a package.json for its tooling is reported as javascript
    (and flagged ambiguous).

    Package manager detection priority:
    1. packageManager field in package.json
    2. Lock file presence (pnpm-lock.yaml, yarn.lock, bun.lockb, package-lock.json)
    3. Default to npm if no indicators found
    """

    name = "javascript"
    display_name = "JavaScript"
    priority = 10
    config_files = ["package.json"]
    lock_files = ["package-lock.json", "yarn.lock", "pnpm-lock.yaml", "bun.lockb"]
    package_managers = {
        "pnpm-lock.yaml": "pnpm",
        "yarn.lock": "yarn",
        "bun.lockb": "bun",
        "package-lock.json": "npm",
    }
    default_package_manager = "npm"
    test_frameworks = [
        FrameworkProbe(
            framework_id="jest",
            run_command=("npx", "jest"),
            coverage_command=("npx", "jest", "--coverage"),
            markers=("jest.config.*",),
            fragments=(("package.json", '"jest"'),),
        ),
        FrameworkProbe(
            framework_id="vitest",
            run_command=("npx", "vitest", "run"),
            coverage_command=("npx", "vitest", "run", "--coverage"),
            markers=("vitest.config.*",),
            fragments=(("package.json", '"vitest"'),),
        ),
        FrameworkProbe(
            framework_id="mocha",
            run_command=("npx", "mocha"),
            coverage_command=("npx", "nyc", "--reporter=text-summary", "mocha"),
            markers=(".mocharc*",),
            fragments=(("package.json", '"mocha"'),),
        ),
    ]

    def _read_package_json(self) -> dict[str, Any]:
        """Read and parse package.json.

        Raises:
            EcosystemError: If file not found or invalid JSON
        """
        content = self._read_text("package.json")
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise EcosystemError(
                "Invalid JSON in package.json",
                details=str(e),
                fix_hint="Fix JSON syntax errors in package.json",
            ) from e
        if not isinstance(data, dict):
            raise EcosystemError("package.json must contain a JSON object")
        return data

    def _scripts(self) -> dict[str, str]:
        try:
            scripts = self._read_package_json().get("scripts", {})
        except EcosystemError:
            return {}
        return scripts if isinstance(scripts, dict) else {}

    def get_version(self) -> str:
        """Get current version from package.json.

        Returns:
            Version string (e.g., "1.0.0")

        Raises:
            EcosystemError: If package.json not found or version missing
        """
        version = self._read_package_json().get("version")
        if not isinstance(version, str) or not version:
            raise EcosystemError(
                "No version field in package.json",
                fix_hint='Add "version": "1.0.0" to package.json',
            )
        return version

    def set_version(self, version: str) -> list[Path]:
        """Set version in package.json.

        Uses 2-space indentation and a trailing newline (Node.js convention).
        """
        data = self._read_package_json()
        data["version"] = version
        content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
        return [self._write_text("package.json", content)]

    def get_package_manager(self) -> str:
        """Detect which package manager is used.

        Returns:
            Package manager name: "npm", "pnpm", "yarn", or "bun"
        """
        try:
            pm_field = self._read_package_json().get("packageManager", "")
        except EcosystemError:
            pm_field = ""
        if isinstance(pm_field, str) and pm_field:
            # "pnpm@8.0.0" -> "pnpm"
            manager = pm_field.split("@")[0]
            if manager in ("npm", "pnpm", "yarn", "bun"):
                return manager
        return super().get_package_manager()

    def test_candidates(self) -> list[TestCandidate]:
        candidates = super().test_candidates()
        if "test" in self._scripts():
            manager = self.get_package_manager()
            candidates.append(
                FrameworkProbe(
                    framework_id="npm-script",
                    run_command=(manager, "test"),
                ).to_candidate()
            )
        return candidates

    def lint_commands(self) -> list[list[str]]:
        manager = self.get_package_manager()
        scripts = self._scripts()
        return [[manager, "run", name] for name in ("lint", "format:check") if name in scripts]
