"""PHP ecosystem adapter (composer)."""

import json
from pathlib import Path

from autokit.ecosystems.base import Ecosystem, EcosystemRegistry, FrameworkProbe
from autokit.exceptions import EcosystemError


@EcosystemRegistry.register
class PHPEcosystem(Ecosystem):
    """PHP ecosystem. Priority 50.

    The version lives in composer.json's optional "version" field.
    """

    name = "php"
    display_name = "PHP"
    priority = 50
    config_files = ["composer.json"]
    lock_files = ["composer.lock"]
    build_tool = "composer"
    default_package_manager = "composer"
    test_frameworks = [
        FrameworkProbe(
            framework_id="phpunit",
            run_command=("vendor/bin/phpunit",),
            coverage_command=("vendor/bin/phpunit", "--coverage-text"),
            markers=("phpunit.xml", "phpunit.xml.dist"),
            fragments=(("composer.json", "phpunit/phpunit"),),
        ),
        FrameworkProbe(
            framework_id="pest",
            run_command=("vendor/bin/pest",),
            coverage_command=("vendor/bin/pest", "--coverage"),
            markers=("tests/Pest.php",),
            fragments=(("composer.json", "pestphp/pest"),),
        ),
    ]

    def _read_composer_json(self) -> dict:
        try:
            data = json.loads(self._read_text("composer.json"))
        except json.JSONDecodeError as e:
            raise EcosystemError(
                "Invalid JSON in composer.json",
                details=str(e),
                fix_hint="Fix JSON syntax errors in composer.json",
            ) from e
        if not isinstance(data, dict):
            raise EcosystemError("composer.json must contain a JSON object")
        return data

    def get_version(self) -> str:
        version = self._read_composer_json().get("version")
        if not isinstance(version, str) or not version:
            raise EcosystemError(
                "No version field in composer.json",
                fix_hint='Add "version": "1.0.0" to composer.json',
            )
        return version

    def set_version(self, version: str) -> list[Path]:
        data = self._read_composer_json()
        data["version"] = version
        content = json.dumps(data, indent=4, ensure_ascii=False) + "\n"
        return [self._write_text("composer.json", content)]

    def lint_commands(self) -> list[list[str]]:
        return [["composer", "validate", "--no-check-publish"]]
