"""Java ecosystem adapter (Maven and Gradle)."""

import re
from pathlib import Path

from autokit.ecosystems.base import Ecosystem, EcosystemRegistry, FrameworkProbe
from autokit.exceptions import EcosystemError

# First <version> after </parent> (or the first one when there is no parent)
_POM_VERSION = re.compile(r"<version>([^<]+)</version>")
_GRADLE_VERSION = re.compile(r"""^(\s*version\s*=?\s*)(["'])([^"']+)\2""", re.MULTILINE)


@EcosystemRegistry.register
class JavaEcosystem(Ecosystem):
    """Java ecosystem. Priority 60.

    Maven wins over Gradle when both build files are present.
    """

    name = "java"
    display_name = "Java"
    priority = 60
    config_files = ["pom.xml", "build.gradle", "build.gradle.kts"]
    lock_files = ["gradle.lockfile"]
    package_managers = {"gradle.lockfile": "gradle"}
    test_frameworks = [
        FrameworkProbe(
            framework_id="maven",
            run_command=("mvn", "-B", "test"),
            coverage_command=("mvn", "-B", "verify", "jacoco:report"),
            markers=("pom.xml",),
        ),
        FrameworkProbe(
            framework_id="gradle",
            run_command=("gradle", "test"),
            coverage_command=("gradle", "test", "jacocoTestReport"),
            markers=("build.gradle", "build.gradle.kts"),
        ),
    ]

    def _is_maven(self) -> bool:
        return (self.project_root / "pom.xml").exists()

    def get_package_manager(self) -> str:
        return "maven" if self._is_maven() else "gradle"

    def build_tool_hint(self) -> str:
        return self.get_package_manager()

    def _pom_version_span(self, content: str) -> re.Match[str] | None:
        parent_end = content.find("</parent>")
        return _POM_VERSION.search(content, parent_end + 1 if parent_end >= 0 else 0)

    def get_version(self) -> str:
        if self._is_maven():
            match = self._pom_version_span(self._read_text("pom.xml"))
            if match:
                return match.group(1).strip()
            raise EcosystemError(
                "No <version> element in pom.xml",
                fix_hint="Add <version>1.0.0</version> to the project element",
            )

        for file_name in ("build.gradle", "build.gradle.kts"):
            if (self.project_root / file_name).exists():
                match = _GRADLE_VERSION.search(self._read_text(file_name))
                if match:
                    return match.group(3)
        raise EcosystemError(
            "No version declared in the Gradle build file",
            fix_hint="Add version = '1.0.0' to build.gradle",
        )

    def set_version(self, version: str) -> list[Path]:
        if self._is_maven():
            content = self._read_text("pom.xml")
            match = self._pom_version_span(content)
            if not match:
                raise EcosystemError("No <version> element in pom.xml")
            updated = content[: match.start(1)] + version + content[match.end(1) :]
            return [self._write_text("pom.xml", updated)]

        for file_name in ("build.gradle", "build.gradle.kts"):
            if (self.project_root / file_name).exists():
                content = self._read_text(file_name)
                updated, count = _GRADLE_VERSION.subn(
                    rf"\g<1>\g<2>{version}\g<2>", content, count=1
                )
                if count:
                    return [self._write_text(file_name, updated)]
        raise EcosystemError("No version declared in the Gradle build file")
