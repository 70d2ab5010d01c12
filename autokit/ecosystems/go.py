"""Go ecosystem adapter.

Go modules use git tags for versioning (e.g., v1.0.0); go.mod carries no
version. A VERSION file can optionally store the current version.
"""

from pathlib import Path

from autokit.ecosystems.base import Ecosystem, EcosystemRegistry, FrameworkProbe
from autokit.exceptions import EcosystemError
from autokit.utils.version import is_valid_version


@EcosystemRegistry.register
class GoEcosystem(Ecosystem):
    """Go ecosystem with modules support. Priority 30."""

    name = "go"
    display_name = "Go"
    priority = 30
    config_files = ["go.mod"]
    lock_files = ["go.sum"]
    build_tool = "go"
    default_package_manager = "go"
    test_frameworks = [
        FrameworkProbe(
            framework_id="go-test",
            run_command=("go", "test", "./..."),
            coverage_command=("go", "test", "-cover", "./..."),
            markers=("*_test.go", "**/*_test.go"),
        ),
    ]

    def get_version(self) -> str:
        """Get current version from the VERSION file.

        Returns:
            Version string without the v prefix

        Raises:
            EcosystemError: If there is no VERSION file or it is malformed
        """
        content = self._read_text("VERSION").strip()
        version = content[1:] if content.startswith("v") else content
        if not is_valid_version(version):
            raise EcosystemError(
                f"Invalid version in VERSION file: {content}",
                fix_hint="Use a valid semantic version like 1.0.0",
            )
        return version

    def set_version(self, version: str) -> list[Path]:
        """Set version in the VERSION file.

        The release process creates the corresponding git tag, which is
        what the Go toolchain actually consumes.
        """
        return [self._write_text("VERSION", f"{version}\n")]

    def lint_commands(self) -> list[list[str]]:
        return [["gofmt", "-l", "."], ["go", "vet", "./..."]]
