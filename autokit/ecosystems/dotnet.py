"""C#/.NET ecosystem adapter."""

import re
from pathlib import Path

from autokit.ecosystems.base import Ecosystem, EcosystemRegistry, FrameworkProbe
from autokit.exceptions import EcosystemError

_VERSION_ELEMENT = re.compile(r"<Version>([^<]+)</Version>")


@EcosystemRegistry.register
class DotNetEcosystem(Ecosystem):
    """C# ecosystem (dotnet CLI). Priority 70.

    The version is the <Version> property of the first project file.
    """

    name = "csharp"
    display_name = "C#"
    priority = 70
    config_files = ["*.csproj", "*.sln", "*.fsproj"]
    lock_files = ["packages.lock.json"]
    build_tool = "dotnet"
    default_package_manager = "nuget"
    test_frameworks = [
        FrameworkProbe(
            framework_id="dotnet-test",
            run_command=("dotnet", "test"),
            coverage_command=("dotnet", "test", "--collect:XPlat Code Coverage"),
            markers=("*.Tests/*.csproj", "tests/**/*.csproj", "test/**/*.csproj"),
        ),
    ]

    def _project_file(self) -> Path:
        projects = sorted(self.project_root.glob("*.csproj"))
        if not projects:
            raise EcosystemError(
                "No .csproj file at the project root",
                fix_hint="Run 'dotnet new classlib' or move the project file to the root",
            )
        return projects[0]

    def get_version(self) -> str:
        project = self._project_file()
        match = _VERSION_ELEMENT.search(self._read_text(project.name))
        if not match:
            raise EcosystemError(
                f"No <Version> property in {project.name}",
                fix_hint="Add <Version>1.0.0</Version> to a PropertyGroup",
            )
        return match.group(1).strip()

    def set_version(self, version: str) -> list[Path]:
        project = self._project_file()
        content = self._read_text(project.name)
        updated, count = _VERSION_ELEMENT.subn(f"<Version>{version}</Version>", content, count=1)
        if not count:
            raise EcosystemError(f"No <Version> property in {project.name}")
        return [self._write_text(project.name, updated)]

    def lint_commands(self) -> list[list[str]]:
        return [["dotnet", "format", "--verify-no-changes"]]
