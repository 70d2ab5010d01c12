"""PyPI publisher for Python package distribution.

Builds a wheel and sdist, then uploads them:
- build: uv build, poetry build, or python -m build
- upload: uv publish, or twine upload
"""

import tomllib
from pathlib import Path
from typing import Any, ClassVar

from autokit.publishers.base import (
    PublishContext,
    Publisher,
    PublisherRegistry,
    PublishResult,
    failure_details,
)


def get_pyproject_toml(project_root: Path) -> dict[str, Any] | None:
    """Parse pyproject.toml from project root.

    Returns:
        Parsed pyproject.toml dict, or None if not found or invalid
    """
    path = project_root / "pyproject.toml"
    if not path.exists():
        return None
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return None


def get_package_name(project_root: Path) -> str | None:
    """Get package name from pyproject.toml.

    Checks project.name (PEP 621) and then tool.poetry.name.
    """
    data = get_pyproject_toml(project_root)
    if not data:
        return None
    name = data.get("project", {}).get("name")
    if name:
        return str(name)
    poetry_name = data.get("tool", {}).get("poetry", {}).get("name")
    return str(poetry_name) if poetry_name else None


def build_commands(project_root: Path) -> list[list[str]]:
    """Build commands in order of preference."""
    commands = [["uv", "build"]]
    data = get_pyproject_toml(project_root) or {}
    if "poetry" in data.get("tool", {}):
        commands.append(["poetry", "build"])
    commands.append(["python", "-m", "build"])
    return commands


@PublisherRegistry.register
class PyPIPublisher(Publisher):
    """Publisher for PyPI."""

    name: ClassVar[str] = "pypi"
    display_name: ClassVar[str] = "PyPI"
    ecosystem: ClassVar[str] = "python"

    def should_publish(self, context: PublishContext) -> bool:
        return (context.project_root / "pyproject.toml").exists()

    def publish(self, context: PublishContext) -> PublishResult:
        package_name = get_package_name(context.project_root)
        if not package_name:
            return PublishResult.failed(
                message="Failed to read package name from pyproject.toml",
                manual_command="twine upload dist/*",
            )

        build_result = self._build_package(context)
        if build_result is not None:
            return build_result

        upload_result = self._upload_package(context, package_name)
        if upload_result is not None:
            return upload_result

        return PublishResult.success(
            message=f"Published {package_name}=={context.version} to PyPI",
            package_url=f"https://pypi.org/project/{package_name}/{context.version}/",
            version=context.version,
        )

    def _build_package(self, context: PublishContext) -> PublishResult | None:
        """Build wheel and sdist; returns a failure result or None."""
        dist_dir = context.project_root / "dist"
        if dist_dir.exists():
            for file in dist_dir.iterdir():
                if file.name.endswith((".whl", ".tar.gz")):
                    file.unlink()

        last = None
        for cmd in build_commands(context.project_root):
            last = context.run(cmd)
            if last.ok:
                return None
            if not last.not_found:
                break

        return PublishResult.failed(
            message="Package build failed",
            details=failure_details(last) if last else None,
            manual_command="python -m build",
        )

    def _upload_package(self, context: PublishContext, package_name: str) -> PublishResult | None:
        """Upload built distributions; returns a failure result or None."""
        dist_dir = context.project_root / "dist"
        dist_files = sorted(
            str(p.relative_to(context.project_root))
            for p in [*dist_dir.glob("*.whl"), *dist_dir.glob("*.tar.gz")]
        )
        if not dist_files:
            return PublishResult.failed(
                message="No distribution files found",
                details=f"Expected .whl and .tar.gz files in {dist_dir}",
                manual_command="python -m build && twine upload dist/*",
            )

        result = context.run(["uv", "publish", *dist_files])
        if result.not_found:
            result = context.run(["twine", "upload", *dist_files])
        if result.not_found:
            return PublishResult.failed(
                message="No upload tool available",
                details="Install uv or twine: pip install twine",
                manual_command="twine upload dist/*",
            )
        if not result.ok:
            return PublishResult.failed(
                message=f"Upload of {package_name}=={context.version} failed",
                details=failure_details(result),
                manual_command="twine upload dist/*",
            )
        return None
