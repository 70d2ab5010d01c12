"""Abstract base class for ecosystem adapters.

An ecosystem adapter encapsulates everything that differs between language
stacks, so that downstream components never branch on the ecosystem name:
- Marker-file detection (manifest patterns, lock files)
- Test framework candidates
- Version file reading/writing
- Lint/format commands for the commit gate
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

from autokit.exceptions import EcosystemError


@dataclass(frozen=True)
class TestCandidate:
    """A usable test framework and how to invoke it.

    Attributes:
        framework_id: Stable framework identifier (e.g., "pytest")
        run_command: Argument vector running the suite
        coverage_command: Argument vector running the suite with coverage
    """

    __test__ = False  # keep pytest from collecting this class

    framework_id: str
    run_command: tuple[str, ...]
    coverage_command: tuple[str, ...] | None = None


@dataclass(frozen=True)
class FrameworkProbe:
    """Marker evidence that a test framework is configured.

    Attributes:
        framework_id: Framework identifier reported on match
        run_command: Command used to run the tests
        coverage_command: Command used to run the tests with coverage
        markers: Glob patterns relative to the project root
        fragments: (file, substring) pairs; any hit counts as a match
    """

    framework_id: str
    run_command: tuple[str, ...]
    coverage_command: tuple[str, ...] | None = None
    markers: tuple[str, ...] = ()
    fragments: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def matches(self, project_root: Path) -> bool:
        for pattern in self.markers:
            if any(project_root.glob(pattern)):
                return True
        for file_name, needle in self.fragments:
            path = project_root / file_name
            if not path.is_file():
                continue
            try:
                if needle in path.read_text(encoding="utf-8", errors="replace"):
                    return True
            except OSError:
                continue
        return False

    def to_candidate(self) -> TestCandidate:
        return TestCandidate(
            framework_id=self.framework_id,
            run_command=self.run_command,
            coverage_command=self.coverage_command,
        )


class Ecosystem(ABC):
    """Abstract base class for ecosystem adapters.

    Each ecosystem (javascript, python, rust, etc.) implements this
    interface. ``priority`` fixes the detection order when markers of
    several ecosystems are present: lower wins.
    """

    # Class-level attributes to be defined by subclasses
    name: ClassVar[str]
    display_name: ClassVar[str]
    priority: ClassVar[int]
    config_files: ClassVar[list[str]]  # Manifest glob patterns
    lock_files: ClassVar[list[str]]  # Lock files for this ecosystem
    build_tool: ClassVar[str] = ""
    package_managers: ClassVar[dict[str, str]] = {}  # lock file -> manager
    default_package_manager: ClassVar[str] = ""
    test_frameworks: ClassVar[list[FrameworkProbe]] = []

    def __init__(self, project_root: Path) -> None:
        """Initialize ecosystem with project root.

        Args:
            project_root: Path to the project root directory
        """
        self.project_root = project_root

    def detect(self) -> bool:
        """Detect if project uses this ecosystem.

        Returns:
            True if any manifest pattern matches
        """
        return self.manifest_path() is not None

    def manifest_path(self) -> Path | None:
        """First manifest file matching the ecosystem's patterns."""
        for pattern in self.config_files:
            matches = sorted(self.project_root.glob(pattern))
            if matches:
                return matches[0]
        return None

    def lock_file_path(self) -> Path | None:
        """First lock file present, in declaration order."""
        for lock_file in self.lock_files:
            path = self.project_root / lock_file
            if path.exists():
                return path
        return None

    def marker_files(self) -> list[Path]:
        """All present manifest and lock files (for cache validation)."""
        found: list[Path] = []
        for pattern in self.config_files:
            found.extend(sorted(self.project_root.glob(pattern)))
        for lock_file in self.lock_files:
            path = self.project_root / lock_file
            if path.exists():
                found.append(path)
        return found

    def get_package_manager(self) -> str:
        """Detect which package manager is used.

        Returns:
            Package manager name from the first lock file present,
            else the ecosystem default
        """
        for lock_file, manager in self.package_managers.items():
            if (self.project_root / lock_file).exists():
                return manager
        return self.default_package_manager

    def build_tool_hint(self) -> str:
        return self.build_tool or self.get_package_manager()

    def test_candidates(self) -> list[TestCandidate]:
        """Test frameworks whose markers are present, in priority order."""
        return [
            probe.to_candidate()
            for probe in self.test_frameworks
            if probe.matches(self.project_root)
        ]

    def lint_commands(self) -> list[list[str]]:
        """Static format/lint commands run by the commit gate."""
        return []

    @abstractmethod
    def get_version(self) -> str:
        """Get current version from the version file.

        Returns:
            Version string (e.g., "1.0.0")

        Raises:
            EcosystemError: If version cannot be read
        """

    @abstractmethod
    def set_version(self, version: str) -> list[Path]:
        """Write a version into the ecosystem's version file(s).

        Args:
            version: New version string

        Returns:
            Files that were modified

        Raises:
            EcosystemError: If version cannot be set
        """

    def update_versions(self, version: str) -> list[Path]:
        """Write the version to the manifest and to a VERSION file if present.

        Args:
            version: New version string

        Returns:
            Every file that was modified, manifest first
        """
        written = self.set_version(version)
        version_file = self.project_root / "VERSION"
        if version_file.exists() and version_file not in written:
            written.append(self._write_text("VERSION", f"{version}\n"))
        return written

    def _read_text(self, file_name: str) -> str:
        path = self.project_root / file_name
        if not path.exists():
            raise EcosystemError(
                f"{file_name} not found",
                details=f"Expected at: {path}",
                fix_hint=f"Ensure you are in a {self.display_name} project root",
            )
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise EcosystemError(f"Failed to read {file_name}", details=str(e)) from e

    def _write_text(self, file_name: str, content: str) -> Path:
        path = self.project_root / file_name
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise EcosystemError(f"Failed to write {file_name}", details=str(e)) from e
        return path


class EcosystemRegistry:
    """Registry for ecosystem adapters.

    Iteration order is the fixed ``priority`` order, never registration
    order, so detection is deterministic. The generic adapter is kept
    apart as the fallback.
    """

    _ecosystems: dict[str, type[Ecosystem]] = {}
    _fallback: type[Ecosystem] | None = None

    @classmethod
    def register(cls, ecosystem_class: type[Ecosystem]) -> type[Ecosystem]:
        """Register an ecosystem class.

        Can be used as a decorator:
            @EcosystemRegistry.register
            class PythonEcosystem(Ecosystem):
                ...

        Args:
            ecosystem_class: Ecosystem class to register

        Returns:
            The registered class (for decorator usage)

        Raises:
            TypeError: If ecosystem_class is missing required attributes
            ValueError: If the name or priority is already taken
        """
        required_attrs = ["name", "display_name", "priority", "config_files", "lock_files"]
        missing = [attr for attr in required_attrs if not hasattr(ecosystem_class, attr)]
        if missing:
            raise TypeError(
                f"Ecosystem class {ecosystem_class.__name__} missing required "
                f"class attributes: {', '.join(missing)}."
            )

        name = ecosystem_class.name
        if not isinstance(name, str) or not name:
            raise TypeError(
                f"Ecosystem {ecosystem_class.__name__}.name must be a non-empty string, "
                f"got {type(name).__name__}: {name!r}"
            )

        if name in cls._ecosystems:
            existing = cls._ecosystems[name]
            if existing is not ecosystem_class:
                raise ValueError(
                    f"Ecosystem name '{name}' already registered by {existing.__name__}. "
                    f"Cannot register {ecosystem_class.__name__}."
                )
            return ecosystem_class

        for other in cls._ecosystems.values():
            if other.priority == ecosystem_class.priority:
                raise ValueError(
                    f"Ecosystem priority {other.priority} already used by {other.__name__}"
                )

        cls._ecosystems[name] = ecosystem_class
        return ecosystem_class

    @classmethod
    def register_fallback(cls, ecosystem_class: type[Ecosystem]) -> type[Ecosystem]:
        """Register the adapter used when nothing is detected."""
        cls._fallback = ecosystem_class
        return ecosystem_class

    @classmethod
    def ordered(cls) -> list[type[Ecosystem]]:
        return sorted(cls._ecosystems.values(), key=lambda eco: eco.priority)

    @classmethod
    def get(cls, name: str) -> type[Ecosystem] | None:
        """Get an ecosystem class by name (the fallback included)."""
        if cls._fallback is not None and name == cls._fallback.name:
            return cls._fallback
        return cls._ecosystems.get(name)

    @classmethod
    def create(cls, name: str, project_root: Path) -> Ecosystem:
        """Instantiate the adapter for a profile's ecosystem.

        Unknown names resolve to the fallback adapter.
        """
        ecosystem_class = cls.get(name) or cls._fallback
        if ecosystem_class is None:
            raise EcosystemError(f"No adapter registered for ecosystem '{name}'")
        return ecosystem_class(project_root)

    @classmethod
    def detect_all(cls, project_root: Path) -> list[Ecosystem]:
        """Detect all ecosystems present in a project, in priority order."""
        detected = []
        for ecosystem_class in cls.ordered():
            eco = ecosystem_class(project_root)
            if eco.detect():
                detected.append(eco)
        return detected

    @classmethod
    def fallback(cls, project_root: Path) -> Ecosystem:
        if cls._fallback is None:
            raise EcosystemError("No fallback ecosystem registered")
        return cls._fallback(project_root)

    @classmethod
    def marker_files(cls, project_root: Path) -> list[Path]:
        """Every marker file of every ecosystem present under the root."""
        found: list[Path] = []
        for ecosystem_class in cls.ordered():
            found.extend(ecosystem_class(project_root).marker_files())
        if cls._fallback is not None:
            found.extend(cls._fallback(project_root).marker_files())
        return found

    @classmethod
    def list_registered(cls) -> list[str]:
        """List registered ecosystem names in priority order."""
        return [eco.name for eco in cls.ordered()]
