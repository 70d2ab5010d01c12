"""Project type detection.

Scans a project root for ecosystem marker files and produces a
ProjectProfile. Adapters are consulted in their fixed priority order, so
the outcome never depends on directory listing order.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from autokit.ecosystems import Ecosystem, EcosystemRegistry
from autokit.exceptions import DetectionAmbiguous, DetectionError

logger = logging.getLogger(__name__)

GENERIC = "generic"

# Confidence levels
CONFIDENCE_LOCKED = 1.0  # manifest and lock file
CONFIDENCE_MANIFEST = 0.8  # manifest only
CONFIDENCE_FALLBACK = 0.0


@dataclass(frozen=True)
class ProjectProfile:
    """Detected characteristics of a project.

    Paths are relative to the project root so that a profile stays valid
    when the checkout moves.

    Attributes:
        ecosystem_kind: Ecosystem name (e.g., "python", "generic")
        manifest_path: Manifest that triggered detection
        lock_file_path: Lock file, when one is present
        build_tool_hint: Package manager or build tool (e.g., "poetry")
        confidence: 1.0 with a lock file, 0.8 with a manifest only, 0.0 for generic
    """

    ecosystem_kind: str
    manifest_path: Path | None
    lock_file_path: Path | None = None
    build_tool_hint: str = ""
    confidence: float = CONFIDENCE_FALLBACK

    @property
    def is_generic(self) -> bool:
        return self.ecosystem_kind == GENERIC

    def to_dict(self) -> dict[str, Any]:
        return {
            "ecosystem_kind": self.ecosystem_kind,
            "manifest_path": str(self.manifest_path) if self.manifest_path else None,
            "lock_file_path": str(self.lock_file_path) if self.lock_file_path else None,
            "build_tool_hint": self.build_tool_hint,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectProfile":
        """Rebuild a profile from its cached form.

        Raises:
            KeyError: If ecosystem_kind is missing
            TypeError, ValueError: If a field has the wrong shape
        """
        manifest = data.get("manifest_path")
        lock_file = data.get("lock_file_path")
        return cls(
            ecosystem_kind=str(data["ecosystem_kind"]),
            manifest_path=Path(manifest) if manifest else None,
            lock_file_path=Path(lock_file) if lock_file else None,
            build_tool_hint=str(data.get("build_tool_hint", "")),
            confidence=float(data.get("confidence", CONFIDENCE_FALLBACK)),
        )


@dataclass
class DetectionResult:
    """Outcome of a detection scan.

    Attributes:
        profile: Winning profile
        matches: Every ecosystem whose markers were found, in priority order
        ambiguity: Set when more than one ecosystem matched
    """

    profile: ProjectProfile
    matches: list[str] = field(default_factory=list)
    ambiguity: DetectionAmbiguous | None = None

    @property
    def ambiguous(self) -> bool:
        return self.ambiguity is not None


def _relative(path: Path | None, root: Path) -> Path | None:
    if path is None:
        return None
    try:
        return path.relative_to(root)
    except ValueError:
        return path


def profile_for(ecosystem: Ecosystem) -> ProjectProfile:
    """Build the profile of a detected ecosystem adapter."""
    root = ecosystem.project_root
    lock_file = ecosystem.lock_file_path()
    return ProjectProfile(
        ecosystem_kind=ecosystem.name,
        manifest_path=_relative(ecosystem.manifest_path(), root),
        lock_file_path=_relative(lock_file, root),
        build_tool_hint=ecosystem.build_tool_hint(),
        confidence=CONFIDENCE_LOCKED if lock_file else CONFIDENCE_MANIFEST,
    )


def generic_profile(project_root: Path) -> ProjectProfile:
    fallback = EcosystemRegistry.fallback(project_root)
    return ProjectProfile(
        ecosystem_kind=fallback.name,
        manifest_path=_relative(fallback.manifest_path(), project_root),
        confidence=CONFIDENCE_FALLBACK,
    )


def _check_root(project_root: Path) -> None:
    if not project_root.exists():
        raise DetectionError(
            f"Project root does not exist: {project_root}",
            fix_hint="Run from inside the project or pass an existing directory",
        )
    if not project_root.is_dir():
        raise DetectionError(f"Project root is not a directory: {project_root}")
    try:
        os.listdir(project_root)
    except OSError as e:
        raise DetectionError(
            f"Cannot read project root: {project_root}",
            details=str(e),
            fix_hint="Check directory permissions",
        ) from e


def detect_project(project_root: Path) -> DetectionResult:
    """Detect the project's ecosystem.

    Args:
        project_root: Directory to scan

    Returns:
        DetectionResult with the highest-priority match, or the generic
        profile when nothing matched

    Raises:
        DetectionError: If the root is missing or unreadable
    """
    project_root = project_root.resolve()
    _check_root(project_root)

    detected = EcosystemRegistry.detect_all(project_root)
    if not detected:
        logger.info("No ecosystem markers found in %s; using generic profile", project_root)
        return DetectionResult(profile=generic_profile(project_root))

    names = [eco.name for eco in detected]
    winner = detected[0]
    ambiguity = None
    if len(detected) > 1:
        ambiguity = DetectionAmbiguous(
            f"Markers of several ecosystems found: {', '.join(names)}",
            details=f"Using '{winner.name}' (highest priority)",
        )
        logger.warning("%s", ambiguity.message)

    profile = profile_for(winner)
    logger.debug("Detected %s (confidence %.1f)", profile.ecosystem_kind, profile.confidence)
    return DetectionResult(profile=profile, matches=names, ambiguity=ambiguity)


def marker_files(project_root: Path) -> list[Path]:
    """Every marker file present under the root, across all adapters."""
    return EcosystemRegistry.marker_files(project_root)
