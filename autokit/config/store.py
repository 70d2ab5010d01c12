"""Automation config store.

Owns the two pieces of persisted automation state at the repository root:
- ``.automation-profile.json``: the cached ProjectProfile (validated against
  marker file mtimes) and the record of the last release
- the layered AutomationConfig, recomputed on every load

Cache writes happen under the repository lock.
"""

import json
import logging
import os
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from autokit.config.layers import (
    Layer,
    default_layer,
    environment_layer,
    profile_layer,
    validate_layer,
)
from autokit.config.loader import find_override_file, load_override_file
from autokit.config.models import AutomationConfig
from autokit.detection import DetectionResult, ProjectProfile, detect_project, marker_files
from autokit.exceptions import ConfigParseError, DetectionAmbiguous, ReleaseLocked
from autokit.utils.locking import LOCK_FILE_NAME, RepositoryLock

logger = logging.getLogger(__name__)

CACHE_FILE_NAME = ".automation-profile.json"

# Files the automation itself writes; never count as uncommitted work
STATE_FILES = (CACHE_FILE_NAME, LOCK_FILE_NAME)


@dataclass
class LoadedConfig:
    """Merged configuration and how it was obtained.

    Attributes:
        config: Validated merged config
        warnings: One entry per skipped layer
        sources: Names of the layers that were applied, lowest first
    """

    config: AutomationConfig
    warnings: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)


def _write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=path.name, suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2, sort_keys=True)
            handle.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class ConfigStore:
    """Profile cache and layered configuration for one repository.

    Args:
        project_root: Repository root
        lock: A lock already held by the caller (the release pipeline);
            without one, each cache write takes the lock for itself
    """

    def __init__(self, project_root: Path, lock: RepositoryLock | None = None) -> None:
        self.project_root = project_root.resolve()
        self.cache_path = self.project_root / CACHE_FILE_NAME
        self.lock = lock
        self.last_detection: DetectionResult | None = None

    # ------------------------------------------------------------------
    # Cache file
    # ------------------------------------------------------------------

    def _read_cache(self) -> dict[str, Any]:
        """Read the cache file.

        Raises:
            ConfigParseError: If the file is missing, unreadable or not an object
        """
        try:
            data = json.loads(self.cache_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise ConfigParseError(f"No cache file at {self.cache_path}") from None
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigParseError(
                f"Unreadable cache file {self.cache_path.name}",
                details=str(e),
                fix_hint=f"Delete {self.cache_path.name}; it is regenerated automatically",
            ) from e
        if not isinstance(data, dict):
            raise ConfigParseError(f"Cache file {self.cache_path.name} must hold an object")
        return data

    def _cached_state(self) -> tuple[ProjectProfile, datetime, dict[str, Any]] | None:
        try:
            data = self._read_cache()
            profile = ProjectProfile.from_dict(data["profile"])
            detected_at = datetime.fromisoformat(data["detected_at"])
        except ConfigParseError as e:
            logger.debug("Profile cache unusable: %s", e.message)
            return None
        except (KeyError, TypeError, ValueError) as e:
            logger.debug("Profile cache malformed: %s", e)
            return None
        if detected_at.tzinfo is None:
            detected_at = detected_at.replace(tzinfo=timezone.utc)
        return profile, detected_at, data

    def _write_cache(self, data: dict[str, Any]) -> None:
        if self.lock is not None and self.lock.held:
            _write_json_atomic(self.cache_path, data)
            return
        with RepositoryLock(self.project_root):
            _write_json_atomic(self.cache_path, data)

    def _existing_last_release(self) -> dict[str, Any] | None:
        try:
            value = self._read_cache().get("last_release")
        except ConfigParseError:
            return None
        return value if isinstance(value, dict) else None

    def invalidate_if_stale(self) -> bool:
        """Check the cached profile against the tree.

        The cache is stale when it is missing or unreadable, when its
        manifest or lock file vanished, or when any marker file was
        modified after detection.

        Returns:
            True if the cached profile must not be used
        """
        state = self._cached_state()
        if state is None:
            return True
        profile, detected_at, _ = state

        for recorded in (profile.manifest_path, profile.lock_file_path):
            if recorded is not None and not (self.project_root / recorded).exists():
                logger.debug("Cached %s vanished; re-detecting", recorded)
                return True

        threshold = detected_at.timestamp()
        for marker in marker_files(self.project_root):
            try:
                if marker.stat().st_mtime > threshold:
                    logger.debug("%s changed since detection; re-detecting", marker.name)
                    return True
            except OSError:
                return True
        return False

    def cached_matches(self) -> list[str]:
        state = self._cached_state()
        if state is None:
            return []
        matches = state[2].get("matches", [])
        return [str(m) for m in matches] if isinstance(matches, list) else []

    def persist(self, profile: ProjectProfile, matches: list[str] | None = None) -> None:
        """Write the profile to the cache, keeping the last release record.

        Raises:
            ReleaseLocked: If another run holds the repository lock
        """
        data: dict[str, Any] = {
            "profile": profile.to_dict(),
            "detected_at": datetime.now(timezone.utc).isoformat(),
            "matches": list(matches or [profile.ecosystem_kind]),
        }
        last_release = self._existing_last_release()
        if last_release is not None:
            data["last_release"] = last_release
        self._write_cache(data)

    def current_profile(self) -> ProjectProfile:
        """Return the cached profile, re-detecting when it is stale.

        A fresh detection is persisted; if the lock is busy the profile is
        still returned, just not cached.

        Raises:
            DetectionError: If the project root cannot be inspected
        """
        if not self.invalidate_if_stale():
            state = self._cached_state()
            if state is not None:
                logger.debug("Using cached profile from %s", self.cache_path.name)
                return state[0]

        result = detect_project(self.project_root)
        self.last_detection = result
        try:
            self.persist(result.profile, result.matches)
        except (ReleaseLocked, OSError) as e:
            logger.warning("Profile not cached: %s", getattr(e, "message", e))
        return result.profile

    def ambiguity(self) -> DetectionAmbiguous | None:
        """Ambiguity of the current profile, from the last scan or the cache."""
        if self.last_detection is not None:
            return self.last_detection.ambiguity
        matches = self.cached_matches()
        if len(matches) > 1:
            return DetectionAmbiguous(
                f"Markers of several ecosystems found: {', '.join(matches)}",
                details=f"Using '{matches[0]}' (highest priority)",
            )
        return None

    def record_release(self, summary: dict[str, Any]) -> None:
        """Store the terminal state of a release attempt as ``last_release``."""
        try:
            data = self._read_cache()
        except ConfigParseError:
            data = {}
        data["last_release"] = summary
        self._write_cache(data)

    def last_release(self) -> dict[str, Any] | None:
        return self._existing_last_release()

    # ------------------------------------------------------------------
    # Layered configuration
    # ------------------------------------------------------------------

    def load(
        self,
        overrides: Layer | None = None,
        profile: ProjectProfile | None = None,
    ) -> LoadedConfig:
        """Merge all configuration layers.

        A layer that cannot be parsed or fails validation is skipped with
        a warning; the layers below it still apply.

        Args:
            overrides: CLI layer
            profile: Profile to derive the profile layer from (defaults to
                current_profile())

        Returns:
            LoadedConfig
        """
        if profile is None:
            profile = self.current_profile()

        merged = default_layer()
        loaded = LoadedConfig(config=AutomationConfig(), sources=["defaults"])

        layers: list[tuple[str, Callable[[], Layer]]] = [
            ("profile", lambda: profile_layer(profile)),
        ]
        override_path = find_override_file(self.project_root)
        if override_path is not None:
            layers.append((override_path.name, lambda: load_override_file(override_path)))
        layers.append(("environment", environment_layer))
        layers.append(("cli", lambda: overrides or {}))

        for source, produce in layers:
            try:
                layer = produce()
                if not layer:
                    continue
                merged = validate_layer(merged, layer, source)
            except ConfigParseError as e:
                logger.warning("Skipping configuration layer '%s': %s", source, e.message)
                loaded.warnings.append(f"{source}: {e.message}")
                continue
            loaded.sources.append(source)

        loaded.config = AutomationConfig.model_validate(merged)
        return loaded
