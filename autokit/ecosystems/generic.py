"""Fallback adapter for projects no ecosystem recognizes.

Generic projects track their version in a plain VERSION file and have no
known test framework or linter.
"""

from pathlib import Path

from autokit.ecosystems.base import Ecosystem, EcosystemRegistry


@EcosystemRegistry.register_fallback
class GenericEcosystem(Ecosystem):
    """Fallback ecosystem; never reported as detected."""

    name = "generic"
    display_name = "Generic"
    priority = 1000
    config_files = ["VERSION"]
    lock_files: list[str] = []

    def detect(self) -> bool:
        return False

    def get_version(self) -> str:
        return self._read_text("VERSION").strip().removeprefix("v")

    def set_version(self, version: str) -> list[Path]:
        return [self._write_text("VERSION", f"{version}\n")]
