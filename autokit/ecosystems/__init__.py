"""Ecosystem detection and management modules."""

from autokit.ecosystems.base import (
    Ecosystem,
    EcosystemRegistry,
    FrameworkProbe,
    TestCandidate,
)

# Import ecosystem implementations to trigger registration
from autokit.ecosystems import (
    dotnet,  # noqa: F401
    generic,  # noqa: F401
    go,  # noqa: F401
    java,  # noqa: F401
    nodejs,  # noqa: F401
    php,  # noqa: F401
    python,  # noqa: F401
    ruby,  # noqa: F401
    rust,  # noqa: F401
)

__all__ = ["Ecosystem", "EcosystemRegistry", "FrameworkProbe", "TestCandidate"]
