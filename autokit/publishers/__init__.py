"""Publisher modules for package registry publishing."""

# Import publishers to trigger registration
from autokit.publishers import (
    crates,  # noqa: F401
    npm,  # noqa: F401
    pypi,  # noqa: F401
)
from autokit.publishers.base import (
    PublishContext,
    Publisher,
    PublisherRegistry,
    PublishResult,
    PublishStatus,
)

__all__ = [
    "PublishContext",
    "Publisher",
    "PublisherRegistry",
    "PublishResult",
    "PublishStatus",
]
