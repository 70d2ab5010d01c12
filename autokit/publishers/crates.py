"""crates.io publisher for Rust crates."""

import re
from typing import ClassVar

from autokit.publishers.base import (
    PublishContext,
    Publisher,
    PublisherRegistry,
    PublishResult,
    failure_details,
)

PACKAGE_NAME_PATTERN = re.compile(r'^\s*name\s*=\s*"([^"]+)"', re.MULTILINE)


@PublisherRegistry.register
class CratesPublisher(Publisher):
    """Publisher for crates.io.

    Workspace roots without a [package] table are not published.
    """

    name: ClassVar[str] = "crates"
    display_name: ClassVar[str] = "crates.io"
    ecosystem: ClassVar[str] = "rust"

    def should_publish(self, context: PublishContext) -> bool:
        cargo_toml = context.project_root / "Cargo.toml"
        return cargo_toml.exists() and "[package]" in cargo_toml.read_text(encoding="utf-8")

    def publish(self, context: PublishContext) -> PublishResult:
        content = (context.project_root / "Cargo.toml").read_text(encoding="utf-8")
        package_section = content.split("[package]", 1)[1].split("\n[", 1)[0]
        match = PACKAGE_NAME_PATTERN.search(package_section)
        crate_name = match.group(1) if match else context.project_root.name

        result = context.run(["cargo", "publish"])
        if not result.ok:
            return PublishResult.failed(
                message=f"cargo publish failed for {crate_name} {context.version}",
                details=failure_details(result),
                manual_command="cargo publish",
            )

        return PublishResult.success(
            message=f"Published {crate_name} {context.version} to crates.io",
            package_url=f"https://crates.io/crates/{crate_name}/{context.version}",
            version=context.version,
        )
