"""npm registry publisher.

Authentication comes from the environment (OIDC trusted publishing in
CI, ~/.npmrc locally); nothing here handles tokens.
"""

import json
from pathlib import Path
from typing import Any, ClassVar

from autokit.publishers.base import (
    PublishContext,
    Publisher,
    PublisherRegistry,
    PublishResult,
    failure_details,
)


def read_manifest(project_root: Path) -> dict[str, Any]:
    """package.json as a dict; empty when missing or unreadable."""
    try:
        data = json.loads((project_root / "package.json").read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


@PublisherRegistry.register
class NPMPublisher(Publisher):
    """Runs ``npm publish``; private packages are never published."""

    name: ClassVar[str] = "npm"
    display_name: ClassVar[str] = "npm Registry"
    ecosystem: ClassVar[str] = "javascript"

    def should_publish(self, context: PublishContext) -> bool:
        manifest = read_manifest(context.project_root)
        return bool(manifest) and not manifest.get("private", False)

    def publish(self, context: PublishContext) -> PublishResult:
        manifest = read_manifest(context.project_root)
        package_name = manifest.get("name")
        if not package_name:
            return PublishResult.failed(
                message="Failed to read package name from package.json",
                manual_command="npm publish",
            )

        access = manifest.get("publishConfig", {}).get("access", "public")
        cmd = ["npm", "publish", "--access", access]
        result = context.run(cmd)
        if not result.ok:
            return PublishResult.failed(
                message=f"npm publish failed for {package_name}@{context.version}",
                details=failure_details(result),
                manual_command=" ".join(cmd),
            )

        return PublishResult.success(
            message=f"Published {package_name}@{context.version} to npm",
            package_url=f"https://www.npmjs.com/package/{package_name}",
            version=context.version,
        )
