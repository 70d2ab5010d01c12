"""Changelog rendering in Keep a Changelog style.

Rendering is pure text; writing the file belongs to the release commit.
"""

import datetime
from collections.abc import Sequence
from pathlib import Path

from autokit.commits.parser import CommitRecord, CommitType
from autokit.exceptions import EcosystemError
from autokit.utils.version import VersionState

CHANGELOG_HEADER = """# Changelog

All notable changes to this project will be documented in this file.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.1.0/),
and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).
"""

# (heading, conventional type tokens); fixed order, anything unlisted goes last
SECTIONS: list[tuple[str, tuple[str, ...]]] = [
    ("Features", ("feat",)),
    ("Bug Fixes", ("fix",)),
    ("Performance", ("perf",)),
    ("Documentation", ("docs",)),
]
OTHER_SECTION = "Other Changes"
BREAKING_SECTION = "⚠ BREAKING CHANGES"


def _entry(record: CommitRecord) -> str:
    scope = f"**{record.scope}:** " if record.scope else ""
    return f"- {scope}{record.subject} ({record.short_hash})"


def group_records(records: Sequence[CommitRecord]) -> dict[str, list[CommitRecord]]:
    """Group commits by changelog section, keeping commit order in each group.

    Commits typed ``breaking`` (message starting with BREAKING CHANGE)
    appear only in the breaking-changes callout.
    """
    known = {token: heading for heading, tokens in SECTIONS for token in tokens}
    groups: dict[str, list[CommitRecord]] = {heading: [] for heading, _ in SECTIONS}
    groups[OTHER_SECTION] = []
    for record in records:
        if record.type is CommitType.BREAKING:
            continue
        groups[known.get(record.type_token, OTHER_SECTION)].append(record)
    return {heading: items for heading, items in groups.items() if items}


def render_changelog(
    version: VersionState | str,
    records: Sequence[CommitRecord],
    date: datetime.date | None = None,
) -> str:
    """Render the changelog section for one release.

    Args:
        version: Released version
        records: Commits in the release, oldest first
        date: Release date (defaults to today)

    Returns:
        Markdown section starting with "## [version] - date"
    """
    date = date or datetime.date.today()
    lines = [f"## [{version}] - {date.isoformat()}", ""]

    breaking = [r for r in records if r.is_breaking or r.type is CommitType.BREAKING]
    if breaking:
        lines.append(f"### {BREAKING_SECTION}")
        lines.append("")
        lines.extend(_entry(r) for r in breaking)
        lines.append("")

    for heading, items in group_records(records).items():
        lines.append(f"### {heading}")
        lines.append("")
        lines.extend(_entry(r) for r in items)
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def prepend_changelog_text(existing: str | None, section: str) -> str:
    """Insert a section above the previous releases.

    The Keep a Changelog header (everything before the first "## "
    heading) stays on top; a missing header is added.
    """
    if not existing or not existing.strip():
        return f"{CHANGELOG_HEADER}\n{section}"

    marker = existing.find("\n## ")
    if existing.startswith("## "):
        head, tail = "", existing
    elif marker >= 0:
        head, tail = existing[: marker + 1], existing[marker + 1 :]
    else:
        head, tail = existing, ""

    if not head.strip():
        head = CHANGELOG_HEADER
    head = head.rstrip("\n") + "\n\n"
    return f"{head}{section}" + (f"\n{tail}" if tail else "")


def prepend_changelog(path: Path, section: str) -> Path:
    """Write a section to the top of the changelog file.

    Returns:
        The changelog path

    Raises:
        EcosystemError: If the file cannot be read or written
    """
    try:
        existing = path.read_text(encoding="utf-8") if path.exists() else None
        path.write_text(prepend_changelog_text(existing, section), encoding="utf-8")
    except OSError as e:
        raise EcosystemError(
            f"Failed to write changelog {path}",
            details=str(e),
            fix_hint="Check that versioning.changelog_file points into an existing, writable directory",
        ) from e
    return path
