"""Conventional commit parsing and classification.

Turns raw commit messages into CommitRecords. Parsing never fails:
anything that is not a conventional commit is classified as ``other``.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from autokit.git.vcs import VersionControl

# type(scope)!: subject
CONVENTIONAL_PATTERN = re.compile(
    r"^(?P<type>[A-Za-z][A-Za-z0-9_-]*)"
    r"(?:\((?P<scope>[^()]*)\))?"
    r"(?P<bang>!)?"
    r":\s*(?P<subject>.*)$"
)

BREAKING_PREFIXES = ("BREAKING CHANGE", "BREAKING-CHANGE")
BREAKING_FOOTER = re.compile(r"^BREAKING[ -]CHANGE:", re.MULTILINE)


class CommitType(Enum):
    """Commit classes that matter for versioning and changelogs."""

    FEAT = "feat"
    FIX = "fix"
    DOCS = "docs"
    CHORE = "chore"
    BREAKING = "breaking"
    OTHER = "other"


_TYPE_BY_TOKEN = {
    "feat": CommitType.FEAT,
    "fix": CommitType.FIX,
    "docs": CommitType.DOCS,
    "chore": CommitType.CHORE,
}


@dataclass(frozen=True)
class CommitRecord:
    """A classified commit.

    Attributes:
        hash: Commit id
        type: Classified type
        raw_type: Conventional type token as written, lowercased
            ("" for non-conventional messages)
        scope: Optional scope from "type(scope):"
        subject: Description after the colon (or the whole first line)
        is_breaking: "!" marker or BREAKING CHANGE footer present
        body: Remaining message lines
    """

    hash: str
    type: CommitType
    raw_type: str
    scope: str | None
    subject: str
    is_breaking: bool = False
    body: str = ""

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    @property
    def type_token(self) -> str:
        """Token used for release-type matching ("perf", "docs", ...)."""
        return self.raw_type or self.type.value


def parse_commit(commit_hash: str, message: str) -> CommitRecord:
    """Classify one commit message.

    Args:
        commit_hash: Commit id
        message: Full commit message (subject, blank line, body)

    Returns:
        CommitRecord; non-conventional messages become type OTHER

    Examples:
        >>> parse_commit("abc", "feat(api)!: drop v1").is_breaking
        True
        >>> parse_commit("abc", "Update README").type
        <CommitType.OTHER: 'other'>
    """
    lines = message.strip().splitlines()
    first = lines[0].strip() if lines else ""
    body = "\n".join(lines[1:]).strip()
    footer_breaking = bool(BREAKING_FOOTER.search(body))

    if first.startswith(BREAKING_PREFIXES):
        _, _, rest = first.partition(":")
        return CommitRecord(
            hash=commit_hash,
            type=CommitType.BREAKING,
            raw_type="breaking",
            scope=None,
            subject=rest.strip() or first,
            is_breaking=True,
            body=body,
        )

    match = CONVENTIONAL_PATTERN.match(first)
    if not match:
        return CommitRecord(
            hash=commit_hash,
            type=CommitType.OTHER,
            raw_type="",
            scope=None,
            subject=first,
            is_breaking=footer_breaking,
            body=body,
        )

    token = match.group("type").lower()
    scope = match.group("scope")
    return CommitRecord(
        hash=commit_hash,
        type=_TYPE_BY_TOKEN.get(token, CommitType.OTHER),
        raw_type=token,
        scope=scope.strip() if scope else None,
        subject=match.group("subject").strip(),
        is_breaking=bool(match.group("bang")) or footer_breaking,
        body=body,
    )


def classify(commit_range: str | None, vcs: "VersionControl") -> list[CommitRecord]:
    """Classify every commit in a range, oldest first.

    Args:
        commit_range: Git revision range (e.g., "v1.2.3..HEAD"); None for
            the whole history
        vcs: Version control capability

    Returns:
        One CommitRecord per commit, in log order
    """
    return [parse_commit(entry.hash, entry.message) for entry in vcs.log(commit_range)]
