"""Commit classification, version decisions and changelog rendering."""

from autokit.commits.bump import (
    NothingToRelease,
    ReleaseDecision,
    VersionDecision,
    compute_bump,
    decide_version,
    determine_bump,
)
from autokit.commits.changelog import prepend_changelog, render_changelog
from autokit.commits.message import validate_message
from autokit.commits.parser import CommitRecord, CommitType, classify, parse_commit
from autokit.commits.suggest import CommitSuggestion, suggest_commit_type

__all__ = [
    "CommitRecord",
    "CommitSuggestion",
    "CommitType",
    "NothingToRelease",
    "ReleaseDecision",
    "VersionDecision",
    "classify",
    "compute_bump",
    "decide_version",
    "determine_bump",
    "parse_commit",
    "prepend_changelog",
    "render_changelog",
    "suggest_commit_type",
    "validate_message",
]
