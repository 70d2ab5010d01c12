"""Commit type suggestions from the staged changes.

Used when the commit gate rejects a message: the staged paths, plus any
words the author already wrote, point at the conventional type the
commit most likely is.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import PurePosixPath

_SOURCE_EXT = r"(js|ts|jsx|tsx|py|go|rs|php|java)"

# Checked in this order; a file counts for the first type whose pattern matches
PATH_RULES: list[tuple[str, tuple[re.Pattern[str], ...]]] = [
    (
        "test",
        tuple(
            re.compile(p)
            for p in (
                rf"\.(test|spec)\.{_SOURCE_EXT}$",
                r"_test\.(py|go|rs)$",
                r"(^|/)test_[^/]*\.py$",
                r"^(tests?|__tests__|spec)/",
            )
        ),
    ),
    (
        "ci",
        tuple(
            re.compile(p)
            for p in (
                r"^\.github/workflows/.*\.ya?ml$",
                r"^\.gitlab-ci\.ya?ml$",
                r"^\.travis\.ya?ml$",
                r"^appveyor\.ya?ml$",
                r"^\.circleci/",
                r"^\.githooks/",
                r"^[Jj]enkinsfile",
            )
        ),
    ),
    (
        "build",
        tuple(
            re.compile(p)
            for p in (
                r"^(package\.json|package-lock\.json|yarn\.lock|pnpm-lock\.yaml|bun\.lockb)$",
                r"^(Cargo\.toml|Cargo\.lock|go\.mod|go\.sum)$",
                r"^(requirements[^/]*\.txt|pyproject\.toml|setup\.py|setup\.cfg)$",
                r"^(Dockerfile|docker-compose\.ya?ml)$",
                r"^(webpack|vite|rollup)\.config\.(js|ts)$",
                r"^babel\.config\.(js|json)$",
                r"^tsconfig\.json$",
            )
        ),
    ),
    (
        "docs",
        tuple(
            re.compile(p)
            for p in (
                r"\.(md|rst)$",
                r"^docs/",
                r"^README",
                r"^CHANGELOG",
                r"\.txt$",
            )
        ),
    ),
    (
        "style",
        tuple(
            re.compile(p)
            for p in (
                r"\.(css|scss|less)$",
                r"\.style\.(js|ts)$",
                r"^styles/",
            )
        ),
    ),
    (
        "chore",
        tuple(
            re.compile(p)
            for p in (
                r"^\.(gitignore|gitattributes|editorconfig)$",
                r"^\.(prettierrc|eslintrc|stylelintrc)",
                r"^eslint\.config\.(js|mjs|ts)$",
                r"^LICENSE",
                r"^\.env",
                r"\.sample$",
                r"^(scripts|tools|\.vscode)/",
            )
        ),
    ),
    (
        "feat",
        tuple(
            re.compile(p)
            for p in (
                rf"^src/.*\.{_SOURCE_EXT}$",
                rf"\.(component|service|controller)\.{_SOURCE_EXT}$",
                rf"^api/.*\.{_SOURCE_EXT}$",
                r"^(lib|components|features)/",
            )
        ),
    ),
]

KEYWORDS: dict[str, tuple[str, ...]] = {
    "feat": ("add", "new", "create", "implement", "introduce", "feature", "support"),
    "fix": ("fix", "bug", "issue", "error", "crash", "problem", "resolve", "correct", "repair"),
    "docs": ("document", "docs", "readme", "guide", "tutorial", "example", "explain", "clarify"),
    "style": ("style", "css", "theme", "layout", "color", "font", "spacing", "prettier"),
    "refactor": ("refactor", "restructure", "reorganize", "cleanup", "simplify", "extract"),
    "test": ("test", "tests", "spec", "coverage", "unittest", "e2e", "mock", "stub"),
    "build": ("build", "compile", "bundle", "dependency", "dependencies", "deps"),
    "ci": ("ci", "pipeline", "workflow", "github", "gitlab"),
    "chore": ("chore", "maintenance", "housekeeping", "cleanup", "lint"),
}

# Tie-break order
TYPE_ORDER = ("feat", "fix", "docs", "style", "refactor", "test", "build", "ci", "chore")

PATH_WEIGHT = 0.7
KEYWORD_WEIGHT = 0.3
_SUFFIXES = ("ing", "es", "ed", "s", "d")


@dataclass(frozen=True)
class CommitSuggestion:
    """Suggested conventional type for a set of changes.

    Attributes:
        type: Conventional type token (feat, fix, docs, ...)
        confidence: 0.0 to 1.0
        reason: Why this type was picked
        description: Generated description for the commit subject
        scores: Weighted score per type, for display and debugging
    """

    type: str
    confidence: float
    reason: str
    description: str
    scores: dict[str, float] = field(default_factory=dict)

    def message(self, description: str | None = None) -> str:
        return f"{self.type}: {description or self.description}"


def path_type(path: str) -> str | None:
    """The type a single changed path points at, or None."""
    normalized = path.replace("\\", "/").removeprefix("./")
    for commit_type, patterns in PATH_RULES:
        if any(p.search(normalized) for p in patterns):
            return commit_type
    return None


def _keyword_types(word: str) -> list[str]:
    # "fixed", "adds", "crashes" count for their stem
    candidates = {word}
    candidates.update(
        word[: -len(s)] for s in _SUFFIXES if word.endswith(s) and len(word) > len(s) + 1
    )
    return [t for t in TYPE_ORDER if any(c in KEYWORDS[t] for c in candidates)]


def keyword_counts(text: str) -> dict[str, int]:
    """Keyword hits per type in free text (a message, a diff)."""
    counts = dict.fromkeys(TYPE_ORDER, 0)
    for word in re.findall(r"[a-z0-9]+", text.lower()):
        for commit_type in _keyword_types(word):
            counts[commit_type] += 1
    return counts


def describe_change(commit_type: str, files: Sequence[str]) -> str:
    """A short subject for ``commit_type`` derived from the file names."""
    names = [PurePosixPath(f.replace("\\", "/")) for f in files]
    components = [n for n in names if re.search(r"component|widget|view", n.name, re.IGNORECASE)]
    services = [n for n in names if re.search(r"service|api|controller", n.name, re.IGNORECASE)]
    docs = [n for n in names if n.suffix.lower() in (".md", ".rst", ".txt")]
    main = [n for n in names if path_type(str(n)) not in ("test", "docs")]

    if commit_type == "feat":
        if components:
            return f"add new {components[0].name.split('.')[0]} component"
        if services:
            return f"implement {services[0].name.split('.')[0]} service"
        return "add new functionality"
    if commit_type == "fix":
        return f"resolve issue in {main[0].name if main else 'application'}"
    if commit_type == "docs":
        if len(docs) == 1:
            return f"update {docs[0].name}"
        return f"update documentation ({len(files)} files)"
    fixed = {
        "style": "update styling and formatting",
        "refactor": "refactor code structure",
        "test": "add or update tests",
        "build": "update build configuration",
        "ci": "update CI configuration",
    }
    if commit_type in fixed:
        return fixed[commit_type]
    return f"update {len(files)} file{'s' if len(files) != 1 else ''}"


def suggest_commit_type(staged_files: Iterable[str], text: str = "") -> CommitSuggestion:
    """Suggest a conventional commit type for staged changes.

    Every path counts once, for the first type in PATH_RULES it matches.
    Keywords found in ``text`` (typically the rejected message) add to
    the score at a lower weight. Ties go to the type listed first in
    TYPE_ORDER.

    Args:
        staged_files: Repository-relative paths
        text: Free text to scan for keywords

    Returns:
        CommitSuggestion; ``chore`` with zero confidence when there is
        nothing to go on
    """
    files = [f for f in staged_files if f.strip()]
    path_hits = dict.fromkeys(TYPE_ORDER, 0)
    matched: dict[str, list[str]] = {t: [] for t in TYPE_ORDER}
    for path in files:
        commit_type = path_type(path)
        if commit_type is not None:
            path_hits[commit_type] += 1
            matched[commit_type].append(path)

    words = keyword_counts(text)
    scores = {
        t: path_hits[t] * PATH_WEIGHT + words[t] * 0.5 * KEYWORD_WEIGHT for t in TYPE_ORDER
    }
    best = max(TYPE_ORDER, key=lambda t: (scores[t], -TYPE_ORDER.index(t)))

    if scores[best] == 0:
        if not files:
            return CommitSuggestion(
                "chore", 0.0, "no staged changes", "update project files", scores
            )
        return CommitSuggestion(
            "feat",
            0.4,
            "no known file pattern; assuming feature work",
            describe_change("feat", files),
            scores,
        )

    reasons = []
    if matched[best]:
        reasons.append(f"{len(matched[best])} of {len(files)} staged file(s) look like {best}")
    if words[best]:
        reasons.append(f"{words[best]} {best} keyword(s) in the message")
    confidence = min(path_hits[best] / max(len(files), 1) + words[best] * 0.1, 1.0)
    return CommitSuggestion(
        best,
        round(confidence, 2),
        "; ".join(reasons),
        describe_change(best, matched[best] or files),
        scores,
    )
