"""Tests for GitVersionControl against real repositories."""

from pathlib import Path

import pytest

from conftest import git

from autokit.exceptions import GitError
from autokit.git import GitVersionControl


@pytest.fixture
def repo(git_repo: Path) -> Path:
    (git_repo / "README.md").write_text("# demo\n")
    git(git_repo, "add", ".")
    git(git_repo, "commit", "-m", "chore: initial commit")
    return git_repo


@pytest.fixture
def remote(tmp_path: Path, repo: Path) -> Path:
    bare = tmp_path / "remote.git"
    git(tmp_path, "init", "--bare", "-b", "main", str(bare))
    git(repo, "remote", "add", "origin", str(bare))
    return bare


class TestQueries:
    def test_status_lists_untracked_and_modified(self, repo: Path) -> None:
        (repo / "README.md").write_text("# changed\n")
        (repo / "src").mkdir()
        (repo / "src" / "new.py").write_text("")

        assert sorted(GitVersionControl(repo).status()) == ["README.md", "src/new.py"]

    def test_clean_status(self, repo: Path) -> None:
        assert GitVersionControl(repo).status() == []

    def test_staged_files_exclude_deletions(self, repo: Path) -> None:
        (repo / "app.py").write_text("x = 1\n")
        git(repo, "add", "app.py")
        git(repo, "rm", "-q", "README.md")

        assert GitVersionControl(repo).staged_files() == ["app.py"]

    def test_log_oldest_first_with_bodies(self, repo: Path) -> None:
        git(repo, "commit", "--allow-empty", "-m", "fix: handle empty input")
        git(repo, "commit", "--allow-empty", "-m", "feat!: drop v1\n\nBREAKING CHANGE: gone")

        entries = GitVersionControl(repo).log()

        assert [e.message.splitlines()[0] for e in entries] == [
            "chore: initial commit",
            "fix: handle empty input",
            "feat!: drop v1",
        ]
        assert entries[-1].message.endswith("BREAKING CHANGE: gone")
        assert len(entries[0].hash) == 40

    def test_log_range_after_tag(self, repo: Path) -> None:
        git(repo, "tag", "v1.0.0")
        git(repo, "commit", "--allow-empty", "-m", "fix: handle empty input")

        vcs = GitVersionControl(repo)

        assert vcs.latest_tag("v") == "v1.0.0"
        assert [e.message for e in vcs.log("v1.0.0..HEAD")] == ["fix: handle empty input"]

    def test_log_empty_repository(self, git_repo: Path) -> None:
        assert GitVersionControl(git_repo).log() == []

    def test_latest_tag_ignores_other_prefixes(self, repo: Path) -> None:
        git(repo, "tag", "docs-site")
        git(repo, "tag", "release-1.0.0")

        vcs = GitVersionControl(repo)

        assert vcs.latest_tag("v") is None
        assert vcs.latest_tag("release-") == "release-1.0.0"

    def test_bad_range_raises(self, repo: Path) -> None:
        with pytest.raises(GitError, match="Failed to read commits"):
            GitVersionControl(repo).log("v9.9.9..HEAD")

    def test_current_branch(self, repo: Path) -> None:
        assert GitVersionControl(repo).current_branch() == "main"


class TestOperations:
    def test_add_commit_tag(self, repo: Path) -> None:
        vcs = GitVersionControl(repo)
        (repo / "VERSION").write_text("1.1.0\n")

        vcs.add([Path("VERSION")])
        sha = vcs.commit("chore(release): v1.1.0")
        vcs.tag("v1.1.0", "Release v1.1.0")

        assert sha == git(repo, "rev-parse", "HEAD")
        assert vcs.tag_exists("v1.1.0")
        assert not vcs.tag_exists("v9.9.9")
        assert git(repo, "cat-file", "-t", "v1.1.0") == "tag"

    def test_commit_without_changes_fails(self, repo: Path) -> None:
        with pytest.raises(GitError, match="Failed to create git commit"):
            GitVersionControl(repo).commit("fix: nothing staged here")

    def test_duplicate_tag_fails(self, repo: Path) -> None:
        vcs = GitVersionControl(repo)
        vcs.tag("v1.0.0")

        with pytest.raises(GitError):
            vcs.tag("v1.0.0")

    def test_push_branch_and_tag(self, repo: Path, remote: Path) -> None:
        vcs = GitVersionControl(repo)
        vcs.tag("v1.0.0")

        vcs.push("origin", branch="main", tag="v1.0.0")

        assert git(remote, "tag", "--list") == "v1.0.0"
        assert git(remote, "rev-parse", "main") == git(repo, "rev-parse", "HEAD")

    def test_push_unknown_remote(self, repo: Path) -> None:
        with pytest.raises(GitError, match="Failed to push"):
            GitVersionControl(repo).push("nowhere", branch="main")
