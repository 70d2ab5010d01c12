"""Tests for git state validators.

Tests the following validators:
- GitCleanValidator: Validates working directory cleanliness
- GitBranchValidator: Validates current branch matches the release branch

These tests use the in-memory FakeVCS instead of a real repository.
"""

from autokit.config import AutomationConfig
from autokit.exceptions import GitError
from autokit.validators import ValidationSeverity, ValidatorRegistry
from autokit.validators.git import GitBranchValidator, GitCleanValidator


class TestGitCleanValidator:
    """Tests for GitCleanValidator."""

    def test_clean_tree_passes(self, make_context) -> None:
        results = GitCleanValidator().validate(make_context())

        assert len(results) == 1
        assert results[0].passed
        assert results[0].message == "Working directory is clean"

    def test_dirty_tree_fails(self, make_context, vcs) -> None:
        vcs.dirty = ["src/app.py", "README.md"]

        results = GitCleanValidator().validate(make_context())

        assert results[0].is_error
        assert "src/app.py" in (results[0].details or "")
        assert results[0].fix_command == "git status"

    def test_automation_files_ignored(self, make_context, vcs) -> None:
        """State files written by the tool itself do not make the tree dirty."""
        vcs.dirty = [".automation-profile.json"]

        results = GitCleanValidator().validate(
            make_context(ignored_paths=(".automation-profile.json",))
        )

        assert results[0].passed

    def test_long_file_list_truncated(self, make_context, vcs) -> None:
        vcs.dirty = [f"file{i}.txt" for i in range(15)]

        results = GitCleanValidator().validate(make_context())

        assert "... and 5 more" in (results[0].details or "")

    def test_git_failure_reported(self, make_context, vcs, monkeypatch) -> None:
        def broken_status() -> list[str]:
            raise GitError("git status failed")

        monkeypatch.setattr(vcs, "status", broken_status)

        results = GitCleanValidator().validate(make_context())

        assert results[0].message == "Failed to check git status"
        assert results[0].severity is ValidationSeverity.ERROR


MAIN_ONLY = {"git": {"branch": "main"}}


class TestGitBranchValidator:
    """Tests for GitBranchValidator."""

    def test_release_branch_passes(self, make_context) -> None:
        config = AutomationConfig.model_validate(MAIN_ONLY)

        results = GitBranchValidator().validate(make_context(config=config))

        assert results[0].passed
        assert "main" in results[0].message

    def test_other_branch_fails(self, make_context, vcs) -> None:
        vcs.branch = "feature/export"
        config = AutomationConfig.model_validate(MAIN_ONLY)

        results = GitBranchValidator().validate(make_context(config=config))

        assert results[0].is_error
        assert results[0].fix_command == "git checkout main"

    def test_skipped_without_configured_branch(self, make_context) -> None:
        """Without a configured branch, any branch may release."""
        assert not GitBranchValidator().should_run(make_context())


class TestReleaseCategory:
    def test_results_tagged_with_check_name(self, make_context, vcs) -> None:
        vcs.dirty = ["src/app.py"]
        config = AutomationConfig.model_validate(MAIN_ONLY)

        results = ValidatorRegistry.run_category("release", make_context(config=config))

        assert [r.check for r in results] == ["git_clean", "git_branch"]
        assert [r.passed for r in results] == [False, True]
