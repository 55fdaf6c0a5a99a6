"""Tests for git-flow initialization and session construction."""

from pathlib import Path
from unittest.mock import patch

import pytest

from gitflow_core.config.settings import EngineSettings, FlowConfiguration, InitContext
from gitflow_core.engine.init import InitializationCommand
from gitflow_core.engine.reporter import LogReporter
from gitflow_core.enums import Outcome, WorkflowKind
from gitflow_core.exceptions import (
    AlreadyInitializedError,
    ConfigurationError,
    LocalBranchMissingError,
    LocalStorageError,
    SameBranchError,
)
from gitflow_core.flow import GitFlow
from gitflow_core.git.repository import GitRepository


class TestInitExistingHistory:
    """Initialization of a repository that already has commits."""

    def test_creates_develop_from_master(self, temp_repo: Path, run_git) -> None:
        master_sha = run_git(temp_repo, "rev-parse", "master")

        flow = GitFlow.init(temp_repo)

        assert flow.repository.current_branch() == "develop"
        assert flow.repository.resolve("develop") == master_sha
        assert flow.is_initialized() is True

    def test_persists_configuration_keys(self, temp_repo: Path, run_git) -> None:
        GitFlow.init(temp_repo, context=InitContext(versiontag="v"))

        assert run_git(temp_repo, "config", "gitflow.branch.master") == "master"
        assert run_git(temp_repo, "config", "gitflow.branch.develop") == "develop"
        assert run_git(temp_repo, "config", "gitflow.prefix.feature") == "feature/"
        assert run_git(temp_repo, "config", "gitflow.prefix.release") == "release/"
        assert run_git(temp_repo, "config", "gitflow.prefix.hotfix") == "hotfix/"
        assert run_git(temp_repo, "config", "gitflow.prefix.support") == "support/"
        assert run_git(temp_repo, "config", "gitflow.prefix.versiontag") == "v"
        assert run_git(temp_repo, "config", "gitflow.initialized") == "true"

    def test_accessors(self, temp_repo: Path) -> None:
        flow = GitFlow.init(temp_repo, context=InitContext(develop="dev", feature="feat-", versiontag="v"))

        assert flow.master_branch == "master"
        assert flow.develop_branch == "dev"
        assert flow.prefix(WorkflowKind.FEATURE) == "feat-"
        assert flow.prefix(WorkflowKind.RELEASE) == "release/"
        assert flow.version_tag_prefix == "v"

    def test_keeps_existing_develop(self, temp_repo: Path, run_git, commit_file) -> None:
        run_git(temp_repo, "checkout", "-b", "develop")
        develop_sha = commit_file(temp_repo, "dev.txt", "dev\n")
        run_git(temp_repo, "checkout", "master")

        flow = GitFlow.init(temp_repo)

        assert flow.repository.resolve("develop") == develop_sha

    def test_master_missing(self, tmp_path: Path, run_git, commit_file) -> None:
        work = tmp_path / "trunk-only"
        work.mkdir()
        run_git(work, "init", "-b", "trunk")
        commit_file(work, "README.md", "# trunk\n")

        with pytest.raises(LocalBranchMissingError) as exc_info:
            GitFlow.init(work)

        assert exc_info.value.branch == "master"
        assert GitFlow.is_initialized_at(work) is False

    def test_master_from_remote(self, temp_repo: Path, run_git) -> None:
        run_git(temp_repo, "checkout", "-b", "scratch")
        run_git(temp_repo, "branch", "-D", "master")

        flow = GitFlow.init(temp_repo)

        assert flow.repository.local_branch_exists("master")
        link = flow.repository.tracking_link("master")
        assert link is not None
        assert link.remote_tracking_ref == "origin/master"

    def test_develop_from_remote(self, temp_repo: Path, run_git, commit_file) -> None:
        run_git(temp_repo, "checkout", "-b", "develop")
        develop_sha = commit_file(temp_repo, "dev.txt", "dev\n")
        run_git(temp_repo, "push", "origin", "develop")
        run_git(temp_repo, "checkout", "master")
        run_git(temp_repo, "branch", "-D", "develop")

        flow = GitFlow.init(temp_repo)

        assert flow.repository.resolve("develop") == develop_sha
        assert flow.repository.tracking_link("develop") is not None


class TestInitEmptyRepository:
    """Initialization of a directory without commits."""

    def test_creates_repository_and_branches(self, tmp_path: Path, run_git) -> None:
        target = tmp_path / "brand-new"

        flow = GitFlow.init(target)

        assert (target / ".git").is_dir()
        assert flow.repository.list_local_branches() == ["develop", "master"]
        assert flow.repository.resolve("develop") == flow.repository.resolve("master")
        assert flow.repository.current_branch() == "develop"
        assert run_git(target, "log", "-1", "--format=%s", "master") == "Initial commit"

    def test_custom_master_name(self, tmp_path: Path) -> None:
        flow = GitFlow.init(tmp_path / "custom", context=InitContext(master="main", develop="dev"))

        assert flow.repository.list_local_branches() == ["dev", "main"]

    def test_default_origin_url_added(self, tmp_path: Path, run_git) -> None:
        flow = GitFlow.init(tmp_path / "with-origin", default_origin_url="https://example.com/org/repo.git")

        assert flow.repository.has_remote("origin")
        assert run_git(tmp_path / "with-origin", "remote", "get-url", "origin") == "https://example.com/org/repo.git"

    def test_default_origin_url_from_settings(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GITFLOW_DEFAULT_ORIGIN_URL", "https://example.com/org/env.git")

        flow = GitFlow.init(tmp_path / "env-origin")

        assert flow.repository.has_remote("origin")

    def test_existing_origin_not_replaced(
        self, temp_repo: Path, remote_repo: Path, run_git
    ) -> None:
        GitFlow.init(temp_repo, default_origin_url="https://example.com/other.git")

        assert run_git(temp_repo, "remote", "get-url", "origin") == str(remote_repo)


class TestInitFailures:
    """Gates evaluated by initialization."""

    def test_already_initialized(self, flow: GitFlow, temp_repo: Path) -> None:
        with pytest.raises(AlreadyInitializedError):
            GitFlow.init(temp_repo)

    def test_force_overwrites(self, flow: GitFlow, temp_repo: Path) -> None:
        forced = GitFlow.force_init(temp_repo, context=InitContext(develop="dev", versiontag="v"))

        assert forced.develop_branch == "dev"
        assert forced.version_tag_prefix == "v"
        assert forced.repository.current_branch() == "dev"

    def test_interrupted_force_init_is_not_initialized(self, flow: GitFlow, temp_repo: Path) -> None:
        original = GitRepository.set_config

        def fail_on_develop(repository: GitRepository, key: str, value: str) -> None:
            if key == "gitflow.branch.develop":
                raise LocalStorageError("disk full", operation="config-set")
            original(repository, key, value)

        with patch.object(GitRepository, "set_config", autospec=True, side_effect=fail_on_develop):
            with pytest.raises(LocalStorageError):
                GitFlow.force_init(temp_repo, context=InitContext(master="master", develop="dev"))

        assert GitFlow.is_initialized_at(temp_repo) is False
        assert flow.is_initialized() is False

    def test_same_branch(self, tmp_path: Path) -> None:
        with pytest.raises(SameBranchError) as exc_info:
            GitFlow.init(tmp_path / "same", context=InitContext(master="main", develop="main"))

        assert exc_info.value.branch == "main"

    def test_same_branch_makes_no_commits(self, temp_repo: Path, run_git) -> None:
        before = run_git(temp_repo, "for-each-ref", "--format=%(refname)")

        with pytest.raises(SameBranchError):
            GitFlow.init(temp_repo, context=InitContext(master="master", develop="master"))

        assert run_git(temp_repo, "for-each-ref", "--format=%(refname)") == before

    def test_invalid_stored_configuration(self, temp_repo: Path, run_git) -> None:
        run_git(temp_repo, "config", "gitflow.branch.master", "same")
        run_git(temp_repo, "config", "gitflow.branch.develop", "same")
        run_git(temp_repo, "config", "gitflow.initialized", "true")

        with pytest.raises(ConfigurationError):
            GitFlow.init(temp_repo)

        flow = GitFlow.force_init(temp_repo)
        assert flow.develop_branch == "develop"


class TestSessions:
    """Tests for get, get_or_init and initialization checks."""

    def test_is_initialized_at(self, temp_repo: Path, tmp_path: Path) -> None:
        assert GitFlow.is_initialized_at(tmp_path / "not-a-repo") is False
        assert GitFlow.is_initialized_at(temp_repo) is False

        GitFlow.init(temp_repo)

        assert GitFlow.is_initialized_at(temp_repo) is True

    def test_get_does_not_initialize(self, temp_repo: Path) -> None:
        flow = GitFlow.get(temp_repo)

        assert flow.is_initialized() is False
        assert flow.repository.current_branch() == "master"

    def test_get_or_init(self, temp_repo: Path) -> None:
        first = GitFlow.get_or_init(temp_repo)
        second = GitFlow.get_or_init(temp_repo)

        assert first.is_initialized() is True
        assert second.develop_branch == "develop"

    def test_settings_remote(self, temp_repo: Path) -> None:
        flow = GitFlow.init(temp_repo, settings=EngineSettings(remote="upstream"))

        assert flow.remote == "upstream"

    def test_init_reports(self, temp_repo: Path) -> None:
        reporter = LogReporter()

        GitFlow.init(temp_repo, reporter=reporter)

        assert [r.outcome for r in reporter.for_command("init")] == [Outcome.ATTEMPTED, Outcome.SUCCEEDED]


def test_init_command_returns_configuration(repository: GitRepository) -> None:
    config = InitializationCommand(repository, InitContext(develop="dev")).call()

    assert isinstance(config, FlowConfiguration)
    assert config == FlowConfiguration.load(repository)


def test_failed_init_records_completed_steps(tmp_path: Path, run_git, commit_file) -> None:
    work = tmp_path / "no-master"
    work.mkdir()
    run_git(work, "init", "-b", "trunk")
    commit_file(work, "README.md", "# trunk\n")
    command = InitializationCommand(GitRepository.open(work), default_origin_url="https://example.com/org/repo.git")

    with pytest.raises(LocalBranchMissingError) as exc_info:
        command.call()

    assert exc_info.value.completed_steps == ["added remote origin"]
    assert GitFlow.is_initialized_at(work) is False
