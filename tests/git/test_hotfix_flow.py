"""Tests for the hotfix workflow."""

from pathlib import Path

import pytest

from gitflow_core.exceptions import BranchInProgressError, RemoteBranchExistsError
from gitflow_core.flow import GitFlow


def test_hotfix_starts_from_master(flow: GitFlow, temp_repo: Path, commit_file) -> None:
    commit_file(temp_repo, "wip.txt", "unreleased\n")
    master_sha = flow.repository.resolve("master")

    assert flow.hotfix_start("1.0.1") == "hotfix/1.0.1"

    assert flow.repository.resolve("hotfix/1.0.1") == master_sha
    assert (temp_repo / "wip.txt").exists() is False


def test_only_one_hotfix(flow: GitFlow, temp_repo: Path, run_git) -> None:
    flow.hotfix_start("1.0.1")
    run_git(temp_repo, "checkout", "develop")

    with pytest.raises(BranchInProgressError) as exc_info:
        flow.hotfix_start("1.0.2")

    assert exc_info.value.kind == "hotfix"


def test_hotfix_finish(flow: GitFlow, temp_repo: Path, run_git, commit_file) -> None:
    flow.hotfix_start("1.0.1")
    fix_sha = commit_file(temp_repo, "fix.py", "fixed = True\n", "Fix crash on startup")

    result = flow.hotfix_finish("1.0.1")

    assert result.targets == ["master", "develop"]
    assert result.tag == "1.0.1"
    assert flow.repository.is_ancestor(fix_sha, "master")
    assert flow.repository.is_ancestor(fix_sha, "develop")
    assert run_git(temp_repo, "tag", "-l", "--format=%(contents:subject)", "1.0.1") == "Hotfix 1.0.1"
    assert flow.repository.local_branch_exists("hotfix/1.0.1") is False
    assert flow.repository.current_branch() == "develop"


def test_hotfix_finish_keeps_develop_work(flow: GitFlow, temp_repo: Path, commit_file) -> None:
    develop_sha = commit_file(temp_repo, "feature.py", "feature = 1\n")
    flow.hotfix_start("1.0.1")
    commit_file(temp_repo, "fix.py", "fixed = True\n")

    flow.hotfix_finish("1.0.1")

    assert flow.repository.is_ancestor(develop_sha, "develop")
    assert flow.repository.is_ancestor(develop_sha, "master") is False


def test_publish_refuses_existing_remote_branch(
    flow: GitFlow, temp_repo: Path, other_clone, run_git, commit_file
) -> None:
    flow.hotfix_start("y")
    collaborator = other_clone()
    run_git(collaborator, "checkout", "-b", "hotfix/y")
    commit_file(collaborator, "theirs.py", "theirs\n")
    run_git(collaborator, "push", "origin", "hotfix/y")

    with pytest.raises(RemoteBranchExistsError) as exc_info:
        flow.hotfix_publish("y")

    error = exc_info.value
    assert str(error).startswith("Remote branch 'origin/hotfix/y' already exists")
    assert error.completed_steps == ["fetched origin"]
    assert flow.repository.tracking_link("hotfix/y") is None
    assert flow.repository.current_branch() == "hotfix/y"
