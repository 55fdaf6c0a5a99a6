"""Pytest configuration and shared fixtures.

Workflow tests run real git commands. Every repository gets a bare "remote"
next to it so publish, fetch and push can be exercised without a network.
"""

import subprocess
from pathlib import Path

import pytest

from gitflow_core.engine.reporter import LogReporter
from gitflow_core.flow import GitFlow
from gitflow_core.git.repository import GitRepository


def _git(cwd: Path, *args: str) -> str:
    """Run a git command in ``cwd`` and return its stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


def _commit(repo_path: Path, filename: str, content: str, message: str | None = None) -> str:
    """Write ``filename`` in the working copy, commit it and return the SHA."""
    target = repo_path / filename
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content)
    _git(repo_path, "add", filename)
    _git(repo_path, "commit", "-m", message or f"Update {filename}")
    return _git(repo_path, "rev-parse", "HEAD")


@pytest.fixture
def run_git():
    """Factory fixture: ``run_git(cwd, *args)`` runs git and returns stdout."""
    return _git


@pytest.fixture
def commit_file():
    """Factory fixture: ``commit_file(repo_path, filename, content, message=None)``.

    Writes the file, commits it and returns the new commit SHA.
    """
    return _commit

@pytest.fixture(autouse=True)
def git_identity(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    """Give git a deterministic identity and isolate it from user config."""
    global_config = tmp_path_factory.mktemp("gitconfig") / "config"
    global_config.write_text("")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    for name in ("GITFLOW_REMOTE", "GITFLOW_LOG_LEVEL", "GITFLOW_DEFAULT_ORIGIN_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def remote_repo(tmp_path: Path) -> Path:
    """Bare repository acting as 'origin'."""
    remote = tmp_path / "remote.git"
    subprocess.run(
        ["git", "init", "--bare", "-b", "master", str(remote)],
        check=True,
        capture_output=True,
    )
    return remote


@pytest.fixture
def temp_repo(tmp_path: Path, remote_repo: Path) -> Path:
    """Working copy on master with one commit, pushed to ``remote_repo``."""
    work = tmp_path / "work"
    work.mkdir()
    _git(work, "init", "-b", "master")
    _commit(work, "README.md", "# Test Repository\n", "Initial commit")
    _git(work, "remote", "add", "origin", str(remote_repo))
    _git(work, "push", "origin", "master")
    _git(work, "fetch", "origin")
    return work


@pytest.fixture
def other_clone(tmp_path: Path, remote_repo: Path):
    """Factory for a second clone of the remote, simulating a collaborator."""

    def _clone() -> Path:
        clone = tmp_path / "collaborator"
        subprocess.run(
            ["git", "clone", str(remote_repo), str(clone)],
            check=True,
            capture_output=True,
        )
        return clone

    return _clone


@pytest.fixture
def reporter() -> LogReporter:
    return LogReporter()


@pytest.fixture
def flow(temp_repo: Path, reporter: LogReporter) -> GitFlow:
    """GitFlow session on an initialized ``temp_repo`` with develop checked out."""
    return GitFlow.init(temp_repo, reporter=reporter)


@pytest.fixture
def repository(temp_repo: Path) -> GitRepository:
    return GitRepository.open(temp_repo)
