"""Tests for support branches."""

from pathlib import Path

import pytest

from gitflow_core.enums import Phase, WorkflowKind
from gitflow_core.exceptions import UnsupportedPhaseError
from gitflow_core.flow import GitFlow


def test_support_from_release_tag(flow: GitFlow, temp_repo: Path, commit_file) -> None:
    flow.release_start("1.0")
    commit_file(temp_repo, "VERSION", "1.0\n")
    flow.release_finish("1.0")
    tagged_sha = flow.repository.resolve("1.0")
    commit_file(temp_repo, "next.py", "next = 2\n")

    branch = flow.support_start("1.x", start_point="1.0")

    assert branch == "support/1.x"
    assert flow.repository.resolve("support/1.x") == tagged_sha
    assert flow.repository.current_branch() == "support/1.x"


def test_support_defaults_to_master(flow: GitFlow) -> None:
    flow.support_start("legacy")

    assert flow.repository.resolve("support/legacy") == flow.repository.resolve("master")


def test_several_support_branches(flow: GitFlow, temp_repo: Path, commit_file) -> None:
    flow.support_start("1.x")
    commit_file(temp_repo, "patch.txt", "patch\n")

    assert flow.support_start("2.x") == "support/2.x"


@pytest.mark.parametrize("phase", [Phase.PUBLISH, Phase.FINISH])
def test_support_only_starts(flow: GitFlow, phase: Phase) -> None:
    with pytest.raises(UnsupportedPhaseError) as exc_info:
        flow.command(WorkflowKind.SUPPORT, phase, "1.x")

    assert exc_info.value.phase == phase.value
