"""Per-kind workflow policy table.

Every workflow kind runs through the same command state machine; the
differences between kinds are data: where a branch starts, which integration
branches a finish merges into, whether master gets tagged, and whether only
one branch of the kind may be in progress at a time.
"""

from dataclasses import dataclass
from enum import Enum

from gitflow_core.config.settings import FlowConfiguration
from gitflow_core.enums import Phase, WorkflowKind
from gitflow_core.exceptions import UnsupportedPhaseError


class IntegrationBranch(str, Enum):
    """Symbolic integration branch, resolved through FlowConfiguration."""

    MASTER = "master"
    DEVELOP = "develop"

    def resolve(self, config: FlowConfiguration) -> str:
        if self is IntegrationBranch.MASTER:
            return config.master_branch
        return config.develop_branch


@dataclass(frozen=True)
class KindPolicy:
    """Behaviour of one workflow kind.

    Attributes:
        start_from: Integration branch a new branch is created from
        merge_targets: Integration branches merged into on finish, in order
        tag_on_finish: Tag master after merging into it
        single_active: Only one branch of this kind may exist at a time
        no_ff: Always create merge commits on finish
        phases: Phases this kind supports
    """

    start_from: IntegrationBranch
    merge_targets: tuple[IntegrationBranch, ...]
    tag_on_finish: bool
    single_active: bool
    no_ff: bool
    phases: frozenset[Phase]

    def require_phase(self, kind: WorkflowKind, phase: Phase) -> None:
        """Raise UnsupportedPhaseError unless this kind supports ``phase``."""
        if phase not in self.phases:
            raise UnsupportedPhaseError(kind.value, phase.value)


ALL_PHASES = frozenset(Phase)

POLICIES: dict[WorkflowKind, KindPolicy] = {
    WorkflowKind.FEATURE: KindPolicy(
        start_from=IntegrationBranch.DEVELOP,
        merge_targets=(IntegrationBranch.DEVELOP,),
        tag_on_finish=False,
        single_active=False,
        no_ff=False,
        phases=ALL_PHASES,
    ),
    WorkflowKind.RELEASE: KindPolicy(
        start_from=IntegrationBranch.MASTER,
        merge_targets=(IntegrationBranch.MASTER, IntegrationBranch.DEVELOP),
        tag_on_finish=True,
        single_active=True,
        no_ff=True,
        phases=ALL_PHASES,
    ),
    WorkflowKind.HOTFIX: KindPolicy(
        start_from=IntegrationBranch.MASTER,
        merge_targets=(IntegrationBranch.MASTER, IntegrationBranch.DEVELOP),
        tag_on_finish=True,
        single_active=True,
        no_ff=True,
        phases=ALL_PHASES,
    ),
    # Support branches live forever; they are started but never published or finished here
    WorkflowKind.SUPPORT: KindPolicy(
        start_from=IntegrationBranch.MASTER,
        merge_targets=(),
        tag_on_finish=False,
        single_active=False,
        no_ff=False,
        phases=frozenset({Phase.START}),
    ),
}


def policy_for(kind: WorkflowKind) -> KindPolicy:
    return POLICIES[kind]
