"""Enumerations for workflow kinds, phases and reported outcomes."""

from enum import Enum


class WorkflowKind(str, Enum):
    """Kinds of workflow branch.

    The kind determines the branch prefix, the start point and the
    integration branches a finished branch merges into.
    """

    FEATURE = "feature"
    RELEASE = "release"
    HOTFIX = "hotfix"
    SUPPORT = "support"

    def __str__(self) -> str:
        return self.value


class Phase(str, Enum):
    """Lifecycle phase of a workflow branch."""

    START = "start"
    PUBLISH = "publish"
    FINISH = "finish"

    def __str__(self) -> str:
        return self.value


class Outcome(str, Enum):
    """Outcome recorded by the reporter for a command."""

    ATTEMPTED = "attempted"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class BranchRelation(str, Enum):
    """Relationship of one branch's tip to another's."""

    EQUAL = "equal"
    AHEAD = "ahead"
    BEHIND = "behind"
    DIVERGED = "diverged"

    def __str__(self) -> str:
        return self.value
