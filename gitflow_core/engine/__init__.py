"""Branch-workflow engine.

Key Components:
    - WorkflowCommand: start, publish and finish for every workflow kind
    - InitializationCommand: bootstraps the git-flow configuration
    - PreconditionChecker: gates evaluated before any mutation
    - POLICIES: per-kind start points, merge targets and tagging rules
    - LogReporter: default audit trail of command outcomes
"""

from gitflow_core.engine.commands import FinishOptions, StartOptions, WorkflowCommand
from gitflow_core.engine.init import InitializationCommand
from gitflow_core.engine.policy import POLICIES, IntegrationBranch, KindPolicy, policy_for
from gitflow_core.engine.preconditions import PreconditionChecker
from gitflow_core.engine.reporter import CommandRecord, LogReporter, Reporter

__all__ = [
    "WorkflowCommand",
    "StartOptions",
    "FinishOptions",
    "InitializationCommand",
    "PreconditionChecker",
    "POLICIES",
    "IntegrationBranch",
    "KindPolicy",
    "policy_for",
    "CommandRecord",
    "LogReporter",
    "Reporter",
]
