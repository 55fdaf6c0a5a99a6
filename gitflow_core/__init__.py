"""Git-flow branch-workflow engine.

Automates the git-flow branching model: feature, release, hotfix and support
branches with start, publish and finish operations that merge into and out of
the develop and master integration branches and tag releases.

Example:
    >>> from gitflow_core import GitFlow
    >>> flow = GitFlow.init("/path/to/repo")
    >>> flow.feature_start("login")
    'feature/login'
    >>> flow.feature_finish("login").targets
    ['develop']

Error Handling:
    Every failure is a subclass of GitFlowError carrying a message, an
    optional hint and the mutations already applied (``completed_steps``).
"""

from gitflow_core.config.settings import EngineSettings, FlowConfiguration, InitContext
from gitflow_core.engine.commands import FinishOptions, StartOptions, WorkflowCommand
from gitflow_core.engine.reporter import CommandRecord, LogReporter, Reporter
from gitflow_core.enums import BranchRelation, Outcome, Phase, WorkflowKind
from gitflow_core.exceptions import (
    AlreadyInitializedError,
    BranchesDivergedError,
    BranchesNotEqualError,
    BranchInProgressError,
    BranchStateError,
    CommandAlreadyCalledError,
    ConfigurationError,
    DirtyWorkingTreeError,
    GitFlowError,
    InvalidBranchNameError,
    LocalBranchExistsError,
    LocalBranchMissingError,
    LocalStorageError,
    MergeConflictError,
    NotGitRepositoryError,
    NotInitializedError,
    RemoteBranchExistsError,
    RemoteBranchMissingError,
    RepositoryOperationError,
    SameBranchError,
    TagExistsError,
    TransportError,
    UnsupportedPhaseError,
)
from gitflow_core.flow import GitFlow
from gitflow_core.git.models import FinishResult, MergeResult, RemoteTrackingLink
from gitflow_core.git.repository import GitRepository

__version__ = "0.1.0"

__all__ = [
    # Main API
    "GitFlow",
    "GitRepository",
    "WorkflowCommand",
    "StartOptions",
    "FinishOptions",
    # Configuration
    "EngineSettings",
    "FlowConfiguration",
    "InitContext",
    # Models
    "FinishResult",
    "MergeResult",
    "RemoteTrackingLink",
    "CommandRecord",
    "LogReporter",
    "Reporter",
    # Enums
    "WorkflowKind",
    "Phase",
    "Outcome",
    "BranchRelation",
    # Exceptions
    "GitFlowError",
    "ConfigurationError",
    "NotGitRepositoryError",
    "NotInitializedError",
    "AlreadyInitializedError",
    "SameBranchError",
    "DirtyWorkingTreeError",
    "InvalidBranchNameError",
    "BranchStateError",
    "LocalBranchMissingError",
    "LocalBranchExistsError",
    "RemoteBranchMissingError",
    "RemoteBranchExistsError",
    "BranchInProgressError",
    "BranchesDivergedError",
    "BranchesNotEqualError",
    "TagExistsError",
    "MergeConflictError",
    "RepositoryOperationError",
    "TransportError",
    "LocalStorageError",
    "CommandAlreadyCalledError",
    "UnsupportedPhaseError",
]
