"""Exception hierarchy for the git-flow engine.

Every failure a workflow command can produce has its own exception class so
callers can dispatch with ``except`` clauses. Precondition failures are raised
before any repository mutation and are always safe to retry once the
underlying condition is fixed. Failures raised part-way through a mutation
sequence are never rolled back; they carry ``completed_steps`` describing what
was already applied so the caller can decide on manual remediation.

Exception Hierarchy:
    GitFlowError (base)
    ├── ConfigurationError
    ├── NotGitRepositoryError
    ├── NotInitializedError
    ├── AlreadyInitializedError
    ├── SameBranchError
    ├── DirtyWorkingTreeError
    ├── InvalidBranchNameError
    ├── BranchStateError
    │   ├── LocalBranchMissingError
    │   ├── LocalBranchExistsError
    │   ├── RemoteBranchMissingError
    │   ├── RemoteBranchExistsError
    │   ├── BranchInProgressError
    │   ├── BranchesDivergedError
    │   └── BranchesNotEqualError
    ├── TagExistsError
    ├── MergeConflictError
    ├── RepositoryOperationError
    │   ├── TransportError
    │   └── LocalStorageError
    ├── CommandAlreadyCalledError
    └── UnsupportedPhaseError

Example Usage:
    >>> from gitflow_core.exceptions import DirtyWorkingTreeError
    >>> try:
    ...     flow.feature_start("login")
    ... except DirtyWorkingTreeError as e:
    ...     print(e.hint)
    Commit or stash your changes before running this command.
"""


class GitFlowError(Exception):
    """Base exception for all git-flow errors.

    Attributes:
        message: Human-readable error description
        hint: Optional hint for resolution
        completed_steps: Repository mutations already applied when the error
            was raised. Empty for precondition failures.
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            hint: Optional hint for resolution
        """
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.completed_steps: list[str] = []

    def __str__(self) -> str:
        """Format error message with hint.

        Returns:
            Formatted error message with optional hint
        """
        if self.hint:
            return f"{self.message}\n\nHint: {self.hint}"
        return self.message


class ConfigurationError(GitFlowError):
    """Invalid or unreadable configuration (YAML context files, settings)."""

    pass


class NotGitRepositoryError(GitFlowError):
    """Raised when a directory is not a Git repository.

    Attributes:
        path: Path to the directory that is not a Git repository
    """

    def __init__(self, path: str) -> None:
        """Initialize exception.

        Args:
            path: Path to the directory
        """
        super().__init__(
            message=f"Not a Git repository: {path}",
            hint="Run 'git init' or use GitFlow.init() to create one.",
        )
        self.path = path


class NotInitializedError(GitFlowError):
    """Raised when git-flow has not been initialized for the repository."""

    def __init__(self) -> None:
        """Initialize exception."""
        super().__init__(
            message="Git flow is not initialized in this repository",
            hint="Run GitFlow.init() on the repository first.",
        )


class AlreadyInitializedError(GitFlowError):
    """Raised when initializing a repository that is already initialized."""

    def __init__(self) -> None:
        """Initialize exception."""
        super().__init__(
            message="Git flow is already initialized in this repository",
            hint="Use force=True to overwrite the existing configuration.",
        )


class SameBranchError(GitFlowError):
    """Raised when master and develop resolve to the same branch.

    Attributes:
        branch: The branch name used for both
    """

    def __init__(self, branch: str) -> None:
        """Initialize exception.

        Args:
            branch: The branch name used for both integration branches
        """
        super().__init__(
            message=f"Master and develop branches must differ (both are '{branch}')",
            hint="Choose a different name for the develop branch.",
        )
        self.branch = branch


class DirtyWorkingTreeError(GitFlowError):
    """Raised when the working tree has uncommitted changes or conflicts.

    Attributes:
        untracked_conflicts: Untracked paths the command would overwrite
    """

    def __init__(self, untracked_conflicts: list[str] | None = None) -> None:
        """Initialize exception.

        Args:
            untracked_conflicts: Untracked paths tracked by a branch the
                command would check out or merge
        """
        self.untracked_conflicts = list(untracked_conflicts or [])
        if self.untracked_conflicts:
            super().__init__(
                message=f"Untracked files would be overwritten: {', '.join(self.untracked_conflicts)}",
                hint="Move, commit or remove these files before running this command.",
            )
        else:
            super().__init__(
                message="Working tree contains uncommitted changes",
                hint="Commit or stash your changes before running this command.",
            )


class InvalidBranchNameError(GitFlowError):
    """Raised when a branch name is empty or not a legal git ref.

    Attributes:
        name: The rejected branch name
    """

    def __init__(self, name: str) -> None:
        """Initialize exception.

        Args:
            name: The rejected branch name
        """
        super().__init__(
            message=f"Invalid branch name: '{name}'",
            hint="Branch names must be non-empty and valid git refs (see git check-ref-format).",
        )
        self.name = name


class BranchStateError(GitFlowError):
    """Base class for errors about the presence or position of a branch.

    Attributes:
        branch: The branch the check was about
    """

    def __init__(self, message: str, branch: str, hint: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            branch: The branch the check was about
            hint: Optional hint for resolution
        """
        super().__init__(message, hint=hint)
        self.branch = branch


class LocalBranchMissingError(BranchStateError):
    """Local branch does not exist."""

    def __init__(self, branch: str) -> None:
        super().__init__(f"Local branch '{branch}' does not exist", branch)


class LocalBranchExistsError(BranchStateError):
    """Local branch already exists."""

    def __init__(self, branch: str) -> None:
        super().__init__(
            f"Local branch '{branch}' already exists",
            branch,
            hint="Pick a different name or finish the existing branch.",
        )


class RemoteBranchMissingError(BranchStateError):
    """Remote branch does not exist on the configured remote.

    Attributes:
        remote: Remote name that was checked
    """

    def __init__(self, branch: str, remote: str) -> None:
        super().__init__(f"Remote branch '{remote}/{branch}' does not exist", branch)
        self.remote = remote


class RemoteBranchExistsError(BranchStateError):
    """Remote branch already exists on the configured remote.

    Attributes:
        remote: Remote name that was checked
    """

    def __init__(self, branch: str, remote: str) -> None:
        super().__init__(
            f"Remote branch '{remote}/{branch}' already exists",
            branch,
            hint="Publishing never overwrites a remote branch.",
        )
        self.remote = remote


class BranchInProgressError(BranchStateError):
    """Another branch of a single-active kind is already started.

    Attributes:
        kind: Workflow kind name (release or hotfix)
    """

    def __init__(self, kind: str, branch: str) -> None:
        super().__init__(
            f"{kind.capitalize()} already started: '{branch}'",
            branch,
            hint=f"Finish '{branch}' before starting a new {kind}.",
        )
        self.kind = kind


class BranchesDivergedError(BranchStateError):
    """Local and remote branches have diverged.

    Attributes:
        other: The branch compared against
    """

    def __init__(self, branch: str, other: str) -> None:
        super().__init__(
            f"Branches '{branch}' and '{other}' have diverged",
            branch,
            hint=f"Merge or rebase '{other}' into '{branch}' first.",
        )
        self.other = other


class BranchesNotEqualError(BranchStateError):
    """Two branches were required to point at the same commit.

    Attributes:
        other: The branch compared against
    """

    def __init__(self, branch: str, other: str) -> None:
        super().__init__(f"Branches '{branch}' and '{other}' differ", branch)
        self.other = other


class TagExistsError(GitFlowError):
    """Raised when the tag a finish would create already exists.

    Attributes:
        tag: The tag name
    """

    def __init__(self, tag: str) -> None:
        super().__init__(
            message=f"Tag '{tag}' already exists",
            hint="Delete the tag or finish with no_tag=True.",
        )
        self.tag = tag


class MergeConflictError(GitFlowError):
    """Merge stopped with conflicts.

    The merge is left in its conflicted state in the working tree for manual
    resolution; it is not aborted.

    Attributes:
        target: Integration branch being merged into
        source: Workflow branch being merged
        paths: Conflicting file paths
    """

    def __init__(self, target: str, source: str, paths: list[str]) -> None:
        """Initialize exception.

        Args:
            target: Integration branch being merged into
            source: Workflow branch being merged
            paths: Conflicting file paths
        """
        listed = ", ".join(paths) if paths else "unknown paths"
        super().__init__(
            message=f"Merge of '{source}' into '{target}' has conflicts: {listed}",
            hint="Resolve the conflicts and commit; the remaining finish steps must be run manually.",
        )
        self.target = target
        self.source = source
        self.paths = paths


class RepositoryOperationError(GitFlowError):
    """A repository operation failed for a reason other than a gate.

    Attributes:
        operation: Name of the failed operation (e.g. 'checkout')
    """

    def __init__(self, message: str, operation: str | None = None, hint: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            operation: Name of the failed operation
            hint: Optional hint for resolution
        """
        super().__init__(message, hint=hint)
        self.operation = operation


class TransportError(RepositoryOperationError):
    """Network or I/O failure while talking to a remote (fetch, push)."""

    pass


class LocalStorageError(RepositoryOperationError):
    """Failure reading or writing the repository's config storage."""

    pass


class CommandAlreadyCalledError(GitFlowError):
    """Raised when a workflow command instance is called twice."""

    def __init__(self, command: str) -> None:
        super().__init__(
            message=f"Command '{command}' has already been called",
            hint="Create a new command for each invocation.",
        )
        self.command = command


class UnsupportedPhaseError(GitFlowError):
    """Raised when a workflow kind does not support a phase (e.g. support finish)."""

    def __init__(self, kind: str, phase: str) -> None:
        super().__init__(message=f"{kind} branches do not support '{phase}'")
        self.kind = kind
        self.phase = phase
