"""Repository initialization for git-flow.

Initialization establishes the integration branches and persists the
FlowConfiguration that every workflow command reads.

- A repository with no commits gets an empty initial commit on master and
  develop created from it.
- A repository with history must have master, locally or on the remote (a
  local tracking branch is then created). Develop is taken from the local
  branch, the remote branch, or created from master's tip, in that order.

Example:
    >>> command = InitializationCommand(repository, InitContext(develop="dev"))
    >>> config = command.call()
    >>> config.develop_branch
    'dev'
"""

import structlog

from gitflow_core.config.settings import FlowConfiguration, InitContext
from gitflow_core.engine.reporter import CommandRecord, Reporter, report
from gitflow_core.enums import Outcome
from gitflow_core.exceptions import (
    AlreadyInitializedError,
    ConfigurationError,
    GitFlowError,
    LocalBranchMissingError,
    SameBranchError,
)
from gitflow_core.git.repository import GitRepository

log = structlog.get_logger(__name__)

COMMAND_NAME = "init"
INITIAL_COMMIT_MESSAGE = "Initial commit"


class InitializationCommand:
    """Bootstrap git-flow configuration on one repository.

    Attributes:
        repository: Repository to initialize
        context: Requested branch names and prefixes
        force: Overwrite an existing configuration
        remote: Remote consulted for existing integration branches
        default_origin_url: URL for a remote added when ``remote`` is missing
    """

    def __init__(
        self,
        repository: GitRepository,
        context: InitContext | None = None,
        force: bool = False,
        remote: str = "origin",
        default_origin_url: str | None = None,
        reporter: Reporter | None = None,
    ) -> None:
        self.repository = repository
        self.context = context or InitContext()
        self.force = force
        self.remote = remote
        self.default_origin_url = default_origin_url
        self._reporter = reporter
        self._applied: list[str] = []

    def call(self) -> FlowConfiguration:
        """Initialize the repository.

        Returns:
            The persisted FlowConfiguration.

        Raises:
            AlreadyInitializedError: If initialized and ``force`` is False.
            SameBranchError: If master and develop are the same name.
            LocalBranchMissingError: If the repository has history but no master.
            LocalStorageError: If the configuration cannot be written.
        """
        report(self._reporter, CommandRecord(COMMAND_NAME, self.context.develop, Outcome.ATTEMPTED))
        try:
            config = self._initialize()
        except GitFlowError as e:
            e.completed_steps = list(self._applied)
            log.error("init_failed", error=e.message, completed_steps=e.completed_steps)
            report(self._reporter, CommandRecord(COMMAND_NAME, self.context.develop, Outcome.FAILED, error=e.message))
            raise

        report(self._reporter, CommandRecord(COMMAND_NAME, self.context.develop, Outcome.SUCCEEDED))
        return config

    def _initialize(self) -> FlowConfiguration:
        self._require_not_initialized()

        master = self.context.master
        develop = self.context.develop
        if master == develop:
            raise SameBranchError(master)
        self.repository.validate_branch_name(master)
        self.repository.validate_branch_name(develop)

        if self.default_origin_url and not self.repository.has_remote(self.remote):
            self.repository.add_remote(self.remote, self.default_origin_url)
            self._applied.append(f"added remote {self.remote}")

        if self.repository.has_commits():
            self._ensure_branch(master, start_point=None)
            self._ensure_branch(develop, start_point=master)
        else:
            self.repository.set_head(master)
            self.repository.commit_empty(INITIAL_COMMIT_MESSAGE)
            self._applied.append(f"created initial commit on {master}")
            self.repository.create_branch(develop, master)
            self._applied.append(f"created branch {develop} at {master}")

        config = FlowConfiguration.from_context(self.context)
        config.save(self.repository)
        self._applied.append("saved git-flow configuration")

        self.repository.checkout(develop)
        self._applied.append(f"checked out {develop}")
        log.info("flow_initialized", master=master, develop=develop, forced=self.force)
        return config

    def _require_not_initialized(self) -> None:
        try:
            existing = FlowConfiguration.load(self.repository)
        except ConfigurationError:
            if not self.force:
                raise
            log.warning("overwriting_invalid_configuration")
            return

        if existing.initialized:
            if not self.force:
                raise AlreadyInitializedError()
            log.info("overwriting_existing_configuration", master=existing.master_branch, develop=existing.develop_branch)

    def _ensure_branch(self, name: str, start_point: str | None) -> None:
        """Make sure local branch ``name`` exists.

        Args:
            name: Branch to ensure
            start_point: Branch to create it from when it exists neither
                locally nor on the remote; None means it must already exist

        Raises:
            LocalBranchMissingError: If the branch cannot be found or created.
        """
        if self.repository.local_branch_exists(name):
            return

        if self.repository.has_remote(self.remote) and self.repository.remote_branch_exists(self.remote, name):
            self.repository.create_branch(name, f"{self.remote}/{name}")
            self.repository.set_tracking(name, self.remote, name)
            self._applied.append(f"created branch {name} tracking {self.remote}/{name}")
            return

        if start_point is None:
            raise LocalBranchMissingError(name)

        self.repository.create_branch(name, start_point)
        self._applied.append(f"created branch {name} at {start_point}")
