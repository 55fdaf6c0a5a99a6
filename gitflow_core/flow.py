"""Session facade over one git-flow repository.

``GitFlow`` binds a repository handle, its remote name and a reporter, and
exposes one method per workflow operation. Each method builds a fresh
``WorkflowCommand`` and calls it once.

Example:
    >>> from gitflow_core import GitFlow
    >>> flow = GitFlow.get_or_init("/path/to/repo")
    >>> flow.release_start("1.0")
    'release/1.0'
    >>> flow.release_finish("1.0").tag
    '1.0'
    >>> flow.repository.current_branch()
    'develop'
"""

from pathlib import Path

import structlog

from gitflow_core.config.settings import EngineSettings, FlowConfiguration, InitContext
from gitflow_core.engine.commands import FinishOptions, StartOptions, WorkflowCommand
from gitflow_core.engine.init import InitializationCommand
from gitflow_core.engine.reporter import LogReporter, Reporter
from gitflow_core.enums import Phase, WorkflowKind
from gitflow_core.exceptions import GitFlowError
from gitflow_core.git.models import FinishResult
from gitflow_core.git.repository import GitRepository

log = structlog.get_logger(__name__)


class GitFlow:
    """Git-flow operations on one repository.

    Run one operation at a time per instance; operations mutate the shared
    working copy and have no isolation of their own.

    Attributes:
        repository: Repository handle, including the checked-out branch
        remote: Remote used by publish, fetch and push
        reporter: Receives a record for every command
    """

    def __init__(
        self,
        repository: GitRepository,
        remote: str = "origin",
        reporter: Reporter | None = None,
    ) -> None:
        self.repository = repository
        self.remote = remote
        self.reporter: Reporter = reporter if reporter is not None else LogReporter()

    # Construction

    @classmethod
    def init(
        cls,
        path: str | Path,
        context: InitContext | None = None,
        force: bool = False,
        default_origin_url: str | None = None,
        settings: EngineSettings | None = None,
        reporter: Reporter | None = None,
    ) -> "GitFlow":
        """Initialize git-flow in ``path`` and return a session.

        Creates the repository if ``path`` is not one yet.

        Args:
            path: Working copy directory
            context: Branch names and prefixes; git-flow defaults when None
            force: Overwrite an existing configuration
            default_origin_url: Add an origin remote with this URL when absent
            settings: Engine settings; read from the environment when None
            reporter: Reporter for the session

        Raises:
            AlreadyInitializedError: If already initialized and not forced.
            SameBranchError: If master and develop are the same.
        """
        settings = settings or EngineSettings()
        repository = GitRepository.open_or_create(path)
        flow = cls(repository, remote=settings.remote, reporter=reporter)
        InitializationCommand(
            repository,
            context=context,
            force=force,
            remote=settings.remote,
            default_origin_url=default_origin_url or settings.default_origin_url,
            reporter=flow.reporter,
        ).call()
        return flow

    @classmethod
    def force_init(
        cls,
        path: str | Path,
        context: InitContext | None = None,
        default_origin_url: str | None = None,
        settings: EngineSettings | None = None,
        reporter: Reporter | None = None,
    ) -> "GitFlow":
        """Initialize git-flow, overwriting any existing configuration."""
        return cls.init(
            path,
            context=context,
            force=True,
            default_origin_url=default_origin_url,
            settings=settings,
            reporter=reporter,
        )

    @classmethod
    def get(
        cls,
        path: str | Path,
        settings: EngineSettings | None = None,
        reporter: Reporter | None = None,
    ) -> "GitFlow":
        """Open a session on an existing repository without initializing it.

        Raises:
            NotGitRepositoryError: If ``path`` is not inside a repository.
        """
        settings = settings or EngineSettings()
        return cls(GitRepository.open(path), remote=settings.remote, reporter=reporter)

    @classmethod
    def get_or_init(
        cls,
        path: str | Path,
        context: InitContext | None = None,
        default_origin_url: str | None = None,
        settings: EngineSettings | None = None,
        reporter: Reporter | None = None,
    ) -> "GitFlow":
        """Open an initialized repository, initializing it first if needed."""
        if cls.is_initialized_at(path):
            return cls.get(path, settings=settings, reporter=reporter)
        return cls.init(
            path,
            context=context,
            default_origin_url=default_origin_url,
            settings=settings,
            reporter=reporter,
        )

    @staticmethod
    def is_initialized_at(path: str | Path) -> bool:
        """Check whether ``path`` is inside a git-flow initialized repository.

        Returns False for directories that are not repositories or whose
        configuration cannot be read.
        """
        try:
            return FlowConfiguration.load(GitRepository.open(path)).initialized
        except GitFlowError as e:
            log.debug("initialization_check_failed", path=str(path), error=e.message)
            return False

    def is_initialized(self) -> bool:
        try:
            return self.configuration().initialized
        except GitFlowError:
            return False

    # Configuration accessors

    def configuration(self) -> FlowConfiguration:
        """Read the current configuration from the repository."""
        return FlowConfiguration.load(self.repository)

    @property
    def master_branch(self) -> str:
        return self.configuration().master_branch

    @property
    def develop_branch(self) -> str:
        return self.configuration().develop_branch

    @property
    def version_tag_prefix(self) -> str:
        return self.configuration().version_tag_prefix

    def prefix(self, kind: WorkflowKind) -> str:
        return self.configuration().prefix(kind)

    # Commands

    def command(
        self,
        kind: WorkflowKind,
        phase: Phase,
        name: str,
        start_options: StartOptions | None = None,
        finish_options: FinishOptions | None = None,
    ) -> WorkflowCommand:
        """Build a single-use command bound to this session."""
        return WorkflowCommand(
            kind,
            phase,
            name,
            self.repository,
            reporter=self.reporter,
            remote=self.remote,
            start_options=start_options,
            finish_options=finish_options,
        )

    def _start(self, kind: WorkflowKind, name: str, start_point: str | None, fetch: bool) -> str:
        options = StartOptions(start_point=start_point, fetch=fetch)
        return self.command(kind, Phase.START, name, start_options=options).call()

    def _finish(self, kind: WorkflowKind, name: str, **options: object) -> FinishResult:
        return self.command(kind, Phase.FINISH, name, finish_options=FinishOptions(**options)).call()

    def feature_start(self, name: str, start_point: str | None = None, fetch: bool = False) -> str:
        return self._start(WorkflowKind.FEATURE, name, start_point, fetch)

    def feature_publish(self, name: str) -> None:
        self.command(WorkflowKind.FEATURE, Phase.PUBLISH, name).call()

    def feature_finish(
        self,
        name: str,
        fetch: bool = False,
        push: bool = False,
        keep_branch: bool = False,
    ) -> FinishResult:
        return self._finish(WorkflowKind.FEATURE, name, fetch=fetch, push=push, keep_branch=keep_branch)

    def release_start(self, name: str, start_point: str | None = None, fetch: bool = False) -> str:
        return self._start(WorkflowKind.RELEASE, name, start_point, fetch)

    def release_publish(self, name: str) -> None:
        self.command(WorkflowKind.RELEASE, Phase.PUBLISH, name).call()

    def release_finish(
        self,
        name: str,
        message: str | None = None,
        no_tag: bool = False,
        fetch: bool = False,
        push: bool = False,
        keep_branch: bool = False,
    ) -> FinishResult:
        return self._finish(
            WorkflowKind.RELEASE,
            name,
            message=message,
            no_tag=no_tag,
            fetch=fetch,
            push=push,
            keep_branch=keep_branch,
        )

    def hotfix_start(self, name: str, start_point: str | None = None, fetch: bool = False) -> str:
        return self._start(WorkflowKind.HOTFIX, name, start_point, fetch)

    def hotfix_publish(self, name: str) -> None:
        self.command(WorkflowKind.HOTFIX, Phase.PUBLISH, name).call()

    def hotfix_finish(
        self,
        name: str,
        message: str | None = None,
        no_tag: bool = False,
        fetch: bool = False,
        push: bool = False,
        keep_branch: bool = False,
    ) -> FinishResult:
        return self._finish(
            WorkflowKind.HOTFIX,
            name,
            message=message,
            no_tag=no_tag,
            fetch=fetch,
            push=push,
            keep_branch=keep_branch,
        )

    def support_start(self, name: str, start_point: str | None = None, fetch: bool = False) -> str:
        return self._start(WorkflowKind.SUPPORT, name, start_point, fetch)
