"""Workflow command state machine.

A single ``WorkflowCommand`` class implements start, publish and finish for
every workflow kind; the per-kind differences come from the policy table in
``gitflow_core.engine.policy``.

Each command is single-shot:

    constructed -> gates evaluated -> mutations applied -> success or error

Gates run in a fixed order and the first failing gate stops the command
before anything is changed. Once mutations begin, a failure is raised as-is
with ``completed_steps`` listing what was already applied. Nothing is rolled
back: a finish that conflicts on its second merge leaves master merged and
tagged, and a publish whose tracking write fails leaves the branch pushed.

Example:
    >>> command = WorkflowCommand(WorkflowKind.RELEASE, Phase.FINISH, "1.0", repository)
    >>> result = command.call()
    >>> result.tag
    '1.0'
"""

from dataclasses import dataclass
from typing import Any

import structlog

from gitflow_core.config.settings import FlowConfiguration
from gitflow_core.engine.policy import IntegrationBranch, KindPolicy, policy_for
from gitflow_core.engine.preconditions import PreconditionChecker
from gitflow_core.engine.reporter import CommandRecord, Reporter, report
from gitflow_core.enums import Outcome, Phase, WorkflowKind
from gitflow_core.exceptions import (
    CommandAlreadyCalledError,
    GitFlowError,
    InvalidBranchNameError,
    MergeConflictError,
    TransportError,
)
from gitflow_core.git.models import FinishResult
from gitflow_core.git.repository import GitRepository

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StartOptions:
    """Options for start commands.

    Attributes:
        start_point: Commit-ish to branch from instead of the kind's
            integration branch (e.g., a tag for support branches)
        fetch: Fetch the remote first and refuse to start from a branch that
            is behind its remote counterpart
    """

    start_point: str | None = None
    fetch: bool = False


@dataclass(frozen=True)
class FinishOptions:
    """Options for finish commands.

    Attributes:
        fetch: Fetch the remote before checking for divergence
        push: Push the integration branches and tag after finishing
        keep_branch: Do not delete the workflow branch
        no_tag: Skip tagging for release and hotfix
        message: Tag message; defaults to '<Kind> <name>'
    """

    fetch: bool = False
    push: bool = False
    keep_branch: bool = False
    no_tag: bool = False
    message: str | None = None


class WorkflowCommand:
    """One start, publish or finish of one workflow branch.

    Attributes:
        kind: Workflow kind
        phase: Lifecycle phase
        short_name: Branch name without prefix
        repository: Repository the command mutates
        remote: Remote used for fetch, push and remote gates
    """

    def __init__(
        self,
        kind: WorkflowKind,
        phase: Phase,
        short_name: str,
        repository: GitRepository,
        reporter: Reporter | None = None,
        remote: str = "origin",
        start_options: StartOptions | None = None,
        finish_options: FinishOptions | None = None,
    ) -> None:
        """Create a command.

        Raises:
            InvalidBranchNameError: If ``short_name`` is empty.
            UnsupportedPhaseError: If ``kind`` does not support ``phase``.
        """
        if not short_name or not short_name.strip():
            raise InvalidBranchNameError(short_name)

        self.kind = kind
        self.phase = phase
        self.short_name = short_name
        self.repository = repository
        self.remote = remote
        self._reporter = reporter
        self._policy: KindPolicy = policy_for(kind)
        self._policy.require_phase(kind, phase)
        self._start_options = start_options or StartOptions()
        self._finish_options = finish_options or FinishOptions()
        self._checker = PreconditionChecker(repository, remote)
        self._branch: str | None = None
        self._applied: list[str] = []
        self._called = False

    @property
    def name(self) -> str:
        """Command name, e.g. 'feature-start'."""
        return f"{self.kind.value}-{self.phase.value}"

    @property
    def completed_steps(self) -> list[str]:
        return list(self._applied)

    def call(self) -> Any:
        """Run the command.

        Returns:
            start: the full branch name
            publish: None
            finish: a FinishResult

        Raises:
            CommandAlreadyCalledError: If this instance was already called.
            GitFlowError: Any gate or mutation failure.
        """
        if self._called:
            raise CommandAlreadyCalledError(self.name)
        self._called = True

        self._branch = self._full_branch_name()
        self._report(Outcome.ATTEMPTED)
        log.info("command_started", command=self.name, name=self.short_name)

        try:
            if self.phase is Phase.START:
                result: Any = self._start()
            elif self.phase is Phase.PUBLISH:
                result = self._publish()
            else:
                result = self._finish()
        except GitFlowError as e:
            e.completed_steps = list(self._applied)
            log.error(
                "command_failed",
                command=self.name,
                branch=self._branch,
                error=e.message,
                completed_steps=e.completed_steps,
            )
            self._report(Outcome.FAILED, error=e.message)
            raise

        log.info("command_succeeded", command=self.name, branch=self._branch)
        self._report(Outcome.SUCCEEDED)
        return result

    def _report(self, outcome: Outcome, error: str | None = None) -> None:
        entry = CommandRecord(
            command=self.name,
            branch=self._branch or self.short_name,
            outcome=outcome,
            error=error,
        )
        report(self._reporter, entry)

    def _applied_step(self, step: str) -> None:
        self._applied.append(step)

    def _full_branch_name(self) -> str:
        """Best-effort full branch name for reporting before any gate runs."""
        try:
            return FlowConfiguration.load(self.repository).branch_name(self.kind, self.short_name)
        except GitFlowError:
            return self.short_name

    def _resolve_branch(self) -> tuple[FlowConfiguration, str]:
        config = self._checker.require_flow_initialized()
        branch = config.branch_name(self.kind, self.short_name)
        self.repository.validate_branch_name(branch)
        self._branch = branch
        return config, branch

    def _start(self) -> str:
        config, branch = self._resolve_branch()
        options = self._start_options
        start_point = options.start_point or self._policy.start_from.resolve(config)
        self._checker.require_clean_working_tree(start_point)
        self._checker.require_local_branch_absent(branch)
        if self._policy.single_active:
            self._checker.require_no_branch_in_progress(self.kind, config.prefix(self.kind))

        if options.fetch:
            self.repository.fetch(self.remote)
            self._applied_step(f"fetched {self.remote}")
            if self.repository.remote_branch_exists(self.remote, start_point):
                self._checker.require_branches_not_diverged(start_point, f"{self.remote}/{start_point}")

        commit = self.repository.resolve(start_point)

        self.repository.create_and_checkout(branch, commit)
        self._applied_step(f"created branch {branch} at {start_point}")
        self._applied_step(f"checked out {branch}")
        return branch

    def _publish(self) -> None:
        _, branch = self._resolve_branch()
        self._checker.require_local_branch_exists(branch)
        self._checker.require_clean_working_tree(branch)

        self.repository.fetch(self.remote)
        self._applied_step(f"fetched {self.remote}")
        self._checker.require_remote_branch_absent(branch)

        self.repository.push(self.remote, f"{branch}:refs/heads/{branch}")
        self._applied_step(f"pushed {branch} to {self.remote}")
        self.repository.fetch(self.remote)
        self._applied_step(f"fetched {self.remote}")
        self.repository.set_tracking(branch, self.remote, branch)
        self._applied_step(f"configured {branch} to track {self.remote}/{branch}")
        self.repository.checkout(branch)
        self._applied_step(f"checked out {branch}")

    def _finish(self) -> FinishResult:
        config, branch = self._resolve_branch()
        options = self._finish_options
        self._checker.require_local_branch_exists(branch)
        targets = [target.resolve(config) for target in self._policy.merge_targets]
        self._checker.require_clean_working_tree(branch, config.develop_branch, *targets)

        if options.fetch:
            self.repository.fetch(self.remote)
            self._applied_step(f"fetched {self.remote}")

        link = self.repository.tracking_link(branch)
        if link and self.repository.remote_branch_exists(link.remote_name, link.remote_branch):
            self._checker.require_branches_not_diverged(branch, link.remote_tracking_ref)

        tag_name = None
        if self._policy.tag_on_finish and not options.no_tag:
            tag_name = config.tag_name(self.short_name)
            self._checker.require_tag_absent(tag_name)

        result = FinishResult(branch=branch)
        for target_ref in self._policy.merge_targets:
            target = target_ref.resolve(config)
            self.repository.checkout(target)
            self._applied_step(f"checked out {target}")

            merge = self.repository.merge(branch, no_ff=self._policy.no_ff)
            if not merge.conflict_free:
                # The conflicted merge stays in the working tree
                raise MergeConflictError(target, branch, merge.conflicts)
            self._applied_step(f"merged {branch} into {target}")
            result.targets.append(target)

            if target_ref is IntegrationBranch.MASTER and tag_name:
                message = options.message or f"{self.kind.value.capitalize()} {self.short_name}"
                self.repository.tag(tag_name, self.repository.resolve("HEAD"), message)
                self._applied_step(f"tagged {target} as {tag_name}")
                result.tag = tag_name

        if not options.keep_branch:
            self.repository.delete_branch(branch)
            self._applied_step(f"deleted branch {branch}")
            result.local_deleted = True

            if link:
                try:
                    self.repository.delete_remote_branch(link.remote_name, link.remote_branch)
                except TransportError as e:
                    result.remote_deletion_error = e.message
                    log.warning(
                        "remote_branch_delete_failed",
                        remote=link.remote_name,
                        branch=link.remote_branch,
                        error=e.message,
                    )
                else:
                    self._applied_step(f"deleted {link.remote_tracking_ref}")
                    result.remote_deleted = True

        self.repository.checkout(config.develop_branch)
        self._applied_step(f"checked out {config.develop_branch}")

        if options.push:
            refspecs = list(result.targets)
            if result.tag:
                refspecs.append(f"refs/tags/{result.tag}")
            if refspecs:
                self.repository.push(self.remote, *refspecs)
                self._applied_step(f"pushed {', '.join(refspecs)} to {self.remote}")

        return result
