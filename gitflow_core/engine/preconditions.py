"""Precondition gates evaluated before any repository mutation.

Each gate reads live repository state at call time and raises its own
exception type on violation. Workflow commands call the gates in a fixed
order; the first failure stops the command before anything is mutated.

Remote gates read remote-tracking refs and are only as current as the last
fetch. Fetching is the caller's job.
"""

import structlog

from gitflow_core.config.settings import FlowConfiguration
from gitflow_core.enums import BranchRelation, WorkflowKind
from gitflow_core.exceptions import (
    BranchesDivergedError,
    BranchesNotEqualError,
    BranchInProgressError,
    DirtyWorkingTreeError,
    LocalBranchExistsError,
    LocalBranchMissingError,
    NotInitializedError,
    RemoteBranchExistsError,
    RemoteBranchMissingError,
    TagExistsError,
)
from gitflow_core.git.repository import GitRepository

log = structlog.get_logger(__name__)


class PreconditionChecker:
    """Gates over one repository and its configured remote.

    Holds no state besides the repository handle and remote name; nothing is
    cached between calls.

    Attributes:
        repository: Repository the gates read from
        remote: Remote name used by the remote gates
    """

    def __init__(self, repository: GitRepository, remote: str = "origin") -> None:
        self.repository = repository
        self.remote = remote

    def require_flow_initialized(self) -> FlowConfiguration:
        """Load the flow configuration, failing unless it is initialized.

        Returns:
            The repository's FlowConfiguration.

        Raises:
            NotInitializedError: If git-flow is not initialized.
        """
        config = FlowConfiguration.load(self.repository)
        if not config.initialized:
            raise NotInitializedError()
        return config

    def require_clean_working_tree(self, *incoming: str) -> None:
        """Fail on uncommitted changes or untracked files in the way.

        Args:
            *incoming: Revisions the command will check out or merge. An
                untracked file that any of them tracks would be overwritten,
                so git would refuse the checkout or merge partway through.

        Raises:
            DirtyWorkingTreeError: On staged, unstaged or unmerged changes, or
                on untracked files tracked by an incoming revision.
        """
        if not self.repository.is_clean():
            log.debug("gate_failed", gate="clean_working_tree")
            raise DirtyWorkingTreeError()

        untracked = self.repository.untracked_paths()
        if not untracked or not incoming:
            return
        tracked: set[str] = set()
        for rev in incoming:
            tracked |= self.repository.tracked_paths(rev)
        in_the_way = sorted(path for path in untracked if path in tracked)
        if in_the_way:
            log.debug("gate_failed", gate="untracked_conflicts", paths=in_the_way)
            raise DirtyWorkingTreeError(untracked_conflicts=in_the_way)

    def require_local_branch_exists(self, name: str) -> None:
        if not self.repository.local_branch_exists(name):
            raise LocalBranchMissingError(name)

    def require_local_branch_absent(self, name: str) -> None:
        if self.repository.local_branch_exists(name):
            raise LocalBranchExistsError(name)

    def require_remote_branch_exists(self, name: str) -> None:
        if not self.repository.remote_branch_exists(self.remote, name):
            raise RemoteBranchMissingError(name, self.remote)

    def require_remote_branch_absent(self, name: str) -> None:
        if self.repository.remote_branch_exists(self.remote, name):
            raise RemoteBranchExistsError(name, self.remote)

    def require_no_branch_in_progress(self, kind: WorkflowKind, prefix: str) -> None:
        """Fail if any local branch carries ``prefix``.

        Used for kinds where only one branch may be active at a time.

        Raises:
            BranchInProgressError: Naming the first branch found.
        """
        for branch in self.repository.list_local_branches():
            if branch.startswith(prefix):
                raise BranchInProgressError(kind.value, branch)

    def require_tag_absent(self, tag: str) -> None:
        if self.repository.tag_exists(tag):
            raise TagExistsError(tag)

    def branch_relation(self, branch: str, other: str) -> BranchRelation:
        """Compare the tips of two revisions.

        Returns:
            EQUAL when both point at one commit, AHEAD when ``branch`` contains
            ``other``, BEHIND when ``other`` contains ``branch``, else DIVERGED.
        """
        branch_sha = self.repository.resolve(branch)
        other_sha = self.repository.resolve(other)
        if branch_sha == other_sha:
            return BranchRelation.EQUAL
        if self.repository.is_ancestor(other_sha, branch_sha):
            return BranchRelation.AHEAD
        if self.repository.is_ancestor(branch_sha, other_sha):
            return BranchRelation.BEHIND
        return BranchRelation.DIVERGED

    def require_branches_equal(self, branch: str, other: str) -> None:
        if self.branch_relation(branch, other) is not BranchRelation.EQUAL:
            raise BranchesNotEqualError(branch, other)

    def require_branches_not_diverged(self, local: str, remote_ref: str) -> None:
        """Fail when ``remote_ref`` has commits ``local`` lacks.

        A local branch that is ahead is fine; its commits include everything
        on the remote, so finishing loses nothing.

        Raises:
            BranchesDivergedError: If ``local`` is behind ``remote_ref`` or diverged from it.
        """
        relation = self.branch_relation(local, remote_ref)
        if relation in (BranchRelation.BEHIND, BranchRelation.DIVERGED):
            log.debug("gate_failed", gate="branches_not_diverged", local=local, remote=remote_ref, relation=str(relation))
            raise BranchesDivergedError(local, remote_ref)
