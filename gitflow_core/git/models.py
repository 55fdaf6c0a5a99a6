"""Value types returned by the repository adapter.

Example:
    >>> from gitflow_core.git.models import MergeResult
    >>> result = MergeResult(target="develop", source="feature/login")
    >>> result.conflict_free
    True
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RemoteTrackingLink:
    """Tracking configuration of a local branch.

    Stored in git config as ``branch.<local_branch>.remote`` and
    ``branch.<local_branch>.merge``.

    Attributes:
        local_branch: Local branch name (e.g., 'feature/login')
        remote_name: Remote name (e.g., 'origin')
        remote_branch: Branch name on the remote, without 'refs/heads/'
    """

    local_branch: str
    remote_name: str
    remote_branch: str

    @property
    def merge_ref(self) -> str:
        """Full ref recorded as ``branch.<name>.merge``."""
        return f"refs/heads/{self.remote_branch}"

    @property
    def remote_tracking_ref(self) -> str:
        """Remote-tracking ref name (e.g., 'origin/feature/login')."""
        return f"{self.remote_name}/{self.remote_branch}"


@dataclass(frozen=True)
class MergeResult:
    """Outcome of merging one branch into the checked-out branch.

    Attributes:
        target: Branch that was checked out and merged into
        source: Branch that was merged
        conflicts: Paths left unmerged; empty when the merge succeeded
    """

    target: str
    source: str
    conflicts: list[str] = field(default_factory=list)

    @property
    def conflict_free(self) -> bool:
        return not self.conflicts


@dataclass
class FinishResult:
    """Summary of a completed finish command.

    A finish that raised never produces one of these; remote branch deletion
    is the only step whose failure is returned instead of raised.

    Attributes:
        branch: Workflow branch that was finished
        targets: Integration branches merged into, in order
        tag: Tag created on master, if any
        local_deleted: Whether the local branch was deleted
        remote_deleted: Whether the remote branch was deleted
        remote_deletion_error: Error text when remote deletion failed
    """

    branch: str
    targets: list[str] = field(default_factory=list)
    tag: str | None = None
    local_deleted: bool = False
    remote_deleted: bool = False
    remote_deletion_error: str | None = None
