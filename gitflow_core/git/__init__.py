"""Git repository access for the workflow engine.

The main entry point is the GitRepository class, the narrow capability
surface (status, branches, checkout, merge, tag, fetch, push, config) that
every workflow command runs against.

Example:
    >>> from gitflow_core.git import GitRepository
    >>> repo = GitRepository.open(".")
    >>> repo.list_local_branches()
    ['develop', 'master']
"""

from gitflow_core.git.models import FinishResult, MergeResult, RemoteTrackingLink
from gitflow_core.git.repository import GitRepository

__all__ = [
    "GitRepository",
    "MergeResult",
    "FinishResult",
    "RemoteTrackingLink",
]
