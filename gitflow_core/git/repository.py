"""Repository adapter over a Git working copy.

This module provides ``GitRepository``, the narrow capability surface the
workflow engine consumes: working-tree status, branch listing and creation,
checkout, merge, tag, fetch, push, tracking configuration and key/value config
storage. Nothing above this module talks to GitPython directly.

Commands are executed through GitPython's ``Git.execute`` so every failure
surfaces as ``git.exc.GitCommandError``, which is translated here into the
engine's exception types:

    - fetch/push failures -> TransportError
    - config read/write failures -> LocalStorageError
    - everything else -> RepositoryOperationError

The currently checked-out branch is part of this handle's observable state
(``current_branch()``) and is always read live from the working copy.

Thread Safety:
    A GitRepository mutates the shared working copy. Use one instance per
    working copy and run one workflow command at a time against it.

Dependencies:
    Requires GitPython (gitpython) package for repository access.

Example:
    >>> from gitflow_core.git.repository import GitRepository
    >>> repo = GitRepository.open("/path/to/repo")
    >>> repo.current_branch()
    'develop'
    >>> repo.create_branch("feature/login", "develop")
    >>> repo.checkout("feature/login")
"""

from pathlib import Path

try:
    import git
    from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError
except ImportError as e:
    raise ImportError("GitPython is required for repository access. Install it with: pip install gitpython") from e

import structlog

from gitflow_core.exceptions import (
    InvalidBranchNameError,
    LocalStorageError,
    NotGitRepositoryError,
    RepositoryOperationError,
    TransportError,
)
from gitflow_core.git.models import MergeResult, RemoteTrackingLink

log = structlog.get_logger(__name__)

# `git config --get` exits 1 when the key is absent, `git config --unset` exits 5
CONFIG_KEY_MISSING = 1
CONFIG_UNSET_MISSING = 5


class GitRepository:
    """Capability surface over one Git working copy.

    Attributes:
        repo: Underlying GitPython Repo object.
    """

    def __init__(self, repo: git.Repo) -> None:
        """Wrap an existing GitPython repository.

        Args:
            repo: GitPython Repo with a working tree
        """
        self.repo = repo

    @classmethod
    def open(cls, path: str | Path = ".") -> "GitRepository":
        """Open the repository containing ``path``.

        Args:
            path: Any path inside the working copy; parents are searched.

        Returns:
            GitRepository for the working copy.

        Raises:
            NotGitRepositoryError: If no repository contains ``path``.
        """
        resolved = Path(path).resolve()
        try:
            return cls(git.Repo(resolved, search_parent_directories=True))
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise NotGitRepositoryError(str(resolved)) from e

    @classmethod
    def open_or_create(cls, path: str | Path) -> "GitRepository":
        """Open the repository at ``path``, running ``git init`` if there is none.

        Args:
            path: Directory of the working copy (created if missing)

        Returns:
            GitRepository for the working copy.
        """
        try:
            return cls.open(path)
        except NotGitRepositoryError:
            target = Path(path).resolve()
            target.mkdir(parents=True, exist_ok=True)
            log.info("repository_created", path=str(target))
            return cls(git.Repo.init(target))

    @property
    def path(self) -> Path:
        """Root of the working tree."""
        return Path(self.repo.working_tree_dir or self.repo.git_dir)

    def _git(self, operation: str, *args: str, error_cls: type[RepositoryOperationError] = RepositoryOperationError) -> str:
        """Run a git command and translate failures.

        Args:
            operation: Short operation name used in logs and errors
            *args: Arguments after ``git``
            error_cls: Exception class raised on failure

        Returns:
            Command stdout, stripped.
        """
        log.debug("git_command", operation=operation, args=list(args))
        try:
            return str(self.repo.git.execute(["git", *args]))
        except GitCommandError as e:
            stderr = (e.stderr or "").strip()
            log.debug("git_command_failed", operation=operation, status=e.status, stderr=stderr)
            raise error_cls(f"git {operation} failed: {stderr or e}", operation=operation) from e

    # Working tree

    def is_clean(self) -> bool:
        """Check for staged, unstaged or unmerged changes to tracked files.

        Untracked files are ignored.
        """
        return not self._git("status", "status", "--porcelain", "--untracked-files=no")

    def untracked_paths(self) -> list[str]:
        """Return untracked, non-ignored paths in the working tree."""
        output = self._git("ls-files", "ls-files", "-z", "--others", "--exclude-standard")
        return [path for path in output.split("\0") if path]

    def tracked_paths(self, rev: str) -> set[str]:
        """Return every file path tracked in the tree of ``rev``."""
        output = self._git("ls-tree", "ls-tree", "-r", "-z", "--name-only", rev)
        return {path for path in output.split("\0") if path}

    def conflicted_paths(self) -> list[str]:
        """Return paths with unresolved merge conflicts."""
        output = self._git("diff", "diff", "--name-only", "--diff-filter=U")
        return list(dict.fromkeys(line for line in output.splitlines() if line))

    def current_branch(self) -> str | None:
        """Return the checked-out branch name, or None when HEAD is detached."""
        if self.repo.head.is_detached:
            return None
        return self.repo.active_branch.name

    def has_commits(self) -> bool:
        """Check whether HEAD points at a commit (False for a fresh repository)."""
        return self.repo.head.is_valid()

    # Branches

    def list_local_branches(self) -> list[str]:
        """List local branch names."""
        return sorted(head.name for head in self.repo.heads)

    def list_remote_branches(self, remote: str) -> list[str]:
        """List branches known for ``remote`` from its remote-tracking refs.

        The list is only as current as the last fetch.

        Args:
            remote: Remote name (e.g., 'origin')

        Returns:
            Branch names without the remote prefix.
        """
        prefix = f"refs/remotes/{remote}/"
        output = self._git("for-each-ref", "for-each-ref", "--format=%(refname)", prefix)
        branches = []
        for line in output.splitlines():
            name = line.removeprefix(prefix)
            if name and name != "HEAD":
                branches.append(name)
        return sorted(branches)

    def local_branch_exists(self, name: str) -> bool:
        return name in self.list_local_branches()

    def remote_branch_exists(self, remote: str, name: str) -> bool:
        return name in self.list_remote_branches(remote)

    def validate_branch_name(self, name: str) -> None:
        """Reject empty names and names git would not accept as a branch.

        Raises:
            InvalidBranchNameError: If the name is not a legal branch name.
        """
        if not name or not name.strip() or ".." in name:
            raise InvalidBranchNameError(name)
        try:
            self.repo.git.execute(["git", "check-ref-format", "--branch", name])
        except GitCommandError as e:
            raise InvalidBranchNameError(name) from e

    def create_branch(self, name: str, start_point: str) -> None:
        """Create local branch ``name`` at ``start_point`` without checking it out."""
        self._git("branch", "branch", name, start_point)
        log.info("branch_created", branch=name, start_point=start_point)

    def create_and_checkout(self, name: str, start_point: str) -> None:
        """Create local branch ``name`` at ``start_point`` and check it out.

        A single ``git checkout -b``: if the checkout is refused, the branch
        is not created either.
        """
        self._git("checkout", "checkout", "-b", name, start_point)
        log.info("branch_created", branch=name, start_point=start_point)
        log.info("branch_checked_out", branch=name)

    def delete_branch(self, name: str) -> None:
        """Delete local branch ``name`` regardless of merge status."""
        self._git("branch-delete", "branch", "-D", name)
        log.info("branch_deleted", branch=name)

    def delete_remote_branch(self, remote: str, name: str) -> None:
        """Delete ``name`` on ``remote``.

        Raises:
            TransportError: If the push fails.
        """
        self._git("push-delete", "push", remote, "--delete", name, error_cls=TransportError)
        log.info("remote_branch_deleted", remote=remote, branch=name)

    def checkout(self, name: str) -> None:
        self._git("checkout", "checkout", name)
        log.info("branch_checked_out", branch=name)

    def set_head(self, branch: str) -> None:
        """Point HEAD at ``branch`` without touching the working tree.

        Used on a repository with no commits to choose the first branch.
        """
        self._git("symbolic-ref", "symbolic-ref", "HEAD", f"refs/heads/{branch}")

    def commit_empty(self, message: str) -> str:
        """Create an empty commit on the current branch and return its SHA."""
        self._git("commit", "commit", "--allow-empty", "-m", message)
        return self.resolve("HEAD")

    # History

    def resolve(self, rev: str) -> str:
        """Resolve a revision to a commit SHA.

        Raises:
            RepositoryOperationError: If the revision does not name a commit.
        """
        return self._git("rev-parse", "rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}")

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """Check whether ``ancestor`` is reachable from ``descendant``."""
        return bool(self.repo.is_ancestor(ancestor, descendant))

    def merge(self, source: str, no_ff: bool = False, message: str | None = None) -> MergeResult:
        """Merge ``source`` into the checked-out branch.

        A conflicted merge is left in place (not aborted) so the user can
        resolve it; the conflicting paths are returned on the result.

        Args:
            source: Branch to merge
            no_ff: Always create a merge commit
            message: Merge commit message; git's default when None

        Returns:
            MergeResult with the conflicting paths, empty when the merge succeeded.

        Raises:
            RepositoryOperationError: If the merge failed without conflicts.
        """
        target = self.current_branch() or "HEAD"
        args = ["merge"]
        if no_ff:
            args.append("--no-ff")
        if message:
            args.extend(["-m", message])
        else:
            args.append("--no-edit")
        args.append(source)

        try:
            self.repo.git.execute(["git", *args])
        except GitCommandError as e:
            conflicts = self.conflicted_paths()
            if conflicts:
                log.warning("merge_conflict", source=source, target=target, paths=conflicts)
                return MergeResult(target=target, source=source, conflicts=conflicts)
            stderr = (e.stderr or "").strip()
            raise RepositoryOperationError(f"git merge failed: {stderr or e}", operation="merge") from e

        log.info("branch_merged", source=source, target=target, no_ff=no_ff)
        return MergeResult(target=target, source=source)

    # Tags

    def tag_exists(self, name: str) -> bool:
        return name in {tag.name for tag in self.repo.tags}

    def tag(self, name: str, commit: str, message: str) -> None:
        """Create annotated tag ``name`` at ``commit``."""
        self._git("tag", "tag", "-a", name, "-m", message, commit)
        log.info("tag_created", tag=name, commit=commit)

    # Remotes

    def has_remote(self, name: str) -> bool:
        return name in {remote.name for remote in self.repo.remotes}

    def add_remote(self, name: str, url: str) -> None:
        self.repo.create_remote(name, url)
        log.info("remote_added", remote=name, url=url)

    def fetch(self, remote: str) -> None:
        """Fetch ``remote``.

        Raises:
            TransportError: If the fetch fails.
        """
        self._git("fetch", "fetch", remote, error_cls=TransportError)
        log.info("remote_fetched", remote=remote)

    def push(self, remote: str, *refspecs: str) -> None:
        """Push ``refspecs`` to ``remote``.

        Raises:
            TransportError: If the push fails.
        """
        self._git("push", "push", remote, *refspecs, error_cls=TransportError)
        log.info("pushed", remote=remote, refspecs=list(refspecs))

    # Config storage

    def get_config(self, key: str) -> str | None:
        """Read a git config value.

        Args:
            key: Dotted key (e.g., 'gitflow.branch.master')

        Returns:
            The value, or None when the key is not set.

        Raises:
            LocalStorageError: If the config cannot be read.
        """
        try:
            return str(self.repo.git.execute(["git", "config", "--local", "--get", key]))
        except GitCommandError as e:
            if e.status == CONFIG_KEY_MISSING:
                return None
            raise LocalStorageError(f"Cannot read config key '{key}': {e}", operation="config-get") from e

    def set_config(self, key: str, value: str) -> None:
        """Write a git config value to the repository's local config.

        Raises:
            LocalStorageError: If the config cannot be written.
        """
        self._git("config-set", "config", "--local", key, value, error_cls=LocalStorageError)

    def unset_config(self, key: str) -> None:
        """Remove a git config key; a missing key is not an error."""
        try:
            self.repo.git.execute(["git", "config", "--local", "--unset", key])
        except GitCommandError as e:
            if e.status != CONFIG_UNSET_MISSING:
                raise LocalStorageError(f"Cannot unset config key '{key}': {e}", operation="config-unset") from e

    def set_tracking(self, branch: str, remote: str, remote_branch: str) -> RemoteTrackingLink:
        """Record that ``branch`` tracks ``remote_branch`` on ``remote``.

        Raises:
            LocalStorageError: If the config cannot be written.
        """
        link = RemoteTrackingLink(local_branch=branch, remote_name=remote, remote_branch=remote_branch)
        self.set_config(f"branch.{branch}.remote", remote)
        self.set_config(f"branch.{branch}.merge", link.merge_ref)
        log.info("tracking_configured", branch=branch, remote=remote, merge=link.merge_ref)
        return link

    def tracking_link(self, branch: str) -> RemoteTrackingLink | None:
        """Return the tracking link of ``branch``, or None if it has none."""
        remote = self.get_config(f"branch.{branch}.remote")
        merge = self.get_config(f"branch.{branch}.merge")
        if not remote or not merge:
            return None
        return RemoteTrackingLink(
            local_branch=branch,
            remote_name=remote,
            remote_branch=merge.removeprefix("refs/heads/"),
        )
