"""Core functionality for git-worktree-keeper"""

import os
import secrets
import shutil
from typing import Callable, List, Optional, Union

from git_worktree_keeper.config import Config
from git_worktree_keeper.constants import AMBIGUOUS_NAME_HINT
from git_worktree_keeper.exceptions import (
    BranchCheckedOutElsewhereError,
    BranchNotFoundError,
    CurrentDirectoryError,
    DestinationExistsError,
    DirtyWorktreeError,
    ExternalToolError,
    FilesystemError,
    InvalidBranchNameError,
    NotARepositoryError,
    NotWorktreeRootError,
    PrimaryWorktreeProtectedError,
    UnmergedBranchError,
    WorktreeKeeperError,
    WorktreeNotFoundError,
)
from git_worktree_keeper.models.prune import RemovalTarget
from git_worktree_keeper.services.display_service import DisplayService
from git_worktree_keeper.services.git import (
    GitOperations,
    WorktreeService,
    branch_checked_out_elsewhere,
    find_by_path,
)
from git_worktree_keeper.services.link_service import LinkService
from git_worktree_keeper.services.prune_service import PruneService
from git_worktree_keeper.services.removal import SafeRemoval, raise_for_failures, run_batch
from git_worktree_keeper.services.resolver import WorktreeResolver
from git_worktree_keeper.utils.logging import get_logger
from git_worktree_keeper.utils.paths import canonical, is_same_or_inside

logger = get_logger(__name__)


class WorktreeKeeper:
    """Main class for managing a repository's worktrees."""

    def __init__(
        self,
        config: Union[Config, dict],
        display: Optional[DisplayService] = None,
        git_factory: Callable[[str], GitOperations] = GitOperations,
    ):
        """Initialize WorktreeKeeper.

        Args:
            config: Configuration dict or Config object
            display: Output sink; defaults to rich consoles on stdout/stderr
            git_factory: Builds a Git wrapper for a repository path
        """
        # Convert dict to Config if needed
        if isinstance(config, dict):
            self.config = Config.from_dict(config)
        else:
            self.config = config
        self.display = display or DisplayService()
        self.git_factory = git_factory

        self.cwd = self.config.cwd
        self.force = self.config.force
        self.managed_root = self.config.managed_root

        self.resolver = WorktreeResolver(self.display, git_factory)
        self.removal = SafeRemoval(self.config)

    # Repository context

    def _repo_root(self) -> str:
        """Top-level of the repository named by --repo, or the one around cwd."""
        return GitOperations.find_repo(self.config.repo or self.cwd)

    def _repo_context(self) -> Optional[str]:
        try:
            return self._repo_root()
        except NotARepositoryError:
            return None

    def _worktrees(self, git_ops: GitOperations):
        return WorktreeService(git_ops).list_worktrees()

    # Destinations

    def unique_dest(self, repo_name: str) -> str:
        """Pick ``<root>/<random-id>/<repo-name>`` under an id not yet in use.

        Raises:
            DestinationExistsError: if every attempt hit an existing directory
        """
        dest = None
        for _ in range(self.config.max_dest_attempts):
            dir_id = secrets.token_hex(self.config.id_length // 2)
            dest = os.path.join(self.managed_root, dir_id, repo_name)
            if not os.path.lexists(os.path.dirname(dest)):
                return dest
            logger.debug(f"Directory id {dir_id} already taken")
        raise DestinationExistsError(dest)

    def _add_worktree(
        self,
        git_ops: GitOperations,
        name: str,
        dest: str,
        create: bool,
        base: Optional[str] = None,
    ) -> None:
        """Create the id directory and let git populate ``dest``; undo both on failure."""
        parent = os.path.dirname(dest)
        try:
            os.makedirs(parent)
        except OSError as e:
            raise FilesystemError("create directory", parent, e) from e

        try:
            if create:
                git_ops.add_worktree(name, dest, base)
            else:
                git_ops.checkout_worktree(name, dest)
        except ExternalToolError:
            shutil.rmtree(dest, ignore_errors=True)
            try:
                os.rmdir(parent)
            except OSError as e:
                logger.debug(f"Cannot remove {parent}: {e}")
            raise

    # Commands

    def new(self, name: str, create: bool = False, base: Optional[str] = None) -> str:
        """Check out ``name`` (or create it with ``create``) in a new managed worktree.

        Returns:
            Path of the new worktree, which is also printed on stdout
        """
        if base and not create:
            raise WorktreeKeeperError("a base can only be given together with --create")

        repo_root = self._repo_root()
        git_ops = self.git_factory(repo_root)

        if create:
            if not git_ops.check_ref_format(name):
                raise InvalidBranchNameError(name)
            if git_ops.has_local_branch(name):
                raise WorktreeKeeperError(
                    f"cannot create branch '{name}': already exists; use 'wt new {name}'"
                )

        dest = self.unique_dest(os.path.basename(repo_root))
        self._add_worktree(git_ops, name, dest, create, base)

        if create:
            self.display.report(f"creating branch '{name}'")
        else:
            self.display.report(f"checking out '{name}'")
        self.display.print_path(dest)
        return dest

    def switch(self, name: str) -> str:
        """Print the worktree for branch ``name``, creating one if none exists.

        An existing local or remote branch is checked out; an unknown name
        becomes a new branch from HEAD. Tags and commits are not branches and
        are refused.
        """
        repo_root = self._repo_root()
        git_ops = self.git_factory(repo_root)
        worktrees = self._worktrees(git_ops)

        try:
            existing = self.resolver.resolve_branch(worktrees, name, AMBIGUOUS_NAME_HINT)
        except WorktreeNotFoundError:
            existing = None
        if existing is not None:
            self.display.print_path(existing.path)
            return existing.path

        is_branch = git_ops.has_local_branch(name) or git_ops.has_remote_branch(name)
        if not is_branch and git_ops.rev_resolves(name):
            raise WorktreeKeeperError(f"'{name}' is not a branch; use 'wt new {name}'")
        create = not is_branch
        if create and not git_ops.check_ref_format(name):
            raise InvalidBranchNameError(name)

        dest = self.unique_dest(os.path.basename(repo_root))
        self._add_worktree(git_ops, name, dest, create)

        if create:
            self.display.report(f"creating branch '{name}'")
        else:
            self.display.report(f"checking out '{name}'")
        self.display.print_path(dest)
        return dest

    def list(self, porcelain: bool = False) -> None:
        """Show the repository's worktrees as a table, or git's raw porcelain."""
        git_ops = self.git_factory(self._repo_root())
        if porcelain:
            self.display.print_raw(git_ops.list_worktrees())
            return
        self.display.display_worktree_table(self._worktrees(git_ops), git_ops, self.cwd)

    def path(self, name: str) -> str:
        """Print the path of the single worktree checked out on ``name``."""
        git_ops = self.git_factory(self._repo_root())
        worktree = self.resolver.resolve_branch(
            self._worktrees(git_ops), name, AMBIGUOUS_NAME_HINT
        )
        self.display.print_path(worktree.path)
        return worktree.path

    def remove(self, names: List[str]) -> None:
        """Remove worktrees (and their branches) by branch name or root path.

        A single target raises its own error. Several targets are all
        attempted; failures are reported as they happen and summarised once.

        Raises:
            PartialBatchFailure: if any of several targets could not be removed
        """
        if len(names) == 1:
            self._remove_one(names[0])
            return

        failures = run_batch(
            names,
            self._remove_one,
            lambda name, e: self.display.error(str(e)),
        )
        raise_for_failures(failures)

    def _remove_one(self, name_or_path: str) -> None:
        target, admin_repo, worktrees = self.resolver.resolve_target(
            name_or_path, self._repo_context()
        )
        git_ops = self.git_factory(admin_repo)

        worktree = find_by_path(worktrees, target)
        if worktree is None:
            raise NotWorktreeRootError(target, "not a registered worktree")
        if worktrees and canonical(worktrees[0].path) == target:
            raise PrimaryWorktreeProtectedError(target)

        branch = worktree.branch
        if branch:
            if not git_ops.has_local_branch(branch):
                raise BranchNotFoundError(branch)
            if branch_checked_out_elsewhere(worktrees, branch, target):
                raise BranchCheckedOutElsewhereError(branch)

        if is_same_or_inside(self.cwd, target):
            raise CurrentDirectoryError(target)

        if not self.force:
            if git_ops.is_dirty(target):
                raise DirtyWorktreeError(target)
            if branch and not git_ops.is_branch_merged(branch):
                raise UnmergedBranchError(branch)

        self.removal.remove(
            git_ops,
            RemovalTarget(
                path=target,
                branch=branch,
                force_worktree=self.force,
                force_branch=self.force,
            ),
        )

        if branch:
            self.display.report(f"removed worktree and branch '{branch}' ({target})")
        else:
            self.display.report(f"removed worktree ({target})")

    def prune(self) -> None:
        """Prune the --repo repository, or every repository under the managed root."""
        service = PruneService(self.config, self.display, self.git_factory)
        if self.config.repo:
            service.prune_single(self.config.repo)
        else:
            service.prune_all()

    def link(self, files: List[str]) -> None:
        """Symlink ``files`` from the primary worktree into all linked worktrees."""
        git_ops = self.git_factory(self._repo_root())
        LinkService(self.display, force=self.force).link(self._worktrees(git_ops), files)
