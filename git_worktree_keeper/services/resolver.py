"""Resolution of user-supplied names and paths to registered worktrees."""

import os
from typing import Callable, List, Optional, Tuple

from git_worktree_keeper.constants import AMBIGUOUS_PATH_HINT
from git_worktree_keeper.exceptions import (
    AmbiguousNameError,
    NotARepositoryError,
    NotWorktreeRootError,
    WorktreeNotFoundError,
)
from git_worktree_keeper.models.worktree import Worktree
from git_worktree_keeper.services.display_service import DisplayService
from git_worktree_keeper.services.git.operations import GitOperations
from git_worktree_keeper.services.git.worktrees import WorktreeService, find_by_branch, find_by_path
from git_worktree_keeper.utils.logging import get_logger
from git_worktree_keeper.utils.paths import canonical

logger = get_logger(__name__)

# (target path, repository to run git in, registry of that repository)
ResolvedTarget = Tuple[str, str, List[Worktree]]


class WorktreeResolver:
    """Maps a branch name or a worktree path to exactly one registered worktree."""

    def __init__(
        self,
        display: DisplayService,
        git_factory: Callable[[str], GitOperations] = GitOperations,
    ):
        """Initialize the resolver.

        Args:
            display: Where ambiguity listings are reported
            git_factory: Builds a Git wrapper for a repository path
        """
        self.display = display
        self.git_factory = git_factory

    def resolve_branch(
        self, worktrees: List[Worktree], name: str, hint: str = AMBIGUOUS_PATH_HINT
    ) -> Worktree:
        """Return the single worktree checked out on ``name``.

        Raises:
            WorktreeNotFoundError: if no worktree has that branch
            AmbiguousNameError: if several do; every candidate is listed first
        """
        matches = find_by_branch(worktrees, name)
        if not matches:
            raise WorktreeNotFoundError(name)
        if len(matches) > 1:
            self.display.report(f"ambiguous name '{name}'; matches:")
            for match in matches:
                self.display.report_item(match.path)
            raise AmbiguousNameError(name, [m.path for m in matches], hint)
        return matches[0]

    def list_for(self, repo_path: str) -> List[Worktree]:
        return WorktreeService(self.git_factory(repo_path)).list_worktrees()

    def resolve_path(self, path: str) -> ResolvedTarget:
        """Resolve an explicit path to its worktree and owning repository.

        The path must be the root of a worktree, not a directory inside one.

        Raises:
            NotWorktreeRootError: if the path is not a worktree root
        """
        target = canonical(path)
        try:
            toplevel = GitOperations.find_repo(target)
        except NotARepositoryError:
            raise NotWorktreeRootError(path)
        if canonical(toplevel) != target:
            raise NotWorktreeRootError(path)

        worktrees = self.list_for(target)
        # Run git from another worktree of the same repository when one exists
        admin = next(
            (wt for wt in worktrees if canonical(wt.path) != target),
            worktrees[0] if worktrees else None,
        )
        if admin is None:
            raise NotWorktreeRootError(path, "cannot resolve repository for")
        return target, admin.path, worktrees

    def resolve_target(self, name_or_path: str, repo_root: Optional[str]) -> ResolvedTarget:
        """Resolve a branch name (in ``repo_root``) or a worktree path.

        Names win over paths: a branch lookup in the repository context is
        tried first, then the argument is treated as a filesystem path.

        Raises:
            NotARepositoryError: if there is no repository context and no such path
            WorktreeNotFoundError: if the repository has no worktree for the name
            AmbiguousNameError: if several worktrees share the branch name
        """
        if repo_root is not None:
            worktrees = self.list_for(repo_root)
            try:
                match = self.resolve_branch(worktrees, name_or_path)
            except WorktreeNotFoundError:
                match = None
            if match is not None:
                return canonical(match.path), repo_root, worktrees

            if os.path.exists(name_or_path) and find_by_path(worktrees, name_or_path):
                return canonical(name_or_path), repo_root, worktrees

        if os.path.exists(name_or_path):
            return self.resolve_path(name_or_path)

        if repo_root is not None:
            raise WorktreeNotFoundError(name_or_path)
        raise NotARepositoryError()
