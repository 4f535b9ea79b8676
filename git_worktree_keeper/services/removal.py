"""Safe removal protocol shared by `wt rm` and `wt prune`."""

import os
from typing import Callable, Iterable, List, Tuple, Union, TYPE_CHECKING

from git_worktree_keeper.exceptions import PartialBatchFailure, WorktreeKeeperError
from git_worktree_keeper.models.prune import RemovalOutcome, RemovalTarget
from git_worktree_keeper.services.discovery import cleanup_empty_parents
from git_worktree_keeper.services.git.operations import GitOperations
from git_worktree_keeper.utils.logging import get_logger
from git_worktree_keeper.utils.paths import is_managed_worktree_dir

if TYPE_CHECKING:
    from git_worktree_keeper.config import Config

logger = get_logger(__name__)


class SafeRemoval:
    """Deregisters worktrees, deletes their branches and tidies managed parents.

    Callers decide *whether* a worktree may go; this class only carries the
    removal out, in a fixed order: the worktree is deregistered first, and its
    branch is deleted only after that call returned successfully.
    """

    def __init__(self, config: Union["Config", dict]):
        """Initialize the removal protocol.

        Args:
            config: Configuration dictionary or Config object
        """
        self.config = config
        self.managed_root = config.get("managed_root")
        self.cwd = config.get("cwd") or os.getcwd()

    def remove(self, git_ops: GitOperations, target: RemovalTarget) -> None:
        """Remove one target, raising the first error encountered.

        Raises:
            ExternalToolError: if deregistration or branch deletion fails
        """
        git_ops.remove_worktree(target.path, force=target.force_worktree)
        self.cleanup_parents(target.path)
        if target.branch:
            git_ops.delete_branch(target.branch, force=target.force_branch)

    def cleanup_parents(self, removed_path: str) -> List[str]:
        """Remove empty parents of a managed worktree, up to the managed root.

        Worktrees outside ``<root>/<id>/<repo-name>`` were placed by the user
        and their parents are left alone even when empty.
        """
        if not self.managed_root or not is_managed_worktree_dir(removed_path, self.managed_root):
            return []
        removed = cleanup_empty_parents(
            os.path.dirname(removed_path), self.managed_root, self.cwd
        )
        for directory in removed:
            logger.debug(f"Removed empty directory {directory}")
        return removed

    def attempt(self, git_ops: GitOperations, target: RemovalTarget) -> RemovalOutcome:
        """Remove one target, capturing rather than raising its error."""
        try:
            self.remove(git_ops, target)
        except WorktreeKeeperError as e:
            logger.debug(f"Removal of {target.display_name} failed: {e}")
            return RemovalOutcome(target=target, error=e)
        return RemovalOutcome(target=target)


def run_batch(
    items: Iterable,
    action: Callable,
    on_error: Callable[[object, Exception], None],
) -> List[Tuple[object, Exception]]:
    """Apply ``action`` to each item, collecting ``(item, error)`` for failures.

    ``on_error`` is called as each failure happens so it can be reported
    immediately; successful items are never rolled back.
    """
    failures = []
    for item in items:
        try:
            action(item)
        except WorktreeKeeperError as e:
            on_error(item, e)
            failures.append((item, e))
    return failures


def raise_for_failures(
    failures: List, template: str = "{count} worktree(s) could not be removed"
) -> None:
    """Raise a single aggregate error when a batch had any failures."""
    if failures:
        raise PartialBatchFailure(len(failures), template.format(count=len(failures)))


def raise_for_outcomes(outcomes: List[RemovalOutcome]) -> None:
    raise_for_failures([o for o in outcomes if not o.ok])
