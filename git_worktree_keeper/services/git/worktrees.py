"""Worktree registry parsing for git-worktree-keeper."""

from typing import Dict, Any, List, Optional

from git_worktree_keeper.constants import HEADS_PREFIX
from git_worktree_keeper.models.worktree import Worktree
from git_worktree_keeper.services.git.operations import GitOperations
from git_worktree_keeper.utils.logging import get_logger
from git_worktree_keeper.utils.paths import canonical

logger = get_logger(__name__)


class _PorcelainParser:
    """Accumulates one worktree block at a time."""

    def __init__(self):
        self.worktrees: List[Worktree] = []
        self.current: Dict[str, Any] = {}

    def flush(self):
        """Emit the in-progress record if a worktree line started it, then reset."""
        if "path" in self.current:
            self.worktrees.append(Worktree(**self.current))
        self.current = {}

    def feed(self, line: str):
        if not line:
            self.flush()
        elif line.startswith("worktree "):
            self.flush()
            self.current["path"] = line[len("worktree "):]
        elif line.startswith("HEAD "):
            self.current["head"] = line[len("HEAD "):]
        elif line.startswith("branch "):
            ref = line[len("branch "):]
            # Anything outside refs/heads/ is treated as detached
            if ref.startswith(HEADS_PREFIX):
                self.current["branch"] = ref[len(HEADS_PREFIX):]
            else:
                self.current["branch"] = None
        elif line == "bare":
            self.current["bare"] = True
        elif line == "detached":
            self.current["detached"] = True
        elif line == "locked" or line.startswith("locked "):
            self.current["locked"] = True
        elif line == "prunable" or line.startswith("prunable "):
            self.current["prunable"] = True


def parse_porcelain(output: str) -> List[Worktree]:
    """Parse ``git worktree list --porcelain`` output.

    Format:
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name
        (blank line between worktrees)

    Order is preserved, so the primary worktree is always first. A missing
    trailing blank line still yields the final record.
    """
    parser = _PorcelainParser()
    for line in output.splitlines():
        parser.feed(line)
    parser.flush()
    return parser.worktrees


def find_by_branch(worktrees: List[Worktree], name: str) -> List[Worktree]:
    """All worktrees checked out on branch ``name``, in registry order."""
    return [wt for wt in worktrees if wt.branch == name]


def find_by_path(worktrees: List[Worktree], path: str) -> Optional[Worktree]:
    """The worktree rooted exactly at ``path``, comparing canonical paths."""
    target = canonical(path)
    for wt in worktrees:
        if wt.path == path or canonical(wt.path) == target:
            return wt
    return None


def branch_checked_out_elsewhere(
    worktrees: List[Worktree], branch: str, exclude_path: str
) -> bool:
    """True if ``branch`` is checked out in a worktree other than ``exclude_path``."""
    excluded = canonical(exclude_path)
    return any(
        wt.branch == branch and canonical(wt.path) != excluded for wt in worktrees
    )


class WorktreeService:
    """Service for reading a repository's worktree registry."""

    def __init__(self, git_ops: GitOperations):
        """Initialize the worktree service.

        Args:
            git_ops: Git wrapper for the repository to inspect
        """
        self.git_ops = git_ops

    def list_worktrees(self) -> List[Worktree]:
        """Get all worktrees of the repository, primary first.

        Raises:
            ExternalToolError: if git cannot list the worktrees
        """
        worktrees = parse_porcelain(self.git_ops.list_worktrees())
        logger.debug(f"Found {len(worktrees)} worktrees")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

