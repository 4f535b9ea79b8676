"""Git-related services for git-worktree-keeper."""

from .operations import GitOperations
from .worktrees import (
    WorktreeService,
    parse_porcelain,
    find_by_branch,
    find_by_path,
    branch_checked_out_elsewhere,
)

__all__ = [
    "GitOperations",
    "WorktreeService",
    "parse_porcelain",
    "find_by_branch",
    "find_by_path",
    "branch_checked_out_elsewhere",
]
