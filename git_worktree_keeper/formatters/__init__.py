"""Formatting utilities for git-worktree-keeper.

This package provides formatting functions for the worktree listing and the
prune/remove report lines, organized into logical modules:
- worktree: Table cells for `wt list`
- status: Reasons and report lines for prune and remove
"""

# Worktree formatters
from .worktree import (
    format_branch,
    format_state,
    format_worktree_row,
    is_current_worktree,
)

# Status formatters
from .status import (
    format_reason,
    format_candidate_label,
    format_removed,
    format_would_remove,
    format_skipped_current,
)

__all__ = [
    # Worktree
    "format_branch",
    "format_state",
    "format_worktree_row",
    "is_current_worktree",
    # Status
    "format_reason",
    "format_candidate_label",
    "format_removed",
    "format_would_remove",
    "format_skipped_current",
]
