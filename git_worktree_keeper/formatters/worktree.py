"""Table cell formatting for the worktree listing."""

from typing import Dict, TYPE_CHECKING

from git_worktree_keeper.constants import (
    DETACHED_LABEL,
    HEAD_WIDTH,
    SYMBOL_CURRENT,
    SYMBOL_DIRTY,
    SYMBOL_EMPTY,
)
from git_worktree_keeper.models.worktree import Worktree
from git_worktree_keeper.utils.paths import is_same_or_inside

if TYPE_CHECKING:
    from git_worktree_keeper.services.git.operations import GitOperations


def is_current_worktree(worktree: Worktree, cwd: str) -> bool:
    """True if ``cwd`` is the worktree root or somewhere inside it."""
    return is_same_or_inside(cwd, worktree.path)


def format_branch(worktree: Worktree) -> str:
    """
    Format the branch cell.

    Args:
        worktree: Worktree entry

    Returns:
        Branch name, or "(detached)" when no branch is checked out
    """
    return worktree.branch or DETACHED_LABEL


def format_state(worktree: Worktree, git_ops: "GitOperations") -> str:
    """
    Format the STATE cell.

    "*" marks local changes, "+N"/"-N" commits ahead of/behind the upstream,
    followed by the detached/locked/prunable flags. Bare repositories show
    "bare"; a worktree with nothing to report shows "-".

    Args:
        worktree: Worktree entry
        git_ops: Git wrapper used for dirtiness and ahead/behind counts

    Returns:
        State string, e.g. "*+2,locked"
    """
    if worktree.bare:
        return "bare"

    state = ""
    if not worktree.prunable and git_ops.is_dirty(worktree.path):
        state += SYMBOL_DIRTY
    if worktree.branch:
        counts = git_ops.ahead_behind(worktree.branch)
        if counts:
            ahead, behind = counts
            if ahead:
                state += f"+{ahead}"
            if behind:
                state += f"-{behind}"

    flags = [name for name in ("detached", "locked", "prunable") if getattr(worktree, name)]
    if state and flags:
        state += ","
    state += ",".join(flags)

    return state or SYMBOL_EMPTY


def format_worktree_row(worktree: Worktree, git_ops: "GitOperations", cwd: str) -> Dict[str, str]:
    """Build all cells of one listing row, keyed by column."""
    return {
        "current": SYMBOL_CURRENT if is_current_worktree(worktree, cwd) else "",
        "branch": format_branch(worktree),
        "head": worktree.short_head(HEAD_WIDTH),
        "state": format_state(worktree, git_ops),
        "path": worktree.path,
    }
