"""Data models for git-worktree-keeper."""

from .worktree import Worktree
from .prune import Disposition, PruneCandidate, RemovalTarget, RemovalOutcome

__all__ = ["Worktree", "Disposition", "PruneCandidate", "RemovalTarget", "RemovalOutcome"]
