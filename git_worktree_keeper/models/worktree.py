"""Worktree data models."""

from dataclasses import dataclass
from typing import Optional

from git_worktree_keeper.constants import UNBORN_HEAD


@dataclass
class Worktree:
    """One entry of a repository's worktree registry."""

    path: str
    head: str = ""
    branch: Optional[str] = None  # None = detached HEAD or bare
    bare: bool = False
    detached: bool = False
    locked: bool = False
    prunable: bool = False  # Directory missing on disk

    @property
    def is_unborn(self) -> bool:
        """True when the repository has no commits yet."""
        return self.head == UNBORN_HEAD

    def short_head(self, width: int) -> str:
        """Abbreviated HEAD for display, '-' for an unborn HEAD."""
        if not self.head or self.is_unborn:
            return "-"
        return self.head[:width]

    def __str__(self) -> str:
        """String representation of worktree."""
        branch = self.branch or ("bare" if self.bare else "detached")
        flags = [name for name in ("locked", "prunable") if getattr(self, name)]
        suffix = f" [{', '.join(flags)}]" if flags else ""
        return f"{branch} @ {self.path}{suffix}"
