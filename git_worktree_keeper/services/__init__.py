"""Services for git-worktree-keeper.

This package holds the scanning, classification, removal and resolution
logic, organized into modules:
- git: Git command wrapper and worktree registry parsing
- discovery: Managed-root walk for repositories and orphans
- classifier: Merged / upstream-gone classification for pruning
- removal: Safe removal protocol and batch helpers
- resolver: Name and path resolution to registered worktrees
- prune_service: `wt prune` orchestration
- link_service: `wt link` symlinking
- display_service: Report lines, paths and tables
"""

from .classifier import LifecycleClassifier
from .discovery import ManagedRootScanner, cleanup_empty_parents
from .display_service import DisplayService
from .link_service import LinkService
from .prune_service import PruneService
from .removal import SafeRemoval
from .resolver import WorktreeResolver

__all__ = [
    "LifecycleClassifier",
    "ManagedRootScanner",
    "cleanup_empty_parents",
    "DisplayService",
    "LinkService",
    "PruneService",
    "SafeRemoval",
    "WorktreeResolver",
]
