"""Utility functions for git-worktree-keeper.

This package provides utility modules:
- logging: Logging configuration and logger creation
- paths: Canonical path comparisons used by the safety guards
"""

from .logging import setup_logging, get_logger, ColoredFormatter
from .paths import (
    canonical,
    is_same_or_inside,
    is_strictly_inside,
    is_managed_worktree_dir,
    is_dir_empty,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "ColoredFormatter",
    # Paths
    "canonical",
    "is_same_or_inside",
    "is_strictly_inside",
    "is_managed_worktree_dir",
    "is_dir_empty",
]
