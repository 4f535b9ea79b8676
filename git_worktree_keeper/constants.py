"""Shared constants for git-worktree-keeper."""

from dataclasses import dataclass
from typing import List

# Prefix for every line written to the diagnostic stream
PROG_NAME = "wt"

# Git reports this HEAD for a repository without any commits
UNBORN_HEAD = "0" * 40

HEADS_PREFIX = "refs/heads/"
REMOTES_PREFIX = "refs/remotes/"

# Layout of the managed root: <root>/<random-id>/<repo-name>
DEFAULT_ROOT_PARTS = (".wt", "worktrees")
DEFAULT_LOG_PARTS = (".wt", "wt.log")
ROOT_ENV_VAR = "WT_ROOT"

# Fallback base branches, tried after origin/HEAD and the configured default
FALLBACK_BASE_BRANCHES = ("main", "master")

# Reason labels reported for prune candidates, in reporting order
REASON_MERGED = "merged"
REASON_UPSTREAM_GONE = "upstream gone"
REASON_CURRENT_DIRECTORY = "current directory"

AMBIGUOUS_PATH_HINT = "multiple worktrees match; specify a path instead"
AMBIGUOUS_NAME_HINT = "multiple worktrees match; specify the full branch name"


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    key: str
    label: str
    width: int = 0  # 0 means auto-width


COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("current", "", 1),
    ColumnDefinition("branch", "BRANCH", 24),
    ColumnDefinition("head", "HEAD", 8),
    ColumnDefinition("state", "STATE", 8),
    ColumnDefinition("path", "PATH"),
]

HEAD_WIDTH = 8

SYMBOL_CURRENT = "*"
SYMBOL_DIRTY = "*"
SYMBOL_EMPTY = "-"
DETACHED_LABEL = "(detached)"
