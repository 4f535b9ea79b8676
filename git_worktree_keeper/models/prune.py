"""Models for prune classification and removal results."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from git_worktree_keeper.constants import REASON_MERGED, REASON_UPSTREAM_GONE


class Disposition(Enum):
    """Classifier verdict for a secondary worktree."""
    KEEP = "keep"
    PROTECTED = "protected"
    MERGED = "merged"
    UPSTREAM_GONE = "upstream-gone"
    MERGED_UPSTREAM_GONE = "merged-upstream-gone"


@dataclass
class PruneCandidate:
    """Classification of one secondary worktree. Recomputed on every run."""
    branch: str
    path: str
    merged: bool = False
    remote: Optional[str] = None  # Remote of the configured upstream, if any
    upstream_gone: bool = False
    protected: bool = False

    @property
    def eligible(self) -> bool:
        return not self.protected and (self.merged or self.upstream_gone)

    @property
    def reasons(self) -> List[str]:
        reasons = []
        if self.merged:
            reasons.append(REASON_MERGED)
        if self.upstream_gone:
            reasons.append(REASON_UPSTREAM_GONE)
        return reasons

    @property
    def disposition(self) -> Disposition:
        if self.protected:
            return Disposition.PROTECTED
        if self.merged and self.upstream_gone:
            return Disposition.MERGED_UPSTREAM_GONE
        if self.merged:
            return Disposition.MERGED
        if self.upstream_gone:
            return Disposition.UPSTREAM_GONE
        return Disposition.KEEP


@dataclass
class RemovalTarget:
    """A worktree the removal protocol should deregister."""
    path: str
    branch: Optional[str] = None
    force_worktree: bool = False  # Bypass Git's own dirty/lock checks
    force_branch: bool = False  # Delete the branch with -D instead of -d
    label: Optional[str] = None  # Name used in report lines

    @property
    def display_name(self) -> str:
        return self.label or self.branch or self.path


@dataclass
class RemovalOutcome:
    """Result of attempting one removal target."""
    target: RemovalTarget
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None
