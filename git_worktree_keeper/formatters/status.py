"""Reason and report-line formatting for prune and remove."""

import os
from typing import List

from git_worktree_keeper.constants import REASON_CURRENT_DIRECTORY
from git_worktree_keeper.models.prune import PruneCandidate


def format_reason(reasons: List[str]) -> str:
    """
    Join prune reasons in reporting order.

    Args:
        reasons: Reason labels, merged first

    Returns:
        e.g. "merged", "upstream gone" or "merged, upstream gone"
    """
    return ", ".join(reasons)


def format_candidate_label(repo_path: str, candidate: PruneCandidate) -> str:
    """Label a candidate as ``<repo-name>/<branch>``."""
    return f"{os.path.basename(os.path.normpath(repo_path))}/{candidate.branch}"


def format_removed(label: str, candidate: PruneCandidate) -> str:
    return f"removed {label} ({format_reason(candidate.reasons)})"


def format_would_remove(label: str, candidate: PruneCandidate) -> str:
    return f"would remove {label} ({format_reason(candidate.reasons)})"


def format_skipped_current(label: str, candidate: PruneCandidate) -> str:
    """
    Format the skip line for a candidate the user is standing in.

    The prune reasons are kept so the user can see why it would have gone.

    Example:
        "skipped repo/feat (merged, current directory)"
    """
    reasons = candidate.reasons + [REASON_CURRENT_DIRECTORY]
    return f"skipped {label} ({format_reason(reasons)})"
