"""Lifecycle classification of secondary worktrees for pruning."""

from typing import Dict, List, Optional, Union, TYPE_CHECKING

from git_worktree_keeper.constants import FALLBACK_BASE_BRANCHES, HEADS_PREFIX
from git_worktree_keeper.exceptions import ExternalToolError
from git_worktree_keeper.models.prune import PruneCandidate
from git_worktree_keeper.models.worktree import Worktree
from git_worktree_keeper.services.git.operations import GitOperations
from git_worktree_keeper.utils.logging import get_logger

if TYPE_CHECKING:
    from git_worktree_keeper.config import Config

logger = get_logger(__name__)

_UNRESOLVED = object()


class LifecycleClassifier:
    """Decides which secondary worktrees of one repository could be pruned.

    A worktree is *merged* when its branch is an ancestor of the remote's
    default branch, and *upstream gone* when its configured upstream vanished
    after the remote was refreshed. Ancestry is git's own, so a squash merge
    does not count as merged.

    One classifier is meant to serve a single run against a single
    repository: the base ref and the per-remote refresh results are resolved
    once and reused for every worktree.
    """

    def __init__(self, git_ops: GitOperations, config: Union["Config", dict]):
        """Initialize the classifier.

        Args:
            git_ops: Git wrapper for the repository being pruned
            config: Configuration dictionary or Config object
        """
        self.git_ops = git_ops
        self.config = config
        self.remote_name = config.get("remote_name", "origin")
        self.default_branch = config.get("default_branch", "main")
        self.dry_run = config.get("dry_run", False)
        self._base_ref = _UNRESOLVED
        self._remote_ready: Dict[str, bool] = {}

    def base_ref(self) -> Optional[str]:
        """The resolved base ref (e.g. ``origin/main``), or None if unknown.

        Resolution failure is logged once and disables merged classification
        for the rest of the run.
        """
        if self._base_ref is _UNRESOLVED:
            candidates = [self.default_branch]
            candidates += [b for b in FALLBACK_BASE_BRANCHES if b not in candidates]
            self._base_ref = self.git_ops.resolve_base_ref(self.remote_name, candidates)
            if self._base_ref is None:
                tried = ", ".join(
                    [f"{self.remote_name}/HEAD"] + [f"{self.remote_name}/{b}" for b in candidates]
                )
                logger.warning(
                    f"cannot determine default branch (tried {tried}); skipping merged pruning"
                )
            else:
                logger.debug(f"Using {self._base_ref} as base ref")
        return self._base_ref

    def base_branch(self) -> Optional[str]:
        """Short branch name of the base ref, e.g. ``main`` for ``origin/main``."""
        base = self.base_ref()
        if base is None:
            return None
        return base[len(self.remote_name) + 1:]

    def _remote_refreshed(self, remote: str) -> bool:
        """Refresh ``remote`` once per run; False if it is missing or unreachable.

        A dry run never fetches and trusts the existing tracking refs.
        """
        if remote in self._remote_ready:
            return self._remote_ready[remote]

        ready = True
        if not self.git_ops.has_remote(remote):
            logger.warning(f"remote '{remote}' not found; skipping upstream-gone pruning")
            ready = False
        elif not self.dry_run:
            try:
                self.git_ops.fetch_remote(remote)
            except ExternalToolError as e:
                logger.warning(f"{e}; skipping upstream-gone pruning")
                ready = False

        self._remote_ready[remote] = ready
        return ready

    def is_merged(self, branch: str) -> bool:
        base = self.base_ref()
        if base is None:
            return False
        return self.git_ops.is_ancestor(f"{HEADS_PREFIX}{branch}", base)

    def upstream_state(self, branch: str) -> tuple:
        """Return ``(remote, gone)`` for the branch's configured upstream."""
        upstream = self.git_ops.upstream_for(branch)
        if upstream is None:
            return None, False

        remote = self.git_ops.upstream_remote(branch)
        if remote is None or remote == ".":
            # Tracking a local branch; there is nothing to refresh
            return None, False

        if not self._remote_refreshed(remote):
            return remote, False
        return remote, not self.git_ops.rev_resolves(upstream)

    def classify_one(self, worktree: Worktree, gone: bool = False) -> PruneCandidate:
        """Classify a single secondary worktree that has a branch."""
        branch = worktree.branch
        candidate = PruneCandidate(branch=branch, path=worktree.path)

        if worktree.locked:
            logger.debug(f"{branch} is locked; protected")
            candidate.protected = True
            return candidate
        if branch == self.base_branch():
            logger.debug(f"{branch} is the base branch; protected")
            candidate.protected = True
            return candidate

        candidate.merged = self.is_merged(branch)
        if gone:
            candidate.remote, candidate.upstream_gone = self.upstream_state(branch)
        else:
            candidate.remote = self.git_ops.upstream_remote(branch)

        logger.debug(f"{branch}: {candidate.disposition.value}")
        return candidate

    def classify(self, worktrees: List[Worktree], gone: bool = False) -> List[PruneCandidate]:
        """Classify every secondary worktree; the primary (index 0) is never a candidate.

        Bare and detached worktrees have no branch to judge and are skipped.
        """
        candidates = []
        for worktree in worktrees[1:]:
            if worktree.bare or not worktree.branch:
                continue
            candidates.append(self.classify_one(worktree, gone))
        return candidates
