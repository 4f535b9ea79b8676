"""Prune service: metadata cleanup, lifecycle pruning and orphan removal."""

import os
import shutil
from typing import Callable, List, Optional, Union, TYPE_CHECKING

from git_worktree_keeper.exceptions import FilesystemError
from git_worktree_keeper.formatters import (
    format_candidate_label,
    format_removed,
    format_skipped_current,
    format_would_remove,
)
from git_worktree_keeper.models.prune import PruneCandidate, RemovalOutcome, RemovalTarget
from git_worktree_keeper.services.classifier import LifecycleClassifier
from git_worktree_keeper.services.discovery import ManagedRootScanner, cleanup_empty_parents
from git_worktree_keeper.services.display_service import DisplayService
from git_worktree_keeper.services.git.operations import GitOperations
from git_worktree_keeper.services.git.worktrees import WorktreeService
from git_worktree_keeper.services.removal import (
    SafeRemoval,
    raise_for_failures,
    raise_for_outcomes,
    run_batch,
)
from git_worktree_keeper.utils.logging import get_logger
from git_worktree_keeper.utils.paths import canonical, is_same_or_inside

if TYPE_CHECKING:
    from git_worktree_keeper.config import Config

logger = get_logger(__name__)


class PruneService:
    """Runs `wt prune` for one repository or for every repository under the managed root."""

    def __init__(
        self,
        config: Union["Config", dict],
        display: DisplayService,
        git_factory: Callable[[str], GitOperations] = GitOperations,
    ):
        """Initialize the prune service.

        Args:
            config: Configuration dictionary or Config object
            display: Where report lines are written
            git_factory: Builds a Git wrapper for a repository path
        """
        self.config = config
        self.display = display
        self.git_factory = git_factory
        self.dry_run = config.get("dry_run", False)
        self.gone = config.get("gone", False)
        self.cwd = config.get("cwd") or os.getcwd()
        self.managed_root = config.get("managed_root")
        self.removal = SafeRemoval(config)

    def prune_candidates(self, git_ops: GitOperations, repo_path: str) -> List[RemovalOutcome]:
        """Classify the repository's worktrees and remove the eligible ones.

        Guards are applied in order to each eligible candidate: the current
        directory guard reports the skip with its reasons; a dirty worktree is
        skipped without any output.

        Raises:
            PartialBatchFailure: after all candidates were tried, if any removal failed
        """
        worktrees = WorktreeService(git_ops).list_worktrees()
        if worktrees and canonical(worktrees[0].path) != canonical(git_ops.repo_path):
            # git must never run inside a worktree it is about to delete
            repo_path = worktrees[0].path
            git_ops = self.git_factory(repo_path)
        classifier = LifecycleClassifier(git_ops, self.config)

        outcomes = []
        for candidate in classifier.classify(worktrees, gone=self.gone):
            if not candidate.eligible:
                continue
            outcome = self._prune_candidate(git_ops, repo_path, candidate)
            if outcome is not None:
                outcomes.append(outcome)

        raise_for_outcomes(outcomes)
        return outcomes

    def _prune_candidate(
        self, git_ops: GitOperations, repo_path: str, candidate: PruneCandidate
    ) -> Optional[RemovalOutcome]:
        label = format_candidate_label(repo_path, candidate)

        if is_same_or_inside(self.cwd, candidate.path):
            self.display.report(format_skipped_current(label, candidate))
            return None
        if git_ops.is_dirty(candidate.path):
            return None
        if self.dry_run:
            self.display.report(format_would_remove(label, candidate))
            return None

        # Merged-only branches get "git branch -d", which re-checks the merge itself
        target = RemovalTarget(
            path=candidate.path,
            branch=candidate.branch,
            force_branch=candidate.upstream_gone,
            label=label,
        )
        outcome = self.removal.attempt(git_ops, target)
        if outcome.ok:
            self.display.report(format_removed(label, candidate))
        else:
            self.display.error(f"cannot remove {label}: {outcome.error}")
        return outcome

    def prune_repo(self, repo_path: str, announce: bool = False) -> None:
        """Drop stale registry entries, then prune eligible worktrees of one repository.

        Raises:
            ExternalToolError: if git cannot prune or list the worktrees
            PartialBatchFailure: if any eligible worktree could not be removed
        """
        git_ops = self.git_factory(repo_path)
        output = git_ops.prune_worktrees(dry_run=self.dry_run)
        if output:
            if announce:
                self.display.report(f"pruning {repo_path}")
            for line in output.splitlines():
                self.display.report(line)
        self.prune_candidates(git_ops, repo_path)

    def prune_single(self, repo: str) -> None:
        """Prune only the repository at ``repo``; orphans are not scanned."""
        self.prune_repo(GitOperations.find_repo(repo))

    def prune_all(self) -> None:
        """Prune every repository with worktrees under the managed root, then orphans.

        A missing managed root is not an error. Failures are isolated per
        repository and per orphan, and summarised once at the end.

        Raises:
            PartialBatchFailure: if any repository or orphan could not be pruned
        """
        if not self.managed_root or not os.path.isdir(self.managed_root):
            logger.debug(f"No managed root at {self.managed_root}")
            return

        scanner = ManagedRootScanner(self.managed_root)
        repos = [repo for repo in sorted(scanner.discover_repos()) if os.path.exists(repo)]

        repo_failures = run_batch(
            repos,
            lambda repo: self.prune_repo(repo, announce=True),
            lambda repo, e: self.display.error(f"cannot prune {repo}: {e}"),
        )
        orphan_failures = self.prune_orphans(scanner)

        raise_for_failures(repo_failures, "cannot prune {count} repo(s)")
        raise_for_failures(orphan_failures, "cannot remove {count} orphaned worktree(s)")

    def prune_orphans(self, scanner: ManagedRootScanner) -> List:
        """Delete managed worktree directories whose repository no longer exists.

        Returns:
            ``(path, error)`` pairs for orphans that could not be removed
        """
        orphans = scanner.find_orphans()
        if not orphans:
            return []

        if self.dry_run:
            for orphan in orphans:
                self.display.print_path(orphan)
            self.display.report(f"would remove {len(orphans)} orphaned worktree(s) (dry run)")
            return []

        removed: List[str] = []
        failures = run_batch(
            orphans,
            lambda orphan: self._remove_orphan(orphan, removed),
            lambda orphan, e: self.display.error(str(e)),
        )

        # Deepest parents first so a chain collapses in one pass
        parents = sorted({os.path.dirname(p) for p in removed}, key=lambda p: -p.count(os.sep))
        for parent in parents:
            for directory in cleanup_empty_parents(parent, self.managed_root, self.cwd):
                self.display.report(f"removed empty directory {directory}")

        if removed:
            self.display.report(f"removed {len(removed)} orphaned worktree(s)")
        return failures

    def _remove_orphan(self, orphan: str, removed: List[str]) -> None:
        if is_same_or_inside(self.cwd, orphan):
            self.display.report(f"skipped {orphan} (orphaned, current directory)")
            return
        try:
            shutil.rmtree(orphan)
        except OSError as e:
            raise FilesystemError("remove", orphan, e) from e
        removed.append(orphan)
        self.display.report(f"removed {orphan}")
