"""Git operations service"""

import os
from typing import List, Optional, Tuple

import git

from git_worktree_keeper.constants import HEADS_PREFIX, REMOTES_PREFIX
from git_worktree_keeper.exceptions import ExternalToolError, NotARepositoryError
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)


def stderr_text(error: Exception) -> str:
    """Extract the plain stderr text from a GitPython command error."""
    text = (getattr(error, "stderr", "") or "").strip()
    # GitPython formats stderr as "stderr: '<text>'"
    if text.startswith("stderr:"):
        text = text[len("stderr:"):].strip()
        if len(text) >= 2 and text[0] == text[-1] == "'":
            text = text[1:-1]
    text = text.strip()
    if not text and not isinstance(error, git.exc.GitCommandError):
        text = str(error)
    return text or "unknown error"


class GitOperations:
    """Narrow wrapper around the git command line for one repository.

    Every method issues blocking git calls in order and interprets their exit
    status or output. Failures that callers must act on are raised as
    ``ExternalToolError``; yes/no queries return ``False`` when git fails.
    """

    def __init__(self, repo_path: str):
        """Initialize the service.

        Args:
            repo_path: Path to the repository (or any of its worktrees)
        """
        self.repo_path = repo_path

    def _get_git(self, path: Optional[str] = None) -> git.Git:
        """Get a git command wrapper running inside ``path`` (default: the repo).

        ``git.Git`` is used rather than ``git.Repo`` so that broken or
        half-deleted repositories still reach git and report their own error.
        """
        return git.Git(path or self.repo_path)

    def _succeeds(self, *args: str, path: Optional[str] = None) -> bool:
        """Run a git subcommand and report whether it exited with status 0."""
        try:
            status, _, _ = self._get_git(path).execute(
                ["git", *args], with_extended_output=True, with_exceptions=False
            )
        except (git.exc.GitError, OSError) as e:
            logger.debug(f"git {' '.join(args)} could not run: {e}")
            return False
        return status == 0

    def _output(self, *args: str) -> Optional[str]:
        """Run a git subcommand and return stripped stdout, or None on failure."""
        try:
            return self._get_git().execute(["git", *args]).strip()
        except (git.exc.GitError, OSError) as e:
            logger.debug(f"git {' '.join(args)} failed: {e}")
            return None

    # Repository lookup

    @staticmethod
    def find_repo(path: Optional[str] = None) -> str:
        """Return the top-level directory of the repository containing ``path``.

        Raises:
            NotARepositoryError: if ``path`` is not inside a git work tree
        """
        try:
            toplevel = git.Git(path or os.getcwd()).rev_parse("--show-toplevel")
        except (git.exc.GitError, OSError) as e:
            logger.debug(f"No repository at {path or os.getcwd()}: {e}")
            raise NotARepositoryError() from e
        return toplevel.strip()

    # Worktree registry

    def list_worktrees(self) -> str:
        """Return the raw ``git worktree list --porcelain`` output."""
        try:
            return self._get_git().worktree("list", "--porcelain")
        except (git.exc.GitError, OSError) as e:
            raise ExternalToolError("cannot list worktrees", stderr_text(e)) from e

    def add_worktree(self, branch: str, dest: str, base_ref: Optional[str] = None) -> None:
        """Create ``branch`` (from ``base_ref`` or HEAD) checked out at ``dest``."""
        args = ["add", "--quiet", "-b", branch, dest]
        if base_ref:
            args.append(base_ref)
        try:
            self._get_git().worktree(*args)
        except (git.exc.GitError, OSError) as e:
            raise ExternalToolError("cannot create worktree", stderr_text(e)) from e
        logger.debug(f"Created worktree at {dest} for new branch {branch}")

    def checkout_worktree(self, ref: str, dest: str) -> None:
        """Check out an existing branch or ref at ``dest``."""
        try:
            self._get_git().worktree("add", "--quiet", dest, ref)
        except (git.exc.GitError, OSError) as e:
            raise ExternalToolError("cannot create worktree", stderr_text(e)) from e
        logger.debug(f"Created worktree at {dest} for {ref}")

    def remove_worktree(self, path: str, force: bool = False) -> None:
        """Deregister the worktree at ``path`` and delete its directory."""
        args = ["remove"]
        if force:
            args.append("--force")
        args.append(path)
        try:
            self._get_git().worktree(*args)
        except (git.exc.GitError, OSError) as e:
            raise ExternalToolError(f"cannot remove worktree: {path}", stderr_text(e)) from e
        logger.info(f"Removed worktree at {path}")

    def prune_worktrees(self, dry_run: bool = False) -> str:
        """Drop registry entries whose directories are gone; return git's report."""
        args = ["prune", "--verbose"]
        if dry_run:
            args.append("--dry-run")
        try:
            _, _, stderr = self._get_git().worktree(*args, with_extended_output=True)
        except (git.exc.GitError, OSError) as e:
            logger.debug(f"git worktree prune failed in {self.repo_path}: {stderr_text(e)}")
            raise ExternalToolError("cannot prune worktree metadata") from e
        return (stderr or "").strip()

    # Branches and refs

    def delete_branch(self, branch: str, force: bool = False) -> None:
        """Delete a local branch; ``-d`` fails if it is not fully merged."""
        flag = "-D" if force else "-d"
        try:
            self._get_git().branch(flag, "--quiet", branch)
        except (git.exc.GitError, OSError) as e:
            action = "force-delete" if force else "delete"
            raise ExternalToolError(
                f"worktree removed but cannot {action} branch '{branch}'", stderr_text(e)
            ) from e
        logger.info(f"Deleted branch {branch}")

    def check_ref_format(self, name: str) -> bool:
        """Check whether ``name`` is a valid branch name."""
        return self._succeeds("check-ref-format", "--branch", name)

    def ref_exists(self, refname: str) -> bool:
        """Check whether a fully qualified ref exists."""
        return self._succeeds("show-ref", "--verify", "--quiet", refname)

    def rev_resolves(self, rev: str) -> bool:
        """Check whether any revision expression resolves locally."""
        return self._succeeds("rev-parse", "--verify", "--quiet", rev)

    def has_local_branch(self, name: str) -> bool:
        return self.ref_exists(f"{HEADS_PREFIX}{name}")

    def has_remote_branch(self, name: str) -> bool:
        """Check whether any remote-tracking ref ends in ``/<name>``."""
        output = self._output("for-each-ref", "--format=%(refname)", f"{REMOTES_PREFIX}*/{name}")
        return bool(output)

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """True if ``ancestor`` is reachable from ``descendant``."""
        return self._succeeds("merge-base", "--is-ancestor", ancestor, descendant)

    def upstream_for(self, branch: str) -> Optional[str]:
        """Short name of the branch's configured upstream, e.g. ``origin/feat``."""
        output = self._output(
            "for-each-ref", "--format=%(upstream:short)", f"{HEADS_PREFIX}{branch}"
        )
        return output or None

    def upstream_remote(self, branch: str) -> Optional[str]:
        """Name of the remote the branch tracks, from ``branch.<name>.remote``."""
        output = self._output("config", "--get", f"branch.{branch}.remote")
        return output or None

    def is_branch_merged(self, branch: str) -> bool:
        """Check the branch against its upstream, or HEAD when it has none."""
        branch_ref = f"{HEADS_PREFIX}{branch}"
        upstream = self.upstream_for(branch)
        if upstream and self.rev_resolves(upstream):
            return self.is_ancestor(branch_ref, upstream)
        return self.is_ancestor(branch_ref, "HEAD")

    def ahead_behind(self, branch: str) -> Optional[Tuple[int, int]]:
        """Return (ahead, behind) counts against the upstream, if any."""
        output = self._output(
            "rev-list", "--left-right", "--count", f"{branch}@{{upstream}}...{branch}"
        )
        if not output:
            return None
        parts = output.split()
        if len(parts) != 2:
            return None
        try:
            behind, ahead = int(parts[0]), int(parts[1])
        except ValueError:
            return None
        return ahead, behind

    # Remotes

    def has_remote(self, name: str) -> bool:
        return self._succeeds("remote", "get-url", name)

    def fetch_remote(self, name: str) -> None:
        """Refresh remote-tracking refs of ``name``, pruning deleted ones."""
        try:
            self._get_git().fetch("--prune", "--quiet", name)
        except (git.exc.GitError, OSError) as e:
            raise ExternalToolError(f"cannot fetch from '{name}'", stderr_text(e)) from e
        logger.debug(f"Fetched {name} in {self.repo_path}")

    def resolve_base_ref(self, remote: str, candidates: List[str]) -> Optional[str]:
        """Find the remote's default branch as ``<remote>/<branch>``.

        Tries ``<remote>/HEAD`` first, then each candidate branch name in order.
        """
        head = self._output("symbolic-ref", "--quiet", f"{REMOTES_PREFIX}{remote}/HEAD")
        prefix = f"{REMOTES_PREFIX}{remote}/"
        if head and head.startswith(prefix):
            branch = head[len(prefix):]
            if self.ref_exists(f"{prefix}{branch}"):
                return f"{remote}/{branch}"

        for name in candidates:
            if self.ref_exists(f"{prefix}{name}"):
                return f"{remote}/{name}"
        return None

    # Working tree state

    def is_dirty(self, worktree_path: str) -> bool:
        """True if the worktree has changes, including untracked files.

        A worktree whose status cannot be read counts as dirty.
        """
        try:
            status = self._get_git(worktree_path).status(
                "--porcelain", "--untracked-files=normal"
            )
        except (git.exc.GitError, OSError) as e:
            logger.debug(f"Could not check status of {worktree_path}: {e}")
            return True
        return bool(status.strip())
