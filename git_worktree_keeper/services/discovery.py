"""Managed-root scanning: repository discovery and orphan detection."""

import os
import stat
from typing import Iterator, List, Optional, Set, Tuple

from git_worktree_keeper.utils.logging import get_logger
from git_worktree_keeper.utils.paths import canonical, is_dir_empty, is_same_or_inside

logger = get_logger(__name__)


def parse_gitdir(dot_git_file: str) -> Optional[str]:
    """Read the ``gitdir: <path>`` pointer of a linked worktree's ``.git`` file.

    Relative targets are resolved against the directory holding the file.
    Returns None if the file cannot be read or has no pointer line.
    """
    try:
        with open(dot_git_file, encoding="utf-8") as f:
            line = f.readline()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Cannot read {dot_git_file}: {e}")
        return None

    if not line.startswith("gitdir: "):
        return None
    gitdir = line[len("gitdir: "):].strip()
    if not gitdir:
        return None
    if os.path.isabs(gitdir):
        return gitdir
    return os.path.normpath(os.path.join(os.path.dirname(dot_git_file), gitdir))


def admin_repo_from_gitdir(gitdir: str) -> Optional[str]:
    """Map ``<repo>/.git/worktrees/<name>`` to ``<repo>``, or None for any other shape."""
    gitdir = os.path.normpath(gitdir)
    worktrees_dir = os.path.dirname(gitdir)
    if not os.path.basename(gitdir) or os.path.basename(worktrees_dir) != "worktrees":
        return None
    dot_git_dir = os.path.dirname(worktrees_dir)
    if os.path.basename(dot_git_dir) != ".git":
        return None
    repo = os.path.dirname(dot_git_dir)
    if not repo or repo == dot_git_dir:
        return None
    return repo


def _dot_git_kind(directory: str) -> Optional[str]:
    """Classify ``<directory>/.git`` without following symlinks."""
    try:
        mode = os.lstat(os.path.join(directory, ".git")).st_mode
    except OSError:
        return None
    if stat.S_ISREG(mode):
        return "file"
    if stat.S_ISDIR(mode):
        return "dir"
    return None


class ManagedRootScanner:
    """Walks the managed root looking for linked-worktree pointer files.

    The walk uses an explicit stack, never follows symlinked directories and
    remembers visited canonical paths, so deep trees and link cycles cannot
    make it recurse without bound. A directory holding a ``.git`` file is a
    worktree and is not descended into; a directory holding a ``.git``
    directory is a full repository and is not descended into either.
    """

    def __init__(self, root: str):
        self.root = root
        self._warned: Set[str] = set()

    def _warn_malformed(self, dot_git: str):
        # Discovery and orphan detection both walk the tree; warn once per file
        if dot_git not in self._warned:
            self._warned.add(dot_git)
            logger.warning(f"cannot parse {dot_git}, skipping")

    def _pointer_dirs(self) -> Iterator[Tuple[str, str]]:
        """Yield ``(worktree_dir, dot_git_file)`` for every linked worktree found."""
        if not os.path.isdir(self.root):
            return

        stack = [self.root]
        visited: Set[str] = set()
        while stack:
            directory = stack.pop()
            real = canonical(directory)
            if real in visited:
                continue
            visited.add(real)

            try:
                with os.scandir(directory) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                logger.warning(f"cannot read directory {directory}: {e}")
                continue

            subdirs = []
            for entry in entries:
                try:
                    if not entry.is_dir(follow_symlinks=False):
                        continue
                except OSError:
                    continue

                kind = _dot_git_kind(entry.path)
                if kind == "file":
                    yield entry.path, os.path.join(entry.path, ".git")
                elif kind is None:
                    subdirs.append(entry.path)

            # Reverse so the stack pops children in name order
            stack.extend(reversed(subdirs))

    def discover_repos(self) -> Set[str]:
        """Repository roots owning at least one worktree under the managed root."""
        repos: Set[str] = set()
        for directory, dot_git in self._pointer_dirs():
            gitdir = parse_gitdir(dot_git)
            if gitdir is None:
                self._warn_malformed(dot_git)
                continue
            repo = admin_repo_from_gitdir(gitdir)
            if repo is None:
                logger.debug(f"Ignoring {directory}: unexpected gitdir {gitdir}")
                continue
            repos.add(repo)
        logger.debug(f"Discovered {len(repos)} repositories under {self.root}")
        return repos

    def find_orphans(self) -> List[str]:
        """Worktree directories whose pointer target no longer exists."""
        orphans = []
        for directory, dot_git in self._pointer_dirs():
            gitdir = parse_gitdir(dot_git)
            if gitdir is None:
                self._warn_malformed(dot_git)
                continue
            if not os.path.lexists(gitdir):
                logger.debug(f"Orphaned worktree {directory}: {gitdir} is gone")
                orphans.append(directory)
        return orphans


def cleanup_empty_parents(start: str, root: str, cwd: str) -> List[str]:
    """Remove empty directories from ``start`` upward, never touching ``root``.

    Stops at the first directory that is not empty, that is the current
    directory or one of its ancestors, or that cannot be removed. Returns the
    directories that were removed.
    """
    removed = []
    directory = start
    root_real = canonical(root)
    while canonical(directory) != root_real and is_same_or_inside(directory, root):
        if not is_dir_empty(directory):
            break
        if is_same_or_inside(cwd, directory):
            logger.debug(f"Keeping {directory}: current directory is inside it")
            break
        try:
            os.rmdir(directory)
        except OSError as e:
            logger.debug(f"Cannot remove {directory}: {e}")
            break
        removed.append(directory)
        parent = os.path.dirname(directory)
        if parent == directory:
            break
        directory = parent
    return removed
