"""Path helpers shared by the discovery, removal and guard logic.

All comparisons are done on canonical (symlink-resolved) paths so that a
worktree reached through a symlinked home directory still matches the path
Git reports for it.
"""

import os


def canonical(path: str) -> str:
    """Resolve symlinks and normalise ``path``; works for missing paths too."""
    return os.path.realpath(os.path.abspath(path))


def is_same_or_inside(path: str, ancestor: str) -> bool:
    """True if ``path`` equals ``ancestor`` or lies somewhere below it."""
    path = canonical(path)
    ancestor = canonical(ancestor)
    try:
        return os.path.commonpath([path, ancestor]) == ancestor
    except ValueError:
        # Different drives on Windows
        return False


def is_strictly_inside(path: str, root: str) -> bool:
    """True if ``path`` lies below ``root`` and is not ``root`` itself."""
    return canonical(path) != canonical(root) and is_same_or_inside(path, root)


def is_managed_worktree_dir(path: str, root: str) -> bool:
    """True if ``path`` has the exact shape ``<root>/<id>/<repo-name>``."""
    if not is_strictly_inside(path, root):
        return False
    relative = os.path.relpath(canonical(path), canonical(root))
    return len(relative.split(os.sep)) == 2


def is_dir_empty(path: str) -> bool:
    """True if ``path`` is a readable directory with no entries."""
    try:
        with os.scandir(path) as entries:
            return next(entries, None) is None
    except OSError:
        return False
