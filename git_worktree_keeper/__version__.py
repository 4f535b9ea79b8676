"""Version of the installed git-worktree-keeper distribution."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("git-worktree-keeper")
except PackageNotFoundError:
    # Imported from a source tree that was never installed
    __version__ = "0.1.0"
