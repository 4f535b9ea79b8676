"""Custom exceptions for git-worktree-keeper"""

from typing import Iterable, Optional


class WorktreeKeeperError(Exception):
    """Base exception for all git-worktree-keeper errors."""
    pass


class NotARepositoryError(WorktreeKeeperError):
    """Raised when no repository can be found for the requested location."""

    def __init__(self, message: str = "not a git repository; use --repo or run inside one"):
        super().__init__(message)


class InvalidBranchNameError(WorktreeKeeperError):
    """Raised when Git rejects a branch name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"invalid branch name: {name}")


class DestinationExistsError(WorktreeKeeperError):
    """Raised when a worktree destination is already taken."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"path already exists: {path}")


class WorktreeNotFoundError(WorktreeKeeperError):
    """Raised when no worktree matches a branch name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"no worktree found for branch: {name}")


class AmbiguousNameError(WorktreeKeeperError):
    """Raised when more than one worktree is checked out on the same branch."""

    def __init__(self, name: str, paths: Iterable[str], hint: str):
        self.name = name
        self.paths = list(paths)
        super().__init__(hint)


class NotWorktreeRootError(WorktreeKeeperError):
    """Raised when a path exists but is not the root of a registered worktree."""

    def __init__(self, path: str, detail: Optional[str] = None):
        self.path = path
        message = f"not a worktree root: {path}"
        if detail:
            message = f"{detail}: {path}"
        super().__init__(message)


class DirtyWorktreeError(WorktreeKeeperError):
    """Raised when a worktree has uncommitted or untracked changes."""

    def __init__(self, path: str):
        self.path = path
        super().__init__("worktree has local changes; use --force to remove")


class UnmergedBranchError(WorktreeKeeperError):
    """Raised when a branch still has commits that are not merged anywhere."""

    def __init__(self, branch: str):
        self.branch = branch
        super().__init__(f"branch '{branch}' has unpushed commits; use --force to remove")


class BranchNotFoundError(WorktreeKeeperError):
    """Raised when the local branch bound to a worktree is missing."""

    def __init__(self, branch: str):
        self.branch = branch
        super().__init__(f"local branch not found: {branch}")


class PrimaryWorktreeProtectedError(WorktreeKeeperError):
    """Raised when the primary worktree is targeted for removal."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"cannot remove the primary worktree: {path}")


class CurrentDirectoryError(WorktreeKeeperError):
    """Raised when the current directory is inside the target worktree."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"cannot remove {path}: current directory is inside the worktree")


class BranchCheckedOutElsewhereError(WorktreeKeeperError):
    """Raised when the branch is still checked out in another worktree."""

    def __init__(self, branch: str):
        self.branch = branch
        super().__init__(
            f"branch '{branch}' is checked out in another worktree; remove that worktree first"
        )


class ExternalToolError(WorktreeKeeperError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        self.message = message

        error_msg = operation
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class FilesystemError(WorktreeKeeperError):
    """Exception raised when a filesystem operation fails."""

    def __init__(self, operation: str, path: str, error: Exception):
        self.operation = operation
        self.path = path
        super().__init__(f"cannot {operation} {path}: {error}")


class LinkError(WorktreeKeeperError):
    """Exception raised for invalid link requests."""
    pass


class PartialBatchFailure(WorktreeKeeperError):
    """Aggregate error raised after a batch completed with failed items."""

    def __init__(self, count: int, message: str):
        self.count = count
        super().__init__(message)
