"""Configuration handling for git-worktree-keeper"""

import os
from dataclasses import dataclass, field
from typing import Optional

from git_worktree_keeper.constants import DEFAULT_ROOT_PARTS, ROOT_ENV_VAR


def default_managed_root() -> str:
    """Return the managed root, honouring the WT_ROOT override."""
    override = os.environ.get(ROOT_ENV_VAR)
    if override:
        return os.path.abspath(os.path.expanduser(override))
    return os.path.join(os.path.expanduser("~"), *DEFAULT_ROOT_PARTS)


@dataclass
class Config:
    """Configuration for git-worktree-keeper with validation."""

    # Locations
    managed_root: str = field(default_factory=default_managed_root)
    repo: Optional[str] = None  # Explicit --repo override
    cwd: str = field(default_factory=os.getcwd)

    # Base branch resolution
    default_branch: str = "main"
    remote_name: str = "origin"

    # Execution modes
    dry_run: bool = False
    gone: bool = False
    force: bool = False
    verbose: bool = False
    debug: bool = False

    # Managed directory naming
    id_length: int = 6  # Hex digits in the random directory id
    max_dest_attempts: int = 16

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_managed_root()
        self._validate_cwd()
        self._validate_default_branch()
        self._validate_remote_name()
        self._validate_id_length()
        self._validate_max_dest_attempts()

    def _validate_managed_root(self):
        """Validate managed_root is a non-empty path and make it absolute."""
        if not self.managed_root or not str(self.managed_root).strip():
            raise ValueError("managed_root cannot be empty")
        self.managed_root = os.path.abspath(str(self.managed_root))

    def _validate_cwd(self):
        """Validate cwd is a non-empty path and make it absolute."""
        if not self.cwd or not str(self.cwd).strip():
            raise ValueError("cwd cannot be empty")
        self.cwd = os.path.abspath(str(self.cwd))
        if self.repo is not None:
            self.repo = str(self.repo)

    def _validate_default_branch(self):
        """Validate default_branch is not empty."""
        if not self.default_branch or not self.default_branch.strip():
            raise ValueError("default_branch cannot be empty")
        self.default_branch = self.default_branch.strip()

    def _validate_remote_name(self):
        """Validate remote_name is not empty."""
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()

    def _validate_id_length(self):
        """Validate id_length is a usable even number of hex digits."""
        if self.id_length <= 0 or self.id_length % 2:
            raise ValueError(f"id_length must be a positive even number, got {self.id_length}")

    def _validate_max_dest_attempts(self):
        """Validate max_dest_attempts is positive."""
        if self.max_dest_attempts <= 0:
            raise ValueError(
                f"max_dest_attempts must be positive, got {self.max_dest_attempts}"
            )

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "managed_root": self.managed_root,
            "repo": self.repo,
            "cwd": self.cwd,
            "default_branch": self.default_branch,
            "remote_name": self.remote_name,
            "dry_run": self.dry_run,
            "gone": self.gone,
            "force": self.force,
            "verbose": self.verbose,
            "debug": self.debug,
            "id_length": self.id_length,
            "max_dest_attempts": self.max_dest_attempts,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary."""
        known_fields = {
            "managed_root",
            "repo",
            "cwd",
            "default_branch",
            "remote_name",
            "dry_run",
            "gone",
            "force",
            "verbose",
            "debug",
            "id_length",
            "max_dest_attempts",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
