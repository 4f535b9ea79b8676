"""Pytest fixtures for git-worktree-keeper tests"""
import os
import tempfile
from pathlib import Path
from unittest.mock import Mock

import git
import pytest

from git_worktree_keeper.config import Config
from git_worktree_keeper.core import WorktreeKeeper
from git_worktree_keeper.services.display_service import DisplayService
from git_worktree_keeper.services.git.operations import GitOperations


def commit_file(worktree_path, name: str, content: str, message: str) -> None:
    """Write ``name`` in a working tree (primary or linked) and commit it."""
    path = Path(worktree_path) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    worktree_git = git.Git(str(worktree_path))
    worktree_git.add(name)
    worktree_git.commit("-m", message)


@pytest.fixture
def commit():
    """Expose commit_file to tests."""
    return commit_file


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing (symlinks resolved)."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(os.path.realpath(tmpdir))


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository with one commit on main."""
    repo_path = temp_dir / "repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    commit_file(repo_path, "README.md", "# Test Repository\n", "Initial commit")
    repo.git.branch("-M", "main")

    yield repo

    repo.close()


@pytest.fixture
def origin_repo(temp_dir):
    """Create a bare repository to act as origin."""
    origin_path = temp_dir / "origin.git"
    repo = git.Repo.init(origin_path, bare=True)
    yield repo
    repo.close()


@pytest.fixture
def git_repo_with_origin(git_repo, origin_repo):
    """A repository whose main branch is pushed to a local bare origin."""
    git_repo.create_remote("origin", origin_repo.working_dir)
    git_repo.git.push("-u", "origin", "main")
    yield git_repo


@pytest.fixture
def managed_root(temp_dir):
    """Managed worktree root inside the temp directory (not created)."""
    return temp_dir / "wt-root"


@pytest.fixture
def make_config(managed_root, temp_dir):
    """Factory for Config objects rooted in the temp directory."""

    def _make(**overrides):
        values = {"managed_root": str(managed_root), "cwd": str(temp_dir)}
        values.update(overrides)
        return Config(**values)

    return _make


@pytest.fixture
def display():
    """DisplayService writing to the (captured) real stdout and stderr."""
    return DisplayService()


@pytest.fixture
def make_keeper(make_config, git_repo, display):
    """Factory for a WorktreeKeeper bound to ``git_repo``."""

    def _make(**overrides):
        overrides.setdefault("repo", git_repo.working_tree_dir)
        return WorktreeKeeper(make_config(**overrides), display=display)

    return _make


@pytest.fixture
def add_worktree(managed_root):
    """Factory adding a managed worktree ``<root>/<dir_id>/<repo-name>`` on a new branch."""

    def _add(repo: git.Repo, dir_id: str, branch: str, create: bool = True) -> Path:
        path = managed_root / dir_id / Path(repo.working_tree_dir).name
        path.parent.mkdir(parents=True, exist_ok=True)
        if create:
            repo.git.worktree("add", "-b", branch, str(path))
        else:
            repo.git.worktree("add", str(path), branch)
        return path

    return _add


@pytest.fixture
def mock_git_ops():
    """Create a mock GitOperations with a clean, fully merged repository."""
    git_ops = Mock(spec=GitOperations)
    git_ops.repo_path = "/fake/repo"

    git_ops.resolve_base_ref = Mock(return_value="origin/main")
    git_ops.is_ancestor = Mock(return_value=False)
    git_ops.upstream_for = Mock(return_value=None)
    git_ops.upstream_remote = Mock(return_value=None)
    git_ops.has_remote = Mock(return_value=True)
    git_ops.fetch_remote = Mock(return_value=None)
    git_ops.rev_resolves = Mock(return_value=True)
    git_ops.is_dirty = Mock(return_value=False)
    git_ops.ahead_behind = Mock(return_value=None)

    return git_ops
