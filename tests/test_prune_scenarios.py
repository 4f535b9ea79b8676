"""End-to-end tests for `wt prune` against real repositories"""
import logging
import shutil
from pathlib import Path

import git
import pytest

from git_worktree_keeper.exceptions import ExternalToolError, PartialBatchFailure
from git_worktree_keeper.services.git.operations import GitOperations


def branches(repo):
    return {head.name for head in repo.heads}


@pytest.fixture
def merged_worktree(git_repo_with_origin, make_keeper, commit):
    """Factory: a managed worktree whose branch is merged into main and pushed."""
    repo = git_repo_with_origin
    keeper = make_keeper()

    def _make(name: str) -> Path:
        path = Path(keeper.new(name, create=True))
        commit(path, f"{name}.txt", f"{name}\n", f"Add {name}")
        repo.git.merge(name, "--no-ff", "-m", f"Merge {name}")
        repo.git.push("origin", "main")
        return path

    return _make


@pytest.fixture
def gone_worktree(git_repo_with_origin, origin_repo, make_keeper, commit):
    """Factory: an unmerged worktree whose upstream branch was deleted on origin."""
    keeper = make_keeper()

    def _make(name: str) -> Path:
        path = Path(keeper.new(name, create=True))
        commit(path, f"{name}.txt", f"{name}\n", f"Add {name}")
        git.Git(str(path)).push("-u", "origin", name)
        origin_repo.git.branch("-D", name)
        return path

    return _make


class TestPruneRepository:
    """Scenarios for pruning a single repository with --repo."""

    def test_merged_worktree_is_removed(self, git_repo_with_origin, merged_worktree, make_keeper, capsys):
        path = merged_worktree("feat")
        capsys.readouterr()

        make_keeper().prune()

        assert not path.exists()
        assert not path.parent.exists()
        assert "feat" not in branches(git_repo_with_origin)
        assert capsys.readouterr().err == "wt: removed repo/feat (merged)\n"

    def test_dirty_merged_worktree_is_skipped_silently(
        self, git_repo_with_origin, merged_worktree, make_keeper, capsys
    ):
        path = merged_worktree("feat2")
        (path / "notes.txt").write_text("not committed\n")
        capsys.readouterr()

        make_keeper().prune()

        assert path.is_dir()
        assert "feat2" in branches(git_repo_with_origin)
        assert "feat2" not in capsys.readouterr().err

    def test_dirty_skip_is_not_logged_even_when_debugging(
        self, merged_worktree, make_keeper, caplog
    ):
        path = merged_worktree("feat2")
        (path / "notes.txt").write_text("not committed\n")

        with caplog.at_level(logging.DEBUG):
            make_keeper().prune()

        assert path.is_dir()
        assert not any(str(path) in r.getMessage() for r in caplog.records if r.name == "prune_service")

    def test_upstream_gone_requires_flag(self, git_repo_with_origin, gone_worktree, make_keeper, capsys):
        path = gone_worktree("feat3")
        capsys.readouterr()

        make_keeper().prune()

        assert path.is_dir()
        assert "feat3" in branches(git_repo_with_origin)
        assert capsys.readouterr().err == ""

        make_keeper(gone=True).prune()

        assert not path.exists()
        assert "feat3" not in branches(git_repo_with_origin)
        assert capsys.readouterr().err == "wt: removed repo/feat3 (upstream gone)\n"

    def test_current_directory_is_skipped_with_reason(
        self, git_repo_with_origin, merged_worktree, make_keeper, capsys
    ):
        path = merged_worktree("feat4")
        capsys.readouterr()

        make_keeper(cwd=str(path)).prune()

        assert path.is_dir()
        assert "feat4" in branches(git_repo_with_origin)
        assert capsys.readouterr().err == "wt: skipped repo/feat4 (merged, current directory)\n"

    def test_merged_and_gone_reasons(self, git_repo_with_origin, origin_repo, merged_worktree, make_keeper, capsys):
        path = merged_worktree("both")
        git.Git(str(path)).push("-u", "origin", "both")
        origin_repo.git.branch("-D", "both")
        capsys.readouterr()

        make_keeper(gone=True).prune()

        assert not path.exists()
        assert capsys.readouterr().err == "wt: removed repo/both (merged, upstream gone)\n"

    def test_repo_option_naming_a_linked_worktree(
        self, git_repo_with_origin, merged_worktree, make_keeper, capsys
    ):
        path_a = merged_worktree("a")
        path_b = merged_worktree("b")
        capsys.readouterr()

        make_keeper(repo=str(path_a)).prune()

        assert not path_a.exists()
        assert not path_b.exists()
        assert branches(git_repo_with_origin) == {"main"}
        err = capsys.readouterr().err
        assert "wt: removed repo/a (merged)\n" in err
        assert "wt: removed repo/b (merged)\n" in err

    def test_second_run_is_a_no_op(self, merged_worktree, make_keeper, capsys):
        merged_worktree("feat")
        make_keeper().prune()
        capsys.readouterr()

        make_keeper().prune()

        assert capsys.readouterr().err == ""

    def test_dry_run_changes_nothing(self, git_repo_with_origin, merged_worktree, make_keeper, capsys):
        path = merged_worktree("feat")
        capsys.readouterr()

        make_keeper(dry_run=True).prune()

        assert path.is_dir()
        assert "feat" in branches(git_repo_with_origin)
        assert capsys.readouterr().err == "wt: would remove repo/feat (merged)\n"

    def test_dry_run_does_not_fetch(self, git_repo_with_origin, gone_worktree, make_keeper, capsys):
        path = gone_worktree("feat3")
        capsys.readouterr()

        make_keeper(dry_run=True, gone=True).prune()

        # The tracking ref was never refreshed, so the deletion on origin is unseen
        assert git_repo_with_origin.git.rev_parse("--verify", "--quiet", "origin/feat3")
        assert path.is_dir()
        assert capsys.readouterr().err == ""

    def test_unmerged_worktree_is_kept(self, git_repo_with_origin, make_keeper, commit, capsys):
        path = Path(make_keeper().new("wip", create=True))
        commit(path, "wip.txt", "wip\n", "Work in progress")
        capsys.readouterr()

        make_keeper().prune()

        assert path.is_dir()
        assert capsys.readouterr().err == ""

    def test_locked_worktree_is_kept(self, git_repo_with_origin, merged_worktree, make_keeper):
        path = merged_worktree("feat")
        git_repo_with_origin.git.worktree("lock", str(path))

        make_keeper().prune()

        assert path.is_dir()

    def test_missing_base_warns_and_keeps_everything(self, git_repo, make_keeper, caplog):
        path = Path(make_keeper().new("feat", create=True))

        make_keeper().prune()

        assert path.is_dir()
        assert any("skipping merged pruning" in r.getMessage() for r in caplog.records)

    def test_stale_metadata_is_pruned(self, git_repo_with_origin, make_keeper, capsys):
        path = Path(make_keeper().new("lost", create=True))
        shutil.rmtree(path)
        capsys.readouterr()

        make_keeper().prune()

        assert "lost" not in git_repo_with_origin.git.worktree("list", "--porcelain")
        assert "Removing worktrees/" in capsys.readouterr().err

    def test_removal_failure_is_reported_and_counted(
        self, git_repo_with_origin, merged_worktree, make_keeper, monkeypatch, capsys
    ):
        path = merged_worktree("feat")

        def failing_remove(self, path, force=False):
            raise ExternalToolError(f"cannot remove worktree: {path}", "simulated")

        monkeypatch.setattr(GitOperations, "remove_worktree", failing_remove)
        capsys.readouterr()

        with pytest.raises(PartialBatchFailure, match="1 worktree\\(s\\) could not be removed"):
            make_keeper().prune()

        assert path.is_dir()
        assert "cannot remove repo/feat" in capsys.readouterr().err


class TestPruneManagedRoot:
    """Scenarios for pruning everything under the managed root."""

    def test_missing_root_is_silent(self, make_keeper, managed_root, capsys):
        make_keeper(repo=None).prune()

        assert not managed_root.exists()
        assert capsys.readouterr() == ("", "")

    def test_discovers_and_prunes_repositories(
        self, git_repo_with_origin, merged_worktree, make_keeper, capsys
    ):
        path = merged_worktree("feat")
        capsys.readouterr()

        make_keeper(repo=None).prune()

        assert not path.exists()
        assert "feat" not in branches(git_repo_with_origin)
        assert "wt: removed repo/feat (merged)" in capsys.readouterr().err

    def test_orphans_dry_run(self, git_repo, add_worktree, make_keeper, temp_dir, capsys):
        other = git.Repo.clone_from(git_repo.working_tree_dir, str(temp_dir / "other"))
        orphan = add_worktree(other, "ffffff", "doomed")
        other.close()
        shutil.rmtree(temp_dir / "other")
        capsys.readouterr()

        make_keeper(repo=None, dry_run=True).prune()

        out, err = capsys.readouterr()
        assert out == f"{orphan}\n"
        assert err == "wt: would remove 1 orphaned worktree(s) (dry run)\n"
        assert orphan.is_dir()

    def test_orphans_are_removed_with_empty_parents(
        self, git_repo, add_worktree, make_keeper, managed_root, temp_dir, capsys
    ):
        other = git.Repo.clone_from(git_repo.working_tree_dir, str(temp_dir / "other"))
        orphan = add_worktree(other, "ffffff", "doomed")
        other.close()
        shutil.rmtree(temp_dir / "other")
        capsys.readouterr()

        make_keeper(repo=None).prune()

        err = capsys.readouterr().err
        assert not orphan.exists()
        assert not (managed_root / "ffffff").exists()
        assert managed_root.is_dir()
        assert f"wt: removed {orphan}\n" in err
        assert f"wt: removed empty directory {managed_root / 'ffffff'}\n" in err
        assert err.endswith("wt: removed 1 orphaned worktree(s)\n")

    def test_orphan_containing_current_directory_is_kept(
        self, git_repo, add_worktree, make_keeper, temp_dir, capsys
    ):
        other = git.Repo.clone_from(git_repo.working_tree_dir, str(temp_dir / "other"))
        orphan = add_worktree(other, "ffffff", "doomed")
        other.close()
        shutil.rmtree(temp_dir / "other")
        capsys.readouterr()

        make_keeper(repo=None, cwd=str(orphan)).prune()

        assert orphan.is_dir()
        assert "current directory" in capsys.readouterr().err

    def test_failing_repository_does_not_stop_others(
        self, git_repo_with_origin, merged_worktree, add_worktree, make_keeper, temp_dir, monkeypatch, capsys
    ):
        path = merged_worktree("feat")
        broken = git.Repo.clone_from(git_repo_with_origin.working_tree_dir, str(temp_dir / "broken"))
        add_worktree(broken, "eeeeee", "side")
        broken_path = broken.working_tree_dir
        broken.close()

        original = GitOperations.prune_worktrees

        def flaky_prune(self, dry_run=False):
            if self.repo_path == broken_path:
                raise ExternalToolError("cannot prune worktree metadata")
            return original(self, dry_run)

        monkeypatch.setattr(GitOperations, "prune_worktrees", flaky_prune)
        capsys.readouterr()

        with pytest.raises(PartialBatchFailure, match="^cannot prune 1 repo\\(s\\)$"):
            make_keeper(repo=None).prune()

        assert not path.exists()
        assert f"wt: cannot prune {broken_path}: cannot prune worktree metadata" in capsys.readouterr().err
