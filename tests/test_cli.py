"""Tests for command-line parsing and the main entry point"""
import logging
from pathlib import Path

import pytest

from git_worktree_keeper.cli import main, parse_args
from git_worktree_keeper.cli.main import COMMAND_ALIASES


@pytest.fixture(autouse=True)
def restore_root_logger():
    """main() reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def cli_env(monkeypatch, managed_root, temp_dir):
    """Point WT_ROOT at the temp managed root and run from the temp directory."""
    monkeypatch.setenv("WT_ROOT", str(managed_root))
    monkeypatch.chdir(temp_dir)


class TestParseArgs:
    """Test argument parsing."""

    @pytest.mark.parametrize("alias,command", sorted(COMMAND_ALIASES.items()))
    def test_aliases_are_accepted(self, alias, command):
        argv = [alias] if command == "list" else [alias, "x"]
        args = parse_args(argv)
        assert COMMAND_ALIASES[args.command] == command

    def test_new_with_base(self):
        args = parse_args(["new", "feat", "main", "--create", "--repo", "/src/repo"])

        assert args.name == "feat"
        assert args.base == "main"
        assert args.create
        assert args.repo == "/src/repo"

    def test_base_without_create_is_a_usage_error(self, capsys):
        with pytest.raises(SystemExit) as info:
            parse_args(["new", "feat", "main"])

        assert info.value.code == 2
        assert "the BASE argument requires --create" in capsys.readouterr().err

    def test_remove_takes_several_names(self):
        args = parse_args(["rm", "a", "b", "--force"])

        assert args.names == ["a", "b"]
        assert args.force

    def test_prune_flags(self):
        args = parse_args(["prune", "-n", "--gone"])

        assert args.dry_run
        assert args.gone
        assert args.repo is None

    def test_command_is_required(self):
        with pytest.raises(SystemExit) as info:
            parse_args([])
        assert info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as info:
            parse_args(["--version"])

        assert info.value.code == 0
        assert capsys.readouterr().out.startswith("wt ")


class TestMain:
    """Test the entry point end to end."""

    def test_not_a_repository(self, cli_env, temp_dir, capsys):
        plain = temp_dir / "plain"
        plain.mkdir()

        assert main(["path", "feat", "--repo", str(plain)]) == 1
        assert "wt: not a git repository; use --repo or run inside one" in capsys.readouterr().err

    def test_new_then_path(self, cli_env, git_repo, managed_root, capsys):
        repo = git_repo.working_tree_dir

        assert main(["new", "-c", "feat", "--repo", repo]) == 0
        created = capsys.readouterr().out.strip()
        assert Path(created).parent.parent == managed_root

        assert main(["p", "feat", "--repo", repo]) == 0
        assert capsys.readouterr().out == f"{created}\n"

    def test_partial_failure_exit_status(self, cli_env, git_repo, capsys):
        repo = git_repo.working_tree_dir
        main(["new", "-c", "a", "--repo", repo])
        capsys.readouterr()

        assert main(["rm", "a", "missing", "--repo", repo]) == 1

        err = capsys.readouterr().err
        assert "wt: no worktree found for branch: missing" in err
        assert "wt: 1 worktree(s) could not be removed" in err

    def test_dry_run_prune_outside_a_repository(self, cli_env, managed_root, capsys):
        assert main(["prune", "--dry-run"]) == 0
        assert capsys.readouterr() == ("", "")
        assert not managed_root.exists()
