"""Command-line argument parsing for git-worktree-keeper."""

import argparse
from typing import List, Optional

from git_worktree_keeper.__version__ import __version__
from git_worktree_keeper.constants import PROG_NAME, ROOT_ENV_VAR


def _add_repo_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--repo",
        metavar="PATH",
        help="Repository to operate on (default: the one containing the current directory)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with one subparser per command."""
    parser = argparse.ArgumentParser(
        prog=PROG_NAME,
        description="Manage a fleet of Git worktrees, one branch per worktree",
        epilog=f"New worktrees live under ~/.wt/worktrees/<id>/<repo>; "
        f"set {ROOT_ENV_VAR} to use another root.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--version", action="version", version=f"{PROG_NAME} {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    new = subparsers.add_parser(
        "new",
        aliases=["n"],
        help="Create a worktree for a branch",
        description="Check out a branch, tag or commit in a new managed worktree. "
        "With --create, create the branch first (from BASE or HEAD).",
    )
    new.add_argument("name", help="Branch (or ref) to check out")
    new.add_argument("base", nargs="?", help="Start point for the new branch (requires --create)")
    new.add_argument("-c", "--create", action="store_true", help="Create a new branch")
    _add_repo_option(new)

    switch = subparsers.add_parser(
        "switch",
        aliases=["s"],
        help="Print the worktree for a branch, creating it if needed",
    )
    switch.add_argument("name", help="Branch name")
    _add_repo_option(switch)

    list_cmd = subparsers.add_parser("list", aliases=["ls"], help="List worktrees")
    list_cmd.add_argument(
        "--porcelain", action="store_true", help="Print git's machine-readable listing"
    )
    _add_repo_option(list_cmd)

    path = subparsers.add_parser("path", aliases=["p"], help="Print the path of a worktree")
    path.add_argument("name", help="Branch name")
    _add_repo_option(path)

    remove = subparsers.add_parser(
        "remove",
        aliases=["rm"],
        help="Remove worktrees and their branches",
        description="Remove linked worktrees by branch name or exact worktree root path. "
        "Also deletes the linked local branch.",
    )
    remove.add_argument("names", nargs="+", metavar="NAME", help="Branch names or worktree paths")
    remove.add_argument(
        "--force",
        action="store_true",
        help="Remove even with local changes or unmerged commits",
    )
    _add_repo_option(remove)

    prune = subparsers.add_parser(
        "prune",
        help="Remove merged worktrees and clean up stale ones",
        description="Prune worktree metadata, remove worktrees whose branches are merged "
        "(or whose upstream is gone, with --gone) and delete orphaned worktree directories.",
    )
    prune.add_argument(
        "-n", "--dry-run", action="store_true", help="Show what would be removed"
    )
    prune.add_argument(
        "--gone", action="store_true", help="Also remove worktrees whose upstream branch is gone"
    )
    _add_repo_option(prune)

    link = subparsers.add_parser(
        "link",
        aliases=["ln"],
        help="Link files from the primary worktree into linked worktrees",
        description="Symlink files from the primary worktree into all linked worktrees. "
        "Correct symlinks are skipped; other existing files are skipped unless --force is used.",
    )
    link.add_argument("files", nargs="+", metavar="FILE", help="Files or directories to link")
    link.add_argument(
        "--force",
        action="store_true",
        help="Replace existing destinations that are not correct symlinks",
    )
    _add_repo_option(link)

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if getattr(args, "base", None) and not args.create:
        parser.error("the BASE argument requires --create")

    return args
