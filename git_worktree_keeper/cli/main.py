"""Command-line interface for git-worktree-keeper"""

import sys
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from git_worktree_keeper.cli.args import parse_args
from git_worktree_keeper.config import Config
from git_worktree_keeper.constants import PROG_NAME
from git_worktree_keeper.core import WorktreeKeeper
from git_worktree_keeper.exceptions import WorktreeKeeperError
from git_worktree_keeper.utils.logging import get_logger, setup_logging

console = Console(stderr=True, soft_wrap=True, highlight=False, emoji=False)
logger = get_logger(__name__)

# Subcommand aliases resolved to their canonical names
COMMAND_ALIASES = {
    "n": "new",
    "s": "switch",
    "ls": "list",
    "p": "path",
    "rm": "remove",
    "ln": "link",
}


def build_config(args) -> Config:
    """Build the run configuration from parsed arguments."""
    return Config(
        repo=getattr(args, "repo", None),
        dry_run=getattr(args, "dry_run", False),
        gone=getattr(args, "gone", False),
        force=getattr(args, "force", False),
        verbose=args.verbose,
        debug=args.debug,
    )


def run_command(keeper: WorktreeKeeper, args) -> None:
    command = COMMAND_ALIASES.get(args.command, args.command)
    if command == "new":
        keeper.new(args.name, create=args.create, base=args.base)
    elif command == "switch":
        keeper.switch(args.name)
    elif command == "list":
        keeper.list(porcelain=args.porcelain)
    elif command == "path":
        keeper.path(args.name)
    elif command == "remove":
        keeper.remove(args.names)
    elif command == "prune":
        keeper.prune()
    elif command == "link":
        keeper.link(args.files)
    else:
        raise WorktreeKeeperError(f"unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    debug = False
    try:
        # Parse command line arguments
        parsed_args = parse_args(argv)
        debug = parsed_args.debug

        # Setup logging before creating WorktreeKeeper
        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

        config = build_config(parsed_args)
        if debug:
            logger.debug("Configuration:")
            for key, value in config.to_dict().items():
                logger.debug(f"  {key}: {value}")

        keeper = WorktreeKeeper(config)
        run_command(keeper, parsed_args)
        return 0
    except KeyboardInterrupt:
        console.print(f"\n[yellow]{PROG_NAME}: operation cancelled by user[/yellow]")
        return 1
    except (WorktreeKeeperError, ValueError) as e:
        console.print(f"[red]{PROG_NAME}: {escape(str(e))}[/red]")
        if debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
