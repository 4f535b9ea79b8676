"""Display service: report lines, printed paths and the worktree table"""
from typing import List, Optional, TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from git_worktree_keeper.constants import COLUMNS, PROG_NAME
from git_worktree_keeper.formatters import format_worktree_row
from git_worktree_keeper.models.worktree import Worktree
from git_worktree_keeper.utils.logging import get_logger

if TYPE_CHECKING:
    from git_worktree_keeper.services.git.operations import GitOperations

logger = get_logger(__name__)


class DisplayService:
    """Writes user-facing output.

    Report lines (what was removed, skipped or would be removed) go to stderr
    with the program prefix; paths meant for shell substitution, such as
    ``cd "$(wt path feat)"``, go to stdout alone.
    """

    def __init__(self, out: Optional[Console] = None, err: Optional[Console] = None):
        # soft_wrap keeps long paths on one line; highlight would colour numbers in paths
        self.out = out or Console(soft_wrap=True, highlight=False, emoji=False)
        self.err = err or Console(stderr=True, soft_wrap=True, highlight=False, emoji=False)

    def report(self, message: str, style: Optional[str] = None) -> None:
        """Print ``wt: <message>`` on the diagnostic stream."""
        text = f"{PROG_NAME}: {escape(message)}"
        if style:
            text = f"[{style}]{text}[/{style}]"
        self.err.print(text)

    def report_item(self, message: str) -> None:
        """Print an indented list item under a preceding report line."""
        self.err.print(f"  - {escape(message)}")

    def error(self, message: str) -> None:
        self.report(message, style="red")

    def print_path(self, path: str) -> None:
        """Print a bare path on stdout."""
        self.out.print(escape(path))

    def print_raw(self, text: str) -> None:
        """Print machine-readable text on stdout exactly as given."""
        self.out.print(escape(text), end="" if text.endswith("\n") else "\n")

    def display_worktree_table(
        self,
        worktrees: List[Worktree],
        git_ops: "GitOperations",
        cwd: str,
    ) -> None:
        """Display a table of worktrees; rich fits the columns to the terminal."""
        table = Table(box=None, pad_edge=False, show_edge=False)
        for col in COLUMNS:
            if col.key == "path":
                table.add_column(col.label, overflow="fold")
            else:
                table.add_column(col.label, no_wrap=True, max_width=col.width or None,
                                 overflow="ellipsis")

        for wt in worktrees:
            row = format_worktree_row(wt, git_ops, cwd)
            table.add_row(*[escape(row[col.key]) for col in COLUMNS])

        self.out.print(table)
