"""Link service: share untracked files of the primary worktree with linked worktrees."""

import os
import shutil
from typing import List

from git_worktree_keeper.exceptions import FilesystemError, LinkError
from git_worktree_keeper.models.worktree import Worktree
from git_worktree_keeper.services.display_service import DisplayService
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)


def validate_link_path(file: str) -> None:
    """Reject absolute paths and paths that climb out of the worktree."""
    if os.path.isabs(file):
        raise LinkError(f"path must be relative: {file}")
    if ".." in file.replace("\\", "/").split("/"):
        raise LinkError(f"path must not contain '..': {file}")


def is_expected_link(dest: str, source: str) -> bool:
    """True if ``dest`` is a symlink pointing exactly at ``source``."""
    try:
        return os.readlink(dest) == source
    except OSError:
        return False


def _remove_dest(dest: str) -> None:
    if os.path.isdir(dest) and not os.path.islink(dest):
        shutil.rmtree(dest)
    else:
        os.remove(dest)


class LinkService:
    """Symlinks files such as ``.env`` from the primary worktree into every linked one."""

    def __init__(self, display: DisplayService, force: bool = False):
        self.display = display
        self.force = force

    def link(self, worktrees: List[Worktree], files: List[str]) -> None:
        """Link ``files`` from ``worktrees[0]`` into ``worktrees[1:]``.

        Every file is validated before anything is touched. An existing
        destination that is not already the right symlink is reported and
        left alone unless ``force`` is set.

        Raises:
            LinkError: if a path is invalid or missing from the primary worktree
            FilesystemError: if a destination cannot be replaced or created
        """
        if not worktrees:
            raise LinkError("no worktrees found")
        primary = worktrees[0].path

        for file in files:
            validate_link_path(file)
            if not os.path.exists(os.path.join(primary, file)):
                raise LinkError(f"not found in primary worktree: {file}")

        linked = worktrees[1:]
        if not linked:
            self.display.report("no linked worktrees")
            return

        for worktree in linked:
            for file in files:
                self._link_one(primary, worktree.path, file)

    def _link_one(self, primary: str, worktree_path: str, file: str) -> None:
        source = os.path.join(primary, file)
        dest = os.path.join(worktree_path, file)

        if os.path.lexists(dest):
            if is_expected_link(dest, source):
                logger.debug(f"{dest} already links to {source}")
                return
            if not self.force:
                self.display.report(f"skipped {file} ({worktree_path}): already exists")
                return
            try:
                _remove_dest(dest)
            except OSError as e:
                raise FilesystemError("remove", dest, e) from e

        parent = os.path.dirname(dest)
        if not os.path.isdir(parent):
            try:
                os.makedirs(parent)
            except OSError as e:
                raise FilesystemError("create directory", parent, e) from e

        try:
            os.symlink(source, dest, target_is_directory=os.path.isdir(source))
        except OSError as e:
            raise FilesystemError("link", dest, e) from e
        self.display.report(f"linked {file} ({worktree_path})")
