"""Worktree and branch mutations for git-worktree-keeper."""

import os
import shutil
from typing import Optional

from git_worktree_keeper.exceptions import (
    BranchDeletionFailedError,
    CommandError,
    RemovalFailedError,
)
from git_worktree_keeper.services.process import ProcessExecutor
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)


class WorktreeOperations:
    """Service for destructive and creating git operations."""

    def __init__(self, repo_path: str, executor: Optional[ProcessExecutor] = None,
                 remote_name: str = "origin"):
        """Initialize the service.

        Args:
            repo_path: Path of the primary worktree; all git calls run here
            executor: Process executor, injectable for tests
            remote_name: Remote used for fetching new worktree bases
        """
        self.repo_path = repo_path
        self.executor = executor or ProcessExecutor()
        self.remote_name = remote_name

    def _git(self, *args: str) -> str:
        return self.executor.run("git", list(args), cwd=self.repo_path).stdout

    def remove_worktree(self, path: str, force: bool = False) -> None:
        """Run `git worktree remove` on path.

        Raises:
            CommandError: git refused or failed
        """
        args = ["worktree", "remove", path]
        if force:
            args.append("--force")
        self._git(*args)
        logger.info(f"Removed worktree at {path}")

    def force_remove_directory(self, path: str) -> None:
        """Recursively delete a directory.

        Raises:
            RemovalFailedError: the directory could not be deleted
        """
        if not os.path.lexists(path):
            logger.debug(f"{path} already gone")
            return
        try:
            if os.path.isdir(path) and not os.path.islink(path):
                shutil.rmtree(path)
            else:
                os.remove(path)
        except OSError as e:
            raise RemovalFailedError(path, str(e)) from e
        logger.info(f"Deleted directory {path}")

    def prune_worktrees(self) -> None:
        """Drop registry entries for worktrees whose directories are gone.

        Raises:
            CommandError: git prune failed
        """
        self._git("worktree", "prune")
        logger.info("Pruned worktree metadata")

    def remove_worktree_with_fallback(self, path: str, force: bool = False) -> bool:
        """Remove a worktree, deleting the directory by hand if git refuses.

        After a manual delete the worktree registry is pruned so no stale
        entry is left behind.

        Returns:
            True if the fallback path was used

        Raises:
            RemovalFailedError: neither git nor the manual delete succeeded
        """
        try:
            self.remove_worktree(path, force=force)
            return False
        except CommandError as e:
            logger.warning(f"git worktree remove failed for {path}, deleting directly: {e}")

        self.force_remove_directory(path)
        try:
            self.prune_worktrees()
        except CommandError as e:
            logger.warning(f"Removed {path} but could not prune worktree metadata: {e}")
        return True

    def delete_branch(self, branch: str, force: bool = True) -> None:
        """Delete a local branch.

        Raises:
            BranchDeletionFailedError: git refused to delete the branch
        """
        try:
            self._git("branch", "-D" if force else "-d", branch)
        except CommandError as e:
            raise BranchDeletionFailedError(branch, e.message) from e
        logger.info(f"Deleted branch {branch}")

    def fetch(self) -> None:
        """Fetch from the configured remote.

        Raises:
            CommandError: the fetch failed
        """
        self._git("fetch", self.remote_name)

    def create_worktree(self, branch: str, path: str, base: str) -> None:
        """Create path as a new worktree on a new branch started from base.

        Raises:
            CommandError: git could not create the worktree
        """
        os.makedirs(os.path.dirname(path), exist_ok=True)
        self._git("worktree", "add", "-b", branch, path, base)
        logger.info(f"Created worktree for {branch} at {path} from {base}")
