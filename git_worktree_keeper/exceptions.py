"""Custom exceptions for git-worktree-keeper"""

from typing import Optional, Sequence


class GitWorktreeKeeperError(Exception):
    """Base exception for all git-worktree-keeper errors."""
    pass


class CommandError(GitWorktreeKeeperError):
    """Exception raised when an external command exits non-zero or cannot be started."""

    def __init__(
        self,
        command: str,
        args: Sequence[str] = (),
        status: Optional[int] = None,
        message: Optional[str] = None,
    ):
        self.command = command
        self.args_list = list(args)
        self.status = status
        self.message = (message or "").strip() or (
            f"Command failed with exit code {status}" if status is not None
            else f"Command '{command}' could not be executed"
        )
        super().__init__(self.message)


class InventoryUnavailableError(GitWorktreeKeeperError):
    """Exception raised when git cannot enumerate worktrees."""

    def __init__(self, message: Optional[str] = None):
        self.message = message
        error_msg = "Could not list worktrees"
        if message:
            error_msg += f": {message}"
        super().__init__(error_msg)


class RemoteUnavailableError(GitWorktreeKeeperError):
    """Exception raised when the GitHub API cannot be reached or authenticated."""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        self.message = message

        error_msg = f"GitHub operation '{operation}' unavailable"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class RemovalFailedError(GitWorktreeKeeperError):
    """Exception raised when a worktree or folder could not be removed."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        self.message = message

        error_msg = f"Failed to remove '{path}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class BranchDeletionFailedError(GitWorktreeKeeperError):
    """Exception raised when a local branch could not be deleted."""

    def __init__(self, branch: str, message: Optional[str] = None):
        self.branch = branch
        self.message = message

        error_msg = f"Failed to delete branch '{branch}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class WorktreeNotFoundError(GitWorktreeKeeperError):
    """Exception raised when no managed worktree matches a name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No worktree found matching '{name}'")


class ConfigError(GitWorktreeKeeperError, ValueError):
    """Exception raised for invalid configuration values."""
    pass
