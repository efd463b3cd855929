"""Worktree inventory service for git-worktree-keeper."""

import os
from typing import Any, Dict, List, Optional

from git_worktree_keeper.exceptions import CommandError, InventoryUnavailableError
from git_worktree_keeper.models.worktree import WorktreeRecord
from git_worktree_keeper.services.process import ProcessExecutor
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)

BRANCH_REF_PREFIX = "refs/heads/"
WORKTREES_DIR_SUFFIX = "-worktrees"


def parse_porcelain(output: str) -> List[WorktreeRecord]:
    """Parse `git worktree list --porcelain` output.

    Format (blank line between worktrees):
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name   (or "bare" / "detached")

    Records without a `worktree` line are dropped. The first record kept is
    the primary worktree whatever its content.
    """
    records: List[WorktreeRecord] = []
    current: Dict[str, Any] = {}

    def flush():
        if current.get("path"):
            records.append(
                WorktreeRecord(
                    path=current["path"],
                    branch=current.get("branch"),
                    commit_sha=current.get("HEAD", ""),
                    is_primary=not records,
                )
            )
        current.clear()

    # splitlines drops the line endings; values keep their own whitespace
    for line in output.splitlines():
        if not line:
            flush()
            continue

        if line.startswith("worktree "):
            # A new record without a separating blank line still starts fresh
            if current.get("path"):
                flush()
            current["path"] = line.split(" ", 1)[1]
        elif line.startswith("HEAD "):
            current["HEAD"] = line.split(" ", 1)[1]
        elif line.startswith("branch "):
            branch_ref = line.split(" ", 1)[1]
            if branch_ref.startswith(BRANCH_REF_PREFIX):
                current["branch"] = branch_ref[len(BRANCH_REF_PREFIX):]
            else:
                current["branch"] = branch_ref
        elif line in ("bare", "detached"):
            current["branch"] = None

    flush()
    return records


def is_path_in_worktree(path: str, worktree_path: str) -> bool:
    """Check whether path is the worktree itself or nested inside it."""
    path = os.path.realpath(path)
    worktree_path = os.path.realpath(worktree_path)
    if path == worktree_path:
        return True
    return path.startswith(worktree_path.rstrip(os.sep) + os.sep)


def get_repo_name(primary_path: str) -> str:
    """Repository name, taken from the primary worktree's directory."""
    return os.path.basename(os.path.normpath(primary_path))


def get_worktrees_root(primary_path: str, override: Optional[str] = None) -> str:
    """Directory holding the linked worktrees.

    Defaults to a `<repo>-worktrees` sibling of the primary worktree.
    """
    if override:
        return os.path.abspath(os.path.expanduser(override))
    primary_path = os.path.normpath(primary_path)
    return os.path.join(
        os.path.dirname(primary_path), f"{get_repo_name(primary_path)}{WORKTREES_DIR_SUFFIX}"
    )


def filter_managed(records: List[WorktreeRecord], worktrees_root: str) -> List[WorktreeRecord]:
    """Keep only records living strictly inside the worktrees root."""
    return [
        record
        for record in records
        if is_path_in_worktree(record.path, worktrees_root)
        and os.path.realpath(record.path) != os.path.realpath(worktrees_root)
    ]


class WorktreeInventory:
    """Lists worktrees known to git."""

    def __init__(self, repo_path: str, executor: Optional[ProcessExecutor] = None):
        """Initialize the inventory.

        Args:
            repo_path: Any path inside the repository (primary or linked worktree)
            executor: Process executor, injectable for tests
        """
        self.repo_path = repo_path
        self.executor = executor or ProcessExecutor()

    def list(self) -> List[WorktreeRecord]:
        """Return all worktrees in git's listing order.

        Raises:
            InventoryUnavailableError: git failed or produced nothing usable
        """
        try:
            output = self.executor.run(
                "git", ["worktree", "list", "--porcelain"], cwd=self.repo_path
            ).stdout
        except CommandError as e:
            raise InventoryUnavailableError(e.message) from e

        records = parse_porcelain(output)
        if not records:
            raise InventoryUnavailableError("git returned no worktrees")

        logger.debug(f"Found {len(records)} worktrees")
        for record in records:
            logger.debug(f"  {record}")
        return records

    def get_primary_path(self) -> str:
        """Path of the primary worktree, even when called from a linked one."""
        return self.list()[0].path

    def get_current_worktree_path(self, cwd: Optional[str] = None) -> str:
        """Top-level directory of the worktree containing cwd."""
        cwd = cwd or os.getcwd()
        try:
            toplevel = self.executor.run("git", ["rev-parse", "--show-toplevel"], cwd=cwd).stdout
            return toplevel.strip() or cwd
        except CommandError as e:
            logger.debug(f"Could not resolve worktree top level for {cwd}: {e}")
            return cwd
