"""Branch and working-copy queries for git-worktree-keeper."""

import os
from typing import Optional

from git_worktree_keeper.exceptions import CommandError
from git_worktree_keeper.models.worktree import AheadBehind, PushStatus, WorktreeChanges
from git_worktree_keeper.services.process import ProcessExecutor
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)


class ReferenceResolver:
    """Read-only queries about branches and worktree contents."""

    def __init__(self, repo_path: str, executor: Optional[ProcessExecutor] = None,
                 remote_name: str = "origin"):
        """Initialize the resolver.

        Args:
            repo_path: Path of the primary worktree; branch queries run here
            executor: Process executor, injectable for tests
            remote_name: Remote whose HEAD names the default branch
        """
        self.repo_path = repo_path
        self.executor = executor or ProcessExecutor()
        self.remote_name = remote_name

    def _git(self, *args: str, cwd: Optional[str] = None) -> str:
        return self.executor.run("git", list(args), cwd=cwd or self.repo_path).stdout

    def _count_commits(self, range_spec: str) -> int:
        return int(self._git("rev-list", "--count", range_spec).strip() or 0)

    def ahead_behind(self, branch: str, baseline: str) -> AheadBehind:
        """Commits on branch but not baseline, and the reverse.

        Both counts are 0 when either query fails (e.g. missing baseline).
        """
        try:
            ahead = self._count_commits(f"{baseline}..{branch}")
            behind = self._count_commits(f"{branch}..{baseline}")
        except (CommandError, ValueError) as e:
            logger.debug(f"Could not compute ahead/behind for {branch} vs {baseline}: {e}")
            return AheadBehind(0, 0)
        return AheadBehind(ahead, behind)

    def _status_lines(self, path: str) -> list:
        output = self._git("status", "--porcelain", cwd=path)
        return [line for line in output.splitlines() if line.strip()]

    def has_uncommitted_changes(self, path: str) -> bool:
        """Whether the worktree has modified, staged or untracked files.

        For display only: a failed status query reads as clean.
        """
        try:
            return bool(self._status_lines(path))
        except CommandError as e:
            logger.debug(f"Could not check status of {path}: {e}")
            return False

    def has_uncommitted_changes_for_removal(self, path: str) -> bool:
        """Safety variant of has_uncommitted_changes.

        A worktree whose status cannot be read is treated as dirty so it is
        never offered for removal.
        """
        if not os.path.isdir(path):
            logger.warning(f"Worktree {path} is missing, treating as having changes")
            return True
        try:
            return bool(self._status_lines(path))
        except CommandError as e:
            logger.warning(f"Could not check status of {path}, treating as having changes: {e}")
            return True

    def get_worktree_changes(self, path: str) -> WorktreeChanges:
        """Porcelain status lines split into modified and untracked."""
        changes = WorktreeChanges()
        try:
            lines = self._status_lines(path)
        except CommandError as e:
            logger.debug(f"Could not list changes in {path}: {e}")
            return changes

        for line in lines:
            if line.startswith("??"):
                changes.untracked.append(line[3:])
            else:
                changes.modified.append(line[3:])
        return changes

    def get_diff(self, path: str) -> str:
        """Diff of tracked changes against HEAD, empty when unavailable."""
        try:
            return self._git("diff", "HEAD", cwd=path)
        except CommandError as e:
            logger.debug(f"Could not diff {path}: {e}")
            return ""

    def get_upstream(self, branch: str) -> Optional[str]:
        """Upstream tracking ref of a branch, or None."""
        try:
            upstream = self._git("rev-parse", "--abbrev-ref", f"{branch}@{{upstream}}").strip()
        except CommandError:
            return None
        return upstream or None

    def has_unpushed_commits(self, branch: str) -> PushStatus:
        """Whether branch has commits its upstream lacks.

        A branch without an upstream reports no_remote=True.
        """
        upstream = self.get_upstream(branch)
        if upstream is None:
            return PushStatus(has_unpushed=False, no_remote=True)

        try:
            count = self._count_commits(f"{upstream}..{branch}")
        except (CommandError, ValueError) as e:
            logger.debug(f"Could not count unpushed commits for {branch}: {e}")
            return PushStatus(has_unpushed=False, no_remote=False)
        return PushStatus(has_unpushed=count > 0, no_remote=False)

    def branch_exists(self, branch: str) -> bool:
        """Whether a local branch with this name exists."""
        try:
            self._git("rev-parse", "--verify", "--quiet", f"refs/heads/{branch}")
            return True
        except CommandError:
            return False

    def get_default_branch(self) -> str:
        """Branch that origin/HEAD points at, else main, else master."""
        try:
            ref = self._git("symbolic-ref", f"refs/remotes/{self.remote_name}/HEAD").strip()
            prefix = f"refs/remotes/{self.remote_name}/"
            if ref.startswith(prefix):
                return ref[len(prefix):]
        except CommandError as e:
            logger.debug(f"No {self.remote_name}/HEAD: {e}")

        for candidate in ("main", "master"):
            if self.branch_exists(candidate):
                return candidate
        return "main"

    def get_remote_url(self) -> str:
        """URL of the configured remote.

        Raises:
            CommandError: the remote does not exist
        """
        return self._git("remote", "get-url", self.remote_name).strip()

    @staticmethod
    def get_creation_time(path: str) -> float:
        """Directory birth time where the platform has one, else ctime."""
        try:
            stat = os.stat(path)
        except OSError:
            return 0.0
        return getattr(stat, "st_birthtime", None) or stat.st_ctime
