"""Worktree data models."""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from git_worktree_keeper.models.remote import RemoteStatus


@dataclass(frozen=True)
class WorktreeRecord:
    """One entry from `git worktree list --porcelain`."""

    path: str
    branch: Optional[str]  # None for detached or bare entries
    commit_sha: str
    is_primary: bool  # First entry in listing order

    @property
    def dirname(self) -> str:
        return os.path.basename(self.path.rstrip(os.sep))

    def __str__(self) -> str:
        primary_marker = " (primary)" if self.is_primary else ""
        return f"{self.branch or 'detached'} @ {self.path}{primary_marker}"


@dataclass(frozen=True)
class AheadBehind:
    """Commit distance of a branch from a baseline."""

    ahead: int = 0
    behind: int = 0


@dataclass(frozen=True)
class PushStatus:
    """Whether a branch has commits its upstream does not."""

    has_unpushed: bool
    no_remote: bool


@dataclass
class WorktreeChanges:
    """Porcelain status lines of a worktree, split by kind."""

    modified: List[str] = field(default_factory=list)
    untracked: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.modified) + len(self.untracked)


@dataclass
class WorktreeStatus:
    """A row of the `list` result."""

    path: str
    branch: Optional[str]
    created_at: float
    is_current: bool
    has_uncommitted_changes: bool
    ahead: int
    behind: int
    remote_status: RemoteStatus

    @property
    def dirname(self) -> str:
        return os.path.basename(self.path.rstrip(os.sep))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "dirname": self.dirname,
            "branch": self.branch or "no-branch",
            "createdAt": self.created_at,
            "isCurrent": self.is_current,
            "hasUncommittedChanges": self.has_uncommitted_changes,
            "ahead": self.ahead,
            "behind": self.behind,
            "remoteStatus": self.remote_status.to_dict(),
        }


@dataclass
class WorktreeListing:
    """The `list` result: rows plus why remote status may be missing."""

    repo_name: str
    worktrees_root: str
    worktrees: List[WorktreeStatus] = field(default_factory=list)
    github_issue: Optional[str] = None  # no-remote | not-github | gh-unavailable

    def count_by_state(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for wt in self.worktrees:
            state = wt.remote_status.state.value
            counts[state] = counts.get(state, 0) + 1
        return counts


@dataclass
class RemovalPlan:
    """What removing a single worktree would put at risk."""

    record: WorktreeRecord
    has_uncommitted_changes: bool
    push_status: Optional[PushStatus] = None  # None when the branch is kept or absent


@dataclass
class RemovalResult:
    """Outcome of removing a single worktree by name."""

    path: str
    branch: Optional[str]
    used_fallback: bool = False
    branch_deleted: Optional[bool] = None  # None when no deletion was attempted
    branch_error: Optional[str] = None
