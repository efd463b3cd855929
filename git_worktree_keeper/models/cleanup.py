"""Cleanup item models.

A cleanable item is exactly one of three shapes. Consumers dispatch with
isinstance and raise TypeError for anything else.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional, Union

from git_worktree_keeper.models.remote import PRState


@dataclass(frozen=True)
class StaleWorktree:
    """A linked worktree whose branch's PR was merged or closed."""

    path: str
    branch: str
    remote_state: PRState  # MERGED or CLOSED
    has_uncommitted_changes: bool

    kind = "worktree"

    def __post_init__(self):
        if self.remote_state not in (PRState.MERGED, PRState.CLOSED):
            raise ValueError(f"Stale worktree must be merged or closed, got {self.remote_state}")

    @property
    def dirname(self) -> str:
        return os.path.basename(self.path.rstrip(os.sep))


@dataclass(frozen=True)
class AbandonedFolder:
    """A directory under the worktrees root with no .git entry at all."""

    path: str
    dirname: str
    file_count: int
    folder_count: int

    kind = "abandoned"


@dataclass(frozen=True)
class OrphanWorktree:
    """A directory whose .git file points at a gitdir that no longer exists."""

    path: str
    dirname: str
    broken_target: str

    kind = "orphan"


CleanableItem = Union[StaleWorktree, AbandonedFolder, OrphanWorktree]


@dataclass
class ScanResults:
    """Output of the filesystem scans of the worktrees root."""

    abandoned: List[AbandonedFolder] = field(default_factory=list)
    orphans: List[OrphanWorktree] = field(default_factory=list)


@dataclass
class CleanupSet:
    """Classifier output: what may be offered, and what was held back."""

    to_offer: List[CleanableItem] = field(default_factory=list)
    skipped: List[StaleWorktree] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.to_offer and not self.skipped


@dataclass
class CleanupOutcome:
    """Result of removing one item.

    branch_deleted is None when no branch deletion was attempted.
    """

    item: CleanableItem
    removed: bool
    error: Optional[str] = None
    used_fallback: bool = False
    branch_deleted: Optional[bool] = None
    branch_error: Optional[str] = None


@dataclass
class CleanupReport:
    """Per-item outcomes of a cleanup batch."""

    outcomes: List[CleanupOutcome] = field(default_factory=list)
    skipped: List[StaleWorktree] = field(default_factory=list)

    @property
    def removed(self) -> List[CleanupOutcome]:
        return [o for o in self.outcomes if o.removed]

    @property
    def failed(self) -> List[CleanupOutcome]:
        return [o for o in self.outcomes if not o.removed]

    @property
    def removed_worktrees(self) -> int:
        return sum(1 for o in self.removed if isinstance(o.item, StaleWorktree))

    @property
    def removed_folders(self) -> int:
        return sum(1 for o in self.removed if not isinstance(o.item, StaleWorktree))

    @property
    def failed_worktrees(self) -> int:
        return sum(1 for o in self.failed if isinstance(o.item, StaleWorktree))

    @property
    def failed_folders(self) -> int:
        return sum(1 for o in self.failed if not isinstance(o.item, StaleWorktree))

    @property
    def succeeded(self) -> bool:
        return not self.failed


@dataclass
class CleanupScan:
    """Everything `clean` found, ready for selection."""

    worktrees_root: str
    cleanup_set: CleanupSet
    github_issue: Optional[str] = None  # no-remote | not-github | gh-unavailable
