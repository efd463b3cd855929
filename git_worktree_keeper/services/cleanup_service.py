"""Executes an approved cleanup batch item by item."""

from typing import Callable, Iterable, Optional

from git_worktree_keeper.exceptions import BranchDeletionFailedError, GitWorktreeKeeperError
from git_worktree_keeper.models.cleanup import (
    AbandonedFolder,
    CleanableItem,
    CleanupOutcome,
    CleanupReport,
    OrphanWorktree,
    StaleWorktree,
)
from git_worktree_keeper.services.git.operations import WorktreeOperations
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)

OutcomeCallback = Callable[[CleanupOutcome], None]


class CleanupExecutor:
    """Removes selected items; one item's failure never stops the others."""

    def __init__(self, operations: WorktreeOperations, delete_branches: bool = True):
        self.operations = operations
        self.delete_branches = delete_branches

    def _remove_stale_worktree(self, item: StaleWorktree) -> CleanupOutcome:
        used_fallback = self.operations.remove_worktree_with_fallback(item.path)
        outcome = CleanupOutcome(item=item, removed=True, used_fallback=used_fallback)

        if not self.delete_branches:
            return outcome

        # Branch is merged or closed upstream, so a forced delete is safe
        try:
            self.operations.delete_branch(item.branch, force=True)
            outcome.branch_deleted = True
        except BranchDeletionFailedError as e:
            logger.warning(str(e))
            outcome.branch_deleted = False
            outcome.branch_error = e.message or str(e)
        return outcome

    def _remove_folder(self, item: CleanableItem) -> CleanupOutcome:
        self.operations.force_remove_directory(item.path)
        return CleanupOutcome(item=item, removed=True)

    def remove_item(self, item: CleanableItem) -> CleanupOutcome:
        """Remove one item and report what happened."""
        try:
            if isinstance(item, StaleWorktree):
                return self._remove_stale_worktree(item)
            if isinstance(item, (AbandonedFolder, OrphanWorktree)):
                return self._remove_folder(item)
        except (GitWorktreeKeeperError, OSError) as e:
            logger.error(f"Failed to remove {item.path}: {e}")
            return CleanupOutcome(item=item, removed=False, error=str(e))
        raise TypeError(f"Unknown cleanup item type: {type(item).__name__}")

    def execute(
        self,
        items: Iterable[CleanableItem],
        on_outcome: Optional[OutcomeCallback] = None,
    ) -> CleanupReport:
        """Remove items in the order given.

        Args:
            items: Operator-approved items
            on_outcome: Called after each item, e.g. for progress output

        Returns:
            Report with exactly one outcome per item
        """
        report = CleanupReport()
        for item in items:
            outcome = self.remove_item(item)
            report.outcomes.append(outcome)
            if on_outcome:
                on_outcome(outcome)
        logger.info(f"Cleanup finished: {len(report.removed)} of {len(report.outcomes)} removed")
        return report
