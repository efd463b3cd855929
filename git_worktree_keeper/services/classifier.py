"""Turns inventory, scan and PR data into a list of cleanable items."""

from typing import Callable, Iterable, List, Optional

from git_worktree_keeper.models.cleanup import CleanableItem, CleanupSet, ScanResults, StaleWorktree
from git_worktree_keeper.models.remote import RemoteStatus
from git_worktree_keeper.models.worktree import WorktreeRecord
from git_worktree_keeper.services.git.inventory import is_path_in_worktree
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)

RemoteLookup = Callable[[str], Optional[RemoteStatus]]
ChangesProbe = Callable[[str], bool]


def find_stale_worktrees(
    records: Iterable[WorktreeRecord],
    remote_lookup: RemoteLookup,
    current_path: str,
    changes_probe: ChangesProbe,
) -> List[StaleWorktree]:
    """Worktrees whose PR was merged or closed, annotated with dirtiness.

    The primary worktree, detached entries and the worktree containing
    current_path are never candidates. changes_probe must report True when
    it cannot tell, so an unreadable worktree is held back.
    """
    candidates = []
    for record in records:
        if record.is_primary or not record.branch:
            continue
        if is_path_in_worktree(current_path, record.path):
            logger.debug(f"Skipping current worktree {record.path}")
            continue

        status = remote_lookup(record.branch) or RemoteStatus.none()
        if not status.is_finished:
            continue

        candidates.append(
            StaleWorktree(
                path=record.path,
                branch=record.branch,
                remote_state=status.state,
                has_uncommitted_changes=changes_probe(record.path),
            )
        )
    return candidates


def build_cleanup_set(
    records: Iterable[WorktreeRecord],
    scan_results: ScanResults,
    remote_lookup: RemoteLookup,
    current_path: str,
    changes_probe: ChangesProbe,
) -> CleanupSet:
    """Split candidates into offerable items and ones skipped for safety.

    Order of to_offer: stale worktrees, then abandoned folders, then
    orphans, each in discovery order.
    """
    stale = find_stale_worktrees(records, remote_lookup, current_path, changes_probe)

    to_offer: List[CleanableItem] = [wt for wt in stale if not wt.has_uncommitted_changes]
    skipped = [wt for wt in stale if wt.has_uncommitted_changes]
    to_offer.extend(scan_results.abandoned)
    to_offer.extend(scan_results.orphans)

    logger.debug(
        f"Cleanup set: {len(to_offer)} offerable "
        f"({len(stale) - len(skipped)} worktrees, {len(scan_results.abandoned)} abandoned, "
        f"{len(scan_results.orphans)} orphans), {len(skipped)} skipped"
    )
    return CleanupSet(to_offer=to_offer, skipped=skipped)
