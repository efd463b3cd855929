"""Filesystem scans of the worktrees directory."""

import os
import re
from typing import List, Optional, Tuple

from git_worktree_keeper.models.cleanup import AbandonedFolder, OrphanWorktree, ScanResults
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)

GIT_ENTRY = ".git"
GITDIR_PATTERN = re.compile(r"^gitdir:\s*(.+)$", re.MULTILINE)


def count_contents(dir_path: str) -> Tuple[int, int]:
    """Count (files, folders) directly inside dir_path; (0, 0) if unreadable."""
    file_count = 0
    folder_count = 0
    try:
        with os.scandir(dir_path) as entries:
            for entry in entries:
                if entry.is_dir(follow_symlinks=False):
                    folder_count += 1
                else:
                    file_count += 1
    except OSError as e:
        logger.debug(f"Could not count contents of {dir_path}: {e}")
    return file_count, folder_count


def read_gitdir(git_file: str) -> Optional[str]:
    """Target named by a `gitdir: <path>` linkage file, or None."""
    with open(git_file, encoding="utf-8") as f:
        content = f.read()
    match = GITDIR_PATTERN.search(content)
    if not match:
        return None
    return match.group(1).strip()


class FilesystemReconciler:
    """Finds directories under the worktrees root that git does not manage."""

    def _subdirectories(self, worktrees_root: str) -> List[os.DirEntry]:
        if not os.path.isdir(worktrees_root):
            return []
        try:
            with os.scandir(worktrees_root) as entries:
                dirs = [e for e in entries if e.is_dir(follow_symlinks=False)]
        except OSError as e:
            logger.warning(f"Could not read worktrees directory {worktrees_root}: {e}")
            return []
        return sorted(dirs, key=lambda e: e.name)

    def scan_abandoned(self, worktrees_root: str) -> List[AbandonedFolder]:
        """Top-level directories that have no .git entry at all."""
        abandoned = []
        for entry in self._subdirectories(worktrees_root):
            if os.path.lexists(os.path.join(entry.path, GIT_ENTRY)):
                continue
            file_count, folder_count = count_contents(entry.path)
            abandoned.append(
                AbandonedFolder(
                    path=entry.path,
                    dirname=entry.name,
                    file_count=file_count,
                    folder_count=folder_count,
                )
            )
        logger.debug(f"Found {len(abandoned)} abandoned folders in {worktrees_root}")
        return abandoned

    def scan_orphans(self, worktrees_root: str) -> List[OrphanWorktree]:
        """Top-level directories whose .git file points at a missing gitdir.

        A .git directory marks a standalone repository and is never an
        orphan. Entries that cannot be read or parsed are skipped.
        """
        orphans = []
        for entry in self._subdirectories(worktrees_root):
            git_path = os.path.join(entry.path, GIT_ENTRY)
            try:
                if not os.path.isfile(git_path):
                    continue
                target = read_gitdir(git_path)
            except (OSError, UnicodeDecodeError) as e:
                logger.debug(f"Skipping {entry.path}: could not read {GIT_ENTRY}: {e}")
                continue

            if target is None:
                logger.debug(f"Skipping {entry.path}: no gitdir line in {GIT_ENTRY}")
                continue

            resolved = target if os.path.isabs(target) else os.path.join(entry.path, target)
            if not os.path.exists(resolved):
                orphans.append(
                    OrphanWorktree(path=entry.path, dirname=entry.name, broken_target=target)
                )
        logger.debug(f"Found {len(orphans)} orphan worktrees in {worktrees_root}")
        return orphans

    def scan(self, worktrees_root: str) -> ScanResults:
        """Run both scans against the same root."""
        return ScanResults(
            abandoned=self.scan_abandoned(worktrees_root),
            orphans=self.scan_orphans(worktrees_root),
        )
