"""Formatting utilities for git-worktree-keeper.

- status: PR state and checks formatting
- worktree: worktree rows and cleanup item formatting
"""

from .status import format_pr_state, format_checks, format_pr_line
from .worktree import (
    format_ahead_behind,
    format_contents,
    format_cleanup_item,
    format_outcome,
)

__all__ = [
    # Status
    "format_pr_state",
    "format_checks",
    "format_pr_line",
    # Worktree
    "format_ahead_behind",
    "format_contents",
    "format_cleanup_item",
    "format_outcome",
]
