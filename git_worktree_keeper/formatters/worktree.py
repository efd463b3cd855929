"""Worktree and cleanup item formatting utilities."""

from rich.markup import escape

from git_worktree_keeper.constants import KIND_COLORS
from git_worktree_keeper.models.cleanup import (
    AbandonedFolder,
    CleanableItem,
    CleanupOutcome,
    OrphanWorktree,
    StaleWorktree,
)
from git_worktree_keeper.models.remote import PRState


def format_ahead_behind(ahead: int, behind: int) -> str:
    """Format commit distance, e.g. "↑2 ↓5"."""
    return f"↑{ahead} ↓{behind}"


def format_contents(file_count: int, folder_count: int) -> str:
    """Summarize a folder's contents, e.g. "3 files, 1 folder"."""
    def plural(count: int, word: str) -> str:
        return f"{count} {word}{'' if count == 1 else 's'}"

    if file_count == 0 and folder_count == 0:
        return "empty"
    return f"{plural(file_count, 'file')}, {plural(folder_count, 'folder')}"


def format_cleanup_item(item: CleanableItem, markup: bool = True) -> str:
    """
    Format a cleanup item as a single selectable line.

    Args:
        item: Item to describe
        markup: If False, return plain text (for the selector widget)

    Returns:
        Description such as "feature-x (MERGED)" or "leftover (abandoned, 2 files, 0 folders)"
    """
    if isinstance(item, StaleWorktree):
        label = "MERGED" if item.remote_state == PRState.MERGED else "CLOSED"
        color = "green" if item.remote_state == PRState.MERGED else "yellow"
        detail = f"[{color}]{label}[/{color}]" if markup else label
        return f"{escape(item.dirname) if markup else item.dirname} ({detail})"

    if isinstance(item, AbandonedFolder):
        detail = f"abandoned, {format_contents(item.file_count, item.folder_count)}"
    elif isinstance(item, OrphanWorktree):
        detail = f"orphan, gitdir {item.broken_target} missing"
    else:
        raise TypeError(f"Unknown cleanup item type: {type(item).__name__}")

    if not markup:
        return f"{item.dirname} ({detail})"
    color = KIND_COLORS[item.kind]
    return f"{escape(item.dirname)} [{color}]({escape(detail)})[/{color}]"


def format_outcome(outcome: CleanupOutcome) -> str:
    """Rich markup line for one cleanup outcome."""
    name = escape(outcome.item.dirname)
    if not outcome.removed:
        return f"[red]✗ Failed to remove: {name}[/red]\n  [red]{escape(outcome.error or 'unknown error')}[/red]"

    line = f"[green]✓ Removed: {name}[/green]"
    if outcome.branch_deleted is True:
        line += " (branch deleted)"
    elif outcome.branch_deleted is False:
        line += " [yellow](branch kept)[/yellow]"
    if outcome.used_fallback:
        line += " [bright_black](deleted directly)[/bright_black]"
    return line
