"""Display and formatting service for worktree information"""
import json
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from git_worktree_keeper.constants import DIAGNOSTIC_SYMBOLS, DIVIDER, GITHUB_HINTS
from git_worktree_keeper.formatters import (
    format_ahead_behind,
    format_checks,
    format_cleanup_item,
    format_outcome,
    format_pr_line,
    format_pr_state,
)
from git_worktree_keeper.models.cleanup import CleanupOutcome, CleanupReport, CleanupScan
from git_worktree_keeper.models.remote import ChecksStatus, PRState
from git_worktree_keeper.models.worktree import WorktreeChanges, WorktreeListing, WorktreeStatus
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)


class DisplayService:
    def __init__(self, console: Optional[Console] = None, outdated_threshold: int = 10):
        self.console = console or Console()
        self.outdated_threshold = outdated_threshold

    # list ---------------------------------------------------------------

    def display_listing_json(self, listing: WorktreeListing) -> None:
        """Print the listing as JSON (plain print, no Rich highlighting)."""
        print(json.dumps([wt.to_dict() for wt in listing.worktrees], indent=2))

    def _status_line(self, info: WorktreeStatus) -> str:
        line = f"{escape(info.dirname):<40} {format_pr_state(info.remote_status.state)}"
        if info.branch:
            line += f" [bright_black]({format_ahead_behind(info.ahead, info.behind)})[/bright_black]"
        if info.has_uncommitted_changes:
            line += " [yellow](uncommitted changes)[/yellow]"
        if info.behind > self.outdated_threshold:
            line += " [yellow]⚠ outdated[/yellow]"
        if info.remote_status.checks_status == ChecksStatus.FAILURE:
            line += f" {format_checks(ChecksStatus.FAILURE)}"
        if info.is_current:
            line += " [cyan]← you are here[/cyan]"
        return line

    def display_listing(self, listing: WorktreeListing) -> None:
        """Show each worktree with PR status and a summary."""
        if not listing.worktrees:
            self.console.print(f"[yellow]No worktrees found in {escape(listing.worktrees_root)}[/yellow]")
            return

        self.console.print(f"[bold]Worktrees for {escape(listing.repo_name)}:[/bold]")
        self.console.print(DIVIDER)
        self.console.print()

        for info in listing.worktrees:
            self.console.print(self._status_line(info))
            self.console.print(f"  [bright_black]Branch:[/bright_black] {escape(info.branch or 'no-branch')}")
            if info.remote_status.url:
                self.console.print(f"  [bright_black]PR:[/bright_black] {info.remote_status.url}")
            self.console.print()

        self.console.print(DIVIDER)
        counts = listing.count_by_state()
        parts = []
        for state in (PRState.OPEN, PRState.DRAFT, PRState.MERGED, PRState.CLOSED, PRState.NONE):
            if counts.get(state.value):
                label = "no-pr" if state == PRState.NONE else state.value
                parts.append(f"{counts[state.value]} {label}")

        summary = f"Summary: {len(listing.worktrees)} worktrees"
        if parts:
            summary += f" ({', '.join(parts)})"
        self.console.print(summary)

        cleanable = counts.get(PRState.MERGED.value, 0) + counts.get(PRState.CLOSED.value, 0)
        if cleanable:
            self.console.print(
                f"[blue]💡 Run 'git-worktree-keeper clean' to remove {cleanable} merged/closed worktree(s)[/blue]"
            )
        self.display_github_hint(listing.github_issue)

    def display_github_hint(self, issue: Optional[str]) -> None:
        if issue in GITHUB_HINTS:
            self.console.print(f"[blue]💡 {GITHUB_HINTS[issue]}[/blue]")

    # status -------------------------------------------------------------

    def display_status(self, info: WorktreeStatus, changes: WorktreeChanges) -> None:
        branch_line = f"[bold]{escape(info.branch or 'detached HEAD')}[/bold]"
        if info.ahead or info.behind:
            branch_line += f" [bright_black]({format_ahead_behind(info.ahead, info.behind)})[/bright_black]"
        self.console.print(branch_line)

        if info.branch:
            self.console.print(format_pr_line(info.remote_status))
            if info.remote_status.url:
                self.console.print(f"[bright_black]{info.remote_status.url}[/bright_black]")

        if changes.total:
            parts = []
            if changes.modified:
                parts.append(f"{len(changes.modified)} modified")
            if changes.untracked:
                parts.append(f"{len(changes.untracked)} untracked")
            self.console.print(f"[yellow]{', '.join(parts)}[/yellow]")
        else:
            self.console.print("[green]Working tree clean[/green]")

    def display_changes(self, changes: WorktreeChanges) -> None:
        self.console.print("[yellow]⚠ Uncommitted changes detected:[/yellow]")
        self.console.print()
        for title, lines in (("Modified", changes.modified), ("Untracked", changes.untracked)):
            if lines:
                self.console.print(f"[bold]{title}:[/bold]")
                for line in lines:
                    self.console.print(f"  {escape(line)}")
                self.console.print()

    # clean --------------------------------------------------------------

    def display_cleanup_scan(self, scan: CleanupScan) -> None:
        """Show held-back worktrees and remote-status warnings."""
        if scan.github_issue:
            self.console.print(
                "[yellow]⚠ PR status unavailable - only abandoned and orphan folders can be found[/yellow]"
            )
            self.display_github_hint(scan.github_issue)

        skipped = scan.cleanup_set.skipped
        if skipped:
            self.console.print("[yellow]⚠ Skipped (uncommitted changes):[/yellow]")
            for wt in skipped:
                self.console.print(f"  {escape(wt.dirname)} ({escape(wt.branch)})")
            self.console.print()

    def display_would_remove(self, scan: CleanupScan) -> None:
        self.console.print("[bold]Would remove:[/bold]")
        for item in scan.cleanup_set.to_offer:
            self.console.print(f"  {format_cleanup_item(item)}")

    def display_outcome(self, outcome: CleanupOutcome) -> None:
        self.console.print(format_outcome(outcome))

    def display_cleanup_report(self, report: CleanupReport) -> None:
        """Summary distinguishing skipped, removed and failed counts."""
        self.console.print(DIVIDER)

        worktrees, folders = report.removed_worktrees, report.removed_folders
        if worktrees and folders:
            self.console.print(f"[green]✓ Cleaned up {worktrees} worktree(s) and {folders} folder(s)![/green]")
        elif worktrees:
            self.console.print(f"[green]✓ Cleaned up {worktrees} worktree(s)![/green]")
        elif folders:
            self.console.print(f"[green]✓ Cleaned up {folders} folder(s)![/green]")

        failed_wt, failed_folders = report.failed_worktrees, report.failed_folders
        if failed_wt and failed_folders:
            self.console.print(f"[red]✗ Failed to remove {failed_wt} worktree(s) and {failed_folders} folder(s)[/red]")
        elif failed_wt:
            self.console.print(f"[red]✗ Failed to remove {failed_wt} worktree(s)[/red]")
        elif failed_folders:
            self.console.print(f"[red]✗ Failed to remove {failed_folders} folder(s)[/red]")

        if report.skipped:
            self.console.print(
                f"[yellow]⚠ Skipped {len(report.skipped)} worktree(s) with uncommitted changes[/yellow]"
            )

        self.console.print(
            f"{len(report.removed)} of {len(report.outcomes)} selected item(s) removed"
        )
        if report.removed:
            self.console.print("Run 'git-worktree-keeper list' to see remaining worktrees.")

    # doctor -------------------------------------------------------------

    def display_diagnostics(self, results: List) -> None:
        self.console.print()
        self.console.print("[bold]Checks:[/bold]")
        for result in results:
            detail = f": {escape(result.detail)}" if result.detail else ""
            self.console.print(f"  {DIAGNOSTIC_SYMBOLS[result.status]} {result.label}{detail}")
        self.console.print()

        statuses = {r.status for r in results}
        if "fail" in statuses:
            self.console.print("[red]Some checks failed.[/red]")
        elif "warn" in statuses:
            self.console.print("[yellow]All checks passed with warnings.[/yellow]")
        else:
            self.console.print("[green]All checks passed![/green]")
