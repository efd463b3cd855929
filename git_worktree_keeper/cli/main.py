"""Command-line interface for git-worktree-keeper"""

import os
import sys

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

from git_worktree_keeper.cli.args import parse_args
from git_worktree_keeper.config import Config
from git_worktree_keeper.core.worktree_keeper import WorktreeKeeper
from git_worktree_keeper.exceptions import GitWorktreeKeeperError
from git_worktree_keeper.services.display_service import DisplayService
from git_worktree_keeper.utils.logging import setup_logging

console = Console()


def confirm(prompt: str) -> bool:
    answer = console.input(f"{prompt} [y/N] ").strip().lower()
    return answer in ("y", "yes")


def cmd_list(keeper: WorktreeKeeper, display: DisplayService, args) -> int:
    if args.json:
        display.display_listing_json(keeper.list_worktrees())
        return 0
    with console.status("Fetching worktrees..."):
        listing = keeper.list_worktrees()
    display.display_listing(listing)
    return 0


def cmd_clean(keeper: WorktreeKeeper, display: DisplayService, args) -> int:
    with console.status("Scanning worktrees..."):
        scan = keeper.find_cleanup_set()

    display.display_cleanup_scan(scan)
    candidates = scan.cleanup_set.to_offer
    if not candidates:
        console.print("[green]Nothing to clean up[/green]")
        return 0

    if args.dry_run:
        display.display_would_remove(scan)
        return 0

    if args.force:
        selected = candidates
    elif sys.stdin.isatty():
        from git_worktree_keeper.ui.selector import select_cleanup_items
        selected = select_cleanup_items(candidates)
    else:
        display.display_would_remove(scan)
        console.print("[red]Error: interactive selection needs a terminal; use --force[/red]")
        return 1

    if not selected:
        console.print("No items selected")
        return 0

    report = keeper.execute_cleanup(selected, on_outcome=display.display_outcome)
    report.skipped = list(scan.cleanup_set.skipped)
    display.display_cleanup_report(report)
    return 0 if report.succeeded else 1


def _confirm_uncommitted(keeper: WorktreeKeeper, display: DisplayService, path: str) -> bool:
    display.display_changes(keeper.get_changes(path))
    while True:
        answer = console.input("Remove anyway? [y/N/d(iff)] ").strip().lower()
        if answer in ("d", "diff"):
            diff = keeper.get_diff(path)
            if diff:
                console.print(Syntax(diff, "diff", theme="ansi_dark"))
            else:
                console.print("[bright_black]No tracked changes (untracked files only)[/bright_black]")
            continue
        return answer in ("y", "yes")


def cmd_remove(keeper: WorktreeKeeper, display: DisplayService, args) -> int:
    plan = keeper.plan_removal(args.name, keep_branch=args.keep_branch)
    record = plan.record

    if not args.force:
        if plan.has_uncommitted_changes and not _confirm_uncommitted(keeper, display, record.path):
            console.print("[yellow]Cancelled[/yellow]")
            return 0

        push_status = plan.push_status
        if push_status is not None and push_status.no_remote:
            console.print(
                f"[yellow]⚠ Branch '{escape(record.branch)}' was never pushed; "
                "deleting it loses its commits.[/yellow]"
            )
            if not confirm("Delete branch anyway?"):
                console.print("[yellow]Cancelled[/yellow] (use --keep-branch to keep the branch)")
                return 0
        elif push_status is not None and push_status.has_unpushed:
            console.print(
                f"[yellow]⚠ Branch '{escape(record.branch)}' has unpushed commits.[/yellow]"
            )
            if not confirm("Delete branch anyway?"):
                console.print("[yellow]Cancelled[/yellow] (use --keep-branch to keep the branch)")
                return 0

    result = keeper.remove_worktree(record, keep_branch=args.keep_branch)
    line = f"[green]✓ Removed worktree: {escape(record.dirname)}[/green]"
    if result.used_fallback:
        line += " [bright_black](deleted directly)[/bright_black]"
    console.print(line)
    if result.branch_deleted:
        console.print(f"[green]✓ Deleted branch: {escape(record.branch)}[/green]")
    elif result.branch_deleted is False:
        console.print(
            f"[yellow]⚠ Could not delete branch {escape(record.branch)}: "
            f"{escape(result.branch_error or 'unknown error')}[/yellow]"
        )
    return 0


def cmd_status(keeper: WorktreeKeeper, display: DisplayService, args) -> int:
    info = keeper.current_status()
    if info is None:
        console.print("[yellow]Not inside a worktree of this repository[/yellow]")
        return 1
    display.display_status(info, keeper.get_changes(info.path))
    return 0


def cmd_path(keeper: WorktreeKeeper, display: DisplayService, args) -> int:
    record = keeper.find_worktree(args.name, fuzzy=True)
    # Plain print so the output can be used in $(...)
    print(record.path)
    return 0


def cmd_new(keeper: WorktreeKeeper, display: DisplayService, args) -> int:
    with console.status(f"Creating worktree for {args.branch}..."):
        path = keeper.create_worktree(args.branch, args.base)
    console.print(f"[green]✓ Created worktree: {escape(path)}[/green]")
    console.print(f"  cd {escape(path)}")
    return 0


def cmd_doctor(keeper: WorktreeKeeper, display: DisplayService, args) -> int:
    results = keeper.run_diagnostics()
    display.display_diagnostics(results)
    return 1 if any(r.status == "fail" for r in results) else 0


COMMANDS = {
    "list": cmd_list,
    "clean": cmd_clean,
    "remove": cmd_remove,
    "status": cmd_status,
    "path": cmd_path,
    "new": cmd_new,
    "doctor": cmd_doctor,
}


def main(argv=None):
    """Main entry point for the application."""
    parsed_args = None
    try:
        parsed_args = parse_args(argv)

        # The selector owns the terminal, so logs go to the file only
        tui_mode = (
            parsed_args.command == "clean"
            and not parsed_args.dry_run
            and not parsed_args.force
            and sys.stdin.isatty()
        )
        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug, tui_mode=tui_mode)

        config = Config(
            main_branch=parsed_args.main_branch,
            worktrees_dir=parsed_args.worktrees_dir,
            keep_branch=getattr(parsed_args, "keep_branch", False),
            debug=parsed_args.debug,
            sequential=parsed_args.sequential,
            workers=parsed_args.workers,
        )

        if parsed_args.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                if key == "github_token" and value:
                    value = "***"
                console.print(f"  {key}: {value}")
            console.print("[dim]Note: Debug mode forces sequential processing for readable logs[/dim]")

        keeper = WorktreeKeeper(os.getcwd(), config)
        display = DisplayService(console, outdated_threshold=config.outdated_threshold)
        return COMMANDS[parsed_args.command](keeper, display, parsed_args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except GitWorktreeKeeperError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if parsed_args is not None and parsed_args.debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
