"""Command-line argument parsing for git-worktree-keeper."""

import argparse
from git_worktree_keeper.__version__ import __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-worktree-keeper",
        description="Keep a repository's git worktrees tidy",
        epilog="PR status requires a GitHub remote and GITHUB_TOKEN or an authenticated gh CLI "
        "('gh auth login').",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--version", action="version", version=f"git-worktree-keeper {__version__}"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument(
        "--worktrees-dir",
        metavar="PATH",
        help="Directory holding managed worktrees (default: <repo>-worktrees next to the repository)",
    )
    parser.add_argument(
        "--main-branch", help="Baseline branch for ahead/behind (default: auto-detect)"
    )
    parser.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Number of parallel workers (default: one per worktree, at most 16; GitHub lookups use at most 10)",
    )
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Force sequential processing (disable parallelism)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    list_parser = subparsers.add_parser("list", aliases=["ls"], help="List worktrees with PR status")
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    clean_parser = subparsers.add_parser(
        "clean", help="Remove worktrees with merged/closed PRs and leftover folders"
    )
    clean_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview mode - show what would be removed without removing anything",
    )
    clean_parser.add_argument(
        "--force", action="store_true", help="Remove every candidate without selecting"
    )
    clean_parser.add_argument(
        "--keep-branch", action="store_true", help="Keep the branches of removed worktrees"
    )

    remove_parser = subparsers.add_parser("remove", aliases=["rm"], help="Remove a worktree by name")
    remove_parser.add_argument("name", help="Branch or directory name of the worktree")
    remove_parser.add_argument(
        "--keep-branch", action="store_true", help="Keep the local branch"
    )
    remove_parser.add_argument("--force", action="store_true", help="Skip confirmations")

    subparsers.add_parser("status", help="Show PR and change status of the current worktree")

    path_parser = subparsers.add_parser("path", help="Print the path of a worktree")
    path_parser.add_argument("name", help="Branch or directory name (substring match allowed)")

    new_parser = subparsers.add_parser("new", help="Create a worktree for a new branch")
    new_parser.add_argument("branch", help="Name of the new branch")
    new_parser.add_argument("base", nargs="?", help="Base branch (default: main branch)")

    subparsers.add_parser("doctor", help="Check git, GitHub and worktree setup")

    return parser


def parse_args(argv=None):
    """Parse command-line arguments; the command defaults to list."""
    parsed = build_parser().parse_args(argv)
    if parsed.command is None:
        parsed.command = "list"
        parsed.json = False
    parsed.command = {"ls": "list", "rm": "remove"}.get(parsed.command, parsed.command)
    return parsed
