"""Shared constants for git-worktree-keeper."""

# Rich color names per PR state
STATE_COLORS = {
    "open": "green",
    "draft": "yellow",
    "merged": "magenta",
    "closed": "magenta",
    "none": "bright_black",
}

# Label shown for a branch without a PR
NO_PR_LABEL = "no-pr"

CHECKS_LABELS = {
    "success": ("✓ checks passing", "green"),
    "failure": ("✗ checks failing", "red"),
    "pending": ("○ checks pending", "yellow"),
}

# Cleanup item colors
KIND_COLORS = {
    "worktree": None,
    "abandoned": "bright_black",
    "orphan": "dark_orange",
}

DIVIDER = "━" * 60

DIAGNOSTIC_SYMBOLS = {
    "pass": "[green]✓[/green]",
    "warn": "[yellow]⚠[/yellow]",
    "info": "[blue]○[/blue]",
    "fail": "[red]✗[/red]",
}

GITHUB_HINTS = {
    "not-github": "Not a GitHub repository - PR status unavailable",
    "gh-unavailable": "Set GITHUB_TOKEN or run 'gh auth login' for PR status",
}
