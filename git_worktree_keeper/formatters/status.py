"""PR and checks status formatting utilities."""

from git_worktree_keeper.constants import CHECKS_LABELS, NO_PR_LABEL, STATE_COLORS
from git_worktree_keeper.models.remote import ChecksStatus, PRState, RemoteStatus


def format_pr_state(state: PRState) -> str:
    """
    Format a PR state as Rich markup.

    Args:
        state: PR state enum value

    Returns:
        Colored state label, "no-pr" for PRState.NONE
    """
    label = NO_PR_LABEL if state == PRState.NONE else state.value
    return f"[{STATE_COLORS[state.value]}]{label}[/{STATE_COLORS[state.value]}]"


def format_checks(checks_status: ChecksStatus) -> str:
    """Checks label as Rich markup, empty when there are no checks."""
    if checks_status.value not in CHECKS_LABELS:
        return ""
    label, color = CHECKS_LABELS[checks_status.value]
    return f"[{color}]{label}[/{color}]"


def format_pr_line(status: RemoteStatus) -> str:
    """One-line PR summary, e.g. "PR #12 open - ✓ checks passing"."""
    if status.state == PRState.NONE:
        return "[bright_black]No PR[/bright_black]"
    line = f"PR #{status.number} {format_pr_state(status.state)}"
    checks = format_checks(status.checks_status)
    if checks:
        line += f" - {checks}"
    return line
