"""Git-related services for git-worktree-keeper."""

from .inventory import WorktreeInventory
from .references import ReferenceResolver
from .operations import WorktreeOperations
from .github import RemoteStatusResolver, check_github_access, parse_github_repo

__all__ = [
    "WorktreeInventory",
    "ReferenceResolver",
    "WorktreeOperations",
    "RemoteStatusResolver",
    "check_github_access",
    "parse_github_repo",
]
