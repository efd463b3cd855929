"""Version information for git-worktree-keeper."""

__version__ = "0.3.0"
