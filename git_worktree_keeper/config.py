"""Configuration handling for git-worktree-keeper"""

from dataclasses import dataclass
from typing import Optional

from git_worktree_keeper.exceptions import ConfigError


@dataclass
class Config:
    """Configuration for git-worktree-keeper with validation."""

    # Repository layout
    main_branch: Optional[str] = None  # None means auto-detect from origin/HEAD
    remote_name: str = "origin"
    worktrees_dir: Optional[str] = None  # None means <parent>/<repo>-worktrees

    # Execution modes
    keep_branch: bool = False
    debug: bool = False
    sequential: bool = False  # Force sequential gathering (disable parallelism)
    workers: Optional[int] = None  # Number of parallel workers (None = auto-detect)

    # GitHub integration
    github_token: Optional[str] = None

    # Display
    outdated_threshold: int = 10  # Commits behind the baseline before warning

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_main_branch()
        self._validate_remote_name()
        self._validate_workers()
        self._validate_outdated_threshold()

    def _validate_main_branch(self):
        """Validate main_branch is not blank when given."""
        if self.main_branch is None:
            return
        if not self.main_branch.strip():
            raise ConfigError("main_branch cannot be empty")
        self.main_branch = self.main_branch.strip()

    def _validate_remote_name(self):
        """Validate remote_name is not empty."""
        if not self.remote_name or not self.remote_name.strip():
            raise ConfigError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()

    def _validate_workers(self):
        """Validate workers is positive when given."""
        if self.workers is not None and self.workers <= 0:
            raise ConfigError(f"workers must be positive, got {self.workers}")

    def _validate_outdated_threshold(self):
        """Validate outdated_threshold is not negative."""
        if self.outdated_threshold < 0:
            raise ConfigError(
                f"outdated_threshold cannot be negative, got {self.outdated_threshold}"
            )

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "main_branch": self.main_branch,
            "remote_name": self.remote_name,
            "worktrees_dir": self.worktrees_dir,
            "keep_branch": self.keep_branch,
            "debug": self.debug,
            "sequential": self.sequential,
            "workers": self.workers,
            "github_token": self.github_token,
            "outdated_threshold": self.outdated_threshold,
        }

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = set(cls.__dataclass_fields__)
        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
