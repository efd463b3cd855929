"""Utility functions for git-worktree-keeper.

This package provides utility modules:
- logging: Logging configuration and logger creation
- threading: Worker pool sizing for status gathering
"""

from .logging import setup_logging, get_logger, TokenRedactingFilter
from .threading import get_worker_count, should_run_parallel

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "TokenRedactingFilter",
    # Threading
    "get_worker_count",
    "should_run_parallel",
]
