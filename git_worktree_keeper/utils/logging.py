"""Logging configuration for git-worktree-keeper"""
import logging
import re
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

# Personal, OAuth, user-to-server, server and refresh tokens, plus fine-grained PATs
TOKEN_PATTERN = re.compile(r"\b(?:gh[pousr]_[A-Za-z0-9]{20,}|github_pat_[A-Za-z0-9_]{20,})\b")

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class TokenRedactingFilter(logging.Filter):
    """Masks GitHub tokens in messages relayed from gh or the API client."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = TOKEN_PATTERN.sub("***", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def get_log_file() -> Path:
    """Location of the per-run log file."""
    return Path.home() / '.git-worktree-keeper' / 'git-worktree-keeper.log'


def setup_logging(verbose: bool = False, debug: bool = False, tui_mode: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, show INFO level messages
        debug: If True, show DEBUG level messages with time and source
        tui_mode: If True, log to file only (the selector owns the terminal)
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    root_logger = logging.getLogger()
    # File handler gets everything in TUI mode; handlers filter what they show
    root_logger.setLevel(logging.DEBUG if tui_mode else level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    redactor = TokenRedactingFilter()

    if tui_mode or debug:
        log_file = get_log_file()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='w')  # Overwrite each run
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        file_handler.addFilter(redactor)
        root_logger.addHandler(file_handler)

    if not tui_mode:
        # stderr keeps log lines out of `path` output used in $(...)
        console_handler = RichHandler(
            console=Console(stderr=True),
            level=level,
            show_time=debug,
            show_path=debug,
            markup=False,
            rich_tracebacks=debug,
        )
        console_handler.setFormatter(logging.Formatter(fmt='[%(name)s] %(message)s'))
        console_handler.addFilter(redactor)
        root_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the specified module.

    Args:
        name: Name of the module (typically __name__)

    Returns:
        Logger instance
    """
    # Strip the package prefix for cleaner log names
    if name.startswith('git_worktree_keeper.'):
        name = name.replace('git_worktree_keeper.', '', 1)
    if name.startswith('services.'):
        name = name.replace('services.', '', 1)

    return logging.getLogger(name)
