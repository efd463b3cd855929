"""External process execution for git-worktree-keeper."""

from dataclasses import dataclass
from typing import Optional, Sequence, Union
import os

import git

from git_worktree_keeper.exceptions import CommandError
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Captured output of a successful command."""

    stdout: str


class ProcessExecutor:
    """Runs external commands and raises CommandError on non-zero exit.

    Uses GitPython's generic executor, which is not limited to the git
    binary, so `gh` and `git` calls share one code path.
    """

    def run(
        self,
        command: str,
        args: Sequence[str],
        cwd: Optional[Union[str, os.PathLike]] = None,
    ) -> CommandResult:
        """Run a command and return its stdout.

        Args:
            command: Executable name, e.g. "git" or "gh"
            args: Arguments passed to the executable
            cwd: Working directory, defaults to the process's own

        Raises:
            CommandError: if the command cannot be started or exits non-zero
        """
        argv = [command, *args]
        logger.debug(f"Running: {' '.join(argv)}" + (f" (in {cwd})" if cwd else ""))
        runner = git.Git(str(cwd) if cwd else None)
        try:
            status, stdout, stderr = runner.execute(
                argv,
                with_extended_output=True,
                with_exceptions=False,
            )
        except git.exc.GitCommandNotFound as e:
            logger.debug(f"Command not found: {command}: {e}")
            raise CommandError(command, args, None, f"'{command}' is not installed") from e

        if status != 0:
            logger.debug(f"Command {command} exited {status}: {stderr.strip()}")
            raise CommandError(command, args, status, stderr)

        return CommandResult(stdout=stdout)
