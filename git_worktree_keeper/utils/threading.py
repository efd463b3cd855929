"""Worker pool sizing for status gathering.

Gathering runs one short git subprocess or one GitHub round trip per task,
so pools are sized from the number of worktrees, not from the CPU count.
"""

from typing import Optional

# git subprocesses in flight at once
LOCAL_WORKER_CAP = 16


def get_worker_count(task_count: int, user_specified: Optional[int] = None,
                     cap: int = LOCAL_WORKER_CAP) -> int:
    """Number of workers for task_count tasks.

    A positive user_specified value replaces the default, but the result
    never exceeds cap or the number of tasks. Returns 1 when there is at
    most one task.
    """
    if task_count <= 1:
        return 1
    requested = user_specified if user_specified is not None and user_specified > 0 else cap
    return max(1, min(requested, cap, task_count))


def should_run_parallel(task_count: int, sequential: bool = False, debug: bool = False) -> bool:
    """Whether gathering should use a pool.

    Debug runs stay sequential so per-worktree log lines are not interleaved.
    """
    return not (sequential or debug) and task_count > 1
