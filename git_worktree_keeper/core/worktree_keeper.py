"""Core functionality for git-worktree-keeper"""

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, TypeVar, Union

from github import GithubException

from git_worktree_keeper.config import Config
from git_worktree_keeper.exceptions import (
    CommandError,
    GitWorktreeKeeperError,
    RemovalFailedError,
    RemoteUnavailableError,
    BranchDeletionFailedError,
    WorktreeNotFoundError,
)
from git_worktree_keeper.models.cleanup import CleanableItem, CleanupReport, CleanupScan
from git_worktree_keeper.models.remote import RemoteStatus
from git_worktree_keeper.models.worktree import (
    RemovalPlan,
    RemovalResult,
    WorktreeChanges,
    WorktreeListing,
    WorktreeRecord,
    WorktreeStatus,
)
from git_worktree_keeper.services.classifier import build_cleanup_set
from git_worktree_keeper.services.cleanup_service import CleanupExecutor, OutcomeCallback
from git_worktree_keeper.services.filesystem_service import FilesystemReconciler
from git_worktree_keeper.services.git import (
    ReferenceResolver,
    RemoteStatusResolver,
    WorktreeInventory,
    WorktreeOperations,
    check_github_access,
    parse_github_repo,
)
from git_worktree_keeper.services.git.inventory import (
    filter_managed,
    get_repo_name,
    get_worktrees_root,
    is_path_in_worktree,
)
from git_worktree_keeper.services.process import ProcessExecutor
from git_worktree_keeper.utils.logging import get_logger
from git_worktree_keeper.utils.threading import get_worker_count, should_run_parallel

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

GITHUB_NO_REMOTE = "no-remote"
GITHUB_NOT_GITHUB = "not-github"
GITHUB_UNAVAILABLE = "gh-unavailable"


@dataclass
class RepoContext:
    """Repository layout, derived fresh from git on every call."""

    records: List[WorktreeRecord]
    primary_path: str
    repo_name: str
    worktrees_root: str

    @property
    def managed(self) -> List[WorktreeRecord]:
        return filter_managed(self.records, self.worktrees_root)


@dataclass
class GitHubConnection:
    """A usable PR resolver bound to one repository, or why there is none."""

    owner: Optional[str] = None
    repo: Optional[str] = None
    resolver: Optional[RemoteStatusResolver] = None
    issue: Optional[str] = None
    detail: Optional[str] = None

    def resolve_many(self, branches: List[str], max_workers: Optional[int] = None
                     ) -> Dict[str, RemoteStatus]:
        """Statuses for branches; none everywhere when GitHub is unusable."""
        if self.resolver is None or self.owner is None or self.repo is None:
            return {branch: RemoteStatus.none() for branch in branches}
        return self.resolver.resolve_many(self.owner, self.repo, branches, max_workers)

    def close(self) -> None:
        if self.resolver is not None:
            self.resolver.close()


@dataclass
class CheckResult:
    """One line of `doctor` output."""

    status: str  # pass | warn | info | fail
    label: str
    detail: Optional[str] = None


class WorktreeKeeper:
    """Main class for managing a repository's worktrees."""

    def __init__(
        self,
        repo_path: str,
        config: Union[Config, dict],
        executor: Optional[ProcessExecutor] = None,
        resolver_factory: Callable[[str], RemoteStatusResolver] = RemoteStatusResolver.from_token,
    ):
        """Initialize WorktreeKeeper.

        Args:
            repo_path: Any path inside the repository
            config: Configuration dict or Config object
            executor: Process executor shared by every service
            resolver_factory: Builds a PR resolver from a GitHub token
        """
        self.repo_path = repo_path
        self.config = Config.from_dict(config) if isinstance(config, dict) else config
        self.executor = executor or ProcessExecutor()
        self.resolver_factory = resolver_factory
        self.inventory = WorktreeInventory(repo_path, self.executor)
        self.reconciler = FilesystemReconciler()

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def load_context(self) -> RepoContext:
        """List worktrees and derive the layout from the primary one.

        Raises:
            InventoryUnavailableError: git cannot list worktrees
        """
        records = self.inventory.list()
        primary_path = records[0].path
        return RepoContext(
            records=records,
            primary_path=primary_path,
            repo_name=get_repo_name(primary_path),
            worktrees_root=get_worktrees_root(primary_path, self.config.worktrees_dir),
        )

    def references(self, ctx: RepoContext) -> ReferenceResolver:
        return ReferenceResolver(ctx.primary_path, self.executor, self.config.remote_name)

    def operations(self, ctx: RepoContext) -> WorktreeOperations:
        return WorktreeOperations(ctx.primary_path, self.executor, self.config.remote_name)

    def connect_github(self, ctx: RepoContext) -> GitHubConnection:
        """Check the remote is on GitHub and credentials exist.

        Never raises; the returned connection names the issue instead.
        """
        try:
            remote_url = self.references(ctx).get_remote_url()
        except CommandError as e:
            logger.info(f"No {self.config.remote_name} remote: {e}")
            return GitHubConnection(issue=GITHUB_NO_REMOTE)

        parsed = parse_github_repo(remote_url)
        if parsed is None:
            logger.info(f"Non-GitHub repository detected ({remote_url}). PR detection disabled.")
            return GitHubConnection(issue=GITHUB_NOT_GITHUB)
        owner, repo = parsed

        access = check_github_access(self.config.github_token, self.executor)
        if not access.usable:
            logger.info(f"[GitHub] Integration disabled: {access.error}")
            return GitHubConnection(owner=owner, repo=repo, issue=GITHUB_UNAVAILABLE,
                                    detail=access.error)

        try:
            resolver = self.resolver_factory(access.token)
        except (RemoteUnavailableError, GithubException) as e:
            logger.warning(f"[GitHub] Setup failed - PR detection disabled: {e}")
            return GitHubConnection(owner=owner, repo=repo, issue=GITHUB_UNAVAILABLE,
                                    detail=str(e))

        logger.debug(f"[GitHub] Integration enabled for {owner}/{repo}")
        return GitHubConnection(owner=owner, repo=repo, resolver=resolver)

    def _parallel_map(self, func: Callable[[T], R], items: Sequence[T]) -> List[R]:
        """Apply func to every item, in parallel unless configured sequential.

        Results keep the order of items.
        """
        if not should_run_parallel(len(items), self.config.sequential, self.config.debug):
            return [func(item) for item in items]

        max_workers = get_worker_count(len(items), self.config.workers)
        logger.debug(f"Using {max_workers} workers for {len(items)} items")
        results: List[Optional[R]] = [None] * len(items)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_index = {executor.submit(func, item): i for i, item in enumerate(items)}
            for future in as_completed(future_to_index):
                results[future_to_index[future]] = future.result()
        return results  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # list / status
    # ------------------------------------------------------------------

    def _collect_status(self, record: WorktreeRecord, refs: ReferenceResolver, baseline: str,
                        current_path: str, remote: Dict[str, RemoteStatus]) -> WorktreeStatus:
        ahead_behind = refs.ahead_behind(record.branch, baseline) if record.branch else None
        return WorktreeStatus(
            path=record.path,
            branch=record.branch,
            created_at=refs.get_creation_time(record.path),
            is_current=is_path_in_worktree(current_path, record.path),
            has_uncommitted_changes=refs.has_uncommitted_changes(record.path),
            ahead=ahead_behind.ahead if ahead_behind else 0,
            behind=ahead_behind.behind if ahead_behind else 0,
            remote_status=remote.get(record.branch or "", RemoteStatus.none()),
        )

    def list_worktrees(self, cwd: Optional[str] = None) -> WorktreeListing:
        """Status of every managed worktree, oldest first."""
        ctx = self.load_context()
        listing = WorktreeListing(repo_name=ctx.repo_name, worktrees_root=ctx.worktrees_root)
        managed = ctx.managed
        if not managed:
            return listing

        refs = self.references(ctx)
        current_path = cwd or os.getcwd()
        baseline = self.config.main_branch or refs.get_default_branch()

        github = self.connect_github(ctx)
        listing.github_issue = github.issue
        try:
            branches = [r.branch for r in managed if r.branch]
            remote = github.resolve_many(branches, self.config.workers)
        finally:
            github.close()

        statuses = self._parallel_map(
            lambda record: self._collect_status(record, refs, baseline, current_path, remote),
            managed,
        )
        # sorted() is stable, ties keep git's listing order
        listing.worktrees = sorted(statuses, key=lambda s: s.created_at)
        return listing

    def current_status(self, cwd: Optional[str] = None) -> Optional[WorktreeStatus]:
        """Status of the worktree containing cwd, or None outside any worktree."""
        ctx = self.load_context()
        current_path = self.inventory.get_current_worktree_path(cwd)
        record = next(
            (r for r in ctx.records
             if os.path.realpath(r.path) == os.path.realpath(current_path)),
            None,
        )
        if record is None:
            return None

        refs = self.references(ctx)
        baseline = self.config.main_branch or refs.get_default_branch()
        remote: Dict[str, RemoteStatus] = {}
        if record.branch:
            github = self.connect_github(ctx)
            try:
                remote = github.resolve_many([record.branch], 1)
            finally:
                github.close()
        return self._collect_status(record, refs, baseline, current_path, remote)

    def get_changes(self, path: str) -> WorktreeChanges:
        """Modified and untracked files of a worktree."""
        return ReferenceResolver(path, self.executor).get_worktree_changes(path)

    def get_diff(self, path: str) -> str:
        """Tracked changes of a worktree as a diff."""
        return ReferenceResolver(path, self.executor).get_diff(path)

    # ------------------------------------------------------------------
    # clean
    # ------------------------------------------------------------------

    def find_cleanup_set(self, cwd: Optional[str] = None) -> CleanupScan:
        """Classify managed worktrees and leftover folders for cleanup.

        Without GitHub access no worktree is stale, but abandoned and orphan
        folders are still reported.
        """
        ctx = self.load_context()
        refs = self.references(ctx)
        current_path = self.inventory.get_current_worktree_path(cwd)

        candidates = [
            r for r in ctx.managed
            if r.branch and not r.is_primary and not is_path_in_worktree(current_path, r.path)
        ]

        github = self.connect_github(ctx)
        try:
            remote = github.resolve_many([r.branch for r in candidates], self.config.workers)
        finally:
            github.close()

        scan_results = self.reconciler.scan(ctx.worktrees_root)
        cleanup_set = build_cleanup_set(
            ctx.managed,
            scan_results,
            remote.get,
            current_path,
            refs.has_uncommitted_changes_for_removal,
        )
        return CleanupScan(
            worktrees_root=ctx.worktrees_root,
            cleanup_set=cleanup_set,
            github_issue=github.issue,
        )

    def execute_cleanup(
        self, items: Sequence[CleanableItem], on_outcome: Optional[OutcomeCallback] = None
    ) -> CleanupReport:
        """Remove the approved items, collecting one outcome per item."""
        ctx = self.load_context()
        executor = CleanupExecutor(self.operations(ctx), delete_branches=not self.config.keep_branch)
        return executor.execute(items, on_outcome=on_outcome)

    # ------------------------------------------------------------------
    # remove / path
    # ------------------------------------------------------------------

    def find_worktree(self, name: str, fuzzy: bool = False,
                      ctx: Optional[RepoContext] = None) -> WorktreeRecord:
        """Managed worktree matching name.

        Exact branch match wins over exact directory match. With fuzzy, a
        case-insensitive substring of either is enough.

        Raises:
            WorktreeNotFoundError: nothing matches
        """
        managed = (ctx or self.load_context()).managed

        match = next((r for r in managed if r.branch == name), None)
        if match is None:
            match = next((r for r in managed if r.dirname == name), None)
        if match is None and fuzzy:
            needle = name.lower()
            match = next(
                (r for r in managed
                 if needle in (r.branch or "").lower() or needle in r.dirname.lower()),
                None,
            )
        if match is None:
            raise WorktreeNotFoundError(name)
        return match

    def plan_removal(self, name: str, keep_branch: bool = False) -> RemovalPlan:
        """Find a worktree and check what removing it would lose."""
        ctx = self.load_context()
        record = self.find_worktree(name, ctx=ctx)
        refs = self.references(ctx)

        push_status = None
        if record.branch and not keep_branch:
            push_status = refs.has_unpushed_commits(record.branch)

        return RemovalPlan(
            record=record,
            has_uncommitted_changes=refs.has_uncommitted_changes_for_removal(record.path),
            push_status=push_status,
        )

    def remove_worktree(self, record: WorktreeRecord, keep_branch: bool = False) -> RemovalResult:
        """Force-remove one worktree and, unless kept, its branch.

        Raises:
            RemovalFailedError: the worktree directory could not be removed
        """
        ctx = self.load_context()
        if record.is_primary or os.path.realpath(record.path) == os.path.realpath(ctx.primary_path):
            raise RemovalFailedError(record.path, "refusing to remove the primary worktree")

        ops = self.operations(ctx)
        used_fallback = ops.remove_worktree_with_fallback(record.path, force=True)
        result = RemovalResult(path=record.path, branch=record.branch, used_fallback=used_fallback)

        if record.branch and not keep_branch:
            try:
                ops.delete_branch(record.branch, force=True)
                result.branch_deleted = True
            except BranchDeletionFailedError as e:
                logger.warning(str(e))
                result.branch_deleted = False
                result.branch_error = e.message or str(e)
        return result

    # ------------------------------------------------------------------
    # new
    # ------------------------------------------------------------------

    def create_worktree(self, branch: str, base: Optional[str] = None) -> str:
        """Create a worktree for a new branch under the worktrees root.

        The base is taken from the remote after a fetch; if the fetch fails
        the local base branch is used.

        Returns:
            Path of the new worktree

        Raises:
            GitWorktreeKeeperError: the branch exists or git fails
        """
        ctx = self.load_context()
        refs = self.references(ctx)
        ops = self.operations(ctx)

        if refs.branch_exists(branch):
            raise GitWorktreeKeeperError(f"Branch '{branch}' already exists locally")

        base = base or self.config.main_branch or refs.get_default_branch()
        path = os.path.join(ctx.worktrees_root, branch.replace("/", "-"))
        if os.path.lexists(path):
            raise GitWorktreeKeeperError(f"Path '{path}' already exists")

        start_point = base
        try:
            ops.fetch()
            start_point = f"{self.config.remote_name}/{base}"
        except CommandError as e:
            logger.warning(f"Could not fetch from {self.config.remote_name}, using local '{base}': {e}")

        ops.create_worktree(branch, path, start_point)
        return path

    # ------------------------------------------------------------------
    # doctor
    # ------------------------------------------------------------------

    def run_diagnostics(self) -> List[CheckResult]:
        """Environment checks for the `doctor` command."""
        results: List[CheckResult] = []

        try:
            version = self.executor.run("git", ["--version"]).stdout.strip()
            results.append(CheckResult("pass", "Git", version.replace("git version ", "")))
        except CommandError:
            results.append(CheckResult("fail", "Git", "not installed"))

        ctx: Optional[RepoContext] = None
        try:
            ctx = self.load_context()
            results.append(CheckResult("pass", "Repository", ctx.repo_name))
        except GitWorktreeKeeperError:
            results.append(CheckResult("fail", "Repository", "not a git repository"))

        access = check_github_access(self.config.github_token, self.executor)
        if not access.available:
            results.append(CheckResult("warn", "GitHub CLI",
                                       "not installed (install: https://cli.github.com)"))
        elif not access.authenticated:
            results.append(CheckResult("warn", "GitHub auth", "not authenticated (run: gh auth login)"))
        else:
            results.append(CheckResult("pass", "GitHub auth", "token available"))

        if ctx is not None:
            managed = ctx.managed
            if managed:
                results.append(CheckResult(
                    "pass", "Worktrees", f"{len(managed)} worktrees in {ctx.worktrees_root}"
                ))
            else:
                results.append(CheckResult("info", "Worktrees", "no worktrees yet"))
        else:
            results.append(CheckResult("info", "Worktrees", "could not check"))

        return results
