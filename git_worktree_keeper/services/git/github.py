"""GitHub API integration service"""

import os
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from threading import Lock
from typing import Dict, Iterable, List, Optional, Tuple, TYPE_CHECKING

from github import Auth, Github

from git_worktree_keeper.exceptions import CommandError, RemoteUnavailableError
from git_worktree_keeper.models.remote import ChecksStatus, PRState, RemoteStatus
from git_worktree_keeper.services.process import ProcessExecutor
from git_worktree_keeper.utils.logging import get_logger
from git_worktree_keeper.utils.threading import get_worker_count

if TYPE_CHECKING:
    from github.PullRequest import PullRequest
    from github.Repository import Repository

logger = get_logger(__name__)

SSH_URL_PATTERN = re.compile(r"^git@github\.com:([^/]+)/(.+?)(?:\.git)?$")
HTTPS_URL_PATTERN = re.compile(r"^https://github\.com/([^/]+)/(.+?)(?:\.git)?/?$")

# Cap for API rate limiting
MAX_REMOTE_WORKERS = 10


def parse_github_repo(remote_url: str) -> Optional[Tuple[str, str]]:
    """Extract (owner, repo) from an SSH or HTTPS GitHub remote URL."""
    remote_url = (remote_url or "").strip()
    for pattern in (SSH_URL_PATTERN, HTTPS_URL_PATTERN):
        match = pattern.match(remote_url)
        if match:
            return match.group(1), match.group(2)
    return None


@dataclass(frozen=True)
class GitHubAccess:
    """Outcome of probing for GitHub credentials."""

    available: bool
    authenticated: bool
    token: Optional[str] = None
    error: Optional[str] = None

    @property
    def usable(self) -> bool:
        return self.available and self.authenticated and bool(self.token)


def check_github_access(
    configured_token: Optional[str] = None, executor: Optional[ProcessExecutor] = None
) -> GitHubAccess:
    """Find a GitHub token: config first, then GITHUB_TOKEN, then the gh CLI."""
    token = configured_token or os.environ.get("GITHUB_TOKEN")
    if token:
        return GitHubAccess(available=True, authenticated=True, token=token)

    executor = executor or ProcessExecutor()
    try:
        executor.run("gh", ["--version"])
    except CommandError:
        return GitHubAccess(available=False, authenticated=False, error="gh CLI not installed")

    try:
        token = executor.run("gh", ["auth", "token"]).stdout.strip()
    except CommandError:
        return GitHubAccess(available=True, authenticated=False, error="gh CLI not authenticated")

    if not token:
        return GitHubAccess(available=True, authenticated=False, error="gh CLI returned no token")
    return GitHubAccess(available=True, authenticated=True, token=token)


def aggregate_check_runs(conclusions: Iterable[Optional[str]]) -> ChecksStatus:
    """Fold check-run conclusions into one status.

    failure if any run failed, success if every run succeeded, pending
    otherwise, none when there are no runs.
    """
    conclusions = list(conclusions)
    if not conclusions:
        return ChecksStatus.NONE
    if any(c == "failure" for c in conclusions):
        return ChecksStatus.FAILURE
    if all(c == "success" for c in conclusions):
        return ChecksStatus.SUCCESS
    return ChecksStatus.PENDING


def classify_pull_request(pr: "PullRequest") -> PRState:
    """Merged beats closed; draft only replaces the open label."""
    if pr.merged_at:
        return PRState.MERGED
    if pr.state == "closed":
        return PRState.CLOSED
    if getattr(pr, "draft", False):
        return PRState.DRAFT
    return PRState.OPEN


class RemoteStatusResolver:
    """Maps branches to their most recent pull request and check status."""

    def __init__(self, github: Github):
        self.github = github
        self._repos: Dict[str, "Repository"] = {}
        self._repo_lock = Lock()

    @classmethod
    def from_token(cls, token: str) -> "RemoteStatusResolver":
        if not token:
            raise RemoteUnavailableError("connect", "no GitHub token")
        return cls(Github(auth=Auth.Token(token)))

    def _get_repo(self, owner: str, repo: str) -> "Repository":
        full_name = f"{owner}/{repo}"
        with self._repo_lock:
            if full_name not in self._repos:
                self._repos[full_name] = self.github.get_repo(full_name)
                logger.debug(f"[GitHub] Connected to {full_name}")
            return self._repos[full_name]

    def _get_checks_status(self, gh_repo: "Repository", sha: str) -> ChecksStatus:
        try:
            check_runs = gh_repo.get_commit(sha).get_check_runs()
            return aggregate_check_runs(run.conclusion for run in check_runs)
        except Exception as e:
            logger.debug(f"[GitHub] Could not fetch check runs for {sha}: {e}")
            return ChecksStatus.NONE

    def resolve(self, owner: str, repo: str, branch: str) -> Optional[RemoteStatus]:
        """Status of the most recently created PR whose head is branch.

        Returns None when there is no PR or the lookup fails for any reason.
        """
        try:
            gh_repo = self._get_repo(owner, repo)
            pulls = list(gh_repo.get_pulls(state="all", head=f"{owner}:{branch}"))
            if not pulls:
                logger.debug(f"[GitHub] No PR for {branch}")
                return None

            latest_pr = max(pulls, key=lambda pr: pr.created_at)
            state = classify_pull_request(latest_pr)
            checks_status = self._get_checks_status(gh_repo, latest_pr.head.sha)
            logger.debug(
                f"[GitHub] {branch}: PR #{latest_pr.number} {state.value}, checks {checks_status.value}"
            )
            return RemoteStatus(
                state=state,
                checks_status=checks_status,
                url=latest_pr.html_url,
                number=latest_pr.number,
            )
        except Exception as e:
            logger.debug(f"[GitHub] Error getting PR status for {branch}: {e}")
            return None

    def resolve_many(
        self, owner: str, repo: str, branches: List[str], max_workers: Optional[int] = None
    ) -> Dict[str, RemoteStatus]:
        """Resolve several branches in parallel, substituting none for misses."""
        if not branches:
            return {}

        workers = get_worker_count(len(branches), max_workers, cap=MAX_REMOTE_WORKERS)
        logger.debug(f"[GitHub] Fetching PR data for {len(branches)} branches using {workers} workers")

        result: Dict[str, RemoteStatus] = {}
        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_branch = {
                executor.submit(self.resolve, owner, repo, branch): branch
                for branch in branches
            }
            for future in as_completed(future_to_branch):
                branch = future_to_branch[future]
                result[branch] = future.result() or RemoteStatus.none()

        return result

    def close(self) -> None:
        """Close the GitHub API connection."""
        try:
            self.github.close()
            logger.debug("[GitHub] Closed GitHub API connection")
        except Exception as e:
            logger.debug(f"[GitHub] Error closing GitHub API connection: {e}")
