"""Pytest fixtures for git-worktree-keeper tests"""
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import Mock
import pytest
import git

from git_worktree_keeper.exceptions import CommandError
from git_worktree_keeper.services.process import CommandResult


class FakeExecutor:
    """Scriptable stand-in for ProcessExecutor.

    Responses are keyed by (command, *args). A value may be a string
    (stdout) or an exception instance to raise. Unknown commands fail
    like a non-zero exit.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def add(self, argv, result):
        self.responses[tuple(argv)] = result

    def run(self, command, args, cwd=None):
        key = (command, *args)
        self.calls.append((key, cwd))
        if key not in self.responses:
            raise CommandError(command, args, 1, f"unexpected command: {' '.join(key)}")
        result = self.responses[key]
        if isinstance(result, Exception):
            raise result
        return CommandResult(stdout=result)

    def called(self, *argv):
        return any(key == tuple(argv) for key, _ in self.calls)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        # git reports resolved paths (e.g. /private/var on macOS)
        yield Path(tmpdir).resolve()


@pytest.fixture
def mock_config():
    """Create a mock configuration dictionary."""
    return {
        'debug': False,
        'main_branch': 'main',
        'sequential': True,
        'github_token': 'test_token_for_testing',
    }


@pytest.fixture
def fake_executor():
    return FakeExecutor()


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository for testing."""
    repo_path = temp_dir / "project"
    repo_path.mkdir()

    # Initialize repository
    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    # Create initial commit on main branch
    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    # Rename master to main if needed
    repo.git.branch('-M', 'main')

    # Add a fake GitHub remote for testing
    repo.create_remote('origin', 'git@github.com:test/project.git')

    yield repo

    # Cleanup
    repo.close()


@pytest.fixture
def worktrees_root(temp_dir):
    """The default worktrees directory for the `project` repository."""
    return temp_dir / "project-worktrees"


@pytest.fixture
def add_worktree(git_repo, worktrees_root):
    """Factory adding a linked worktree on a new branch under the worktrees root."""

    def _add(branch, commits=0):
        path = worktrees_root / branch.replace("/", "-")
        git_repo.git.worktree("add", "-b", branch, str(path), "main")
        if commits:
            wt_repo = git.Repo(path)
            for i in range(commits):
                file_path = path / f"{branch.replace('/', '-')}-{i}.txt"
                file_path.write_text(f"change {i}\n")
                wt_repo.git.add(file_path.name)
                wt_repo.git.commit("-m", f"{branch} commit {i}")
            wt_repo.close()
        return path

    return _add


@pytest.fixture
def repo_with_worktrees(git_repo, add_worktree):
    """Repository with two linked worktrees, feature-a one commit ahead of main."""
    add_worktree("feature-a", commits=1)
    add_worktree("feature-b")
    yield git_repo


@pytest.fixture
def make_pr():
    """Factory for mock PyGithub pull requests."""

    def _make(number=1, state="open", merged=False, draft=False, created_days_ago=1,
              sha="abc123"):
        pr = Mock()
        pr.number = number
        pr.state = state
        pr.draft = draft
        pr.merged_at = datetime(2024, 1, 15) if merged else None
        pr.created_at = datetime(2024, 2, 1) - timedelta(days=created_days_ago)
        pr.html_url = f"https://github.com/test/project/pull/{number}"
        pr.head.sha = sha
        return pr

    return _make


@pytest.fixture
def make_check_runs():
    """Factory for mock check runs with the given conclusions."""

    def _make(*conclusions):
        runs = []
        for conclusion in conclusions:
            run = Mock()
            run.conclusion = conclusion
            runs.append(run)
        return runs

    return _make


@pytest.fixture
def mock_github():
    """Mock GitHub client whose repository returns no PRs by default."""
    github = Mock()

    repo = Mock()
    repo.full_name = "test/project"
    repo.get_pulls = Mock(return_value=[])
    commit = Mock()
    commit.get_check_runs = Mock(return_value=[])
    repo.get_commit = Mock(return_value=commit)

    github.get_repo = Mock(return_value=repo)
    return github
