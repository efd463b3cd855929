"""Integration tests for WorktreeKeeper against real repositories"""
import os
from unittest.mock import Mock, patch
import pytest

from git_worktree_keeper.core.worktree_keeper import WorktreeKeeper
from git_worktree_keeper.exceptions import (
    GitWorktreeKeeperError,
    InventoryUnavailableError,
    RemoteUnavailableError,
    RemovalFailedError,
    WorktreeNotFoundError,
)
from git_worktree_keeper.models.cleanup import AbandonedFolder, StaleWorktree
from git_worktree_keeper.models.remote import ChecksStatus, PRState, RemoteStatus
from git_worktree_keeper.services.git.references import ReferenceResolver


def make_resolver(states):
    """Mock resolver answering resolve_many from a branch -> RemoteStatus map."""
    resolver = Mock()

    def resolve_many(owner, repo, branches, max_workers=None):
        return {b: states.get(b, RemoteStatus.none()) for b in branches}

    resolver.resolve_many.side_effect = resolve_many
    return resolver


@pytest.fixture
def keeper_factory(repo_with_worktrees, mock_config):
    def _make(states=None, **overrides):
        resolver = make_resolver(states or {})
        factory = Mock(return_value=resolver)
        keeper = WorktreeKeeper(repo_with_worktrees.working_dir, {**mock_config, **overrides},
                                resolver_factory=factory)
        return keeper, resolver, factory
    return _make


class TestListWorktrees:
    """Test the list result."""

    def test_lists_managed_worktrees(self, keeper_factory, worktrees_root):
        states = {"feature-a": RemoteStatus(PRState.OPEN, ChecksStatus.SUCCESS, "https://x/1", 1)}
        keeper, resolver, factory = keeper_factory(states)

        listing = keeper.list_worktrees(cwd=str(worktrees_root / "feature-b"))

        assert listing.repo_name == "project"
        assert listing.worktrees_root == str(worktrees_root)
        assert listing.github_issue is None
        by_branch = {wt.branch: wt for wt in listing.worktrees}
        assert set(by_branch) == {"feature-a", "feature-b"}

        feature_a = by_branch["feature-a"]
        assert (feature_a.ahead, feature_a.behind) == (1, 0)
        assert feature_a.remote_status.state == PRState.OPEN
        assert feature_a.is_current is False
        assert feature_a.has_uncommitted_changes is False

        feature_b = by_branch["feature-b"]
        assert feature_b.remote_status == RemoteStatus.none()
        assert feature_b.is_current is True

        factory.assert_called_once_with("test_token_for_testing")
        resolver.close.assert_called_once()

    def test_parallel_gathering(self, keeper_factory, worktrees_root):
        (worktrees_root / "feature-b" / "wip.txt").write_text("wip\n")
        keeper, _, _ = keeper_factory(sequential=False, workers=4)

        listing = keeper.list_worktrees(cwd="/")

        by_branch = {wt.branch: wt for wt in listing.worktrees}
        assert by_branch["feature-b"].has_uncommitted_changes is True
        assert by_branch["feature-a"].has_uncommitted_changes is False

    def test_sorted_by_creation_time(self, keeper_factory, worktrees_root):
        created = {
            str(worktrees_root / "feature-a"): 200.0,
            str(worktrees_root / "feature-b"): 100.0,
        }
        keeper, _, _ = keeper_factory()

        with patch.object(ReferenceResolver, "get_creation_time",
                          side_effect=lambda path: created.get(path, 0.0)):
            listing = keeper.list_worktrees(cwd="/")

        assert [wt.branch for wt in listing.worktrees] == ["feature-b", "feature-a"]

    def test_json_shape(self, keeper_factory):
        keeper, _, _ = keeper_factory()

        row = keeper.list_worktrees(cwd="/").worktrees[0].to_dict()

        assert set(row) >= {"path", "branch", "createdAt", "isCurrent", "hasUncommittedChanges",
                            "ahead", "behind", "remoteStatus"}
        assert row["remoteStatus"] == {"state": "none", "checksStatus": "none"}

    def test_no_remote(self, keeper_factory, repo_with_worktrees):
        repo_with_worktrees.delete_remote("origin")
        keeper, _, factory = keeper_factory()

        listing = keeper.list_worktrees(cwd="/")

        assert listing.github_issue == "no-remote"
        assert all(wt.remote_status == RemoteStatus.none() for wt in listing.worktrees)
        factory.assert_not_called()

    def test_not_github(self, keeper_factory, repo_with_worktrees):
        repo_with_worktrees.remote("origin").set_url("git@gitlab.com:test/project.git")
        keeper, _, factory = keeper_factory()

        assert keeper.list_worktrees(cwd="/").github_issue == "not-github"
        factory.assert_not_called()

    def test_resolver_setup_failure(self, keeper_factory):
        keeper, _, factory = keeper_factory()
        factory.side_effect = RemoteUnavailableError("connect", "bad token")

        listing = keeper.list_worktrees(cwd="/")

        assert listing.github_issue == "gh-unavailable"
        assert len(listing.worktrees) == 2

    def test_empty_worktrees_root(self, git_repo, mock_config):
        keeper = WorktreeKeeper(git_repo.working_dir, mock_config, resolver_factory=Mock())

        listing = keeper.list_worktrees(cwd="/")

        assert listing.worktrees == []

    def test_not_a_repository(self, temp_dir, mock_config):
        keeper = WorktreeKeeper(str(temp_dir), mock_config)

        with pytest.raises(InventoryUnavailableError):
            keeper.list_worktrees()


class TestCleanup:
    """Test finding and executing cleanup."""

    @pytest.fixture
    def cleanup_repo(self, keeper_factory, worktrees_root):
        (worktrees_root / "feature-b" / "wip.txt").write_text("wip\n")
        (worktrees_root / "leftover").mkdir()
        (worktrees_root / "leftover" / "file.txt").write_text("x")
        states = {
            "feature-a": RemoteStatus(PRState.MERGED),
            "feature-b": RemoteStatus(PRState.CLOSED),
        }
        keeper, resolver, _ = keeper_factory(states)
        return keeper

    def test_find_cleanup_set(self, cleanup_repo, repo_with_worktrees):
        scan = cleanup_repo.find_cleanup_set(cwd=repo_with_worktrees.working_dir)
        to_offer = scan.cleanup_set.to_offer

        assert scan.github_issue is None
        assert isinstance(to_offer[0], StaleWorktree)
        assert to_offer[0].branch == "feature-a"
        assert isinstance(to_offer[1], AbandonedFolder)
        assert to_offer[1].dirname == "leftover"
        assert len(to_offer) == 2
        assert [s.branch for s in scan.cleanup_set.skipped] == ["feature-b"]

    def test_current_worktree_never_offered(self, cleanup_repo, worktrees_root):
        scan = cleanup_repo.find_cleanup_set(cwd=str(worktrees_root / "feature-a"))

        branches = [getattr(i, "branch", None) for i in scan.cleanup_set.to_offer]
        assert "feature-a" not in branches
        assert "feature-a" not in [s.branch for s in scan.cleanup_set.skipped]

    def test_without_github_only_folders(self, keeper_factory, repo_with_worktrees, worktrees_root):
        (worktrees_root / "leftover").mkdir()
        repo_with_worktrees.delete_remote("origin")
        keeper, _, _ = keeper_factory()

        scan = keeper.find_cleanup_set(cwd=repo_with_worktrees.working_dir)

        assert scan.github_issue == "no-remote"
        assert [i.dirname for i in scan.cleanup_set.to_offer] == ["leftover"]

    def test_execute_cleanup(self, cleanup_repo, repo_with_worktrees, worktrees_root):
        scan = cleanup_repo.find_cleanup_set(cwd=repo_with_worktrees.working_dir)

        report = cleanup_repo.execute_cleanup(scan.cleanup_set.to_offer)

        assert report.succeeded
        assert report.removed_worktrees == 1
        assert report.removed_folders == 1
        assert not (worktrees_root / "feature-a").exists()
        assert not (worktrees_root / "leftover").exists()
        assert (worktrees_root / "feature-b").exists()
        heads = [h.name for h in repo_with_worktrees.heads]
        assert "feature-a" not in heads
        assert "feature-b" in heads

    def test_execute_cleanup_keep_branch(self, keeper_factory, repo_with_worktrees):
        keeper, _, _ = keeper_factory({"feature-a": RemoteStatus(PRState.MERGED)}, keep_branch=True)
        scan = keeper.find_cleanup_set(cwd=repo_with_worktrees.working_dir)

        report = keeper.execute_cleanup(scan.cleanup_set.to_offer)

        assert report.outcomes[0].branch_deleted is None
        assert "feature-a" in [h.name for h in repo_with_worktrees.heads]


class TestRemove:
    """Test single-worktree removal and lookup."""

    def test_find_by_branch_then_dirname(self, keeper_factory, add_worktree):
        add_worktree("fix/login")
        keeper, _, _ = keeper_factory()

        assert keeper.find_worktree("fix/login").branch == "fix/login"
        assert keeper.find_worktree("fix-login").branch == "fix/login"

    def test_fuzzy(self, keeper_factory):
        keeper, _, _ = keeper_factory()

        with pytest.raises(WorktreeNotFoundError):
            keeper.find_worktree("ATURE-A")
        assert keeper.find_worktree("ATURE-A", fuzzy=True).branch == "feature-a"

    def test_primary_not_findable(self, keeper_factory):
        keeper, _, _ = keeper_factory()

        with pytest.raises(WorktreeNotFoundError):
            keeper.find_worktree("main")

    def test_plan_removal_flags(self, keeper_factory, worktrees_root):
        (worktrees_root / "feature-a" / "wip.txt").write_text("wip\n")
        keeper, _, _ = keeper_factory()

        plan = keeper.plan_removal("feature-a")

        assert plan.has_uncommitted_changes is True
        assert plan.push_status.no_remote is True
        assert keeper.plan_removal("feature-a", keep_branch=True).push_status is None

    def test_remove_worktree(self, keeper_factory, repo_with_worktrees, worktrees_root):
        (worktrees_root / "feature-a" / "wip.txt").write_text("wip\n")
        keeper, _, _ = keeper_factory()
        record = keeper.find_worktree("feature-a")

        result = keeper.remove_worktree(record)

        assert not (worktrees_root / "feature-a").exists()
        assert result.branch_deleted is True
        assert "feature-a" not in [h.name for h in repo_with_worktrees.heads]

    def test_remove_keep_branch(self, keeper_factory, repo_with_worktrees):
        keeper, _, _ = keeper_factory()

        result = keeper.remove_worktree(keeper.find_worktree("feature-b"), keep_branch=True)

        assert result.branch_deleted is None
        assert "feature-b" in [h.name for h in repo_with_worktrees.heads]

    def test_refuses_primary(self, keeper_factory):
        keeper, _, _ = keeper_factory()
        primary = keeper.load_context().records[0]

        with pytest.raises(RemovalFailedError):
            keeper.remove_worktree(primary)


class TestCreateAndStatus:
    """Test creating worktrees, status and diagnostics."""

    def test_create_from_remote(self, keeper_factory, repo_with_worktrees, temp_dir, worktrees_root):
        bare = temp_dir / "origin.git"
        repo_with_worktrees.git.init("--bare", str(bare))
        repo_with_worktrees.remote("origin").set_url(str(bare))
        repo_with_worktrees.git.push("origin", "main")
        keeper, _, _ = keeper_factory()

        path = keeper.create_worktree("feat/new")

        assert path == str(worktrees_root / "feat-new")
        assert os.path.isdir(path)
        assert "feat/new" in [h.name for h in repo_with_worktrees.heads]

    def test_create_fetch_failure_uses_local_base(self, keeper_factory, repo_with_worktrees,
                                                  temp_dir, worktrees_root):
        repo_with_worktrees.remote("origin").set_url(str(temp_dir / "missing.git"))
        keeper, _, _ = keeper_factory()

        path = keeper.create_worktree("offline", base="main")

        assert os.path.isdir(path)

    def test_create_existing_branch(self, keeper_factory):
        keeper, _, _ = keeper_factory()

        with pytest.raises(GitWorktreeKeeperError):
            keeper.create_worktree("feature-a")

    def test_current_status(self, keeper_factory, worktrees_root):
        keeper, _, _ = keeper_factory({"feature-a": RemoteStatus(PRState.DRAFT)})

        info = keeper.current_status(cwd=str(worktrees_root / "feature-a"))

        assert info.branch == "feature-a"
        assert info.is_current
        assert info.remote_status.state == PRState.DRAFT
        assert info.ahead == 1

    def test_current_status_outside(self, keeper_factory, temp_dir):
        keeper, _, _ = keeper_factory()

        assert keeper.current_status(cwd=str(temp_dir)) is None

    def test_diagnostics(self, keeper_factory):
        keeper, _, _ = keeper_factory()

        results = {r.label: r for r in keeper.run_diagnostics()}

        assert results["Git"].status == "pass"
        assert results["Repository"].detail == "project"
        assert results["GitHub auth"].status == "pass"
        assert results["Worktrees"].status == "pass"
        assert "2 worktrees" in results["Worktrees"].detail
