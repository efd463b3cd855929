"""Tests for building the cleanup set"""
import pytest

from git_worktree_keeper.models.cleanup import (
    AbandonedFolder,
    OrphanWorktree,
    ScanResults,
    StaleWorktree,
)
from git_worktree_keeper.models.remote import PRState, RemoteStatus
from git_worktree_keeper.models.worktree import WorktreeRecord
from git_worktree_keeper.services.classifier import build_cleanup_set, find_stale_worktrees
from git_worktree_keeper.services.git.github import RemoteStatusResolver

ROOT = "/home/dev/project-worktrees"


def record(name, branch=None, primary=False):
    path = "/home/dev/project" if primary else f"{ROOT}/{name}"
    return WorktreeRecord(path=path, branch=branch if branch is not None else name,
                          commit_sha="abc", is_primary=primary)


def lookup_from(states):
    def lookup(branch):
        state = states.get(branch)
        return RemoteStatus(state=state) if state else None
    return lookup


@pytest.fixture
def records():
    return [
        record("main", primary=True),
        record("merged-clean"),
        record("closed-dirty"),
        record("open-pr"),
        record("no-pr"),
    ]


@pytest.fixture
def states():
    return {
        "main": PRState.MERGED,  # primary, must be ignored
        "merged-clean": PRState.MERGED,
        "closed-dirty": PRState.CLOSED,
        "open-pr": PRState.OPEN,
    }


class TestFindStaleWorktrees:
    """Test detection of merged/closed worktrees."""

    def test_only_finished_prs(self, records, states):
        stale = find_stale_worktrees(records, lookup_from(states), "/elsewhere", lambda p: False)

        assert [s.branch for s in stale] == ["merged-clean", "closed-dirty"]
        assert stale[0].remote_state == PRState.MERGED
        assert stale[1].remote_state == PRState.CLOSED

    def test_closed_draft_pr_is_stale(self, mock_github, make_pr):
        """A draft PR that was closed is offered like any closed PR."""
        mock_github.get_repo.return_value.get_pulls.return_value = [
            make_pr(state="closed", draft=True)
        ]
        resolver = RemoteStatusResolver(mock_github)

        result = build_cleanup_set(
            [record("main", primary=True), record("spike")],
            ScanResults(),
            lambda branch: resolver.resolve("test", "project", branch),
            "/elsewhere",
            lambda p: False,
        )

        assert [i.branch for i in result.to_offer] == ["spike"]
        assert result.to_offer[0].remote_state == PRState.CLOSED

    def test_detached_records_ignored(self, states):
        detached = WorktreeRecord(path=f"{ROOT}/detached", branch=None, commit_sha="a", is_primary=False)

        assert find_stale_worktrees([detached], lookup_from(states), "/elsewhere", lambda p: False) == []


class TestBuildCleanupSet:
    """Test the offer/skip split and ordering."""

    def test_dirty_worktree_only_skipped(self, records, states):
        """A stale worktree with changes is never offered, only skipped."""
        dirty = {f"{ROOT}/closed-dirty"}

        result = build_cleanup_set(records, ScanResults(), lookup_from(states), "/elsewhere",
                                   lambda p: p in dirty)

        offered = [i.path for i in result.to_offer]
        assert f"{ROOT}/closed-dirty" not in offered
        assert [s.path for s in result.skipped] == [f"{ROOT}/closed-dirty"]
        assert offered == [f"{ROOT}/merged-clean"]

    def test_failing_probe_holds_back(self, records, states):
        """A probe that cannot tell reports True, so nothing stale is offered."""
        result = build_cleanup_set(records, ScanResults(), lookup_from(states), "/elsewhere",
                                   lambda p: True)

        assert result.to_offer == []
        assert len(result.skipped) == 2

    @pytest.mark.parametrize("current", [
        f"{ROOT}/merged-clean",
        f"{ROOT}/merged-clean/src/deep",
    ])
    def test_current_worktree_excluded(self, records, states, current):
        """The worktree the caller stands in appears in neither set."""
        for dirty in (False, True):
            result = build_cleanup_set(records, ScanResults(), lookup_from(states), current,
                                       lambda p: dirty)
            paths = [i.path for i in result.to_offer] + [s.path for s in result.skipped]
            assert f"{ROOT}/merged-clean" not in paths

    def test_order_and_folders_always_offered(self, records, states):
        abandoned = AbandonedFolder(path=f"{ROOT}/leftover", dirname="leftover",
                                    file_count=1, folder_count=0)
        orphan = OrphanWorktree(path=f"{ROOT}/broken", dirname="broken", broken_target="/gone")
        scan = ScanResults(abandoned=[abandoned], orphans=[orphan])

        result = build_cleanup_set(records, scan, lookup_from(states), "/elsewhere",
                                   lambda p: p.endswith("closed-dirty"))

        assert len(result.to_offer) == 3
        assert isinstance(result.to_offer[0], StaleWorktree)
        assert result.to_offer[1] is abandoned
        assert result.to_offer[2] is orphan

    def test_no_remote_status_only_folders(self, records):
        """With every status none, only folders are offered."""
        abandoned = AbandonedFolder(path=f"{ROOT}/leftover", dirname="leftover",
                                    file_count=0, folder_count=0)

        result = build_cleanup_set(records, ScanResults(abandoned=[abandoned]), lambda b: None,
                                   "/elsewhere", lambda p: False)

        assert result.to_offer == [abandoned]
        assert result.skipped == []
        assert not result.is_empty


class TestCleanableItems:
    def test_stale_worktree_rejects_open_state(self):
        with pytest.raises(ValueError):
            StaleWorktree(path="/x", branch="x", remote_state=PRState.OPEN,
                          has_uncommitted_changes=False)

    def test_kinds(self):
        assert StaleWorktree("/x", "x", PRState.MERGED, False).kind == "worktree"
        assert AbandonedFolder("/x", "x", 0, 0).kind == "abandoned"
        assert OrphanWorktree("/x", "x", "/t").kind == "orphan"
