"""Pytest fixtures for git-branch-steward tests"""
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import Mock

import git
import pytest

from git_branch_steward.models.git import BranchList, CommitInfo, CommitLog, WorkingTreeStatus
from git_branch_steward.models.stale import (
    BranchTracking,
    CleanupRecommendation,
    RiskLevel,
    StaleBranchCandidate,
)
from git_branch_steward.services.git import GitGateway

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def commit_file(repo, path, content, message, days_ago=0, author="Test User"):
    """Write a file and commit it, optionally back-dated by days_ago days."""
    file_path = Path(repo.working_dir) / path
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        file_path.write_bytes(content)
    else:
        file_path.write_text(content)
    repo.index.add([path])

    timestamp = int((datetime.now(timezone.utc) - timedelta(days=days_ago)).timestamp())
    date = f"{timestamp} +0000"
    actor = git.Actor(author, f"{author.lower().replace(' ', '.')}@example.com")
    return repo.index.commit(
        message, author=actor, committer=actor, author_date=date, commit_date=date
    )


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository with one commit on main."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    commit_file(repo, "README.md", "# Test Repository\n", "Initial commit")
    repo.git.branch("-M", "main")

    yield repo

    repo.close()


@pytest.fixture
def git_repo_with_branches(git_repo):
    """Repository with a diverged feature branch and an old stale branch.

    main:        initial - main change
    feature/new: initial - feature 1 - feature 2
    stale/old:   initial - old work (100 days ago)
    """
    repo = git_repo

    repo.git.checkout("-b", "feature/new")
    commit_file(repo, "src/feature.py", "def feature():\n    return 1\n", "Add feature", author="Alice")
    commit_file(
        repo,
        "src/feature.py",
        "def feature():\n    return 2\n",
        "Change feature",
        author="Bob",
    )

    repo.git.checkout("main")
    repo.git.checkout("-b", "stale/old")
    commit_file(repo, "old.txt", "Old content\n", "Old work", days_ago=100)

    repo.git.checkout("main")
    commit_file(repo, "README.md", "# Test Repository\n\nMore docs.\n", "Main change")

    yield repo


@pytest.fixture
def remote_repo(git_repo, temp_dir):
    """Bare repository registered as origin of git_repo, with main pushed."""
    bare_path = temp_dir / "remote.git"
    bare = git.Repo.init(bare_path, bare=True)
    git_repo.create_remote("origin", str(bare_path))
    git_repo.git.push("origin", "main")

    yield bare

    bare.close()


@pytest.fixture
def gateway(git_repo):
    return GitGateway(git_repo.working_dir)


@pytest.fixture
def mock_gateway():
    """Gateway mock with benign defaults for every read operation."""
    gateway = Mock(spec=GitGateway)
    gateway.revision_range_counts.return_value = (0, 0)
    gateway.merge_base.return_value = "a" * 40
    gateway.name_status_diff.return_value = []
    gateway.unified_diff.return_value = ""
    gateway.numstat.return_value = ""
    gateway.log.return_value = CommitLog(
        latest=CommitInfo(hash="f" * 40, date=NOW, author="Test User"), total_count=1
    )
    gateway.commit_authors.return_value = []
    gateway.branch_list.return_value = BranchList(all=["main"], current="main")
    gateway.remote_branches.return_value = []
    gateway.remote_url.return_value = None
    gateway.working_tree_status.return_value = WorkingTreeStatus()
    gateway.merge_tree_conflicts.return_value = []
    gateway.create_backup_ref.side_effect = lambda name, commit_id: f"refs/backups/{name}/20240601T120000Z"
    return gateway


def make_candidate(
    name,
    risk=RiskLevel.LOW,
    should_cleanup=True,
    has_remote=False,
    ahead=0,
    is_protected=False,
    days=45,
):
    """Build a StaleBranchCandidate for planner and executor tests."""
    return StaleBranchCandidate(
        name=name,
        last_commit_date=NOW - timedelta(days=days),
        last_commit_hash="c" * 40,
        last_commit_author="Test User",
        days_since_activity=days,
        commit_count=3,
        tracking=BranchTracking(
            has_remote=has_remote,
            remote_name="origin" if has_remote else None,
            ahead=ahead,
        ),
        risk=risk,
        recommendation=CleanupRecommendation(
            should_cleanup=should_cleanup,
            reason="test",
            priority=5 if should_cleanup else 0,
        ),
        is_protected=is_protected,
    )
