"""Tests for GitGateway against real repositories"""
from pathlib import Path

import pytest

from git_branch_steward.exceptions import GitOperationError
from git_branch_steward.services.diff_parser import is_binary_numstat, parse_unified_diff
from git_branch_steward.services.git import GitGateway

from conftest import commit_file


def _git_version(repo):
    return repo.git.version_info[:2]


class TestGatewayInit:
    """Test gateway construction."""

    def test_fresh_repo_per_call(self, git_repo):
        gateway = GitGateway(git_repo.working_dir)

        assert gateway._get_repo() is not gateway._get_repo()
        assert gateway._get_repo().working_dir == git_repo.working_dir

    def test_invalid_path_fails_on_use(self, temp_dir):
        gateway = GitGateway(str(temp_dir / "nonexistent"))
        with pytest.raises(Exception):
            gateway._get_repo()


class TestHistoryReads:
    """Test ahead/behind, merge-base and log reads."""

    def test_revision_range_counts(self, git_repo_with_branches):
        gateway = GitGateway(git_repo_with_branches.working_dir)

        assert gateway.revision_range_counts("feature/new", "main") == (2, 1)
        assert gateway.revision_range_counts("main", "feature/new") == (1, 2)

    def test_revision_range_counts_invalid_branch(self, git_repo):
        gateway = GitGateway(git_repo.working_dir)

        with pytest.raises(GitOperationError) as exc_info:
            gateway.revision_range_counts("no-such-branch", "main")
        assert exc_info.value.operation == "revision_range_counts"
        assert exc_info.value.branch == "no-such-branch"

    def test_merge_base(self, git_repo_with_branches):
        gateway = GitGateway(git_repo_with_branches.working_dir)
        initial = list(git_repo_with_branches.iter_commits("main", reverse=True))[0].hexsha

        assert gateway.merge_base("feature/new", "main") == initial

    def test_merge_base_unrelated_histories(self, git_repo):
        git_repo.git.checkout("--orphan", "orphan")
        git_repo.git.rm("-rf", "--cached", ".")
        Path(git_repo.working_dir, "README.md").unlink()
        commit_file(git_repo, "other.txt", "unrelated\n", "Orphan root")
        gateway = GitGateway(git_repo.working_dir)

        assert gateway.merge_base("orphan", "main") is None

    def test_log(self, git_repo_with_branches):
        gateway = GitGateway(git_repo_with_branches.working_dir)

        log = gateway.log("feature/new")

        assert log.total_count == 3
        assert log.latest.author == "Bob"
        assert log.latest.hash == git_repo_with_branches.commit("feature/new").hexsha
        assert log.latest.date.tzinfo is not None

    def test_log_back_dated(self, git_repo_with_branches):
        gateway = GitGateway(git_repo_with_branches.working_dir)
        log = gateway.log("stale/old")

        fresh = gateway.log("main").latest.date
        assert (fresh - log.latest.date).days >= 99

    def test_commit_authors(self, git_repo_with_branches):
        gateway = GitGateway(git_repo_with_branches.working_dir)

        authors = gateway.commit_authors("main...feature/new")

        assert sorted(authors) == ["Alice", "Bob", "Test User"]


class TestDiffReads:
    """Test diff reads."""

    def test_name_status_diff(self, git_repo):
        commit_file(git_repo, "keep.txt", "one\n", "Add keep")
        commit_file(git_repo, "gone.txt", "bye\n", "Add gone")
        base = git_repo.head.commit.hexsha
        git_repo.git.checkout("-b", "feature")
        commit_file(git_repo, "keep.txt", "one\ntwo\n", "Change keep")
        commit_file(git_repo, "new.txt", "hello\n", "Add new")
        git_repo.index.remove(["gone.txt"], working_tree=True)
        git_repo.index.commit("Remove gone")
        gateway = GitGateway(git_repo.working_dir)

        entries = {e.path: e.status_code for e in gateway.name_status_diff(base, "feature")}

        assert entries == {"keep.txt": "M", "new.txt": "A", "gone.txt": "D"}

    @pytest.mark.parametrize("path", ["caf\u00e9.txt", "tab\tname.txt", "dir with space/\u65e5\u672c.md"])
    def test_unusual_paths_round_trip(self, git_repo, path):
        base = git_repo.head.commit.hexsha
        git_repo.git.checkout("-b", "feature")
        commit_file(git_repo, path, "one\ntwo\nthree\n", "Add unusual path")
        gateway = GitGateway(git_repo.working_dir)

        [entry] = gateway.name_status_diff(base, "feature")
        hunks = parse_unified_diff(gateway.unified_diff(base, "feature", entry.path))

        assert entry.path == path
        assert is_binary_numstat(gateway.numstat(base, "feature", entry.path)) is False
        assert sum(hunk.additions for hunk in hunks) == 3

    def test_rename_detection(self, git_repo):
        content = "".join(f"line {i}\n" for i in range(40))
        commit_file(git_repo, "old_name.py", content, "Add file")
        base = git_repo.head.commit.hexsha
        git_repo.git.checkout("-b", "rename")
        git_repo.git.mv("old_name.py", "new_name.py")
        git_repo.index.commit("Rename")
        gateway = GitGateway(git_repo.working_dir)

        [entry] = gateway.name_status_diff(base, "rename")
        assert entry.status_code == "R"
        assert entry.old_path == "old_name.py"
        assert entry.path == "new_name.py"
        assert entry.similarity == 100

        no_renames = gateway.name_status_diff(base, "rename", detect_renames=False)
        assert sorted(e.status_code for e in no_renames) == ["A", "D"]

    def test_unified_diff_parses(self, git_repo_with_branches):
        gateway = GitGateway(git_repo_with_branches.working_dir)
        base = gateway.merge_base("feature/new", "main")

        hunks = parse_unified_diff(gateway.unified_diff(base, "feature/new", "src/feature.py"))

        assert len(hunks) == 1
        assert hunks[0].additions == 2

    def test_numstat_binary(self, git_repo):
        base = git_repo.head.commit.hexsha
        commit_file(git_repo, "image.bin", b"\x00\x01\x02\xff" * 64, "Add binary")
        gateway = GitGateway(git_repo.working_dir)

        assert is_binary_numstat(gateway.numstat(base, "main", "image.bin")) is True
        assert is_binary_numstat(gateway.numstat(base, "main", "README.md")) is False


class TestRepositoryState:
    """Test branch, remote and working tree reads."""

    def test_branch_list(self, git_repo_with_branches):
        branches = GitGateway(git_repo_with_branches.working_dir).branch_list()

        assert set(branches.all) == {"main", "feature/new", "stale/old"}
        assert branches.current == "main"

    def test_branch_list_detached_head(self, git_repo_with_branches):
        git_repo_with_branches.git.checkout("--detach", "main")

        assert GitGateway(git_repo_with_branches.working_dir).branch_list().current is None

    def test_remote_branches_without_remote(self, git_repo):
        assert GitGateway(git_repo.working_dir).remote_branches("origin") == []

    def test_remote_branches(self, git_repo, remote_repo):
        git_repo.git.checkout("-b", "feature")
        git_repo.git.push("origin", "feature")
        git_repo.remote("origin").fetch()

        remote_branches = GitGateway(git_repo.working_dir).remote_branches("origin")

        assert sorted(remote_branches) == ["origin/feature", "origin/main"]

    def test_remote_url(self, git_repo):
        gateway = GitGateway(git_repo.working_dir)
        assert gateway.remote_url("origin") is None

        git_repo.create_remote("origin", "git@github.com:test/test-repo.git")
        assert gateway.remote_url("origin") == "git@github.com:test/test-repo.git"

    def test_working_tree_status(self, git_repo):
        gateway = GitGateway(git_repo.working_dir)
        assert gateway.working_tree_status().is_clean is True

        Path(git_repo.working_dir, "untracked.txt").write_text("new\n")
        Path(git_repo.working_dir, "README.md").write_text("changed\n")

        status = gateway.working_tree_status()
        assert status.is_clean is False
        assert sorted(status.changed_files) == ["README.md", "untracked.txt"]

    def test_working_tree_status_unusual_paths(self, git_repo):
        commit_file(git_repo, "old.txt", "content\n", "Add old")
        git_repo.git.mv("old.txt", "ren\u00e4med.txt")
        Path(git_repo.working_dir, "caf\u00e9.txt").write_text("new\n")

        status = GitGateway(git_repo.working_dir).working_tree_status()

        assert sorted(status.changed_files) == ["caf\u00e9.txt", "ren\u00e4med.txt"]


class TestMergeTree:
    """Test read-only conflict prediction."""

    def test_conflicts_predicted(self, git_repo):
        if _git_version(git_repo) < (2, 38):
            pytest.skip("git merge-tree --write-tree needs git 2.38+")
        git_repo.git.checkout("-b", "feature")
        commit_file(git_repo, "README.md", "feature version\n", "Feature edit")
        git_repo.git.checkout("main")
        commit_file(git_repo, "README.md", "main version\n", "Main edit")
        head_before = git_repo.head.commit.hexsha

        conflicts = GitGateway(git_repo.working_dir).merge_tree_conflicts("main", "feature")

        assert conflicts == ["README.md"]
        assert git_repo.head.commit.hexsha == head_before
        assert not git_repo.is_dirty(untracked_files=True)

    def test_clean_merge(self, git_repo_with_branches):
        if _git_version(git_repo_with_branches) < (2, 38):
            pytest.skip("git merge-tree --write-tree needs git 2.38+")

        gateway = GitGateway(git_repo_with_branches.working_dir)
        assert gateway.merge_tree_conflicts("main", "feature/new") == []


class TestWrites:
    """Test write operations."""

    def test_delete_local_branch(self, git_repo_with_branches):
        gateway = GitGateway(git_repo_with_branches.working_dir)

        gateway.delete_local_branch("stale/old")

        assert "stale/old" not in [h.name for h in git_repo_with_branches.heads]

    def test_delete_missing_branch_raises(self, git_repo):
        with pytest.raises(GitOperationError):
            GitGateway(git_repo.working_dir).delete_local_branch("missing")

    def test_create_backup_ref(self, git_repo_with_branches):
        gateway = GitGateway(git_repo_with_branches.working_dir)
        tip = git_repo_with_branches.commit("stale/old").hexsha

        ref_name = gateway.create_backup_ref("stale/old", tip)
        gateway.delete_local_branch("stale/old")

        assert ref_name.startswith("refs/backups/stale/old/")
        assert ref_name.endswith("Z")
        assert git_repo_with_branches.git.rev_parse(ref_name) == tip

    def test_create_tag(self, git_repo_with_branches):
        gateway = GitGateway(git_repo_with_branches.working_dir)
        tip = git_repo_with_branches.commit("stale/old").hexsha

        gateway.create_tag("archive/stale/old", tip)

        assert git_repo_with_branches.tags["archive/stale/old"].commit.hexsha == tip

    def test_push_delete_remote(self, git_repo, remote_repo):
        git_repo.git.checkout("-b", "feature")
        git_repo.git.push("origin", "feature")
        git_repo.git.checkout("main")

        GitGateway(git_repo.working_dir).push_delete_remote("origin", "feature")

        assert "feature" not in [h.name for h in remote_repo.heads]

    def test_checkout_and_reset(self, git_repo_with_branches):
        gateway = GitGateway(git_repo_with_branches.working_dir)

        gateway.checkout("feature/new")
        assert git_repo_with_branches.active_branch.name == "feature/new"

        gateway.reset("hard", "main")
        assert git_repo_with_branches.head.commit == git_repo_with_branches.commit("main")

    def test_reset_rejects_unknown_mode(self, gateway):
        with pytest.raises(ValueError):
            gateway.reset("sideways")


class TestGitErrors:
    """Test error translation."""

    def test_error_message_has_context(self, git_repo):
        with pytest.raises(GitOperationError) as exc_info:
            GitGateway(git_repo.working_dir).name_status_diff("main", "no-such-ref")

        message = str(exc_info.value)
        assert "name_status_diff" in message
        assert "no-such-ref" in message

    def test_command_error_is_chained(self, git_repo):
        with pytest.raises(GitOperationError) as exc_info:
            GitGateway(git_repo.working_dir).log("no-such-ref")

        assert exc_info.value.__cause__ is not None
        assert exc_info.value.operation == "log"
