"""Git gateway: the narrow capability set the analysis services need from git.

History is treated as an external, re-queryable log. Nothing here caches
results or builds a commit graph; every call asks git again.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Tuple

import git

from git_branch_steward.exceptions import GitOperationError
from git_branch_steward.logging_config import get_logger
from git_branch_steward.models.git import (
    BranchList,
    CommitInfo,
    CommitLog,
    NameStatusEntry,
    WorkingTreeStatus,
)
from git_branch_steward.services.diff_parser import parse_name_status_z, split_lines

logger = get_logger(__name__)

BACKUP_REF_PREFIX = "refs/backups"
RESET_MODES = ("soft", "mixed", "hard", "keep", "merge")


class VersionControlGateway(Protocol):
    """Read and write operations consumed by the comparison and cleanup services."""

    def revision_range_counts(self, source: str, target: str) -> Tuple[int, int]: ...

    def merge_base(self, ref_a: str, ref_b: str) -> Optional[str]: ...

    def name_status_diff(
        self, base: str, ref: str, detect_renames: bool = True, ignore_whitespace: bool = False
    ) -> List[NameStatusEntry]: ...

    def unified_diff(
        self,
        base: str,
        ref: str,
        path: str,
        old_path: Optional[str] = None,
        context: int = 3,
        ignore_whitespace: bool = False,
    ) -> str: ...

    def numstat(self, base: str, ref: str, path: str, old_path: Optional[str] = None) -> str: ...

    def log(self, ref: str, limit: Optional[int] = None) -> CommitLog: ...

    def commit_authors(self, rev_range: str) -> List[str]: ...

    def branch_list(self) -> BranchList: ...

    def remote_branches(self, remote_name: str = "origin") -> List[str]: ...

    def remote_url(self, remote_name: str = "origin") -> Optional[str]: ...

    def working_tree_status(self) -> WorkingTreeStatus: ...

    def merge_tree_conflicts(self, target: str, source: str) -> List[str]: ...

    def delete_local_branch(self, name: str) -> None: ...

    def push_delete_remote(self, remote_name: str, name: str) -> None: ...

    def create_backup_ref(self, name: str, commit_id: str) -> str: ...

    def create_tag(self, tag_name: str, commit_id: str) -> None: ...

    def checkout(self, ref: str) -> None: ...

    def reset(self, mode: str = "mixed", ref: str = "HEAD") -> None: ...


def _format_git_error(error: git.exc.GitCommandError) -> str:
    """Build a readable message from a GitCommandError."""
    command = error.command if isinstance(error.command, str) else " ".join(map(str, error.command))
    stderr = (error.stderr or "").strip()
    # GitPython prefixes captured stderr with "stderr: '...'"
    if stderr.startswith("stderr:"):
        stderr = stderr[len("stderr:"):].strip().strip("'").strip()
    if stderr:
        return f"'{command}' failed (exit {error.status}): {stderr}"
    return f"'{command}' failed with exit code {error.status}"


class GitGateway:
    """GitPython implementation of VersionControlGateway."""

    def __init__(self, repo_path: str):
        """Initialize the gateway.

        Args:
            repo_path: Path to the git repository (string path, not repo object)
        """
        self.repo_path = repo_path
        logger.debug(f"Git gateway initialized for {repo_path}")

    def _get_repo(self) -> git.Repo:
        """Get a thread-safe git.Repo instance.

        A fresh instance per call keeps parallel reads from sharing state.
        GitPython repos are lightweight - opening one does not clone anything.
        """
        return git.Repo(self.repo_path)

    @contextmanager
    def _git_errors(self, operation: str, branch: Optional[str] = None):
        """Translate GitPython failures into GitOperationError."""
        try:
            yield
        except GitOperationError:
            raise
        except git.exc.GitCommandError as e:
            raise GitOperationError(operation, branch, _format_git_error(e)) from e
        except (git.exc.GitError, ValueError, IndexError) as e:
            raise GitOperationError(operation, branch, str(e)) from e

    # Read operations

    def revision_range_counts(self, source: str, target: str) -> Tuple[int, int]:
        """Return (ahead, behind): commits only on source, commits only on target."""
        with self._git_errors("revision_range_counts", source):
            output = self._get_repo().git.rev_list("--left-right", "--count", f"{target}...{source}")
        columns = output.split()
        if len(columns) != 2:
            raise GitOperationError("revision_range_counts", source, f"Unexpected output: {output!r}")
        behind, ahead = (int(value) for value in columns)
        return ahead, behind

    def merge_base(self, ref_a: str, ref_b: str) -> Optional[str]:
        """Return the best common ancestor, or None for unrelated histories."""
        repo = self._get_repo()
        try:
            return repo.git.merge_base(ref_a, ref_b).strip() or None
        except git.exc.GitCommandError as e:
            if e.status == 1:
                # merge-base exits 1 without output when there is no common ancestor
                return None
            raise GitOperationError("merge_base", ref_a, _format_git_error(e)) from e

    def name_status_diff(
        self, base: str, ref: str, detect_renames: bool = True, ignore_whitespace: bool = False
    ) -> List[NameStatusEntry]:
        args = ["--name-status", "-z", "-M" if detect_renames else "--no-renames"]
        if ignore_whitespace:
            args.append("--ignore-all-space")
        args.extend([base, ref, "--"])
        with self._git_errors("name_status_diff", ref):
            output = self._get_repo().git.diff(*args)
        return parse_name_status_z(output)

    def unified_diff(
        self,
        base: str,
        ref: str,
        path: str,
        old_path: Optional[str] = None,
        context: int = 3,
        ignore_whitespace: bool = False,
    ) -> str:
        args = [f"--unified={context}", "--no-color", "-M"]
        if ignore_whitespace:
            args.append("--ignore-all-space")
        args.extend([base, ref, "--"])
        if old_path:
            args.append(old_path)
        args.append(path)
        with self._git_errors("unified_diff", ref):
            return self._get_repo().git.diff(*args)

    def numstat(self, base: str, ref: str, path: str, old_path: Optional[str] = None) -> str:
        args = ["--numstat", "-M", base, ref, "--"]
        if old_path:
            args.append(old_path)
        args.append(path)
        with self._git_errors("numstat", ref):
            return self._get_repo().git.diff(*args)

    def log(self, ref: str, limit: Optional[int] = None) -> CommitLog:
        """Latest commit of ref and the number of commits reachable from it."""
        with self._git_errors("log", ref):
            repo = self._get_repo()
            commits = list(repo.iter_commits(ref, max_count=1))
            if not commits:
                return CommitLog(latest=None, total_count=0)

            count_args = ["--count"]
            if limit is not None:
                count_args.append(f"--max-count={limit}")
            total_count = int(repo.git.rev_list(*count_args, ref))

        commit = commits[0]
        latest = CommitInfo(
            hash=commit.hexsha,
            date=datetime.fromtimestamp(commit.committed_date, tz=timezone.utc),
            author=commit.author.name or "Unknown",
        )
        return CommitLog(latest=latest, total_count=total_count)

    def commit_authors(self, rev_range: str) -> List[str]:
        """Author names of every commit in rev_range (duplicates included)."""
        with self._git_errors("commit_authors"):
            output = self._get_repo().git.log("--format=%an", rev_range)
        return [author for author in split_lines(output) if author.strip()]

    def branch_list(self) -> BranchList:
        with self._git_errors("branch_list"):
            repo = self._get_repo()
            names = [head.name for head in repo.heads]
            try:
                current = repo.active_branch.name
            except TypeError:
                # Detached HEAD
                current = None
        return BranchList(all=names, current=current)

    def remote_branches(self, remote_name: str = "origin") -> List[str]:
        """Remote-tracking branch names such as 'origin/feature'.

        A repository without the named remote simply has no remote branches.
        """
        repo = self._get_repo()
        try:
            remote = repo.remote(remote_name)
        except ValueError:
            logger.debug(f"No remote named {remote_name}")
            return []
        with self._git_errors("remote_branches"):
            return [ref.name for ref in remote.refs if not ref.name.endswith("/HEAD")]

    def remote_url(self, remote_name: str = "origin") -> Optional[str]:
        try:
            return self._get_repo().remote(remote_name).url
        except (ValueError, git.exc.GitError) as e:
            logger.debug(f"No URL for remote {remote_name}: {e}")
            return None

    def working_tree_status(self) -> WorkingTreeStatus:
        with self._git_errors("working_tree_status"):
            output = self._get_repo().git.status("--porcelain", "-z")

        changed = []
        # Porcelain -z records: "XY path\0", renames and copies add "old\0"
        fields = iter(output.split("\0"))
        for record in fields:
            if len(record) < 4:
                continue
            changed.append(record[3:])
            if "R" in record[:2] or "C" in record[:2]:
                next(fields, None)
        return WorkingTreeStatus(changed_files=changed)

    def merge_tree_conflicts(self, target: str, source: str) -> List[str]:
        """Predict conflicting paths of merging source into target.

        Uses ``git merge-tree --write-tree`` which never touches the working
        tree or any ref.
        """
        repo = self._get_repo()
        with self._git_errors("merge_tree_conflicts", source):
            status, stdout, stderr = repo.git.merge_tree(
                "--write-tree",
                "--name-only",
                "--no-messages",
                "-z",
                target,
                source,
                with_extended_output=True,
                with_exceptions=False,
            )
        if status == 0:
            return []
        if status != 1:
            raise GitOperationError("merge_tree_conflicts", source, stderr.strip() or f"exit {status}")

        # Tree id first, then NUL terminated conflicted paths
        head, _, paths = stdout.partition("\0")
        if "\n" in head:
            # Older git terminates the tree id with a newline even with -z
            paths = head.partition("\n")[2] + "\0" + paths
        conflicted: List[str] = []
        for path in paths.split("\0"):
            if not path:
                break
            if path not in conflicted:
                conflicted.append(path)
        return conflicted

    # Write operations

    def delete_local_branch(self, name: str) -> None:
        with self._git_errors("delete_local_branch", name):
            self._get_repo().delete_head(name, force=True)
        logger.info(f"Deleted local branch {name}")

    def push_delete_remote(self, remote_name: str, name: str) -> None:
        with self._git_errors("push_delete_remote", name):
            self._get_repo().git.push(remote_name, "--delete", name)
        logger.info(f"Deleted remote branch {remote_name}/{name}")

    def create_backup_ref(self, name: str, commit_id: str) -> str:
        """Pin commit_id under refs/backups/<name>/<UTC timestamp> and return the ref."""
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        ref_name = f"{BACKUP_REF_PREFIX}/{name}/{stamp}"
        with self._git_errors("create_backup_ref", name):
            self._get_repo().git.update_ref(ref_name, commit_id)
        logger.info(f"Created backup ref {ref_name} at {commit_id[:7]}")
        return ref_name

    def create_tag(self, tag_name: str, commit_id: str) -> None:
        with self._git_errors("create_tag", tag_name):
            self._get_repo().create_tag(tag_name, ref=commit_id)
        logger.info(f"Created tag {tag_name} at {commit_id[:7]}")

    def checkout(self, ref: str) -> None:
        with self._git_errors("checkout", ref):
            self._get_repo().git.checkout(ref)

    def reset(self, mode: str = "mixed", ref: str = "HEAD") -> None:
        if mode not in RESET_MODES:
            raise ValueError(f"reset mode must be one of {RESET_MODES}, got '{mode}'")
        with self._git_errors("reset", ref):
            self._get_repo().git.reset(f"--{mode}", ref)
