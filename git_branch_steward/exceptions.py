"""Custom exceptions for git-branch-steward"""

from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from git_branch_steward.models.stale import SafetyCheck


class GitBranchStewardError(Exception):
    """Base exception for all git-branch-steward errors."""
    pass


class GitOperationError(GitBranchStewardError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, branch: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.branch = branch
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class GitHubAPIError(GitBranchStewardError):
    """Exception raised for errors in GitHub API operations."""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        self.message = message

        error_msg = f"GitHub API operation '{operation}' failed"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class CriticalSafetyCheckError(GitBranchStewardError):
    """Raised when a cleanup plan is executed while critical safety checks fail.

    Nothing has been modified when this is raised: the executor checks the gate
    before touching the first operation.
    """

    def __init__(self, failed_checks: List["SafetyCheck"]):
        self.failed_checks = failed_checks
        names = ", ".join(check.name for check in failed_checks)
        super().__init__(f"Critical safety checks failed: {names}")
