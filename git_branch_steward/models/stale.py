"""Stale branch and cleanup models"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from git_branch_steward.config import StaleBranchConfig


class RiskLevel(Enum):
    """Risk of deleting a branch."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def severity(self) -> int:
        return _RISK_SEVERITY[self]


_RISK_SEVERITY = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2}


class OperationType(Enum):
    """Kind of cleanup operation."""
    DELETE_LOCAL = "delete-local"
    DELETE_REMOTE = "delete-remote"
    ARCHIVE = "archive"


@dataclass
class BranchTracking:
    """Relationship between a local branch and its remote counterpart."""
    has_remote: bool = False
    remote_name: Optional[str] = None
    ahead: int = 0  # Local commits not on the remote
    behind: int = 0
    known: bool = True  # False when ahead/behind could not be read


@dataclass
class CleanupRecommendation:
    """Whether and how urgently a branch should be cleaned up."""
    should_cleanup: bool
    reason: str
    precautions: List[str] = field(default_factory=list)
    priority: int = 0  # 1-10 when cleanup is recommended, 0 otherwise


@dataclass
class StaleBranchCandidate:
    """A stale branch with its history signals and classification."""
    name: str
    last_commit_date: datetime
    last_commit_hash: str
    last_commit_author: str
    days_since_activity: int
    commit_count: int
    tracking: BranchTracking
    risk: RiskLevel
    recommendation: CleanupRecommendation
    has_active_pull_request: bool = False
    is_protected: bool = False


@dataclass
class StaleBranchReport:
    """Outcome of a stale branch scan."""
    scan_date: datetime
    repository_path: str
    total_branches: int
    stale_branches: List[StaleBranchCandidate]
    risk_summary: Dict[str, int]
    config: "StaleBranchConfig"
    estimated_savings: Dict[str, int] = field(default_factory=dict)


@dataclass
class CleanupOperation:
    """A single planned cleanup step."""
    type: OperationType
    branch_name: str
    dry_run: bool
    timestamp: datetime
    remote_name: str = "origin"


@dataclass
class SafetyCheck:
    """A precondition evaluated before destructive operations."""
    name: str
    description: str
    passed: bool
    critical: bool
    warning: Optional[str] = None


@dataclass
class CleanupPlan:
    """Ordered, safety-checked cleanup operations."""
    operations: List[CleanupOperation]
    total_branches: int
    overall_risk: RiskLevel
    estimated_duration: int  # Seconds
    safety_checks: List[SafetyCheck] = field(default_factory=list)

    @property
    def failed_critical_checks(self) -> List[SafetyCheck]:
        return [check for check in self.safety_checks if check.critical and not check.passed]


@dataclass
class CleanupResult:
    """Outcome of one cleanup operation."""
    branch_name: str
    operation_type: OperationType
    success: bool
    actions_taken: List[str] = field(default_factory=list)
    error: Optional[str] = None
    backup_ref: Optional[str] = None


@dataclass
class BranchEnrichment:
    """Hosting-provider facts about a branch; False when unknown."""
    has_open_pr: bool = False
    is_protected: bool = False
