"""Cleanup planning: operation selection and safety checks"""
from datetime import datetime, timezone
from typing import Callable, List, Optional, Set

from git_branch_steward.config import CleanupOptions
from git_branch_steward.logging_config import get_logger
from git_branch_steward.models.git import BranchList, WorkingTreeStatus
from git_branch_steward.models.stale import (
    CleanupOperation,
    CleanupPlan,
    OperationType,
    RiskLevel,
    SafetyCheck,
    StaleBranchCandidate,
)
from git_branch_steward.services.git import VersionControlGateway

logger = get_logger(__name__)


class CleanupPlanner:
    """Turns stale branch candidates into a safety-checked cleanup plan."""

    def __init__(self, gateway: VersionControlGateway, clock: Optional[Callable[[], datetime]] = None):
        self.gateway = gateway
        self._now = clock or (lambda: datetime.now(timezone.utc))

    def create_cleanup_plan(
        self, candidates: List[StaleBranchCandidate], options: Optional[CleanupOptions] = None
    ) -> CleanupPlan:
        """Plan operations for candidates that are safe to clean up.

        Candidates whose recommendation is not to clean up, or whose risk is
        high, never produce an operation.
        """
        options = options or CleanupOptions()
        retained = [
            candidate
            for candidate in candidates
            if candidate.recommendation.should_cleanup and candidate.risk != RiskLevel.HIGH
        ]
        skipped = len(candidates) - len(retained)
        if skipped:
            logger.info(f"Skipping {skipped} branch(es) that are not safe to clean up")

        timestamp = self._now()
        operations = [
            CleanupOperation(
                type=self._operation_type(candidate, options),
                branch_name=candidate.name,
                dry_run=options.dry_run,
                timestamp=timestamp,
                remote_name=options.remote_name,
            )
            for candidate in retained
        ]

        overall_risk = max(
            (candidate.risk for candidate in retained),
            key=lambda risk: risk.severity,
            default=RiskLevel.LOW,
        )

        plan = CleanupPlan(
            operations=operations,
            total_branches=len(retained),
            overall_risk=overall_risk,
            estimated_duration=len(operations) * options.seconds_per_operation,
            safety_checks=self._safety_checks(candidates, retained, operations),
        )
        logger.debug(
            f"Planned {len(operations)} operation(s), overall risk {overall_risk.value}, "
            f"{len(plan.failed_critical_checks)} failed critical check(s)"
        )
        return plan

    def _operation_type(self, candidate: StaleBranchCandidate, options: CleanupOptions) -> OperationType:
        if options.delete_remote and candidate.tracking.has_remote:
            return OperationType.DELETE_REMOTE
        if options.archive:
            return OperationType.ARCHIVE
        return OperationType.DELETE_LOCAL

    def _safety_checks(
        self,
        candidates: List[StaleBranchCandidate],
        retained: List[StaleBranchCandidate],
        operations: List[CleanupOperation],
    ) -> List[SafetyCheck]:
        status: Optional[WorkingTreeStatus] = None
        status_error = None
        try:
            status = self.gateway.working_tree_status()
        except Exception as e:
            status_error = str(e)
            logger.warning(f"Could not read working tree status: {e}")

        checks = [
            SafetyCheck(
                name="Git Repository Accessible",
                description="The repository can be read",
                passed=status is not None,
                critical=True,
                warning=status_error,
            ),
            self._working_directory_check(status),
            self._current_branch_check(operations),
        ]

        # Both checks scan every candidate: they fail only for planned branches
        # and report skipped ones in the warning
        checks.append(
            _candidate_check(
                "No Protected Branches",
                "No planned branch is protected",
                critical=True,
                flagged=[c.name for c in candidates if c.is_protected],
                planned={c.name for c in retained},
                label="Protected branches",
            )
        )
        checks.append(
            _candidate_check(
                "No Unpushed Commits",
                "No planned branch has commits missing from its remote",
                critical=False,
                flagged=[c.name for c in candidates if c.tracking.ahead > 0],
                planned={c.name for c in retained},
                label="Branches with unpushed commits",
            )
        )
        return checks

    def _working_directory_check(self, status: Optional[WorkingTreeStatus]) -> SafetyCheck:
        clean = status is not None and status.is_clean
        warning = None
        if status is not None and not clean:
            warning = f"{len(status.changed_files)} uncommitted change(s) in the working directory"
        return SafetyCheck(
            name="Working Directory Clean",
            description="No uncommitted changes",
            passed=clean,
            critical=False,
            warning=warning,
        )

    def _current_branch_check(self, operations: List[CleanupOperation]) -> SafetyCheck:
        try:
            branches: Optional[BranchList] = self.gateway.branch_list()
        except Exception as e:
            logger.warning(f"Could not determine the current branch: {e}")
            return SafetyCheck(
                name="Current Branch Not Planned",
                description="The checked-out branch is not scheduled for cleanup",
                passed=False,
                critical=True,
                warning=str(e),
            )

        current = branches.current
        planned = current is not None and any(op.branch_name == current for op in operations)
        return SafetyCheck(
            name="Current Branch Not Planned",
            description="The checked-out branch is not scheduled for cleanup",
            passed=not planned,
            critical=True,
            warning=f"Current branch '{current}' is scheduled for cleanup" if planned else None,
        )


def _candidate_check(
    name: str,
    description: str,
    critical: bool,
    flagged: List[str],
    planned: Set[str],
    label: str,
) -> SafetyCheck:
    in_plan = [branch for branch in flagged if branch in planned]
    skipped = [branch for branch in flagged if branch not in planned]

    warnings = []
    if in_plan:
        warnings.append(f"{label} planned: {', '.join(in_plan)}")
    if skipped:
        warnings.append(f"{label} left out of the plan: {', '.join(skipped)}")
    return SafetyCheck(
        name=name,
        description=description,
        passed=not in_plan,
        critical=critical,
        warning="; ".join(warnings) or None,
    )
