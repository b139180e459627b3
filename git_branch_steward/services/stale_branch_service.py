"""Stale branch detection and risk classification"""
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from git_branch_steward.config import StaleBranchConfig
from git_branch_steward.logging_config import get_logger
from git_branch_steward.models.git import CommitInfo
from git_branch_steward.models.stale import (
    BranchEnrichment,
    BranchTracking,
    CleanupRecommendation,
    RiskLevel,
    StaleBranchCandidate,
    StaleBranchReport,
)
from git_branch_steward.services.git import VersionControlGateway
from git_branch_steward.services.integration_service import IntegrationManager
from git_branch_steward.utils.threading import get_optimal_worker_count

logger = get_logger(__name__)

SECONDS_PER_DAY = 86400
# Rough metadata footprint of one branch, used for the savings estimate
BYTES_PER_BRANCH = 1024


@dataclass
class _BranchActivity:
    """History signals read for one branch before classification."""
    name: str
    last_commit: CommitInfo
    commit_count: int
    days_since_activity: int
    tracking: BranchTracking


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_excluded(branch_name: str, config: StaleBranchConfig) -> bool:
    """Check a branch against excluded names and regex patterns."""
    if branch_name in config.excluded_branches:
        return True
    return any(re.search(pattern, branch_name) for pattern in config.exclude_patterns)


def cleanup_priority(days_since_activity: int, commit_count: int, config: StaleBranchConfig) -> int:
    """Cleanup urgency in 1..10: older branches rank higher, larger branches lower."""
    stale_days = max(1, config.stale_days_threshold)
    age_bonus = min(5, days_since_activity // stale_days)
    size_penalty = min(4, commit_count // 10)
    return max(1, min(10, 4 + age_bonus - size_penalty))


def classify_branch(
    activity: _BranchActivity,
    config: StaleBranchConfig,
    has_active_pull_request: bool = False,
    is_protected: bool = False,
) -> StaleBranchCandidate:
    """Assign risk and a cleanup recommendation to a stale branch."""
    tracking = activity.tracking
    precautions: List[str] = []

    if is_protected:
        risk = RiskLevel.HIGH
        recommendation = CleanupRecommendation(
            should_cleanup=False,
            reason="Branch is protected - should not be deleted",
            precautions=["Remove branch protection before cleanup"],
        )
    elif has_active_pull_request:
        risk = RiskLevel.HIGH
        recommendation = CleanupRecommendation(
            should_cleanup=False,
            reason="Branch has an active pull request",
            precautions=["Close or merge the pull request before cleanup"],
        )
    elif tracking.ahead > 0:
        risk = RiskLevel.HIGH
        recommendation = CleanupRecommendation(
            should_cleanup=False,
            reason=f"Branch has {tracking.ahead} unpushed commit(s)",
            precautions=["Push commits to the remote or create a backup"],
        )
    elif not tracking.known:
        risk = RiskLevel.HIGH
        recommendation = CleanupRecommendation(
            should_cleanup=False,
            reason=f"Tracking state unknown: could not compare with {tracking.remote_name}/{activity.name}",
            precautions=["Fetch from the remote and re-run the analysis"],
        )
    else:
        if activity.days_since_activity <= config.very_stale_threshold:
            risk = RiskLevel.LOW
            reason = f"No activity for {activity.days_since_activity} days"
            precautions.append("Review commits before cleanup")
        else:
            risk = RiskLevel.MEDIUM
            reason = f"Very stale: no activity for {activity.days_since_activity} days"
            precautions.append("Verify no important work will be lost")
        if tracking.has_remote:
            precautions.append("Consider deleting the remote branch as well")
        recommendation = CleanupRecommendation(
            should_cleanup=True,
            reason=reason,
            precautions=precautions,
            priority=cleanup_priority(activity.days_since_activity, activity.commit_count, config),
        )

    return StaleBranchCandidate(
        name=activity.name,
        last_commit_date=activity.last_commit.date,
        last_commit_hash=activity.last_commit.hash,
        last_commit_author=activity.last_commit.author,
        days_since_activity=activity.days_since_activity,
        commit_count=activity.commit_count,
        tracking=tracking,
        risk=risk,
        recommendation=recommendation,
        has_active_pull_request=has_active_pull_request,
        is_protected=is_protected,
    )


class StaleBranchAnalyzer:
    """Finds local branches without recent activity and classifies cleanup risk."""

    def __init__(
        self,
        gateway: VersionControlGateway,
        repository_path: str,
        integration: Optional[IntegrationManager] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.gateway = gateway
        self.repository_path = repository_path
        self.integration = integration
        self._now = clock or _utc_now

    def analyze_stale_branches(self, config: Optional[StaleBranchConfig] = None) -> StaleBranchReport:
        """Scan local branches and report the stale ones.

        Never raises for repository read failures: a branch that cannot be read
        is skipped, and a failure to list branches yields an empty report.
        """
        config = config or StaleBranchConfig()
        scan_date = self._now()

        try:
            branches = self.gateway.branch_list()
        except Exception as e:
            logger.error(f"Failed to list branches: {e}")
            return self._build_report(scan_date, 0, [], config)

        names = [
            name
            for name in branches.all
            if name != branches.current and not is_excluded(name, config)
        ]
        logger.debug(
            f"Analyzing {len(names)} of {len(branches.all)} branches "
            f"(current: {branches.current or 'detached'})"
        )

        remote_branches = self._remote_branches(config.remote_name)
        activities = self._read_activities(names, remote_branches, config, scan_date)
        stale = [
            activity
            for activity in activities
            if activity.days_since_activity > config.stale_days_threshold
            and activity.commit_count >= config.minimum_commits
        ]

        enrichment = self._enrich(stale, config)
        candidates = []
        for activity in stale:
            facts = enrichment.get(activity.name, BranchEnrichment())
            candidates.append(
                classify_branch(
                    activity,
                    config,
                    has_active_pull_request=config.check_pull_requests and facts.has_open_pr,
                    is_protected=config.check_protected_branches and facts.is_protected,
                )
            )

        candidates.sort(key=lambda c: (-c.recommendation.priority, -c.days_since_activity, c.name))
        return self._build_report(scan_date, len(branches.all), candidates, config)

    def _remote_branches(self, remote_name: str) -> List[str]:
        try:
            return self.gateway.remote_branches(remote_name)
        except Exception as e:
            logger.warning(f"Failed to list branches of remote {remote_name}: {e}")
            return []

    def _read_activities(
        self,
        names: List[str],
        remote_branches: List[str],
        config: StaleBranchConfig,
        now: datetime,
    ) -> List[_BranchActivity]:
        """Read history signals for every branch through a bounded pool."""
        if not names:
            return []

        max_workers = min(get_optimal_worker_count(config.workers), len(names))
        logger.debug(f"Using {max_workers} workers for branch analysis")

        activities: Dict[str, _BranchActivity] = {}
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_branch = {
                executor.submit(self._read_activity, name, remote_branches, config, now): name
                for name in names
            }
            for future in as_completed(future_to_branch):
                branch_name = future_to_branch[future]
                try:
                    activity = future.result()
                except Exception as e:
                    logger.warning(f"Skipping branch {branch_name}: {e}")
                    continue
                if activity is not None:
                    activities[branch_name] = activity

        # Keep branch listing order regardless of completion order
        return [activities[name] for name in names if name in activities]

    def _read_activity(
        self, name: str, remote_branches: List[str], config: StaleBranchConfig, now: datetime
    ) -> Optional[_BranchActivity]:
        log = self.gateway.log(name)
        if log.latest is None:
            logger.debug(f"Branch {name} has no commits, skipping")
            return None

        days = int((now - log.latest.date).total_seconds() // SECONDS_PER_DAY)
        return _BranchActivity(
            name=name,
            last_commit=log.latest,
            commit_count=log.total_count,
            days_since_activity=max(0, days),
            tracking=self._tracking(name, remote_branches, config.remote_name),
        )

    def _tracking(self, name: str, remote_branches: List[str], remote_name: str) -> BranchTracking:
        remote_ref = f"{remote_name}/{name}"
        if remote_ref not in remote_branches:
            return BranchTracking()

        try:
            ahead, behind = self.gateway.revision_range_counts(name, remote_ref)
        except Exception as e:
            logger.warning(f"Could not compare {name} with {remote_ref}: {e}")
            return BranchTracking(has_remote=True, remote_name=remote_name, known=False)
        return BranchTracking(has_remote=True, remote_name=remote_name, ahead=ahead, behind=behind)

    def _enrich(self, stale: List[_BranchActivity], config: StaleBranchConfig) -> Dict[str, BranchEnrichment]:
        if not stale or not config.enrichment_enabled:
            return {}
        if self.integration is None or not self.integration.enabled:
            logger.info("Pull request and protection checks requested but GitHub integration is unavailable")
            return {}

        try:
            return self.integration.enrich_branches(
                [activity.name for activity in stale],
                batch_size=config.enrichment_batch_size,
                batch_delay=config.enrichment_batch_delay,
            )
        except Exception as e:
            logger.warning(f"Branch enrichment failed: {e}")
            return {}

    def _build_report(
        self,
        scan_date: datetime,
        total_branches: int,
        candidates: List[StaleBranchCandidate],
        config: StaleBranchConfig,
    ) -> StaleBranchReport:
        risk_summary = {risk.value: 0 for risk in RiskLevel}
        for candidate in candidates:
            risk_summary[candidate.risk.value] += 1

        cleanup_count = sum(1 for c in candidates if c.recommendation.should_cleanup)
        return StaleBranchReport(
            scan_date=scan_date,
            repository_path=self.repository_path,
            total_branches=total_branches,
            stale_branches=candidates,
            risk_summary=risk_summary,
            config=config,
            estimated_savings={
                "branch_count": cleanup_count,
                "disk_space": cleanup_count * BYTES_PER_BRANCH,
            },
        )
