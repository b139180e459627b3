"""Core functionality for git-branch-steward"""

from typing import List, Optional

import git

from git_branch_steward.config import (
    CleanupOptions,
    ComparisonOptions,
    ComplexityThresholds,
    StaleBranchConfig,
)
from git_branch_steward.exceptions import GitBranchStewardError
from git_branch_steward.logging_config import get_logger
from git_branch_steward.models.comparison import BranchComparison
from git_branch_steward.models.stale import (
    CleanupPlan,
    CleanupResult,
    StaleBranchCandidate,
    StaleBranchReport,
)
from git_branch_steward.services.cleanup_executor import CleanupExecutor
from git_branch_steward.services.cleanup_planner import CleanupPlanner
from git_branch_steward.services.comparison_service import BranchComparisonService
from git_branch_steward.services.git import GitGateway, VersionControlGateway
from git_branch_steward.services.integration_service import IntegrationManager
from git_branch_steward.services.stale_branch_service import StaleBranchAnalyzer

logger = get_logger(__name__)


class BranchSteward:
    """Wires the git gateway, analysis services and GitHub integration together."""

    def __init__(
        self,
        repo_path: str,
        github_token: Optional[str] = None,
        thresholds: Optional[ComplexityThresholds] = None,
        gateway: Optional[VersionControlGateway] = None,
        integration: Optional[IntegrationManager] = None,
    ):
        """Initialize BranchSteward.

        Args:
            repo_path: Path to git repository
            github_token: GitHub token for PR/protection checks (falls back to GITHUB_TOKEN)
            thresholds: Merge complexity weights and limits
            gateway: Gateway override, mainly for tests
            integration: Integration override, mainly for tests
        """
        self.repo_path = repo_path
        if gateway is None:
            try:
                git.Repo(repo_path)
            except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
                raise GitBranchStewardError(f"Not a git repository: {repo_path}") from e
            gateway = GitGateway(repo_path)

        self.gateway = gateway
        self.github_token = github_token
        self.integration = integration
        self._integration_ready = integration is not None

        self.comparison_service = BranchComparisonService(gateway, thresholds)
        self.stale_analyzer = StaleBranchAnalyzer(gateway, repo_path, integration=integration)
        self.planner = CleanupPlanner(gateway)
        self.executor = CleanupExecutor(gateway)

    def compare(
        self, source: str, target: str, options: Optional[ComparisonOptions] = None
    ) -> BranchComparison:
        return self.comparison_service.compare_branches(source, target, options)

    def find_stale_branches(self, config: Optional[StaleBranchConfig] = None) -> StaleBranchReport:
        config = config or StaleBranchConfig()
        if config.enrichment_enabled:
            self.stale_analyzer.integration = self._get_integration(config)
        return self.stale_analyzer.analyze_stale_branches(config)

    def plan_cleanup(
        self, candidates: List[StaleBranchCandidate], options: Optional[CleanupOptions] = None
    ) -> CleanupPlan:
        return self.planner.create_cleanup_plan(candidates, options)

    def execute_cleanup(self, plan: CleanupPlan, options: Optional[CleanupOptions] = None) -> List[CleanupResult]:
        return self.executor.execute_cleanup_plan(plan, options)

    def _get_integration(self, config: StaleBranchConfig) -> Optional[IntegrationManager]:
        """Set up the GitHub integration once, from the configured remote's URL."""
        if self._integration_ready:
            return self.integration

        self._integration_ready = True
        remote_url = self.gateway.remote_url(config.remote_name)
        if not remote_url:
            logger.info(f"No URL for remote {config.remote_name}; GitHub checks disabled")
            return None

        integration = IntegrationManager(
            github_token=self.github_token,
            batch_size=config.enrichment_batch_size,
            batch_delay=config.enrichment_batch_delay,
        )
        if integration.setup_github_api(remote_url):
            self.integration = integration
        return self.integration
