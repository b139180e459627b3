"""GitHub integration: pull request and branch protection enrichment"""
import os
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, TYPE_CHECKING
from urllib.parse import urlparse

from github import Github, GithubException

from git_branch_steward.exceptions import GitHubAPIError
from git_branch_steward.logging_config import get_logger
from git_branch_steward.models.stale import BranchEnrichment
from git_branch_steward.utils.threading import batched

if TYPE_CHECKING:
    from github.Repository import Repository

logger = get_logger(__name__)


def parse_github_repo(remote_url: str) -> Optional[str]:
    """Extract 'owner/repo' from a GitHub SSH or HTTPS remote URL."""
    if not remote_url or "github.com" not in remote_url:
        return None

    if remote_url.startswith("git@"):
        # git@github.com:org/repo.git
        path = remote_url.split("github.com:", 1)[1]
    else:
        # https://github.com/org/repo.git or ssh://git@github.com/org/repo.git
        path = urlparse(remote_url).path.strip("/")

    if path.endswith(".git"):
        path = path[:-4]
    return path if path.count("/") == 1 else None


class IntegrationManager:
    """Looks up open pull requests and branch protection on GitHub.

    Every lookup degrades to "unknown" (False) on failure; errors are logged
    and never propagate to the stale branch analysis.
    """

    def __init__(
        self,
        github_token: Optional[str] = None,
        batch_size: int = 5,
        batch_delay: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.github_token = github_token or os.environ.get("GITHUB_TOKEN")
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self._sleep = sleep
        self.github_repo: Optional[str] = None
        self.github: Optional[Github] = None
        self.gh_repo: Optional["Repository"] = None
        self.github_enabled = False

    def setup_github_api(self, remote_url: str) -> bool:
        """Connect to the GitHub repository behind remote_url.

        Returns:
            True when PR and protection lookups are available
        """
        self.github_repo = parse_github_repo(remote_url)
        if not self.github_repo:
            logger.debug(f"[GitHub] Not a GitHub repository: {remote_url}")
            return False

        if not self.github_token:
            logger.info("[GitHub] No GitHub token found. PR and protection checks disabled")
            return False

        try:
            self._connect()
            self.github_enabled = True
            logger.debug(f"[GitHub] Integration enabled for: {self.github_repo}")
        except GitHubAPIError as e:
            logger.warning(f"[GitHub] Failed to set up GitHub API: {e}")
            self.github_enabled = False
        return self.github_enabled

    def _connect(self) -> None:
        try:
            self.github = Github(self.github_token)
            self.gh_repo = self.github.get_repo(self.github_repo)
        except GithubException as e:
            raise GitHubAPIError("get_repo", f"{self.github_repo}: {e}") from e

    @property
    def enabled(self) -> bool:
        return self.github_enabled and self.gh_repo is not None and self.github_repo is not None

    def has_open_pr(self, branch_name: str) -> bool:
        if not self.enabled:
            return False

        owner = self.github_repo.split("/")[0]
        try:
            pulls = self.gh_repo.get_pulls(state="open", head=f"{owner}:{branch_name}")
            return pulls.totalCount > 0
        except Exception as e:
            logger.debug(f"[GitHub] Error checking PRs for {branch_name}: {e}")
            return False

    def is_protected(self, branch_name: str) -> bool:
        if not self.enabled:
            return False

        try:
            return bool(self.gh_repo.get_branch(branch_name).protected)
        except Exception as e:
            # 404 for branches that only exist locally
            logger.debug(f"[GitHub] Error checking protection for {branch_name}: {e}")
            return False

    def enrich_branch(self, branch_name: str) -> BranchEnrichment:
        """Fetch PR and protection status for one branch."""
        enrichment = BranchEnrichment(
            has_open_pr=self.has_open_pr(branch_name),
            is_protected=self.is_protected(branch_name),
        )
        if enrichment.has_open_pr:
            logger.debug(f"[GitHub] Branch {branch_name} has an open PR")
        if enrichment.is_protected:
            logger.debug(f"[GitHub] Branch {branch_name} is protected")
        return enrichment

    def enrich_branches(
        self,
        branch_names: List[str],
        batch_size: Optional[int] = None,
        batch_delay: Optional[float] = None,
    ) -> Dict[str, BranchEnrichment]:
        """Enrich branches in bounded batches with a pause between batches.

        The batch size caps concurrent API requests to limit rate-limit exposure.

        Args:
            branch_names: Branches to look up
            batch_size: Overrides the manager's batch size
            batch_delay: Overrides the manager's delay between batches (seconds)
        """
        if not self.enabled or not branch_names:
            return {}

        batch_size = batch_size or self.batch_size
        batch_delay = self.batch_delay if batch_delay is None else batch_delay
        batches = list(batched(branch_names, batch_size))
        logger.debug(
            f"[GitHub] Enriching {len(branch_names)} branches in {len(batches)} batches "
            f"of up to {batch_size}"
        )

        result: Dict[str, BranchEnrichment] = {}
        with ThreadPoolExecutor(max_workers=batch_size) as executor:
            for index, batch in enumerate(batches):
                for branch_name, enrichment in zip(batch, executor.map(self._safe_enrich, batch)):
                    result[branch_name] = enrichment
                if index < len(batches) - 1 and batch_delay > 0:
                    self._sleep(batch_delay)

        return result

    def _safe_enrich(self, branch_name: str) -> BranchEnrichment:
        try:
            return self.enrich_branch(branch_name)
        except Exception as e:
            logger.warning(f"[GitHub] Failed to enrich branch {branch_name}: {e}")
            return BranchEnrichment()
