"""Branch comparison: ahead/behind, structured diffs and merge complexity"""
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

from git_branch_steward.config import ComparisonOptions, ComplexityThresholds
from git_branch_steward.logging_config import get_logger
from git_branch_steward.models.comparison import (
    BranchComparison,
    ComparisonSummary,
    ComplexityAssessment,
    ComplexityFactors,
    ConflictAnalysis,
    FileDiff,
)
from git_branch_steward.models.git import NameStatusEntry
from git_branch_steward.services.complexity import (
    assess_complexity,
    conflict_severity,
    conflict_suggestions,
)
from git_branch_steward.services.diff_parser import (
    apply_hunks,
    file_diff_from_entry,
    is_binary_diff,
    is_binary_numstat,
    parse_unified_diff,
)
from git_branch_steward.services.git import VersionControlGateway
from git_branch_steward.utils.threading import get_optimal_worker_count

logger = get_logger(__name__)

SECONDS_PER_DAY = 86400


class BranchComparisonService:
    """Compares a source branch against a target branch."""

    def __init__(self, gateway: VersionControlGateway, thresholds: Optional[ComplexityThresholds] = None):
        self.gateway = gateway
        self.thresholds = thresholds or ComplexityThresholds()

    def compare_branches(
        self, source: str, target: str, options: Optional[ComparisonOptions] = None
    ) -> BranchComparison:
        """Compare source against target.

        Never raises. Failures while reading the diff produce a comparison with
        empty files, zeroed summary and complexity, and ``error`` set; the
        branch names and ahead/behind counts are kept.
        """
        options = options or ComparisonOptions()
        comparison = BranchComparison(source_branch=source, target_branch=target)

        if source == target:
            logger.debug(f"Comparing {source} with itself, nothing to do")
            return comparison

        comparison.ahead, comparison.behind = self._ahead_behind(source, target)
        comparison.common_ancestor = self._common_ancestor(source, target)

        # Unrelated histories diff against the target directly
        base = comparison.common_ancestor or target

        try:
            comparison.files = self._collect_file_diffs(base, source, options)
            comparison.summary = summarize_files(comparison.files)
            if options.complexity_analysis:
                factors = self._complexity_factors(comparison)
                comparison.complexity = assess_complexity(factors, self.thresholds)
        except Exception as e:
            logger.warning(f"Failed to compare {source} with {target}: {e}")
            comparison.files = []
            comparison.summary = ComparisonSummary()
            comparison.complexity = ComplexityAssessment.empty()
            comparison.error = str(e)
            return comparison

        if options.conflict_analysis:
            comparison.conflicts = self._analyze_conflicts(source, target)

        return comparison

    def _ahead_behind(self, source: str, target: str) -> Tuple[int, int]:
        try:
            return self.gateway.revision_range_counts(source, target)
        except Exception as e:
            logger.warning(f"Could not count commits between {source} and {target}: {e}")
            return 0, 0

    def _common_ancestor(self, source: str, target: str) -> Optional[str]:
        try:
            ancestor = self.gateway.merge_base(source, target)
        except Exception as e:
            logger.warning(f"Could not find common ancestor of {source} and {target}: {e}")
            return None
        if ancestor is None:
            logger.info(f"{source} and {target} have unrelated histories")
        return ancestor

    def _collect_file_diffs(self, base: str, source: str, options: ComparisonOptions) -> List[FileDiff]:
        entries = self.gateway.name_status_diff(
            base,
            source,
            detect_renames=options.detect_renames,
            ignore_whitespace=options.ignore_whitespace,
        )
        if len(entries) > options.max_files:
            logger.info(f"Analyzing the first {options.max_files} of {len(entries)} changed files")
            entries = entries[: options.max_files]
        if not entries:
            return []

        max_workers = min(get_optimal_worker_count(options.workers), len(entries))
        logger.debug(f"Fetching {len(entries)} file diffs with {max_workers} workers")

        # map() yields in submission order, keeping name-status order
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(lambda entry: self._load_file_diff(base, source, entry, options), entries))

    def _load_file_diff(
        self, base: str, source: str, entry: NameStatusEntry, options: ComparisonOptions
    ) -> FileDiff:
        file_diff = file_diff_from_entry(entry)

        numstat = self.gateway.numstat(base, source, entry.path, entry.old_path)
        if is_binary_numstat(numstat):
            file_diff.is_binary = True
            return file_diff

        diff_text = self.gateway.unified_diff(
            base,
            source,
            entry.path,
            old_path=entry.old_path,
            context=options.include_context,
            ignore_whitespace=options.ignore_whitespace,
        )
        if is_binary_diff(diff_text):
            file_diff.is_binary = True
            return file_diff

        return apply_hunks(file_diff, parse_unified_diff(diff_text))

    def _complexity_factors(self, comparison: BranchComparison) -> ComplexityFactors:
        source, target = comparison.source_branch, comparison.target_branch
        authors = self.gateway.commit_authors(f"{target}...{source}")
        return ComplexityFactors(
            files_changed=comparison.summary.total_files,
            lines_changed=comparison.summary.total_additions + comparison.summary.total_deletions,
            author_diversity=len(set(authors)),
            binary_files=comparison.summary.binary_files,
            time_span_days=self._time_span_days(source, target),
            commit_distance=comparison.ahead + comparison.behind,
        )

    def _time_span_days(self, source: str, target: str) -> int:
        """Signed days between the source tip and the target tip."""
        source_tip = self.gateway.log(source, limit=1).latest
        target_tip = self.gateway.log(target, limit=1).latest
        if source_tip is None or target_tip is None:
            return 0
        seconds = (source_tip.date - target_tip.date).total_seconds()
        return int(seconds / SECONDS_PER_DAY)

    def _analyze_conflicts(self, source: str, target: str) -> Optional[ConflictAnalysis]:
        try:
            conflicting = self.gateway.merge_tree_conflicts(target, source)
        except Exception as e:
            logger.warning(f"Conflict analysis failed for {source} into {target}: {e}")
            return None

        severity = conflict_severity(len(conflicting))
        return ConflictAnalysis(
            has_conflicts=bool(conflicting),
            conflicting_files=conflicting,
            severity=severity,
            resolution_suggestions=conflict_suggestions(conflicting, severity),
        )


def summarize_files(files: List[FileDiff]) -> ComparisonSummary:
    """Aggregate totals, touched directories and file extensions."""
    total_additions = sum(f.additions for f in files)
    total_deletions = sum(f.deletions for f in files)

    directories: List[str] = []
    languages: Dict[str, int] = {}
    for file_diff in files:
        directory = os.path.dirname(file_diff.path)
        if directory and directory not in directories:
            directories.append(directory)

        extension = os.path.splitext(file_diff.path)[1][1:].lower()
        if extension:
            languages[extension] = languages.get(extension, 0) + 1

    return ComparisonSummary(
        total_files=len(files),
        total_additions=total_additions,
        total_deletions=total_deletions,
        net_change=total_additions - total_deletions,
        binary_files=sum(1 for f in files if f.is_binary),
        affected_directories=directories,
        language_breakdown=languages,
    )
