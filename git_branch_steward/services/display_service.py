"""Display and formatting service for comparisons and cleanup reports"""
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from git_branch_steward.formatters import (
    format_age,
    format_category,
    format_date,
    format_file_status,
    format_risk,
    format_severity,
    format_time_span,
    format_tracking,
)
from git_branch_steward.logging_config import get_logger
from git_branch_steward.models.comparison import BranchComparison
from git_branch_steward.models.stale import CleanupPlan, CleanupResult, StaleBranchReport

console = Console()
logger = get_logger(__name__)


class DisplayService:
    def __init__(self, verbose: bool = False, output: Optional[Console] = None):
        self.verbose = verbose
        self.console = output or console

    def display_comparison(self, comparison: BranchComparison, show_hunks: bool = False) -> None:
        """Print a branch comparison: divergence, files, summary and complexity."""
        out = self.console
        out.print(
            f"\n[bold]{comparison.source_branch}[/bold] → [bold]{comparison.target_branch}[/bold]"
        )
        divergence = "diverged" if comparison.diverged else "linear"
        out.print(f"Ahead: {comparison.ahead}  Behind: {comparison.behind}  ({divergence})")
        if comparison.common_ancestor:
            out.print(f"Common ancestor: {comparison.common_ancestor[:7]}")
        else:
            out.print("[yellow]No common ancestor (unrelated histories)[/yellow]")

        if comparison.error:
            out.print(f"[red]Comparison incomplete:[/red] {comparison.error}")
            return

        if not comparison.files:
            out.print("No file changes")
        else:
            table = Table(title="Changed files")
            table.add_column("Status")
            table.add_column("File")
            table.add_column("+", justify="right", style="green")
            table.add_column("-", justify="right", style="red")
            for file_diff in comparison.files:
                path = file_diff.path
                if file_diff.old_path:
                    similarity = f" ({file_diff.similarity_index}%)" if file_diff.similarity_index is not None else ""
                    path = f"{file_diff.old_path} → {file_diff.path}{similarity}"
                if file_diff.is_binary:
                    additions, deletions = "bin", "bin"
                else:
                    additions, deletions = str(file_diff.additions), str(file_diff.deletions)
                table.add_row(format_file_status(file_diff.status), path, additions, deletions)
            out.print(table)

            if show_hunks:
                self._display_hunks(comparison)

        summary = comparison.summary
        out.print("\nSummary:")
        out.print(
            f"Files: {summary.total_files}  +{summary.total_additions} -{summary.total_deletions}  "
            f"net {summary.net_change:+d}  binary {summary.binary_files}"
        )
        if summary.language_breakdown:
            languages = ", ".join(
                f"{ext}: {count}"
                for ext, count in sorted(summary.language_breakdown.items(), key=lambda item: -item[1])
            )
            out.print(f"Languages: {languages}")
        if self.verbose and summary.affected_directories:
            out.print(f"Directories: {', '.join(summary.affected_directories)}")

        complexity = comparison.complexity
        out.print(
            f"\nMerge complexity: {complexity.score:.1f} ({format_category(complexity.category)})"
        )
        if self.verbose:
            factors = complexity.factors
            out.print(
                f"  authors {factors.author_diversity}, "
                f"{format_time_span(factors.time_span_days)}, "
                f"commit distance {factors.commit_distance}"
            )
        for recommendation in complexity.recommendations:
            out.print(f"  • {recommendation}")

        if comparison.conflicts is not None:
            conflicts = comparison.conflicts
            if conflicts.has_conflicts:
                out.print(
                    f"\n[red]Predicted conflicts[/red] ({format_severity(conflicts.severity)}): "
                    f"{len(conflicts.conflicting_files)} file(s)"
                )
                for path in conflicts.conflicting_files:
                    out.print(f"  {path}")
                for suggestion in conflicts.resolution_suggestions:
                    out.print(f"  • {suggestion}")
            else:
                out.print("\n[green]No merge conflicts predicted[/green]")

    def _display_hunks(self, comparison: BranchComparison) -> None:
        for file_diff in comparison.files:
            for hunk in file_diff.hunks:
                self.console.print(
                    f"[cyan]{file_diff.path} @@ -{hunk.old_start},{hunk.old_lines} "
                    f"+{hunk.new_start},{hunk.new_lines} @@ {hunk.header}[/cyan]",
                    markup=True,
                )

    def display_stale_report(self, report: StaleBranchReport) -> None:
        """Print stale branch candidates with risk and recommendation."""
        out = self.console
        if not report.stale_branches:
            out.print(
                f"No stale branches found ({report.total_branches} branches, "
                f"threshold {report.config.stale_days_threshold} days)"
            )
            return

        table = Table(title=f"Stale branches in {report.repository_path}")
        table.add_column("Branch")
        table.add_column("Last Commit")
        table.add_column("Age", justify="right")
        table.add_column("Commits", justify="right")
        table.add_column("Author")
        table.add_column("Remote")
        table.add_column("Risk")
        table.add_column("Cleanup")
        table.add_column("Reason")

        for candidate in report.stale_branches:
            recommendation = candidate.recommendation
            cleanup = f"yes (p{recommendation.priority})" if recommendation.should_cleanup else "no"
            table.add_row(
                candidate.name,
                format_date(candidate.last_commit_date),
                format_age(candidate.days_since_activity),
                str(candidate.commit_count),
                candidate.last_commit_author,
                format_tracking(candidate.tracking),
                format_risk(candidate.risk),
                cleanup,
                recommendation.reason,
            )
        out.print(table)

        out.print("\nSummary:")
        out.print(f"Total branches: {report.total_branches}")
        out.print(f"Stale branches: {len(report.stale_branches)}")
        out.print(
            "Risk: " + ", ".join(f"{risk} {count}" for risk, count in report.risk_summary.items())
        )
        savings = report.estimated_savings
        if savings:
            out.print(
                f"Cleanup candidates: {savings.get('branch_count', 0)} "
                f"(~{savings.get('disk_space', 0) / 1024:.0f} KB of metadata)"
            )

    def display_cleanup_plan(self, plan: CleanupPlan) -> None:
        out = self.console
        if not plan.operations:
            out.print("Nothing to clean up")
        else:
            mode = "dry run" if all(op.dry_run for op in plan.operations) else "execute"
            out.print(
                f"\nCleanup plan ({mode}): {len(plan.operations)} operation(s), "
                f"overall risk {format_risk(plan.overall_risk)}, "
                f"~{plan.estimated_duration}s"
            )
            for operation in plan.operations:
                out.print(f"  {operation.type.value:<14} {operation.branch_name}")

        out.print("\nSafety checks:")
        for check in plan.safety_checks:
            if check.passed:
                marker = "[green]✓[/green]"
            elif check.critical:
                marker = "[red]✗[/red]"
            else:
                marker = "[yellow]![/yellow]"
            line = f"  {marker} {check.name}"
            if check.warning:
                line += f" - {check.warning}"
            out.print(line)

    def display_cleanup_results(self, results: List[CleanupResult]) -> None:
        out = self.console
        for result in results:
            if result.success:
                out.print(f"[green]✓[/green] {result.branch_name} ({result.operation_type.value})")
            else:
                out.print(f"[red]✗[/red] {result.branch_name}: {result.error}")
            # Actions carry literal "[DRY RUN]" text
            for action in result.actions_taken:
                out.print(f"    {action}", markup=False)

        succeeded = sum(1 for r in results if r.success)
        out.print(f"\n{succeeded}/{len(results)} operation(s) succeeded")
