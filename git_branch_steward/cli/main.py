"""Entry point for the git-branch-steward command"""

import argparse
import os
import sys
from typing import List, Optional

from rich.console import Console

from git_branch_steward.cli.args import parse_args
from git_branch_steward.config import (
    CleanupOptions,
    ComparisonOptions,
    StaleBranchConfig,
)
from git_branch_steward.core import BranchSteward
from git_branch_steward.exceptions import CriticalSafetyCheckError, GitBranchStewardError
from git_branch_steward.logging_config import setup_logging
from git_branch_steward.services.display_service import DisplayService
from git_branch_steward.utils.threading import get_optimal_worker_count, is_free_threading_enabled

console = Console()

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_comparison_options(args: argparse.Namespace) -> ComparisonOptions:
    return ComparisonOptions(
        include_context=args.context,
        ignore_whitespace=args.ignore_whitespace,
        detect_renames=not args.no_renames,
        max_files=args.max_files,
        conflict_analysis=args.conflicts,
        workers=args.workers,
    )


def build_stale_config(args: argparse.Namespace) -> StaleBranchConfig:
    """Overlay command-line values on the StaleBranchConfig defaults."""
    defaults = StaleBranchConfig()
    values = {
        "excluded_branches": defaults.excluded_branches + list(args.exclude),
        "exclude_patterns": defaults.exclude_patterns + list(args.exclude_pattern),
        "check_pull_requests": args.check_prs,
        "check_protected_branches": args.check_prs,
        "remote_name": args.remote,
        "workers": args.workers,
    }
    if args.stale_days is not None:
        values["stale_days_threshold"] = args.stale_days
        # Keep the very-stale bound valid when only --stale-days is raised
        if args.very_stale_days is None and args.stale_days > defaults.very_stale_threshold:
            values["very_stale_threshold"] = args.stale_days
    if args.very_stale_days is not None:
        values["very_stale_threshold"] = args.very_stale_days
    if args.min_commits is not None:
        values["minimum_commits"] = args.min_commits
    return StaleBranchConfig.from_dict(values)


def build_cleanup_options(args: argparse.Namespace) -> CleanupOptions:
    return CleanupOptions(
        dry_run=not args.execute,
        create_backups=not args.no_backups,
        delete_remote=args.delete_remote,
        archive=args.archive,
        force=args.force,
        remote_name=args.remote,
    )


def run_compare(steward: BranchSteward, args: argparse.Namespace, display: DisplayService) -> int:
    comparison = steward.compare(args.source, args.target, build_comparison_options(args))
    display.display_comparison(comparison, show_hunks=args.hunks)
    return EXIT_OK


def run_stale_branches(steward: BranchSteward, args: argparse.Namespace, display: DisplayService) -> int:
    config = build_stale_config(args)
    options = build_cleanup_options(args)

    report = steward.find_stale_branches(config)
    display.display_stale_report(report)

    plan = steward.plan_cleanup(report.stale_branches, options)
    display.display_cleanup_plan(plan)
    if not plan.operations:
        return EXIT_OK

    results = steward.execute_cleanup(plan, options)
    display.display_cleanup_results(results)
    if options.dry_run:
        console.print("\n[dim]Dry run - nothing was changed. Use --execute to clean up.[/dim]")
    return EXIT_OK


def _print_debug_info(args: argparse.Namespace) -> None:
    console.print("[yellow]Debug mode enabled[/yellow]")
    console.print("[yellow]Threading Information:[/yellow]")
    console.print(f"  Python version: {sys.version.split()[0]}")
    console.print(f"  CPU count: {os.cpu_count()}")
    console.print(f"  Optimal workers: {get_optimal_worker_count(getattr(args, 'workers', None))}")
    console.print(f"  Free-threading enabled: {is_free_threading_enabled()}")
    console.print("[yellow]Arguments:[/yellow]")
    for key, value in sorted(vars(args).items()):
        console.print(f"  {key}: {value}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    parsed_args = parse_args(argv)
    setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

    if parsed_args.debug:
        _print_debug_info(parsed_args)

    try:
        steward = BranchSteward(parsed_args.repo or os.getcwd())
        display = DisplayService(verbose=parsed_args.verbose or parsed_args.debug)

        if parsed_args.command == "compare":
            return run_compare(steward, parsed_args, display)
        return run_stale_branches(steward, parsed_args, display)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return EXIT_INTERRUPTED
    except CriticalSafetyCheckError as e:
        console.print(f"[red]Aborted: {e}[/red]")
        console.print("[dim]Nothing was changed. Use --force to override.[/dim]")
        return EXIT_FAILURE
    except (GitBranchStewardError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        if parsed_args.debug:
            console.print_exception()
        return EXIT_FAILURE
    except Exception as e:
        console.print(f"[red]Unexpected error: {e}[/red]")
        if parsed_args.debug:
            console.print_exception()
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
