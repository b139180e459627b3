"""Command-line argument parsing for git-branch-steward."""

import argparse
from typing import List, Optional

from git_branch_steward.__version__ import __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-branch-steward",
        description="Compare branches for merge risk and clean up stale branches safely",
        epilog="PR and protection checks need the GITHUB_TOKEN environment variable. "
        "Get a token at https://github.com/settings/tokens (scopes: repo or public_repo)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--repo", metavar="PATH", help="Repository path (default: current directory)")
    parser.add_argument("--version", action="version", version=f"git-branch-steward {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    compare = subparsers.add_parser("compare", help="Compare a source branch against a target branch")
    compare.add_argument("source", help="Branch with the changes")
    compare.add_argument("target", help="Branch the changes would merge into")
    compare.add_argument(
        "--context", type=int, default=3, metavar="N", help="Lines of diff context (default: 3)"
    )
    compare.add_argument(
        "--ignore-whitespace", action="store_true", help="Ignore whitespace-only changes"
    )
    compare.add_argument("--no-renames", action="store_true", help="Disable rename detection")
    compare.add_argument(
        "--max-files",
        type=int,
        default=100,
        metavar="N",
        help="Maximum number of files to analyze (default: 100)",
    )
    compare.add_argument(
        "--conflicts",
        action="store_true",
        help="Predict merge conflicts (read-only, needs git 2.38+)",
    )
    compare.add_argument("--hunks", action="store_true", help="List every diff hunk header")
    compare.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Number of parallel workers for diff retrieval (default: auto-detect)",
    )

    stale = subparsers.add_parser("stale-branches", help="Find stale branches and plan their cleanup")
    mode = stale.add_mutually_exclusive_group()
    mode.add_argument(
        "--dry-run",
        dest="execute",
        action="store_false",
        help="Preview mode - show what would be done (default)",
    )
    mode.add_argument("--execute", dest="execute", action="store_true", help="Actually clean up branches")
    stale.set_defaults(execute=False)
    stale.add_argument(
        "--force", action="store_true", help="Run even when critical safety checks fail"
    )
    stale.add_argument("--stale-days", type=int, metavar="N", help="Days until a branch is stale (default: 30)")
    stale.add_argument(
        "--very-stale-days", type=int, metavar="N", help="Days until a branch is very stale (default: 90)"
    )
    stale.add_argument(
        "--min-commits", type=int, metavar="N", help="Minimum commits for a stale branch (default: 1)"
    )
    stale.add_argument(
        "--exclude", nargs="*", default=[], metavar="BRANCH", help="Additional branch names to skip"
    )
    stale.add_argument(
        "--exclude-pattern",
        nargs="*",
        default=[],
        metavar="REGEX",
        help="Additional branch name patterns (regular expressions) to skip",
    )
    stale.add_argument(
        "--delete-remote",
        action="store_true",
        help="Delete the remote branch instead of the local one when it exists",
    )
    stale.add_argument(
        "--archive", action="store_true", help="Tag branches as archive/<name> before deleting"
    )
    stale.add_argument(
        "--no-backups", action="store_true", help="Do not create refs/backups/ refs before deleting"
    )
    stale.add_argument(
        "--check-prs",
        action="store_true",
        help="Check GitHub for open pull requests and branch protection",
    )
    stale.add_argument("--remote", default="origin", help="Remote name (default: origin)")
    stale.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Number of parallel workers for branch analysis (default: auto-detect)",
    )

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
