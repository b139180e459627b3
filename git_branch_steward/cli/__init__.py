"""Command-line interface for git-branch-steward"""

from .main import main

__all__ = ["main"]
