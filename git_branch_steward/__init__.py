"""
git-branch-steward - branch comparison and stale branch cleanup for Git repositories
"""

from .__version__ import __version__
from .core import BranchSteward
from .cli.main import main

__all__ = ["BranchSteward", "main", "__version__"]
