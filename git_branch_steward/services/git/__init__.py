"""Git access for git-branch-steward."""

from .gateway import GitGateway, VersionControlGateway

__all__ = [
    "GitGateway",
    "VersionControlGateway",
]
