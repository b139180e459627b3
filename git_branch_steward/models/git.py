"""Plain data returned by the git gateway."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class CommitInfo:
    """Metadata for a single commit."""

    hash: str
    date: datetime
    author: str


@dataclass
class CommitLog:
    """Latest commit of a ref plus the number of commits reachable from it."""

    latest: Optional[CommitInfo]
    total_count: int


@dataclass
class BranchList:
    """Local branches and the currently checked-out branch (None when detached)."""

    all: List[str]
    current: Optional[str]


@dataclass
class WorkingTreeStatus:
    """Paths with uncommitted changes (modified, staged or untracked)."""

    changed_files: List[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.changed_files


@dataclass
class NameStatusEntry:
    """One line of ``git diff --name-status`` output."""

    status_code: str
    path: str
    old_path: Optional[str] = None
    similarity: Optional[int] = None
