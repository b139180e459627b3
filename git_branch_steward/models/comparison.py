"""Branch comparison models and related enums"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class FileStatus(Enum):
    """How a file changed between two refs."""
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


class LineType(Enum):
    """Kind of line inside a diff hunk."""
    CONTEXT = "context"
    ADDITION = "addition"
    DELETION = "deletion"


class ComplexityCategory(Enum):
    """Merge complexity buckets."""
    TRIVIAL = "trivial"
    MODERATE = "moderate"
    HIGH_RISK = "high-risk"


class ConflictSeverity(Enum):
    """Severity of predicted merge conflicts."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class DiffLine:
    """A single line of a diff hunk."""
    type: LineType
    content: str
    old_line_number: Optional[int] = None  # None for additions
    new_line_number: Optional[int] = None  # None for deletions


@dataclass
class DiffHunk:
    """A contiguous block of a unified diff, opened by an @@ range header."""
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    header: str = ""
    lines: List[DiffLine] = field(default_factory=list)

    @property
    def additions(self) -> int:
        return sum(1 for line in self.lines if line.type == LineType.ADDITION)

    @property
    def deletions(self) -> int:
        return sum(1 for line in self.lines if line.type == LineType.DELETION)


@dataclass
class FileDiff:
    """Changes to one file between two refs."""
    path: str
    status: FileStatus
    old_path: Optional[str] = None  # Renamed files only
    similarity_index: Optional[int] = None  # Renamed files only
    is_binary: bool = False
    additions: int = 0
    deletions: int = 0
    hunks: List[DiffHunk] = field(default_factory=list)


@dataclass
class ComplexityFactors:
    """Raw inputs to the merge complexity score."""
    files_changed: int = 0
    lines_changed: int = 0
    author_diversity: int = 0
    binary_files: int = 0
    time_span_days: int = 0  # Signed: source tip minus target tip
    commit_distance: int = 0  # ahead + behind


@dataclass
class ComplexityAssessment:
    """Scored merge complexity with advice."""
    score: float
    category: ComplexityCategory
    factors: ComplexityFactors
    recommendations: List[str] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "ComplexityAssessment":
        return cls(score=0, category=ComplexityCategory.TRIVIAL, factors=ComplexityFactors())


@dataclass
class ConflictAnalysis:
    """Predicted merge conflicts between two refs."""
    has_conflicts: bool
    conflicting_files: List[str] = field(default_factory=list)
    severity: ConflictSeverity = ConflictSeverity.LOW
    resolution_suggestions: List[str] = field(default_factory=list)


@dataclass
class ComparisonSummary:
    """Aggregate counts over the compared files."""
    total_files: int = 0
    total_additions: int = 0
    total_deletions: int = 0
    net_change: int = 0
    binary_files: int = 0
    affected_directories: List[str] = field(default_factory=list)
    language_breakdown: Dict[str, int] = field(default_factory=dict)


@dataclass
class BranchComparison:
    """Result of comparing a source branch against a target branch."""
    source_branch: str
    target_branch: str
    common_ancestor: Optional[str] = None
    ahead: int = 0
    behind: int = 0
    files: List[FileDiff] = field(default_factory=list)
    summary: ComparisonSummary = field(default_factory=ComparisonSummary)
    complexity: ComplexityAssessment = field(default_factory=ComplexityAssessment.empty)
    conflicts: Optional[ConflictAnalysis] = None
    error: Optional[str] = None  # Set when the comparison degraded

    @property
    def diverged(self) -> bool:
        return self.ahead > 0 and self.behind > 0
