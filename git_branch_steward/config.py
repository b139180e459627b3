"""Configuration handling for git-branch-steward"""

import re
from dataclasses import dataclass, field, fields, asdict
from typing import List, Optional


class _ConfigMixin:
    """Dictionary-style helpers shared by the option dataclasses."""

    def to_dict(self) -> dict:
        """Convert config to a plain dictionary."""
        return asdict(self)

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict):
        """Create a config object from a dictionary, ignoring unknown keys."""
        known_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)


@dataclass
class ComparisonOptions(_ConfigMixin):
    """Options controlling a branch comparison."""

    include_context: int = 3  # Lines of context around changes
    ignore_whitespace: bool = False
    detect_renames: bool = True
    max_files: int = 100  # Limit for performance
    conflict_analysis: bool = False
    complexity_analysis: bool = True
    workers: Optional[int] = None  # None = auto-detect

    def __post_init__(self):
        if self.include_context < 0:
            raise ValueError(f"include_context cannot be negative, got {self.include_context}")
        if self.max_files <= 0:
            raise ValueError(f"max_files must be positive, got {self.max_files}")
        if self.workers is not None and self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")


@dataclass
class ComplexityThresholds(_ConfigMixin):
    """Tunable weights and limits for merge complexity scoring."""

    # Score weights
    files_weight: float = 2.0
    lines_weight: float = 0.05
    author_weight: float = 10.0
    binary_weight: float = 5.0
    time_span_weight: float = 0.1
    commit_distance_weight: float = 0.5
    max_score: float = 100.0

    # Category boundaries (score < trivial_below is trivial, < high_risk_from is moderate)
    trivial_below: float = 20.0
    high_risk_from: float = 60.0

    # Per-factor limits that trigger a recommendation when exceeded
    max_files_changed: int = 50
    max_lines_changed: int = 1000
    max_authors: int = 5
    max_binary_files: int = 0
    max_time_span_days: int = 30
    max_commit_distance: int = 100

    def __post_init__(self):
        if not 0 < self.trivial_below < self.high_risk_from:
            raise ValueError(
                "category boundaries must satisfy 0 < trivial_below < high_risk_from, "
                f"got {self.trivial_below} and {self.high_risk_from}"
            )
        weights = (
            self.files_weight,
            self.lines_weight,
            self.author_weight,
            self.binary_weight,
            self.time_span_weight,
            self.commit_distance_weight,
        )
        if any(weight < 0 for weight in weights):
            raise ValueError("complexity weights cannot be negative")


@dataclass
class StaleBranchConfig(_ConfigMixin):
    """Configuration for stale branch detection with validation."""

    stale_days_threshold: int = 30
    very_stale_threshold: int = 90
    excluded_branches: List[str] = field(
        default_factory=lambda: ["main", "master", "develop", "development", "staging", "production"]
    )
    exclude_patterns: List[str] = field(default_factory=lambda: ["^release/", "^hotfix/"])
    check_pull_requests: bool = False
    check_protected_branches: bool = False
    minimum_commits: int = 1
    remote_name: str = "origin"

    # Concurrency caps for read-only analysis and external enrichment
    workers: Optional[int] = None  # None = auto-detect
    enrichment_batch_size: int = 5
    enrichment_batch_delay: float = 0.1

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_thresholds()
        self._validate_patterns()
        self._validate_concurrency()
        if self.minimum_commits < 0:
            raise ValueError(f"minimum_commits cannot be negative, got {self.minimum_commits}")
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()

    def _validate_thresholds(self):
        if self.stale_days_threshold < 0:
            raise ValueError(
                f"stale_days_threshold cannot be negative, got {self.stale_days_threshold}"
            )
        if self.very_stale_threshold < self.stale_days_threshold:
            raise ValueError(
                "very_stale_threshold must be >= stale_days_threshold, "
                f"got {self.very_stale_threshold} < {self.stale_days_threshold}"
            )

    def _validate_patterns(self):
        if not isinstance(self.excluded_branches, list):
            raise ValueError("excluded_branches must be a list")
        if not isinstance(self.exclude_patterns, list):
            raise ValueError("exclude_patterns must be a list")
        for pattern in self.exclude_patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid exclude pattern '{pattern}': {e}")

    def _validate_concurrency(self):
        if self.workers is not None and self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")
        if self.enrichment_batch_size <= 0:
            raise ValueError(
                f"enrichment_batch_size must be positive, got {self.enrichment_batch_size}"
            )
        if self.enrichment_batch_delay < 0:
            raise ValueError(
                f"enrichment_batch_delay cannot be negative, got {self.enrichment_batch_delay}"
            )

    @property
    def enrichment_enabled(self) -> bool:
        return self.check_pull_requests or self.check_protected_branches


@dataclass
class CleanupOptions(_ConfigMixin):
    """Options for planning and executing a stale branch cleanup."""

    dry_run: bool = True
    create_backups: bool = True
    delete_remote: bool = False
    archive: bool = False
    force: bool = False
    remote_name: str = "origin"
    seconds_per_operation: int = 2

    def __post_init__(self):
        if self.seconds_per_operation < 0:
            raise ValueError(
                f"seconds_per_operation cannot be negative, got {self.seconds_per_operation}"
            )
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()
