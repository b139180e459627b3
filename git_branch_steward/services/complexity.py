"""Merge complexity and conflict severity scoring.

Everything here is a pure function over explicit inputs so the policy can be
tuned and tested without touching git.
"""

from typing import List, Optional

from git_branch_steward.config import ComplexityThresholds
from git_branch_steward.models.comparison import (
    ComplexityAssessment,
    ComplexityCategory,
    ComplexityFactors,
    ConflictSeverity,
)

DEFAULT_THRESHOLDS = ComplexityThresholds()


def score_complexity(factors: ComplexityFactors, thresholds: ComplexityThresholds = DEFAULT_THRESHOLDS) -> float:
    """Weighted sum of the complexity factors, capped at thresholds.max_score.

    Non-decreasing in every factor (the time span counts by magnitude).
    """
    raw = (
        factors.files_changed * thresholds.files_weight
        + factors.lines_changed * thresholds.lines_weight
        + factors.author_diversity * thresholds.author_weight
        + factors.binary_files * thresholds.binary_weight
        + abs(factors.time_span_days) * thresholds.time_span_weight
        + factors.commit_distance * thresholds.commit_distance_weight
    )
    return round(min(thresholds.max_score, raw), 1)


def categorize_score(score: float, thresholds: ComplexityThresholds = DEFAULT_THRESHOLDS) -> ComplexityCategory:
    if score < thresholds.trivial_below:
        return ComplexityCategory.TRIVIAL
    if score < thresholds.high_risk_from:
        return ComplexityCategory.MODERATE
    return ComplexityCategory.HIGH_RISK


def complexity_recommendations(
    factors: ComplexityFactors,
    category: ComplexityCategory,
    thresholds: ComplexityThresholds = DEFAULT_THRESHOLDS,
) -> List[str]:
    """One recommendation per breached factor limit, plus category advice."""
    recommendations = []

    if category == ComplexityCategory.HIGH_RISK:
        recommendations.append("High-risk merge - consider breaking into smaller merges")
        recommendations.append("Extensive testing required before production deployment")

    if factors.files_changed > thresholds.max_files_changed:
        recommendations.append(
            f"Large number of files changed ({factors.files_changed}) - review impact carefully"
        )
    if factors.lines_changed > thresholds.max_lines_changed:
        recommendations.append(
            f"High line churn ({factors.lines_changed} lines changed) - split the review"
        )
    if factors.author_diversity > thresholds.max_authors:
        recommendations.append(
            f"Multiple authors involved ({factors.author_diversity}) - coordinate with team"
        )
    if factors.binary_files > thresholds.max_binary_files:
        recommendations.append(
            f"Binary files detected ({factors.binary_files}) - verify compatibility"
        )
    if abs(factors.time_span_days) > thresholds.max_time_span_days:
        recommendations.append(
            f"Long-lived divergence ({abs(factors.time_span_days)} days between tips) - "
            "check for stale dependencies"
        )
    if factors.commit_distance > thresholds.max_commit_distance:
        recommendations.append(
            f"Branches are {factors.commit_distance} commits apart - consider rebasing first"
        )

    if not recommendations:
        recommendations.append("Merge appears straightforward - proceed with normal testing")

    return recommendations


def assess_complexity(
    factors: ComplexityFactors, thresholds: Optional[ComplexityThresholds] = None
) -> ComplexityAssessment:
    """Score, categorize and advise on a merge described by its factors."""
    thresholds = thresholds or DEFAULT_THRESHOLDS
    score = score_complexity(factors, thresholds)
    category = categorize_score(score, thresholds)
    return ComplexityAssessment(
        score=score,
        category=category,
        factors=factors,
        recommendations=complexity_recommendations(factors, category, thresholds),
    )


def conflict_severity(conflict_count: int) -> ConflictSeverity:
    if conflict_count == 0:
        return ConflictSeverity.LOW
    if conflict_count <= 3:
        return ConflictSeverity.MEDIUM
    if conflict_count <= 10:
        return ConflictSeverity.HIGH
    return ConflictSeverity.CRITICAL


def conflict_suggestions(conflicting_files: List[str], severity: ConflictSeverity) -> List[str]:
    if not conflicting_files:
        return []

    suggestions = []
    if severity == ConflictSeverity.CRITICAL:
        suggestions.append("Consider breaking this merge into smaller, incremental merges")
        suggestions.append("Review conflicts with team members before proceeding")
    if len(conflicting_files) > 5:
        suggestions.append("Use a visual merge tool for easier conflict resolution")
    suggestions.append("Test thoroughly after resolving conflicts")
    suggestions.append("Consider creating a backup branch before merging")
    return suggestions
