"""Tests for merge complexity and conflict severity scoring"""
import itertools

import pytest

from git_branch_steward.config import ComplexityThresholds
from git_branch_steward.models.comparison import ComplexityCategory, ComplexityFactors, ConflictSeverity
from git_branch_steward.services.complexity import (
    assess_complexity,
    categorize_score,
    conflict_severity,
    conflict_suggestions,
    score_complexity,
)


class TestScoreComplexity:
    """Test the weighted complexity score."""

    def test_zero_factors(self):
        assessment = assess_complexity(ComplexityFactors())

        assert assessment.score == 0
        assert assessment.category == ComplexityCategory.TRIVIAL
        assert assessment.recommendations == [
            "Merge appears straightforward - proceed with normal testing"
        ]

    def test_weighted_sum(self):
        factors = ComplexityFactors(
            files_changed=3, lines_changed=100, author_diversity=2, commit_distance=4
        )
        # 3*2 + 100*0.05 + 2*10 + 4*0.5
        assert score_complexity(factors) == 33.0

    def test_capped_at_max_score(self):
        assessment = assess_complexity(ComplexityFactors(files_changed=500, lines_changed=100000))

        assert assessment.score == 100
        assert assessment.category == ComplexityCategory.HIGH_RISK

    def test_time_span_counts_by_magnitude(self):
        forward = score_complexity(ComplexityFactors(time_span_days=40))
        backward = score_complexity(ComplexityFactors(time_span_days=-40))
        assert forward == backward == 4.0

    def test_monotonic_in_each_factor(self):
        base = ComplexityFactors(files_changed=2, lines_changed=50, author_diversity=1)
        base_score = score_complexity(base)
        for field_name in (
            "files_changed",
            "lines_changed",
            "author_diversity",
            "binary_files",
            "time_span_days",
            "commit_distance",
        ):
            bigger = ComplexityFactors(**{**base.__dict__, field_name: getattr(base, field_name) + 10})
            assert score_complexity(bigger) >= base_score, field_name

    def test_custom_weights(self):
        thresholds = ComplexityThresholds(files_weight=10.0)
        assert score_complexity(ComplexityFactors(files_changed=3), thresholds) == 30.0


class TestCategorize:
    """Test score to category mapping."""

    @pytest.mark.parametrize(
        "score,expected",
        [
            (0, ComplexityCategory.TRIVIAL),
            (19.9, ComplexityCategory.TRIVIAL),
            (20, ComplexityCategory.MODERATE),
            (59.9, ComplexityCategory.MODERATE),
            (60, ComplexityCategory.HIGH_RISK),
            (100, ComplexityCategory.HIGH_RISK),
        ],
    )
    def test_boundaries(self, score, expected):
        assert categorize_score(score) == expected

    def test_small_single_author_changes_are_trivial(self):
        """At most one file and one author with a low score is always trivial."""
        for files, authors, lines in itertools.product((0, 1), (0, 1), (0, 10, 100)):
            factors = ComplexityFactors(files_changed=files, author_diversity=authors, lines_changed=lines)
            assessment = assess_complexity(factors)
            if assessment.score < 20:
                assert assessment.category == ComplexityCategory.TRIVIAL
            assert assessment.category != ComplexityCategory.HIGH_RISK or assessment.score >= 60


class TestRecommendations:
    """Test complexity recommendations."""

    def test_breached_factors_are_named(self):
        factors = ComplexityFactors(
            files_changed=60,
            lines_changed=1500,
            author_diversity=6,
            binary_files=2,
            time_span_days=-45,
            commit_distance=150,
        )
        recommendations = " ".join(assess_complexity(factors).recommendations)

        assert "files changed (60)" in recommendations
        assert "1500 lines changed" in recommendations
        assert "authors involved (6)" in recommendations
        assert "Binary files detected (2)" in recommendations
        assert "45 days" in recommendations
        assert "150 commits apart" in recommendations

    def test_high_risk_advice(self):
        assessment = assess_complexity(ComplexityFactors(files_changed=40))

        assert assessment.category == ComplexityCategory.HIGH_RISK
        assert any("smaller merges" in r for r in assessment.recommendations)

    def test_no_straightforward_message_when_breached(self):
        recommendations = assess_complexity(ComplexityFactors(binary_files=1)).recommendations

        assert len(recommendations) == 1
        assert "Binary files" in recommendations[0]


class TestConflictSeverity:
    """Test conflict severity grading."""

    @pytest.mark.parametrize(
        "count,expected",
        [
            (0, ConflictSeverity.LOW),
            (1, ConflictSeverity.MEDIUM),
            (3, ConflictSeverity.MEDIUM),
            (4, ConflictSeverity.HIGH),
            (10, ConflictSeverity.HIGH),
            (11, ConflictSeverity.CRITICAL),
        ],
    )
    def test_grades(self, count, expected):
        assert conflict_severity(count) == expected

    def test_no_suggestions_without_conflicts(self):
        assert conflict_suggestions([], ConflictSeverity.LOW) == []

    def test_critical_suggestions(self):
        files = [f"file{i}.py" for i in range(12)]
        suggestions = conflict_suggestions(files, ConflictSeverity.CRITICAL)

        assert any("smaller" in s for s in suggestions)
        assert any("visual merge tool" in s for s in suggestions)
