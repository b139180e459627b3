"""Tests for display formatters"""
from git_branch_steward.formatters import format_tracking
from git_branch_steward.models.stale import BranchTracking


class TestFormatTracking:
    """Test the compact tracking indicator."""

    def test_local_only(self):
        assert format_tracking(BranchTracking()) == "✗"

    def test_ahead_and_behind(self):
        tracking = BranchTracking(has_remote=True, remote_name="origin", ahead=2, behind=1)

        assert format_tracking(tracking) == "✓ ↑2 ↓1"

    def test_unknown_state(self):
        tracking = BranchTracking(has_remote=True, remote_name="origin", known=False)

        assert format_tracking(tracking) == "✓ ?"
