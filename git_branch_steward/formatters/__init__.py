"""Formatting utilities for git-branch-steward.

- date: Date, age and time span formatting
- styles: Rich markup for risks, categories, conflict severities and file statuses
"""

from .date import format_date, format_age, format_time_span
from .styles import (
    format_risk,
    format_category,
    format_severity,
    format_file_status,
    format_tracking,
)

__all__ = [
    # Date
    "format_date",
    "format_age",
    "format_time_span",
    # Styles
    "format_risk",
    "format_category",
    "format_severity",
    "format_file_status",
    "format_tracking",
]
