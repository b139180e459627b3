"""Date and age formatting utilities."""

from datetime import datetime


def format_date(date: datetime) -> str:
    """
    Format a commit date as YYYY-MM-DD.

    Args:
        date: Commit datetime

    Returns:
        Formatted date string
    """
    return date.strftime("%Y-%m-%d")


def format_age(age_days: int) -> str:
    return f"{age_days}d"


def format_time_span(days: int) -> str:
    """
    Describe the signed distance between two branch tips.

    Args:
        days: Source tip minus target tip, in days

    Returns:
        e.g. "source 12d newer", "target 3d newer" or "same day"
    """
    if days > 0:
        return f"source {days}d newer"
    if days < 0:
        return f"target {-days}d newer"
    return "same day"
