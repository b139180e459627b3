"""Data models for git-branch-steward."""
