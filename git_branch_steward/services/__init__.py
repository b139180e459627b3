"""Services for git-branch-steward."""
