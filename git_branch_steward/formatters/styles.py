"""Rich styles and labels for comparison and cleanup values."""

from git_branch_steward.models.comparison import ComplexityCategory, ConflictSeverity, FileStatus
from git_branch_steward.models.stale import BranchTracking, RiskLevel

RISK_STYLES = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
}

CATEGORY_STYLES = {
    ComplexityCategory.TRIVIAL: "green",
    ComplexityCategory.MODERATE: "yellow",
    ComplexityCategory.HIGH_RISK: "bold red",
}

SEVERITY_STYLES = {
    ConflictSeverity.LOW: "green",
    ConflictSeverity.MEDIUM: "yellow",
    ConflictSeverity.HIGH: "red",
    ConflictSeverity.CRITICAL: "bold red",
}

FILE_STATUS_MARKERS = {
    FileStatus.ADDED: "[green]A[/green]",
    FileStatus.MODIFIED: "[yellow]M[/yellow]",
    FileStatus.DELETED: "[red]D[/red]",
    FileStatus.RENAMED: "[cyan]R[/cyan]",
}


def format_risk(risk: RiskLevel) -> str:
    style = RISK_STYLES[risk]
    return f"[{style}]{risk.value}[/{style}]"


def format_category(category: ComplexityCategory) -> str:
    style = CATEGORY_STYLES[category]
    return f"[{style}]{category.value}[/{style}]"


def format_severity(severity: ConflictSeverity) -> str:
    style = SEVERITY_STYLES[severity]
    return f"[{style}]{severity.value}[/{style}]"


def format_file_status(status: FileStatus) -> str:
    return FILE_STATUS_MARKERS.get(status, status.value)


def format_tracking(tracking: BranchTracking) -> str:
    """
    Format remote tracking as a compact indicator.

    ✗ = local only, ✓ = has remote, ? = unknown, ↑n/↓n = unpushed/unpulled commits
    """
    if not tracking.has_remote:
        return "✗"
    if not tracking.known:
        return "✓ ?"
    parts = ["✓"]
    if tracking.ahead:
        parts.append(f"↑{tracking.ahead}")
    if tracking.behind:
        parts.append(f"↓{tracking.behind}")
    return " ".join(parts)
