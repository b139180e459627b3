"""Gated, sequential execution of cleanup plans"""
from typing import List, Optional

from git_branch_steward.config import CleanupOptions
from git_branch_steward.exceptions import CriticalSafetyCheckError, GitOperationError
from git_branch_steward.logging_config import get_logger
from git_branch_steward.models.stale import CleanupOperation, CleanupPlan, CleanupResult, OperationType
from git_branch_steward.services.git import VersionControlGateway

logger = get_logger(__name__)

DRY_RUN_MARKER = "[DRY RUN]"
ARCHIVE_TAG_PREFIX = "archive"


class CleanupExecutor:
    """Runs cleanup operations one at a time in plan order."""

    def __init__(self, gateway: VersionControlGateway):
        self.gateway = gateway

    def execute_cleanup_plan(
        self, plan: CleanupPlan, options: Optional[CleanupOptions] = None
    ) -> List[CleanupResult]:
        """Execute a cleanup plan.

        Raises:
            CriticalSafetyCheckError: A critical safety check failed and
                options.force is not set. No operation has run.
        """
        options = options or CleanupOptions()
        failed = plan.failed_critical_checks
        if failed:
            if not options.force:
                raise CriticalSafetyCheckError(failed)
            logger.warning(
                f"Proceeding despite failed critical checks: {', '.join(c.name for c in failed)}"
            )

        results = []
        for operation in plan.operations:
            result = self._execute_operation(operation, options)
            if result.success:
                logger.info(f"{operation.type.value} {operation.branch_name}: done")
            else:
                logger.error(result.error)
            results.append(result)
        return results

    def _execute_operation(self, operation: CleanupOperation, options: CleanupOptions) -> CleanupResult:
        result = CleanupResult(
            branch_name=operation.branch_name,
            operation_type=operation.type,
            success=False,
        )

        if operation.dry_run:
            result.actions_taken = self._dry_run_actions(operation, options)
            result.success = True
            return result

        try:
            if options.create_backups:
                result.backup_ref = self._create_backup(operation)
                result.actions_taken.append(f"Created backup {result.backup_ref}")

            if operation.type == OperationType.DELETE_LOCAL:
                self.gateway.delete_local_branch(operation.branch_name)
                result.actions_taken.append(f"Deleted local branch {operation.branch_name}")
            elif operation.type == OperationType.DELETE_REMOTE:
                self.gateway.push_delete_remote(operation.remote_name, operation.branch_name)
                result.actions_taken.append(
                    f"Deleted remote branch {operation.remote_name}/{operation.branch_name}"
                )
            elif operation.type == OperationType.ARCHIVE:
                tag_name = f"{ARCHIVE_TAG_PREFIX}/{operation.branch_name}"
                self.gateway.create_tag(tag_name, self._tip(operation.branch_name))
                result.actions_taken.append(f"Created tag {tag_name}")
                self.gateway.delete_local_branch(operation.branch_name)
                result.actions_taken.append(f"Deleted local branch {operation.branch_name}")

            result.success = True
        except Exception as e:
            result.error = (
                f"Failed to {operation.type.value} branch '{operation.branch_name}': {e}"
            )
        return result

    def _dry_run_actions(self, operation: CleanupOperation, options: CleanupOptions) -> List[str]:
        name = operation.branch_name
        actions = []
        if options.create_backups:
            actions.append(f"{DRY_RUN_MARKER} Would create backup of {self._backup_source(operation)}")

        if operation.type == OperationType.DELETE_LOCAL:
            actions.append(f"{DRY_RUN_MARKER} Would delete local branch {name}")
        elif operation.type == OperationType.DELETE_REMOTE:
            actions.append(f"{DRY_RUN_MARKER} Would delete remote branch {operation.remote_name}/{name}")
        elif operation.type == OperationType.ARCHIVE:
            actions.append(f"{DRY_RUN_MARKER} Would tag {name} as {ARCHIVE_TAG_PREFIX}/{name}")
            actions.append(f"{DRY_RUN_MARKER} Would delete local branch {name}")
        return actions

    def _tip(self, branch_name: str) -> str:
        latest = self.gateway.log(branch_name, limit=1).latest
        if latest is None:
            raise GitOperationError("resolve_tip", branch_name, "Branch has no commits")
        return latest.hash

    def _backup_source(self, operation: CleanupOperation) -> str:
        # Remote deletes back up the remote-tracking tip
        if operation.type == OperationType.DELETE_REMOTE:
            return f"{operation.remote_name}/{operation.branch_name}"
        return operation.branch_name

    def _create_backup(self, operation: CleanupOperation) -> str:
        tip = self._tip(self._backup_source(operation))
        return self.gateway.create_backup_ref(operation.branch_name, tip)
