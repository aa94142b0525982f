# ABOUTME: Post-deployment cleanup for failed creates and orphaned buckets
# ABOUTME: Deletes rolled-back stacks and sweeps empty buckets named after the stack

"""Cleanup after a stack operation reaches a terminal state."""

from concurrent.futures import ThreadPoolExecutor

from cfn_runner.cli.utils.cf_exceptions import CloudFormationError
from cfn_runner.models import BucketCandidate, BucketCleanupReport, StackAction, StackRequest, TerminalOutcome
from cfn_runner.monitor import StackMonitor
from cfn_runner.output import StatusOutput


def _error_message(error: Exception) -> str:
    """Pull the service message out of a botocore error when there is one."""
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        return response.get("Error", {}).get("Message") or str(error)
    return str(error)


class CleanupCoordinator:
    """Rollback cleanup and best-effort orphan bucket sweep."""

    def __init__(self, cf_manager, storage, monitor: StackMonitor, output: StatusOutput, max_workers: int = 8):
        self.cf_manager = cf_manager
        self.storage = storage
        self.monitor = monitor
        self.output = output
        self.max_workers = max_workers

    def handle_outcome(self, request: StackRequest, outcome: TerminalOutcome) -> TerminalOutcome:
        """Delete a stack whose create rolled back, then wait for the delete to finish.

        Outcomes that need no cleanup are returned unchanged. A failure of the
        cleanup delete is returned as a failed outcome.
        """
        if outcome.action != StackAction.CREATE or not outcome.needs_cleanup_delete:
            return outcome

        self.output.warning(f"Stack {request.name} rolled back during creation.")
        self.output.info("Deleting the stack...")
        try:
            self.cf_manager.delete_stack(request.name)
        except CloudFormationError as e:
            self.output.error(f"Error deleting rolled back stack: {e.message}")
            return TerminalOutcome(action=StackAction.DELETE, final_status=outcome.final_status, error=e)

        return self.monitor.monitor(request.name, StackAction.DELETE)

    def delete_orphan_buckets(self, stack_name: str) -> BucketCleanupReport:
        """Delete empty buckets whose name contains the stack name.

        Non-empty buckets are never touched. Each bucket is handled independently,
        and errors are printed rather than raised.
        """
        report = BucketCleanupReport()

        try:
            bucket_names = self.storage.list_buckets()
        except Exception as e:
            self.output.error(f"Error listing buckets: {_error_message(e)}")
            return report

        needle = stack_name.lower()
        matches = [name for name in bucket_names if needle in name.lower()]
        if not matches:
            return report

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(matches))) as executor:
            results = list(executor.map(self._clean_bucket, matches))

        for name, outcome in results:
            getattr(report, outcome).append(name)

        if report.deleted:
            self.output.success(f"Orphan buckets deleted: {', '.join(sorted(report.deleted))}")
        return report

    def _clean_bucket(self, bucket_name: str) -> tuple[str, str]:
        """Evaluate and maybe delete one bucket. Returns (name, report field)."""
        try:
            candidate = BucketCandidate(name=bucket_name, is_empty=self.storage.is_bucket_empty(bucket_name))
        except Exception as e:
            self.output.error(f"Error listing orphan bucket {bucket_name}: {_error_message(e)}")
            return bucket_name, "failed"

        if not candidate.is_empty:
            return bucket_name, "skipped"

        try:
            self.storage.delete_bucket(candidate.name)
        except Exception as e:
            self.output.error(f"Error deleting orphan bucket {bucket_name}: {_error_message(e)}")
            return bucket_name, "failed"

        return bucket_name, "deleted"
