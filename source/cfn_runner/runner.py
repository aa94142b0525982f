# ABOUTME: Top-level deployment flow for a single CloudFormation stack
# ABOUTME: Chooses create vs update, monitors the result and runs cleanup

"""Stack deployment orchestration."""

from rich.console import Console

from cfn_runner.classifier import is_failed_status
from cfn_runner.cleanup import CleanupCoordinator
from cfn_runner.cli.utils.aws import create_session
from cfn_runner.cli.utils.cf_exceptions import CloudFormationError, NoUpdatesError, StackNotFoundError
from cfn_runner.cli.utils.cloudformation import DEFAULT_POLL_INTERVAL, CloudFormationManager
from cfn_runner.cli.utils.storage import ObjectStorage
from cfn_runner.models import DeploymentResult, StackAction, StackRequest, StackSummary, TerminalOutcome
from cfn_runner.monitor import StackMonitor
from cfn_runner.output import StatusOutput


class StackRunner:
    """Deploy, update or delete one stack and follow it to completion.

    Each step waits on the previous one: probe, action, monitor, cleanup.
    """

    def __init__(
        self,
        cf_manager,
        storage,
        output: StatusOutput | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        cleanup_buckets: bool = True,
        show_spinner: bool = False,
    ):
        self.cf_manager = cf_manager
        self.storage = storage
        self.output = output or StatusOutput()
        self.cleanup_buckets = cleanup_buckets
        self.monitor = StackMonitor(cf_manager, self.output, poll_interval=poll_interval, show_spinner=show_spinner)
        self.cleanup = CleanupCoordinator(cf_manager, storage, self.monitor, self.output)

    @classmethod
    def for_request(cls, request: StackRequest, console: Console | None = None, **kwargs) -> "StackRunner":
        """Build a runner whose AWS clients use the request's credentials and region."""
        session = create_session(request.credentials, request.region)
        return cls(
            CloudFormationManager(region=request.region, session=session),
            ObjectStorage(region=request.region, session=session),
            StatusOutput(console),
            **kwargs,
        )

    def deploy(self, request: StackRequest) -> DeploymentResult:
        """Update the stack if it exists, otherwise create it."""
        try:
            stacks = self.cf_manager.describe_stacks(request.name)
        except StackNotFoundError:
            return self.create(request)
        except CloudFormationError as e:
            self.output.error(f"Error checking stack {request.name}: {e.message}")
            return DeploymentResult(action=None, success=False, error=e)

        existing = stacks[0] if len(stacks) == 1 else None
        return self.update(request, existing)

    def create(self, request: StackRequest) -> DeploymentResult:
        self.output.info("Creating the stack...")
        try:
            self.cf_manager.create_stack(request)
        except CloudFormationError as e:
            self.output.error(f"Error creating stack: {e.message}")
            return DeploymentResult(action=StackAction.CREATE, success=False, error=e)

        outcome = self.monitor.monitor(request.name, StackAction.CREATE)
        if not outcome.success:
            return self._result(outcome)

        rolled_back = outcome.needs_cleanup_delete
        cleaned = self.cleanup.handle_outcome(request, outcome)
        if rolled_back and cleaned.success and is_failed_status(cleaned.final_status):
            self.output.error(f"Rolled back stack {request.name} could not be deleted: {cleaned.final_status}")
            return DeploymentResult(action=StackAction.CREATE, success=False, final_status=cleaned.final_status)
        if not cleaned.success:
            return DeploymentResult(
                action=StackAction.CREATE,
                success=False,
                error=cleaned.error,
                final_status=cleaned.final_status,
                rollback_deleted=False,
            )

        buckets_deleted = []
        if self.cleanup_buckets:
            buckets_deleted = self.cleanup.delete_orphan_buckets(request.name).deleted

        return DeploymentResult(
            action=StackAction.CREATE,
            success=True,
            final_status=outcome.final_status,
            rollback_deleted=rolled_back,
            buckets_deleted=buckets_deleted,
        )

    def update(self, request: StackRequest, existing: StackSummary | None = None) -> DeploymentResult:
        self.output.info("Updating the stack...")
        try:
            self.cf_manager.update_stack(request, existing)
        except NoUpdatesError:
            self.output.info("No resource updates are to be performed.")
            return DeploymentResult(
                action=StackAction.UPDATE,
                success=True,
                no_changes=True,
                final_status=existing.status if existing else None,
            )
        except CloudFormationError as e:
            self.output.error(f"Error updating stack: {e.message}")
            return DeploymentResult(action=StackAction.UPDATE, success=False, error=e)

        return self._result(self.monitor.monitor(request.name, StackAction.UPDATE))

    def delete(self, request: StackRequest) -> DeploymentResult:
        """Delete the stack. A stack that is already gone counts as deleted."""
        self.output.info("Deleting the stack...")
        try:
            self.cf_manager.delete_stack(request.name)
        except StackNotFoundError:
            self.output.success("Deletion complete.")
            return DeploymentResult(action=StackAction.DELETE, success=True, final_status="DELETE_COMPLETE")
        except CloudFormationError as e:
            self.output.error(f"Error deleting stack: {e.message}")
            return DeploymentResult(action=StackAction.DELETE, success=False, error=e)

        return self._result(self.monitor.monitor(request.name, StackAction.DELETE))

    @staticmethod
    def _result(outcome: TerminalOutcome) -> DeploymentResult:
        return DeploymentResult(
            action=outcome.action,
            success=outcome.success,
            error=outcome.error,
            final_status=outcome.final_status,
            no_changes=outcome.no_changes,
        )
