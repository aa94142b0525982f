# ABOUTME: Watches a stack's event stream until the operation settles
# ABOUTME: Reports each event and decides whether a failed create needs deleting

"""Stack event monitoring."""

from contextlib import nullcontext

from cfn_runner.cli.utils.cf_exceptions import CloudFormationError, StackNotFoundError
from cfn_runner.cli.utils.cloudformation import DEFAULT_POLL_INTERVAL
from cfn_runner.models import StackAction, TerminalOutcome
from cfn_runner.output import StatusOutput


class StackMonitor:
    """Follow one stack operation from its event stream to a terminal outcome."""

    def __init__(
        self,
        cf_manager,
        output: StatusOutput,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        show_spinner: bool = False,
    ):
        self.cf_manager = cf_manager
        self.output = output
        self.poll_interval = poll_interval
        self.show_spinner = show_spinner

    def monitor(self, stack_name: str, action: StackAction) -> TerminalOutcome:
        """Stream events for ``stack_name`` and return how the operation ended.

        An unrecognized resource status raises UnknownStatusError out of this call.
        """
        final_status = None

        with self._spinner(stack_name, action):
            try:
                for event in self.cf_manager.stream_events(stack_name, self.poll_interval):
                    self.output.event(event)
                    if event.is_stack_event:
                        final_status = event.resource_status
            except StackNotFoundError as e:
                if action == StackAction.DELETE:
                    self.output.success("Deletion complete.")
                    return TerminalOutcome(action=action, final_status="DELETE_COMPLETE")
                self.output.error(f"Error monitoring stack: {e.message}")
                return TerminalOutcome(action=action, final_status=final_status, error=e)
            except CloudFormationError as e:
                self.output.error(f"Error monitoring stack: {e.message}")
                return TerminalOutcome(action=action, final_status=final_status, error=e)

        if action != StackAction.CREATE:
            return TerminalOutcome(action=action, final_status=final_status)

        return self._check_failed_create(stack_name, final_status)

    def _check_failed_create(self, stack_name: str, final_status: str | None) -> TerminalOutcome:
        """Look up the stack once more to see whether a failed create left it behind."""
        self.output.info("Starting cleanup...")
        try:
            stacks = self.cf_manager.describe_stacks(stack_name)
        except StackNotFoundError:
            stacks = []
        except CloudFormationError as e:
            self.output.error(f"Error getting stack info for cleanup: {e.message}")
            return TerminalOutcome(action=StackAction.CREATE, final_status=final_status, error=e)

        if len(stacks) != 1:
            self.output.warning("Stack could not be uniquely identified.  Skipping cleanup...")
            return TerminalOutcome(action=StackAction.CREATE, final_status=final_status, cleanup_skipped=True)

        status = stacks[0].status
        return TerminalOutcome(
            action=StackAction.CREATE,
            final_status=status,
            needs_cleanup_delete=status == "ROLLBACK_COMPLETE",
        )

    def _spinner(self, stack_name: str, action: StackAction):
        if not self.show_spinner:
            return nullcontext()
        return self.output.console.status(f"[yellow]{action.value.lower()} {stack_name}...[/yellow]", spinner="dots")
