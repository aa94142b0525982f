# ABOUTME: Line-per-event status stream for deployment progress
# ABOUTME: Renders classified events and cleanup messages through rich

"""Status output for stack operations."""

from rich.console import Console
from rich.markup import escape

from cfn_runner.classifier import classify
from cfn_runner.models import ProvisioningEvent

PREFIX = "  | "


class StatusOutput:
    """Writes exactly one line per event or cleanup step to a rich console, whatever its width.

    rich serializes writes internally, so bucket cleanup threads can share one instance.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console(highlight=False)

    def event(self, event: ProvisioningEvent) -> None:
        """Print a classified provisioning event."""
        style = classify(event.resource_status).style
        line = f"{PREFIX}[{style}]{event.resource_status}[/{style}] {escape(event.logical_resource_id)}"
        if event.status_reason:
            line += f" - {escape(event.status_reason)}"
        self._line(line)

    def info(self, message: str) -> None:
        self._line(f"{PREFIX}{escape(message)}")

    def success(self, message: str) -> None:
        self._line(f"{PREFIX}[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        self._line(f"{PREFIX}[yellow]{escape(message)}[/yellow]")

    def error(self, message: str) -> None:
        self._line(f"{PREFIX}[red]{escape(message)}[/red]")

    def _line(self, text: str) -> None:
        # One physical line per message, regardless of console width
        self.console.print(text.replace("\n", " "), soft_wrap=True)
