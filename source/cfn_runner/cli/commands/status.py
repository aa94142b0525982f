# ABOUTME: Status command for inspecting a deployed CloudFormation stack
# ABOUTME: Shows stack status, parameters, outputs and failed resources

"""Status command - Show the current state of a stack."""

from botocore.exceptions import BotoCoreError
from cleo.commands.command import Command
from cleo.helpers import argument, option
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cfn_runner.classifier import STATUS_CLASSIFICATIONS
from cfn_runner.cli.utils.aws import create_session
from cfn_runner.cli.utils.cf_exceptions import CloudFormationError, StackNotFoundError
from cfn_runner.cli.utils.cloudformation import CloudFormationManager
from cfn_runner.cli.utils.settings import SettingsError, resolve_settings
from cfn_runner.config import Config
from cfn_runner.models import AwsCredentials


class StatusCommand(Command):
    name = "status"
    description = "Show the status of a CloudFormation stack"

    arguments = [argument("stack", description="Name of the stack to inspect", optional=True)]

    options = [
        option("region", "r", description="AWS region of the stack", flag=False),
        option("profile", description="Configuration profile to use", flag=False),
        option("aws-profile", description="AWS credentials profile to use", flag=False),
    ]

    def handle(self) -> int:
        """Execute the status command."""
        console = Console()

        try:
            settings = resolve_settings(
                Config.load(),
                self.argument("stack"),
                profile_name=self.option("profile"),
                region=self.option("region"),
                aws_profile=self.option("aws-profile"),
            )
        except SettingsError as e:
            console.print(f"[red]{e}[/red]")
            return 1

        try:
            session = create_session(AwsCredentials(profile_name=settings.aws_profile), settings.region)
            cf_manager = CloudFormationManager(region=settings.region, session=session)
        except BotoCoreError as e:
            console.print(f"[red]AWS configuration error: {e}[/red]")
            return 2

        try:
            stacks = cf_manager.describe_stacks(settings.stack_name)
        except StackNotFoundError:
            console.print(f"[yellow]Stack {settings.stack_name} not found in {settings.region}[/yellow]")
            return 1
        except CloudFormationError as e:
            console.print(f"[red]Error describing stack: {escape(e.message)}[/red]")
            return 2

        for stack in stacks:
            classification = STATUS_CLASSIFICATIONS.get(stack.status)
            style = classification.style if classification else "white"

            table = Table(title=stack.name, box=box.SIMPLE, show_header=False)
            table.add_column("Field", style="cyan")
            table.add_column("Value")
            table.add_row("Status", f"[{style}]{stack.status}[/{style}]")
            if stack.status_reason:
                table.add_row("Reason", escape(stack.status_reason))
            for key, value in sorted(stack.parameters.items()):
                table.add_row(f"Parameter {key}", escape(value))
            for key, value in sorted(stack.outputs.items()):
                table.add_row(f"Output {key}", escape(value))
            console.print(table)

            if classification and classification.failed:
                self._show_failed_resources(cf_manager, stack.name, console)

        return 0

    def _show_failed_resources(self, cf_manager: CloudFormationManager, stack_name: str, console: Console) -> None:
        try:
            failed = cf_manager.get_failed_resources(stack_name)
        except CloudFormationError as e:
            console.print(f"[yellow]Could not list failed resources: {escape(e.message)}[/yellow]")
            return

        if not failed:
            return

        table = Table(title="Failed Resources", box=box.SIMPLE)
        table.add_column("Resource", style="cyan")
        table.add_column("Type")
        table.add_column("Status", style="red")
        table.add_column("Reason")
        for r in failed:
            table.add_row(r["logical_id"], r["resource_type"], r["status"], escape(r["status_reason"]))
        console.print(table)
