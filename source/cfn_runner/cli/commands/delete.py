# ABOUTME: Delete command for removing a CloudFormation stack
# ABOUTME: Confirms, issues the delete and follows the stack until it is gone

"""Delete command - Remove a deployed stack."""

import questionary
from botocore.exceptions import BotoCoreError
from cleo.commands.command import Command
from cleo.helpers import argument, option
from rich.console import Console

from cfn_runner.classifier import is_failed_status
from cfn_runner.cli.utils.cloudformation import DEFAULT_POLL_INTERVAL
from cfn_runner.cli.utils.settings import SettingsError, resolve_settings
from cfn_runner.config import Config
from cfn_runner.models import AwsCredentials, StackRequest
from cfn_runner.runner import StackRunner


class DeleteCommand(Command):
    name = "delete"
    description = "Delete a CloudFormation stack"

    arguments = [argument("stack", description="Name of the stack to delete", optional=True)]

    options = [
        option("region", "r", description="AWS region of the stack", flag=False),
        option("profile", description="Configuration profile to use", flag=False),
        option("aws-profile", description="AWS credentials profile to use", flag=False),
        option("force", "f", description="Skip confirmation prompt", flag=True),
    ]

    def handle(self) -> int:
        """Execute the delete command."""
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

        if not self.option("force"):
            confirmed = questionary.confirm(
                f"Delete stack {settings.stack_name} in {settings.region}? This cannot be undone.", default=False
            ).ask()
            if not confirmed:
                console.print("\n[yellow]Deletion cancelled.[/yellow]")
                return 0

        request = StackRequest(
            name=settings.stack_name,
            region=settings.region,
            credentials=AwsCredentials(profile_name=settings.aws_profile),
        )
        poll_interval = settings.profile.poll_interval if settings.profile else DEFAULT_POLL_INTERVAL

        try:
            runner = StackRunner.for_request(request, console=console, poll_interval=poll_interval, show_spinner=True)
        except BotoCoreError as e:
            console.print(f"[red]AWS configuration error: {e}[/red]")
            return 1
        result = runner.delete(request)

        if not result.success:
            console.print(f"\n[red]Failed to delete stack {request.name}.[/red]")
            return 1

        if is_failed_status(result.final_status):
            console.print(f"\n[red]Stack {request.name} ended in {result.final_status}.[/red]")
            return 1

        console.print(f"\n[green]✓ Stack {request.name} deleted.[/green]")
        return 0
