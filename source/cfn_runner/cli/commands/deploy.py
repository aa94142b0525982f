# ABOUTME: Deploy command that creates or updates a CloudFormation stack
# ABOUTME: Streams stack events and reports rollback and bucket cleanup results

"""Deploy command - Create or update a stack and follow it to completion."""

from botocore.exceptions import BotoCoreError
from cleo.commands.command import Command
from cleo.helpers import argument, option
from rich.console import Console
from rich.panel import Panel

from cfn_runner.classifier import is_failed_status
from cfn_runner.cli.utils.cloudformation import DEFAULT_POLL_INTERVAL
from cfn_runner.cli.utils.settings import SettingsError, load_parameters_file, parse_parameters, resolve_settings
from cfn_runner.config import Config, Profile
from cfn_runner.models import DEFAULT_CAPABILITIES, AwsCredentials, StackAction, StackRequest
from cfn_runner.runner import StackRunner


class DeployCommand(Command):
    name = "deploy"
    description = "Create or update a CloudFormation stack"

    arguments = [argument("stack", description="Name of the stack to deploy", optional=True)]

    options = [
        option("template", "t", description="Template file path or S3/HTTPS URL", flag=False),
        option("region", "r", description="AWS region to deploy into", flag=False),
        option("parameter", "p", description="Template parameter as KEY=VALUE", flag=False, multiple=True),
        option("parameters-file", description="YAML or JSON file with template parameters", flag=False),
        option("profile", description="Configuration profile to use", flag=False),
        option("aws-profile", description="AWS credentials profile to use", flag=False),
        option("poll-interval", description="Seconds between stack event polls", flag=False),
        option("no-bucket-cleanup", description="Skip deleting empty buckets named after the stack", flag=True),
        option("save-profile", description="Save these settings as a named profile", flag=False),
    ]

    def handle(self) -> int:
        """Execute the deploy command."""
        console = Console()

        try:
            settings = resolve_settings(
                Config.load(),
                self.argument("stack"),
                profile_name=self.option("profile"),
                region=self.option("region"),
                aws_profile=self.option("aws-profile"),
                template=self.option("template"),
            )
            if self.option("parameters-file"):
                settings.parameters.update(load_parameters_file(self.option("parameters-file")))
            settings.parameters.update(parse_parameters(self.option("parameter")))
            poll_interval = self._poll_interval(settings.profile)
        except SettingsError as e:
            console.print(f"[red]{e}[/red]")
            return 1

        cleanup_buckets = not self.option("no-bucket-cleanup") and (
            settings.profile.cleanup_buckets if settings.profile else True
        )

        request = StackRequest(
            name=settings.stack_name,
            template=settings.template,
            region=settings.region,
            parameters=settings.parameters,
            credentials=AwsCredentials(profile_name=settings.aws_profile),
            capabilities=tuple(settings.profile.capabilities) if settings.profile else DEFAULT_CAPABILITIES,
            tags=dict(settings.profile.tags) if settings.profile else {},
        )

        if self.option("save-profile"):
            result = self._save_profile(request, poll_interval, cleanup_buckets, console)
            if result != 0:
                return result

        console.print(
            Panel.fit(
                f"[bold cyan]Deploying stack {request.name}[/bold cyan]\n\nRegion: {request.region}",
                border_style="cyan",
                padding=(1, 2),
            )
        )

        try:
            runner = StackRunner.for_request(
                request,
                console=console,
                poll_interval=poll_interval,
                cleanup_buckets=cleanup_buckets,
                show_spinner=True,
            )
        except BotoCoreError as e:
            console.print(f"[red]AWS configuration error: {e}[/red]")
            return 1
        result = runner.deploy(request)

        if not result.success:
            console.print(f"\n[red]Deployment of {request.name} failed.[/red]")
            return 1

        if result.rollback_deleted:
            console.print(
                f"\n[yellow]Stack {request.name} failed to create and was rolled back and deleted.[/yellow]"
            )
            return 1

        if result.buckets_deleted:
            console.print(f"[dim]Removed {len(result.buckets_deleted)} empty orphan bucket(s).[/dim]")

        if result.no_changes:
            console.print(f"\n[green]✓ Stack {request.name} is already up to date.[/green]")
            return 0

        if is_failed_status(result.final_status):
            console.print(f"\n[red]Stack {request.name} ended in {result.final_status}.[/red]")
            return 1

        if result.action == StackAction.CREATE:
            console.print(f"\n[green]✓ Stack {request.name} created.[/green]")
        else:
            console.print(f"\n[green]✓ Stack {request.name} updated.[/green]")
        return 0

    def _poll_interval(self, profile: Profile | None) -> float:
        value = self.option("poll-interval")
        if value is None:
            return profile.poll_interval if profile else DEFAULT_POLL_INTERVAL
        try:
            interval = float(value)
        except ValueError:
            raise SettingsError(f"Invalid poll interval: {value}") from None
        if interval <= 0:
            raise SettingsError("Poll interval must be positive")
        return interval

    def _save_profile(self, request: StackRequest, poll_interval: float, cleanup_buckets: bool, console: Console) -> int:
        config = Config.load()
        profile = Profile(
            name=self.option("save-profile"),
            stack_name=request.name,
            aws_region=request.region,
            template=request.template,
            parameters=dict(request.parameters),
            tags=dict(request.tags),
            aws_profile=request.credentials.profile_name,
            capabilities=list(request.capabilities),
            poll_interval=poll_interval,
            cleanup_buckets=cleanup_buckets,
        )
        try:
            config.save_profile(profile)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            return 1
        console.print(f"[dim]Saved profile: {profile.name}[/dim]")
        return 0
