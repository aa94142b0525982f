# ABOUTME: Context management commands for saved deployment profiles
# ABOUTME: Implements list, use and show subcommands

"""Context command - Manage saved deployment profiles."""

from cleo.commands.command import Command
from cleo.helpers import argument
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cfn_runner.config import Config


class ContextListCommand(Command):
    """List saved profiles with the stack each one deploys."""

    name = "context list"
    description = "List all saved deployment profiles"

    def handle(self) -> int:
        """Execute the context list command."""
        console = Console()
        config = Config.load()
        names = config.list_profiles()

        if not names:
            console.print("\n[yellow]No profiles found.[/yellow]")
            console.print("Save one with [cyan]cfnr deploy <stack> --save-profile <name>[/cyan].\n")
            return 0

        table = Table(box=box.SIMPLE, header_style="bold cyan")
        table.add_column("", width=1)
        table.add_column("Profile", style="cyan", no_wrap=True)
        table.add_column("Stack")
        table.add_column("Region")
        table.add_column("Template")

        for name in names:
            profile = config.get_profile(name)
            marker = "*" if name == config.active_profile else ""
            if profile is None:
                table.add_row(marker, name, "[red]unreadable[/red]", "", "")
                continue
            table.add_row(marker, name, profile.stack_name, profile.aws_region, profile.template or "(previous)")

        console.print(table)
        if config.active_profile:
            console.print(f"Active profile: {config.active_profile}")
        else:
            console.print("[yellow]No active profile. Set one with [cyan]cfnr context use <profile>[/cyan].[/yellow]")
        return 0


class ContextUseCommand(Command):
    """Switch to a different profile."""

    name = "context use"
    description = "Switch the active deployment profile"
    arguments = [argument("profile", description="Name of the profile to activate", optional=False)]

    def handle(self) -> int:
        """Execute the context use command."""
        console = Console()
        profile_name = self.argument("profile")

        try:
            config = Config.load()

            if profile_name not in config.list_profiles():
                console.print(f"\n[red]Error: Profile '{profile_name}' not found.[/red]")
                console.print("\nUse [cyan]cfnr context list[/cyan] to see all profiles.\n")
                return 1

            config.set_active_profile(profile_name)
            console.print(f"\n[green]✓ Switched to profile:[/green] {profile_name}\n")
            return 0

        except Exception as e:
            console.print(f"\n[red]Error: {e}[/red]\n")
            return 1


class ContextShowCommand(Command):
    """Show detailed information about a profile."""

    name = "context show"
    description = "Show the settings stored in a deployment profile"
    arguments = [
        argument("profile", description="Name of the profile to show (default: active profile)", optional=True)
    ]

    def handle(self) -> int:
        """Execute the context show command."""
        console = Console()
        profile_name = self.argument("profile")

        try:
            config = Config.load()

            if not profile_name:
                profile_name = config.active_profile
                if not profile_name:
                    console.print("\n[red]No active profile set and no profile specified.[/red]")
                    return 1

            try:
                profile = config.load_profile(profile_name)
            except FileNotFoundError:
                console.print(f"\n[red]Error: Profile '{profile_name}' not found.[/red]")
                return 1

            console.print()
            console.print(
                Panel(
                    f"[cyan]{profile_name}[/cyan]",
                    title="Profile Configuration",
                    subtitle="Active" if profile_name == config.active_profile else "Inactive",
                    box=box.ROUNDED,
                )
            )

            console.print("\n[bold cyan]Stack:[/bold cyan]")
            console.print(f"  Name:          {profile.stack_name}")
            console.print(f"  Template:      {profile.template or '(previous template)'}")
            console.print(f"  Region:        {profile.aws_region}")
            console.print(f"  AWS Profile:   {profile.aws_profile or 'default chain'}")
            console.print(f"  Capabilities:  {', '.join(profile.capabilities)}")

            if profile.parameters:
                console.print("\n[bold cyan]Parameters:[/bold cyan]")
                for key, value in sorted(profile.parameters.items()):
                    console.print(f"  {key} = {value}")

            console.print("\n[bold cyan]Behaviour:[/bold cyan]")
            console.print(f"  Poll Interval:  {profile.poll_interval}s")
            console.print(f"  Bucket Cleanup: {'✓ enabled' if profile.cleanup_buckets else '✗ disabled'}")

            console.print("\n[bold cyan]Metadata:[/bold cyan]")
            console.print(f"  Schema Version: {profile.schema_version}")
            console.print(f"  Created:        {profile.created_at}")
            console.print(f"  Updated:        {profile.updated_at}")

            console.print()
            return 0

        except Exception as e:
            console.print(f"\n[red]Error: {e}[/red]\n")
            return 1
