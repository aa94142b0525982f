# ABOUTME: CLI module for cfn-runner
# ABOUTME: Registers deploy, delete, status and context commands

"""Command-line interface for cfn-runner."""

from cleo.application import Application

from .commands.context import ContextListCommand, ContextShowCommand, ContextUseCommand
from .commands.delete import DeleteCommand
from .commands.deploy import DeployCommand
from .commands.status import StatusCommand


def create_application() -> Application:
    """Create the CLI application."""
    application = Application("cfn-runner", "0.1.0")

    application.add(DeployCommand())
    application.add(DeleteCommand())
    application.add(StatusCommand())

    # Context management commands
    application.add(ContextListCommand())
    application.add(ContextUseCommand())
    application.add(ContextShowCommand())

    return application


def main():
    """Main entry point for the CLI."""
    application = create_application()
    application.run()


if __name__ == "__main__":
    main()
