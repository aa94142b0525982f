"""Deploy CloudFormation stacks and follow them to completion."""

__version__ = "0.1.0"
