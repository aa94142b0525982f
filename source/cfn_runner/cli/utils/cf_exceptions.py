# ABOUTME: Typed CloudFormation errors raised at the boto3 boundary
# ABOUTME: Translates ValidationError messages into not-found and no-op signals

"""CloudFormation exception types."""

from botocore.exceptions import BotoCoreError, ClientError

NOT_FOUND_MARKER = "does not exist"
NO_UPDATES_MESSAGE = "No updates are to be performed."

# Everything boto3 can raise from a service call
AWS_ERRORS = (ClientError, BotoCoreError)


class CloudFormationError(Exception):
    """Base error for stack service and event source failures."""

    def __init__(self, message: str, stack_name: str | None = None, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.stack_name = stack_name
        self.code = code


class StackNotFoundError(CloudFormationError):
    """The named stack does not exist (or no longer exists)."""


class NoUpdatesError(CloudFormationError):
    """An update was submitted but the template and parameters are unchanged."""


class TemplateError(CloudFormationError):
    """The template reference could not be read."""


def translate_aws_error(error: ClientError | BotoCoreError, stack_name: str | None = None) -> CloudFormationError:
    """Map a botocore error to the matching CloudFormationError subclass.

    CloudFormation reports both a missing stack and an unchanged update as a plain
    ``ValidationError``, so the message text is the only signal available.
    Client-side failures (no credentials, unreachable endpoint) carry no service
    response and become a plain CloudFormationError named after the botocore class.
    """
    if not isinstance(error, ClientError):
        return CloudFormationError(str(error), stack_name=stack_name, code=type(error).__name__)

    details = error.response.get("Error", {})
    code = details.get("Code")
    message = details.get("Message") or str(error)

    if NOT_FOUND_MARKER in message:
        return StackNotFoundError(message, stack_name=stack_name, code=code)
    if message == NO_UPDATES_MESSAGE:
        return NoUpdatesError(message, stack_name=stack_name, code=code)
    return CloudFormationError(message, stack_name=stack_name, code=code)
