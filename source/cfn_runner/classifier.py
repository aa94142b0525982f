# ABOUTME: Classifies CloudFormation resource status codes
# ABOUTME: Maps each status to a severity, color and failed flag

"""Resource status classification."""

from cfn_runner.models import Severity, StatusClassification


class UnknownStatusError(ValueError):
    """Raised for a resource status code outside the known set."""


_INFO = StatusClassification(Severity.INFO, "yellow", failed=False)
_SUCCESS = StatusClassification(Severity.SUCCESS, "green", failed=False)
_REMOVED = StatusClassification(Severity.SUCCESS, "bright_black", failed=False)
_FAILED = StatusClassification(Severity.FAILURE, "red", failed=True)

STATUS_CLASSIFICATIONS: dict[str, StatusClassification] = {
    "CREATE_IN_PROGRESS": _INFO,
    "CREATE_FAILED": _FAILED,
    "CREATE_COMPLETE": _SUCCESS,
    "DELETE_IN_PROGRESS": _INFO,
    "DELETE_FAILED": _FAILED,
    "DELETE_COMPLETE": _REMOVED,
    "DELETE_SKIPPED": _REMOVED,
    "UPDATE_IN_PROGRESS": _INFO,
    "UPDATE_COMPLETE_CLEANUP_IN_PROGRESS": _INFO,
    "UPDATE_FAILED": _FAILED,
    "UPDATE_COMPLETE": _SUCCESS,
    "ROLLBACK_IN_PROGRESS": _FAILED,
    "ROLLBACK_COMPLETE": _FAILED,
    # Remaining CloudFormation stack and resource states
    "ROLLBACK_FAILED": _FAILED,
    "REVIEW_IN_PROGRESS": _INFO,
    "UPDATE_ROLLBACK_IN_PROGRESS": _FAILED,
    "UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS": _FAILED,
    "UPDATE_ROLLBACK_COMPLETE": _FAILED,
    "UPDATE_ROLLBACK_FAILED": _FAILED,
    "UPDATE_FAILED_CLEANUP_IN_PROGRESS": _FAILED,
    "IMPORT_IN_PROGRESS": _INFO,
    "IMPORT_COMPLETE": _SUCCESS,
    "IMPORT_ROLLBACK_IN_PROGRESS": _FAILED,
    "IMPORT_ROLLBACK_FAILED": _FAILED,
    "IMPORT_ROLLBACK_COMPLETE": _FAILED,
    "IMPORT_FAILED": _FAILED,
    "EXPORT_IN_PROGRESS": _INFO,
    "EXPORT_COMPLETE": _SUCCESS,
    "EXPORT_FAILED": _FAILED,
    "EXPORT_ROLLBACK_IN_PROGRESS": _FAILED,
    "EXPORT_ROLLBACK_FAILED": _FAILED,
    "EXPORT_ROLLBACK_COMPLETE": _FAILED,
}


def classify(status: str) -> StatusClassification:
    """Classify a resource status code.

    Raises:
        UnknownStatusError: If the status is not a known CloudFormation status.
    """
    try:
        return STATUS_CLASSIFICATIONS[status]
    except KeyError:
        raise UnknownStatusError(f"Unrecognized resource status: {status!r}") from None


def severity_for(status: str) -> Severity:
    """Return the presentation severity for a status code."""
    return classify(status).severity


def is_terminal_stack_status(status: str) -> bool:
    """True when a stack-level status ends the current operation."""
    return not status.endswith("_IN_PROGRESS")


def is_failed_status(status: str | None) -> bool:
    """True when a final stack status means the operation did not achieve its goal.

    A missing status (nothing observed) is not a failure.
    """
    if status is None:
        return False
    return classify(status).failed
