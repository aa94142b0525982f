"""Builders for stack events and fake event streams."""

from datetime import datetime, timezone

from cfn_runner.models import ProvisioningEvent, StackSummary

STACK_TYPE = "AWS::CloudFormation::Stack"


def resource_event(logical_id, status, reason=None, stack_name="demo"):
    return ProvisioningEvent(
        logical_resource_id=logical_id,
        resource_status=status,
        status_reason=reason,
        timestamp=datetime.now(timezone.utc),
        resource_type="AWS::EC2::Instance",
        stack_name=stack_name,
    )


def stack_event(status, reason=None, stack_name="demo"):
    return ProvisioningEvent(
        logical_resource_id=stack_name,
        resource_status=status,
        status_reason=reason,
        timestamp=datetime.now(timezone.utc),
        resource_type=STACK_TYPE,
        stack_name=stack_name,
    )


def event_stream(*events, error=None):
    """Generator that yields events in order, then raises ``error`` if given."""
    yield from events
    if error is not None:
        raise error


def stream_factory(*events, error=None):
    """side_effect for ``stream_events`` returning a fresh stream per call."""

    def _stream(stack_name, poll_interval):
        return event_stream(*events, error=error)

    return _stream


def summary(status, name="demo", **kwargs):
    return StackSummary(name=name, status=status, **kwargs)
