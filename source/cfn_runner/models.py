# ABOUTME: Data types shared by the stack runner, monitor and cleanup stages
# ABOUTME: Defines stack requests, provisioning events, outcomes and reports

"""Data model for cfn-runner."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

DEFAULT_CAPABILITIES = ("CAPABILITY_IAM", "CAPABILITY_NAMED_IAM")


class StackAction(str, Enum):
    """Top-level action taken against a stack."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class Severity(str, Enum):
    """Presentation severity of a resource status."""

    INFO = "info"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class StatusClassification:
    """Result of classifying a resource status code."""

    severity: Severity
    style: str
    failed: bool


@dataclass(frozen=True)
class AwsCredentials:
    """Explicit AWS credentials. All fields empty means the default boto3 chain."""

    profile_name: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    session_token: str | None = None


@dataclass(frozen=True)
class StackRequest:
    """Everything needed to create, update or delete one stack."""

    name: str
    template: str | None = None
    region: str | None = None
    parameters: dict[str, str] = field(default_factory=dict)
    credentials: AwsCredentials = field(default_factory=AwsCredentials)
    capabilities: tuple[str, ...] = DEFAULT_CAPABILITIES
    tags: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Stack name must be a non-empty string")


@dataclass(frozen=True)
class ProvisioningEvent:
    """A single resource status event from the stack's event feed."""

    logical_resource_id: str
    resource_status: str
    status_reason: str | None = None
    timestamp: datetime | None = None
    event_id: str | None = None
    resource_type: str | None = None
    physical_resource_id: str | None = None
    stack_name: str | None = None

    @property
    def is_stack_event(self) -> bool:
        """True when the event describes the stack itself rather than a resource."""
        return self.resource_type == "AWS::CloudFormation::Stack" and self.logical_resource_id == self.stack_name

    @classmethod
    def from_boto(cls, event: dict[str, Any]) -> "ProvisioningEvent":
        """Build an event from a ``describe_stack_events`` entry."""
        return cls(
            logical_resource_id=event.get("LogicalResourceId", ""),
            resource_status=event.get("ResourceStatus", ""),
            status_reason=event.get("ResourceStatusReason") or None,
            timestamp=event.get("Timestamp"),
            event_id=event.get("EventId"),
            resource_type=event.get("ResourceType"),
            physical_resource_id=event.get("PhysicalResourceId"),
            stack_name=event.get("StackName"),
        )


@dataclass
class StackSummary:
    """Stack description as returned by ``describe_stacks``."""

    name: str
    status: str
    stack_id: str | None = None
    status_reason: str | None = None
    parameters: dict[str, str] = field(default_factory=dict)
    outputs: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_boto(cls, stack: dict[str, Any]) -> "StackSummary":
        return cls(
            name=stack["StackName"],
            status=stack["StackStatus"],
            stack_id=stack.get("StackId"),
            status_reason=stack.get("StackStatusReason"),
            parameters={p["ParameterKey"]: p.get("ParameterValue", "") for p in stack.get("Parameters", [])},
            outputs={o["OutputKey"]: o["OutputValue"] for o in stack.get("Outputs", [])},
        )


@dataclass
class TerminalOutcome:
    """How a monitored stack operation ended."""

    action: StackAction
    final_status: str | None = None
    error: Exception | None = None
    needs_cleanup_delete: bool = False
    cleanup_skipped: bool = False
    no_changes: bool = False

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BucketCandidate:
    """A bucket whose name matched the stack name during the orphan sweep."""

    name: str
    is_empty: bool


@dataclass
class BucketCleanupReport:
    """Summary of an orphan bucket sweep."""

    deleted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


@dataclass
class DeploymentResult:
    """Final result of one deploy or delete invocation."""

    action: StackAction | None
    success: bool
    error: Exception | None = None
    final_status: str | None = None
    no_changes: bool = False
    rollback_deleted: bool = False
    buckets_deleted: list[str] = field(default_factory=list)
