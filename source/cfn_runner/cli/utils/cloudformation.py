# ABOUTME: boto3-backed CloudFormation stack service and event source
# ABOUTME: Issues create/update/delete/describe calls and polls stack events

"""CloudFormation manager for stack operations and event streaming."""

import time
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import boto3

from cfn_runner.classifier import is_terminal_stack_status
from cfn_runner.cli.utils.cf_exceptions import AWS_ERRORS, TemplateError, translate_aws_error
from cfn_runner.models import ProvisioningEvent, StackRequest, StackSummary

DEFAULT_POLL_INTERVAL = 4.0
USER_INITIATED = "User Initiated"


class CloudFormationManager:
    """Thin wrapper over the CloudFormation API with typed errors."""

    def __init__(
        self,
        region: str | None = None,
        session: boto3.Session | None = None,
        client: Any = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.region = region
        if client is not None:
            self.client = client
        else:
            session = session or boto3.Session(region_name=region)
            self.client = session.client("cloudformation", region_name=region)
        self._sleep = sleep

    # Stack service

    def describe_stacks(self, stack_name: str) -> list[StackSummary]:
        """Describe stacks matching a name.

        Raises:
            StackNotFoundError: If the stack does not exist.
            CloudFormationError: For any other API failure.
        """
        try:
            response = self.client.describe_stacks(StackName=stack_name)
        except AWS_ERRORS as e:
            raise translate_aws_error(e, stack_name) from e
        return [StackSummary.from_boto(stack) for stack in response.get("Stacks", [])]

    def create_stack(self, request: StackRequest) -> str | None:
        """Submit a create request. Returns the new stack ID."""
        if not request.template:
            raise TemplateError("A template is required to create a stack", stack_name=request.name)

        kwargs = {
            "StackName": request.name,
            "Parameters": [{"ParameterKey": k, "ParameterValue": v} for k, v in request.parameters.items()],
            "Capabilities": list(request.capabilities),
            "OnFailure": "ROLLBACK",
            **self._template_kwargs(request.template, request.name),
        }
        if request.tags:
            kwargs["Tags"] = self._tags(request.tags)

        try:
            response = self.client.create_stack(**kwargs)
        except AWS_ERRORS as e:
            raise translate_aws_error(e, request.name) from e
        return response.get("StackId")

    def update_stack(self, request: StackRequest, existing: StackSummary | None = None) -> str | None:
        """Submit an update request.

        Parameters on the existing stack that the request does not set keep their
        previous values. Without a template the previous template is reused.

        Raises:
            NoUpdatesError: If CloudFormation reports nothing to change.
        """
        parameters = [{"ParameterKey": k, "ParameterValue": v} for k, v in request.parameters.items()]
        if existing:
            parameters.extend(
                {"ParameterKey": key, "UsePreviousValue": True}
                for key in existing.parameters
                if key not in request.parameters
            )

        kwargs = {
            "StackName": request.name,
            "Parameters": parameters,
            "Capabilities": list(request.capabilities),
        }
        if request.template:
            kwargs.update(self._template_kwargs(request.template, request.name))
        else:
            kwargs["UsePreviousTemplate"] = True
        if request.tags:
            kwargs["Tags"] = self._tags(request.tags)

        try:
            response = self.client.update_stack(**kwargs)
        except AWS_ERRORS as e:
            raise translate_aws_error(e, request.name) from e
        return response.get("StackId")

    def delete_stack(self, stack_name: str) -> None:
        """Submit a delete request."""
        try:
            self.client.delete_stack(StackName=stack_name)
        except AWS_ERRORS as e:
            raise translate_aws_error(e, stack_name) from e

    def get_failed_resources(self, stack_name: str) -> list[dict]:
        """Get resources of a stack currently in a failed state."""
        try:
            response = self.client.describe_stack_resources(StackName=stack_name)
        except AWS_ERRORS as e:
            raise translate_aws_error(e, stack_name) from e

        return [
            {
                "logical_id": r["LogicalResourceId"],
                "physical_id": r.get("PhysicalResourceId", ""),
                "resource_type": r["ResourceType"],
                "status": r["ResourceStatus"],
                "status_reason": r.get("ResourceStatusReason", ""),
            }
            for r in response.get("StackResources", [])
            if r["ResourceStatus"].endswith("_FAILED")
        ]

    # Event source

    def stream_events(self, stack_name: str, poll_interval: float = DEFAULT_POLL_INTERVAL) -> Iterator[ProvisioningEvent]:
        """Yield new stack events in chronological order until the stack settles.

        Output starts at the most recent user-initiated stack event. Events older
        than that belong to earlier operations and are never yielded; if the start
        event is not visible yet, everything fetched so far is recorded as history
        and polling continues. The stream ends right after a stack-level event with
        a terminal status.

        Raises:
            StackNotFoundError: If the stack disappears (e.g. after a delete).
            CloudFormationError: For any other API failure.
        """
        seen: set[str] = set()
        started = False

        while True:
            events, found_start = self._fetch_new_events(stack_name, seen, stop_at_start=not started)
            started = started or found_start

            if started:
                for event in events:
                    yield event
                    if event.is_stack_event and is_terminal_stack_status(event.resource_status):
                        return

            self._sleep(poll_interval)

    def _fetch_new_events(
        self, stack_name: str, seen: set[str], stop_at_start: bool
    ) -> tuple[list[ProvisioningEvent], bool]:
        """Page through events newest-first, stopping at the first one already seen.

        Returns the new events oldest-first and whether an operation start was reached.
        """
        new_events = []
        found_start = False
        try:
            paginator = self.client.get_paginator("describe_stack_events")
            for page in paginator.paginate(StackName=stack_name):
                done = False
                for raw in page.get("StackEvents", []):
                    event = ProvisioningEvent.from_boto(raw)
                    if event.event_id in seen:
                        done = True
                        break
                    new_events.append(event)
                    if stop_at_start and self._is_operation_start(event):
                        found_start = done = True
                        break
                if done:
                    break
        except AWS_ERRORS as e:
            raise translate_aws_error(e, stack_name) from e

        seen.update(event.event_id for event in new_events if event.event_id)
        new_events.reverse()
        return new_events, found_start

    @staticmethod
    def _is_operation_start(event: ProvisioningEvent) -> bool:
        return (
            event.is_stack_event
            and event.resource_status.endswith("_IN_PROGRESS")
            and event.status_reason == USER_INITIATED
        )

    @staticmethod
    def _template_kwargs(template: str, stack_name: str) -> dict[str, str]:
        """Turn a template reference into TemplateURL or TemplateBody."""
        if template.startswith("https://"):
            return {"TemplateURL": template}
        if template.startswith("s3://"):
            parsed = urlparse(template)
            return {"TemplateURL": f"https://{parsed.netloc}.s3.amazonaws.com{parsed.path}"}

        path = Path(template)
        if not path.is_file():
            raise TemplateError(f"Template not found: {template}", stack_name=stack_name)
        return {"TemplateBody": path.read_text()}

    @staticmethod
    def _tags(tags: dict[str, str]) -> list[dict[str, str]]:
        return [{"Key": k, "Value": v} for k, v in tags.items()]
