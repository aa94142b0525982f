# ABOUTME: Tests for the boto3-backed CloudFormation manager
# ABOUTME: Covers error translation, request building and event stream polling

"""Tests for CloudFormationManager and error translation."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError, NoCredentialsError

from cfn_runner.cli.utils.cf_exceptions import (
    CloudFormationError,
    NoUpdatesError,
    StackNotFoundError,
    TemplateError,
    translate_aws_error,
)
from cfn_runner.cli.utils.cloudformation import CloudFormationManager
from cfn_runner.models import StackRequest, StackSummary

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _client_error(message, code="ValidationError", operation="DescribeStacks"):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def _raw_event(event_id, status, logical_id="WebServer", reason=None, minute=0):
    is_stack = logical_id == "demo"
    return {
        "EventId": event_id,
        "StackName": "demo",
        "LogicalResourceId": logical_id,
        "ResourceType": "AWS::CloudFormation::Stack" if is_stack else "AWS::EC2::Instance",
        "ResourceStatus": status,
        "ResourceStatusReason": reason,
        "Timestamp": BASE_TIME + timedelta(minutes=minute),
    }


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def sleep():
    return MagicMock()


@pytest.fixture
def manager(client, sleep):
    return CloudFormationManager(region="us-east-1", client=client, sleep=sleep)


class TestTranslateAwsError:
    """Tests for mapping botocore errors to typed errors."""

    def test_does_not_exist_is_not_found(self):
        error = translate_aws_error(_client_error("Stack with id demo does not exist"), "demo")

        assert isinstance(error, StackNotFoundError)
        assert error.stack_name == "demo"
        assert error.code == "ValidationError"

    def test_no_updates_is_no_op(self):
        error = translate_aws_error(_client_error("No updates are to be performed."))

        assert isinstance(error, NoUpdatesError)

    def test_other_errors_are_generic(self):
        error = translate_aws_error(_client_error("Rate exceeded", code="Throttling"))

        assert type(error) is CloudFormationError
        assert error.message == "Rate exceeded"
        assert error.code == "Throttling"

    def test_client_side_failure_keeps_botocore_class_as_code(self):
        error = translate_aws_error(NoCredentialsError(), "demo")

        assert type(error) is CloudFormationError
        assert error.code == "NoCredentialsError"
        assert error.stack_name == "demo"
        assert error.message == "Unable to locate credentials"


class TestStackService:
    """Tests for create/update/delete/describe."""

    def test_describe_returns_summaries(self, manager, client):
        client.describe_stacks.return_value = {
            "Stacks": [
                {
                    "StackName": "demo",
                    "StackStatus": "CREATE_COMPLETE",
                    "StackId": "arn:aws:cloudformation:us-east-1:123:stack/demo/1",
                    "Parameters": [{"ParameterKey": "Env", "ParameterValue": "dev"}],
                    "Outputs": [{"OutputKey": "Url", "OutputValue": "https://example.com"}],
                }
            ]
        }

        stacks = manager.describe_stacks("demo")

        assert len(stacks) == 1
        assert stacks[0].status == "CREATE_COMPLETE"
        assert stacks[0].parameters == {"Env": "dev"}
        assert stacks[0].outputs == {"Url": "https://example.com"}

    def test_describe_missing_stack_raises_not_found(self, manager, client):
        client.describe_stacks.side_effect = _client_error("Stack with id demo does not exist")

        with pytest.raises(StackNotFoundError):
            manager.describe_stacks("demo")

    def test_describe_unreachable_endpoint_is_typed(self, manager, client):
        client.describe_stacks.side_effect = EndpointConnectionError(endpoint_url="https://cloudformation.example")

        with pytest.raises(CloudFormationError) as exc_info:
            manager.describe_stacks("demo")

        assert not isinstance(exc_info.value, StackNotFoundError)
        assert exc_info.value.code == "EndpointConnectionError"

    def test_create_with_local_template(self, manager, client, tmp_path):
        template = tmp_path / "template.yaml"
        template.write_text("Resources: {}\n")
        client.create_stack.return_value = {"StackId": "stack-id"}
        request = StackRequest(
            name="demo", template=str(template), parameters={"Env": "dev"}, tags={"team": "platform"}
        )

        stack_id = manager.create_stack(request)

        assert stack_id == "stack-id"
        kwargs = client.create_stack.call_args.kwargs
        assert kwargs["StackName"] == "demo"
        assert kwargs["TemplateBody"] == "Resources: {}\n"
        assert kwargs["Parameters"] == [{"ParameterKey": "Env", "ParameterValue": "dev"}]
        assert kwargs["OnFailure"] == "ROLLBACK"
        assert kwargs["Capabilities"] == ["CAPABILITY_IAM", "CAPABILITY_NAMED_IAM"]
        assert kwargs["Tags"] == [{"Key": "team", "Value": "platform"}]

    def test_create_with_s3_template(self, manager, client):
        client.create_stack.return_value = {}

        manager.create_stack(StackRequest(name="demo", template="s3://my-bucket/path/template.yaml"))

        kwargs = client.create_stack.call_args.kwargs
        assert kwargs["TemplateURL"] == "https://my-bucket.s3.amazonaws.com/path/template.yaml"
        assert "TemplateBody" not in kwargs

    def test_create_missing_template_file(self, manager, client, tmp_path):
        with pytest.raises(TemplateError):
            manager.create_stack(StackRequest(name="demo", template=str(tmp_path / "missing.yaml")))
        client.create_stack.assert_not_called()

    def test_create_without_template(self, manager):
        with pytest.raises(TemplateError):
            manager.create_stack(StackRequest(name="demo"))

    def test_update_reuses_previous_parameters(self, manager, client):
        client.update_stack.return_value = {}
        existing = StackSummary(name="demo", status="CREATE_COMPLETE", parameters={"Env": "prod", "Size": "2"})

        manager.update_stack(StackRequest(name="demo", parameters={"Env": "dev"}), existing)

        kwargs = client.update_stack.call_args.kwargs
        assert kwargs["Parameters"] == [
            {"ParameterKey": "Env", "ParameterValue": "dev"},
            {"ParameterKey": "Size", "UsePreviousValue": True},
        ]
        assert kwargs["UsePreviousTemplate"] is True

    def test_update_with_nothing_to_change(self, manager, client):
        client.update_stack.side_effect = _client_error("No updates are to be performed.", operation="UpdateStack")

        with pytest.raises(NoUpdatesError):
            manager.update_stack(StackRequest(name="demo", template="https://example.com/t.yaml"))

    def test_delete_error_is_translated(self, manager, client):
        client.delete_stack.side_effect = _client_error("Access denied", code="AccessDenied")

        with pytest.raises(CloudFormationError) as exc_info:
            manager.delete_stack("demo")
        assert exc_info.value.code == "AccessDenied"

    def test_failed_resources(self, manager, client):
        client.describe_stack_resources.return_value = {
            "StackResources": [
                {
                    "LogicalResourceId": "Bucket",
                    "PhysicalResourceId": "demo-bucket",
                    "ResourceType": "AWS::S3::Bucket",
                    "ResourceStatus": "DELETE_FAILED",
                    "ResourceStatusReason": "Bucket not empty",
                },
                {
                    "LogicalResourceId": "Queue",
                    "ResourceType": "AWS::SQS::Queue",
                    "ResourceStatus": "CREATE_COMPLETE",
                },
            ]
        }

        failed = manager.get_failed_resources("demo")

        assert failed == [
            {
                "logical_id": "Bucket",
                "physical_id": "demo-bucket",
                "resource_type": "AWS::S3::Bucket",
                "status": "DELETE_FAILED",
                "status_reason": "Bucket not empty",
            }
        ]


class TestEventStream:
    """Tests for stream_events()."""

    def test_stream_skips_history_and_stops_at_terminal(self, manager, client, sleep):
        paginator = client.get_paginator.return_value
        paginator.paginate.side_effect = [
            [
                {
                    "StackEvents": [
                        _raw_event("e3", "CREATE_IN_PROGRESS", minute=3),
                        _raw_event("e2", "CREATE_IN_PROGRESS", "demo", "User Initiated", minute=2),
                        _raw_event("e1", "DELETE_COMPLETE", "demo", minute=1),
                    ]
                }
            ],
            [
                {
                    "StackEvents": [
                        _raw_event("e5", "CREATE_COMPLETE", "demo", minute=5),
                        _raw_event("e4", "CREATE_COMPLETE", minute=4),
                        _raw_event("e3", "CREATE_IN_PROGRESS", minute=3),
                    ]
                }
            ],
        ]

        events = list(manager.stream_events("demo", poll_interval=2.5))

        assert [e.event_id for e in events] == ["e2", "e3", "e4", "e5"]
        assert events[-1].is_stack_event
        sleep.assert_called_once_with(2.5)
        client.get_paginator.assert_called_with("describe_stack_events")

    def test_stream_reads_older_pages_until_seen(self, manager, client, sleep):
        paginator = client.get_paginator.return_value
        paginator.paginate.side_effect = [
            [
                {"StackEvents": [_raw_event("e1", "UPDATE_IN_PROGRESS", "demo", "User Initiated")]},
            ],
            [
                {"StackEvents": [_raw_event("e3", "UPDATE_COMPLETE", "demo", minute=3)]},
                {"StackEvents": [_raw_event("e2", "UPDATE_COMPLETE", minute=2)]},
                {"StackEvents": [_raw_event("e1", "UPDATE_IN_PROGRESS", "demo", "User Initiated")]},
            ],
        ]

        events = list(manager.stream_events("demo"))

        assert [e.event_id for e in events] == ["e1", "e2", "e3"]

    def test_stream_waits_while_nothing_new(self, manager, client, sleep):
        paginator = client.get_paginator.return_value
        start = _raw_event("e1", "DELETE_IN_PROGRESS", "demo", "User Initiated")
        paginator.paginate.side_effect = [
            [{"StackEvents": [start]}],
            [{"StackEvents": [start]}],
            [{"StackEvents": [_raw_event("e2", "DELETE_COMPLETE", "demo", minute=1), start]}],
        ]

        events = list(manager.stream_events("demo", poll_interval=4))

        assert [e.resource_status for e in events] == ["DELETE_IN_PROGRESS", "DELETE_COMPLETE"]
        assert sleep.call_count == 2

    def test_stream_raises_not_found(self, manager, client):
        paginator = client.get_paginator.return_value
        paginator.paginate.side_effect = _client_error("Stack [demo] does not exist", operation="DescribeStackEvents")

        with pytest.raises(StackNotFoundError):
            list(manager.stream_events("demo"))

    def test_stream_waits_for_operation_start_before_yielding(self, manager, client, sleep):
        """History fetched before the new operation shows up is never replayed."""
        paginator = client.get_paginator.return_value
        history = [
            _raw_event("e2", "UPDATE_COMPLETE", "demo", minute=2),
            _raw_event("e1", "UPDATE_IN_PROGRESS", "demo", minute=1),
        ]
        paginator.paginate.side_effect = [
            [{"StackEvents": history}],
            [
                {
                    "StackEvents": [
                        _raw_event("e4", "UPDATE_COMPLETE", "demo", minute=4),
                        _raw_event("e3", "UPDATE_IN_PROGRESS", "demo", "User Initiated", minute=3),
                        *history,
                    ]
                }
            ],
        ]

        events = list(manager.stream_events("demo"))

        assert [e.event_id for e in events] == ["e3", "e4"]
        assert sleep.call_count == 1

    def test_stream_connection_failure_is_typed(self, manager, client):
        paginator = client.get_paginator.return_value
        paginator.paginate.side_effect = EndpointConnectionError(endpoint_url="https://cloudformation.example")

        with pytest.raises(CloudFormationError):
            list(manager.stream_events("demo"))
