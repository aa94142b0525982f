# ABOUTME: AWS session helpers for cfn-runner
# ABOUTME: Builds explicit boto3 sessions from credentials and region settings

"""AWS utilities for CLI commands."""

import boto3

from cfn_runner.models import AwsCredentials

DEFAULT_REGION = "us-east-1"


def get_current_region(profile_name: str | None = None) -> str:
    """Get the current AWS region from configuration."""
    try:
        session = boto3.Session(profile_name=profile_name)
        return session.region_name or DEFAULT_REGION
    except Exception:
        return DEFAULT_REGION


def create_session(credentials: AwsCredentials | None = None, region: str | None = None) -> boto3.Session:
    """Create a boto3 session bound to explicit credentials and region.

    Static keys take precedence over a named profile. With neither set, boto3's
    default credential chain applies.
    """
    credentials = credentials or AwsCredentials()

    if credentials.access_key_id and credentials.secret_access_key:
        return boto3.Session(
            aws_access_key_id=credentials.access_key_id,
            aws_secret_access_key=credentials.secret_access_key,
            aws_session_token=credentials.session_token,
            region_name=region,
        )

    return boto3.Session(profile_name=credentials.profile_name, region_name=region)
