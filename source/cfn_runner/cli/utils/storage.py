# ABOUTME: boto3-backed S3 helpers used by the orphan bucket sweep
# ABOUTME: Lists buckets, checks emptiness and deletes empty buckets

"""Object storage access for bucket cleanup."""

from typing import Any

import boto3


class ObjectStorage:
    """Minimal S3 surface needed for orphan bucket cleanup.

    botocore errors are not translated here: cleanup failures are logged by the
    caller and never escalated.
    """

    def __init__(self, region: str | None = None, session: boto3.Session | None = None, client: Any = None):
        if client is not None:
            self.client = client
        else:
            session = session or boto3.Session(region_name=region)
            self.client = session.client("s3", region_name=region)

    def list_buckets(self) -> list[str]:
        """Names of all buckets visible to the account (single call, no paging)."""
        response = self.client.list_buckets()
        return [bucket["Name"] for bucket in response.get("Buckets", [])]

    def is_bucket_empty(self, bucket_name: str) -> bool:
        response = self.client.list_objects_v2(Bucket=bucket_name, MaxKeys=1)
        return response.get("KeyCount", len(response.get("Contents", []))) == 0

    def delete_bucket(self, bucket_name: str) -> None:
        self.client.delete_bucket(Bucket=bucket_name)
