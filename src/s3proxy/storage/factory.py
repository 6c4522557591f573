"""Factory for creating object store clients from bucket configuration."""

import logging
import os

from .base import ObjectStoreClient

log = logging.getLogger(__name__)


def create_store_client(
    bucket_name: str,
    region: str = "us-east-1",
    endpoint_url: str | None = None,
) -> ObjectStoreClient:
    """Create an ObjectStoreClient for the given bucket.

    Static credentials and the endpoint override fall back to environment
    variables. When no static credentials are present boto3's default
    credential chain (profiles, instance roles, web identity) applies.

    Args:
        bucket_name: Bucket name. Required.
        region: Bucket region.
        endpoint_url: Custom S3 endpoint. Reads S3_ENDPOINT_URL if None.

    Raises:
        ValueError: If the bucket name is empty.
    """
    if not bucket_name:
        raise ValueError("Bucket name required")

    from .s3_client import S3ObjectStoreClient

    resolved_endpoint = endpoint_url or os.getenv("S3_ENDPOINT_URL")
    log.info(
        "Creating S3 client for bucket %s (region=%s, endpoint=%s)",
        bucket_name,
        region,
        resolved_endpoint or "default",
    )
    return S3ObjectStoreClient(
        bucket_name=bucket_name,
        region=region,
        endpoint_url=resolved_endpoint,
        aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
        aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        aws_session_token=os.getenv("AWS_SESSION_TOKEN"),
    )
