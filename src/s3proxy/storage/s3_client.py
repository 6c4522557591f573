"""S3-compatible object store client (AWS S3, SeaweedFS, MinIO)."""

import logging

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    EndpointConnectionError,
    IncompleteReadError,
    ReadTimeoutError,
)

from .base import DEFAULT_PAGE_SIZE, ListedObject, ListPage, ObjectStoreClient, StoredObject
from .exceptions import (
    StorageConnectionError,
    StorageError,
    StorageIncompleteReadError,
    StorageNotFoundError,
    StoragePermissionError,
)

log = logging.getLogger(__name__)

_ERROR_CODE_MAP = {
    "NoSuchKey": StorageNotFoundError,
    "NotFound": StorageNotFoundError,
    "404": StorageNotFoundError,
    "AccessDenied": StoragePermissionError,
    "403": StoragePermissionError,
    "InvalidAccessKeyId": StoragePermissionError,
    "SignatureDoesNotMatch": StoragePermissionError,
    "EndpointConnectionError": StorageConnectionError,
}

_CONNECTION_ERRORS = (EndpointConnectionError, ConnectionClosedError, ReadTimeoutError)


def translate_error(error: Exception, key: str | None = None) -> StorageError:
    """Map a botocore exception onto the storage exception hierarchy."""
    if isinstance(error, ClientError):
        details = error.response.get("Error", {})
        code = str(details.get("Code", ""))
        message = details.get("Message") or str(error)
        exc_cls = _ERROR_CODE_MAP.get(code, StorageError)
        return exc_cls(message, key=key, code=code or None, cause=error)
    if isinstance(error, IncompleteReadError):
        return StorageIncompleteReadError(str(error), key=key, code="IncompleteRead", cause=error)
    if isinstance(error, _CONNECTION_ERRORS):
        return StorageConnectionError(str(error), key=key, code=type(error).__name__, cause=error)
    return StorageError(str(error), key=key, code=type(error).__name__, cause=error)


class S3ObjectBody:
    """Wraps a botocore StreamingBody so read failures surface as StorageError."""

    def __init__(self, key: str, stream):
        self._key = key
        self._stream = stream

    def read(self, amt: int | None = None) -> bytes:
        try:
            return self._stream.read(amt)
        except (BotoCoreError, ClientError) as e:
            raise translate_error(e, self._key) from e

    def close(self) -> None:
        self._stream.close()


class S3ObjectStoreClient(ObjectStoreClient):
    """Read-only S3-compatible object store client bound to one bucket."""

    def __init__(
        self,
        bucket_name: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
        aws_session_token: str | None = None,
    ):
        self._bucket = bucket_name
        self._region = region

        kwargs: dict = {
            "config": Config(
                region_name=region,
                signature_version="s3v4",
                retries={"max_attempts": 3, "mode": "standard"},
            ),
        }
        if aws_access_key_id and aws_secret_access_key:
            kwargs["aws_access_key_id"] = aws_access_key_id
            kwargs["aws_secret_access_key"] = aws_secret_access_key
        if aws_session_token:
            kwargs["aws_session_token"] = aws_session_token
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url

        self._client = boto3.client("s3", **kwargs)

    @property
    def bucket(self) -> str:
        return self._bucket

    def get_object(self, key: str) -> StoredObject:
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise translate_error(e, key) from e

        etag = response.get("ETag")
        return StoredObject(
            key=key,
            size=response["ContentLength"],
            last_modified=response["LastModified"],
            body=S3ObjectBody(key, response["Body"]),
            content_type=response.get("ContentType"),
            etag=etag.strip('"') if etag else None,
        )

    def list_objects(
        self,
        prefix: str,
        continuation_token: str | None = None,
        max_keys: int = DEFAULT_PAGE_SIZE,
        delimiter: str | None = None,
    ) -> ListPage:
        params: dict = {
            "Bucket": self._bucket,
            "Prefix": prefix,
            "MaxKeys": max_keys,
        }
        if continuation_token:
            params["ContinuationToken"] = continuation_token
        if delimiter:
            params["Delimiter"] = delimiter

        try:
            response = self._client.list_objects_v2(**params)
        except (BotoCoreError, ClientError) as e:
            raise translate_error(e, prefix) from e

        items = [
            ListedObject(
                key=obj["Key"],
                size=obj["Size"],
                last_modified=obj["LastModified"],
                etag=obj["ETag"].strip('"') if obj.get("ETag") else None,
            )
            for obj in response.get("Contents", [])
        ]
        common_prefixes = [p["Prefix"] for p in response.get("CommonPrefixes", [])]
        next_token = response.get("NextContinuationToken") if response.get("IsTruncated") else None

        log.debug(
            "Listed s3://%s/%s: %d objects, %d prefixes, truncated=%s",
            self._bucket,
            prefix,
            len(items),
            len(common_prefixes),
            next_token is not None,
        )
        return ListPage(items=items, common_prefixes=common_prefixes, next_token=next_token)
