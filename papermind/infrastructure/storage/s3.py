"""Object store backed by S3 or an S3-compatible service."""

import asyncio
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ...modules.common.exceptions import ConfigurationError, StorageConflictError, StorageError, StorageNotFoundError
from ..logging import get_logger
from .base import ObjectStore

logger = get_logger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


def _is_not_found(exc: ClientError) -> bool:
    return str(exc.response.get("Error", {}).get("Code")) in _NOT_FOUND_CODES


class S3ObjectStore(ObjectStore):
    """boto3 is synchronous, so every call runs in a worker thread."""

    def __init__(
        self,
        bucket: str,
        client: Optional[Any] = None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
    ) -> None:
        if not bucket:
            raise ConfigurationError("S3_BUCKET_NAME is required for the s3 storage backend")
        self.bucket = bucket
        self.client = client or boto3.client(
            "s3",
            region_name=region or None,
            endpoint_url=endpoint_url or None,
            aws_access_key_id=access_key_id or None,
            aws_secret_access_key=secret_access_key or None,
        )

    def _head(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if _is_not_found(exc):
                return False
            raise StorageError(f"S3 head_object failed for {key}: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"S3 head_object failed for {key}: {exc}") from exc
        return True

    async def _write(self, key: str, data: bytes, content_type: str) -> None:
        def upload() -> None:
            if self._head(key):
                raise StorageConflictError(f"Object already exists at {key}")
            try:
                self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
            except (ClientError, BotoCoreError) as exc:
                raise StorageError(f"S3 upload failed for {key}: {exc}") from exc

        await asyncio.to_thread(upload)
        logger.debug(f"Stored {len(data)} bytes at s3://{self.bucket}/{key}")

    async def get(self, key: str) -> bytes:
        def download() -> bytes:
            try:
                response = self.client.get_object(Bucket=self.bucket, Key=key)
                return response["Body"].read()
            except ClientError as exc:
                if _is_not_found(exc):
                    raise StorageNotFoundError(f"No object at {key}") from exc
                raise StorageError(f"S3 download failed for {key}: {exc}") from exc
            except BotoCoreError as exc:
                raise StorageError(f"S3 download failed for {key}: {exc}") from exc

        return await asyncio.to_thread(download)

    async def delete(self, key: str) -> None:
        def remove() -> None:
            if not self._head(key):
                raise StorageNotFoundError(f"No object at {key}")
            try:
                self.client.delete_object(Bucket=self.bucket, Key=key)
            except (ClientError, BotoCoreError) as exc:
                raise StorageError(f"S3 delete failed for {key}: {exc}") from exc

        await asyncio.to_thread(remove)

    async def exists(self, key: str) -> bool:
        return await asyncio.to_thread(self._head, key)
