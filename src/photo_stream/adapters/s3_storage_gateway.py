"""Amazon S3 storage gateway."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import boto3

from photo_stream.domain.photos import StoredObject
from photo_stream.services.uploads import IMMUTABLE_CACHE_CONTROL, StorageGateway

logger = logging.getLogger(__name__)

_DELETE_BATCH_SIZE = 1000


@dataclass
class S3StorageGateway(StorageGateway):
    """Storage gateway backed by a single S3 bucket.

    boto3 is synchronous, so each call runs in a worker thread.
    """

    client: Any
    bucket: str
    cache_control: str = IMMUTABLE_CACHE_CONTROL

    @classmethod
    def create(cls, bucket: str, region: str) -> "S3StorageGateway":
        """Create a gateway with a regional S3 client."""
        return cls(client=boto3.client("s3", region_name=region), bucket=bucket)

    async def list_objects(self, prefix: str) -> list[StoredObject]:
        """List every object under the prefix, following pagination."""
        return await asyncio.to_thread(self._list_objects, prefix)

    async def presign_put(self, key: str, content_type: str, ttl_seconds: int) -> str:
        """Presign a single PUT with content type and cache directive."""
        return await asyncio.to_thread(
            self.client.generate_presigned_url,
            "put_object",
            Params={
                "Bucket": self.bucket,
                "Key": key,
                "ContentType": content_type,
                "CacheControl": self.cache_control,
            },
            ExpiresIn=ttl_seconds,
        )

    async def delete_objects(self, keys: list[str]) -> None:
        """Delete keys in batches; per-key failures are logged."""
        await asyncio.to_thread(self._delete_objects, keys)

    def _list_objects(self, prefix: str) -> list[StoredObject]:
        paginator = self.client.get_paginator("list_objects_v2")
        objects: list[StoredObject] = []
        for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
            for row in page.get("Contents", []):
                key = row.get("Key")
                if not key:
                    continue
                objects.append(
                    StoredObject(
                        key=key,
                        last_modified=row.get("LastModified"),
                        size=int(row.get("Size") or 0),
                    )
                )
        return objects

    def _delete_objects(self, keys: list[str]) -> None:
        for start in range(0, len(keys), _DELETE_BATCH_SIZE):
            batch = keys[start : start + _DELETE_BATCH_SIZE]
            response = self.client.delete_objects(
                Bucket=self.bucket,
                Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
            )
            for error in response.get("Errors", []):
                logger.warning(
                    "S3 failed to delete %s: %s",
                    error.get("Key"),
                    error.get("Message") or error.get("Code"),
                )

    async def close(self) -> None:
        """Close the underlying S3 client's connection pool."""
        await asyncio.to_thread(self.client.close)
