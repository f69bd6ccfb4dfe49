"""S3 object store backend implementing IObjectStore."""

from __future__ import annotations

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from orderflow.core.exceptions import StorageError


class S3ObjectStore:
    """Production IObjectStore backed by one S3 bucket."""

    def __init__(self, bucket: str, region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._bucket = bucket
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("s3", **kwargs)

    @property
    def bucket(self) -> str:
        return self._bucket

    def create_bucket(self) -> str:
        kwargs: dict = {"Bucket": self._bucket}
        if self._region != "us-east-1":
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self._region}
        try:
            self._client.create_bucket(**kwargs)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"S3 create bucket {self._bucket!r} failed: {exc}") from exc
        return self._bucket

    def set_versioning(self, enabled: bool) -> bool:
        try:
            self._client.put_bucket_versioning(
                Bucket=self._bucket,
                VersioningConfiguration={"Status": "Enabled" if enabled else "Suspended"},
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"S3 versioning update failed for {self._bucket!r}: {exc}") from exc
        return True

    def put(self, key: str, data: bytes | str, content_type: str = "text/plain") -> str:
        body = data.encode("utf-8") if isinstance(data, str) else data
        try:
            self._client.put_object(
                Bucket=self._bucket, Key=key, Body=body, ContentType=content_type,
            )
            return key
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"S3 put failed for {key!r}: {exc}") from exc

    def get(self, key: str) -> bytes:
        try:
            resp = self._client.get_object(Bucket=self._bucket, Key=key)
            return resp["Body"].read()
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"S3 get failed for {key!r}: {exc}") from exc

    def list(self, prefix: str = "") -> list[str]:
        try:
            keys: list[str] = []
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    keys.append(obj["Key"])
            return keys
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"S3 list failed for prefix={prefix!r}: {exc}") from exc

    def delete(self, key: str) -> bool:
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
            return True
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"S3 delete failed for {key!r}: {exc}") from exc

    def copy(self, src: str, dst: str, source_bucket: str | None = None) -> str:
        try:
            self._client.copy_object(
                Bucket=self._bucket,
                CopySource={"Bucket": source_bucket or self._bucket, "Key": src},
                Key=dst,
            )
            return dst
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"S3 copy {src!r} -> {dst!r} failed: {exc}") from exc
