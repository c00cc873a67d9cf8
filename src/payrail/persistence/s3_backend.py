"""S3 backends: dead-letter file store and submission transport."""

from __future__ import annotations

import boto3
from botocore.exceptions import ClientError

from payrail.core.exceptions import PayRailError, SubmissionConflictError
from payrail.models.submission import SubmissionReceipt


class S3FileStore:
    """Production IFileStore backed by S3."""

    def __init__(self, bucket: str, region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._bucket = bucket
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("s3", **kwargs)

    @property
    def bucket(self) -> str:
        return self._bucket

    def read(self, path: str) -> bytes:
        try:
            resp = self._client.get_object(Bucket=self._bucket, Key=path)
            return resp["Body"].read()
        except ClientError as exc:
            raise PayRailError(f"S3 read failed for {path!r}: {exc}") from exc

    def exists(self, path: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=path)
            return True
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise PayRailError(f"S3 head failed for {path!r}: {exc}") from exc

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        try:
            self._client.put_object(
                Bucket=self._bucket, Key=path, Body=data, ContentType=content_type,
            )
            return path
        except ClientError as exc:
            raise PayRailError(f"S3 write failed for {path!r}: {exc}") from exc

    def list_files(self, prefix: str) -> list[str]:
        try:
            keys: list[str] = []
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    keys.append(obj["Key"])
            return keys
        except ClientError as exc:
            raise PayRailError(f"S3 list failed for prefix={prefix!r}: {exc}") from exc


class S3SubmissionTransport:
    """ISubmissionTransport that drops ``payroll_<tag>.ach`` into a bucket prefix.

    An existing object is never replaced. Identical bytes under the same key
    are accepted as a resubmission; different bytes raise
    ``SubmissionConflictError``.
    """

    def __init__(self, store: S3FileStore, prefix: str = "outbound") -> None:
        self._store = store
        self._prefix = prefix.strip("/")

    def submit(self, file_text: str, tag: str) -> SubmissionReceipt:
        key = f"{self._prefix}/payroll_{tag}.ach" if self._prefix else f"payroll_{tag}.ach"
        data = file_text.encode("ascii")
        if self._store.exists(key):
            if self._store.read(key) != data:
                raise SubmissionConflictError(f"s3://{self._store.bucket}/{key} already exists with different content")
        else:
            self._store.write(key, data, "text/plain")
        return SubmissionReceipt(mode="S3", location=f"s3://{self._store.bucket}/{key}")
