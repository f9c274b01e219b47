"""
Blob storage for uploaded assets: local disk, Tencent COS (S3-compatible)
and an in-memory test double.

Paths are relative keys such as ``projects/project-1700000000000-42.png``.
"""

from __future__ import annotations

import io
import os
from dataclasses import dataclass
from typing import BinaryIO, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError


class StorageClient(Protocol):
    """Defines the operations the asset store needs from blob storage."""

    def put_bytes(self, path: str, data: bytes, content_type: str) -> None:
        ...

    def get_bytes(self, path: str) -> bytes:
        ...

    def open(self, path: str) -> BinaryIO:
        ...

    def size(self, path: str) -> int:
        ...

    def exists(self, path: str) -> bool:
        ...

    def delete(self, path: str) -> bool:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    stored_objects: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def put_bytes(self, path: str, data: bytes, content_type: str) -> None:
        self.stored_objects[path] = bytes(data)

    def get_bytes(self, path: str) -> bytes:
        stored = self.stored_objects.get(path)
        if stored is None:
            raise FileNotFoundError(path)
        return stored

    def open(self, path: str) -> BinaryIO:
        return io.BytesIO(self.get_bytes(path))

    def size(self, path: str) -> int:
        return len(self.get_bytes(path))

    def exists(self, path: str) -> bool:
        return path in self.stored_objects

    def delete(self, path: str) -> bool:
        return self.stored_objects.pop(path, None) is not None


@dataclass
class LocalStorageClient:
    """Stores blobs as files under a root directory."""

    root: str = "uploads"

    def _resolve(self, path: str) -> str:
        root = os.path.abspath(self.root)
        full_path = os.path.abspath(os.path.join(root, path))
        if os.path.commonpath([root, full_path]) != root or full_path == root:
            raise ValueError(f"path escapes storage root: {path}")
        return full_path

    def put_bytes(self, path: str, data: bytes, content_type: str) -> None:
        full_path = self._resolve(path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "wb") as f:
            f.write(data)

    def get_bytes(self, path: str) -> bytes:
        with open(self._resolve(path), "rb") as f:
            return f.read()

    def open(self, path: str) -> BinaryIO:
        return open(self._resolve(path), "rb")

    def size(self, path: str) -> int:
        return os.path.getsize(self._resolve(path))

    def exists(self, path: str) -> bool:
        return os.path.isfile(self._resolve(path))

    def delete(self, path: str) -> bool:
        try:
            os.remove(self._resolve(path))
        except FileNotFoundError:
            return False
        return True


@dataclass
class CosStorageClient:
    """
    S3-compatible storage client for Tencent COS.
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str

    def __post_init__(self):
        # Use virtual-hosted style addressing to satisfy COS requirements.
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint,
            region_name=self.region,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=config,
        )

    def _head(self, path: str) -> dict | None:
        try:
            return self._client.head_object(Bucket=self.bucket, Key=path)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in ("404", "NoSuchKey", "NotFound"):
                return None
            raise

    def put_bytes(self, path: str, data: bytes, content_type: str) -> None:
        self._client.put_object(
            Bucket=self.bucket,
            Key=path,
            Body=data,
            ContentType=content_type,
        )

    def get_bytes(self, path: str) -> bytes:
        body = self.open(path)
        try:
            return body.read()
        finally:
            body.close()

    def open(self, path: str) -> BinaryIO:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=path)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "NoSuchKey":
                raise FileNotFoundError(path) from exc
            raise
        return response["Body"]

    def size(self, path: str) -> int:
        head = self._head(path)
        if head is None:
            raise FileNotFoundError(path)
        return int(head["ContentLength"])

    def exists(self, path: str) -> bool:
        return self._head(path) is not None

    def delete(self, path: str) -> bool:
        # S3 deletes are idempotent, so check first to report absence.
        if not self.exists(path):
            return False
        self._client.delete_object(Bucket=self.bucket, Key=path)
        return True
