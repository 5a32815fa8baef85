"""
Blob storage for uploaded files: S3-compatible object storage and an in-memory double.
"""

import re
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

import boto3
from botocore.config import Config
from fastapi import Request

if TYPE_CHECKING:
    from designhub.core.config import Settings

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class StoredBlob:
    pathname: str
    url: str


class StorageClient(Protocol):
    """Defines the operations the API needs from blob storage."""

    def put(self, pathname: str, body: bytes, content_type: str) -> StoredBlob:
        ...


@dataclass
class InMemoryStorageClient:
    """Keeps blobs in process memory; used for local runs and tests."""

    base_url: str = "https://storage.local/blobs"
    stored_objects: dict[str, tuple[bytes, str]] = field(default_factory=dict)

    def put(self, pathname: str, body: bytes, content_type: str) -> StoredBlob:
        self.stored_objects[pathname] = (body, content_type)
        return StoredBlob(pathname=pathname, url=f"{self.base_url}/{pathname}")


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client. Objects are written public-read and served
    from public_base_url when set, otherwise from the bucket's virtual-host URL.
    """

    bucket: str
    region: str | None = None
    endpoint: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    public_base_url: str | None = None

    def __post_init__(self):
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

    def put(self, pathname: str, body: bytes, content_type: str) -> StoredBlob:
        self._client.put_object(
            Bucket=self.bucket,
            Key=pathname,
            Body=body,
            ContentType=content_type,
            ACL="public-read",
        )
        return StoredBlob(pathname=pathname, url=self._public_url(pathname))

    def _public_url(self, pathname: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{pathname}"
        if self.region:
            return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{pathname}"
        return f"https://{self.bucket}.s3.amazonaws.com/{pathname}"


def build_storage_client(settings: "Settings") -> StorageClient:
    if settings.STORAGE_BACKEND == "memory":
        return InMemoryStorageClient()
    secret = settings.S3_SECRET_ACCESS_KEY
    return S3StorageClient(
        bucket=settings.S3_BUCKET or "",
        region=settings.S3_REGION,
        endpoint=settings.S3_ENDPOINT_URL,
        access_key_id=settings.S3_ACCESS_KEY_ID,
        secret_access_key=secret.get_secret_value() if secret else None,
        public_base_url=settings.S3_PUBLIC_BASE_URL,
    )


def get_storage(request: Request) -> StorageClient:
    return request.app.state.storage


def unique_pathname(filename: str) -> str:
    """Random prefix plus a sanitized name, so equal filenames never overwrite each other."""
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    safe = _UNSAFE_NAME_CHARS.sub("-", base).strip("-.") or "file"
    return f"uploads/{uuid.uuid4().hex}/{safe}"
