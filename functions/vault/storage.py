"""
Upload storage for work documents and cover images.

S3-compatible object storage in production, data URLs in memory for
tests and local runs.
"""

from __future__ import annotations

import base64
import io
import logging
import mimetypes
import os
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol
from urllib.parse import unquote, urlparse

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from vault.errors import StorageFailure, ValidationFailure

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

ACCEPTED_DOCUMENT_TYPES = (".docx", ".pdf", ".pptx", ".html", ".txt", ".md")
ACCEPTED_IMAGE_TYPES = (".png", ".jpg", ".jpeg", ".gif", ".webp")


@dataclass(frozen=True)
class UploadedFile:
    url: str
    name: str


def validate_upload_name(name: str) -> str:
    """Return the lower-cased extension, rejecting unsupported file types."""
    if not name:
        raise ValidationFailure("A file name is required.")
    extension = os.path.splitext(name)[1].lower()
    if extension not in ACCEPTED_DOCUMENT_TYPES + ACCEPTED_IMAGE_TYPES:
        raise ValidationFailure(f"Unsupported file type: {extension or name}")
    return extension


def _content_type(name: str) -> str:
    return mimetypes.guess_type(name)[0] or "application/octet-stream"


class StorageClient(Protocol):
    """Defines the operations the vault needs from upload storage."""

    def upload_file(
        self, data: bytes, name: str, on_progress: Optional[ProgressCallback] = None
    ) -> UploadedFile:
        ...

    def delete_file(self, url: str) -> None:
        ...


class InMemoryStorageClient:
    """Test double returning data URLs, like the browser-only mock did."""

    progress_steps = (25.0, 50.0, 75.0, 100.0)

    def __init__(self):
        self.deleted: list[str] = []

    def upload_file(
        self, data: bytes, name: str, on_progress: Optional[ProgressCallback] = None
    ) -> UploadedFile:
        validate_upload_name(name)
        if on_progress:
            for step in self.progress_steps:
                on_progress(step)
        encoded = base64.b64encode(data).decode("ascii")
        return UploadedFile(url=f"data:{_content_type(name)};base64,{encoded}", name=name)

    def delete_file(self, url: str) -> None:
        # Data URLs live inside the document, so there is nothing to remove.
        self.deleted.append(url)


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client (AWS S3, Tencent COS, MinIO).
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str

    def __post_init__(self):
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    @property
    def base_url(self) -> str:
        if self.endpoint:
            parsed = urlparse(self.endpoint)
            return f"{parsed.scheme}://{self.bucket}.{parsed.netloc}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com"

    def _key_from_url(self, url: str) -> Optional[str]:
        if not url.startswith(self.base_url + "/"):
            return None
        return unquote(urlparse(url).path.lstrip("/"))

    def upload_file(
        self, data: bytes, name: str, on_progress: Optional[ProgressCallback] = None
    ) -> UploadedFile:
        validate_upload_name(name)
        key = f"uploads/{int(time.time() * 1000)}_{name}"
        total = len(data) or 1
        sent = 0

        def _callback(transferred: int) -> None:
            nonlocal sent
            sent += transferred
            if on_progress:
                on_progress(min(100.0, sent * 100.0 / total))

        try:
            self._client.upload_fileobj(
                io.BytesIO(data),
                self.bucket,
                key,
                ExtraArgs={"ContentType": _content_type(name)},
                Callback=_callback,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageFailure(f"Upload of {name} failed: {exc}") from exc
        if on_progress and not data:
            on_progress(100.0)
        return UploadedFile(url=f"{self.base_url}/{key}", name=name)

    def delete_file(self, url: str) -> None:
        key = self._key_from_url(url or "")
        if not key:
            return
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code not in ("NoSuchKey", "404"):
                raise StorageFailure(f"Could not delete {key}: {exc}") from exc
