# tutorbook/services/storage_service.py
"""
Asset store for avatars, teacher documents and payment proofs.

Files go to an S3 bucket (or any S3-compatible host such as R2 or MinIO
through ``S3_ENDPOINT_URL``); callers only keep the returned public URL and
object key.
"""

import logging
import mimetypes
import time
import uuid
from dataclasses import dataclass
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from tutorbook.core.config import settings
from tutorbook.core.exceptions import InternalError, InvalidArgument

logger = logging.getLogger(__name__)

ALLOWED_UPLOAD_TYPES = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "application/pdf": "pdf",
}

PROFILE_FOLDER = "profiles"
DOCUMENT_FOLDER = "documents"
PAYMENT_FOLDER = "payments"


@dataclass(frozen=True)
class StoredAsset:
    url: str
    key: str


def validate_content_type(content_type: Optional[str]) -> None:
    if content_type not in ALLOWED_UPLOAD_TYPES:
        raise InvalidArgument("Invalid file type. Only JPEG, PNG, and PDF are allowed.")


def validate_size(size: int) -> None:
    if size == 0:
        raise InvalidArgument("No file uploaded")
    if size > settings.UPLOAD_MAX_BYTES:
        limit_mb = settings.UPLOAD_MAX_BYTES / (1024 * 1024)
        raise InvalidArgument(f"File size exceeds {limit_mb:.0f}MB limit.")


def build_key(folder: str, prefix: str, content_type: str) -> str:
    """``<folder>/<prefix>_<millis>_<random>.<ext>``"""
    ext = ALLOWED_UPLOAD_TYPES.get(content_type) or (
        mimetypes.guess_extension(content_type) or ".bin"
    ).lstrip(".")
    stamp = int(time.time() * 1000)
    return f"{folder}/{prefix}_{stamp}_{uuid.uuid4().hex[:8]}.{ext}"


class AssetStore:
    def __init__(
        self,
        client: Any,
        bucket: str,
        public_base_url: Optional[str] = None,
        region: Optional[str] = None,
    ):
        self.client = client
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.region = region

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def upload(self, payload: bytes, content_type: str, key: str) -> StoredAsset:
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=payload,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Upload of {key} to bucket {self.bucket} failed: {e}")
            raise InternalError("Failed to upload file")

        logger.info(f"Uploaded {key} ({len(payload)} bytes, {content_type})")
        return StoredAsset(url=self.public_url(key), key=key)

    def delete(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Delete of {key} from bucket {self.bucket} failed: {e}")
            raise InternalError("Failed to delete file")
        logger.info(f"Deleted {key}")


def get_s3_client():
    return boto3.client(
        "s3",
        region_name=settings.AWS_REGION,
        endpoint_url=settings.S3_ENDPOINT_URL,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
    )


_store: Optional[AssetStore] = None


def get_asset_store() -> AssetStore:
    """FastAPI dependency; builds the S3-backed store on first use."""
    global _store
    if _store is None:
        if not settings.S3_BUCKET_NAME:
            raise InternalError("File storage is not configured")
        _store = AssetStore(
            client=get_s3_client(),
            bucket=settings.S3_BUCKET_NAME,
            public_base_url=settings.S3_PUBLIC_BASE_URL,
            region=settings.AWS_REGION,
        )
    return _store
