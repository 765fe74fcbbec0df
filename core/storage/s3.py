"""S3 storage for uploaded resumes."""

import uuid
from typing import Optional
import logging

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from core.config import settings
from core.exceptions import DependencyFailure
from core.utils.validators import sanitize_filename

logger = logging.getLogger(__name__)


def _get_credentials() -> dict:
    """Explicit keys when configured; otherwise boto's default chain applies."""
    credentials = {"region_name": settings.aws_region}
    if settings.aws_access_key_id and settings.aws_secret_access_key:
        credentials["aws_access_key_id"] = settings.aws_access_key_id
        credentials["aws_secret_access_key"] = settings.aws_secret_access_key
    return credentials


class ResumeStorage:
    """Uploads resumes to S3 and hands back their public URL."""

    def __init__(self, bucket_name: Optional[str] = None, prefix: Optional[str] = None):
        """
        Args:
            bucket_name: S3 bucket name (defaults to AWS_S3_BUCKET)
            prefix: Key prefix (defaults to RESUME_PREFIX)
        """
        self.bucket_name = bucket_name or settings.aws_s3_bucket
        if not self.bucket_name:
            raise DependencyFailure("Resume storage is not configured")

        self.prefix = (prefix or settings.resume_prefix).strip("/")
        self.credentials = _get_credentials()

    def build_key(self, filename: str) -> str:
        return f"{self.prefix}/{uuid.uuid4().hex}-{sanitize_filename(filename)}"

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket_name}.s3.{self.credentials['region_name']}.amazonaws.com/{key}"

    async def upload(
        self,
        data: bytes,
        filename: str,
        content_type: str,
        metadata: Optional[dict] = None,
    ) -> dict:
        """
        Upload a resume.

        Args:
            data: File contents
            filename: Original filename, sanitised into the key
            content_type: Validated MIME type
            metadata: Optional S3 object metadata

        Returns:
            {"secure_url": ..., "public_id": <object key>}

        Raises:
            DependencyFailure: S3 rejected the upload or was unreachable
        """
        key = self.build_key(filename)
        upload_args = {
            "Bucket": self.bucket_name,
            "Key": key,
            "Body": data,
            "ContentType": content_type,
        }
        if metadata:
            upload_args["Metadata"] = metadata

        session = aioboto3.Session(**self.credentials)
        try:
            async with session.client("s3") as client:
                await client.put_object(**upload_args)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Resume upload to S3 failed: {type(e).__name__}: {e}")
            raise DependencyFailure("Failed to upload resume") from e

        logger.info(f"Uploaded resume to S3: {self.bucket_name}/{key} ({len(data)} bytes)")
        return {"secure_url": self.public_url(key), "public_id": key}
