# casenotes/utils/s3.py
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from casenotes.core.config import settings
from casenotes.core.exceptions import StorageError
from casenotes.utils.storage import AttachmentStorage, generate_stored_name

logger = logging.getLogger(__name__)


class S3Storage(AttachmentStorage):
    """Attachment bytes in an S3 (or S3-compatible) bucket."""

    def __init__(self, client, bucket: str, prefix: str = ""):
        self.client = client
        self.bucket = bucket
        self.prefix = prefix

    @classmethod
    def from_settings(cls):
        if not settings.S3_BUCKET:
            raise RuntimeError("S3 not configured")
        client = boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT,
            aws_access_key_id=settings.S3_ACCESS_KEY,
            aws_secret_access_key=settings.S3_SECRET_KEY,
        )
        return cls(client, settings.S3_BUCKET, settings.S3_PREFIX)

    def _key(self, stored_name: str) -> str:
        return f"{self.prefix}{stored_name}"

    def save(self, data: bytes, original_name: str) -> str:
        stored_name = generate_stored_name(original_name)
        try:
            self.client.put_object(Bucket=self.bucket, Key=self._key(stored_name), Body=data)
        except (BotoCoreError, ClientError) as e:
            raise StorageError("Failed to upload attachment to S3", detail=str(e)) from e
        return stored_name

    def read(self, stored_name: str) -> bytes:
        try:
            resp = self.client.get_object(Bucket=self.bucket, Key=self._key(stored_name))
            return resp["Body"].read()
        except (BotoCoreError, ClientError) as e:
            raise StorageError("Failed to fetch attachment from S3", detail=str(e)) from e

    def delete(self, stored_name: str):
        try:
            self.client.delete_object(Bucket=self.bucket, Key=self._key(stored_name))
        except (BotoCoreError, ClientError) as e:
            raise StorageError("Failed to delete attachment from S3", detail=str(e)) from e
