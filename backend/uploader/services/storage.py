import asyncio
import logging

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from uploader.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the object store rejects or fails a request."""


def _error_message(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {}) or {}
        return error.get("Message") or error.get("Code") or str(exc)
    return str(exc)


class StorageService:
    """S3-compatible object store: buffered PUT plus presigned GET."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        session = boto3.session.Session()
        self.client = session.client(
            "s3",
            endpoint_url=str(settings.s3_endpoint) if settings.s3_endpoint else None,
            aws_access_key_id=settings.s3_access_key,
            aws_secret_access_key=settings.s3_secret_key,
            region_name=settings.s3_region,
            config=Config(signature_version="s3v4"),
        )
        self.bucket = settings.s3_bucket

    async def put_object(self, key: str, body: bytes, content_type: str) -> str | None:
        """Store ``body`` under ``key``, overwriting any existing object.

        Returns the ETag reported by the store.
        """

        def _upload() -> dict:
            return self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )

        try:
            response = await asyncio.to_thread(_upload)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(_error_message(exc)) from exc
        return response.get("ETag")

    async def create_presigned_get(self, key: str, expires_in: int = 3600) -> str:
        # The object is not checked for existence. Signing may refresh
        # credentials over the network, so it runs off the event loop.

        def _sign() -> str:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )

        try:
            return await asyncio.to_thread(_sign)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(_error_message(exc)) from exc


_storage_service: StorageService | None = None


def get_storage_service() -> StorageService:
    global _storage_service
    if _storage_service is None:
        settings = get_settings()
        logger.info(
            "Using S3 bucket %s in region %s", settings.s3_bucket, settings.s3_region
        )
        _storage_service = StorageService(settings)
    return _storage_service


def reset_storage_service() -> None:
    global _storage_service
    _storage_service = None
