from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone

from uploader.schemas import (
    PipelineOutcome,
    PipelineStage,
    PresignedUrl,
    UploadErrorKind,
    UploadFailure,
    UploadRequest,
    UploadSuccess,
)
from uploader.services.errors import NO_FILE_MESSAGE
from uploader.services.keys import current_timestamp_ms, generate_storage_key
from uploader.services.storage import StorageError, StorageService
from uploader.services.validation import (
    DEFAULT_ALLOWED_EXTENSIONS,
    ExtensionRejected,
    validate_extension,
)

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_SECONDS = 3600


class UploadPipeline:
    """Validate, bind, key, store and sign one upload.

    Stages run strictly in order and every run yields exactly one outcome. The
    pipeline keeps no per-request state, so one instance serves all requests.
    A failed sign after a successful store leaves the object in place without
    a link; nothing is rolled back.
    """

    def __init__(
        self,
        storage: StorageService,
        allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS,
        expiry_seconds: int = DEFAULT_EXPIRY_SECONDS,
        allow_empty_files: bool = False,
        clock: Callable[[], int] = current_timestamp_ms,
    ) -> None:
        self.storage = storage
        self.allowed_extensions = tuple(allowed_extensions)
        self.expiry_seconds = expiry_seconds
        self.allow_empty_files = allow_empty_files
        self.clock = clock

    async def run(self, upload: UploadRequest | None) -> PipelineOutcome:
        stage = PipelineStage.VALIDATE
        if upload is not None and upload.original_filename:
            decision = validate_extension(upload.original_filename, self.allowed_extensions)
            if isinstance(decision, ExtensionRejected):
                logger.info(
                    "Rejected upload %r: %s", upload.original_filename, decision.reason
                )
                return UploadFailure(
                    kind=UploadErrorKind.INVALID_FILE_TYPE,
                    message=decision.reason,
                    stage=stage,
                )

        stage = PipelineStage.BIND
        if not self._is_bound(upload):
            logger.info("No usable file in upload request")
            return UploadFailure(
                kind=UploadErrorKind.NO_FILE_PROVIDED,
                message=NO_FILE_MESSAGE,
                stage=stage,
            )

        stage = PipelineStage.KEYGEN
        key = generate_storage_key(upload.original_filename, self.clock())

        stage = PipelineStage.STORE
        logger.info(
            "Uploading %s (original: %s, %d bytes) to bucket %s",
            key,
            upload.original_filename,
            upload.size_bytes,
            self.storage.bucket,
        )
        try:
            etag = await self.storage.put_object(key, upload.content, upload.content_type)
        except StorageError as exc:
            logger.error("Upload of %s failed: %s", key, exc)
            return UploadFailure(
                kind=UploadErrorKind.STORAGE_WRITE_ERROR,
                message=str(exc),
                stage=stage,
                storage_key=key,
            )
        logger.info("Stored %s (ETag %s)", key, etag)

        stage = PipelineStage.SIGN
        try:
            presigned = await self._sign(key)
        except StorageError as exc:
            logger.error("Stored %s but could not sign a download URL: %s", key, exc)
            return UploadFailure(
                kind=UploadErrorKind.URL_SIGNING_ERROR,
                message=str(exc),
                stage=stage,
                storage_key=key,
                object_stored=True,
            )
        logger.info("Issued download URL for %s, valid %ss", key, self.expiry_seconds)

        return UploadSuccess(
            download_url=presigned.url,
            original_filename=upload.original_filename,
            expiry_seconds=self.expiry_seconds,
            storage_key=key,
            expires_at=presigned.expires_at,
        )

    def _is_bound(self, upload: UploadRequest | None) -> bool:
        if upload is None or not upload.original_filename:
            return False
        if upload.size_bytes == 0 and not self.allow_empty_files:
            return False
        return True

    async def _sign(self, key: str) -> PresignedUrl:
        issued_at = datetime.now(timezone.utc)
        url = await self.storage.create_presigned_get(key, expires_in=self.expiry_seconds)
        return PresignedUrl(
            url=url,
            expires_at=issued_at + timedelta(seconds=self.expiry_seconds),
        )
