from uploader.schemas.upload import (
    PipelineOutcome,
    PipelineStage,
    PresignedUrl,
    UploadErrorKind,
    UploadFailure,
    UploadRequest,
    UploadSuccess,
)

__all__ = [
    "PipelineOutcome",
    "PipelineStage",
    "PresignedUrl",
    "UploadErrorKind",
    "UploadFailure",
    "UploadRequest",
    "UploadSuccess",
]
