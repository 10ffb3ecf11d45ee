from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PipelineStage(str, Enum):
    VALIDATE = "validate"
    BIND = "bind"
    KEYGEN = "keygen"
    STORE = "store"
    SIGN = "sign"


class UploadErrorKind(str, Enum):
    INVALID_FILE_TYPE = "invalid_file_type"
    NO_FILE_PROVIDED = "no_file_provided"
    MALFORMED_REQUEST = "malformed_request"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    STORAGE_WRITE_ERROR = "storage_write_error"
    URL_SIGNING_ERROR = "url_signing_error"
    UNCLASSIFIED_SERVER_ERROR = "unclassified_server_error"


class UploadRequest(BaseModel):
    """A single buffered upload, alive for one pipeline run."""

    model_config = ConfigDict(frozen=True)

    original_filename: str
    content_type: str = Field(default="application/octet-stream")
    content: bytes
    size_bytes: int = Field(..., ge=0)


class PresignedUrl(BaseModel):
    url: str
    expires_at: datetime


class UploadSuccess(BaseModel):
    download_url: str
    original_filename: str
    expiry_seconds: int
    storage_key: str
    expires_at: datetime


class UploadFailure(BaseModel):
    kind: UploadErrorKind
    message: str
    stage: PipelineStage | None = None
    storage_key: str | None = None
    # True when the object reached the store but no link could be issued.
    object_stored: bool = False


PipelineOutcome = UploadSuccess | UploadFailure
