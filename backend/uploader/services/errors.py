from fastapi import status
from pydantic import BaseModel

from uploader.schemas import UploadErrorKind, UploadFailure

GENERIC_SERVER_MESSAGE = "Something went wrong!"
NO_FILE_MESSAGE = "No file selected or file type not allowed."

_CLIENT_ERRORS = frozenset(
    {
        UploadErrorKind.INVALID_FILE_TYPE,
        UploadErrorKind.NO_FILE_PROVIDED,
        UploadErrorKind.MALFORMED_REQUEST,
        UploadErrorKind.PAYLOAD_TOO_LARGE,
    }
)


class ClassifiedError(BaseModel):
    kind: UploadErrorKind
    status_code: int
    message: str


def status_for(kind: UploadErrorKind) -> int:
    if kind in _CLIENT_ERRORS:
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _message_for(failure: UploadFailure) -> str:
    kind = failure.kind
    if kind is UploadErrorKind.INVALID_FILE_TYPE:
        return f"Error: {failure.message}"
    if kind is UploadErrorKind.NO_FILE_PROVIDED:
        return f"Error: {NO_FILE_MESSAGE}"
    if kind in (UploadErrorKind.MALFORMED_REQUEST, UploadErrorKind.PAYLOAD_TOO_LARGE):
        return f"Upload Error: {failure.message}"
    if kind in (UploadErrorKind.STORAGE_WRITE_ERROR, UploadErrorKind.URL_SIGNING_ERROR):
        # Store errors are shown verbatim.
        return f"Error processing file: {failure.message or 'Unknown server error'}"
    return f"Server Error: {GENERIC_SERVER_MESSAGE}"


def classify_failure(failure: UploadFailure) -> ClassifiedError:
    return ClassifiedError(
        kind=failure.kind,
        status_code=status_for(failure.kind),
        message=_message_for(failure),
    )


def malformed_request(detail: str) -> UploadFailure:
    return UploadFailure(kind=UploadErrorKind.MALFORMED_REQUEST, message=detail)


def payload_too_large(limit: int) -> UploadFailure:
    return UploadFailure(
        kind=UploadErrorKind.PAYLOAD_TOO_LARGE,
        message=f"File too large (limit {limit} bytes)",
    )


def unclassified_failure() -> UploadFailure:
    # The exception text stays in the logs, never in the page.
    return UploadFailure(
        kind=UploadErrorKind.UNCLASSIFIED_SERVER_ERROR,
        message=GENERIC_SERVER_MESSAGE,
    )
