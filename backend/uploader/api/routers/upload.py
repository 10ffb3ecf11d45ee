import logging
from pathlib import Path

from fastapi import APIRouter, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from uploader.core.config import Settings
from uploader.schemas import PipelineOutcome, UploadFailure, UploadRequest, UploadSuccess
from uploader.services.errors import (
    classify_failure,
    malformed_request,
    payload_too_large,
    unclassified_failure,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["upload"])
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[2] / "templates"))

FILE_FIELD = "file"
SUCCESS_MESSAGE = "File successfully uploaded!"


def describe_expiry(seconds: int) -> str:
    if seconds % 3600 == 0:
        hours = seconds // 3600
        return "1 hour" if hours == 1 else f"{hours} hours"
    if seconds % 60 == 0:
        minutes = seconds // 60
        return "1 minute" if minutes == 1 else f"{minutes} minutes"
    return f"{seconds} seconds"


def _render(
    request: Request,
    status_code: int = status.HTTP_200_OK,
    message: str | None = None,
    is_error: bool = False,
    success: UploadSuccess | None = None,
) -> HTMLResponse:
    settings: Settings = request.app.state.settings
    context = {
        "message": message,
        "is_error": is_error,
        "allowed_extensions": settings.allowed_extensions,
        "download_url": success.download_url if success else None,
        "uploaded_filename": success.original_filename if success else None,
        "expiry_text": describe_expiry(success.expiry_seconds) if success else None,
    }
    return templates.TemplateResponse(
        request, "upload_form.html", context, status_code=status_code
    )


async def _read_upload(
    form: FormData, settings: Settings
) -> tuple[UploadRequest | None, UploadFailure | None]:
    """Buffer the ``file`` field fully in memory."""
    field = form.get(FILE_FIELD)
    if not isinstance(field, UploadFile):
        return None, None

    limit = settings.max_upload_bytes
    if limit is not None and field.size is not None and field.size > limit:
        return None, payload_too_large(limit)

    content = await field.read()
    if limit is not None and len(content) > limit:
        return None, payload_too_large(limit)

    upload = UploadRequest(
        original_filename=field.filename or "",
        content_type=field.content_type or "application/octet-stream",
        content=content,
        size_bytes=len(content),
    )
    return upload, None


@router.get("/", response_class=HTMLResponse)
async def upload_form(request: Request) -> HTMLResponse:
    return _render(request)


@router.post("/", response_class=HTMLResponse)
async def upload_file(request: Request) -> HTMLResponse:
    settings: Settings = request.app.state.settings
    pipeline = request.app.state.upload_pipeline

    try:
        form = await request.form(max_files=1)
    except MultiPartException as exc:
        logger.warning("Malformed multipart body: %s", exc.message)
        return _render_outcome(request, malformed_request(exc.message))
    except StarletteHTTPException as exc:
        logger.warning("Malformed multipart body: %s", exc.detail)
        return _render_outcome(request, malformed_request(str(exc.detail)))

    try:
        upload, failure = await _read_upload(form, settings)
        outcome: PipelineOutcome
        if failure is not None:
            outcome = failure
        else:
            outcome = await pipeline.run(upload)
    except Exception:
        logger.exception("Unhandled error while processing upload")
        outcome = unclassified_failure()
    finally:
        await form.close()

    return _render_outcome(request, outcome)


def _render_outcome(request: Request, outcome: PipelineOutcome) -> HTMLResponse:
    if isinstance(outcome, UploadSuccess):
        return _render(request, message=SUCCESS_MESSAGE, success=outcome)

    classified = classify_failure(outcome)
    return _render(
        request,
        status_code=classified.status_code,
        message=classified.message,
        is_error=True,
    )
