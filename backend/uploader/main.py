from contextlib import asynccontextmanager

from fastapi import FastAPI

from uploader.api.routers import upload as upload_router
from uploader.core.config import Settings, get_settings
from uploader.core.logging import configure_logging
from uploader.services.pipeline import UploadPipeline
from uploader.services.storage import StorageService, get_storage_service


def build_pipeline(settings: Settings, storage: StorageService) -> UploadPipeline:
    return UploadPipeline(
        storage,
        allowed_extensions=settings.allowed_extensions,
        expiry_seconds=settings.presigned_url_ttl,
        allow_empty_files=settings.allow_empty_files,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    app.state.settings = settings
    app.state.upload_pipeline = build_pipeline(settings, get_storage_service())
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)
    app = FastAPI(
        debug=settings.debug,
        title="File Upload Service",
        lifespan=lifespan,
    )

    app.include_router(upload_router.router)

    @app.get("/healthz", include_in_schema=False)
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
