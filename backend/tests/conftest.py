import importlib
import os
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from uploader.core.config import get_settings
from uploader.services import storage as storage_service
from uploader.services.storage import StorageError


class DummyStorage(storage_service.StorageService):
    def __init__(self) -> None:  # type: ignore[super-init-not-called]
        self.settings = get_settings()
        self.bucket = "dummy"
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.put_calls: list[str] = []
        self.sign_calls: list[tuple[str, int]] = []
        self.put_error: Exception | None = None
        self.sign_error: Exception | None = None

    async def put_object(self, key: str, body: bytes, content_type: str) -> str | None:  # type: ignore[override]
        self.put_calls.append(key)
        if self.put_error is not None:
            raise self.put_error
        self.objects[key] = (body, content_type)
        return '"dummy-etag"'

    async def create_presigned_get(self, key: str, expires_in: int = 3600) -> str:  # type: ignore[override]
        self.sign_calls.append((key, expires_in))
        if self.sign_error is not None:
            raise self.sign_error
        return f"https://example.com/get/{key}?X-Amz-Expires={expires_in}"


@pytest.fixture(scope="session", autouse=True)
def configure_environment():
    os.environ["S3_ACCESS_KEY"] = "test"
    os.environ["S3_SECRET_KEY"] = "test"
    os.environ["S3_REGION"] = "eu-north-1"
    os.environ["S3_BUCKET"] = "test-bucket"
    os.environ.pop("MAX_UPLOAD_BYTES", None)
    os.environ.pop("ALLOW_EMPTY_FILES", None)
    get_settings.cache_clear()
    storage_service.reset_storage_service()


@pytest.fixture
def settings_env(monkeypatch):
    """Override settings through the environment for a single test."""

    def _apply(**values: str) -> None:
        for name, value in values.items():
            monkeypatch.setenv(name, value)
        get_settings.cache_clear()

    yield _apply
    get_settings.cache_clear()


@pytest.fixture
def dummy_storage() -> DummyStorage:
    return DummyStorage()


@pytest.fixture
def failing_put_storage(dummy_storage) -> DummyStorage:
    dummy_storage.put_error = StorageError("Access Denied")
    return dummy_storage


@pytest.fixture(scope="session")
def app_instance(configure_environment):
    from uploader import main as app_module

    importlib.reload(app_module)
    return app_module.app


@pytest.fixture
def install_storage(app_instance):
    """Build the pipeline around ``storage`` the way the lifespan does."""
    from uploader.main import build_pipeline

    def _install(storage: DummyStorage) -> None:
        settings = get_settings()
        app_instance.state.settings = settings
        app_instance.state.upload_pipeline = build_pipeline(settings, storage)

    return _install


@pytest_asyncio.fixture
async def client(app_instance, install_storage, dummy_storage):
    install_storage(dummy_storage)
    transport = ASGITransport(app=app_instance)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
