from functools import lru_cache

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_PRESIGNED_URL_TTL = 7 * 24 * 3600


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        protected_namespaces=(),
    )

    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=80, alias="PORT")

    s3_endpoint: HttpUrl | None = Field(default=None, alias="S3_ENDPOINT_URL")
    s3_access_key: str | None = Field(default=None, alias="S3_ACCESS_KEY")
    s3_secret_key: str | None = Field(default=None, alias="S3_SECRET_KEY")
    s3_region: str = Field(default="eu-north-1", alias="S3_REGION")
    s3_bucket: str = Field(default="project-file-app-bucket-1414", alias="S3_BUCKET")

    # Comma separated, e.g. ".txt,.pdf"
    allowed_extensions_raw: str = Field(
        default=".txt,.pdf,.png,.jpg,.jpeg",
        alias="ALLOWED_EXTENSIONS",
    )
    # SigV4 presigned URLs are capped at seven days.
    presigned_url_ttl: int = Field(
        default=3600, alias="PRESIGNED_URL_TTL", gt=0, le=MAX_PRESIGNED_URL_TTL
    )
    max_upload_bytes: int | None = Field(default=None, alias="MAX_UPLOAD_BYTES", gt=0)
    allow_empty_files: bool = Field(default=False, alias="ALLOW_EMPTY_FILES")

    @property
    def allowed_extensions(self) -> tuple[str, ...]:
        extensions = []
        for item in self.allowed_extensions_raw.split(","):
            item = item.strip().lower()
            if not item:
                continue
            extensions.append(item if item.startswith(".") else f".{item}")
        return tuple(extensions)


@lru_cache
def get_settings() -> Settings:
    return Settings()
