"""Pydantic settings models for application configuration."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "vidhost"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class ServerSettings(BaseModel):
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    reload: bool = False
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    docs_enabled: bool = True


class BlobStorageSettings(BaseModel):
    """S3-compatible object store settings (Cloudflare R2, AWS S3, MinIO)."""

    account_id: str = ""
    access_key: str = ""
    secret_key: str = ""
    bucket: str = ""
    public_url: str = ""
    endpoint: str | None = Field(
        default=None,
        description="Explicit host[:port]; derived from account_id when unset",
    )
    use_ssl: bool = True
    region: str = "auto"
    thumbnails_prefix: str = "thumbnails"
    videos_prefix: str = "videos"

    def resolved_endpoint(self) -> str:
        """Return the host the client should talk to."""
        if self.endpoint:
            return self.endpoint
        return f"{self.account_id}.r2.cloudflarestorage.com"

    def missing_fields(self) -> list[str]:
        """Names of required fields that are not configured."""
        missing = [
            name
            for name in ("access_key", "secret_key", "bucket", "public_url")
            if not getattr(self, name)
        ]
        if not self.endpoint and not self.account_id:
            missing.insert(0, "account_id")
        return missing


class CatalogSettings(BaseModel):
    """Catalog backend settings.

    Only the fields of the selected provider are used:
    - mongodb: connection_string, username, password, database, timeout_ms
    - sql: url, ssl
    - blob: videos_object, users_object (stored in the blob bucket)
    """

    provider: Literal["mongodb", "sql", "blob"] = "mongodb"

    connection_string: str = "mongodb://localhost:27017"
    username: str = ""
    password: str = ""
    database: str = "video_platform"
    timeout_ms: int = Field(default=10000, ge=1)

    url: str = "postgresql+asyncpg://localhost:5432/video_platform"
    ssl: bool = False

    videos_collection: str = "videos"
    users_collection: str = "users"

    videos_object: str = "videos.json"
    users_object: str = "users.json"


class StagingSettings(BaseModel):
    """Where raw uploads are held while a request is processed."""

    mode: Literal["disk", "memory"] = "disk"
    directory: str = "uploads"


class MediaSettings(BaseModel):
    """External transcode settings."""

    ffmpeg_path: str = "ffmpeg"
    thumbnail_offset: str = "00:00:05"
    thumbnail_width: int = Field(default=400, ge=1)
    thumbnail_height: int = Field(default=225, ge=1)


class ProcessingSettings(BaseModel):
    """Pipeline stage toggles."""

    # None means "decide from the catalog provider" (flat-file only).
    normalize_video: bool | None = None


class MediaUrlSettings(BaseModel):
    """How record URLs point at stored artifacts."""

    video: Literal["public", "proxy"] = "public"
    thumbnail: Literal["public", "proxy"] = "proxy"


class TelemetrySettings(BaseModel):
    """Logging settings."""

    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    blob_storage: BlobStorageSettings = Field(default_factory=BlobStorageSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    staging: StagingSettings = Field(default_factory=StagingSettings)
    media: MediaSettings = Field(default_factory=MediaSettings)
    processing: ProcessingSettings = Field(default_factory=ProcessingSettings)
    media_urls: MediaUrlSettings = Field(default_factory=MediaUrlSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VIDHOST__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def normalize_video(self) -> bool:
        """Whether uploads are re-encoded before storage."""
        if self.processing.normalize_video is not None:
            return self.processing.normalize_video
        return self.catalog.provider == "blob"
