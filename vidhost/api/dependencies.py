"""FastAPI dependency injection for services and settings."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from vidhost.application.services.ingestion import VideoIngestionService
from vidhost.application.services.library import LibraryService
from vidhost.application.services.staging import UploadStaging
from vidhost.commons.settings.loader import get_settings as _load_settings
from vidhost.commons.settings.models import Settings
from vidhost.commons.telemetry import get_logger
from vidhost.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)

logger = get_logger(__name__)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Application settings loaded from config files and environment.
    """
    return _load_settings()


def get_infrastructure_factory(
    settings: Annotated[Settings, Depends(get_settings)],
) -> InfrastructureFactory:
    """Get infrastructure factory with all providers.

    Args:
        settings: Application settings.

    Returns:
        Configured infrastructure factory.
    """
    return get_factory(settings)


def get_staging(
    settings: Annotated[Settings, Depends(get_settings)],
) -> UploadStaging:
    """Get upload staging configured from settings."""
    return UploadStaging(
        directory=settings.staging.directory,
        mode=settings.staging.mode,
    )


def get_ingestion_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    staging: Annotated[UploadStaging, Depends(get_staging)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VideoIngestionService:
    """Get video ingestion service with all dependencies.

    Args:
        factory: Infrastructure factory.
        staging: Upload staging.
        settings: Application settings.

    Returns:
        Configured video ingestion service.
    """
    return VideoIngestionService(
        blob_storage=factory.get_blob_storage(),
        catalog=factory.get_catalog(),
        thumbnail_deriver=factory.get_thumbnail_deriver(),
        video_normalizer=factory.get_video_normalizer(),
        staging=staging,
        settings=settings,
    )


def get_library_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> LibraryService:
    """Get library service with all dependencies.

    Args:
        factory: Infrastructure factory.
        settings: Application settings.

    Returns:
        Configured library service.
    """
    blob_settings = settings.blob_storage
    return LibraryService(
        catalog=factory.get_catalog(),
        blob_storage=factory.get_blob_storage(),
        bucket=blob_settings.bucket,
        prefixes={
            "thumbnail": blob_settings.thumbnails_prefix,
            "video": blob_settings.videos_prefix,
        },
    )


# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]
FactoryDep = Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)]
IngestionServiceDep = Annotated[VideoIngestionService, Depends(get_ingestion_service)]
LibraryServiceDep = Annotated[LibraryService, Depends(get_library_service)]


async def init_services(settings: Settings) -> None:
    """Initialize all infrastructure services on startup.

    Args:
        settings: Application settings.

    Raises:
        ConfigurationError: If blob storage settings are incomplete.
    """
    factory = get_factory(settings)

    # Fail fast before accepting requests
    factory.validate()
    factory.get_blob_storage()
    catalog = factory.get_catalog()
    await catalog.ensure_schema_ready()

    get_staging(settings).prepare()
    logger.info(
        "Services initialized",
        extra={
            "catalog_provider": settings.catalog.provider,
            "normalize_video": settings.normalize_video,
            "staging_mode": settings.staging.mode,
        },
    )


async def shutdown_services() -> None:
    """Shutdown all infrastructure services."""
    try:
        factory = get_factory()
        await factory.close_all()
    except ValueError:
        pass  # Factory not initialized
    finally:
        reset_factory()
        get_settings.cache_clear()
