"""Infrastructure factory for creating service instances from configuration."""

from typing import Any, cast

from vidhost.commons.infrastructure.blob import BlobStorageBase, MinioBlobStorage
from vidhost.commons.infrastructure.catalog import (
    BlobCatalogStore,
    CatalogStoreBase,
    MongoCatalogStore,
    SqlCatalogStore,
)
from vidhost.commons.settings.models import Settings
from vidhost.commons.telemetry import get_logger
from vidhost.domain.exceptions import ConfigurationError
from vidhost.infrastructure.media import (
    FFmpegThumbnailDeriver,
    FFmpegVideoNormalizer,
    PassthroughVideoNormalizer,
    ThumbnailDeriverBase,
    VideoNormalizerBase,
)

logger = get_logger(__name__)


class InfrastructureFactory:
    """Creates and caches the process-wide service instances.

    Each provider is built once on first use and shared by all requests.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}

    def validate(self) -> None:
        """Fail fast on configuration the service cannot run without.

        Raises:
            ConfigurationError: If object store settings are incomplete.
        """
        missing = self._settings.blob_storage.missing_fields()
        if missing:
            raise ConfigurationError("blob_storage", missing)

    def get_blob_storage(self) -> BlobStorageBase:
        """Get blob storage instance.

        Returns:
            Configured blob storage provider.
        """
        if "blob_storage" not in self._instances:
            self.validate()
            blob_settings = self._settings.blob_storage
            self._instances["blob_storage"] = MinioBlobStorage(
                endpoint=blob_settings.resolved_endpoint(),
                access_key=blob_settings.access_key,
                secret_key=blob_settings.secret_key,
                public_url=blob_settings.public_url,
                secure=blob_settings.use_ssl,
                region=blob_settings.region,
            )
        return cast("BlobStorageBase", self._instances["blob_storage"])

    def get_catalog(self) -> CatalogStoreBase:
        """Get the catalog backend selected by ``catalog.provider``.

        Returns:
            Configured catalog store.

        Raises:
            ValueError: If provider is not supported.
        """
        if "catalog" not in self._instances:
            catalog_settings = self._settings.catalog
            provider = catalog_settings.provider

            if provider == "mongodb":
                catalog: CatalogStoreBase = MongoCatalogStore(
                    connection_string=catalog_settings.connection_string,
                    database_name=catalog_settings.database,
                    username=catalog_settings.username,
                    password=catalog_settings.password,
                    timeout_ms=catalog_settings.timeout_ms,
                    videos_collection=catalog_settings.videos_collection,
                    users_collection=catalog_settings.users_collection,
                )
            elif provider == "sql":
                catalog = SqlCatalogStore(
                    url=catalog_settings.url,
                    ssl=catalog_settings.ssl,
                    echo=self._settings.app.debug,
                )
            elif provider == "blob":
                catalog = BlobCatalogStore(
                    blob_storage=self.get_blob_storage(),
                    bucket=self._settings.blob_storage.bucket,
                    videos_object=catalog_settings.videos_object,
                    users_object=catalog_settings.users_object,
                )
            else:
                raise ValueError(f"Unsupported catalog provider: {provider}")

            logger.info("Catalog backend selected", extra={"provider": provider})
            self._instances["catalog"] = catalog

        return cast("CatalogStoreBase", self._instances["catalog"])

    def get_thumbnail_deriver(self) -> ThumbnailDeriverBase:
        """Get thumbnail deriver instance.

        Returns:
            Configured thumbnail deriver.
        """
        if "thumbnail_deriver" not in self._instances:
            media = self._settings.media
            self._instances["thumbnail_deriver"] = FFmpegThumbnailDeriver(
                ffmpeg_path=media.ffmpeg_path,
                frame_offset=media.thumbnail_offset,
                frame_size=(media.thumbnail_width, media.thumbnail_height),
            )
        return cast("ThumbnailDeriverBase", self._instances["thumbnail_deriver"])

    def get_video_normalizer(self) -> VideoNormalizerBase:
        """Get the normalizer: ffmpeg re-encode or pass-through.

        Returns:
            Configured video normalizer.
        """
        if "video_normalizer" not in self._instances:
            if self._settings.normalize_video:
                normalizer: VideoNormalizerBase = FFmpegVideoNormalizer(
                    ffmpeg_path=self._settings.media.ffmpeg_path,
                )
            else:
                normalizer = PassthroughVideoNormalizer()
            self._instances["video_normalizer"] = normalizer
        return cast("VideoNormalizerBase", self._instances["video_normalizer"])

    async def close_all(self) -> None:
        """Close all service connections."""
        for name, instance in self._instances.items():
            close = getattr(instance, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception:
                logger.warning(
                    "Error while closing service",
                    extra={"service": name},
                    exc_info=True,
                )

        self._instances.clear()


class _FactoryHolder:
    """Holder for the factory singleton to avoid global statements."""

    instance: InfrastructureFactory | None = None


def get_factory(settings: Settings | None = None) -> InfrastructureFactory:
    """Get or create the infrastructure factory singleton.

    Args:
        settings: Settings to use. Required on first call.

    Returns:
        Infrastructure factory instance.

    Raises:
        ValueError: If settings not provided on first call.
    """
    if _FactoryHolder.instance is None:
        if settings is None:
            raise ValueError("Settings required to initialize factory")
        _FactoryHolder.instance = InfrastructureFactory(settings)

    return _FactoryHolder.instance


def reset_factory() -> None:
    """Reset the factory singleton (for testing)."""
    _FactoryHolder.instance = None
