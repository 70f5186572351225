"""Settings management module."""

from vidhost.commons.settings.loader import (
    SettingsLoader,
    get_settings,
    reset_settings,
)
from vidhost.commons.settings.models import (
    AppSettings,
    BlobStorageSettings,
    CatalogSettings,
    MediaSettings,
    MediaUrlSettings,
    ProcessingSettings,
    ServerSettings,
    Settings,
    StagingSettings,
    TelemetrySettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "get_settings",
    "reset_settings",
    # Main settings
    "Settings",
    "AppSettings",
    "ServerSettings",
    # Storage
    "BlobStorageSettings",
    "CatalogSettings",
    "StagingSettings",
    # Media pipeline
    "MediaSettings",
    "MediaUrlSettings",
    "ProcessingSettings",
    # Telemetry
    "TelemetrySettings",
]
