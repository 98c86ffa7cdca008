"""Settings management module."""

from videotube.commons.settings.loader import (
    SettingsLoader,
    get_settings,
    reset_settings,
)
from videotube.commons.settings.models import (
    AppSettings,
    BlobStorageSettings,
    DocumentCollectionSettings,
    DocumentDBSettings,
    ProcessingSettings,
    ServerSettings,
    Settings,
    StreamingSettings,
    TelemetrySettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "get_settings",
    "reset_settings",
    # Sections
    "Settings",
    "AppSettings",
    "ServerSettings",
    "BlobStorageSettings",
    "DocumentDBSettings",
    "DocumentCollectionSettings",
    "ProcessingSettings",
    "StreamingSettings",
    "TelemetrySettings",
]
