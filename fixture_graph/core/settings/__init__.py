from .base import DatabaseSettings, InstallSettings, LoggingSettings, Settings

settings = Settings()

__all__ = [
    "settings",
    "Settings",
    "LoggingSettings",
    "DatabaseSettings",
    "InstallSettings",
]
