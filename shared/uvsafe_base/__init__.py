from .location import BaseLocationProvider, FeedLocationProvider, LocationFix, StaticLocationProvider, create_location_provider
from .notifier import Alert, BaseNotifier, LogNotifier, create_notifier
from .settings import DisplaySettings, SettingsStore

__all__ = [
    "Alert",
    "BaseLocationProvider",
    "BaseNotifier",
    "DisplaySettings",
    "FeedLocationProvider",
    "LocationFix",
    "LogNotifier",
    "SettingsStore",
    "StaticLocationProvider",
    "create_location_provider",
    "create_notifier",
]
