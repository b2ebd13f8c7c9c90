"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import DEFAULT_EXPORT_ORDER, DEFAULT_IMPORT_ORDER, MirrorConfig, RemoteConfig

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "DEFAULT_EXPORT_ORDER",
    "DEFAULT_IMPORT_ORDER",
    "MirrorConfig",
    "RemoteConfig",
]
