"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    DEFAULT_TTL_SECONDS,
    DEFAULT_USER_AGENT,
    NIGHTLY_VERSION,
    GlobalConfig,
    SourceConfig,
    SyncConfig,
)

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "DEFAULT_TTL_SECONDS",
    "DEFAULT_USER_AGENT",
    "GlobalConfig",
    "NIGHTLY_VERSION",
    "SourceConfig",
    "SyncConfig",
]
