"""Configuration models and loaders."""

from .config import (
    CacheConfig,
    ClientConfig,
    Config,
    CustomMetaTag,
    ExtractOptions,
    MonitoringConfig,
    find_config_file,
    load_config,
)

__all__ = [
    "CacheConfig",
    "ClientConfig",
    "Config",
    "CustomMetaTag",
    "ExtractOptions",
    "MonitoringConfig",
    "find_config_file",
    "load_config",
]
