"""
ogextract - Open Graph, Twitter Card and App Link metadata extraction.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .cache import ExtractionCache, NullCache, cache_key, create_cache
from .client import FetchError, FetchResult, OpenGraphClient
from .config import Config, CustomMetaTag, ExtractOptions, load_config
from .metadata import MetadataExtractor, extract, extract_detailed
from .protocols import UNSET, ConfigError, ExtractionResult, OgExtractError

__all__ = [
    "__version__",
    "UNSET",
    "Config",
    "ConfigError",
    "CustomMetaTag",
    "ExtractOptions",
    "ExtractionCache",
    "ExtractionResult",
    "FetchError",
    "FetchResult",
    "MetadataExtractor",
    "NullCache",
    "OgExtractError",
    "OpenGraphClient",
    "cache_key",
    "create_cache",
    "extract",
    "extract_detailed",
    "load_config",
]
