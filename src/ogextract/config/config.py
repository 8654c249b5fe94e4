"""
Configuration management for ogextract using Pydantic.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ogextract.protocols import ConfigError

# --- Setup Logging ---
log = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "ogextract/0.1.0 (+https://github.com/ogextract/ogextract)"

# --- Extraction Options ---


class CustomMetaTag(BaseModel):
    """A caller-defined tag appended to the built-in field table."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    multiple: bool = Field(default=False, description="Collect every matching tag into a list.")
    property: str = Field(description="The meta property / name to match, case-insensitively.")
    field_name: str = Field(alias="fieldName", description="Record field the tag fills.")

    @field_validator("property", "field_name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v


class ExtractOptions(BaseModel):
    """Per-call extraction options. camelCase aliases are accepted."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    custom_meta_tags: List[CustomMetaTag] = Field(
        default_factory=list,
        alias="customMetaTags",
        description="Extra tag specs appended to the built-in field table.",
    )
    all_media: bool = Field(
        default=False, alias="allMedia", description="Keep every media record instead of only the best one."
    )
    only_get_open_graph_info: bool = Field(
        default=False, alias="onlyGetOpenGraphInfo", description="Skip the fallback resolver entirely."
    )
    og_image_fallback: bool = Field(
        default=False, alias="ogImageFallback", description="Scrape <img> tags when no og:image is present."
    )
    extract_structured_data: bool = Field(
        default=False,
        alias="extractStructuredData",
        description="Parse JSON-LD, microdata, RDFa and Dublin Core and use them to fill gaps.",
    )
    validate_data: bool = Field(
        default=False, alias="validateData", description="Run Open Graph and Twitter Card validation."
    )
    generate_score: bool = Field(
        default=False, alias="generateScore", description="Compute a social sharing score."
    )
    select_best_image: bool = Field(
        default=False,
        alias="selectBestImage",
        description="Also report the highest scoring page image. Never changes ogImage.",
    )
    extract_media_details: bool = Field(
        default=False,
        alias="extractMediaDetails",
        description="Also describe every page image, the main video and the main audio track.",
    )

    def merged(self, **overrides: Any) -> ExtractOptions:
        """Return a copy with ``overrides`` applied. Keys may be snake_case or camelCase."""
        if not overrides:
            return self
        aliases = {field.alias: name for name, field in ExtractOptions.model_fields.items() if field.alias}
        values = self.model_dump()
        for key, value in overrides.items():
            values[aliases.get(key, key)] = value
        return ExtractOptions.model_validate(values)


# --- Nested Configuration Models ---


class CacheConfig(BaseModel):
    """In-memory result cache used by the fetch client."""

    enabled: bool = Field(default=False, description="Cache fetch results.")
    ttl_seconds: float = Field(default=3600.0, gt=0, description="Seconds an entry stays fresh.")
    max_size: int = Field(default=1000, gt=0, description="Maximum number of cached entries.")


class ClientConfig(BaseModel):
    """HTTP client configuration."""

    timeout: float = Field(default=10.0, gt=0, description="HTTP request timeout in seconds.")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent string for HTTP requests.")
    max_concurrency: int = Field(default=5, ge=1, description="Max concurrent requests in fetch_many.")
    follow_redirects: bool = Field(default=True, description="Follow HTTP redirects.")
    max_body_bytes: int = Field(default=5 * 1024 * 1024, gt=0, description="Largest response body accepted.")


class MonitoringConfig(BaseModel):
    """Logging configuration."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: Optional[str] = Field(default=None, description="Path to log file. If None, logs to console.")
    json_logs: bool = Field(default=False, description="Render console logs as JSON.")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {v}")
        return level

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "ogextract"
    version: str = "0.1.0"
    extraction: ExtractOptions = Field(default_factory=ExtractOptions)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="OGEXTRACT_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise ConfigError(f"Configuration file not found or is not a file: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                yaml_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in configuration file {path}: {e}") from e
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls()
        if not isinstance(yaml_data, dict):
            raise ConfigError(f"Configuration file must contain a mapping: {path}")
        return cls(**yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    paths_to_check = [
        current_dir / "ogextract.yaml",
        current_dir / "ogextract.yml",
        current_dir / "config.yaml",
        current_dir / "config.yml",
    ]
    for path in paths_to_check:
        if path.exists():
            return path
    return None


def load_config(path: Path | None = None) -> Config:
    """Load configuration from ``path``, a discovered config file, or defaults.

    Environment variables prefixed ``OGEXTRACT_`` fill whatever the file leaves out.
    """
    config_path = path or find_config_file()
    if config_path is None:
        log.debug("No config file found. Using default settings.")
        return Config()
    log.info("Loading configuration from: %s", config_path)
    return Config.from_yaml(Path(config_path))
