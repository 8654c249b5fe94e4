"""
Core types and dataclasses for ogextract.

This module defines the data structures shared by every extraction stage:

- The ``UNSET`` sentinel, which marks a value that was never supplied (as
  opposed to ``None``, which is an explicit "no value" and survives cleaning)
- Media records produced by the media normalizer
- Error and severity enums used by validation and the fetch client
- The ``RawRecord`` type flowing between the collector, the normalizer and the
  fallback resolver
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class _Unset:
    """Sentinel type for values that were never supplied."""

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"

    def __copy__(self) -> "_Unset":
        return self

    def __deepcopy__(self, memo: Dict[int, Any]) -> "_Unset":
        return self


UNSET: Any = _Unset()


class OgExtractError(Exception):
    """Base class for all errors raised by ogextract."""


class ConfigError(OgExtractError):
    """Raised when a configuration file cannot be loaded."""


# ============================================================================
# Enums
# ============================================================================


class ErrorSeverity(Enum):
    """Severity levels for validation errors."""

    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ConfidenceLevel(Enum):
    """Coarse confidence bucket for an extraction."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# ============================================================================
# Media records
# ============================================================================


class MediaRecord:
    """Mixin giving media dataclasses a plain-dict view."""

    def to_dict(self) -> Dict[str, Any]:
        """Return the record as a dict, omitting attributes that are ``UNSET``."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}  # type: ignore[arg-type]
        return {key: value for key, value in values.items() if value is not UNSET}


@dataclass
class ImageMedia(MediaRecord):
    """An ``og:image`` entry."""

    url: Optional[str]
    width: Optional[str] = None
    height: Optional[str] = None
    type: Optional[str] = None


@dataclass
class VideoMedia(MediaRecord):
    """An ``og:video`` entry."""

    url: Optional[str]
    width: Optional[str] = None
    height: Optional[str] = None
    type: Optional[str] = None


@dataclass
class TwitterImageMedia(MediaRecord):
    """A ``twitter:image`` entry."""

    url: Optional[str]
    width: Optional[str] = None
    height: Optional[str] = None
    alt: Optional[str] = None


@dataclass
class TwitterPlayerMedia(MediaRecord):
    """A ``twitter:player`` entry."""

    url: Optional[str]
    width: Optional[str] = None
    height: Optional[str] = None
    stream: Optional[str] = None


@dataclass
class MusicSongMedia(MediaRecord):
    """A ``music:song`` entry. Missing values are empty strings, never None."""

    url: str = ""
    track: str = ""
    disc: str = ""


MediaItem = Union[ImageMedia, VideoMedia, TwitterImageMedia, TwitterPlayerMedia, MusicSongMedia]

# Values a record may hold: a scalar tag value, a list of tag values collected
# from a repeatable tag, or one / many resolved media records.
RecordValue = Union[str, None, List[Optional[str]], MediaItem, List[MediaItem]]
RawRecord = Dict[str, Union[RecordValue, Any]]


# ============================================================================
# Validation results
# ============================================================================


@dataclass
class ValidationIssue:
    """A single validation error or warning."""

    code: str
    message: str
    field: Optional[str] = None
    severity: Optional[ErrorSeverity] = None
    suggestion: Optional[str] = None


@dataclass
class ValidationResult:
    """Outcome of validating an extracted record."""

    valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    score: int = 100
    recommendations: List[str] = field(default_factory=list)


@dataclass
class ScoreDetails:
    """Per-dimension details of a social score."""

    score: int = 0
    present: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    issues: List[str] = field(default_factory=list)


@dataclass
class SocialScore:
    """Aggregate social sharing readiness score."""

    overall: int
    open_graph: ScoreDetails
    twitter: ScoreDetails
    schema: ScoreDetails
    seo: ScoreDetails
    recommendations: List[str] = field(default_factory=list)
    missing_required: List[str] = field(default_factory=list)
    missing_recommended: List[str] = field(default_factory=list)


# ============================================================================
# Extraction results
# ============================================================================


@dataclass
class StructuredData:
    """Structured data blocks found in a document."""

    json_ld: List[Any] = field(default_factory=list)
    microdata: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    rdfa: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    dublin_core: Dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.json_ld or self.microdata or self.rdfa or self.dublin_core)


@dataclass(frozen=True)
class ExtractionMetrics:
    """Timing and counting metrics for one extraction."""

    # Timing metrics (milliseconds)
    total_duration_ms: float
    parse_duration_ms: float
    collect_duration_ms: float
    media_duration_ms: float
    fallback_duration_ms: float

    # Counts
    document_bytes: int
    meta_tags_found: int
    images_found: int
    videos_found: int

    def __post_init__(self) -> None:
        if self.total_duration_ms < 0:
            raise ValueError("Duration cannot be negative")


@dataclass
class ExtractionResult:
    """Detailed result of :func:`ogextract.extract_detailed`."""

    data: Dict[str, Any]
    metrics: ExtractionMetrics
    fallbacks_used: List[str] = field(default_factory=list)
    structured_data: Optional[StructuredData] = None
    validation: Optional[ValidationResult] = None
    social_score: Optional[SocialScore] = None
    best_image: Optional[Dict[str, Any]] = None
    images: Optional[List[Dict[str, Any]]] = None
    video: Optional[Dict[str, Any]] = None
    audio: Optional[Dict[str, Any]] = None

    @property
    def confidence_level(self) -> ConfidenceLevel:
        """Rough confidence: canonical tags only is high, heavy fallback use is low."""
        if not self.data:
            return ConfidenceLevel.LOW
        if len(self.fallbacks_used) == 0:
            return ConfidenceLevel.HIGH
        if len(self.fallbacks_used) <= 2:
            return ConfidenceLevel.MEDIUM
        return ConfidenceLevel.LOW
