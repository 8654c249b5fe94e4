"""
ogextract Metadata Extraction Module - Open Graph and social metadata

This module turns an HTML document into a flat record of social metadata:

Core Features:
- Declarative field table for Open Graph, Twitter Card, App Link and related tags
- Media normalization: parallel image / video / player / song tags zipped into
  ordered records, best record first
- Fallback resolution from ordinary HTML when dedicated tags are missing
- Opt-in JSON-LD, Microdata, RDFa and Dublin Core parsing
- Opt-in Open Graph / Twitter Card validation and social sharing score

Components:
- MetadataExtractor: Main extraction coordinator
- MediaNormalizer: Media family zipping, ordering and selection
- FallbackResolver: Per-field fallback chains
- SchemaOrgParser / RDFaParser / DublinCoreParser: Structured data parsing
"""

from .cleaner import remove_unset_values
from .collector import collect_fields, collect_from_soup
from .extractor import MetadataExtractor, extract, extract_detailed, parse_document
from .fallback import FallbackResolver
from .fields import FIELDS, FieldSpec, build_field_table
from .media import (
    MediaFamily,
    MediaNormalizer,
    detect_image_format,
    extract_all_images,
    extract_audio_metadata,
    extract_image_metadata,
    extract_video_metadata,
    parse_srcset,
    select_best_image,
    zip_parallel,
)
from .structured_data import (
    DublinCoreParser,
    RDFaParser,
    SchemaOrgParser,
    extract_structured_data,
    find_json_ld_by_type,
    merge_structured_data,
)
from .validation import generate_social_score, validate_open_graph, validate_record, validate_twitter_card

__all__ = [
    "FIELDS",
    "DublinCoreParser",
    "FallbackResolver",
    "FieldSpec",
    "MediaFamily",
    "MediaNormalizer",
    "MetadataExtractor",
    "RDFaParser",
    "SchemaOrgParser",
    "build_field_table",
    "collect_fields",
    "collect_from_soup",
    "detect_image_format",
    "extract",
    "extract_all_images",
    "extract_audio_metadata",
    "extract_detailed",
    "extract_image_metadata",
    "extract_structured_data",
    "extract_video_metadata",
    "find_json_ld_by_type",
    "generate_social_score",
    "merge_structured_data",
    "parse_document",
    "parse_srcset",
    "remove_unset_values",
    "select_best_image",
    "validate_open_graph",
    "validate_record",
    "validate_twitter_card",
    "zip_parallel",
]
