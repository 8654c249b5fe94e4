"""
Result assembler - the single extraction entry point.

Pipeline: parse the document, collect meta tags through the field table,
normalise media arrays, optionally merge structured data, run the fallback
resolver unless only Open Graph tags were requested, then prune ``UNSET``
values.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Union

from bs4 import BeautifulSoup

from ..config import ExtractOptions
from ..protocols import ExtractionMetrics, ExtractionResult, RawRecord, StructuredData
from .cleaner import remove_unset_values
from .collector import collect_fields
from .fallback import FallbackResolver
from .fields import FieldSpec, build_field_table
from .media import (
    MediaNormalizer,
    extract_all_images,
    extract_audio_metadata,
    extract_video_metadata,
    select_best_image,
)
from .structured_data import extract_structured_data, merge_structured_data
from .validation import generate_social_score, validate_record

logger = logging.getLogger(__name__)

Document = Union[str, bytes]


def resolve_options(
    options: Optional[Union[ExtractOptions, Dict[str, Any]]] = None, **overrides: Any
) -> ExtractOptions:
    """Turn ``options`` (a model, a plain dict or None) plus keyword overrides into one model."""
    if options is None:
        resolved = ExtractOptions()
    elif isinstance(options, ExtractOptions):
        resolved = options
    else:
        resolved = ExtractOptions.model_validate(options)
    return resolved.merged(**overrides)


def parse_document(document: Document) -> BeautifulSoup:
    return BeautifulSoup(document or "", "html.parser")


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def _byte_length(document: Document) -> int:
    if isinstance(document, str):
        return len(document.encode("utf-8"))
    return len(document or b"")


def _count(value: Any) -> int:
    if not value:
        return 0
    return len(value) if isinstance(value, list) else 1


class MetadataExtractor:
    """Runs the extraction pipeline for one set of options.

    The extractor holds no per-document state, so one instance can serve any
    number of documents, from any number of threads.
    """

    def __init__(self, options: Optional[ExtractOptions] = None) -> None:
        self.options = options or ExtractOptions()
        custom_specs = [
            FieldSpec(tag.property, tag.field_name, tag.multiple) for tag in self.options.custom_meta_tags
        ]
        self.field_table = build_field_table(custom_specs)
        self.media_normalizer = MediaNormalizer(all_media=self.options.all_media)

    def extract(self, document: Document) -> Dict[str, Any]:
        """Extract the cleaned metadata record from ``document``."""
        return self.extract_detailed(document).data

    def extract_detailed(self, document: Document) -> ExtractionResult:
        """Extract the record plus timings, fallbacks used and the opt-in extras."""
        options = self.options
        start = time.perf_counter()

        stage = time.perf_counter()
        soup = parse_document(document)
        parse_ms = _elapsed_ms(stage)

        stage = time.perf_counter()
        meta_nodes = soup.find_all("meta")
        record: RawRecord = collect_fields(meta_nodes, self.field_table)
        collect_ms = _elapsed_ms(stage)

        stage = time.perf_counter()
        record = self.media_normalizer.normalize(record)
        media_ms = _elapsed_ms(stage)

        structured_data: Optional[StructuredData] = None
        if options.extract_structured_data:
            structured_data = extract_structured_data(soup)
            record = merge_structured_data(record, structured_data)

        fallbacks_used: List[str] = []
        stage = time.perf_counter()
        if not options.only_get_open_graph_info:
            resolver = FallbackResolver(soup, options)
            record = resolver.resolve(record)
            fallbacks_used = resolver.used
        fallback_ms = _elapsed_ms(stage)

        data: Dict[str, Any] = remove_unset_values(record)

        result = ExtractionResult(
            data=data,
            metrics=ExtractionMetrics(
                total_duration_ms=_elapsed_ms(start),
                parse_duration_ms=parse_ms,
                collect_duration_ms=collect_ms,
                media_duration_ms=media_ms,
                fallback_duration_ms=fallback_ms,
                document_bytes=_byte_length(document),
                meta_tags_found=len(meta_nodes),
                images_found=_count(data.get("ogImage")),
                videos_found=_count(data.get("ogVideo")),
            ),
            fallbacks_used=list(fallbacks_used),
            structured_data=structured_data,
        )

        if options.validate_data:
            result.validation = validate_record(data)

        if options.generate_score:
            result.social_score = generate_social_score(data, structured_data)

        if options.select_best_image or options.extract_media_details:
            images = extract_all_images(soup)
            if options.select_best_image:
                result.best_image = select_best_image(images)
            if options.extract_media_details:
                result.images = images
                result.video = extract_video_metadata(soup)
                result.audio = extract_audio_metadata(soup)

        logger.debug(
            "Extracted %d fields (%d meta tags, fallbacks: %s) in %.2fms",
            len(data),
            len(meta_nodes),
            ", ".join(fallbacks_used) or "none",
            result.metrics.total_duration_ms,
        )
        return result


def extract(
    document: Document, options: Optional[Union[ExtractOptions, Dict[str, Any]]] = None, **overrides: Any
) -> Dict[str, Any]:
    """Extract Open Graph, Twitter Card and related metadata from an HTML document.

    Never raises for malformed or empty documents: missing data is simply absent
    from the returned dict.

    Args:
        document: The HTML source, as text or bytes.
        options: An :class:`ExtractOptions`, or a dict of option values using
            snake_case or camelCase keys.
        **overrides: Individual option values applied on top of ``options``.

    Returns:
        A dict mapping field names (``ogTitle``, ``twitterCard``, custom field
        names, ...) to strings, lists or media dicts.
    """
    return MetadataExtractor(resolve_options(options, **overrides)).extract(document)


def extract_detailed(
    document: Document, options: Optional[Union[ExtractOptions, Dict[str, Any]]] = None, **overrides: Any
) -> ExtractionResult:
    """Like :func:`extract`, but returns an :class:`ExtractionResult` with metrics and extras."""
    return MetadataExtractor(resolve_options(options, **overrides)).extract_detailed(document)
