"""
Fallback resolver - fills fields that no dedicated tag supplied.

Each field has its own chain of DOM queries, tried top to bottom. The first
query that yields a non-empty value wins; a field that already holds a truthy
value is never touched. Chains write to disjoint fields, so their order does
not affect the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from ..config import ExtractOptions
from ..protocols import ImageMedia, RawRecord
from .utils import find_image_type_from_url, is_image_type_valid, is_url_valid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextQuery:
    """Stripped text of the first element matching ``selector``."""

    selector: str


@dataclass(frozen=True)
class AttributeQuery:
    """Attribute ``attribute`` of the first element matching ``selector``."""

    selector: str
    attribute: str


Query = Any  # TextQuery | AttributeQuery

TITLE_CHAIN: Tuple[Query, ...] = (
    TextQuery("title"),
    AttributeQuery('meta[name="title"]', "content"),
    TextQuery(".post-title"),
    TextQuery(".entry-title"),
    TextQuery('h1[class*="title" i] a'),
    TextQuery('h1[class*="title" i]'),
)

DESCRIPTION_CHAIN: Tuple[Query, ...] = (
    AttributeQuery('meta[name="description"]', "content"),
    AttributeQuery('meta[itemprop="description"]', "content"),
    TextQuery("#description"),
)

LOCALE_CHAIN: Tuple[Query, ...] = (
    AttributeQuery("html", "lang"),
    AttributeQuery('meta[itemprop="inLanguage"]', "content"),
)

LOGO_CHAIN: Tuple[Query, ...] = (
    AttributeQuery('meta[itemprop="logo"]', "content"),
    AttributeQuery('img[itemprop="logo"]', "src"),
)

URL_CHAIN: Tuple[Query, ...] = (
    AttributeQuery('link[rel="canonical"]', "href"),
    AttributeQuery('link[rel="alternate"][hreflang="x-default"]', "href"),
)

DATE_CHAIN: Tuple[Query, ...] = (
    AttributeQuery('meta[name="date"]', "content"),
    AttributeQuery('[itemprop*="datemodified" i]', "content"),
    AttributeQuery('[itemprop="datepublished" i]', "content"),
    AttributeQuery('[itemprop*="date" i]', "content"),
    AttributeQuery('time[itemprop*="date" i]', "datetime"),
    AttributeQuery("time[datetime]", "datetime"),
)

FAVICON_CHAIN: Tuple[Query, ...] = (
    AttributeQuery('link[rel="shortcut icon"]', "href"),
    AttributeQuery('link[rel="icon"]', "href"),
    AttributeQuery('link[rel="mask-icon"]', "href"),
    AttributeQuery('link[rel="apple-touch-icon"]', "href"),
    AttributeQuery('link[type="image/png"]', "href"),
    AttributeQuery('link[type="image/ico"]', "href"),
    AttributeQuery('link[type="image/x-icon"]', "href"),
)

# (record field, fallback name, chain)
FIELD_CHAINS: Tuple[Tuple[str, str, Tuple[Query, ...]], ...] = (
    ("ogTitle", "title", TITLE_CHAIN),
    ("ogDescription", "description", DESCRIPTION_CHAIN),
    ("ogLocale", "locale", LOCALE_CHAIN),
    ("ogLogo", "logo", LOGO_CHAIN),
    ("ogUrl", "url", URL_CHAIN),
    ("ogDate", "date", DATE_CHAIN),
    ("favicon", "favicon", FAVICON_CHAIN),
)


def _attribute_value(tag: Any, attribute: str) -> Optional[str]:
    value = tag.get(attribute)
    if isinstance(value, list):
        value = " ".join(value)
    return value or None


class FallbackResolver:
    """Fills gaps in a record by querying the parsed document directly."""

    def __init__(self, soup: Any, options: Optional[ExtractOptions] = None) -> None:
        self.soup = soup
        self.options = options or ExtractOptions()
        self.used: List[str] = []

    # --- queries -----------------------------------------------------------

    def run_query(self, query: Query) -> Optional[str]:
        """Run one chain step, returning its value or None when it does not match."""
        tag = self.soup.select_one(query.selector)
        if tag is None:
            return None
        if isinstance(query, TextQuery):
            text = tag.get_text().strip()
            return text or None
        return _attribute_value(tag, query.attribute)

    def first_match(self, chain: Sequence[Query]) -> Optional[str]:
        for query in chain:
            value = self.run_query(query)
            if value:
                return value
        return None

    # --- resolution --------------------------------------------------------

    def resolve(self, record: RawRecord) -> RawRecord:
        """Fill every empty fallback field of ``record`` in place and return it."""
        for field_name, fallback_name, chain in FIELD_CHAINS:
            self._fill(record, field_name, fallback_name, lambda chain=chain: self.first_match(chain))

        self._resolve_image(record)
        self._resolve_audio(record)

        if self.used:
            logger.debug("Fallbacks used: %s", ", ".join(self.used))
        return record

    def _fill(
        self, record: RawRecord, field_name: str, fallback_name: str, lookup: Callable[[], Optional[str]]
    ) -> None:
        if record.get(field_name):
            return
        value = lookup()
        if value:
            record[field_name] = value
            self.used.append(fallback_name)

    def _resolve_image(self, record: RawRecord) -> None:
        image = record.get("ogImage")
        if not image and self.options.og_image_fallback:
            images = self.collect_page_images()
            if images:
                record["ogImage"] = images
                self.used.append("image")
        elif image:
            if self._backfill_image_types(image):
                self.used.append("imageType")

    def collect_page_images(self) -> List[ImageMedia]:
        """Every ``<img>`` with a usable ``src`` and a recognised image extension."""
        images: List[ImageMedia] = []
        for tag in self.soup.find_all("img"):
            source = _attribute_value(tag, "src")
            if not source:
                continue
            image_type = find_image_type_from_url(source)
            if not is_url_valid(source) or not is_image_type_valid(image_type):
                continue
            images.append(
                ImageMedia(
                    url=source,
                    width=_attribute_value(tag, "width"),
                    height=_attribute_value(tag, "height"),
                    type=image_type,
                )
            )
        return images

    @staticmethod
    def _backfill_image_types(image: Any) -> bool:
        changed = False
        for item in image if isinstance(image, list) else [image]:
            if isinstance(item, str) or item is None:
                continue
            if getattr(item, "url", None) and not getattr(item, "type", None):
                image_type = find_image_type_from_url(item.url)
                if is_image_type_valid(image_type):
                    item.type = image_type
                    changed = True
        return changed

    def _resolve_audio(self, record: RawRecord) -> None:
        if record.get("ogAudioURL") or record.get("ogAudioSecureURL"):
            return

        for selector in ("audio", "audio > source"):
            tag = self.soup.select_one(selector)
            source = _attribute_value(tag, "src") if tag is not None else None
            if not source:
                continue
            if source.startswith("https"):
                record["ogAudioSecureURL"] = source
            else:
                record["ogAudioURL"] = source
            audio_type = _attribute_value(tag, "type")
            if not record.get("ogAudioType") and audio_type:
                record["ogAudioType"] = audio_type
            self.used.append("audio")
            return


def fallback(record: RawRecord, soup: Any, options: Optional[ExtractOptions] = None) -> RawRecord:
    """Convenience wrapper around :class:`FallbackResolver`."""
    return FallbackResolver(soup, options).resolve(record)
