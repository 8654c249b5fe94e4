"""
Structured Data Parser - JSON-LD, Microdata, RDFa and Dublin Core

Reads the structured data blocks embedded in a page and folds the useful parts
into an extracted record when the page's own Open Graph tags leave gaps.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

from ..protocols import RawRecord, StructuredData

logger = logging.getLogger(__name__)

ARTICLE_TYPES = ("Article", "NewsArticle", "BlogPosting")
TITLED_TYPES = ("Product", "VideoObject")

_DC_PREFIX_RE = re.compile(r"^(dcterms|dc)\.", re.IGNORECASE)


def _has_type(item: Any, type_name: str) -> bool:
    if not isinstance(item, dict):
        return False
    item_type = item.get("@type")
    if isinstance(item_type, list):
        return type_name in item_type
    return item_type == type_name


class SchemaOrgParser:
    """Parser for Schema.org JSON-LD and Microdata."""

    @staticmethod
    def parse_json_ld(soup: Any) -> List[Any]:
        """Parse every ``application/ld+json`` script. Invalid blocks are skipped."""
        json_ld_data: List[Any] = []

        for script in soup.find_all("script", type="application/ld+json"):
            json_text = script.string
            if not json_text or not json_text.strip():
                continue
            try:
                data = json.loads(json_text)
            except (ValueError, RecursionError) as e:
                logger.warning(f"Invalid JSON-LD: {e}")
                continue

            # Handle both single objects and arrays
            if isinstance(data, list):
                json_ld_data.extend(data)
            else:
                json_ld_data.append(data)

        return json_ld_data

    @staticmethod
    def find_by_type(json_ld_data: List[Any], type_name: str) -> Optional[Dict[str, Any]]:
        """Return the first JSON-LD object of ``type_name``, looking inside ``@graph`` too."""
        for item in json_ld_data:
            if _has_type(item, type_name):
                return item
            graph = item.get("@graph") if isinstance(item, dict) else None
            if isinstance(graph, list):
                for graph_item in graph:
                    if _has_type(graph_item, type_name):
                        return graph_item
        return None

    @staticmethod
    def parse_microdata(soup: Any) -> Dict[str, List[Dict[str, Any]]]:
        """Parse Microdata items, grouped by the last segment of their ``itemtype``."""
        microdata: Dict[str, List[Dict[str, Any]]] = {}

        for item in soup.find_all(attrs={"itemscope": True}):
            item_type = item.get("itemtype")
            if not item_type:
                continue
            type_name = item_type.rstrip("/").split("/")[-1]
            if not type_name:
                continue
            microdata.setdefault(type_name, []).append(SchemaOrgParser.item_properties(item))

        return microdata

    @staticmethod
    def item_properties(scope: Any) -> Dict[str, Any]:
        """Collect the ``itemprop`` values owned by one ``itemscope`` element.

        Nested scopes become nested dicts; a property that repeats becomes a list.
        """
        properties: Dict[str, Any] = {}

        for prop_elem in scope.find_all(attrs={"itemprop": True}):
            if _owning_scope(prop_elem) is not scope:
                continue
            prop_name = prop_elem.get("itemprop")
            if not prop_name:
                continue

            if prop_elem.has_attr("itemscope"):
                prop_value: Any = SchemaOrgParser.item_properties(prop_elem)
            else:
                prop_value = _first_attribute(prop_elem, ("content", "href", "src", "datetime"))
                if prop_value is None:
                    prop_value = prop_elem.get_text().strip()

            if prop_name not in properties:
                properties[prop_name] = prop_value
            elif isinstance(properties[prop_name], list):
                properties[prop_name].append(prop_value)
            else:
                properties[prop_name] = [properties[prop_name], prop_value]

        return properties


class RDFaParser:
    """Parser for RDFa ``typeof`` / ``property`` annotations."""

    @staticmethod
    def parse(soup: Any) -> Dict[str, List[Dict[str, Any]]]:
        rdfa: Dict[str, List[Dict[str, Any]]] = {}

        for element in soup.find_all(attrs={"typeof": True}):
            type_name = element.get("typeof")
            if not type_name:
                continue
            properties: Dict[str, Any] = {}
            for prop_elem in element.find_all(attrs={"property": True}):
                # <meta property="og:..."> tags are Open Graph, not RDFa
                if prop_elem.name == "meta" and str(prop_elem.get("property", "")).startswith("og:"):
                    continue
                value = _first_attribute(prop_elem, ("content", "href", "src", "resource"))
                properties[prop_elem["property"]] = value if value is not None else prop_elem.get_text().strip()
            rdfa.setdefault(type_name, []).append(properties)

        return rdfa


class DublinCoreParser:
    """Parser for ``DC.*`` and ``DCTERMS.*`` meta names."""

    @staticmethod
    def parse(soup: Any) -> Dict[str, str]:
        dublin_core: Dict[str, str] = {}

        for tag in soup.find_all("meta", attrs={"name": _DC_PREFIX_RE}):
            content = tag.get("content")
            if not content:
                continue
            key = _DC_PREFIX_RE.sub("", tag["name"])
            if key:
                dublin_core[key] = content

        return dublin_core


def _first_attribute(tag: Any, names: tuple[str, ...]) -> Optional[str]:
    for name in names:
        value = tag.get(name)
        if value:
            return " ".join(value) if isinstance(value, list) else value
    return None


def _owning_scope(tag: Any) -> Any:
    for parent in tag.parents:
        if parent.has_attr("itemscope"):
            return parent
    return None


# ============================================================================
# Public API
# ============================================================================


def extract_structured_data(soup: Any) -> StructuredData:
    """Extract every structured data flavour from a parsed document."""
    data = StructuredData(
        json_ld=SchemaOrgParser.parse_json_ld(soup),
        microdata=SchemaOrgParser.parse_microdata(soup),
        rdfa=RDFaParser.parse(soup),
        dublin_core=DublinCoreParser.parse(soup),
    )
    logger.debug(
        "Structured data: %d JSON-LD blocks, %d microdata types, %d RDFa types, %d Dublin Core keys",
        len(data.json_ld),
        len(data.microdata),
        len(data.rdfa),
        len(data.dublin_core),
    )
    return data


def find_json_ld_by_type(json_ld_data: List[Any], type_name: str) -> Optional[Dict[str, Any]]:
    return SchemaOrgParser.find_by_type(json_ld_data, type_name)


def _fill_gap(record: RawRecord, field_name: str, value: Any) -> None:
    if not record.get(field_name) and value:
        record[field_name] = value


def merge_structured_data(record: RawRecord, data: StructuredData) -> RawRecord:
    """Fill gaps in ``record`` from ``data``. Existing truthy values are kept."""
    for item in data.json_ld:
        if not isinstance(item, dict):
            continue
        if any(_has_type(item, type_name) for type_name in ARTICLE_TYPES):
            _fill_gap(record, "ogTitle", item.get("headline"))
            _fill_gap(record, "ogDescription", item.get("description"))
            _fill_gap(record, "articlePublishedTime", item.get("datePublished"))
            _fill_gap(record, "articleModifiedTime", item.get("dateModified"))
        if any(_has_type(item, type_name) for type_name in TITLED_TYPES):
            _fill_gap(record, "ogTitle", item.get("name"))
            _fill_gap(record, "ogDescription", item.get("description"))

    for key, value in data.dublin_core.items():
        _fill_gap(record, f"dc{key[0].upper()}{key[1:]}", value)

    return record
