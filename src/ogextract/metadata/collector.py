"""
Field collector: walks every ``<meta>`` tag of a parsed document and fills a raw
record according to the field table.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence

from ..protocols import UNSET, RawRecord
from .fields import FieldSpec

logger = logging.getLogger(__name__)


def _attribute(tag: Any, name: str) -> Optional[str]:
    value = tag.get(name)
    # bs4 returns lists for multi-valued attributes such as ``rel``
    if isinstance(value, list):
        value = " ".join(value)
    return value or None


def meta_key_and_content(tag: Any) -> Optional[tuple[str, Any]]:
    """Return ``(key, content)`` for a meta-like node, or None when it has no key.

    The key is taken from ``property``, then ``name``, then ``itemprop``; a node
    with neither ``property`` nor ``name`` is not a candidate. Content falls
    back from ``content`` to ``value`` and is ``UNSET`` when both are missing.
    """
    prop = _attribute(tag, "property")
    name = _attribute(tag, "name")
    if not prop and not name:
        return None
    key = prop or name or _attribute(tag, "itemprop")
    content = _attribute(tag, "content") or _attribute(tag, "value")
    return key, content if content is not None else UNSET


def collect_fields(nodes: Iterable[Any], field_table: Sequence[FieldSpec]) -> RawRecord:
    """Build a raw record from meta-like ``nodes`` in document order.

    Single-valued fields keep the last matching tag. Multi-valued fields keep
    every matching tag, in order.
    """
    record: RawRecord = {}
    matched = 0

    for node in nodes:
        pair = meta_key_and_content(node)
        if pair is None:
            continue
        key, content = pair

        for spec in field_table:
            if not spec.matches(key):
                continue
            matched += 1
            if not spec.multiple:
                record[spec.field_name] = content
            elif not record.get(spec.field_name):
                record[spec.field_name] = [content]
            elif isinstance(record[spec.field_name], list):
                record[spec.field_name].append(content)

    # og:image:secure_url / og:image:url stand in for a missing og:image
    if not record.get("ogImage"):
        if record.get("ogImageSecureURL"):
            record["ogImage"] = _copy(record["ogImageSecureURL"])
        elif record.get("ogImageURL"):
            record["ogImage"] = _copy(record["ogImageURL"])

    logger.debug("Collected %d meta values into %d fields", matched, len(record))
    return record


def collect_from_soup(soup: Any, field_table: Sequence[FieldSpec]) -> RawRecord:
    """Collect fields from every ``<meta>`` element of a BeautifulSoup document."""
    return collect_fields(soup.find_all("meta"), field_table)


def _copy(value: Any) -> Any:
    return list(value) if isinstance(value, list) else value
