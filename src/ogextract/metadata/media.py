"""
Media normalizer - folds parallel media tag arrays into structured records.

Open Graph and Twitter describe one image with several sibling tags
(``og:image``, ``og:image:width``, ``og:image:height``, ``og:image:type``).
The collector gathers each of them into its own list; this module zips those
lists back into records, orders the records so the most useful one comes first
and keeps either the whole list or just the best record.

Ordering rules:
- Images, videos, Twitter images and Twitter players: animated GIFs first, then
  larger ``max(width, height)`` first. Two records are left in place when either
  has no URL.
- Music songs: ascending by disc, then track. Two songs are left in place when
  either has no track.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..protocols import (
    UNSET,
    ImageMedia,
    MediaItem,
    MusicSongMedia,
    RawRecord,
    TwitterImageMedia,
    TwitterPlayerMedia,
    VideoMedia,
)
from .fields import FIELDS, FieldSpec, media_source_fields
from .utils import is_url_valid

logger = logging.getLogger(__name__)

_EXTENSION_RE = re.compile(r"\.(\w{2,5})$", re.ASCII)
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT_RE = re.compile(r"^\s*([+-]?\d+(?:\.\d+)?)")
_DURATION_PARAM_RE = re.compile(r"duration=(\d+)")

KNOWN_IMAGE_FORMATS = ("jpeg", "jpg", "png", "gif", "webp", "avif", "svg", "bmp", "ico")


# ============================================================================
# Helpers
# ============================================================================


def parse_int(value: Any, default: int = 0) -> int:
    """Parse the leading integer of ``value`` the lenient way HTML attributes need.

    ``"300px"`` gives 300; anything without a leading integer gives ``default``.
    """
    if value is None or value is UNSET:
        return default
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else default


def zip_parallel(primary: Sequence[Any], *others: Sequence[Any], pad: Any = None) -> List[Tuple[Any, ...]]:
    """Turn parallel arrays into rows, one row per entry of ``primary``.

    Entries missing from a shorter array are filled with ``pad``; entries of a
    longer array beyond ``len(primary)`` are ignored.
    """
    rows: List[Tuple[Any, ...]] = []
    for index, value in enumerate(primary):
        row = [value]
        for other in others:
            row.append(other[index] if index < len(other) else pad)
        rows.append(tuple(row))
    return rows


def _extension(url: str) -> Optional[str]:
    match = _EXTENSION_RE.search(url)
    return match.group(1).lower() if match else None


def compare_media(a: Any, b: Any) -> int:
    """Comparator putting GIFs first, then larger media first."""
    if not (a.url and b.url):
        return 0

    a_gif = _extension(a.url) == "gif"
    b_gif = _extension(b.url) == "gif"
    if a_gif and not b_gif:
        return -1
    if b_gif and not a_gif:
        return 1

    a_size = max(parse_int(a.width), parse_int(a.height))
    b_size = max(parse_int(b.width), parse_int(b.height))
    return b_size - a_size


def compare_music_songs(a: MusicSongMedia, b: MusicSongMedia) -> int:
    """Comparator ordering songs by disc, then track."""
    if not a.track or not b.track:
        return 0
    a_disc = parse_int(a.disc or "0")
    b_disc = parse_int(b.disc or "0")
    if a_disc != b_disc:
        return 1 if a_disc > b_disc else -1
    return parse_int(a.track) - parse_int(b.track)


def _or_none(value: Any) -> Any:
    return value or None


def _or_empty(value: Any) -> str:
    return value or ""


def _as_list(value: Any) -> Optional[List[Any]]:
    if not value:
        return None
    if isinstance(value, list):
        return value
    return [value]


# ============================================================================
# Families
# ============================================================================


@dataclass(frozen=True)
class MediaFamily:
    """One media family: the record field, its sibling fields and how to build records."""

    field_name: str
    sibling_fields: Tuple[str, ...]
    build: Callable[[Tuple[Any, ...]], MediaItem]
    compare: Callable[[Any, Any], int] = compare_media
    pad: Any = None
    legacy_field: Optional[str] = None

    def has_signal(self, record: RawRecord) -> bool:
        names = (self.field_name,) + self.sibling_fields
        if self.legacy_field:
            names = names + (self.legacy_field,)
        return any(record.get(name) for name in names)

    def records(self, record: RawRecord) -> List[MediaItem]:
        """Zip, build and sort the family's records. Empty when the family has no signal."""
        if not self.has_signal(record):
            return []

        primary = _as_list(record.get(self.field_name))
        if primary is None and self.legacy_field:
            primary = _as_list(record.get(self.legacy_field))
        if primary is None:
            primary = [None]
        siblings = [_as_list(record.get(name)) or [None] for name in self.sibling_fields]

        rows = zip_parallel(primary, *siblings, pad=self.pad)
        items = [self.build(row) for row in rows]
        return sorted(items, key=cmp_to_key(self.compare))


def _build_image(row: Tuple[Any, ...]) -> ImageMedia:
    return ImageMedia(url=row[0], width=_or_none(row[1]), height=_or_none(row[2]), type=_or_none(row[3]))


def _build_video(row: Tuple[Any, ...]) -> VideoMedia:
    return VideoMedia(url=row[0], width=_or_none(row[1]), height=_or_none(row[2]), type=_or_none(row[3]))


def _build_twitter_image(row: Tuple[Any, ...]) -> TwitterImageMedia:
    return TwitterImageMedia(url=row[0], width=_or_none(row[1]), height=_or_none(row[2]), alt=_or_none(row[3]))


def _build_twitter_player(row: Tuple[Any, ...]) -> TwitterPlayerMedia:
    return TwitterPlayerMedia(url=row[0], width=_or_none(row[1]), height=_or_none(row[2]), stream=_or_none(row[3]))


def _build_music_song(row: Tuple[Any, ...]) -> MusicSongMedia:
    return MusicSongMedia(url=_or_empty(row[0]), track=_or_empty(row[1]), disc=_or_empty(row[2]))


MEDIA_FAMILIES: Tuple[MediaFamily, ...] = (
    MediaFamily("ogImage", ("ogImageWidth", "ogImageHeight", "ogImageType"), _build_image),
    MediaFamily("ogVideo", ("ogVideoWidth", "ogVideoHeight", "ogVideoType"), _build_video),
    MediaFamily(
        "twitterImage",
        ("twitterImageWidth", "twitterImageHeight", "twitterImageAlt"),
        _build_twitter_image,
        legacy_field="twitterImageSrc",
    ),
    MediaFamily(
        "twitterPlayer",
        ("twitterPlayerWidth", "twitterPlayerHeight", "twitterPlayerStream"),
        _build_twitter_player,
    ),
    MediaFamily(
        "musicSong",
        ("musicSongTrack", "musicSongDisc"),
        _build_music_song,
        compare=compare_music_songs,
        pad="",
    ),
)


# ============================================================================
# Normalizer
# ============================================================================


class MediaNormalizer:
    """Replaces raw media arrays in a record with structured media records."""

    def __init__(self, all_media: bool = False, field_table: Sequence[FieldSpec] = FIELDS) -> None:
        self.all_media = all_media
        self.source_fields = media_source_fields(field_table)

    def normalize(self, record: RawRecord) -> RawRecord:
        """Normalize every media family of ``record`` in place and return it."""
        resolved: Dict[str, List[MediaItem]] = {family.field_name: family.records(record) for family in MEDIA_FAMILIES}

        for name in self.source_fields:
            record.pop(name, None)

        for field_name, items in resolved.items():
            if not items:
                continue
            record[field_name] = items if self.all_media else items[0]
            logger.debug("Resolved %d %s record(s)", len(items), field_name)

        return record


def media_setup(record: RawRecord, all_media: bool = False) -> RawRecord:
    """Convenience wrapper around :class:`MediaNormalizer`."""
    return MediaNormalizer(all_media=all_media).normalize(record)


# ============================================================================
# Enhanced image helpers
# ============================================================================


def detect_image_format(url: str, content_type: Optional[str] = None) -> Optional[str]:
    """Guess an image format from a MIME type, then from the URL."""
    if content_type and "/" in content_type:
        candidate = content_type.split("/", 1)[1].lower()
        if candidate in KNOWN_IMAGE_FORMATS:
            return candidate

    lowered = url.lower()
    for extension in KNOWN_IMAGE_FORMATS:
        if f".{extension}" in lowered:
            return extension
    return None


def parse_srcset(srcset: str) -> List[Dict[str, Any]]:
    """Parse a ``srcset`` attribute into entries sorted by ascending width."""
    images: List[Dict[str, Any]] = []
    if not srcset:
        return images

    for part in (piece.strip() for piece in srcset.split(",")):
        match = re.match(r"^(.+?)\s+(\d+(?:\.\d+)?[wx])$", part)
        if not match:
            continue
        url, descriptor = match.groups()
        images.append({"url": url.strip(), "width": parse_int(descriptor[:-1]), "descriptor": descriptor})

    return sorted(images, key=lambda image: image["width"])


def score_image(image: Dict[str, Any]) -> int:
    """Score an image dict for social sharing suitability."""
    score = 0
    if image.get("type") == "webp":
        score += 10
    if image.get("type") == "avif":
        score += 15

    if image.get("width") and image.get("height"):
        width = parse_int(image["width"])
        height = parse_int(image["height"])
        if width == 1200 and height == 630:
            score += 20
        elif width >= 1200 and height >= 630:
            score += 15
        elif width >= 600 and height >= 315:
            score += 10
        # 1.91:1 is the preferred Facebook aspect ratio
        if height > 0 and abs(width / height - 1.91) < 0.1:
            score += 10

    if image.get("alt"):
        score += 5
    if image.get("isResponsive"):
        score += 5
    if image.get("srcset"):
        score += 5
    return score


def select_best_image(images: Sequence[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Pick the highest scoring image for an opt-in "best image" view.

    This is independent of the ``ogImage`` ordering done by
    :class:`MediaNormalizer`, which always governs the extracted record.
    """
    if not images:
        return None
    if len(images) == 1:
        return images[0]
    # max() keeps the first of equally scored images
    return max(images, key=score_image)


def extract_image_metadata(tag: Any) -> Dict[str, Any]:
    """Describe one ``<img>`` tag, preferring a WebP / AVIF ``<picture>`` source when there is one."""
    src = tag.get("src") or ""
    srcset = tag.get("srcset")
    image: Dict[str, Any] = {
        "url": src,
        "type": detect_image_format(src),
        "isLazyLoaded": tag.get("loading") == "lazy",
        "isResponsive": bool(srcset),
    }
    for attribute in ("width", "height", "alt"):
        if tag.get(attribute):
            image[attribute] = tag.get(attribute)
    if tag.get("title"):
        image["caption"] = tag.get("title")
    if srcset:
        image["srcset"] = parse_srcset(srcset)

    width = parse_int(image.get("width"))
    height = parse_int(image.get("height"))
    if width > 0 and height > 0:
        image["aspectRatio"] = width / height

    picture = tag.find_parent("picture")
    if picture is not None:
        # The last modern-format source wins
        for source in picture.find_all("source"):
            source_type = source.get("type") or ""
            if "webp" not in source_type and "avif" not in source_type:
                continue
            image["type"] = "webp" if "webp" in source_type else "avif"
            candidates = parse_srcset(source.get("srcset") or "")
            if candidates:
                image["url"] = candidates[0]["url"]
                if len(candidates) > 1:
                    image["srcset"] = candidates
    return image


def extract_all_images(soup: Any) -> List[Dict[str, Any]]:
    """Collect every ``<img>`` plus ``og:image`` / ``twitter:image`` tag as image dicts."""
    images = [image for image in map(extract_image_metadata, soup.find_all("img")) if is_url_valid(image["url"])]

    seen = {image["url"] for image in images}
    for tag in soup.select('meta[property="og:image"], meta[name="twitter:image"]'):
        content = tag.get("content")
        if content and is_url_valid(content) and content not in seen:
            images.append({"url": content, "type": detect_image_format(content)})
            seen.add(content)
    return images


def _meta_content(soup: Any, selector: str) -> Optional[str]:
    tag = soup.select_one(selector)
    return tag.get("content") if tag is not None else None


def _parse_float(value: Any) -> Optional[float]:
    match = _LEADING_FLOAT_RE.match(str(value))
    return float(match.group(1)) if match else None


def extract_video_metadata(soup: Any, url: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Gather what the page says about its main video.

    Reads the ``og:video`` tag family first, then the first ``<video>`` element
    and any ``<track>`` captions. ``url`` is used when no tag names the video.
    Returns None when no video URL can be found at all.
    """
    video: Dict[str, Any] = {}

    video_url = _meta_content(soup, 'meta[property="og:video"]') or _meta_content(
        soup, 'meta[property="og:video:url"]'
    )
    if video_url or url:
        video["url"] = video_url or url

    for key, prop in (("secureUrl", "secure_url"), ("width", "width"), ("height", "height"), ("type", "type")):
        value = _meta_content(soup, f'meta[property="og:video:{prop}"]')
        if value:
            video[key] = value

    stream_type = _meta_content(soup, 'meta[name="twitter:player:stream:content_type"]')
    if stream_type:
        match = _DURATION_PARAM_RE.search(stream_type)
        if match:
            video["duration"] = int(match.group(1))

    thumbnails = [
        {"url": tag["content"], "format": detect_image_format(tag["content"])}
        for tag in soup.select('meta[property="og:image"]')
        if tag.get("content")
    ]
    if thumbnails:
        video["thumbnails"] = thumbnails

    embed_url = _meta_content(soup, 'meta[property="og:video:embed_url"]') or _meta_content(
        soup, 'meta[name="twitter:player"]'
    )
    if embed_url:
        video["embedUrl"] = embed_url

    element = soup.find("video")
    if element is not None:
        if not video.get("url"):
            source = element.find("source")
            video["url"] = element.get("src") or (source.get("src") if source is not None else None) or ""
        poster = element.get("poster")
        if poster and not video.get("thumbnails"):
            video["thumbnails"] = [{"url": poster, "format": detect_image_format(poster)}]
        if element.get("data-duration") and not video.get("duration"):
            duration = _parse_float(element["data-duration"])
            if duration is not None:
                video["duration"] = duration

    captions = [
        {"language": track["srclang"], "url": track["src"], "kind": track.get("kind") or "subtitles"}
        for track in soup.find_all("track")
        if track.get("src") and track.get("srclang")
    ]
    if captions:
        video["captions"] = captions

    if not video.get("url"):
        return None
    return video


def extract_audio_metadata(soup: Any) -> Optional[Dict[str, Any]]:
    """Gather the ``og:audio`` tags and the first ``<audio>`` element. None when there are neither."""
    audio: Dict[str, Any] = {}

    audio_url = _meta_content(soup, 'meta[property="og:audio"]') or _meta_content(
        soup, 'meta[property="og:audio:url"]'
    )
    if audio_url:
        audio["url"] = audio_url
    secure_url = _meta_content(soup, 'meta[property="og:audio:secure_url"]')
    if secure_url:
        audio["secureUrl"] = secure_url
    audio_type = _meta_content(soup, 'meta[property="og:audio:type"]')
    if audio_type:
        audio["type"] = audio_type

    element = soup.find("audio")
    if element is not None:
        if not audio.get("url"):
            source = element.find("source")
            src = element.get("src") or (source.get("src") if source is not None else None)
            if src:
                audio["url"] = src
        if element.get("data-duration"):
            duration = _parse_float(element["data-duration"])
            if duration is not None:
                audio["duration"] = duration

    return audio or None
