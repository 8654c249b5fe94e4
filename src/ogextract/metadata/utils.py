"""
Small URL and image-type helpers shared by the media and fallback stages.
"""

from __future__ import annotations

from typing import Any, Optional

VALID_IMAGE_TYPES = frozenset(
    ["apng", "bmp", "gif", "ico", "cur", "jpg", "jpeg", "jfif", "pjpeg", "pjp", "png", "svg", "tif", "tiff", "webp"]
)

NON_HTML_EXTENSIONS = (
    ".doc",
    ".docx",
    ".xls",
    ".xlsx",
    ".ppt",
    ".pptx",
    ".3gp",
    ".avi",
    ".mov",
    ".mp4",
    ".m4v",
    ".m4a",
    ".mp3",
    ".mkv",
    ".ogv",
    ".ogm",
    ".ogg",
    ".oga",
    ".webm",
    ".wav",
    ".bmp",
    ".gif",
    ".jpg",
    ".jpeg",
    ".png",
    ".webp",
    ".zip",
    ".rar",
    ".tar",
    ".tar.gz",
    ".tgz",
    ".tar.bz2",
    ".tbz2",
    ".txt",
    ".pdf",
)


def is_url_valid(url: Any) -> bool:
    """A usable URL is a non-empty string without whitespace. Relative URLs are allowed."""
    return isinstance(url, str) and len(url) > 0 and not any(ch.isspace() for ch in url)


def find_image_type_from_url(url: str) -> str:
    """Return the text after the last ``.`` of ``url``, cut at the first ``?``."""
    extension = url.rsplit(".", 1)[-1]
    return extension.split("?", 1)[0]


def is_image_type_valid(image_type: Optional[str]) -> bool:
    return image_type in VALID_IMAGE_TYPES


def is_non_html_url(url: str) -> bool:
    """True when ``url`` points at a document, media file or archive rather than a page."""
    extension = "." + find_image_type_from_url(url)
    return any(candidate in extension for candidate in NON_HTML_EXTENSIONS)
