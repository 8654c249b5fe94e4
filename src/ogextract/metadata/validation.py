"""
Validation and scoring of extracted records.

Checks a finished record against the Open Graph and Twitter Card publishing
rules and rolls the result up into a social sharing score.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..protocols import (
    ErrorSeverity,
    MediaRecord,
    ScoreDetails,
    SocialScore,
    StructuredData,
    ValidationIssue,
    ValidationResult,
)
from .media import parse_int

logger = logging.getLogger(__name__)

VALID_OG_TYPES = frozenset(
    [
        "article",
        "book",
        "books.author",
        "books.book",
        "books.genre",
        "business.business",
        "fitness.course",
        "music.album",
        "music.playlist",
        "music.radio_station",
        "music.song",
        "place",
        "product",
        "product.group",
        "product.item",
        "profile",
        "restaurant.menu",
        "restaurant.menu_item",
        "restaurant.menu_section",
        "restaurant.restaurant",
        "video.episode",
        "video.movie",
        "video.other",
        "video.tv_show",
        "website",
    ]
)

VALID_TWITTER_CARD_TYPES = frozenset(["summary", "summary_large_image", "app", "player"])

# Score deductions
CRITICAL_PENALTY = 20
ERROR_PENALTY = 10
MINOR_PENALTY = 5
WARNING_PENALTY = 3


def is_valid_og_type(og_type: Any) -> bool:
    return og_type in VALID_OG_TYPES


def is_valid_twitter_card_type(card_type: Any) -> bool:
    return card_type in VALID_TWITTER_CARD_TYPES


def calculate_validation_score(errors: List[ValidationIssue], warnings: List[ValidationIssue]) -> int:
    """100, minus a per-severity penalty for each error and a flat one per warning, clamped to 0..100."""
    score = 100
    for error in errors:
        if error.severity is ErrorSeverity.CRITICAL:
            score -= CRITICAL_PENALTY
        elif error.severity is ErrorSeverity.ERROR:
            score -= ERROR_PENALTY
        else:
            score -= MINOR_PENALTY
    score -= len(warnings) * WARNING_PENALTY
    return max(0, min(100, score))


def _as_items(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    return [value]


def _media_value(item: Any, name: str) -> Any:
    if isinstance(item, MediaRecord):
        return getattr(item, name, None)
    if isinstance(item, dict):
        return item.get(name)
    return None


def _is_media(item: Any) -> bool:
    return isinstance(item, (MediaRecord, dict))


def _canonical(data: Dict[str, Any]) -> Any:
    return data.get("canonical") or data.get("ogUrl")


# ============================================================================
# Open Graph
# ============================================================================


def validate_open_graph(data: Dict[str, Any]) -> ValidationResult:
    """Validate the Open Graph side of an extracted record."""
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []
    recommendations: List[str] = []

    required = (
        ("ogTitle", "og:title", "OG_MISSING_TITLE", "Add <meta property='og:title' content='Your Title'>"),
        ("ogType", "og:type", "OG_MISSING_TYPE", "Add <meta property='og:type' content='website'>"),
        (
            "ogImage",
            "og:image",
            "OG_MISSING_IMAGE",
            "Add <meta property='og:image' content='https://example.com/image.jpg'>",
        ),
        ("ogUrl", "og:url", "OG_MISSING_URL", "Add <meta property='og:url' content='https://example.com/page'>"),
    )
    for field_name, tag, code, suggestion in required:
        if not data.get(field_name):
            errors.append(
                ValidationIssue(
                    code=code,
                    message=f"Missing required property: {tag}",
                    field=field_name,
                    severity=ErrorSeverity.CRITICAL,
                    suggestion=suggestion,
                )
            )

    recommended = (
        (
            "ogDescription",
            "og:description",
            "OG_MISSING_DESCRIPTION",
            "Add <meta property='og:description' content='Page description'>",
        ),
        (
            "ogSiteName",
            "og:site_name",
            "OG_MISSING_SITE_NAME",
            "Add <meta property='og:site_name' content='Your Site Name'>",
        ),
    )
    for field_name, tag, code, suggestion in recommended:
        if not data.get(field_name):
            warnings.append(
                ValidationIssue(
                    code=code,
                    message=f"Missing recommended property: {tag}",
                    field=field_name,
                    suggestion=suggestion,
                )
            )

    og_type = data.get("ogType")
    if og_type and not is_valid_og_type(og_type):
        warnings.append(
            ValidationIssue(
                code="OG_INVALID_TYPE",
                message=f"Invalid og:type value: {og_type}",
                field="ogType",
                suggestion="Use a valid og:type value like 'website', 'article', 'video', etc.",
            )
        )

    if data.get("ogImage"):
        for image in _as_items(data["ogImage"]):
            if not _is_media(image):
                continue
            width = _media_value(image, "width")
            height = _media_value(image, "height")
            if not width or not height:
                warnings.append(
                    ValidationIssue(
                        code="OG_IMAGE_MISSING_DIMENSIONS",
                        message="Image missing width or height dimensions",
                        field="ogImage",
                        suggestion="Add og:image:width and og:image:height meta tags",
                    )
                )
                continue
            w, h = parse_int(width), parse_int(height)
            if w < 200 or h < 200:
                warnings.append(
                    ValidationIssue(
                        code="OG_IMAGE_TOO_SMALL",
                        message=f"Image dimensions too small: {w}x{h}. Minimum recommended: 200x200",
                        field="ogImage",
                    )
                )
            if w > 5000 or h > 5000:
                warnings.append(
                    ValidationIssue(
                        code="OG_IMAGE_TOO_LARGE",
                        message=f"Image dimensions too large: {w}x{h}. Maximum recommended: 5000x5000",
                        field="ogImage",
                    )
                )

    if not data.get("twitterCard"):
        recommendations.append("Add Twitter Card meta tags for better Twitter sharing")
    if not data.get("favicon"):
        recommendations.append("Add a favicon for better branding")
    if not data.get("ogLocale"):
        recommendations.append("Add og:locale for language specification")
    if og_type == "article" and not data.get("articlePublishedTime"):
        recommendations.append("Add article:published_time for article pages")
    if not _canonical(data):
        recommendations.append("Add canonical URL to prevent duplicate content issues")

    return ValidationResult(
        valid=not errors,
        errors=errors,
        warnings=warnings,
        score=calculate_validation_score(errors, warnings),
        recommendations=recommendations,
    )


# ============================================================================
# Twitter Card
# ============================================================================


def validate_twitter_card(data: Dict[str, Any]) -> ValidationResult:
    """Validate the Twitter Card side of an extracted record."""
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []

    card = data.get("twitterCard")
    if not card:
        warnings.append(
            ValidationIssue(
                code="TWITTER_MISSING_CARD",
                message="Missing Twitter Card type",
                field="twitterCard",
                suggestion="Add <meta name='twitter:card' content='summary_large_image'>",
            )
        )
    elif not is_valid_twitter_card_type(card):
        errors.append(
            ValidationIssue(
                code="TWITTER_INVALID_CARD_TYPE",
                message=f"Invalid Twitter Card type: {card}",
                field="twitterCard",
                severity=ErrorSeverity.ERROR,
                suggestion="Use a valid type: summary, summary_large_image, app, or player",
            )
        )

    if not data.get("twitterTitle") and not data.get("ogTitle"):
        warnings.append(
            ValidationIssue(
                code="TWITTER_MISSING_TITLE",
                message="Missing Twitter title (no twitter:title or og:title)",
                field="twitterTitle",
            )
        )
    if not data.get("twitterDescription") and not data.get("ogDescription"):
        warnings.append(
            ValidationIssue(
                code="TWITTER_MISSING_DESCRIPTION",
                message="Missing Twitter description (no twitter:description or og:description)",
                field="twitterDescription",
            )
        )

    image = data.get("twitterImage") or data.get("ogImage")
    if not image:
        warnings.append(
            ValidationIssue(
                code="TWITTER_MISSING_IMAGE",
                message="Missing Twitter image (no twitter:image or og:image)",
                field="twitterImage",
            )
        )
    elif card == "summary_large_image":
        for item in _as_items(image):
            width = _media_value(item, "width")
            height = _media_value(item, "height")
            if not width or not height:
                continue
            w, h = parse_int(width), parse_int(height)
            if w < 300 or h < 157:
                warnings.append(
                    ValidationIssue(
                        code="TWITTER_IMAGE_TOO_SMALL",
                        message=(
                            f"Image too small for summary_large_image card. Minimum: 300x157, Current: {w}x{h}"
                        ),
                        field="twitterImage",
                    )
                )

    if card == "player":
        player = data.get("twitterPlayer")
        if not player:
            errors.append(
                ValidationIssue(
                    code="TWITTER_PLAYER_MISSING_URL",
                    message="Player card requires twitter:player URL",
                    field="twitterPlayer",
                    severity=ErrorSeverity.ERROR,
                )
            )
        players = _as_items(player) if player else []
        if not players or not all(_media_value(p, "width") and _media_value(p, "height") for p in players):
            warnings.append(
                ValidationIssue(
                    code="TWITTER_PLAYER_MISSING_DIMENSIONS",
                    message="Player card should include width and height",
                    field="twitterPlayer",
                )
            )

    return ValidationResult(
        valid=not errors,
        errors=errors,
        warnings=warnings,
        score=calculate_validation_score(errors, warnings),
    )


# ============================================================================
# Social score
# ============================================================================


def _presence(data: Dict[str, Any], checks: List[tuple]) -> tuple[List[str], List[str]]:
    present: List[str] = []
    missing: List[str] = []
    for label, fields in checks:
        if any(data.get(name) for name in fields):
            present.append(label)
        else:
            missing.append(label)
    return present, missing


def _schema_details(structured_data: Optional[StructuredData]) -> ScoreDetails:
    details = ScoreDetails()
    if structured_data is None or structured_data.is_empty():
        details.missing = ["JSON-LD", "Microdata"]
        details.issues = ["No structured data found"]
        return details

    if structured_data.json_ld:
        details.score += 60
        details.present.append("JSON-LD")
    else:
        details.missing.append("JSON-LD")
    if structured_data.microdata:
        details.score += 25
        details.present.append("Microdata")
    else:
        details.missing.append("Microdata")
    if structured_data.rdfa:
        details.score += 10
        details.present.append("RDFa")
    if structured_data.dublin_core:
        details.score += 5
        details.present.append("Dublin Core")
    details.score = min(details.score, 100)
    return details


def _seo_details(data: Dict[str, Any]) -> ScoreDetails:
    details = ScoreDetails()
    if data.get("ogTitle"):
        details.score += 20
    if data.get("ogDescription"):
        details.score += 20
    if _canonical(data):
        details.score += 20
        details.present.append("canonical")
    else:
        details.missing.append("canonical")
    if data.get("favicon"):
        details.score += 10
        details.present.append("favicon")
    else:
        details.missing.append("favicon")
    for name in ("robots", "viewport", "charset"):
        if data.get(name):
            details.score += 10
            details.present.append(name)
    return details


def generate_social_score(data: Dict[str, Any], structured_data: Optional[StructuredData] = None) -> SocialScore:
    """Roll validation and field coverage up into one 0..100 sharing score."""
    og_validation = validate_open_graph(data)
    twitter_validation = validate_twitter_card(data)

    og_present, og_missing = _presence(
        data,
        [
            ("title", ("ogTitle",)),
            ("description", ("ogDescription",)),
            ("image", ("ogImage",)),
            ("url", ("ogUrl",)),
            ("type", ("ogType",)),
        ],
    )
    if data.get("ogSiteName"):
        og_present.append("site_name")
    open_graph = ScoreDetails(
        score=og_validation.score,
        present=og_present,
        missing=og_missing,
        issues=[error.message for error in og_validation.errors],
    )

    twitter_present, twitter_missing = _presence(
        data,
        [
            ("card", ("twitterCard",)),
            ("title", ("twitterTitle", "ogTitle")),
            ("description", ("twitterDescription", "ogDescription")),
            ("image", ("twitterImage", "ogImage")),
        ],
    )
    if data.get("twitterSite"):
        twitter_present.append("site")
    twitter = ScoreDetails(
        score=twitter_validation.score,
        present=twitter_present,
        missing=twitter_missing,
        issues=[error.message for error in twitter_validation.errors],
    )

    schema = _schema_details(structured_data)
    seo = _seo_details(data)

    overall = round((open_graph.score + twitter.score + schema.score + seo.score) / 4)

    missing_required = [
        tag
        for field_name, tag in (
            ("ogTitle", "og:title"),
            ("ogType", "og:type"),
            ("ogImage", "og:image"),
            ("ogUrl", "og:url"),
        )
        if not data.get(field_name)
    ]
    missing_recommended = [
        tag
        for field_name, tag in (
            ("ogDescription", "og:description"),
            ("ogSiteName", "og:site_name"),
            ("twitterCard", "twitter:card"),
        )
        if not data.get(field_name)
    ]
    if not _canonical(data):
        missing_recommended.append("canonical URL")

    recommendations: List[str] = []
    if overall < 50:
        recommendations.append("Critical: Add basic Open Graph meta tags immediately")
    if open_graph.score < 70:
        recommendations.append("Improve Open Graph implementation for better social sharing")
    if twitter.score < 70:
        recommendations.append("Add Twitter Card meta tags for better Twitter engagement")
    if schema.score == 0:
        recommendations.append("Implement JSON-LD structured data for better SEO")
    if not data.get("ogImage"):
        recommendations.append("Add high-quality images (1200x630px recommended for Facebook)")
    description = data.get("ogDescription")
    if isinstance(description, str) and description and len(description) < 50:
        recommendations.append("Write longer, more descriptive meta descriptions (150-160 characters)")

    logger.debug(
        "Social score %d (og=%d twitter=%d schema=%d seo=%d)",
        overall,
        open_graph.score,
        twitter.score,
        schema.score,
        seo.score,
    )

    return SocialScore(
        overall=overall,
        open_graph=open_graph,
        twitter=twitter,
        schema=schema,
        seo=seo,
        recommendations=recommendations,
        missing_required=missing_required,
        missing_recommended=missing_recommended,
    )


def validate_record(data: Dict[str, Any]) -> ValidationResult:
    """Validate both sides of a record. The score is the lower of the two."""
    og_result = validate_open_graph(data)
    twitter_result = validate_twitter_card(data)
    return ValidationResult(
        valid=og_result.valid and twitter_result.valid,
        errors=og_result.errors + twitter_result.errors,
        warnings=og_result.warnings + twitter_result.warnings,
        score=min(og_result.score, twitter_result.score),
        recommendations=og_result.recommendations + twitter_result.recommendations,
    )
