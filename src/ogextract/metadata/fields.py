"""
Declarative table mapping raw tag identifiers to record field names.

Each entry says which ``property`` / ``name`` value a ``<meta>`` tag must carry,
which field of the extracted record it fills, and whether the tag may repeat.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern, Tuple


@dataclass(frozen=True)
class FieldSpec:
    """A single tag-to-field mapping. ``property`` is matched case-insensitively."""

    property: str
    field_name: str
    multiple: bool = False

    def matches(self, key: str) -> bool:
        return key.lower() == self.property.lower()


def _single(prop: str, name: str) -> FieldSpec:
    return FieldSpec(prop, name, False)


def _multi(prop: str, name: str) -> FieldSpec:
    return FieldSpec(prop, name, True)


FIELDS: Tuple[FieldSpec, ...] = (
    # --- Open Graph basics ---
    _single("og:title", "ogTitle"),
    _single("og:type", "ogType"),
    _single("og:url", "ogUrl"),
    _single("og:description", "ogDescription"),
    _single("og:determiner", "ogDeterminer"),
    _single("og:site_name", "ogSiteName"),
    _single("og:locale", "ogLocale"),
    _multi("og:locale:alternate", "ogLocaleAlternate"),
    _single("og:updated_time", "ogUpdatedTime"),
    _single("og:logo", "ogLogo"),
    _single("og:date", "ogDate"),
    _single("og:country-name", "ogCountryName"),
    _single("og:email", "ogEmail"),
    _single("og:phone_number", "ogPhoneNumber"),
    _single("og:fax_number", "ogFaxNumber"),
    _single("og:latitude", "ogLatitude"),
    _single("og:longitude", "ogLongitude"),
    _single("og:street-address", "ogStreetAddress"),
    _single("og:locality", "ogLocality"),
    _single("og:region", "ogRegion"),
    _single("og:postal-code", "ogPostalCode"),
    _single("og:rich_attachment", "ogRichAttachment"),
    _single("og:see_also", "ogSeeAlso"),
    _single("og:ttl", "ogTtl"),
    # --- Open Graph image ---
    _multi("og:image", "ogImage"),
    _multi("og:image:url", "ogImageURL"),
    _multi("og:image:secure_url", "ogImageSecureURL"),
    _multi("og:image:width", "ogImageWidth"),
    _multi("og:image:height", "ogImageHeight"),
    _multi("og:image:type", "ogImageType"),
    _multi("og:image:alt", "ogImageAlt"),
    # --- Open Graph video ---
    _multi("og:video", "ogVideo"),
    _multi("og:video:url", "ogVideoURL"),
    _multi("og:video:secure_url", "ogVideoSecureURL"),
    _multi("og:video:width", "ogVideoWidth"),
    _multi("og:video:height", "ogVideoHeight"),
    _multi("og:video:type", "ogVideoType"),
    _single("og:video:duration", "ogVideoDuration"),
    _single("og:video:release_date", "ogVideoReleaseDate"),
    # --- Open Graph audio ---
    _single("og:audio", "ogAudio"),
    _single("og:audio:url", "ogAudioURL"),
    _single("og:audio:secure_url", "ogAudioSecureURL"),
    _single("og:audio:type", "ogAudioType"),
    # --- Open Graph product ---
    _single("og:availability", "ogAvailability"),
    _single("og:price:amount", "ogPriceAmount"),
    _single("og:price:currency", "ogPriceCurrency"),
    _single("og:product:retailer_item_id", "ogProductRetailerItemId"),
    _single("og:product:price:amount", "ogProductPriceAmount"),
    _single("og:product:price:currency", "ogProductPriceCurrency"),
    _single("og:product:availability", "ogProductAvailability"),
    _single("og:product:condition", "ogProductCondition"),
    _single("product:retailer_item_id", "productRetailerItemId"),
    _single("product:price:amount", "productPriceAmount"),
    _single("product:price:currency", "productPriceCurrency"),
    _single("product:availability", "productAvailability"),
    _single("product:condition", "productCondition"),
    _single("product:brand", "productBrand"),
    _single("product:category", "productCategory"),
    # --- Article ---
    _single("article:published_time", "articlePublishedTime"),
    _single("article:modified_time", "articleModifiedTime"),
    _single("article:expiration_time", "articleExpirationTime"),
    _multi("article:author", "articleAuthor"),
    _single("article:section", "articleSection"),
    _multi("article:tag", "articleTag"),
    _single("article:publisher", "articlePublisher"),
    # --- Book / books ---
    _multi("book:author", "bookAuthor"),
    _single("book:isbn", "bookIsbn"),
    _single("book:release_date", "bookReleaseDate"),
    _multi("book:tag", "bookTag"),
    _single("books:author", "booksAuthor"),
    _single("books:book", "booksBook"),
    _single("books:genre", "booksGenre"),
    _single("books:isbn", "booksIsbn"),
    _single("books:page_count", "booksPageCount"),
    _single("books:rating:value", "booksRatingValue"),
    _single("books:rating:scale", "booksRatingScale"),
    _single("books:release_date", "booksReleaseDate"),
    _single("books:sample", "booksSample"),
    # --- Profile ---
    _single("profile:first_name", "profileFirstName"),
    _single("profile:last_name", "profileLastName"),
    _single("profile:username", "profileUsername"),
    _single("profile:gender", "profileGender"),
    # --- Music ---
    _multi("music:song", "musicSong"),
    _multi("music:song:url", "musicSongUrl"),
    _multi("music:song:track", "musicSongTrack"),
    _multi("music:song:disc", "musicSongDisc"),
    _multi("music:musician", "musicMusician"),
    _multi("music:album", "musicAlbum"),
    _multi("music:album:url", "musicAlbumUrl"),
    _multi("music:album:disc", "musicAlbumDisc"),
    _multi("music:album:track", "musicAlbumTrack"),
    _single("music:release_date", "musicReleaseDate"),
    _single("music:duration", "musicDuration"),
    _multi("music:creator", "musicCreator"),
    _single("music:preview_url:url", "musicPreviewUrl"),
    _single("music:preview_url:secure_url", "musicPreviewSecureUrl"),
    _single("music:preview_url:type", "musicPreviewType"),
    # --- Video metadata ---
    _multi("video:actor", "videoActor"),
    _multi("video:actor:role", "videoActorRole"),
    _multi("video:director", "videoDirector"),
    _multi("video:writer", "videoWriter"),
    _single("video:duration", "videoDuration"),
    _single("video:release_date", "videoReleaseDate"),
    _multi("video:tag", "videoTag"),
    _single("video:series", "videoSeries"),
    # --- Place / business / restaurant / fitness ---
    _single("place:location:latitude", "placeLocationLatitude"),
    _single("place:location:longitude", "placeLocationLongitude"),
    _single("place:location:altitude", "placeLocationAltitude"),
    _single("business:contact_data:street_address", "businessContactDataStreetAddress"),
    _single("business:contact_data:locality", "businessContactDataLocality"),
    _single("business:contact_data:region", "businessContactDataRegion"),
    _single("business:contact_data:postal_code", "businessContactDataPostalCode"),
    _single("business:contact_data:country_name", "businessContactDataCountryName"),
    _single("business:contact_data:email", "businessContactDataEmail"),
    _single("business:contact_data:phone_number", "businessContactDataPhoneNumber"),
    _single("business:contact_data:website", "businessContactDataWebsite"),
    _single("restaurant:menu", "restaurantMenu"),
    _single("restaurant:restaurant", "restaurantRestaurant"),
    _single("restaurant:section", "restaurantSection"),
    _single("restaurant:variation:price:amount", "restaurantVariationPriceAmount"),
    _single("restaurant:variation:price:currency", "restaurantVariationPriceCurrency"),
    _single("restaurant:contact_info:website", "restaurantContactInfoWebsite"),
    _single("restaurant:contact_info:street_address", "restaurantContactInfoStreetAddress"),
    _single("restaurant:contact_info:locality", "restaurantContactInfoLocality"),
    _single("restaurant:contact_info:region", "restaurantContactInfoRegion"),
    _single("restaurant:contact_info:postal_code", "restaurantContactInfoPostalCode"),
    _single("restaurant:contact_info:country_name", "restaurantContactInfoCountryName"),
    _single("restaurant:contact_info:email", "restaurantContactInfoEmail"),
    _single("restaurant:contact_info:phone_number", "restaurantContactInfoPhoneNumber"),
    _single("fitness:duration:value", "fitnessDurationValue"),
    _single("fitness:duration:units", "fitnessDurationUnits"),
    _single("fitness:distance:value", "fitnessDistanceValue"),
    _single("fitness:distance:units", "fitnessDistanceUnits"),
    _single("fitness:speed:value", "fitnessSpeedValue"),
    _single("fitness:speed:units", "fitnessSpeedUnits"),
    _single("fitness:calories", "fitnessCalories"),
    # --- Facebook ---
    _single("fb:app_id", "fbAppId"),
    _single("fb:admins", "fbAdmins"),
    _single("fb:pages", "fbPages"),
    # --- Twitter card ---
    _single("twitter:card", "twitterCard"),
    _single("twitter:url", "twitterUrl"),
    _single("twitter:domain", "twitterDomain"),
    _single("twitter:site", "twitterSite"),
    _single("twitter:site:id", "twitterSiteId"),
    _single("twitter:creator", "twitterCreator"),
    _single("twitter:creator:id", "twitterCreatorId"),
    _single("twitter:title", "twitterTitle"),
    _single("twitter:description", "twitterDescription"),
    _multi("twitter:image", "twitterImage"),
    _multi("twitter:image:src", "twitterImageSrc"),
    _multi("twitter:image:width", "twitterImageWidth"),
    _multi("twitter:image:height", "twitterImageHeight"),
    _multi("twitter:image:alt", "twitterImageAlt"),
    _multi("twitter:player", "twitterPlayer"),
    _multi("twitter:player:width", "twitterPlayerWidth"),
    _multi("twitter:player:height", "twitterPlayerHeight"),
    _multi("twitter:player:stream", "twitterPlayerStream"),
    _single("twitter:player:stream:content_type", "twitterPlayerStreamContentType"),
    _single("twitter:app:name:iphone", "twitterAppNameiPhone"),
    _single("twitter:app:id:iphone", "twitterAppIdiPhone"),
    _single("twitter:app:url:iphone", "twitterAppUrliPhone"),
    _single("twitter:app:name:ipad", "twitterAppNameiPad"),
    _single("twitter:app:id:ipad", "twitterAppIdiPad"),
    _single("twitter:app:url:ipad", "twitterAppUrliPad"),
    _single("twitter:app:name:googleplay", "twitterAppNameGooglePlay"),
    _single("twitter:app:id:googleplay", "twitterAppIdGooglePlay"),
    _single("twitter:app:url:googleplay", "twitterAppUrlGooglePlay"),
    _single("twitter:app:country", "twitterAppCountry"),
    # --- App Links ---
    _single("al:android:url", "alAndroidUrl"),
    _single("al:android:app_name", "alAndroidAppName"),
    _single("al:android:package", "alAndroidPackage"),
    _single("al:android:class", "alAndroidClass"),
    _single("al:ios:url", "alIosUrl"),
    _single("al:ios:app_store_id", "alIosAppStoreId"),
    _single("al:ios:app_name", "alIosAppName"),
    _single("al:iphone:url", "alIphoneUrl"),
    _single("al:iphone:app_store_id", "alIphoneAppStoreId"),
    _single("al:iphone:app_name", "alIphoneAppName"),
    _single("al:ipad:url", "alIpadUrl"),
    _single("al:ipad:app_store_id", "alIpadAppStoreId"),
    _single("al:ipad:app_name", "alIpadAppName"),
    _single("al:windows:url", "alWindowsUrl"),
    _single("al:windows:app_id", "alWindowsAppId"),
    _single("al:windows:app_name", "alWindowsAppName"),
    _single("al:windows_phone:url", "alWindowsPhoneUrl"),
    _single("al:windows_phone:app_id", "alWindowsPhoneAppId"),
    _single("al:windows_phone:app_name", "alWindowsPhoneAppName"),
    _single("al:windows_universal:url", "alWindowsUniversalUrl"),
    _single("al:windows_universal:app_id", "alWindowsUniversalAppId"),
    _single("al:windows_universal:app_name", "alWindowsUniversalAppName"),
    _single("al:web:url", "alWebUrl"),
    _single("al:web:should_fallback", "alWebShouldFallback"),
    # --- Dublin Core ---
    _single("dc.title", "dcTitle"),
    _single("dc.creator", "dcCreator"),
    _single("dc.subject", "dcSubject"),
    _single("dc.description", "dcDescription"),
    _single("dc.publisher", "dcPublisher"),
    _single("dc.contributor", "dcContributor"),
    _single("dc.date", "dcDate"),
    _single("dc.type", "dcType"),
    _single("dc.format", "dcFormat"),
    _single("dc.identifier", "dcIdentifier"),
    _single("dc.source", "dcSource"),
    _single("dc.language", "dcLanguage"),
    _single("dc.relation", "dcRelation"),
    _single("dc.coverage", "dcCoverage"),
    _single("dc.rights", "dcRights"),
    _single("dcterms.title", "dcTermsTitle"),
    _single("dcterms.creator", "dcTermsCreator"),
    _single("dcterms.description", "dcTermsDescription"),
    _single("dcterms.modified", "dcTermsModified"),
    _single("dcterms.created", "dcTermsCreated"),
    _single("dcterms.issued", "dcTermsIssued"),
    _single("dcterms.language", "dcTermsLanguage"),
    _single("dcterms.rights", "dcTermsRights"),
    # --- Plain document metadata ---
    _single("author", "author"),
    _single("keywords", "keywords"),
    _single("robots", "robots"),
    _single("viewport", "viewport"),
    _single("generator", "generator"),
    _single("application-name", "applicationName"),
    _single("theme-color", "themeColor"),
    _single("msapplication-TileColor", "msApplicationTileColor"),
    _single("msapplication-TileImage", "msApplicationTileImage"),
    _single("apple-mobile-web-app-title", "appleMobileWebAppTitle"),
    _single("format-detection", "formatDetection"),
    _single("referrer", "referrer"),
)

# Raw parallel-array fields that are folded into a media record and then removed.
MEDIA_FIELD_PATTERN: Pattern[str] = re.compile(r"(ogImage|ogVideo|twitter|musicSong)")


def media_source_fields(table: Iterable[FieldSpec] = FIELDS) -> List[str]:
    """Return the multi-valued built-in field names owned by a media family."""
    return [spec.field_name for spec in table if spec.multiple and MEDIA_FIELD_PATTERN.match(spec.field_name)]


def build_field_table(custom_meta_tags: Optional[Iterable[FieldSpec]] = None) -> List[FieldSpec]:
    """Return the built-in table with any caller-supplied specs appended."""
    table = list(FIELDS)
    if custom_meta_tags:
        table.extend(custom_meta_tags)
    return table
