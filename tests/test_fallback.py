"""
Tests for the HTML fallback resolver.
"""

import pytest

from ogextract.config import ExtractOptions
from ogextract.metadata.fallback import AttributeQuery, FallbackResolver, TextQuery, fallback
from ogextract.protocols import ImageMedia


@pytest.fixture
def resolve(make_soup):
    """Run the resolver over ``html`` starting from ``record`` (empty by default)."""

    def _resolve(html, record=None, **options):
        return fallback({} if record is None else record, make_soup(html), ExtractOptions(**options))

    return _resolve


EMPTY_PAGE = "<html><body></body></html>"


class TestTitle:
    def test_title_already_found(self, resolve):
        assert resolve("<html><body><title>foo</title></body></html>", {"ogTitle": "bar"})["ogTitle"] == "bar"

    def test_title_tag(self, resolve):
        assert resolve("<html><body><title>foo</title></body></html>")["ogTitle"] == "foo"

    def test_first_of_several_title_tags(self, resolve):
        html = (
            "<html><head><title>foo</title></head><body><svg><title>bar</title></svg>"
            "<svg><title>baz</title></svg></body></html>"
        )
        assert resolve(html)["ogTitle"] == "foo"

    def test_title_is_stripped(self, resolve):
        assert resolve("<title>\n   spaced out  \n</title>")["ogTitle"] == "spaced out"

    @pytest.mark.parametrize(
        "html",
        [
            '<html><head><meta name="title" content="foo"></head></html>',
            '<html><body><div class="post-title">foo</div></body></html>',
            '<html><body><div class="entry-title">foo</div></body></html>',
            '<html><body><h1 class="title"><a>foo</a></h1></body></html>',
            '<html><body><h1 class="title">foo</h1></body></html>',
            '<html><body><h1 class="Page-Title">foo</h1></body></html>',
        ],
    )
    def test_title_sources(self, resolve, html):
        assert resolve(html)["ogTitle"] == "foo"

    def test_empty_title_moves_to_next_step(self, resolve):
        assert resolve('<title>  </title><div class="post-title">foo</div>')["ogTitle"] == "foo"

    def test_no_title(self, resolve):
        assert resolve(EMPTY_PAGE) == {}


class TestDescription:
    def test_description_already_found(self, resolve):
        html = '<html><head><meta name="description" content="foo"></head></html>'
        assert resolve(html, {"ogDescription": "bar"})["ogDescription"] == "bar"

    @pytest.mark.parametrize(
        "html",
        [
            '<html><head><meta name="description" content="foo"></head></html>',
            '<html><head><meta itemprop="description" content="foo"></head></html>',
            '<html><body><div id="description">foo</div></body></html>',
        ],
    )
    def test_description_sources(self, resolve, html):
        assert resolve(html)["ogDescription"] == "foo"

    def test_no_description(self, resolve):
        assert resolve(EMPTY_PAGE) == {}


class TestImage:
    def test_image_already_found(self, resolve):
        record = resolve(
            '<html><body><img src="foo.png"></body></html>',
            {"ogImage": ImageMedia(url="bar.png", type="png")},
            ogImageFallback=True,
        )
        assert record["ogImage"] == ImageMedia(url="bar.png", type="png")

    def test_fallback_disabled(self, resolve):
        assert resolve('<html><body><img src="foo.png"></body></html>', ogImageFallback=False) == {}

    def test_mix_of_valid_and_invalid_images(self, resolve):
        html = '<html><body><img width=2 src="foo.png"><img src="bar.png"><img src="foo.bar"><img></body></html>'
        record = resolve(html, ogImageFallback=True)
        assert record["ogImage"] == [
            ImageMedia(url="foo.png", width="2", height=None, type="png"),
            ImageMedia(url="bar.png", width=None, height=None, type="png"),
        ]

    def test_single_fallback_image_is_still_a_list(self, resolve):
        record = resolve('<img src="only.jpg">', ogImageFallback=True)
        assert record["ogImage"] == [ImageMedia(url="only.jpg", type="jpg")]

    def test_no_images_on_page(self, resolve):
        assert resolve(EMPTY_PAGE, ogImageFallback=True) == {}

    def test_missing_type_is_backfilled(self, resolve):
        record = resolve(
            '<html><body><img src="foo.png"></body></html>', {"ogImage": ImageMedia(url="bar.png")}, ogImageFallback=True
        )
        assert record["ogImage"].url == "bar.png"
        assert record["ogImage"].type == "png"

    def test_invalid_type_is_not_backfilled(self, resolve):
        record = resolve(
            '<html><body><img src="foo.png"></body></html>', {"ogImage": ImageMedia(url="bar.foo")}, ogImageFallback=True
        )
        assert record["ogImage"].url == "bar.foo"
        assert record["ogImage"].type is None

    def test_type_backfill_runs_on_lists(self, resolve):
        images = [ImageMedia(url="a.webp"), ImageMedia(url="b.gif", type="image/gif")]
        record = resolve(EMPTY_PAGE, {"ogImage": images})
        assert [image.type for image in record["ogImage"]] == ["webp", "image/gif"]


class TestAudio:
    def test_audio_url_already_found(self, resolve):
        record = resolve('<html><body><audio src="foo.png"></body></html>', {"ogAudioURL": "bar.mp3"})
        assert record == {"ogAudioURL": "bar.mp3"}

    def test_audio_secure_url_already_found(self, resolve):
        record = resolve('<html><body><audio src="foo.png"></body></html>', {"ogAudioSecureURL": "bar.mp3"})
        assert record == {"ogAudioSecureURL": "bar.mp3"}

    def test_audio_tag_without_https(self, resolve):
        assert resolve('<html><body><audio src="foo.mp3"></body></html>') == {"ogAudioURL": "foo.mp3"}

    def test_audio_tag_with_https(self, resolve):
        record = resolve('<html><body><audio src="https://foo.mp3" type="mp3"></body></html>')
        assert record == {"ogAudioSecureURL": "https://foo.mp3", "ogAudioType": "mp3"}

    def test_source_tag_without_https(self, resolve):
        record = resolve('<html><body><audio><source src="foo.mp3" type="mp3"></audio></body></html>')
        assert record == {"ogAudioURL": "foo.mp3", "ogAudioType": "mp3"}

    def test_source_tag_with_https(self, resolve):
        record = resolve('<html><body><audio><source src="https://foo.mp3"></audio></body></html>')
        assert record == {"ogAudioSecureURL": "https://foo.mp3"}

    def test_existing_audio_type_is_kept(self, resolve):
        record = resolve('<audio src="foo.mp3" type="mp3"></audio>', {"ogAudioType": "audio/mpeg"})
        assert record["ogAudioType"] == "audio/mpeg"

    def test_audio_without_source(self, resolve):
        assert resolve("<html><body><audio></body></html>") == {}


class TestLocaleLogoUrl:
    def test_locale_already_found(self, resolve):
        assert resolve('<html lang="foo"></html>', {"ogLocale": "bar"})["ogLocale"] == "bar"

    @pytest.mark.parametrize(
        "html",
        ['<html lang="foo"></html>', '<html><head><meta itemprop="inLanguage" content="foo"></head></html>'],
    )
    def test_locale_sources(self, resolve, html):
        assert resolve(html)["ogLocale"] == "foo"

    def test_logo_already_found(self, resolve):
        html = '<html><head><meta itemprop="logo" content="foo"></head></html>'
        assert resolve(html, {"ogLogo": "bar"})["ogLogo"] == "bar"

    @pytest.mark.parametrize(
        "html",
        [
            '<html><head><meta itemprop="logo" content="foo"></head></html>',
            '<html><body><img itemprop="logo" src="foo"></body></html>',
        ],
    )
    def test_logo_sources(self, resolve, html):
        assert resolve(html)["ogLogo"] == "foo"

    def test_url_already_found(self, resolve):
        html = '<html><head><link rel="canonical" href="foo"></head></html>'
        assert resolve(html, {"ogUrl": "bar"})["ogUrl"] == "bar"

    @pytest.mark.parametrize(
        "html",
        [
            '<html><head><link rel="canonical" href="foo"></head></html>',
            '<html><head><link rel="alternate" hreflang="x-default" href="foo"></head></html>',
        ],
    )
    def test_url_sources(self, resolve, html):
        assert resolve(html)["ogUrl"] == "foo"


class TestDate:
    def test_date_already_found(self, resolve):
        html = '<html><head><meta name="date" content="foo"></head></html>'
        assert resolve(html, {"ogDate": "bar"})["ogDate"] == "bar"

    @pytest.mark.parametrize(
        "html",
        [
            '<html><head><meta name="date" content="foo"></head></html>',
            '<html><head><meta itemprop="datemodified" content="foo"></head></html>',
            '<html><head><meta itemprop="dateModified" content="foo"></head></html>',
            '<html><head><meta itemprop="datepublished" content="foo"></head></html>',
            '<html><head><meta itemprop="date" content="foo"></head></html>',
            '<html><body><time itemprop="date" datetime="foo"></body></html>',
            '<html><body><time datetime="foo"></body></html>',
        ],
    )
    def test_date_sources(self, resolve, html):
        assert resolve(html)["ogDate"] == "foo"

    def test_no_date(self, resolve):
        assert resolve(EMPTY_PAGE) == {}


class TestFavicon:
    @pytest.mark.parametrize(
        "html,expected",
        [
            ('<link rel="shortcut icon" href="/a.ico"><link rel="icon" href="/b.ico">', "/a.ico"),
            ('<link rel="icon" href="/b.ico">', "/b.ico"),
            ('<link rel="mask-icon" href="/mask.svg">', "/mask.svg"),
            ('<link rel="apple-touch-icon" href="/touch.png">', "/touch.png"),
            ('<link type="image/png" href="/typed.png">', "/typed.png"),
            ('<link type="image/x-icon" href="/x.ico">', "/x.ico"),
        ],
    )
    def test_favicon_sources(self, resolve, html, expected):
        assert resolve(html)["favicon"] == expected

    def test_no_favicon(self, resolve):
        assert "favicon" not in resolve(EMPTY_PAGE)


class TestResolver:
    def test_used_fallbacks_are_reported(self, make_soup, bare_html):
        resolver = FallbackResolver(make_soup(bare_html), ExtractOptions(ogImageFallback=True))
        record = resolver.resolve({})

        assert record["ogTitle"] == "Only A Title"
        assert record["ogDescription"] == "Plain description"
        assert record["ogLocale"] == "fr"
        assert record["ogDate"] == "2024-02-03"
        assert record["favicon"] == "/static/favicon.png"
        assert record["ogImage"] == [ImageMedia(url="/images/hero.jpg", width="640", height="480", type="jpg")]
        assert resolver.used == ["title", "description", "locale", "date", "favicon", "image"]

    def test_nothing_used_when_record_is_complete(self, make_soup):
        resolver = FallbackResolver(make_soup("<title>page</title>"))
        resolver.resolve({"ogTitle": "already"})
        assert resolver.used == []

    def test_run_query(self, make_soup):
        resolver = FallbackResolver(make_soup('<p class="x"> hi </p><a href="/link">t</a>'))
        assert resolver.run_query(TextQuery("p.x")) == "hi"
        assert resolver.run_query(AttributeQuery("a", "href")) == "/link"
        assert resolver.run_query(AttributeQuery("a", "title")) is None
        assert resolver.run_query(TextQuery("section")) is None

    def test_default_options(self, make_soup):
        resolver = FallbackResolver(make_soup('<img src="a.png">'))
        assert resolver.options.og_image_fallback is False
        assert "ogImage" not in resolver.resolve({})
