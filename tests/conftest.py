"""
Test configuration for ogextract.

Shared fixtures: sample documents, parsed soups, extraction options and an
httpx mock transport for client tests.
"""

from pathlib import Path
from typing import Callable, Dict, Generator

import httpx
import pytest
from bs4 import BeautifulSoup

from ogextract.config import ExtractOptions

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: End-to-end extraction tests")
    config.addinivalue_line("markers", "network: Tests exercising the HTTP client (mocked transport)")


# ============================================================================
# Document Fixtures
# ============================================================================


ARTICLE_HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Machine Learning Algorithms: A Comprehensive Guide</title>
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <meta name="description" content="A comprehensive guide to machine learning algorithms">
    <meta name="author" content="Dr. Jane Smith">
    <meta name="keywords" content="machine learning, AI, algorithms">
    <meta property="og:title" content="Machine Learning Algorithms Guide">
    <meta property="og:type" content="article">
    <meta property="og:url" content="https://example.com/ml-guide">
    <meta property="og:site_name" content="Example">
    <meta property="og:description" content="Complete guide to ML algorithms">
    <meta property="og:image" content="https://example.com/ml-guide.jpg">
    <meta property="og:image:width" content="1200">
    <meta property="og:image:height" content="630">
    <meta property="og:image:type" content="image/jpeg">
    <meta property="article:published_time" content="2023-12-01T10:00:00Z">
    <meta property="article:tag" content="ml">
    <meta property="article:tag" content="ai">
    <meta name="twitter:card" content="summary_large_image">
    <meta name="twitter:site" content="@example">
    <meta name="twitter:image" content="https://example.com/ml-card.png">
    <link rel="canonical" href="https://example.com/ml-guide">
    <link rel="icon" href="/favicon.ico">
</head>
<body>
    <h1 class="entry-title">Machine Learning Algorithms</h1>
    <p>Machine learning is a subset of artificial intelligence.</p>
    <img src="https://example.com/diagram.png" width="800" height="400" alt="Diagram">
</body>
</html>
"""

BARE_HTML = """
<html lang="fr">
<head>
    <title>  Only A Title  </title>
    <meta name="description" content="Plain description">
    <link rel="shortcut icon" href="/static/favicon.png">
</head>
<body>
    <img src="/images/hero.jpg" width="640" height="480">
    <img src="/images/spacer.foo">
    <time datetime="2024-02-03">3 February</time>
</body>
</html>
"""


@pytest.fixture
def article_html() -> str:
    """A page with a full set of Open Graph and Twitter tags."""
    return ARTICLE_HTML


@pytest.fixture
def bare_html() -> str:
    """A page with no social tags at all, only ordinary HTML."""
    return BARE_HTML


@pytest.fixture
def make_soup() -> Callable[[str], BeautifulSoup]:
    """Parse an HTML snippet the same way the extractor does."""

    def _make(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")

    return _make


@pytest.fixture
def tmp_html_file(tmp_path: Path) -> Generator[Path, None, None]:
    path = tmp_path / "page.html"
    path.write_text(ARTICLE_HTML, encoding="utf-8")
    yield path


# ============================================================================
# Options Fixtures
# ============================================================================


@pytest.fixture
def default_options() -> ExtractOptions:
    return ExtractOptions()


@pytest.fixture
def all_media_options() -> ExtractOptions:
    return ExtractOptions(allMedia=True)


# ============================================================================
# HTTP Fixtures
# ============================================================================


@pytest.fixture
def html_pages() -> Dict[str, str]:
    """URL path -> HTML body served by the mock transport."""
    return {"/article": ARTICLE_HTML, "/bare": BARE_HTML}


@pytest.fixture
def mock_transport(html_pages: Dict[str, str]) -> httpx.MockTransport:
    """Serves ``html_pages``; ``/missing`` is a 404, ``/data.json`` is JSON, ``/boom`` fails to connect."""
    calls: list = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        path = request.url.path
        if path == "/boom":
            raise httpx.ConnectError("connection refused", request=request)
        if path == "/data.json" or path == "/api":
            return httpx.Response(200, json={"hello": "world"})
        if path in html_pages:
            return httpx.Response(
                200, text=html_pages[path], headers={"content-type": "text/html; charset=utf-8"}
            )
        return httpx.Response(404, text="not found", headers={"content-type": "text/html"})

    transport = httpx.MockTransport(handler)
    transport.calls = calls  # type: ignore[attr-defined]
    return transport
