"""
Async fetch wrapper: downloads a page with httpx and runs the extractor on it.

Failures never raise out of :meth:`OpenGraphClient.fetch`; they come back as a
:class:`FetchError` record on the :class:`FetchResult`.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union
from urllib.parse import urlsplit

import httpx
import structlog
from httpx import AsyncClient, HTTPError

from ogextract.cache import AnyCache, NullCache
from ogextract.config.config import ClientConfig, Config, ExtractOptions
from ogextract.metadata.extractor import MetadataExtractor, resolve_options
from ogextract.metadata.utils import is_non_html_url

logger = structlog.get_logger(__name__)

# FetchError codes
INVALID_URL = "invalid_url"
NON_HTML_URL = "non_html_url"
HTTP_ERROR = "http_error"
NETWORK_ERROR = "network_error"
TOO_LARGE = "too_large"
NOT_HTML = "not_html"
EXTRACTION_ERROR = "extraction_error"

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")


@dataclass(frozen=True)
class FetchError:
    """Why a URL produced no data."""

    code: str
    message: str
    status_code: Optional[int] = None


@dataclass
class FetchResult:
    """Outcome of fetching and extracting one URL."""

    url: str
    data: Optional[Dict[str, Any]] = None
    error: Optional[FetchError] = None
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def validate_url(url: str) -> Optional[FetchError]:
    """Return a :class:`FetchError` when ``url`` cannot be fetched, else None."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return FetchError(INVALID_URL, f"Invalid URL: {url!r}")
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return FetchError(INVALID_URL, f"Only absolute http(s) URLs can be fetched: {url!r}")
    if is_non_html_url(parts.path):
        return FetchError(NON_HTML_URL, f"URL points at a non-HTML resource: {url}")
    return None


class OpenGraphClient:
    """
    Fetches pages and extracts their social metadata.

    The client owns its ``httpx.AsyncClient`` unless one is passed in, and is
    meant to be used as an async context manager. A cache, when given, is
    consulted before every request and filled after every success.
    """

    def __init__(
        self,
        config: Optional[Union[Config, ClientConfig]] = None,
        cache: Optional[AnyCache] = None,
        http_client: Optional[AsyncClient] = None,
    ) -> None:
        if isinstance(config, Config):
            config = config.client
        self.config: ClientConfig = config or ClientConfig()
        self.cache: AnyCache = cache if cache is not None else NullCache()
        self._client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self) -> OpenGraphClient:
        if self._client is None:
            self._client = AsyncClient(
                timeout=self.config.timeout,
                follow_redirects=self.config.follow_redirects,
                headers={"User-Agent": self.config.user_agent, "Accept": "text/html,application/xhtml+xml"},
            )
            self._owns_client = True
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> AsyncClient:
        if self._client is None:
            raise RuntimeError("OpenGraphClient must be used as an async context manager")
        return self._client

    async def _download(self, url: str) -> Union[bytes, FetchError]:
        limit = self.config.max_body_bytes
        try:
            async with self._http().stream("GET", url) as response:
                response.raise_for_status()

                content_type = response.headers.get("content-type", "")
                if content_type and not any(kind in content_type.lower() for kind in HTML_CONTENT_TYPES):
                    return FetchError(
                        NOT_HTML, f"Page is not HTML: {content_type}", status_code=response.status_code
                    )

                declared = response.headers.get("content-length", "")
                if declared.isdigit() and int(declared) > limit:
                    return FetchError(
                        TOO_LARGE,
                        f"Page is {declared} bytes, limit is {limit}",
                        status_code=response.status_code,
                    )

                body = bytearray()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) > limit:
                        return FetchError(
                            TOO_LARGE,
                            f"Page is larger than the {limit} byte limit",
                            status_code=response.status_code,
                        )
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("HTTP error fetching page", status_code=status)
            return FetchError(HTTP_ERROR, f"Server returned HTTP {status}", status_code=status)
        except HTTPError as e:
            logger.warning("Network error fetching page", error=str(e))
            return FetchError(NETWORK_ERROR, f"Request failed: {e}")

        return bytes(body)

    async def fetch(
        self, url: str, options: Optional[Union[ExtractOptions, Dict[str, Any]]] = None, **overrides: Any
    ) -> FetchResult:
        """Fetch ``url`` and extract its metadata."""
        with structlog.contextvars.bound_contextvars(source_url=url):
            invalid = validate_url(url)
            if invalid is not None:
                logger.info("Rejected URL", code=invalid.code)
                return FetchResult(url=url, error=invalid)

            cached = self.cache.get(url)
            if cached is not None:
                logger.debug("Cache hit")
                return FetchResult(url=url, data=cached, from_cache=True)

            body = await self._download(url)
            if isinstance(body, FetchError):
                return FetchResult(url=url, error=body)

            extractor = MetadataExtractor(resolve_options(options, **overrides))
            try:
                data = await asyncio.to_thread(extractor.extract, body)
            except Exception as e:
                logger.exception("Extraction failed")
                return FetchResult(url=url, error=FetchError(EXTRACTION_ERROR, f"Extraction failed: {e}"))
            self.cache.set(url, data)
            logger.debug("Extracted page", fields=len(data))
            return FetchResult(url=url, data=data)

    async def fetch_many(
        self,
        urls: Sequence[str],
        options: Optional[Union[ExtractOptions, Dict[str, Any]]] = None,
        concurrency: Optional[int] = None,
    ) -> List[FetchResult]:
        """Fetch every URL with at most ``concurrency`` requests in flight. Results keep input order."""
        limit = concurrency or self.config.max_concurrency
        if limit < 1:
            raise ValueError("concurrency must be at least 1")
        semaphore = asyncio.Semaphore(limit)
        resolved = resolve_options(options)

        async def fetch_one(url: str) -> FetchResult:
            async with semaphore:
                return await self.fetch(url, resolved)

        results = await asyncio.gather(*(fetch_one(url) for url in urls))
        failed = sum(1 for result in results if not result.ok)
        logger.info("Fetched URLs", total=len(results), failed=failed)
        return list(results)
