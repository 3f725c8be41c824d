"""
edge_config/preview.py

Fetches original and optimized HTML from the edge renderer for previews.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from urllib.parse import urlsplit

import httpx

from edge_config.config import PreviewOptions
from edge_config.domain.results import PreviewHtml
from edge_config.errors import PreviewFetchError
from edge_config.logging_utils import log_event

logger = logging.getLogger(__name__)

PREVIEW_QUERY_FLAG = "edgePreview=true"

SleepFn = Callable[[float], Awaitable[None]]


class EdgeHtmlFetcher:
    """
    Render-diff check against the edge renderer.

    The original page is fetched once. The optimized page gets a warmup
    request, waits `warmup_delay_ms`, then is fetched up to `max_retries + 1`
    times, `retry_delay_ms` apart, until its HTML differs from the original.
    A failed attempt is retried the same way and raises only on the last one.
    An unchanged page after the last attempt is a normal result.
    """

    def __init__(
        self,
        *,
        edge_url: str,
        api_key: str,
        forwarded_host: str,
        options: PreviewOptions | None = None,
        timeout_seconds: float = 15.0,
        http_client: httpx.AsyncClient | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._edge_url = edge_url.rstrip("/")
        self._api_key = api_key
        self._forwarded_host = forwarded_host
        self._options = options or PreviewOptions()
        self._timeout_seconds = timeout_seconds
        self._http_client = http_client
        self._sleep = sleep

    @staticmethod
    def _path_and_query(url: str) -> str:
        parts = urlsplit(url)
        path = parts.path or "/"
        return f"{path}?{parts.query}" if parts.query else path

    def _request_url(self, url: str, optimized: bool) -> str:
        path_and_query = self._path_and_query(url)
        full_url = f"{self._edge_url}{path_and_query}"
        if optimized:
            separator = "&" if "?" in path_and_query else "?"
            full_url = f"{full_url}{separator}{PREVIEW_QUERY_FLAG}"
        return full_url

    def _headers(self, url: str) -> dict[str, str]:
        return {
            "x-forwarded-host": self._forwarded_host,
            "x-edge-api-key": self._api_key,
            "x-edge-url": self._path_and_query(url),
        }

    async def _get(self, client: httpx.AsyncClient, url: str, *, optimized: bool) -> httpx.Response:
        fetch_type = "optimized" if optimized else "original"
        try:
            return await client.get(
                self._request_url(url, optimized),
                headers=self._headers(url),
                timeout=self._timeout_seconds,
            )
        except httpx.HTTPError as exc:
            raise PreviewFetchError(f"Failed to fetch {fetch_type} HTML: {exc}") from exc

    async def _get_html(self, client: httpx.AsyncClient, url: str, *, optimized: bool) -> str:
        response = await self._get(client, url, optimized=optimized)
        if response.is_error:
            fetch_type = "optimized" if optimized else "original"
            raise PreviewFetchError(
                f"Failed to fetch {fetch_type} HTML: HTTP {response.status_code} {response.reason_phrase}"
            )
        return response.text

    async def fetch_original(self, client: httpx.AsyncClient, url: str) -> str:
        return await self._get_html(client, url, optimized=False)

    async def fetch_optimized(
        self,
        client: httpx.AsyncClient,
        url: str,
        original_html: str,
    ) -> tuple[str, int]:
        """
        Return (html, attempts) for the optimized page.
        """

        # Warmup only primes the edge; its status is not checked.
        await self._get(client, url, optimized=True)
        await self._sleep(self._options.warmup_delay_ms / 1000)

        max_attempts = self._options.max_retries + 1
        attempt = 0
        html = original_html
        while attempt < max_attempts:
            attempt += 1
            try:
                html = await self._get_html(client, url, optimized=True)
            except PreviewFetchError as exc:
                log_event(
                    logger,
                    logging.WARNING,
                    "preview_attempt_failed",
                    url=url,
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error=str(exc),
                )
                if attempt >= max_attempts:
                    raise
                await self._sleep(self._options.retry_delay_ms / 1000)
                continue
            changed = html != original_html
            log_event(
                logger,
                logging.DEBUG,
                "preview_attempt",
                url=url,
                attempt=attempt,
                max_attempts=max_attempts,
                changed=changed,
            )
            if changed:
                break
            if attempt < max_attempts:
                await self._sleep(self._options.retry_delay_ms / 1000)
        return html, attempt

    async def fetch_preview(self, url: str) -> PreviewHtml:
        if self._http_client is not None:
            return await self._fetch_preview(self._http_client, url)
        async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
            return await self._fetch_preview(client, url)

    async def _fetch_preview(self, client: httpx.AsyncClient, url: str) -> PreviewHtml:
        original_html = await self.fetch_original(client, url)
        optimized_html, attempts = await self.fetch_optimized(client, url, original_html)
        result = PreviewHtml(
            url=url,
            original_html=original_html,
            optimized_html=optimized_html,
            attempts=attempts,
        )
        log_event(
            logger,
            logging.INFO,
            "preview_html_fetched",
            url=url,
            attempts=attempts,
            changed=result.changed,
        )
        return result
