"""
CDN client abstraction and shared HTTP mechanics.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from edge_config.domain.results import InvalidationResult
from edge_config.errors import CdnInvalidationError, ConfigurationError
from edge_config.logging_utils import log_event
from edge_config.suggestions import has_text

logger = logging.getLogger(__name__)


def normalize_invalidation_paths(paths: Sequence[str]) -> list[str]:
    """Leading slash on every path; blanks and duplicates dropped, order kept."""

    normalized: list[str] = []
    for path in paths:
        if not has_text(path):
            continue
        candidate = path.strip()
        candidate = candidate if candidate.startswith("/") else f"/{candidate}"
        if candidate not in normalized:
            normalized.append(candidate)
    return normalized


class CdnClient(ABC):
    """
    Cache invalidation against one CDN provider.

    `validate_config` reports misconfiguration by returning False; provider and
    transport failures during `invalidate_cache` raise CdnInvalidationError.
    """

    PROVIDER: str = ""
    DISPLAY_NAME: str = ""
    REQUIRED_FIELDS: tuple[str, ...] = ()

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 15.0,
    ) -> None:
        self.config: dict[str, Any] = dict(config or {})
        self._http_client = http_client
        self._timeout_seconds = timeout_seconds

    def provider_name(self) -> str:
        return self.PROVIDER

    def missing_fields(self) -> list[str]:
        return [name for name in self.REQUIRED_FIELDS if not has_text(self.config.get(name))]

    def validate_config(self) -> bool:
        missing = self.missing_fields()
        if missing:
            logger.error(
                "%s CDN config missing required fields: %s",
                self.DISPLAY_NAME or self.PROVIDER,
                ", ".join(missing),
            )
            return False
        return True

    async def invalidate_cache(self, paths: Sequence[str]) -> InvalidationResult:
        normalized = normalize_invalidation_paths(paths)
        if not normalized:
            return InvalidationResult(
                status="skipped",
                provider=self.provider_name(),
                message="No paths to invalidate",
            )
        if not self.validate_config():
            raise ConfigurationError(
                f"{self.provider_name()} CDN config is incomplete: {', '.join(self.missing_fields())}"
            )

        started = time.monotonic()
        result = await self._submit(normalized)
        log_event(
            logger,
            logging.INFO,
            "cdn_invalidation_submitted",
            provider=self.provider_name(),
            paths=len(normalized),
            invalidation_id=result.invalidation_id,
            elapsed_ms=int((time.monotonic() - started) * 1000),
        )
        return result

    @abstractmethod
    async def _submit(self, paths: list[str]) -> InvalidationResult:
        """Send one batched invalidation request for the normalized paths."""

    async def _post(
        self,
        url: str,
        *,
        headers: Mapping[str, str],
        json_body: Any | None = None,
    ) -> httpx.Response:
        """
        POST to the provider API and return the 2xx response.
        """

        try:
            if self._http_client is not None:
                response = await self._http_client.post(
                    url, headers=dict(headers), json=json_body, timeout=self._timeout_seconds
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                    response = await client.post(url, headers=dict(headers), json=json_body)
        except httpx.HTTPError as exc:
            raise CdnInvalidationError(f"{self.provider_name()} request failed: {exc}") from exc

        if response.is_error:
            raise CdnInvalidationError(
                f"{self.provider_name()} invalidation failed with HTTP {response.status_code}: "
                f"{response.text[:500]}"
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None
