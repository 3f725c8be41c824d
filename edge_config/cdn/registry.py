"""
CDN client class registry and factory.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from edge_config.cdn.base import CdnClient
from edge_config.cdn.cloudflare import CloudflareCdnClient
from edge_config.cdn.fastly import FastlyCdnClient
from edge_config.suggestions import has_text

logger = logging.getLogger(__name__)


class CdnClientRegistry:
    """
    Provider id -> client class lookup. Provider ids are case-insensitive.
    """

    def __init__(
        self,
        cdn_config: Mapping[str, Mapping[str, Any]] | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 15.0,
        registrations: Mapping[str, type[CdnClient]] | None = None,
    ) -> None:
        builtins: dict[str, type[CdnClient]] = {
            "cloudflare": CloudflareCdnClient,
            "fastly": FastlyCdnClient,
        }
        for provider_id, client_class in (registrations or {}).items():
            builtins[provider_id.strip().lower()] = client_class
        self._registrations = builtins
        self._cdn_config = {key.strip().lower(): dict(value) for key, value in (cdn_config or {}).items()}
        self._http_client = http_client
        self._timeout_seconds = timeout_seconds

    def register(self, provider_id: str, client_class: type[CdnClient]) -> None:
        self._registrations[provider_id.strip().lower()] = client_class

    def is_supported(self, provider_id: str | None) -> bool:
        return has_text(provider_id) and provider_id.strip().lower() in self._registrations

    def supported_providers(self) -> list[str]:
        return sorted(self._registrations)

    def get(self, provider_id: str | None, config: Mapping[str, Any] | None = None) -> CdnClient | None:
        """
        Build a client for the provider, or return None when it cannot be built.
        """

        if not has_text(provider_id):
            logger.warning("No CDN provider given")
            return None
        key = provider_id.strip().lower()
        client_class = self._registrations.get(key)
        if client_class is None:
            logger.warning(
                "Unsupported CDN provider: %s. Supported providers: %s",
                provider_id,
                ", ".join(self.supported_providers()),
            )
            return None

        provider_config = config if config is not None else self._cdn_config.get(key, {})
        try:
            return client_class(
                provider_config,
                http_client=self._http_client,
                timeout_seconds=self._timeout_seconds,
            )
        except (TypeError, ValueError) as exc:
            logger.error("Failed to create CDN client for %s: %s", key, exc)
            return None
