"""
edge_config/config.py

Environment-driven settings for the edge configuration engine.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from db.config import load_env_files
from edge_config.errors import ConfigurationError

DEFAULT_SCHEMA_VERSION = "1.0"


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def parse_cdn_config(raw: str | None) -> dict[str, dict[str, Any]]:
    """
    Parse the provider -> settings JSON object used by CDN clients.

    Provider keys are lower-cased. Raises ConfigurationError when the value is
    not a JSON object of objects.
    """

    if raw is None or not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except ValueError as exc:
        raise ConfigurationError("Invalid EDGE_CDN_CONFIG: must be valid JSON") from exc
    if not isinstance(parsed, dict):
        raise ConfigurationError("Invalid EDGE_CDN_CONFIG: must be a JSON object")

    normalized: dict[str, dict[str, Any]] = {}
    for provider, provider_config in parsed.items():
        if not isinstance(provider_config, dict):
            raise ConfigurationError(
                f"Invalid EDGE_CDN_CONFIG: config for '{provider}' must be an object"
            )
        normalized[str(provider).strip().lower()] = provider_config
    return normalized


@dataclass(frozen=True)
class PreviewOptions:
    """
    Bounded wait settings for preview HTML fetching.
    """

    warmup_delay_ms: int = 2000
    max_retries: int = 3
    retry_delay_ms: int = 1000

    def __post_init__(self) -> None:
        if self.warmup_delay_ms < 0 or self.retry_delay_ms < 0:
            raise ValueError("Preview delays must be non-negative.")
        if self.max_retries < 0:
            raise ValueError("Preview max_retries must be non-negative.")


@dataclass(frozen=True)
class EdgeConfigSettings:
    """
    Runtime settings for deployment, rollback and preview.
    """

    deploy_bucket: str
    preview_bucket: str
    cdn_provider: str | None = None
    cdn_config: dict[str, dict[str, Any]] = field(default_factory=dict)
    edge_renderer_url: str | None = None
    preview: PreviewOptions = field(default_factory=PreviewOptions)
    http_timeout_seconds: float = 15.0
    extra_mappers: tuple[str, ...] = ()
    rollback_clears_force_fail: bool = True
    schema_version: str = DEFAULT_SCHEMA_VERSION


@lru_cache(maxsize=1)
def get_edge_config_settings() -> EdgeConfigSettings:
    """
    Return cached engine settings from environment variables.

    Raises ConfigurationError if EDGE_CONFIG_BUCKET is missing or
    EDGE_CDN_CONFIG is malformed.
    """

    deploy_bucket = _get_optional_str_env("EDGE_CONFIG_BUCKET")
    if deploy_bucket is None:
        raise ConfigurationError("EDGE_CONFIG_BUCKET is required")

    raw_mappers = _get_optional_str_env("EDGE_CONFIG_EXTRA_MAPPERS") or ""
    extra_mappers = tuple(item.strip() for item in raw_mappers.split(",") if item.strip())

    provider = _get_optional_str_env("EDGE_CDN_PROVIDER")
    return EdgeConfigSettings(
        deploy_bucket=deploy_bucket,
        preview_bucket=_get_optional_str_env("EDGE_CONFIG_PREVIEW_BUCKET") or f"{deploy_bucket}-preview",
        cdn_provider=provider.lower() if provider else None,
        cdn_config=parse_cdn_config(_get_optional_str_env("EDGE_CDN_CONFIG")),
        edge_renderer_url=_get_optional_str_env("EDGE_RENDERER_URL"),
        preview=PreviewOptions(
            warmup_delay_ms=max(0, _get_int_env("EDGE_PREVIEW_WARMUP_DELAY_MS", 2000)),
            max_retries=max(0, _get_int_env("EDGE_PREVIEW_MAX_RETRIES", 3)),
            retry_delay_ms=max(0, _get_int_env("EDGE_PREVIEW_RETRY_DELAY_MS", 1000)),
        ),
        http_timeout_seconds=max(1.0, _get_float_env("EDGE_HTTP_TIMEOUT_SECONDS", 15.0)),
        extra_mappers=extra_mappers,
        rollback_clears_force_fail=_get_bool_env("EDGE_CONFIG_ROLLBACK_CLEARS_FORCE_FAIL", True),
    )
