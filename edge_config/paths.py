"""
edge_config/paths.py

Storage key derivation for per-URL and domain configuration documents.
"""

from __future__ import annotations

import base64
from urllib.parse import urlsplit

from edge_config.errors import InvalidRequestError

CONFIG_ROOT = "opportunities"
PREVIEW_PREFIX = "preview"
DOMAIN_CONFIG_NAME = "config"


def normalize_path(path: str) -> str:
    """
    Leading slash always, trailing slash only for the root path.
    """

    normalized = path if path.startswith("/") else f"/{path}"
    if len(normalized) > 1 and normalized.endswith("/"):
        normalized = normalized.rstrip("/") or "/"
    return normalized


def host_name(url: str) -> str:
    """
    Host of an absolute URL with any leading `www.` removed.
    """

    try:
        hostname = urlsplit(url).hostname
    except ValueError as exc:
        raise InvalidRequestError(f"Error extracting host name from {url}") from exc
    if not hostname:
        raise InvalidRequestError(f"Error extracting host name from {url}")
    return hostname[4:] if hostname.startswith("www.") else hostname


def base64url_encode(value: str) -> str:
    encoded = base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii")
    return encoded.rstrip("=")


def _prefixed(key: str, preview: bool) -> str:
    return f"{PREVIEW_PREFIX}/{key}" if preview else key


def config_storage_key(url: str, preview: bool = False) -> str:
    """
    Key of the per-URL document, e.g. `opportunities/example.com/L3BhZ2Ux`.
    """

    host = host_name(url)
    path = normalize_path(urlsplit(url).path or "/")
    return _prefixed(f"{CONFIG_ROOT}/{host}/{base64url_encode(path)}", preview)


def domain_config_storage_key(url: str, preview: bool = False) -> str:
    host = host_name(url)
    return _prefixed(f"{CONFIG_ROOT}/{host}/{DOMAIN_CONFIG_NAME}", preview)
