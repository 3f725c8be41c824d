"""
Exceptions raised by the edge configuration engine.
"""

from __future__ import annotations

from collections.abc import Sequence


class EdgeConfigError(Exception):
    """Base exception for edge configuration failures."""


class UnsupportedOpportunityTypeError(EdgeConfigError):
    """
    Raised when no mapper is registered for an opportunity type.
    """

    def __init__(self, opportunity_type: str, supported: Sequence[str]) -> None:
        supported_csv = ", ".join(supported) if supported else "<none>"
        super().__init__(
            f"No mapper found for opportunity type: {opportunity_type}. "
            f"Supported types: {supported_csv}"
        )
        self.opportunity_type = opportunity_type
        self.supported = tuple(supported)


class InvalidRequestError(EdgeConfigError, ValueError):
    """Raised when caller input is rejected before any I/O happens."""


class MixedPreviewUrlError(InvalidRequestError):
    """
    Raised when a preview batch spans more than one URL.
    """

    def __init__(self, urls: Sequence[str]) -> None:
        super().__init__(
            "All suggestions in a preview must target the same URL. "
            f"Found: {', '.join(sorted(urls))}"
        )
        self.urls = tuple(sorted(urls))


class ConfigurationError(EdgeConfigError):
    """Raised when engine or site configuration is missing or malformed."""


class DocumentDecodeError(EdgeConfigError):
    """Raised when a stored document cannot be parsed."""


class CdnInvalidationError(EdgeConfigError):
    """Raised by CDN clients when the provider rejects an invalidation."""


class PreviewFetchError(EdgeConfigError):
    """Raised when preview HTML cannot be fetched from the edge renderer."""
