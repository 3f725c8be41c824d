"""
CDN client exports.
"""

from edge_config.cdn.base import CdnClient, normalize_invalidation_paths
from edge_config.cdn.cloudflare import CloudflareCdnClient
from edge_config.cdn.fastly import FastlyCdnClient
from edge_config.cdn.registry import CdnClientRegistry

__all__ = [
    "CdnClient",
    "CdnClientRegistry",
    "CloudflareCdnClient",
    "FastlyCdnClient",
    "normalize_invalidation_paths",
]
