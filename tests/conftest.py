"""
Shared fixtures for the edge configuration tests.
"""

from __future__ import annotations

import pytest

from builders import RecordingCdnClient
from edge_config.domain.entities import OpportunityRecord, SiteConfigRecord, SiteRecord


@pytest.fixture()
def site() -> SiteRecord:
    return SiteRecord(
        id="site-1",
        base_url="https://example.com",
        config=SiteConfigRecord(edge_api_key="edge-key", edge_forwarded_host="example.com"),
    )


@pytest.fixture()
def recording_cdn() -> type[RecordingCdnClient]:
    RecordingCdnClient.calls = []
    return RecordingCdnClient


@pytest.fixture()
def readability_opportunity() -> OpportunityRecord:
    return OpportunityRecord(id="opp-1", type="readability")
