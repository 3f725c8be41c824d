"""
Fastly surrogate-key purge.

Configuration objects are served with their storage path as surrogate key,
so purging a path purges every cached copy of that object.
"""

from __future__ import annotations

from edge_config.cdn.base import CdnClient
from edge_config.domain.results import InvalidationResult

DEFAULT_API_URL = "https://api.fastly.com"


class FastlyCdnClient(CdnClient):
    PROVIDER = "fastly"
    DISPLAY_NAME = "Fastly"
    REQUIRED_FIELDS = ("serviceId", "apiToken")

    async def _submit(self, paths: list[str]) -> InvalidationResult:
        api_url = str(self.config.get("apiUrl") or DEFAULT_API_URL).rstrip("/")
        headers = {
            "Fastly-Key": str(self.config["apiToken"]),
            "Surrogate-Key": " ".join(paths),
            "Accept": "application/json",
        }
        if self.config.get("softPurge"):
            headers["Fastly-Soft-Purge"] = "1"

        response = await self._post(f"{api_url}/service/{self.config['serviceId']}/purge", headers=headers)

        # Response maps each surrogate key to its purge id.
        payload = self._json(response)
        purge_ids = [str(value) for value in payload.values()] if isinstance(payload, dict) else []
        return InvalidationResult(
            status="success",
            provider=self.PROVIDER,
            paths=tuple(paths),
            invalidation_id=",".join(purge_ids) or None,
            estimated_seconds=1,
        )
