"""
Cloudflare zone purge by URL.
"""

from __future__ import annotations

from edge_config.cdn.base import CdnClient
from edge_config.domain.results import InvalidationResult
from edge_config.errors import CdnInvalidationError

DEFAULT_API_URL = "https://api.cloudflare.com/client/v4"


class CloudflareCdnClient(CdnClient):
    """
    Config keys: `zoneId`, `apiToken`, `baseUrl` (origin the config paths are
    served from) and optional `apiUrl`.
    """

    PROVIDER = "cloudflare"
    DISPLAY_NAME = "Cloudflare"
    REQUIRED_FIELDS = ("zoneId", "apiToken", "baseUrl")

    async def _submit(self, paths: list[str]) -> InvalidationResult:
        api_url = str(self.config.get("apiUrl") or DEFAULT_API_URL).rstrip("/")
        base_url = str(self.config["baseUrl"]).rstrip("/")
        response = await self._post(
            f"{api_url}/zones/{self.config['zoneId']}/purge_cache",
            headers={"Authorization": f"Bearer {self.config['apiToken']}"},
            json_body={"files": [f"{base_url}{path}" for path in paths]},
        )

        payload = self._json(response) or {}
        if not payload.get("success", False):
            errors = payload.get("errors") or []
            messages = [
                str(error.get("message", error)) if isinstance(error, dict) else str(error)
                for error in errors
                if error
            ]
            detail = "; ".join(messages) or "unknown error"
            raise CdnInvalidationError(f"cloudflare rejected purge: {detail}")

        result = payload.get("result") or {}
        return InvalidationResult(
            status="success",
            provider=self.PROVIDER,
            paths=tuple(paths),
            invalidation_id=result.get("id"),
        )
