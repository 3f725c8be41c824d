"""
edge_config/payload.py

JSON request payloads for the command-line entry point.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from edge_config.config import PreviewOptions
from edge_config.domain.entities import OpportunityRecord, SiteConfigRecord, SiteRecord, SuggestionRecord


class _PayloadModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SiteConfigPayload(_PayloadModel):
    edge_api_key: str | None = Field(default=None, alias="edgeApiKey")
    edge_forwarded_host: str | None = Field(default=None, alias="edgeForwardedHost")
    override_base_url: str | None = Field(default=None, alias="overrideBaseUrl")


class SitePayload(_PayloadModel):
    id: str
    base_url: str = Field(alias="baseUrl")
    config: SiteConfigPayload | None = None

    def to_record(self) -> SiteRecord:
        config = None
        if self.config is not None:
            config = SiteConfigRecord(
                edge_api_key=self.config.edge_api_key,
                edge_forwarded_host=self.config.edge_forwarded_host,
                override_base_url=self.config.override_base_url,
            )
        return SiteRecord(id=self.id, base_url=self.base_url, config=config)


class OpportunityPayload(_PayloadModel):
    id: str
    type: str

    def to_record(self) -> OpportunityRecord:
        return OpportunityRecord(id=self.id, type=self.type)


class SuggestionPayload(_PayloadModel):
    id: str
    data: dict[str, Any] = Field(default_factory=dict)
    updated_at: str | None = Field(default=None, alias="updatedAt")

    def to_record(self) -> SuggestionRecord:
        return SuggestionRecord(id=self.id, data=self.data, updated_at=self.updated_at)


class PreviewOptionsPayload(_PayloadModel):
    warmup_delay_ms: int | None = Field(default=None, alias="warmupDelayMs", ge=0)
    max_retries: int | None = Field(default=None, alias="maxRetries", ge=0)
    retry_delay_ms: int | None = Field(default=None, alias="retryDelayMs", ge=0)

    def merged_with(self, defaults: PreviewOptions) -> PreviewOptions:
        return PreviewOptions(
            warmup_delay_ms=defaults.warmup_delay_ms if self.warmup_delay_ms is None else self.warmup_delay_ms,
            max_retries=defaults.max_retries if self.max_retries is None else self.max_retries,
            retry_delay_ms=defaults.retry_delay_ms if self.retry_delay_ms is None else self.retry_delay_ms,
        )


class OperationPayload(_PayloadModel):
    """
    One deploy/rollback/preview request: site, opportunity and suggestions.
    """

    site: SitePayload
    opportunity: OpportunityPayload
    suggestions: list[SuggestionPayload] = Field(default_factory=list)
    options: PreviewOptionsPayload | None = None

    def suggestion_records(self) -> list[SuggestionRecord]:
        return [suggestion.to_record() for suggestion in self.suggestions]
