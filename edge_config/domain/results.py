"""
edge_config/domain/results.py

Transient result records returned by deploy, rollback and preview.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from edge_config.domain.entities import Suggestion
from edge_config.domain.patch import ConfigurationDocument


@dataclass(frozen=True)
class Eligibility:
    """Outcome of a mapper eligibility check."""

    eligible: bool
    reason: str | None = None

    @classmethod
    def ok(cls) -> "Eligibility":
        return cls(eligible=True)

    @classmethod
    def rejected(cls, reason: str) -> "Eligibility":
        return cls(eligible=False, reason=reason)


@dataclass(frozen=True)
class InvalidationResult:
    """
    Outcome of one CDN invalidation group.

    `status` is `success`, `skipped` or `error`.
    """

    status: str
    provider: str
    paths: tuple[str, ...] = ()
    invalidation_id: str | None = None
    estimated_seconds: int | None = None
    message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "provider": self.provider,
            "paths": list(self.paths),
            "invalidationId": self.invalidation_id,
            "estimatedSeconds": self.estimated_seconds,
            "message": self.message,
        }


@dataclass(frozen=True)
class FailedSuggestion:
    suggestion: Suggestion
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"suggestionId": self.suggestion.id, "reason": self.reason}


@dataclass
class DeploymentResult:
    """
    Storage paths written, one invalidation entry per group, and the
    succeeded/failed partition of the input suggestions.
    """

    storage_paths: list[str] = field(default_factory=list)
    cdn_invalidations: list[InvalidationResult | None] = field(default_factory=list)
    succeeded_suggestions: list[Suggestion] = field(default_factory=list)
    failed_suggestions: list[FailedSuggestion] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "storagePaths": list(self.storage_paths),
            "cdnInvalidations": [
                item.to_dict() if item is not None else None for item in self.cdn_invalidations
            ],
            "succeededSuggestions": [suggestion.id for suggestion in self.succeeded_suggestions],
            "failedSuggestions": [item.to_dict() for item in self.failed_suggestions],
        }


@dataclass
class RollbackResult(DeploymentResult):
    removed_patches_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["removedPatchesCount"] = self.removed_patches_count
        return payload


@dataclass(frozen=True)
class PreviewHtml:
    url: str
    original_html: str
    optimized_html: str
    attempts: int

    @property
    def changed(self) -> bool:
        return self.original_html != self.optimized_html

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "originalHtml": self.original_html,
            "optimizedHtml": self.optimized_html,
            "attempts": self.attempts,
            "changed": self.changed,
        }


@dataclass
class PreviewResult(DeploymentResult):
    config: ConfigurationDocument | None = None
    html: PreviewHtml | None = None

    @property
    def storage_path(self) -> str | None:
        return self.storage_paths[0] if self.storage_paths else None

    @property
    def cdn_invalidation(self) -> InvalidationResult | None:
        return self.cdn_invalidations[0] if self.cdn_invalidations else None

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["config"] = self.config.to_wire() if self.config is not None else None
        payload["html"] = self.html.to_dict() if self.html is not None else None
        return payload
