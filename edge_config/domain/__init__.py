"""Domain models for the edge configuration engine."""

from edge_config.domain.entities import (
    OpportunityRecord,
    SiteConfigRecord,
    SiteRecord,
    SuggestionRecord,
)
from edge_config.domain.patch import (
    ConfigurationDocument,
    DomainConfiguration,
    Patch,
    PatchOperation,
    TargetAudience,
    ValueFormat,
)
from edge_config.domain.results import (
    DeploymentResult,
    Eligibility,
    FailedSuggestion,
    InvalidationResult,
    PreviewHtml,
    PreviewResult,
    RollbackResult,
)

__all__ = [
    "ConfigurationDocument",
    "DeploymentResult",
    "DomainConfiguration",
    "Eligibility",
    "FailedSuggestion",
    "InvalidationResult",
    "OpportunityRecord",
    "Patch",
    "PatchOperation",
    "PreviewHtml",
    "PreviewResult",
    "RollbackResult",
    "SiteConfigRecord",
    "SiteRecord",
    "SuggestionRecord",
    "TargetAudience",
    "ValueFormat",
]
