"""
Base mapper abstraction: suggestion payloads in, patches out.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Collection, Mapping, Sequence
from typing import Any

from edge_config.domain.entities import Suggestion, suggestion_data
from edge_config.domain.patch import ConfigurationDocument, Patch, TargetAudience
from edge_config.domain.results import Eligibility
from edge_config.logging_utils import log_event
from edge_config.merge import RemovalOutcome, remove_patches
from edge_config.suggestions import suggestion_timestamp_ms

logger = logging.getLogger(__name__)

INSERT_ACTIONS = ("insertAfter", "insertBefore", "appendChild")


class OpportunityMapper(ABC):
    """
    Translates one opportunity category's suggestions into patches.

    Subclasses declare OPPORTUNITY_TYPE and implement `can_deploy` and
    `build_patch`. Batch conversion never raises: ineligible suggestions and
    build failures are logged and skipped.
    """

    OPPORTUNITY_TYPE: str = ""
    PRERENDER_REQUIRED: bool = True

    def opportunity_type(self) -> str:
        return self.OPPORTUNITY_TYPE

    def requires_prerender(self) -> bool:
        return self.PRERENDER_REQUIRED

    @abstractmethod
    def can_deploy(self, suggestion: Suggestion) -> Eligibility:
        """
        Decide whether the suggestion payload has everything needed.

        Must not mutate the suggestion or touch any I/O.
        """

    @abstractmethod
    def build_patch(self, suggestion: Suggestion, opportunity_id: str) -> Patch | None:
        """Build the patch for an eligible suggestion."""

    def suggestions_to_patches(
        self,
        url_path: str,
        suggestions: Sequence[Suggestion],
        opportunity_id: str,
        existing_config: ConfigurationDocument | None = None,
    ) -> list[Patch]:
        patches: list[Patch] = []
        for suggestion in self.eligible_suggestions(suggestions):
            patch = self._build_safely(suggestion, opportunity_id)
            if patch is not None:
                patches.append(patch)
        return patches

    def eligible_suggestions(self, suggestions: Sequence[Suggestion]) -> list[Suggestion]:
        eligible: list[Suggestion] = []
        for suggestion in suggestions:
            eligibility = self.can_deploy(suggestion)
            if not eligibility.eligible:
                log_event(
                    logger,
                    logging.WARNING,
                    "suggestion_skipped",
                    opportunity_type=self.opportunity_type(),
                    suggestion_id=suggestion.id,
                    reason=eligibility.reason,
                )
                continue
            eligible.append(suggestion)
        return eligible

    def _build_safely(self, suggestion: Suggestion, opportunity_id: str) -> Patch | None:
        try:
            return self.build_patch(suggestion, opportunity_id)
        except (KeyError, TypeError, ValueError) as exc:
            log_event(
                logger,
                logging.ERROR,
                "patch_build_failed",
                opportunity_type=self.opportunity_type(),
                suggestion_id=suggestion.id,
                error=str(exc),
            )
            return None

    def rollback_patches(
        self,
        document: ConfigurationDocument,
        suggestion_ids: Collection[str],
        opportunity_id: str,
    ) -> RemovalOutcome:
        """Remove the suggestions' keyed patches from the document."""

        return remove_patches(
            document,
            opportunity_id=opportunity_id,
            suggestion_ids=suggestion_ids,
        )

    def base_patch_fields(self, suggestion: Suggestion, opportunity_id: str) -> dict[str, Any]:
        """Provenance fields shared by every suggestion-scoped patch."""

        return {
            "opportunity_id": opportunity_id,
            "suggestion_id": suggestion.id,
            "prerender_required": self.requires_prerender(),
            "last_updated": suggestion_timestamp_ms(suggestion),
        }

    @staticmethod
    def data_of(suggestion: Suggestion) -> Mapping[str, Any]:
        return suggestion_data(suggestion)

    @staticmethod
    def transform_rules_of(suggestion: Suggestion) -> Mapping[str, Any] | None:
        rules = suggestion_data(suggestion).get("transformRules")
        return rules if isinstance(rules, Mapping) else None

    @staticmethod
    def audience(value: Any) -> TargetAudience:
        try:
            return TargetAudience(value)
        except ValueError:
            return TargetAudience.AI_BOTS
