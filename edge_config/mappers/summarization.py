"""
Content summaries: a markdown summary inserted next to the page content.
"""

from __future__ import annotations

from edge_config.domain.entities import Suggestion
from edge_config.domain.patch import Patch, TargetAudience, ValueFormat
from edge_config.domain.results import Eligibility
from edge_config.hast import markdown_to_hast
from edge_config.mappers.base import INSERT_ACTIONS, OpportunityMapper
from edge_config.suggestions import has_text


class SummarizationMapper(OpportunityMapper):
    OPPORTUNITY_TYPE = "summarization"

    def can_deploy(self, suggestion: Suggestion) -> Eligibility:
        if not has_text(self.data_of(suggestion).get("summarizationText")):
            return Eligibility.rejected("summarizationText is required")
        rules = self.transform_rules_of(suggestion)
        if rules is None:
            return Eligibility.rejected("transformRules is required")
        if rules.get("action") not in INSERT_ACTIONS:
            return Eligibility.rejected(
                "transformRules.action must be insertAfter, insertBefore, or appendChild"
            )
        if not has_text(rules.get("selector")):
            return Eligibility.rejected("transformRules.selector is required")
        return Eligibility.ok()

    def build_patch(self, suggestion: Suggestion, opportunity_id: str) -> Patch:
        rules = self.transform_rules_of(suggestion) or {}
        return Patch(
            **self.base_patch_fields(suggestion, opportunity_id),
            operation=rules["action"],
            selector=rules["selector"],
            value=markdown_to_hast(self.data_of(suggestion)["summarizationText"]),
            value_format=ValueFormat.TREE,
            target_audience=TargetAudience.AI_BOTS,
        )
