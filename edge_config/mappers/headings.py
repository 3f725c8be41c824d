"""
Heading fixes: empty headings, missing H1 and over-long H1 text.
"""

from __future__ import annotations

from edge_config.domain.entities import Suggestion
from edge_config.domain.patch import Patch, TargetAudience, ValueFormat
from edge_config.domain.results import Eligibility
from edge_config.mappers.base import OpportunityMapper
from edge_config.suggestions import has_text

MISSING_H1 = "heading-missing-h1"
DEPLOYABLE_CHECK_TYPES = ("heading-empty", MISSING_H1, "heading-h1-length")


class HeadingsMapper(OpportunityMapper):
    OPPORTUNITY_TYPE = "headings"

    def can_deploy(self, suggestion: Suggestion) -> Eligibility:
        data = self.data_of(suggestion)
        check_type = data.get("checkType")
        if check_type not in DEPLOYABLE_CHECK_TYPES:
            return Eligibility.rejected(
                f"Only {', '.join(DEPLOYABLE_CHECK_TYPES)} can be deployed. "
                f"This suggestion has checkType: {check_type}"
            )
        if not data.get("recommendedAction"):
            return Eligibility.rejected("recommendedAction is required")

        rules = self.transform_rules_of(suggestion) or {}
        if not has_text(rules.get("selector")):
            return Eligibility.rejected("transformRules.selector is required")

        action = rules.get("action")
        if check_type == MISSING_H1:
            if action not in ("insertBefore", "insertAfter"):
                return Eligibility.rejected(
                    "transformRules.action must be insertBefore or insertAfter for heading-missing-h1"
                )
            if not has_text(rules.get("tag")):
                return Eligibility.rejected("transformRules.tag is required for heading-missing-h1")
        elif action != "replace":
            return Eligibility.rejected(f"transformRules.action must be replace for {check_type}")

        return Eligibility.ok()

    def build_patch(self, suggestion: Suggestion, opportunity_id: str) -> Patch:
        data = self.data_of(suggestion)
        rules = self.transform_rules_of(suggestion) or {}
        current_value = data.get("currentValue")
        return Patch(
            **self.base_patch_fields(suggestion, opportunity_id),
            operation=rules["action"],
            selector=rules["selector"],
            value=str(data["recommendedAction"]),
            value_format=ValueFormat.TEXT,
            previous_value=str(current_value) if current_value is not None else None,
            tag=rules.get("tag") if data.get("checkType") == MISSING_H1 else None,
            target_audience=TargetAudience.AI_BOTS,
        )
