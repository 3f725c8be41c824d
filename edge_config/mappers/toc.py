"""
Table of contents insertion from a pre-built HAST tree.
"""

from __future__ import annotations

from collections.abc import Mapping

from edge_config.domain.entities import Suggestion
from edge_config.domain.patch import Patch, TargetAudience, ValueFormat
from edge_config.domain.results import Eligibility
from edge_config.mappers.base import OpportunityMapper
from edge_config.suggestions import has_text

TOC_ACTIONS = ("insertBefore", "insertAfter")


class TableOfContentsMapper(OpportunityMapper):
    OPPORTUNITY_TYPE = "toc"

    def can_deploy(self, suggestion: Suggestion) -> Eligibility:
        data = self.data_of(suggestion)
        check_type = data.get("checkType")
        if check_type != "toc":
            return Eligibility.rejected(
                f"Only toc checkType can be deployed. This suggestion has checkType: {check_type}"
            )
        rules = self.transform_rules_of(suggestion) or {}
        if not has_text(rules.get("selector")):
            return Eligibility.rejected("transformRules.selector is required")
        if not rules.get("value"):
            return Eligibility.rejected("transformRules.value is required")
        if rules.get("valueFormat") != ValueFormat.TREE.value:
            return Eligibility.rejected("transformRules.valueFormat must be hast for toc")
        if rules.get("action") not in TOC_ACTIONS:
            return Eligibility.rejected(
                f"transformRules.action must be one of {', '.join(TOC_ACTIONS)} for toc"
            )
        return Eligibility.ok()

    def build_patch(self, suggestion: Suggestion, opportunity_id: str) -> Patch:
        rules = self.transform_rules_of(suggestion) or {}
        value = rules["value"]
        if not isinstance(value, Mapping):
            raise TypeError("toc value must be a HAST object")
        return Patch(
            **self.base_patch_fields(suggestion, opportunity_id),
            operation=rules["action"],
            selector=rules["selector"],
            value=dict(value),
            value_format=ValueFormat.TREE,
            target_audience=TargetAudience.AI_BOTS,
        )
