"""
Generic autofix edits produced by the content optimizer.

Only the patch-relevant keys are read; UI keys such as `contentBefore` or
`rationale` stay on the suggestion.
"""

from __future__ import annotations

from edge_config.domain.entities import Suggestion
from edge_config.domain.patch import Patch, TargetAudience, ValueFormat
from edge_config.domain.results import Eligibility
from edge_config.mappers.base import OpportunityMapper
from edge_config.suggestions import has_text

GENERIC_ACTIONS = ("insertBefore", "insertAfter", "replace")


class GenericAutofixMapper(OpportunityMapper):
    OPPORTUNITY_TYPE = "generic-autofix-edge"

    def can_deploy(self, suggestion: Suggestion) -> Eligibility:
        data = self.data_of(suggestion)
        rules = self.transform_rules_of(suggestion)
        if rules is None:
            return Eligibility.rejected("transformRules is required")
        if not has_text(rules.get("selector")):
            return Eligibility.rejected("transformRules.selector is required")
        if not data.get("patchValue"):
            return Eligibility.rejected("patchValue is required")

        action = rules.get("action")
        if not has_text(action):
            return Eligibility.rejected("transformRules.action is required")
        if action not in GENERIC_ACTIONS:
            return Eligibility.rejected(
                f"transformRules.action must be one of: {', '.join(GENERIC_ACTIONS)}. Got: {action}"
            )
        if not has_text(data.get("url")):
            return Eligibility.rejected("url is required")
        return Eligibility.ok()

    def build_patch(self, suggestion: Suggestion, opportunity_id: str) -> Patch:
        data = self.data_of(suggestion)
        rules = self.transform_rules_of(suggestion) or {}
        value_format = ValueFormat.TREE if data.get("format") == ValueFormat.TREE.value else ValueFormat.TEXT
        value = data["patchValue"]
        if value_format is ValueFormat.TEXT:
            value = str(value)
        tag = data.get("tag")
        return Patch(
            **self.base_patch_fields(suggestion, opportunity_id),
            operation=rules["action"],
            selector=rules["selector"],
            value=value,
            value_format=value_format,
            tag=tag if has_text(tag) else None,
            target_audience=TargetAudience.AI_BOTS,
        )
