"""
Readability rewrites: replace a hard-to-read text block with simpler text.
"""

from __future__ import annotations

from edge_config.domain.entities import Suggestion
from edge_config.domain.patch import Patch, PatchOperation, ValueFormat
from edge_config.domain.results import Eligibility
from edge_config.mappers.base import OpportunityMapper
from edge_config.suggestions import has_text, is_valid_url


class ReadabilityMapper(OpportunityMapper):
    OPPORTUNITY_TYPE = "readability"

    def can_deploy(self, suggestion: Suggestion) -> Eligibility:
        rules = self.transform_rules_of(suggestion)
        if rules is None:
            return Eligibility.rejected("transformRules is required")
        if not has_text(rules.get("selector")):
            return Eligibility.rejected("transformRules.selector is required")
        if rules.get("op") != PatchOperation.REPLACE.value:
            return Eligibility.rejected('transformRules.op must be "replace" for readability suggestions')
        if not rules.get("value"):
            return Eligibility.rejected("transformRules.value is required")

        url = self.data_of(suggestion).get("url")
        if not is_valid_url(url):
            return Eligibility.rejected(f"url {url} is not a valid URL")
        return Eligibility.ok()

    def build_patch(self, suggestion: Suggestion, opportunity_id: str) -> Patch:
        data = self.data_of(suggestion)
        rules = self.transform_rules_of(suggestion) or {}
        preview = data.get("textPreview")
        return Patch(
            **self.base_patch_fields(suggestion, opportunity_id),
            operation=PatchOperation.REPLACE,
            selector=rules["selector"],
            value=str(rules["value"]),
            value_format=ValueFormat.TEXT,
            previous_value=str(preview) if preview is not None else None,
            target_audience=self.audience(rules.get("target")),
        )
