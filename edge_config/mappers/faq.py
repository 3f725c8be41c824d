"""
FAQ sections: one shared heading followed by one block per question.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping, Sequence
from typing import Any

from edge_config.domain.entities import Suggestion
from edge_config.domain.patch import ConfigurationDocument, Patch, TargetAudience, ValueFormat
from edge_config.domain.results import Eligibility
from edge_config.hast import element, markdown_to_hast, text_node
from edge_config.mappers.base import INSERT_ACTIONS, OpportunityMapper
from edge_config.merge import RemovalOutcome, remove_patches
from edge_config.suggestions import has_text, is_valid_url, suggestion_timestamp_ms

logger = logging.getLogger(__name__)

DEFAULT_HEADING_TEXT = "FAQs"


class FaqMapper(OpportunityMapper):
    """
    The heading patch carries no suggestion id; it is emitted only when the
    stored document does not already hold one for the opportunity and
    selector, and it is dropped on rollback once no FAQ entry remains.
    """

    OPPORTUNITY_TYPE = "faq"

    def can_deploy(self, suggestion: Suggestion) -> Eligibility:
        data = self.data_of(suggestion)
        if data.get("shouldOptimize") is not True:
            return Eligibility.rejected("shouldOptimize flag is not true")

        item = data.get("item")
        if not isinstance(item, Mapping) or not item.get("question") or not item.get("answer"):
            return Eligibility.rejected("item.question and item.answer are required")

        rules = self.transform_rules_of(suggestion)
        if rules is None:
            return Eligibility.rejected("transformRules is required")
        if not has_text(rules.get("selector")):
            return Eligibility.rejected("transformRules.selector is required")
        if rules.get("action") not in INSERT_ACTIONS:
            return Eligibility.rejected(
                "transformRules.action must be insertAfter, insertBefore, or appendChild"
            )

        url = data.get("url")
        if not is_valid_url(url):
            return Eligibility.rejected(f"url {url} is not a valid URL")
        return Eligibility.ok()

    def build_item_tree(self, suggestion: Suggestion) -> dict[str, Any]:
        item = self.data_of(suggestion)["item"]
        answer = markdown_to_hast(str(item["answer"]))
        return element(
            "div",
            [element("h3", [text_node(str(item["question"]))]), *answer["children"]],
        )

    def build_patch(self, suggestion: Suggestion, opportunity_id: str) -> Patch:
        rules = self.transform_rules_of(suggestion) or {}
        return self._item_patch(suggestion, opportunity_id, rules)

    def _item_patch(
        self,
        suggestion: Suggestion,
        opportunity_id: str,
        rules: Mapping[str, Any],
    ) -> Patch:
        return Patch(
            **self.base_patch_fields(suggestion, opportunity_id),
            operation=rules["action"],
            selector=rules["selector"],
            value=self.build_item_tree(suggestion),
            value_format=ValueFormat.TREE,
            target_audience=TargetAudience.AI_BOTS,
        )

    def suggestions_to_patches(
        self,
        url_path: str,
        suggestions: Sequence[Suggestion],
        opportunity_id: str,
        existing_config: ConfigurationDocument | None = None,
    ) -> list[Patch]:
        eligible = self.eligible_suggestions(suggestions)
        if not eligible:
            logger.warning("No eligible FAQ suggestions to deploy for %s", url_path)
            return []

        # Placement and heading text come from the first eligible entry.
        first_data = self.data_of(eligible[0])
        rules = self.transform_rules_of(eligible[0]) or {}
        heading_text = first_data.get("headingText") or DEFAULT_HEADING_TEXT

        item_patches: list[Patch] = []
        for suggestion in eligible:
            try:
                item_patches.append(self._item_patch(suggestion, opportunity_id, rules))
            except (KeyError, TypeError, ValueError) as exc:
                logger.error("Failed to build FAQ tree for suggestion %s: %s", suggestion.id, exc)
        if not item_patches:
            return []

        needs_heading = existing_config is None or not existing_config.has_structural_patch(
            opportunity_id=opportunity_id,
            selector=rules["selector"],
        )
        if not needs_heading:
            logger.debug("FAQ heading already deployed for %s", url_path)
            return item_patches

        heading = Patch(
            operation=rules["action"],
            selector=rules["selector"],
            value=element("h2", [text_node(str(heading_text))]),
            value_format=ValueFormat.TREE,
            target_audience=TargetAudience.AI_BOTS,
            opportunity_id=opportunity_id,
            prerender_required=self.requires_prerender(),
            last_updated=max(suggestion_timestamp_ms(suggestion) for suggestion in eligible),
        )
        return [heading, *item_patches]

    def rollback_patches(
        self,
        document: ConfigurationDocument,
        suggestion_ids: Collection[str],
        opportunity_id: str,
    ) -> RemovalOutcome:
        removing = set(suggestion_ids)
        remaining = [
            patch
            for patch in document.patches
            if patch.opportunity_id == opportunity_id
            and patch.suggestion_id is not None
            and patch.suggestion_id not in removing
        ]
        if remaining:
            logger.debug("%s FAQ entries remain, keeping heading", len(remaining))
        return remove_patches(
            document,
            opportunity_id=opportunity_id,
            suggestion_ids=removing,
            drop_structural=not remaining,
        )
