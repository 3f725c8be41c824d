"""
tests/test_mappers.py

Eligibility rules and patch construction for the per-type mappers.

Coverage
--------
- headings: check types, actions, missing-H1 tag
- readability: replace-only, text preview as previous value
- summarization: markdown rendered to a HAST tree
- toc: HAST value passthrough
- generic-autofix-edge: text and HAST formats
- batch conversion skips ineligible and broken suggestions
- repeated eligibility checks agree and do not touch the payload
"""

from __future__ import annotations

import copy

import pytest

from builders import UPDATED_AT, faq_suggestion, generic_suggestion, readability_suggestion
from edge_config.domain.entities import SuggestionRecord
from edge_config.domain.patch import PatchOperation, TargetAudience, ValueFormat
from edge_config.mappers.faq import FaqMapper
from edge_config.mappers.generic import GenericAutofixMapper
from edge_config.mappers.headings import HeadingsMapper
from edge_config.mappers.readability import ReadabilityMapper
from edge_config.mappers.summarization import SummarizationMapper
from edge_config.mappers.toc import TableOfContentsMapper
from edge_config.suggestions import suggestion_timestamp_ms


def _suggestion(data: dict, suggestion_id: str = "sugg-1") -> SuggestionRecord:
    return SuggestionRecord(id=suggestion_id, data=data, updated_at=UPDATED_AT)


# ---------------------------------------------------------------------------
# headings
# ---------------------------------------------------------------------------


class TestHeadingsMapper:
    @pytest.fixture()
    def mapper(self) -> HeadingsMapper:
        return HeadingsMapper()

    def test_empty_heading_replace(self, mapper: HeadingsMapper) -> None:
        suggestion = _suggestion(
            {
                "checkType": "heading-empty",
                "recommendedAction": "Our pricing",
                "currentValue": "",
                "transformRules": {"action": "replace", "selector": "h2:nth-of-type(1)"},
            }
        )
        assert mapper.can_deploy(suggestion).eligible

        patch = mapper.build_patch(suggestion, "opp-1")
        assert patch.operation is PatchOperation.REPLACE
        assert patch.value == "Our pricing"
        assert patch.previous_value == ""
        assert patch.tag is None

    def test_missing_h1_keeps_tag(self, mapper: HeadingsMapper) -> None:
        suggestion = _suggestion(
            {
                "checkType": "heading-missing-h1",
                "recommendedAction": "Welcome",
                "transformRules": {"action": "insertBefore", "selector": "main", "tag": "h1"},
            }
        )
        assert mapper.can_deploy(suggestion).eligible
        patch = mapper.build_patch(suggestion, "opp-1")
        assert patch.operation is PatchOperation.INSERT_BEFORE
        assert patch.tag == "h1"

    def test_missing_h1_requires_insert_action(self, mapper: HeadingsMapper) -> None:
        suggestion = _suggestion(
            {
                "checkType": "heading-missing-h1",
                "recommendedAction": "Welcome",
                "transformRules": {"action": "replace", "selector": "main", "tag": "h1"},
            }
        )
        reason = mapper.can_deploy(suggestion).reason
        assert reason == "transformRules.action must be insertBefore or insertAfter for heading-missing-h1"

    def test_missing_h1_requires_tag(self, mapper: HeadingsMapper) -> None:
        suggestion = _suggestion(
            {
                "checkType": "heading-missing-h1",
                "recommendedAction": "Welcome",
                "transformRules": {"action": "insertAfter", "selector": "main"},
            }
        )
        assert mapper.can_deploy(suggestion).reason == "transformRules.tag is required for heading-missing-h1"

    def test_rejects_unknown_check_type(self, mapper: HeadingsMapper) -> None:
        eligibility = mapper.can_deploy(_suggestion({"checkType": "heading-order-invalid"}))
        assert not eligibility.eligible
        assert "heading-order-invalid" in eligibility.reason

    def test_h1_length_requires_replace(self, mapper: HeadingsMapper) -> None:
        suggestion = _suggestion(
            {
                "checkType": "heading-h1-length",
                "recommendedAction": "Shorter",
                "transformRules": {"action": "insertAfter", "selector": "h1"},
            }
        )
        assert mapper.can_deploy(suggestion).reason == "transformRules.action must be replace for heading-h1-length"


# ---------------------------------------------------------------------------
# readability
# ---------------------------------------------------------------------------


class TestReadabilityMapper:
    def test_builds_replace_patch(self) -> None:
        suggestion = readability_suggestion("sugg-1", value="Simple words.", selector="#text-123")
        patch = ReadabilityMapper().build_patch(suggestion, "opp-1")

        assert patch.to_wire() == {
            "op": "replace",
            "selector": "#text-123",
            "value": "Simple words.",
            "valueFormat": "text",
            "currValue": "Long winded original text...",
            "target": "ai-bots",
            "opportunityId": "opp-1",
            "suggestionId": "sugg-1",
            "prerenderRequired": True,
            "lastUpdated": suggestion_timestamp_ms(suggestion),
        }

    def test_rejects_insert_operation(self) -> None:
        eligibility = ReadabilityMapper().can_deploy(readability_suggestion("sugg-1", op="insertAfter"))
        assert eligibility.reason == 'transformRules.op must be "replace" for readability suggestions'

    def test_rejects_missing_rules(self) -> None:
        eligibility = ReadabilityMapper().can_deploy(_suggestion({"url": "https://example.com/page"}))
        assert eligibility.reason == "transformRules is required"

    def test_rejects_invalid_url(self) -> None:
        eligibility = ReadabilityMapper().can_deploy(readability_suggestion("sugg-1", url="/page"))
        assert eligibility.reason == "url /page is not a valid URL"

    def test_unknown_target_falls_back_to_ai_bots(self) -> None:
        suggestion = _suggestion(
            {
                "url": "https://example.com/page",
                "transformRules": {"op": "replace", "selector": "p", "value": "x", "target": "humans"},
            }
        )
        assert ReadabilityMapper().build_patch(suggestion, "opp-1").target_audience is TargetAudience.AI_BOTS


# ---------------------------------------------------------------------------
# summarization
# ---------------------------------------------------------------------------


class TestSummarizationMapper:
    def test_markdown_becomes_tree(self) -> None:
        suggestion = _suggestion(
            {
                "summarizationText": "## Summary\n\nShort *version*.",
                "transformRules": {"action": "insertAfter", "selector": "h1"},
            }
        )
        mapper = SummarizationMapper()
        assert mapper.can_deploy(suggestion).eligible

        patch = mapper.build_patch(suggestion, "opp-1")
        assert patch.value_format is ValueFormat.TREE
        assert patch.value["type"] == "root"
        assert [child["tagName"] for child in patch.value["children"]] == ["h2", "p"]

    def test_requires_text(self) -> None:
        suggestion = _suggestion({"transformRules": {"action": "insertAfter", "selector": "h1"}})
        assert SummarizationMapper().can_deploy(suggestion).reason == "summarizationText is required"

    def test_rejects_replace_action(self) -> None:
        suggestion = _suggestion(
            {"summarizationText": "x", "transformRules": {"action": "replace", "selector": "h1"}}
        )
        assert SummarizationMapper().can_deploy(suggestion).reason == (
            "transformRules.action must be insertAfter, insertBefore, or appendChild"
        )


# ---------------------------------------------------------------------------
# toc
# ---------------------------------------------------------------------------


class TestTableOfContentsMapper:
    TREE = {"type": "element", "tagName": "nav", "properties": {}, "children": []}

    def test_passes_tree_through(self) -> None:
        suggestion = _suggestion(
            {
                "checkType": "toc",
                "transformRules": {
                    "action": "insertBefore",
                    "selector": "main",
                    "value": self.TREE,
                    "valueFormat": "hast",
                },
            }
        )
        mapper = TableOfContentsMapper()
        assert mapper.can_deploy(suggestion).eligible
        patch = mapper.build_patch(suggestion, "opp-1")
        assert patch.value == self.TREE
        assert patch.to_wire()["valueFormat"] == "hast"

    def test_requires_hast_format(self) -> None:
        suggestion = _suggestion(
            {
                "checkType": "toc",
                "transformRules": {"action": "insertBefore", "selector": "main", "value": "x", "valueFormat": "text"},
            }
        )
        assert TableOfContentsMapper().can_deploy(suggestion).reason == "transformRules.valueFormat must be hast for toc"

    def test_non_mapping_value_is_skipped_in_batch(self) -> None:
        suggestion = _suggestion(
            {
                "checkType": "toc",
                "transformRules": {"action": "insertBefore", "selector": "main", "value": "x", "valueFormat": "hast"},
            }
        )
        assert TableOfContentsMapper().suggestions_to_patches("/page", [suggestion], "opp-1") == []


# ---------------------------------------------------------------------------
# generic-autofix-edge
# ---------------------------------------------------------------------------


class TestGenericAutofixMapper:
    def test_text_patch_ignores_ui_fields(self) -> None:
        suggestion = generic_suggestion("sugg-1", rationale="why", contentBefore="before", tag="p")
        patch = GenericAutofixMapper().build_patch(suggestion, "opp-1")
        wire = patch.to_wire()

        assert wire["op"] == "insertAfter"
        assert wire["valueFormat"] == "text"
        assert wire["tag"] == "p"
        assert "rationale" not in wire
        assert "contentBefore" not in wire

    def test_hast_format(self) -> None:
        tree = {"type": "root", "children": []}
        suggestion = generic_suggestion("sugg-1", patchValue=tree, format="hast")
        patch = GenericAutofixMapper().build_patch(suggestion, "opp-1")
        assert patch.value == tree
        assert patch.value_format is ValueFormat.TREE

    def test_rejects_unknown_action(self) -> None:
        suggestion = generic_suggestion(
            "sugg-1",
            transformRules={"action": "appendChild", "selector": "main"},
        )
        assert GenericAutofixMapper().can_deploy(suggestion).reason == (
            "transformRules.action must be one of: insertBefore, insertAfter, replace. Got: appendChild"
        )

    def test_requires_patch_value(self) -> None:
        suggestion = generic_suggestion("sugg-1", patchValue="")
        assert GenericAutofixMapper().can_deploy(suggestion).reason == "patchValue is required"

    def test_requires_url(self) -> None:
        suggestion = generic_suggestion("sugg-1", url="")
        assert GenericAutofixMapper().can_deploy(suggestion).reason == "url is required"


# ---------------------------------------------------------------------------
# Batch conversion
# ---------------------------------------------------------------------------


class TestSuggestionsToPatches:
    def test_skips_ineligible_and_keeps_order(self) -> None:
        suggestions = [
            readability_suggestion("s1"),
            readability_suggestion("s2", op="insertBefore"),
            readability_suggestion("s3"),
        ]
        patches = ReadabilityMapper().suggestions_to_patches("/page", suggestions, "opp-1")
        assert [patch.suggestion_id for patch in patches] == ["s1", "s3"]

    def test_logs_skipped_suggestion(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("WARNING"):
            ReadabilityMapper().suggestions_to_patches("/page", [readability_suggestion("s2", op="x")], "opp-1")
        assert "suggestion_skipped" in caplog.text


# ---------------------------------------------------------------------------
# Eligibility is a pure check
# ---------------------------------------------------------------------------

HEADINGS_DATA = {
    "checkType": "heading-empty",
    "recommendedAction": "Our pricing",
    "transformRules": {"action": "replace", "selector": "h2"},
}
SUMMARY_DATA = {
    "summarizationText": "Short *version*.",
    "transformRules": {"action": "insertAfter", "selector": "h1"},
}
TOC_DATA = {
    "checkType": "toc",
    "transformRules": {
        "action": "insertBefore",
        "selector": "main",
        "value": {"type": "element", "tagName": "nav", "properties": {}, "children": []},
        "valueFormat": "hast",
    },
}


class TestEligibilityPurity:
    @pytest.mark.parametrize(
        ("mapper", "suggestion"),
        [
            pytest.param(HeadingsMapper(), _suggestion(HEADINGS_DATA), id="headings"),
            pytest.param(ReadabilityMapper(), readability_suggestion("s1"), id="readability"),
            pytest.param(ReadabilityMapper(), readability_suggestion("s1", op="insertAfter"), id="readability-rejected"),
            pytest.param(SummarizationMapper(), _suggestion(SUMMARY_DATA), id="summarization"),
            pytest.param(FaqMapper(), faq_suggestion("s1"), id="faq"),
            pytest.param(TableOfContentsMapper(), _suggestion(TOC_DATA), id="toc"),
            pytest.param(GenericAutofixMapper(), generic_suggestion("s1"), id="generic-autofix-edge"),
        ],
    )
    def test_repeated_checks_agree_and_leave_data_untouched(self, mapper, suggestion) -> None:
        before = copy.deepcopy(suggestion.data)

        first = mapper.can_deploy(suggestion)
        second = mapper.can_deploy(suggestion)

        assert first == second
        assert suggestion.data == before
