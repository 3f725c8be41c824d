"""
tests/test_merge.py

Keyed merge and removal of patches.

Coverage
--------
- Replacement in place and append order
- Idempotence of repeated merges
- Structural (suggestion-less) patches
- forceFail preservation and override
- Removal by suggestion id, with and without structural patches
"""

from __future__ import annotations

from edge_config.domain.patch import ConfigurationDocument, Patch
from edge_config.merge import merge_documents, merge_patches, remove_patches

URL = "https://example.com/page"


def _patch(suggestion_id: str | None, value: str = "v", *, opportunity_id: str = "opp-1", prerender: bool = True) -> Patch:
    return Patch(
        operation="replace",
        selector=f"#{suggestion_id or 'heading'}",
        value=value,
        opportunity_id=opportunity_id,
        suggestion_id=suggestion_id,
        prerender_required=prerender,
        last_updated=1_700_000_000_000,
    )


def _document(*patches: Patch, force_fail: bool = False) -> ConfigurationDocument:
    return ConfigurationDocument.from_patches(url=URL, patches=list(patches), force_fail=force_fail)


# ---------------------------------------------------------------------------
# merge_patches
# ---------------------------------------------------------------------------


class TestMergePatches:
    def test_replaces_same_key_in_place(self) -> None:
        outcome = merge_patches(
            [_patch("sugg-1", "old"), _patch("sugg-2")],
            [_patch("sugg-1", "new")],
        )
        assert [patch.value for patch in outcome.patches] == ["new", "v"]
        assert outcome.updated_count == 1
        assert outcome.added_count == 0

    def test_appends_new_keys_last(self) -> None:
        outcome = merge_patches([_patch("sugg-1")], [_patch("sugg-3"), _patch("sugg-2")])
        assert [patch.suggestion_id for patch in outcome.patches] == ["sugg-1", "sugg-3", "sugg-2"]
        assert outcome.added_count == 2

    def test_same_suggestion_id_under_other_opportunity_is_distinct(self) -> None:
        outcome = merge_patches([_patch("sugg-1")], [_patch("sugg-1", opportunity_id="opp-2")])
        assert len(outcome.patches) == 2

    def test_structural_patch_is_appended_not_replacing(self) -> None:
        outcome = merge_patches([_patch(None, "FAQs")], [_patch(None, "Questions")])
        assert [patch.value for patch in outcome.patches] == ["FAQs", "Questions"]

    def test_identical_structural_patch_is_not_duplicated(self) -> None:
        outcome = merge_patches([_patch(None, "FAQs")], [_patch(None, "FAQs")])
        assert len(outcome.patches) == 1
        assert outcome.added_count == 0

    def test_empty_inputs(self) -> None:
        assert merge_patches([], []).patches == []
        assert len(merge_patches([], [_patch("sugg-1")]).patches) == 1


# ---------------------------------------------------------------------------
# merge_documents
# ---------------------------------------------------------------------------


class TestMergeDocuments:
    def test_updated_suggestion_keeps_index_and_new_one_is_appended(self) -> None:
        existing = _document(_patch("sugg-1", "old"))
        incoming = _document(_patch("sugg-1", "new"), _patch("sugg-2", "added"))

        merged = merge_documents(existing, incoming)

        assert len(merged.patches) == 2
        assert merged.patches[0].suggestion_id == "sugg-1"
        assert merged.patches[0].value == "new"
        assert merged.patches[1].suggestion_id == "sugg-2"

    def test_merge_is_idempotent(self) -> None:
        existing = _document(_patch("sugg-0"), _patch(None, "FAQs"))
        incoming = _document(_patch("sugg-1"), _patch(None, "FAQs"), _patch("sugg-0", "changed"))

        once = merge_documents(existing, incoming)
        twice = merge_documents(once, incoming)

        assert twice.to_wire() == once.to_wire()

    def test_reapplying_earlier_batch_keeps_shape(self) -> None:
        batch_a = _document(_patch("sugg-1", "a"))
        batch_b = _document(_patch("sugg-2", "b"))

        a_then_b = merge_documents(merge_documents(None, batch_a), batch_b)
        again = merge_documents(a_then_b, batch_a)

        assert again.to_wire() == a_then_b.to_wire()

    def test_without_existing_returns_incoming(self) -> None:
        incoming = _document(_patch("sugg-1"))
        assert merge_documents(None, incoming) is incoming

    def test_force_fail_preserved_from_existing(self) -> None:
        merged = merge_documents(_document(_patch("sugg-1"), force_fail=True), _document(_patch("sugg-2")))
        assert merged.force_fail is True

    def test_force_fail_override(self) -> None:
        merged = merge_documents(
            _document(_patch("sugg-1"), force_fail=True),
            _document(_patch("sugg-2")),
            force_fail=False,
        )
        assert merged.force_fail is False

    def test_prerender_is_or_of_all_patches(self) -> None:
        merged = merge_documents(
            _document(_patch("sugg-1", prerender=True)),
            _document(_patch("sugg-2", prerender=False)),
        )
        assert merged.prerender_required is True

    def test_url_and_version_come_from_incoming(self) -> None:
        existing = ConfigurationDocument(url="https://example.com/old", schema_version="0.9", patches=[])
        incoming = _document(_patch("sugg-1"))
        merged = merge_documents(existing, incoming)
        assert merged.url == URL
        assert merged.schema_version == "1.0"

    def test_unknown_document_keys_survive(self) -> None:
        existing = ConfigurationDocument.model_validate(
            {"url": URL, "patches": [], "owner": "seo-team"}
        )
        merged = merge_documents(existing, _document(_patch("sugg-1")))
        assert merged.to_wire()["owner"] == "seo-team"


# ---------------------------------------------------------------------------
# remove_patches
# ---------------------------------------------------------------------------


class TestRemovePatches:
    def test_removes_matching_suggestions_only(self) -> None:
        document = _document(_patch("sugg-1"), _patch("sugg-2"), _patch("sugg-1", opportunity_id="opp-2"))
        outcome = remove_patches(document, opportunity_id="opp-1", suggestion_ids=["sugg-1"])
        assert outcome.removed_count == 1
        assert [(patch.opportunity_id, patch.suggestion_id) for patch in outcome.document.patches] == [
            ("opp-1", "sugg-2"),
            ("opp-2", "sugg-1"),
        ]

    def test_keeps_structural_patches_by_default(self) -> None:
        document = _document(_patch(None, "FAQs"), _patch("sugg-1"))
        outcome = remove_patches(document, opportunity_id="opp-1", suggestion_ids=["sugg-1"])
        assert outcome.removed_count == 1
        assert outcome.document.patches[0].value == "FAQs"

    def test_drops_structural_patches_when_asked(self) -> None:
        document = _document(_patch(None, "FAQs"), _patch("sugg-1"))
        outcome = remove_patches(
            document,
            opportunity_id="opp-1",
            suggestion_ids=["sugg-1"],
            drop_structural=True,
        )
        assert outcome.removed_count == 2
        assert outcome.document.patches == []
        assert outcome.document.prerender_required is False

    def test_nothing_to_remove_returns_same_document(self) -> None:
        document = _document(_patch("sugg-1"))
        outcome = remove_patches(document, opportunity_id="opp-1", suggestion_ids=["missing"])
        assert outcome.removed_count == 0
        assert outcome.document is document
