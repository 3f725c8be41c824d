"""
edge_config/merge.py

Keyed merge and removal of patches within one URL's configuration document.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence
from dataclasses import dataclass

from edge_config.domain.patch import ConfigurationDocument, MergeKey, Patch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeOutcome:
    patches: list[Patch]
    updated_count: int
    added_count: int


@dataclass(frozen=True)
class RemovalOutcome:
    document: ConfigurationDocument
    removed_count: int


def merge_patches(existing: Sequence[Patch], incoming: Sequence[Patch]) -> MergeOutcome:
    """
    Merge incoming patches into the existing sequence.

    A keyed patch replaces the existing patch with the same
    (opportunity_id, suggestion_id) at its original index, otherwise it is
    appended. Structural patches are appended unless an identical patch is
    already present.
    """

    merged = list(existing)
    index_by_key: dict[MergeKey, int] = {}
    for position, patch in enumerate(merged):
        if patch.merge_key is not None:
            index_by_key.setdefault(patch.merge_key, position)

    updated_count = 0
    added_count = 0
    for patch in incoming:
        key = patch.merge_key
        if key is None:
            if any(candidate == patch for candidate in merged):
                continue
            merged.append(patch)
            added_count += 1
            continue
        position = index_by_key.get(key)
        if position is None:
            index_by_key[key] = len(merged)
            merged.append(patch)
            added_count += 1
        else:
            merged[position] = patch
            updated_count += 1

    return MergeOutcome(patches=merged, updated_count=updated_count, added_count=added_count)


def merge_documents(
    existing: ConfigurationDocument | None,
    incoming: ConfigurationDocument,
    *,
    force_fail: bool | None = None,
) -> ConfigurationDocument:
    """
    Combine a freshly generated document with the stored one for the same URL.

    `url` and `schema_version` come from `incoming`; `force_fail` is kept from
    `existing` unless overridden. Unknown keys on the stored document survive.
    """

    if existing is None:
        if force_fail is None:
            return incoming
        return incoming.model_copy(update={"force_fail": force_fail})

    outcome = merge_patches(existing.patches, incoming.patches)
    logger.debug(
        "Merged patches for %s: %s updated, %s added",
        incoming.url,
        outcome.updated_count,
        outcome.added_count,
    )
    return existing.model_copy(
        update={
            "url": incoming.url,
            "schema_version": incoming.schema_version,
            "force_fail": existing.force_fail if force_fail is None else force_fail,
            "prerender_required": any(patch.prerender_required for patch in outcome.patches),
            "patches": outcome.patches,
        }
    )


def remove_patches(
    document: ConfigurationDocument,
    *,
    opportunity_id: str,
    suggestion_ids: Collection[str],
    drop_structural: bool = False,
) -> RemovalOutcome:
    """
    Drop patches keyed by (opportunity_id, suggestion_id) for the given ids.

    With `drop_structural`, the opportunity's structural patches go as well.
    """

    ids = set(suggestion_ids)
    kept: list[Patch] = []
    removed = 0
    for patch in document.patches:
        if patch.opportunity_id == opportunity_id:
            if patch.suggestion_id is not None and patch.suggestion_id in ids:
                removed += 1
                continue
            if patch.suggestion_id is None and drop_structural:
                removed += 1
                continue
        kept.append(patch)

    if removed == 0:
        return RemovalOutcome(document=document, removed_count=0)

    updated = document.model_copy(
        update={
            "patches": kept,
            "prerender_required": any(patch.prerender_required for patch in kept),
        }
    )
    return RemovalOutcome(document=updated, removed_count=removed)
