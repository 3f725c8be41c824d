"""
edge_config/domain/patch.py

Patch model and the documents that aggregate patches.

Attribute names are Pythonic; the JSON aliases are the keys the edge renderer
reads, so `model_dump(by_alias=True)` is the wire format.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from edge_config.config import DEFAULT_SCHEMA_VERSION


class PatchOperation(str, Enum):
    """DOM mutation kinds understood by the renderer."""

    REPLACE = "replace"
    INSERT_AFTER = "insertAfter"
    INSERT_BEFORE = "insertBefore"
    APPEND_CHILD = "appendChild"


class ValueFormat(str, Enum):
    """How the patch value is encoded."""

    TEXT = "text"
    TREE = "hast"


class TargetAudience(str, Enum):
    """User-agent classes that receive a patch."""

    AI_BOTS = "ai-bots"
    BOTS = "bots"
    ALL = "all"


MergeKey = tuple[str, str]


class WireModel(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Patch(WireModel):
    """
    One atomic DOM mutation instruction.
    """

    operation: PatchOperation = Field(alias="op")
    selector: str = Field(min_length=1)
    value: str | dict[str, Any]
    value_format: ValueFormat = Field(default=ValueFormat.TEXT, alias="valueFormat")
    tag: str | None = None
    previous_value: str | None = Field(default=None, alias="currValue")
    target_audience: TargetAudience = Field(default=TargetAudience.AI_BOTS, alias="target")
    opportunity_id: str = Field(alias="opportunityId")
    suggestion_id: str | None = Field(default=None, alias="suggestionId")
    prerender_required: bool = Field(default=True, alias="prerenderRequired")
    last_updated: int = Field(alias="lastUpdated")

    @property
    def merge_key(self) -> MergeKey | None:
        """
        (opportunity_id, suggestion_id), or None for structural patches.
        """

        if self.suggestion_id is None:
            return None
        return (self.opportunity_id, self.suggestion_id)

    @property
    def is_structural(self) -> bool:
        return self.suggestion_id is None


class ConfigurationDocument(WireModel):
    """
    Ordered patches for one URL; the deployable unit.
    """

    url: str
    schema_version: str = Field(default=DEFAULT_SCHEMA_VERSION, alias="version")
    force_fail: bool = Field(default=False, alias="forceFail")
    prerender_required: bool = Field(default=False, alias="prerender")
    patches: list[Patch] = Field(default_factory=list)

    @classmethod
    def from_patches(
        cls,
        *,
        url: str,
        patches: list[Patch],
        schema_version: str = DEFAULT_SCHEMA_VERSION,
        force_fail: bool = False,
    ) -> "ConfigurationDocument":
        return cls(
            url=url,
            schema_version=schema_version,
            force_fail=force_fail,
            prerender_required=any(patch.prerender_required for patch in patches),
            patches=list(patches),
        )

    def has_structural_patch(self, *, opportunity_id: str, selector: str | None = None) -> bool:
        """
        True when the document holds a non-suggestion patch for the opportunity.
        """

        for patch in self.patches:
            if not patch.is_structural or patch.opportunity_id != opportunity_id:
                continue
            if selector is None or patch.selector == selector:
                return True
        return False


class DomainConfiguration(WireModel):
    """
    Site-wide settings stored next to the per-URL documents.
    """

    site_id: str = Field(alias="siteId")
    prerender_required: bool = Field(default=False, alias="prerender")
