"""
Opportunity mapper registry supporting built-ins and dynamic import paths.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterable

from edge_config.mappers.base import OpportunityMapper
from edge_config.mappers.faq import FaqMapper
from edge_config.mappers.generic import GenericAutofixMapper
from edge_config.mappers.headings import HeadingsMapper
from edge_config.mappers.readability import ReadabilityMapper
from edge_config.mappers.summarization import SummarizationMapper
from edge_config.mappers.toc import TableOfContentsMapper

logger = logging.getLogger(__name__)

BUILTIN_MAPPERS: tuple[type[OpportunityMapper], ...] = (
    HeadingsMapper,
    ReadabilityMapper,
    SummarizationMapper,
    FaqMapper,
    TableOfContentsMapper,
    GenericAutofixMapper,
)


class MapperRegistry:
    """
    Opportunity type -> mapper lookup. Registration is last-write-wins.

    Each instance owns its own table, so tests and orchestrators can hold
    isolated registries.
    """

    def __init__(
        self,
        mappers: Iterable[OpportunityMapper] | None = None,
        *,
        include_builtins: bool = True,
        extra_mapper_paths: Iterable[str] = (),
    ) -> None:
        self._mappers: dict[str, OpportunityMapper] = {}
        if include_builtins:
            for mapper_class in BUILTIN_MAPPERS:
                self.register(mapper_class())
        for path in extra_mapper_paths:
            self.register(self._load_dynamic_class(path)())
        for mapper in mappers or ():
            self.register(mapper)

    def register(self, mapper: OpportunityMapper) -> None:
        opportunity_type = mapper.opportunity_type()
        if not opportunity_type:
            raise ValueError(f"Mapper {type(mapper).__name__} must declare an opportunity type.")
        if opportunity_type in self._mappers:
            logger.debug("Replacing mapper for opportunity type %s", opportunity_type)
        self._mappers[opportunity_type] = mapper

    def get(self, opportunity_type: str) -> OpportunityMapper | None:
        return self._mappers.get(opportunity_type)

    def list_supported_types(self) -> list[str]:
        return list(self._mappers.keys())

    @staticmethod
    def _load_dynamic_class(path: str) -> type[OpportunityMapper]:
        if ":" not in path:
            raise ValueError(f"Invalid mapper class '{path}'. Use 'module.path:ClassName'.")

        module_path, class_name = path.split(":", 1)
        module = importlib.import_module(module_path)
        loaded = getattr(module, class_name, None)
        if loaded is None:
            raise ValueError(f"Unable to resolve mapper class '{path}'.")
        if not isinstance(loaded, type) or not issubclass(loaded, OpportunityMapper):
            raise ValueError(f"Class '{path}' must inherit from OpportunityMapper.")
        return loaded
