"""
Opportunity mapper exports.
"""

from edge_config.mappers.base import OpportunityMapper
from edge_config.mappers.faq import FaqMapper
from edge_config.mappers.generic import GenericAutofixMapper
from edge_config.mappers.headings import HeadingsMapper
from edge_config.mappers.readability import ReadabilityMapper
from edge_config.mappers.registry import MapperRegistry
from edge_config.mappers.summarization import SummarizationMapper
from edge_config.mappers.toc import TableOfContentsMapper

__all__ = [
    "FaqMapper",
    "GenericAutofixMapper",
    "HeadingsMapper",
    "MapperRegistry",
    "OpportunityMapper",
    "ReadabilityMapper",
    "SummarizationMapper",
    "TableOfContentsMapper",
]
