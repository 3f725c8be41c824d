"""
edge_config/domain/entities.py

Collaborator contracts for sites, opportunities and suggestions.

The engine only reads these objects. Any record exposing the attributes below
can be passed in; the frozen dataclasses are ready-made implementations.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol


class Suggestion(Protocol):
    @property
    def id(self) -> str: ...

    @property
    def data(self) -> Mapping[str, Any] | None: ...

    @property
    def updated_at(self) -> datetime | str | None: ...


class Opportunity(Protocol):
    @property
    def id(self) -> str: ...

    @property
    def type(self) -> str: ...


class SiteConfig(Protocol):
    @property
    def edge_api_key(self) -> str | None: ...

    @property
    def edge_forwarded_host(self) -> str | None: ...

    @property
    def override_base_url(self) -> str | None: ...


class Site(Protocol):
    @property
    def id(self) -> str: ...

    @property
    def base_url(self) -> str: ...

    @property
    def config(self) -> SiteConfig | None: ...


@dataclass(frozen=True)
class SuggestionRecord:
    id: str
    data: Mapping[str, Any] | None = field(default_factory=dict)
    updated_at: datetime | str | None = None


@dataclass(frozen=True)
class OpportunityRecord:
    id: str
    type: str


@dataclass(frozen=True)
class SiteConfigRecord:
    """
    Per-site edge settings: preview credentials and base URL override.
    """

    edge_api_key: str | None = None
    edge_forwarded_host: str | None = None
    override_base_url: str | None = None


@dataclass(frozen=True)
class SiteRecord:
    id: str
    base_url: str
    config: SiteConfigRecord | None = None


def suggestion_data(suggestion: Suggestion) -> Mapping[str, Any]:
    """
    Suggestion payload, with a missing payload read as empty.
    """

    data = suggestion.data
    return data if isinstance(data, Mapping) else {}
