"""
edge_config/suggestions.py

Helpers shared by the mappers and the orchestrator for reading suggestion
payloads: URL grouping, eligibility partitioning and timestamps.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any
from urllib.parse import urljoin, urlsplit

from edge_config.domain.entities import Site, Suggestion, suggestion_data
from edge_config.domain.results import FailedSuggestion

if TYPE_CHECKING:
    from edge_config.mappers.base import OpportunityMapper

logger = logging.getLogger(__name__)

DEFAULT_INELIGIBLE_REASON = "Suggestion cannot be deployed"
UNRESOLVABLE_URL_REASON = "Suggestion URL could not be resolved against the site base URL"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def is_valid_url(value: Any) -> bool:
    """True for absolute http(s) URLs with a host."""

    if not isinstance(value, str) or not value.strip():
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return parts.scheme in {"http", "https"} and bool(parts.netloc)


def has_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def effective_base_url(site: Site) -> str:
    """
    Base URL used for path resolution; a configured override wins.
    """

    site_config = getattr(site, "config", None)
    override = getattr(site_config, "override_base_url", None) if site_config else None
    if has_text(override):
        return override
    return site.base_url


def _parse_timestamp_ms(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str) and value.strip():
        raw = value.strip()
        if raw.endswith("Z"):
            raw = f"{raw[:-1]}+00:00"
        try:
            moment = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - _EPOCH) // timedelta(milliseconds=1)


def suggestion_timestamp_ms(suggestion: Suggestion) -> int:
    """
    Epoch milliseconds for `lastUpdated`.

    Prefers the payload's `scrapedAt`, then `transformRules.scrapedAt`, then the
    suggestion's own update time. Falls back to the current time.
    """

    data = suggestion_data(suggestion)
    transform_rules = data.get("transformRules")
    candidates = [
        data.get("scrapedAt"),
        transform_rules.get("scrapedAt") if isinstance(transform_rules, Mapping) else None,
        getattr(suggestion, "updated_at", None),
    ]
    for candidate in candidates:
        if candidate in (None, ""):
            continue
        # First present value decides, even when it does not parse.
        parsed = _parse_timestamp_ms(candidate)
        return parsed if parsed is not None else int(time.time() * 1000)
    return int(time.time() * 1000)


@dataclass
class UrlGrouping:
    """Suggestions grouped by resolved URL path, plus those left out."""

    base_url: str
    groups: dict[str, list[Suggestion]] = field(default_factory=dict)
    unresolved: list[Suggestion] = field(default_factory=list)

    def full_url(self, url_path: str) -> str:
        return urljoin(self.base_url, url_path)


def resolve_url(raw_url: Any, base_url: str) -> str | None:
    """
    Absolute URL (scheme, host and path) of `raw_url` resolved against
    `base_url`, or None when it cannot be resolved.
    """

    if not has_text(raw_url):
        return None
    try:
        parts = urlsplit(urljoin(base_url, raw_url.strip()))
    except ValueError:
        return None
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}{parts.path or '/'}"


def resolve_url_path(raw_url: Any, base_url: str) -> str | None:
    resolved = resolve_url(raw_url, base_url)
    if resolved is None:
        return None
    return urlsplit(resolved).path or "/"


def group_suggestions_by_url_path(suggestions: Iterable[Suggestion], base_url: str) -> UrlGrouping:
    """
    Group suggestions by the path of `data.url` resolved against `base_url`.

    Group order follows first appearance.
    """

    grouping = UrlGrouping(base_url=base_url)
    for suggestion in suggestions:
        url_path = resolve_url_path(suggestion_data(suggestion).get("url"), base_url)
        if url_path is None:
            logger.warning("Skipping suggestion %s: URL cannot be resolved", suggestion.id)
            grouping.unresolved.append(suggestion)
            continue
        grouping.groups.setdefault(url_path, []).append(suggestion)
    return grouping


def filter_eligible_suggestions(
    suggestions: Sequence[Suggestion],
    mapper: "OpportunityMapper",
) -> tuple[list[Suggestion], list[FailedSuggestion]]:
    eligible: list[Suggestion] = []
    ineligible: list[FailedSuggestion] = []
    for suggestion in suggestions:
        eligibility = mapper.can_deploy(suggestion)
        if eligibility.eligible:
            eligible.append(suggestion)
        else:
            ineligible.append(
                FailedSuggestion(
                    suggestion=suggestion,
                    reason=eligibility.reason or DEFAULT_INELIGIBLE_REASON,
                )
            )
    return eligible, ineligible
