"""
edge_config/orchestrator.py

Deploy, rollback and preview of suggestion patches:
generate -> merge -> persist -> invalidate.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from urllib.parse import urlsplit

import httpx

from edge_config.cdn.registry import CdnClientRegistry
from edge_config.config import DEFAULT_SCHEMA_VERSION, EdgeConfigSettings, PreviewOptions
from edge_config.domain.entities import Opportunity, Site, Suggestion, suggestion_data
from edge_config.domain.patch import ConfigurationDocument, DomainConfiguration
from edge_config.domain.results import (
    DeploymentResult,
    FailedSuggestion,
    InvalidationResult,
    PreviewResult,
    RollbackResult,
)
from edge_config.errors import ConfigurationError, MixedPreviewUrlError, UnsupportedOpportunityTypeError
from edge_config.logging_utils import log_event
from edge_config.mappers.base import OpportunityMapper
from edge_config.mappers.registry import MapperRegistry
from edge_config.merge import merge_documents
from edge_config.preview import EdgeHtmlFetcher, SleepFn
from edge_config.repository import ConfigDocumentRepository
from edge_config.storage.base import ObjectStorage
from edge_config.suggestions import (
    UNRESOLVABLE_URL_REASON,
    UrlGrouping,
    effective_base_url,
    filter_eligible_suggestions,
    group_suggestions_by_url_path,
    has_text,
    resolve_url_path,
)

logger = logging.getLogger(__name__)

NO_PATCH_REASON = "No patch generated for suggestion"


class EdgeConfigOrchestrator:
    """
    Top-level engine over the mapper registry, document repository and CDN.

    Persistence is the success criterion for a suggestion; CDN failures are
    recorded per invalidation group and never change that outcome. Concurrent
    calls for the same URL are not serialized: the read-merge-write is
    last-writer-wins.
    """

    def __init__(
        self,
        *,
        repository: ConfigDocumentRepository,
        mapper_registry: MapperRegistry | None = None,
        cdn_registry: CdnClientRegistry | None = None,
        cdn_provider: str | None = None,
        edge_renderer_url: str | None = None,
        preview_options: PreviewOptions | None = None,
        http_client: httpx.AsyncClient | None = None,
        http_timeout_seconds: float = 15.0,
        rollback_clears_force_fail: bool = True,
        schema_version: str = DEFAULT_SCHEMA_VERSION,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.repository = repository
        self.mapper_registry = mapper_registry or MapperRegistry()
        self.cdn_registry = cdn_registry or CdnClientRegistry(
            http_client=http_client,
            timeout_seconds=http_timeout_seconds,
        )
        self.cdn_provider = cdn_provider
        self.edge_renderer_url = edge_renderer_url
        self.preview_options = preview_options or PreviewOptions()
        self._http_client = http_client
        self._http_timeout_seconds = http_timeout_seconds
        self._rollback_clears_force_fail = rollback_clears_force_fail
        self._schema_version = schema_version
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: EdgeConfigSettings,
        *,
        storage: ObjectStorage,
        preview_storage: ObjectStorage | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> "EdgeConfigOrchestrator":
        return cls(
            repository=ConfigDocumentRepository(storage=storage, preview_storage=preview_storage),
            mapper_registry=MapperRegistry(extra_mapper_paths=settings.extra_mappers),
            cdn_registry=CdnClientRegistry(
                settings.cdn_config,
                http_client=http_client,
                timeout_seconds=settings.http_timeout_seconds,
            ),
            cdn_provider=settings.cdn_provider,
            edge_renderer_url=settings.edge_renderer_url,
            preview_options=settings.preview,
            http_client=http_client,
            http_timeout_seconds=settings.http_timeout_seconds,
            rollback_clears_force_fail=settings.rollback_clears_force_fail,
            schema_version=settings.schema_version,
        )

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def supported_opportunity_types(self) -> list[str]:
        return self.mapper_registry.list_supported_types()

    def _require_mapper(self, opportunity: Opportunity) -> OpportunityMapper:
        mapper = self.mapper_registry.get(opportunity.type)
        if mapper is None:
            raise UnsupportedOpportunityTypeError(opportunity.type, self.supported_opportunity_types())
        return mapper

    def generate_config(
        self,
        url: str,
        opportunity: Opportunity,
        suggestions: Sequence[Suggestion],
        existing_config: ConfigurationDocument | None = None,
    ) -> ConfigurationDocument | None:
        """
        Build a fresh document for one URL. No I/O.

        Returns None when no mapper handles the opportunity type or when no
        suggestion produced a patch.
        """

        mapper = self.mapper_registry.get(opportunity.type)
        if mapper is None:
            logger.warning("No mapper registered for opportunity type %s", opportunity.type)
            return None

        url_path = urlsplit(url).path or "/"
        patches = mapper.suggestions_to_patches(url_path, suggestions, opportunity.id, existing_config)
        if not patches:
            return None
        return ConfigurationDocument.from_patches(
            url=url,
            patches=patches,
            schema_version=self._schema_version,
        )

    @staticmethod
    def _partition_by_patches(
        suggestions: Sequence[Suggestion],
        document: ConfigurationDocument | None,
    ) -> tuple[list[Suggestion], list[FailedSuggestion]]:
        produced = {patch.suggestion_id for patch in document.patches} if document else set()
        succeeded: list[Suggestion] = []
        failed: list[FailedSuggestion] = []
        for suggestion in suggestions:
            if suggestion.id in produced:
                succeeded.append(suggestion)
            else:
                failed.append(FailedSuggestion(suggestion=suggestion, reason=NO_PATCH_REASON))
        return succeeded, failed

    def _group(
        self,
        site: Site,
        suggestions: Sequence[Suggestion],
        failed: list[FailedSuggestion],
    ) -> UrlGrouping:
        grouping = group_suggestions_by_url_path(suggestions, effective_base_url(site))
        failed.extend(
            FailedSuggestion(suggestion=suggestion, reason=UNRESOLVABLE_URL_REASON)
            for suggestion in grouping.unresolved
        )
        return grouping

    # ------------------------------------------------------------------
    # Deploy
    # ------------------------------------------------------------------

    async def _ensure_domain_config(self, url: str, site: Site, mapper: OpportunityMapper) -> None:
        domain_config = await self.repository.fetch_domain_config(url)
        if domain_config is None:
            logger.info("Creating domain configuration for site %s", site.id)
            await self.repository.save_domain_config(
                url,
                DomainConfiguration(site_id=site.id, prerender_required=mapper.requires_prerender()),
            )
        elif mapper.requires_prerender() and not domain_config.prerender_required:
            logger.info("Enabling prerender in domain configuration for site %s", site.id)
            await self.repository.save_domain_config(
                url,
                domain_config.model_copy(update={"prerender_required": True}),
            )

    async def deploy_suggestions(
        self,
        site: Site,
        opportunity: Opportunity,
        suggestions: Sequence[Suggestion],
    ) -> DeploymentResult:
        mapper = self._require_mapper(opportunity)
        eligible, failed = filter_eligible_suggestions(suggestions, mapper)
        result = DeploymentResult(failed_suggestions=failed)
        log_event(
            logger,
            logging.INFO,
            "deploy_started",
            opportunity_id=opportunity.id,
            opportunity_type=opportunity.type,
            eligible=len(eligible),
            ineligible=len(failed),
        )
        if not eligible:
            logger.warning("No eligible suggestions to deploy for opportunity %s", opportunity.id)
            return result

        grouping = self._group(site, eligible, result.failed_suggestions)
        if not grouping.groups:
            return result

        first_path = next(iter(grouping.groups))
        await self._ensure_domain_config(grouping.full_url(first_path), site, mapper)

        for url_path, group in grouping.groups.items():
            full_url = grouping.full_url(url_path)
            existing = await self.repository.fetch_config(full_url)
            new_config = self.generate_config(full_url, opportunity, group, existing)
            succeeded, not_generated = self._partition_by_patches(group, new_config)
            result.failed_suggestions.extend(not_generated)
            if new_config is None:
                logger.warning("No patches generated for %s", full_url)
                continue

            merged = merge_documents(existing, new_config)
            result.storage_paths.append(await self.repository.save_config(full_url, merged))
            result.succeeded_suggestions.extend(succeeded)

        result.cdn_invalidations = await self._invalidate_groups(
            [[f"/{path}"] for path in result.storage_paths]
        )
        log_event(
            logger,
            logging.INFO,
            "deploy_finished",
            opportunity_id=opportunity.id,
            urls=len(result.storage_paths),
            succeeded=len(result.succeeded_suggestions),
            failed=len(result.failed_suggestions),
        )
        return result

    # ------------------------------------------------------------------
    # Rollback
    # ------------------------------------------------------------------

    async def rollback_suggestions(
        self,
        site: Site,
        opportunity: Opportunity,
        suggestions: Sequence[Suggestion],
    ) -> RollbackResult:
        mapper = self._require_mapper(opportunity)
        eligible, failed = filter_eligible_suggestions(suggestions, mapper)
        result = RollbackResult(failed_suggestions=failed)
        if not eligible:
            logger.warning("No eligible suggestions to roll back for opportunity %s", opportunity.id)
            return result

        grouping = self._group(site, eligible, result.failed_suggestions)
        for url_path, group in grouping.groups.items():
            full_url = grouping.full_url(url_path)
            existing = await self.repository.fetch_config(full_url)
            if existing is None:
                logger.warning("No existing configuration found for %s", full_url)
                result.succeeded_suggestions.extend(group)
                continue

            outcome = mapper.rollback_patches(existing, [suggestion.id for suggestion in group], opportunity.id)
            if outcome.removed_count == 0:
                logger.info("No patches to remove for %s", full_url)
                result.succeeded_suggestions.extend(group)
                continue

            document = outcome.document
            if not document.patches and self._rollback_clears_force_fail:
                document = document.model_copy(update={"force_fail": False})

            result.storage_paths.append(await self.repository.save_config(full_url, document))
            result.removed_patches_count += outcome.removed_count
            result.succeeded_suggestions.extend(group)

        result.cdn_invalidations = await self._invalidate_groups(
            [[f"/{path}"] for path in result.storage_paths]
        )
        log_event(
            logger,
            logging.INFO,
            "rollback_finished",
            opportunity_id=opportunity.id,
            urls=len(result.storage_paths),
            removed=result.removed_patches_count,
            failed=len(result.failed_suggestions),
        )
        return result

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    @staticmethod
    def _preview_credentials(site: Site) -> tuple[str, str]:
        site_config = getattr(site, "config", None)
        api_key = getattr(site_config, "edge_api_key", None) if site_config else None
        forwarded_host = getattr(site_config, "edge_forwarded_host", None) if site_config else None
        if not has_text(api_key) or not has_text(forwarded_host):
            raise ConfigurationError(
                "Site does not have an edge API key or forwarded host configured. "
                "Onboard the site to the edge renderer first."
            )
        return api_key, forwarded_host

    @staticmethod
    def _ensure_single_url(suggestions: Sequence[Suggestion], base_url: str) -> None:
        # Same key as the grouping, so host variants of one path are not mixed.
        url_paths = {
            url_path
            for url_path in (
                resolve_url_path(suggestion_data(suggestion).get("url"), base_url) for suggestion in suggestions
            )
            if url_path is not None
        }
        if len(url_paths) > 1:
            raise MixedPreviewUrlError(sorted(url_paths))

    async def preview_suggestions(
        self,
        site: Site,
        opportunity: Opportunity,
        suggestions: Sequence[Suggestion],
        options: PreviewOptions | None = None,
    ) -> PreviewResult:
        """
        Stage the merged document under the preview keys and diff the render.

        Input and configuration problems raise before any I/O. An unchanged
        render after all retries is returned as a normal result.
        """

        api_key, forwarded_host = self._preview_credentials(site)
        mapper = self._require_mapper(opportunity)
        if not has_text(self.edge_renderer_url):
            raise ConfigurationError("EDGE_RENDERER_URL is required for preview")
        self._ensure_single_url(suggestions, effective_base_url(site))

        eligible, failed = filter_eligible_suggestions(suggestions, mapper)
        result = PreviewResult(failed_suggestions=failed)
        if not eligible:
            logger.warning("No eligible suggestions to preview for opportunity %s", opportunity.id)
            return result

        grouping = self._group(site, eligible, result.failed_suggestions)
        if not grouping.groups:
            return result
        url_path, group = next(iter(grouping.groups.items()))
        preview_url = grouping.full_url(url_path)

        # Deployed patches for the URL are part of what the preview renders.
        existing = await self.repository.fetch_config(preview_url)
        new_config = self.generate_config(preview_url, opportunity, group, existing)
        succeeded, not_generated = self._partition_by_patches(group, new_config)
        result.failed_suggestions.extend(not_generated)
        if new_config is None:
            logger.warning("No patches generated for preview of %s", preview_url)
            return result

        config = merge_documents(existing, new_config) if existing and existing.patches else new_config
        result.config = config
        result.storage_paths.append(await self.repository.save_config(preview_url, config, preview=True))
        result.succeeded_suggestions.extend(succeeded)
        result.cdn_invalidations = await self._invalidate_groups([[f"/{result.storage_paths[0]}"]])

        fetcher = EdgeHtmlFetcher(
            edge_url=self.edge_renderer_url,
            api_key=api_key,
            forwarded_host=forwarded_host,
            options=options or self.preview_options,
            timeout_seconds=self._http_timeout_seconds,
            http_client=self._http_client,
            sleep=self._sleep,
        )
        result.html = await fetcher.fetch_preview(preview_url)
        return result

    # ------------------------------------------------------------------
    # CDN
    # ------------------------------------------------------------------

    async def _invalidate_groups(self, groups: list[list[str]]) -> list[InvalidationResult | None]:
        """
        Invalidate every group concurrently and wait for all of them.

        A failing group becomes an `error` entry; an unconfigured or
        misconfigured provider yields None for every group.
        """

        if not groups:
            return []
        if not has_text(self.cdn_provider):
            logger.debug("No CDN provider configured, skipping invalidation")
            return [None] * len(groups)
        client = self.cdn_registry.get(self.cdn_provider)
        if client is None or not client.validate_config():
            logger.warning("CDN invalidation skipped for provider %s", self.cdn_provider)
            return [None] * len(groups)

        outcomes = await asyncio.gather(
            *(client.invalidate_cache(paths) for paths in groups),
            return_exceptions=True,
        )
        results: list[InvalidationResult | None] = []
        for paths, outcome in zip(groups, outcomes):
            if isinstance(outcome, InvalidationResult):
                log_event(
                    logger,
                    logging.INFO,
                    "cdn_invalidation",
                    provider=outcome.provider,
                    status=outcome.status,
                    paths=list(outcome.paths),
                )
                results.append(outcome)
                continue
            if not isinstance(outcome, Exception):
                raise outcome
            log_event(
                logger,
                logging.ERROR,
                "cdn_invalidation_failed",
                provider=client.provider_name(),
                paths=paths,
                error=str(outcome),
            )
            results.append(
                InvalidationResult(
                    status="error",
                    provider=client.provider_name(),
                    paths=tuple(paths),
                    message=str(outcome),
                )
            )
        return results
