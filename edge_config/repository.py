"""
edge_config/repository.py

Reads and writes configuration documents through the object storage handles.
"""

from __future__ import annotations

import json
import logging
from typing import TypeVar

from pydantic import ValidationError

from edge_config.domain.patch import ConfigurationDocument, DomainConfiguration, WireModel
from edge_config.errors import DocumentDecodeError
from edge_config.logging_utils import log_event
from edge_config.paths import config_storage_key, domain_config_storage_key
from edge_config.storage.base import JSON_CONTENT_TYPE, ObjectStorage

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=WireModel)


def encode_document(document: WireModel) -> bytes:
    return json.dumps(document.to_wire(), indent=2).encode("utf-8")


def decode_document(body: bytes, model: type[ModelT], *, key: str) -> ModelT:
    """
    Parse a stored body into the given model.

    Raises DocumentDecodeError when the body is not JSON or does not match.
    """

    try:
        return model.model_validate_json(body)
    except ValidationError as exc:
        raise DocumentDecodeError(f"Stored object {key} is not a valid {model.__name__}") from exc


class ConfigDocumentRepository:
    """
    Per-URL and domain documents on the production and preview handles.

    Preview reads and writes only ever touch keys under `preview/` on the
    preview handle.
    """

    def __init__(self, *, storage: ObjectStorage, preview_storage: ObjectStorage | None = None) -> None:
        self._storage = storage
        self._preview_storage = preview_storage or storage

    def _handle(self, preview: bool) -> ObjectStorage:
        return self._preview_storage if preview else self._storage

    async def _load(self, key: str, model: type[ModelT], preview: bool) -> ModelT | None:
        handle = self._handle(preview)
        body = await handle.get(key)
        if body is None:
            logger.debug("No object found at %s/%s", handle.bucket, key)
            return None
        return decode_document(body, model, key=key)

    async def _store(self, key: str, document: WireModel, preview: bool) -> str:
        handle = self._handle(preview)
        written = await handle.put(key, encode_document(document), JSON_CONTENT_TYPE)
        log_event(
            logger,
            logging.INFO,
            "config_written",
            bucket=handle.bucket,
            key=written,
            preview=preview,
        )
        return written

    async def fetch_config(self, url: str, *, preview: bool = False) -> ConfigurationDocument | None:
        return await self._load(config_storage_key(url, preview), ConfigurationDocument, preview)

    async def save_config(self, url: str, document: ConfigurationDocument, *, preview: bool = False) -> str:
        return await self._store(config_storage_key(url, preview), document, preview)

    async def fetch_domain_config(self, url: str, *, preview: bool = False) -> DomainConfiguration | None:
        return await self._load(domain_config_storage_key(url, preview), DomainConfiguration, preview)

    async def save_domain_config(
        self,
        url: str,
        document: DomainConfiguration,
        *,
        preview: bool = False,
    ) -> str:
        return await self._store(domain_config_storage_key(url, preview), document, preview)
