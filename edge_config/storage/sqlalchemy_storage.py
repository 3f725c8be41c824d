"""
SQLAlchemy-backed object storage for configuration documents.
"""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from db.repositories.config_object_repository import ConfigObjectRepository
from edge_config.storage.base import JSON_CONTENT_TYPE, ObjectStorage

logger = logging.getLogger(__name__)


class SQLAlchemyObjectStorage(ObjectStorage):
    """
    Persist objects in `edge_config_objects`, one short session per call.

    The ORM work is synchronous, so each call runs in a worker thread.
    """

    def __init__(self, *, bucket: str, session_factory: sessionmaker[Session]) -> None:
        self.bucket = bucket
        self._session_factory = session_factory

    async def get(self, key: str) -> bytes | None:
        return await asyncio.to_thread(self._get_sync, key)

    async def put(self, key: str, body: bytes, content_type: str = JSON_CONTENT_TYPE) -> str:
        return await asyncio.to_thread(self._put_sync, key, body, content_type)

    def _get_sync(self, key: str) -> bytes | None:
        with self._session_factory() as session:
            stored = ConfigObjectRepository(session).get(bucket=self.bucket, object_key=key)
            return bytes(stored.body) if stored is not None else None

    def _put_sync(self, key: str, body: bytes, content_type: str) -> str:
        with self._session_factory() as session:
            try:
                ConfigObjectRepository(session).save(
                    bucket=self.bucket,
                    object_key=key,
                    body=body,
                    content_type=content_type,
                )
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                logger.exception("Failed to store object %s/%s", self.bucket, key)
                raise
        return key
