"""
db/repositories/config_object_repository.py

Persistence helpers for stored configuration bodies.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.config_object import EdgeConfigObject


class ConfigObjectRepository:
    """
    Key-value style access to `edge_config_objects` rows.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, *, bucket: str, object_key: str) -> EdgeConfigObject | None:
        stmt = select(EdgeConfigObject).where(
            EdgeConfigObject.bucket == bucket,
            EdgeConfigObject.object_key == object_key,
        )
        return self._session.execute(stmt).scalars().first()

    def save(
        self,
        *,
        bucket: str,
        object_key: str,
        body: bytes,
        content_type: str,
    ) -> EdgeConfigObject:
        """
        Insert or update the object keyed by (bucket, object_key).
        """

        existing = self.get(bucket=bucket, object_key=object_key)
        if existing is None:
            existing = EdgeConfigObject(
                bucket=bucket,
                object_key=object_key,
                body=body,
                content_type=content_type,
            )
            self._session.add(existing)
        else:
            existing.body = body
            existing.content_type = content_type

        self._session.flush()
        return existing

    def list_keys(self, *, bucket: str, prefix: str = "") -> list[str]:
        stmt = select(EdgeConfigObject.object_key).where(EdgeConfigObject.bucket == bucket)
        if prefix:
            stmt = stmt.where(EdgeConfigObject.object_key.startswith(prefix, autoescape=True))
        stmt = stmt.order_by(EdgeConfigObject.object_key)
        return list(self._session.execute(stmt).scalars().all())
