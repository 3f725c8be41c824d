"""
db/models/config_object.py

Stored configuration bodies, one row per (bucket, object_key).
"""

from __future__ import annotations

import uuid

from sqlalchemy import Index, LargeBinary, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class EdgeConfigObject(Base, TimestampMixin):
    __tablename__ = "edge_config_objects"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    bucket: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Storage namespace (production or preview)",
    )
    object_key: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        comment="URL-derived key, e.g. opportunities/<host>/<base64url(path)>",
    )
    content_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="application/json",
    )
    body: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    __table_args__ = (
        UniqueConstraint("bucket", "object_key", name="uq_edge_config_objects_bucket_object_key"),
        Index("ix_edge_config_objects_bucket", "bucket"),
    )
