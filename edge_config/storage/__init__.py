"""
Storage layer exports.
"""

from edge_config.storage.base import JSON_CONTENT_TYPE, ObjectStorage
from edge_config.storage.memory import InMemoryObjectStorage
from edge_config.storage.sqlalchemy_storage import SQLAlchemyObjectStorage

__all__ = [
    "JSON_CONTENT_TYPE",
    "InMemoryObjectStorage",
    "ObjectStorage",
    "SQLAlchemyObjectStorage",
]
