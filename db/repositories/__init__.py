"""
Repository layer exports.
"""

from db.repositories.config_object_repository import ConfigObjectRepository

__all__ = ["ConfigObjectRepository"]
