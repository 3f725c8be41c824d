"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.config_object import EdgeConfigObject

__all__ = ["EdgeConfigObject"]
