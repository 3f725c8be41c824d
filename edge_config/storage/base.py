"""
Object storage interface for configuration documents.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

JSON_CONTENT_TYPE = "application/json"


class ObjectStorage(ABC):
    """
    Async key-value object store bound to one bucket.
    """

    bucket: str

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """
        Return the stored body, or None when the key does not exist.
        """

    @abstractmethod
    async def put(self, key: str, body: bytes, content_type: str = JSON_CONTENT_TYPE) -> str:
        """
        Store the body under the key and return the key written.
        """
