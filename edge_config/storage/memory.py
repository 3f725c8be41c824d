"""
In-process object storage, used by tests and dry runs.
"""

from __future__ import annotations

from edge_config.storage.base import JSON_CONTENT_TYPE, ObjectStorage


class InMemoryObjectStorage(ObjectStorage):
    def __init__(self, bucket: str = "memory") -> None:
        self.bucket = bucket
        self._objects: dict[str, tuple[bytes, str]] = {}
        self.put_count = 0

    async def get(self, key: str) -> bytes | None:
        stored = self._objects.get(key)
        return stored[0] if stored is not None else None

    async def put(self, key: str, body: bytes, content_type: str = JSON_CONTENT_TYPE) -> str:
        self._objects[key] = (bytes(body), content_type)
        self.put_count += 1
        return key

    def keys(self) -> list[str]:
        return sorted(self._objects)

    def content_type(self, key: str) -> str | None:
        stored = self._objects.get(key)
        return stored[1] if stored is not None else None
