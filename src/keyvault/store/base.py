"""
Blob store contract consumed by the artifact service.

A store keeps opaque bytes plus one free-text name per object. It is not
trusted with plaintext or with any structure beyond that name. Every method
may fail with :class:`keyvault.core.exceptions.StoreError`; retrying is the
caller's decision.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class ObjectInfo:
    object_id: str
    name: str
    size: int
    created_at: Optional[datetime] = None
    public: bool = False


@dataclass(frozen=True)
class StorageQuota:
    limit: Optional[int]  # None means unlimited
    usage: int

    @property
    def available(self) -> Optional[int]:
        if self.limit is None:
            return None
        return max(self.limit - self.usage, 0)


class BlobStore(ABC):
    @abstractmethod
    def put_object(self, name: str, data: bytes) -> str:
        """Store ``data`` under ``name`` and return the new object id."""

    @abstractmethod
    def get_metadata(self, object_id: str) -> ObjectInfo:
        ...

    @abstractmethod
    def get_bytes(self, object_id: str) -> bytes:
        ...

    @abstractmethod
    def set_public_readable(self, object_id: str) -> None:
        ...

    @abstractmethod
    def delete_object(self, object_id: str) -> None:
        ...

    @abstractmethod
    def list_objects(self, name_contains: Optional[str] = None) -> List[ObjectInfo]:
        """Return objects whose name contains ``name_contains`` (all when None)."""

    @abstractmethod
    def get_quota(self) -> StorageQuota:
        ...
