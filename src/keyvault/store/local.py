"""
Filesystem blob store.

Structure Map for reference:
==============================
 - <root>/
      - index.json            (object id -> name, size, created_at, public)
      - objects/
          - {object_id}       (opaque bytes, usually ciphertext)
==============================
Object names only ever live in index.json, so they may contain characters
that would be illegal in a file name.
"""

from __future__ import annotations

import json
import logging
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from keyvault.core.exceptions import StoreError

from .base import BlobStore, ObjectInfo, StorageQuota

logger = logging.getLogger(__name__)


class LocalBlobStore(BlobStore):
    """Blob store backed by a directory, with an optional byte quota."""

    def __init__(self, root_path: Optional[str | Path] = None, quota_bytes: Optional[int] = None):
        self.root = (
            Path(root_path).expanduser() if root_path else Path.home() / ".keyvault"
        )
        self.quota_bytes = quota_bytes
        try:
            self.objects_root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"cannot create store at {self.root}: {exc}") from exc

    @property
    def objects_root(self) -> Path:
        return self.root / "objects"

    @property
    def index_path(self) -> Path:
        return self.root / "index.json"

    def object_path(self, object_id: str) -> Path:
        # ids come from users via share links; never let one escape objects/
        if not object_id or "/" in object_id or "\\" in object_id or object_id in (".", ".."):
            raise StoreError(f"invalid object id: {object_id!r}")
        return self.objects_root / object_id

    # ------------------------------------------------------------------
    # Index helpers
    # ------------------------------------------------------------------

    def _load_index(self) -> Dict[str, Dict[str, Any]]:
        if not self.index_path.exists():
            return {}
        try:
            with open(self.index_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as exc:
            raise StoreError(f"cannot read store index: {exc}") from exc

    def _save_index(self, index: Dict[str, Dict[str, Any]]) -> None:
        tmp = self.index_path.with_suffix(".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(index, f, ensure_ascii=False)
            tmp.replace(self.index_path)
        except OSError as exc:
            raise StoreError(f"cannot write store index: {exc}") from exc

    def _entry(self, index: Dict[str, Dict[str, Any]], object_id: str) -> Dict[str, Any]:
        entry = index.get(object_id)
        if entry is None:
            raise StoreError(f"object {object_id} not found")
        return entry

    @staticmethod
    def _info(object_id: str, entry: Dict[str, Any]) -> ObjectInfo:
        created = entry.get("created_at")
        return ObjectInfo(
            object_id=object_id,
            name=entry["name"],
            size=int(entry.get("size", 0)),
            created_at=datetime.fromisoformat(created) if created else None,
            public=bool(entry.get("public", False)),
        )

    # ------------------------------------------------------------------
    # BlobStore contract
    # ------------------------------------------------------------------

    def put_object(self, name: str, data: bytes) -> str:
        index = self._load_index()
        if self.quota_bytes is not None:
            usage = sum(int(e.get("size", 0)) for e in index.values())
            if usage + len(data) > self.quota_bytes:
                raise StoreError(
                    f"storage quota exceeded: {usage + len(data)} > {self.quota_bytes} bytes"
                )

        object_id = secrets.token_urlsafe(24)
        try:
            self.object_path(object_id).write_bytes(data)
        except OSError as exc:
            raise StoreError(f"cannot write object: {exc}") from exc

        index[object_id] = {
            "name": name,
            "size": len(data),
            "created_at": datetime.now(timezone.utc).isoformat(),
            "public": False,
        }
        try:
            self._save_index(index)
        except StoreError:
            # an object file without an index entry is unreachable
            self.object_path(object_id).unlink(missing_ok=True)
            raise
        logger.debug("stored object %s (%d bytes)", object_id, len(data))
        return object_id

    def get_metadata(self, object_id: str) -> ObjectInfo:
        return self._info(object_id, self._entry(self._load_index(), object_id))

    def get_bytes(self, object_id: str) -> bytes:
        self._entry(self._load_index(), object_id)
        try:
            return self.object_path(object_id).read_bytes()
        except OSError as exc:
            raise StoreError(f"cannot read object {object_id}: {exc}") from exc

    def set_public_readable(self, object_id: str) -> None:
        index = self._load_index()
        self._entry(index, object_id)["public"] = True
        self._save_index(index)

    def delete_object(self, object_id: str) -> None:
        index = self._load_index()
        self._entry(index, object_id)
        try:
            self.object_path(object_id).unlink(missing_ok=True)
        except OSError as exc:
            raise StoreError(f"cannot delete object {object_id}: {exc}") from exc
        del index[object_id]
        self._save_index(index)
        logger.debug("deleted object %s", object_id)

    def list_objects(self, name_contains: Optional[str] = None) -> List[ObjectInfo]:
        index = self._load_index()
        infos = [
            self._info(object_id, entry)
            for object_id, entry in index.items()
            if name_contains is None or name_contains in entry.get("name", "")
        ]
        # newest first, like the remote listing it stands in for
        infos.sort(key=lambda i: i.created_at or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
        return infos

    def get_quota(self) -> StorageQuota:
        index = self._load_index()
        return StorageQuota(
            limit=self.quota_bytes,
            usage=sum(int(e.get("size", 0)) for e in index.values()),
        )
