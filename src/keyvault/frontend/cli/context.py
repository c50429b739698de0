"""Small helper to build the keyvault app context for the CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from keyvault.core.service import ArtifactService
from keyvault.store.local import LocalBlobStore

DEFAULT_ORIGIN = "https://keyvault.local"


@dataclass
class AppContext:
    """Container for runtime objects the commands need."""

    store: LocalBlobStore
    service: ArtifactService
    origin: str


def _quota_from_env() -> Optional[int]:
    raw = os.getenv("KEYVAULT_QUOTA_BYTES")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"KEYVAULT_QUOTA_BYTES must be an integer, got {raw!r}") from None


def build_context(
    store_root: Optional[str | Path] = None,
    origin: Optional[str] = None,
    quota_bytes: Optional[int] = None,
) -> AppContext:
    """
    Build the store and service from arguments, falling back to the
    environment:

    - ``KEYVAULT_STORE_ROOT``: store directory (default ``~/.keyvault``)
    - ``KEYVAULT_APP_ORIGIN``: origin used in share links
    - ``KEYVAULT_QUOTA_BYTES``: optional byte quota for the local store
    """
    root = store_root or os.getenv("KEYVAULT_STORE_ROOT") or Path.home() / ".keyvault"
    origin = origin or os.getenv("KEYVAULT_APP_ORIGIN") or DEFAULT_ORIGIN
    if quota_bytes is None:
        quota_bytes = _quota_from_env()

    store = LocalBlobStore(root, quota_bytes=quota_bytes)
    service = ArtifactService(store, origin)
    return AppContext(store=store, service=service, origin=origin)
