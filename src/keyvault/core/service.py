"""
Artifact service: the protocol wired to a blob store.

This is the only layer that performs store I/O. It logs object ids and
outcomes; it never logs secrets, share links or plaintext.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from keyvault.security.kdf import PBKDF2_ITERATIONS
from keyvault.store.base import BlobStore, StorageQuota

from . import protocol
from .codec import NAME_SUFFIX, decode_name
from .exceptions import MalformedNameError, StoreError
from .locator import build_locator, parse_locator
from .models import ArtifactListing, OpenedArtifact, Policy, UploadResult

logger = logging.getLogger(__name__)


class ArtifactService:
    """
    Upload, share, download and manage encrypted artifacts in one store.

    ``base_origin`` is the origin share links are built against, e.g.
    ``https://keyvault.example``.
    """

    def __init__(
        self,
        store: BlobStore,
        base_origin: str,
        iterations: int = PBKDF2_ITERATIONS,
    ):
        self.store = store
        self.base_origin = base_origin
        self.iterations = iterations

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload(
        self,
        data: bytes,
        original_name: str,
        secret: str,
        policy: Optional[Policy] = None,
    ) -> UploadResult:
        """
        Seal ``data``, store it, make it publicly readable and return the
        share link.

        Public read access is required for link holders without store
        credentials; confidentiality rests entirely on the secret.
        """
        prepared = protocol.prepare_upload(
            data, original_name, secret, policy=policy, iterations=self.iterations
        )
        object_id = self.store.put_object(prepared.encoded_name, prepared.ciphertext)
        try:
            self.store.set_public_readable(object_id)
        except StoreError:
            logger.warning("could not publish artifact %s; removing it", object_id)
            try:
                self.store.delete_object(object_id)
            except StoreError as exc:
                logger.error("could not remove unpublished artifact %s: %s", object_id, exc)
            raise
        logger.info("uploaded artifact %s (%d bytes sealed)", object_id, len(prepared.ciphertext))
        return UploadResult(
            object_id=object_id,
            encoded_name=prepared.encoded_name,
            share_url=build_locator(object_id, secret, self.base_origin),
        )

    def upload_file(
        self,
        source_path: str | Path,
        secret: str,
        policy: Optional[Policy] = None,
    ) -> UploadResult:
        src = Path(source_path).expanduser()
        return self.upload(src.read_bytes(), src.name, secret, policy=policy)

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    def download(
        self,
        object_id: str,
        secret: str,
        now: datetime | int | float | None = None,
        download_count: int = 0,
        region: Optional[str] = None,
    ) -> OpenedArtifact:
        """
        Fetch and open an artifact.

        The name is decoded and the policy applied before the ciphertext is
        fetched, so a denied artifact costs one metadata call.
        """
        info = self.store.get_metadata(object_id)
        meta = protocol.inspect_name(
            info.name, now=now, download_count=download_count, region=region
        )
        ciphertext = self.store.get_bytes(object_id)
        opened = protocol.open_artifact(meta, ciphertext, secret, iterations=self.iterations)
        logger.info("opened artifact %s", object_id)
        return opened

    def download_from_locator(
        self,
        url: str,
        now: datetime | int | float | None = None,
        download_count: int = 0,
        region: Optional[str] = None,
    ) -> OpenedArtifact:
        locator = parse_locator(url)
        return self.download(
            locator.object_id,
            locator.secret,
            now=now,
            download_count=download_count,
            region=region,
        )

    # ------------------------------------------------------------------
    # Management
    # ------------------------------------------------------------------

    def list_artifacts(self) -> List[ArtifactListing]:
        """
        List every object whose name decodes as an artifact.

        Objects with malformed names are skipped; they are either not ours
        or have been renamed by hand.
        """
        listings = []
        for info in self.store.list_objects(name_contains=NAME_SUFFIX):
            try:
                meta = decode_name(info.name)
            except MalformedNameError as exc:
                logger.debug("skipping object %s: %s", info.object_id, exc)
                continue
            listings.append(
                ArtifactListing(
                    object_id=info.object_id,
                    original_name=meta.original_name,
                    size=info.size,
                    created_at=info.created_at,
                    policy=meta.policy,
                )
            )
        return listings

    def share_link(self, object_id: str, secret: str) -> str:
        """Rebuild the share link for an artifact the caller still has the secret for."""
        decode_name(self.store.get_metadata(object_id).name)
        return build_locator(object_id, secret, self.base_origin)

    def delete(self, object_id: str) -> None:
        self.store.delete_object(object_id)
        logger.info("deleted artifact %s", object_id)

    def quota(self) -> StorageQuota:
        return self.store.get_quota()
