"""
Sealing and opening of self-describing artifacts.

An artifact is in one of two states: *sealed* (ciphertext plus encoded name,
as kept by the blob store) or *opened* (plaintext in memory). The only
transition is :func:`complete_download`, and only after the policy admits.
Opened artifacts are never written back.

These functions do no I/O. :mod:`keyvault.core.service` wires them to a
blob store.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from keyvault.security.crypto import open_sealed, seal, zeroize
from keyvault.security.kdf import PBKDF2_ITERATIONS, derive_key, generate_salt

from . import policy as policy_evaluator
from .codec import decode_name, encode_name
from .models import ArtifactMetadata, OpenedArtifact, Policy, PreparedUpload


def prepare_upload(
    plaintext: bytes,
    original_name: str,
    secret: bytes | str,
    policy: Optional[Policy] = None,
    iterations: int = PBKDF2_ITERATIONS,
) -> PreparedUpload:
    """
    Encrypt ``plaintext`` and build the object name that describes it.

    A fresh salt and nonce are drawn for every call, so uploading the same
    file twice with the same secret yields unrelated artifacts.
    """
    salt = generate_salt()
    key = derive_key(secret, salt, iterations=iterations)
    try:
        nonce, ciphertext = seal(plaintext, key)
    finally:
        zeroize(key)

    encoded_name = encode_name(
        ArtifactMetadata(
            original_name=original_name,
            salt=salt,
            nonce=nonce,
            policy=policy if policy is not None else Policy(),
        )
    )
    return PreparedUpload(ciphertext=ciphertext, encoded_name=encoded_name)


def inspect_name(
    encoded_name: str,
    now: datetime | int | float | None = None,
    download_count: int = 0,
    region: Optional[str] = None,
) -> ArtifactMetadata:
    """
    Decode a name and apply its policy.

    Raises ``MalformedNameError`` or ``PolicyViolation``. Callers that fetch
    ciphertext over the network should call this first so a denied artifact
    is never downloaded.
    """
    meta = decode_name(encoded_name)
    policy_evaluator.check(
        meta.policy, now=now, download_count=download_count, region=region
    ).raise_for_denial()
    return meta


def open_artifact(
    meta: ArtifactMetadata,
    ciphertext: bytes,
    secret: bytes | str,
    iterations: int = PBKDF2_ITERATIONS,
) -> OpenedArtifact:
    """Derive the key from ``secret`` and the stored salt, then decrypt."""
    key = derive_key(secret, meta.salt, iterations=iterations)
    try:
        plaintext = open_sealed(ciphertext, key, meta.nonce)
    finally:
        zeroize(key)
    return OpenedArtifact(
        plaintext=plaintext,
        original_name=meta.original_name,
        policy=meta.policy,
    )


def complete_download(
    encoded_name: str,
    ciphertext: bytes,
    secret: bytes | str,
    now: datetime | int | float | None = None,
    download_count: int = 0,
    region: Optional[str] = None,
    iterations: int = PBKDF2_ITERATIONS,
) -> OpenedArtifact:
    """
    Open a sealed artifact.

    Order matters: the name is decoded and the policy checked before any key
    is derived, so a denied request spends no time on PBKDF2 and learns
    nothing about whether its secret was right.
    """
    meta = inspect_name(
        encoded_name, now=now, download_count=download_count, region=region
    )
    return open_artifact(meta, ciphertext, secret, iterations=iterations)
