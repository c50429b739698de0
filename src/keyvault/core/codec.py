"""
Encoding of artifact metadata into a single object name.

Name layout::

    <original name>_<salt>_<nonce>_<policy>.encrypted

``salt`` and ``nonce`` are raw bytes and ``policy`` is compact JSON, each in
base64 with ``-`` in place of ``/`` and the trailing padding removed. The
URL-safe alphabet is not usable here because it contains ``_``, the segment
delimiter. The decoder also accepts the standard alphabet and padded input,
so names written by browser clients that used plain ``btoa`` still decode.

The original name is passed through untouched and may itself contain ``_``:
the decoder always takes the *last three* segments as salt, nonce and policy
and rejoins everything before them.

Object names are human-editable in most stores, so :func:`decode_name`
treats its input as hostile and validates every segment.
"""

from __future__ import annotations

import base64
import binascii
import json

from keyvault.security.crypto import NONCE_SIZE
from keyvault.security.kdf import SALT_SIZE

from .exceptions import MalformedNameError
from .models import ArtifactMetadata, Policy

NAME_DELIMITER = "_"
NAME_SUFFIX = ".encrypted"


def _b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii").replace("/", "-").rstrip("=")


def _b64decode(segment: str, what: str) -> bytes:
    padded = segment.replace("-", "/") + "=" * (-len(segment) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedNameError(f"{what} segment is not valid base64") from exc


def encode_policy(policy: Policy) -> str:
    payload = json.dumps(policy.to_dict(), separators=(",", ":"), sort_keys=True)
    return _b64encode(payload.encode("utf-8"))


def decode_policy(segment: str) -> Policy:
    raw = _b64decode(segment, "policy")
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError, RecursionError) as exc:
        raise MalformedNameError("policy segment is not valid JSON") from exc
    try:
        return Policy.from_dict(data)
    except (TypeError, ValueError) as exc:
        raise MalformedNameError(f"policy segment is invalid: {exc}") from exc


def encode_name(meta: ArtifactMetadata) -> str:
    """Encode metadata into an object name."""
    if len(meta.salt) != SALT_SIZE:
        raise ValueError(f"salt must be {SALT_SIZE} bytes")
    if len(meta.nonce) != NONCE_SIZE:
        raise ValueError(f"nonce must be {NONCE_SIZE} bytes")
    segments = [
        meta.original_name,
        _b64encode(meta.salt),
        _b64encode(meta.nonce),
        encode_policy(meta.policy),
    ]
    return NAME_DELIMITER.join(segments) + NAME_SUFFIX


def decode_name(name: str) -> ArtifactMetadata:
    """
    Parse an object name produced by :func:`encode_name`.

    Raises :class:`MalformedNameError` for anything that is not a complete,
    well-formed encoded name.
    """
    if not isinstance(name, str) or not name.endswith(NAME_SUFFIX):
        raise MalformedNameError("name does not carry the encrypted artifact suffix")

    parts = name[: -len(NAME_SUFFIX)].split(NAME_DELIMITER)
    if len(parts) < 4:
        raise MalformedNameError(
            f"expected at least 4 '{NAME_DELIMITER}'-separated segments, got {len(parts)}"
        )

    salt_b64, nonce_b64, policy_b64 = parts[-3:]
    original_name = NAME_DELIMITER.join(parts[:-3])

    salt = _b64decode(salt_b64, "salt")
    if len(salt) != SALT_SIZE:
        raise MalformedNameError(f"salt must decode to {SALT_SIZE} bytes, got {len(salt)}")
    nonce = _b64decode(nonce_b64, "nonce")
    if len(nonce) != NONCE_SIZE:
        raise MalformedNameError(f"nonce must decode to {NONCE_SIZE} bytes, got {len(nonce)}")

    return ArtifactMetadata(
        original_name=original_name,
        salt=salt,
        nonce=nonce,
        policy=decode_policy(policy_b64),
    )


def is_encoded_name(name: str) -> bool:
    """Cheap check used when scanning listings; a True result may still fail to decode."""
    return isinstance(name, str) and name.endswith(NAME_SUFFIX)
