"""AES-256-GCM sealing of whole artifact payloads.

A sealed payload is the raw GCM output (ciphertext followed by the 16-byte
tag). The nonce is not prepended: it travels in the encoded object name next
to the salt, so the stored bytes are exactly what the cipher produced.
"""
import os
from typing import Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from keyvault.core.exceptions import TamperOrKeyError

NONCE_SIZE = 12
TAG_SIZE = 16


def generate_nonce() -> bytes:
    return os.urandom(NONCE_SIZE)


def seal(plaintext: bytes, key: bytes | bytearray) -> Tuple[bytes, bytes]:
    """
    Encrypt ``plaintext`` under ``key`` and return ``(nonce, ciphertext)``.

    A fresh random nonce is drawn on every call; callers cannot supply one.
    """
    nonce = generate_nonce()
    aead = AESGCM(key)
    return nonce, aead.encrypt(nonce, plaintext, None)


def open_sealed(ciphertext: bytes, key: bytes | bytearray, nonce: bytes) -> bytes:
    """
    Verify and decrypt a payload produced by :func:`seal`.

    Any failure (wrong key, modified bytes, truncated input, bad nonce)
    raises :class:`TamperOrKeyError` with the same message.
    """
    if len(nonce) != NONCE_SIZE or len(ciphertext) < TAG_SIZE:
        raise TamperOrKeyError("Decryption failed. Invalid key or corrupted data.")
    aead = AESGCM(key)
    try:
        return aead.decrypt(nonce, ciphertext, None)
    except InvalidTag:
        raise TamperOrKeyError("Decryption failed. Invalid key or corrupted data.") from None


def zeroize(buf: bytearray) -> None:
    """Overwrite a key buffer in place (best effort; copies made by the runtime survive)."""
    for i in range(len(buf)):
        buf[i] = 0
