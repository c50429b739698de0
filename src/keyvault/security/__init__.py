"""Security helpers: key derivation, AEAD sealing and secret generation for keyvault.

This package provides the primitives the artifact protocol is built on:
- PBKDF2-HMAC-SHA256 key derivation from a human secret and a per-artifact salt
- AES-256-GCM sealing/opening of whole payloads with a fresh nonce per seal
- human-readable secret generation

Nothing here does I/O or keeps state between calls.
"""

from .kdf import PBKDF2_ITERATIONS, SALT_SIZE, KEY_SIZE, generate_salt, derive_key
from .crypto import NONCE_SIZE, generate_nonce, seal, open_sealed, zeroize
from .keygen import generate_human_key

__all__ = [
    "PBKDF2_ITERATIONS",
    "SALT_SIZE",
    "KEY_SIZE",
    "NONCE_SIZE",
    "generate_salt",
    "derive_key",
    "generate_nonce",
    "seal",
    "open_sealed",
    "zeroize",
    "generate_human_key",
]
