"""Password-based key derivation for keyvault artifacts."""
import os

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

# Raising the iteration count changes every derived key. The encoded name has
# no algorithm field yet, so existing artifacts would stop opening.
PBKDF2_ITERATIONS = 100_000
SALT_SIZE = 16
KEY_SIZE = 32  # 256 bits


def generate_salt(length: int = SALT_SIZE) -> bytes:
    """Return a cryptographically secure random salt."""
    return os.urandom(length)


def derive_key(
    secret: bytes | str,
    salt: bytes,
    iterations: int = PBKDF2_ITERATIONS,
) -> bytearray:
    """
    Derive the artifact key from a human secret using PBKDF2-HMAC-SHA256.

    The same (secret, salt) pair always gives the same key; the downloader
    has no other way to rebuild it. The result is a ``bytearray`` so the
    caller can wipe it with :func:`keyvault.security.crypto.zeroize`.
    """
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    if not secret:
        raise ValueError("Secret must not be empty")
    if len(salt) != SALT_SIZE:
        raise ValueError(f"Salt must be exactly {SALT_SIZE} bytes, got {len(salt)}")

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=bytes(salt),
        iterations=iterations,
    )
    return bytearray(kdf.derive(secret))
