"""
Key Derivation Functions
========================

Turns a master password into a 32-byte AES-256 key.

Implements:
    - derive_key: the vault file format's native transform (zero-pad/truncate)
    - derive_key_argon2: Argon2id stretching, an opt-in upgrade

WARNING:
    derive_key is neither salted nor stretched. Any password is tried as fast
    as AES can run. It stays the default only so existing vault files open.
    New deployments should pass derive_key_argon2 (with a stored salt) to
    Container as its key_derivation.
"""

from __future__ import annotations

from typing import Callable, Final

from argon2.low_level import Type, hash_secret_raw

KEY_SIZE: Final[int] = 32  # 256 bits

# Argon2id parameters (OWASP recommended)
ARGON2_TIME_COST: Final[int] = 3
ARGON2_MEMORY_COST: Final[int] = 65536  # 64 MB
ARGON2_PARALLELISM: Final[int] = 4
ARGON2_MIN_SALT: Final[int] = 16

KeyDerivation = Callable[[str], bytes]


def derive_key(password: str) -> bytes:
    """
    Derive the vault key from a password.

    The UTF-8 bytes of the password are zero-padded on the right to 32 bytes,
    or truncated to 32 bytes if longer.

    Args:
        password: Master password

    Returns:
        32-byte key
    """
    raw = password.encode("utf-8")[:KEY_SIZE]
    return raw.ljust(KEY_SIZE, b"\x00")


def derive_key_argon2(password: str, salt: bytes) -> bytes:
    """
    Derive a key from password using Argon2id.

    Args:
        password: Master password
        salt: Random salt, at least 16 bytes, stored by the caller

    Returns:
        32-byte key

    Raises:
        ValueError: If the salt is too short
    """
    if len(salt) < ARGON2_MIN_SALT:
        raise ValueError(f"Salt must be at least {ARGON2_MIN_SALT} bytes")

    return hash_secret_raw(
        secret=password.encode("utf-8"),
        salt=salt,
        time_cost=ARGON2_TIME_COST,
        memory_cost=ARGON2_MEMORY_COST,
        parallelism=ARGON2_PARALLELISM,
        hash_len=KEY_SIZE,
        type=Type.ID,
    )


def argon2_key_derivation(salt: bytes) -> KeyDerivation:
    """Bind a salt to derive_key_argon2 so it fits Container's key_derivation slot."""
    if len(salt) < ARGON2_MIN_SALT:
        raise ValueError(f"Salt must be at least {ARGON2_MIN_SALT} bytes")

    def _derive(password: str) -> bytes:
        return derive_key_argon2(password, salt)

    return _derive
