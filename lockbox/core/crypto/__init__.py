"""
Lockbox Cryptographic Core
==========================

Password-to-key derivation and the vault's block cipher codec.

Architecture:
    1. derive_key: zero-pad/truncate the password to 32 bytes (file format)
    2. derive_key_argon2: Argon2id stretching (opt-in upgrade)
    3. CbcCtsCipher: AES-256-CBC with ciphertext stealing, fixed zero IV

WARNING: The default construction has no salt, no stretching, a fixed IV
         and no authentication tag. It exists to read and write the vault
         file format, not as a model for new designs.
"""

from lockbox.core.crypto.cbc_cts import CbcCtsCipher, CipherError, decrypt, encrypt
from lockbox.core.crypto.kdf import argon2_key_derivation, derive_key, derive_key_argon2

__all__ = [
    "CbcCtsCipher",
    "CipherError",
    "encrypt",
    "decrypt",
    "derive_key",
    "derive_key_argon2",
    "argon2_key_derivation",
]
