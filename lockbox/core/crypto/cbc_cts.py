"""
AES-256-CBC with Ciphertext Stealing
====================================

Length-preserving block cipher codec for the vault file.

Construction:
    - AES with a 256-bit key, 16-byte blocks
    - CBC chaining with a fixed all-zero IV
    - Ciphertext stealing, variant CS3: the last two ciphertext blocks are
      always swapped and the final one truncated to the plaintext tail
    - Exactly one block: plain single-block CBC
    - Under one block: XOR with AES_k(IV), truncated to the input length

Security Properties:
    - Output length always equals input length (no padding)
    - NO integrity tag: a wrong key yields garbage, not an error

WARNING:
    The fixed IV makes equal plaintext prefixes encrypt to equal ciphertext
    prefixes under the same key. This is part of the vault file format and
    is kept deliberately. Changing it means changing the format.
"""

from __future__ import annotations

from typing import Final, Protocol

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

AES_KEY_SIZE: Final[int] = 32  # 256 bits
AES_BLOCK_SIZE: Final[int] = 16  # 128 bits
ZERO_IV: Final[bytes] = b"\x00" * AES_BLOCK_SIZE


class CipherError(ValueError):
    """Raised when the block cipher backend rejects an operation."""
    pass


class ByteCodec(Protocol):
    """Anything that can stand in for the vault cipher."""

    def encrypt(self, key: bytes, plaintext: bytes) -> bytes: ...

    def decrypt(self, key: bytes, ciphertext: bytes) -> bytes: ...


def _xor(a: bytes, b: bytes) -> bytes:
    return bytes(x ^ y for x, y in zip(a, b))


class CbcCtsCipher:
    """
    AES-256-CBC-CS3 codec with a zero IV.

    Usage:
        cipher = CbcCtsCipher()
        ciphertext = cipher.encrypt(key, b"document")
        assert cipher.decrypt(key, ciphertext) == b"document"
    """

    __slots__ = ("_iv",)

    def __init__(self, iv: bytes = ZERO_IV) -> None:
        """
        Initialize the codec.

        Args:
            iv: Initialization vector. The vault format uses all zeros.
        """
        if len(iv) != AES_BLOCK_SIZE:
            raise ValueError(f"IV must be exactly {AES_BLOCK_SIZE} bytes")
        self._iv = iv

    def encrypt(self, key: bytes, plaintext: bytes) -> bytes:
        """
        Encrypt plaintext of any length.

        Args:
            key: 32-byte key
            plaintext: Data to encrypt (can be empty)

        Returns:
            Ciphertext of the same length

        Raises:
            ValueError: If the key has the wrong size
            CipherError: If the backend fails
        """
        self._check_key(key)
        size = len(plaintext)

        try:
            if size < AES_BLOCK_SIZE:
                return _xor(plaintext, self._keystream_block(key))
            if size == AES_BLOCK_SIZE:
                return self._cbc_encrypt(key, plaintext)

            full, tail = self._split(size)
            head = self._cbc_encrypt(key, plaintext[:full])
            last = head[-AES_BLOCK_SIZE:]
            padded = plaintext[full:].ljust(AES_BLOCK_SIZE, b"\x00")
            stolen = self._ecb(key, _xor(padded, last), encrypt=True)
            return head[:-AES_BLOCK_SIZE] + stolen + last[:tail]
        except ValueError as e:
            raise CipherError(f"Encryption failed: {e}") from e

    def decrypt(self, key: bytes, ciphertext: bytes) -> bytes:
        """
        Decrypt ciphertext of any length.

        A wrong key does not raise; it produces unrelated bytes.

        Args:
            key: 32-byte key
            ciphertext: Data produced by encrypt()

        Returns:
            Plaintext of the same length

        Raises:
            ValueError: If the key has the wrong size
            CipherError: If the backend fails
        """
        self._check_key(key)
        size = len(ciphertext)

        try:
            if size < AES_BLOCK_SIZE:
                return _xor(ciphertext, self._keystream_block(key))
            if size == AES_BLOCK_SIZE:
                return self._cbc_decrypt(key, ciphertext)

            full, tail = self._split(size)
            prefix = ciphertext[:full - AES_BLOCK_SIZE]
            stolen = ciphertext[full - AES_BLOCK_SIZE:full]
            partial = ciphertext[full:]

            decoded = self._ecb(key, stolen, encrypt=False)
            previous = partial + decoded[tail:]
            last_plain = _xor(decoded[:tail], partial)
            return self._cbc_decrypt(key, prefix + previous) + last_plain
        except ValueError as e:
            raise CipherError(f"Decryption failed: {e}") from e

    @staticmethod
    def _check_key(key: bytes) -> None:
        if len(key) != AES_KEY_SIZE:
            raise ValueError(f"Key must be exactly {AES_KEY_SIZE} bytes")

    @staticmethod
    def _split(size: int) -> tuple[int, int]:
        """Split a length into (bytes before the last block, last block length 1..16)."""
        full = ((size - 1) // AES_BLOCK_SIZE) * AES_BLOCK_SIZE
        return full, size - full

    def _keystream_block(self, key: bytes) -> bytes:
        return self._ecb(key, self._iv, encrypt=True)

    def _cbc_encrypt(self, key: bytes, data: bytes) -> bytes:
        encryptor = Cipher(algorithms.AES(key), modes.CBC(self._iv)).encryptor()
        return encryptor.update(data) + encryptor.finalize()

    def _cbc_decrypt(self, key: bytes, data: bytes) -> bytes:
        decryptor = Cipher(algorithms.AES(key), modes.CBC(self._iv)).decryptor()
        return decryptor.update(data) + decryptor.finalize()

    @staticmethod
    def _ecb(key: bytes, block: bytes, encrypt: bool) -> bytes:
        cipher = Cipher(algorithms.AES(key), modes.ECB())
        context = cipher.encryptor() if encrypt else cipher.decryptor()
        return context.update(block) + context.finalize()


_default_cipher = CbcCtsCipher()


def encrypt(key: bytes, plaintext: bytes) -> bytes:
    """Encrypt with the vault's default codec."""
    return _default_cipher.encrypt(key, plaintext)


def decrypt(key: bytes, ciphertext: bytes) -> bytes:
    """Decrypt with the vault's default codec."""
    return _default_cipher.decrypt(key, ciphertext)
