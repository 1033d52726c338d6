"""
Secure Deletion Module
======================

Overwrites a file with random data before deleting it.

Security Properties:
- Configurable number of overwrite passes
- Every pass rewrites the whole file from offset zero
- Fresh CSPRNG bytes for every pass
- fsync after each pass

Limitations:
    Journaling filesystems, SSD wear levelling and snapshots may keep old
    copies of the data. Overwriting reduces exposure, it does not prove it.
"""

from __future__ import annotations

import logging
import os
import secrets
from pathlib import Path
from typing import Callable, Final

from lockbox.core.errors import VaultError

DEFAULT_ERASE_ITERATIONS: Final[int] = 10
BLOCK_SIZE: Final[int] = 64 * 1024

RandomSource = Callable[[int], bytes]


class SecureEraser:
    """
    Overwrite-then-delete for plaintext files.

    The random source is injectable so tests can observe what was written.

    Usage:
        eraser = SecureEraser()
        eraser.erase(Path("/tmp/plaintext.bin"), iterations=10)
    """

    __slots__ = ("_random_bytes", "_log")

    def __init__(self, random_bytes: RandomSource = secrets.token_bytes) -> None:
        """
        Initialize the eraser.

        Args:
            random_bytes: Callable returning n random bytes (CSPRNG by default)
        """
        self._random_bytes = random_bytes
        self._log = logging.getLogger("lockbox.erase")

    def erase(
        self,
        path: Path | str,
        iterations: int = DEFAULT_ERASE_ITERATIONS,
    ) -> None:
        """
        Overwrite a file `iterations` times, then delete it.

        Args:
            path: File to erase
            iterations: Number of full overwrite passes (0 only deletes)

        Raises:
            ValueError: If iterations is negative
            VaultError: FILE_ACCESS if the file cannot be opened, written
                or deleted
        """
        if iterations < 0:
            raise ValueError("Iterations cannot be negative")

        path = Path(path)

        if not path.is_file():
            raise VaultError.file_access(path, "erase")

        try:
            with open(path, "r+b") as f:
                f.seek(0, os.SEEK_END)
                file_size = f.tell()
                f.seek(0)

                for _ in range(iterations):
                    written = 0
                    while written < file_size:
                        chunk_size = min(BLOCK_SIZE, file_size - written)
                        f.write(self._random_bytes(chunk_size))
                        written += chunk_size

                    f.flush()
                    os.fsync(f.fileno())
                    f.seek(0)

            path.unlink()
        except OSError as e:
            raise VaultError.file_access(path, "erase") from e

        self._log.debug("Erased %s with %d passes", path, iterations)


def secure_erase(
    path: Path | str,
    iterations: int = DEFAULT_ERASE_ITERATIONS,
) -> None:
    """
    Overwrite a file with random data and delete it.

    Args:
        path: File to erase
        iterations: Number of overwrite passes

    Raises:
        VaultError: FILE_ACCESS on any I/O failure
    """
    SecureEraser().erase(path, iterations)
