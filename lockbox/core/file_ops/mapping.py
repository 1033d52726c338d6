"""
Attachment Mapping
==================

Moves attachment bytes between the vault and plaintext files on disk.

State per attachment:
    Unmapped --map()--> Mapped(path)
    Mapped   --map()--> Mapped(path)   (same path, nothing written)
    Mapped   --unmap()--> Unmapped     (plaintext copy securely erased)
    Unmapped --unmap()--> Unmapped     (no-op)

Security Notes:
    - Mapped files are created with mkstemp (mode 0600) inside a private
      0700 directory
    - A mapped file holds plaintext until unmap() erases it
"""

from __future__ import annotations

import base64
import binascii
import contextlib
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Final, Optional

from lockbox.core.errors import VaultError
from lockbox.core.file_ops.secure_delete import DEFAULT_ERASE_ITERATIONS, SecureEraser
from lockbox.utils.paths import get_secure_temp_dir

if TYPE_CHECKING:
    from lockbox.core.store.records import Attachment

MAPPED_FILE_PREFIX: Final[str] = "lockbox-"
_SAFE_SUFFIX: Final[re.Pattern[str]] = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


class AttachmentMapper:
    """
    Upload, map and unmap attachment records.

    Usage:
        mapper = AttachmentMapper()
        mapper.upload(attachment, "report.pdf", secure_erase=True)
        path = mapper.map(attachment)
        ...  # open path in a viewer
        mapper.unmap(attachment)
    """

    __slots__ = ("_eraser", "_temp_dir", "_log")

    def __init__(
        self,
        eraser: Optional[SecureEraser] = None,
        temp_dir: Optional[Path] = None,
    ) -> None:
        """
        Initialize the mapper.

        Args:
            eraser: Secure eraser for source files and mapped copies
            temp_dir: Directory for mapped files (private temp dir if None)
        """
        self._eraser = eraser or SecureEraser()
        self._temp_dir = temp_dir
        self._log = logging.getLogger("lockbox.mapping")

    @property
    def eraser(self) -> SecureEraser:
        return self._eraser

    def upload(
        self,
        attachment: Attachment,
        path: Path | str,
        secure_erase: bool = False,
        iterations: int = DEFAULT_ERASE_ITERATIONS,
    ) -> None:
        """
        Store a file's bytes in the attachment.

        Args:
            attachment: Record whose content is replaced
            path: Source file
            secure_erase: Erase the source file after reading it
            iterations: Overwrite passes for the erase

        Raises:
            VaultError: FILE_ACCESS if the source cannot be read or erased
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise VaultError.file_access(path, "read") from e

        attachment.content = base64.b64encode(data).decode("ascii")
        self._log.debug("Uploaded %d bytes into attachment %s", len(data), attachment.uid or "<new>")

        if secure_erase:
            self._eraser.erase(path, iterations)

    def map(self, attachment: Attachment) -> Path:
        """
        Write the attachment to a plaintext temp file.

        Returns the existing path if the attachment is already mapped.

        Raises:
            VaultError: CORRUPTED_INPUT if the content is not valid base64,
                FILE_ACCESS if the temp file cannot be created or written
        """
        if attachment.mapped_path is not None:
            return attachment.mapped_path

        try:
            data = base64.b64decode(attachment.content, validate=True)
        except (binascii.Error, ValueError) as e:
            raise VaultError.corrupted_input() from e

        suffix = Path(attachment.title).suffix
        if not _SAFE_SUFFIX.match(suffix):
            suffix = ""

        directory = self._temp_dir
        try:
            if directory is None:
                directory = get_secure_temp_dir()
            fd, name = tempfile.mkstemp(prefix=MAPPED_FILE_PREFIX, suffix=suffix, dir=directory)
        except OSError as e:
            raise VaultError.file_access(directory or Path(tempfile.gettempdir()), "create") from e

        mapped = Path(name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except OSError as e:
            with contextlib.suppress(OSError):
                mapped.unlink()
            raise VaultError.file_access(mapped, "write") from e

        attachment.mapped_path = mapped
        self._log.debug("Mapped attachment %s to %s", attachment.uid, mapped)
        return mapped

    def unmap(
        self,
        attachment: Attachment,
        iterations: int = DEFAULT_ERASE_ITERATIONS,
    ) -> None:
        """
        Securely erase the mapped copy, if any.

        The mapped path is kept when the erase fails so it can be retried.

        Raises:
            VaultError: FILE_ACCESS if the erase fails
        """
        if attachment.mapped_path is None:
            return

        self._eraser.erase(attachment.mapped_path, iterations)
        self._log.debug("Unmapped attachment %s", attachment.uid)
        attachment.mapped_path = None


_default_mapper: Optional[AttachmentMapper] = None


def default_mapper() -> AttachmentMapper:
    """Get the process-wide mapper used by Attachment's convenience methods."""
    global _default_mapper
    if _default_mapper is None:
        _default_mapper = AttachmentMapper()
    return _default_mapper
