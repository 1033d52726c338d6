"""
Lockbox File Operations Module
==============================

Handles plaintext attachment files on disk.

Components:
- secure_delete.py: overwrite-then-delete for plaintext files
- mapping.py: attachment upload, map to temp file, unmap
"""

from lockbox.core.file_ops.secure_delete import (
    DEFAULT_ERASE_ITERATIONS,
    SecureEraser,
    secure_erase,
)
from lockbox.core.file_ops.mapping import AttachmentMapper, default_mapper

__all__ = [
    "DEFAULT_ERASE_ITERATIONS",
    "SecureEraser",
    "secure_erase",
    "AttachmentMapper",
    "default_mapper",
]
