"""
Lockbox - An Offline Encrypted Vault
====================================

Keeps credentials, notes, file attachments and contacts in a single
password-protected file.

Security Notice:
- The vault file carries no integrity tag; a wrong password surfaces as
  CORRUPTED_INPUT when the decrypted bytes fail to parse
- The default key derivation and fixed IV reproduce the existing file
  format; see lockbox.core.crypto.kdf for the Argon2id upgrade point
- Plaintext attachment copies are overwritten before deletion
"""

from lockbox.core.config import LockboxConfig
from lockbox.core.errors import ErrorKind, VaultError
from lockbox.core.logging import configure_logging, get_secure_logger
from lockbox.core.store import (
    Attachment,
    Contact,
    Container,
    Credential,
    Note,
    RecordKind,
)

__version__ = "0.1.0"

__all__ = [
    "Attachment",
    "Contact",
    "Container",
    "Credential",
    "ErrorKind",
    "LockboxConfig",
    "Note",
    "RecordKind",
    "VaultError",
    "configure_logging",
    "get_secure_logger",
    "__version__",
]
