"""
Vault store - record model and the encrypted container.
"""

from lockbox.core.store.records import (
    Attachment,
    Contact,
    Credential,
    Note,
    Record,
    RecordKind,
)
from lockbox.core.store.container import Container

__all__ = [
    "Attachment",
    "Contact",
    "Container",
    "Credential",
    "Note",
    "Record",
    "RecordKind",
]
