"""
Vault Error Model
=================

A single exception type tagged with an ErrorKind.

Callers branch on ``err.kind`` instead of catching subclasses:

    try:
        container.load(password, data)
    except VaultError as err:
        if err.kind is ErrorKind.CORRUPTED_INPUT:
            ...  # wrong password or damaged file

Security Notes:
    - Messages never carry passwords, keys or record content
    - Wrong password and malformed data share CORRUPTED_INPUT on purpose
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional


class ErrorKind(Enum):
    """Closed set of failure categories."""
    FILE_ACCESS = "file_access"
    CORRUPTED_INPUT = "corrupted_input"
    INVALID_LOOKUP = "invalid_lookup"


class VaultError(Exception):
    """
    Raised by every vault operation that fails.

    Attributes:
        kind: Which failure category this is
        path: File involved (FILE_ACCESS only)
        record_kind: Record kind name involved (INVALID_LOOKUP only)
        uid: Identifier that failed to resolve (INVALID_LOOKUP only)
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        path: Optional[Path] = None,
        record_kind: Optional[str] = None,
        uid: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.path = path
        self.record_kind = record_kind
        self.uid = uid

    @classmethod
    def file_access(cls, path: Path | str, action: str = "access") -> VaultError:
        path = Path(path)
        return cls(ErrorKind.FILE_ACCESS, f"file {action} failed: {path}", path=path)

    @classmethod
    def corrupted_input(cls) -> VaultError:
        return cls(ErrorKind.CORRUPTED_INPUT, "corrupted input")

    @classmethod
    def invalid_lookup(cls, record_kind: object, uid: Optional[str] = None) -> VaultError:
        name = getattr(record_kind, "value", None) or str(record_kind)
        if uid is None:
            message = f"invalid lookup: unknown record kind {name!r}"
        else:
            message = f"invalid lookup: no {name} with uid {uid!r}"
        return cls(ErrorKind.INVALID_LOOKUP, message, record_kind=name, uid=uid)

    def __repr__(self) -> str:
        return f"VaultError(kind={self.kind.name}, message={str(self)!r})"
