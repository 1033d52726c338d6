"""
Vault Record Model
==================

The four record kinds kept in a vault and their document schema.

Each record class declares its fields as (attribute, document key) pairs.
to_dict()/from_dict() walk that schema, so the JSON shape is written down
exactly once per kind.

Record kinds and their document arrays:
    CREDENTIAL -> "logins"
    NOTE       -> "notes"
    ATTACHMENT -> "files"
    CONTACT    -> "contacts"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Final, Mapping, Optional

from lockbox.core.config import LockboxConfig
from lockbox.core.errors import VaultError
from lockbox.core.file_ops.mapping import AttachmentMapper, default_mapper
from lockbox.core.file_ops.secure_delete import DEFAULT_ERASE_ITERATIONS
from lockbox.core.store.timestamps import format_timestamp, parse_timestamp, to_local_naive
from lockbox.utils.passwords import DEFAULT_SPECIAL_CHARACTERS, generate_password


class RecordKind(Enum):
    """Record kinds a vault holds."""
    CREDENTIAL = "credential"
    NOTE = "note"
    ATTACHMENT = "attachment"
    CONTACT = "contact"

    @property
    def collection(self) -> str:
        """Name of this kind's array in the vault document."""
        return _COLLECTIONS[self]

    @classmethod
    def parse(cls, value: RecordKind | str) -> RecordKind:
        """
        Resolve a kind from a member or its string value.

        Raises:
            VaultError: INVALID_LOOKUP if the value names no kind
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise VaultError.invalid_lookup(value) from None


_COLLECTIONS: Final[dict[RecordKind, str]] = {
    RecordKind.CREDENTIAL: "logins",
    RecordKind.NOTE: "notes",
    RecordKind.ATTACHMENT: "files",
    RecordKind.CONTACT: "contacts",
}


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"Field {key!r} must be a string")
    return value


class Record:
    """Shared schema handling for the record dataclasses."""

    KIND: ClassVar[RecordKind]
    # (attribute, document key) for plain string fields
    FIELDS: ClassVar[tuple[tuple[str, str], ...]]

    uid: str
    category: str

    @property
    def display_title(self) -> str:
        raise NotImplementedError

    def to_dict(self) -> dict[str, str]:
        return {key: getattr(self, attr) for attr, key in self.FIELDS}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Record:
        """
        Build a record from its document object.

        Raises:
            KeyError: If a field is missing
            TypeError: If the object or a field has the wrong type
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"{cls.KIND.value} entry must be an object")
        return cls(**{attr: _require_str(data, key) for attr, key in cls.FIELDS})


@dataclass
class Credential(Record):
    """Login credentials for a site or service."""

    KIND: ClassVar[RecordKind] = RecordKind.CREDENTIAL
    FIELDS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("uid", "uid"),
        ("title", "title"),
        ("category", "category"),
        ("username", "username"),
        ("secret", "password"),
        ("url", "url"),
    )

    uid: str = ""
    title: str = ""
    category: str = ""
    username: str = ""
    secret: str = ""
    url: str = ""
    last_changed: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.last_changed is not None:
            self.last_changed = to_local_naive(self.last_changed)

    @property
    def display_title(self) -> str:
        return self.title

    def generate_secret(
        self,
        length: Optional[int] = None,
        special_characters: str = DEFAULT_SPECIAL_CHARACTERS,
    ) -> str:
        """
        Replace the secret with a random password and stamp the change time.

        Args:
            length: Password length (configured security.password_length if None)
            special_characters: Characters added to [a-zA-Z0-9]

        Returns:
            The new secret
        """
        if length is None:
            length = LockboxConfig.get_instance().security.password_length
        self.secret = generate_password(length, special_characters)
        self.last_changed = datetime.now().replace(microsecond=0)
        return self.secret

    def to_dict(self) -> dict[str, str]:
        data = super().to_dict()
        data["last_change"] = format_timestamp(self.last_changed)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Credential:
        record = super().from_dict(data)
        record.last_changed = parse_timestamp(_require_str(data, "last_change"))
        return record


@dataclass
class Note(Record):
    """Free-text note."""

    KIND: ClassVar[RecordKind] = RecordKind.NOTE
    FIELDS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("uid", "uid"),
        ("title", "title"),
        ("category", "category"),
        ("content", "content"),
    )

    uid: str = ""
    title: str = ""
    category: str = ""
    content: str = ""

    @property
    def display_title(self) -> str:
        return self.title


@dataclass
class Attachment(Record):
    """
    Binary file stored inside the vault.

    `content` holds the base64 text of the file. `mapped_path` points to a
    plaintext copy on disk while the attachment is mapped; it is never
    saved and takes no part in equality.
    """

    KIND: ClassVar[RecordKind] = RecordKind.ATTACHMENT
    FIELDS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("uid", "uid"),
        ("title", "title"),
        ("category", "category"),
        ("content", "content"),
    )

    uid: str = ""
    title: str = ""
    category: str = ""
    content: str = ""
    mapped_path: Optional[Path] = field(default=None, compare=False, repr=False)

    @property
    def display_title(self) -> str:
        return self.title

    @property
    def is_mapped(self) -> bool:
        return self.mapped_path is not None

    def upload(
        self,
        path: Path | str,
        secure_erase: bool = False,
        iterations: int = DEFAULT_ERASE_ITERATIONS,
        mapper: Optional[AttachmentMapper] = None,
    ) -> None:
        (mapper or default_mapper()).upload(self, path, secure_erase, iterations)

    def map(self, mapper: Optional[AttachmentMapper] = None) -> Path:
        return (mapper or default_mapper()).map(self)

    def unmap(
        self,
        iterations: int = DEFAULT_ERASE_ITERATIONS,
        mapper: Optional[AttachmentMapper] = None,
    ) -> None:
        (mapper or default_mapper()).unmap(self, iterations)


@dataclass
class Contact(Record):
    """Address book entry."""

    KIND: ClassVar[RecordKind] = RecordKind.CONTACT
    FIELDS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("uid", "uid"),
        ("category", "category"),
        ("first_name", "first_name"),
        ("last_name", "last_name"),
        ("email", "email"),
        ("phone", "phone"),
        ("street", "street"),
        ("zip", "zip"),
        ("city", "city"),
        ("country", "country"),
        ("comment", "comment"),
    )

    uid: str = ""
    category: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    street: str = ""
    zip: str = ""
    city: str = ""
    country: str = ""
    comment: str = ""

    def title(self) -> str:
        return f"{self.last_name}, {self.first_name}"

    @property
    def display_title(self) -> str:
        return self.title()


RECORD_TYPES: Final[dict[RecordKind, type[Record]]] = {
    RecordKind.CREDENTIAL: Credential,
    RecordKind.NOTE: Note,
    RecordKind.ATTACHMENT: Attachment,
    RecordKind.CONTACT: Contact,
}
