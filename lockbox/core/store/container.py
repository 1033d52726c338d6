"""
Vault Container
===============

In-memory vault of credentials, notes, attachments and contacts, saved as a
single encrypted document.

Load Flow:
1. Derive the key from the master password
2. Decrypt the file bytes (AES-256-CBC-CTS, zero IV)
3. Parse the UTF-8 JSON document
4. Build typed records for all four collections
5. Swap the new collections in only if every step succeeded

Save Flow is the reverse: records -> JSON -> encrypt -> bytes.

Security Notes:
    - The file has no integrity tag. A wrong password is only noticed when
      the decrypted bytes fail to parse, so it is reported exactly like a
      damaged file (CORRUPTED_INPUT)
    - uids are assigned here and nowhere else
    - Not thread-safe; serialize access externally
"""

from __future__ import annotations

import dataclasses
import json
import logging
import uuid
from pathlib import Path
from typing import Any, Callable, Final, Optional

from lockbox.core.config import LockboxConfig
from lockbox.core.crypto.cbc_cts import ByteCodec, CbcCtsCipher, CipherError
from lockbox.core.crypto.kdf import KeyDerivation, argon2_key_derivation, derive_key
from lockbox.core.errors import VaultError
from lockbox.core.file_ops.mapping import AttachmentMapper
from lockbox.core.file_ops.secure_delete import DEFAULT_ERASE_ITERATIONS, SecureEraser
from lockbox.core.store.records import (
    RECORD_TYPES,
    Attachment,
    Contact,
    Credential,
    Note,
    Record,
    RecordKind,
)

MAX_UID_ATTEMPTS: Final[int] = 16

UidFactory = Callable[[], str]


def _new_uid() -> str:
    return str(uuid.uuid4())


class Container:
    """
    Password store manager.

    Records are grouped by category within each kind; the empty category is
    the root group. Reads return copies, so records only change through
    upsert(), load() and clear().

    Usage:
        vault = Container()
        uid = vault.upsert(RecordKind.NOTE, Note(title="Wifi", content="..."))
        blob = vault.save("master password")

        other = Container()
        other.load("master password", blob)
        note = other.note(uid)
    """

    __slots__ = (
        "_records", "_codec", "_key_derivation", "_uid_factory",
        "_mapper", "_erase_iterations", "_log",
    )

    def __init__(
        self,
        codec: Optional[ByteCodec] = None,
        key_derivation: KeyDerivation = derive_key,
        uid_factory: UidFactory = _new_uid,
        mapper: Optional[AttachmentMapper] = None,
        erase_iterations: int = DEFAULT_ERASE_ITERATIONS,
    ) -> None:
        """
        Initialize an empty container.

        Args:
            codec: Byte cipher (AES-256-CBC-CTS by default)
            key_derivation: Password -> 32-byte key
            uid_factory: Source of new record identifiers
            mapper: Attachment mapper for map_attachment()/unmap_attachment()
            erase_iterations: Default overwrite passes when unmapping
        """
        self._records: dict[RecordKind, list[Record]] = {kind: [] for kind in RecordKind}
        self._codec = codec or CbcCtsCipher()
        self._key_derivation = key_derivation
        self._uid_factory = uid_factory
        self._mapper = mapper or AttachmentMapper()
        self._erase_iterations = erase_iterations
        self._log = logging.getLogger("lockbox.container")

    @classmethod
    def from_config(cls, config: Optional[LockboxConfig] = None) -> Container:
        """Build a container wired to the configured key derivation and temp dir."""
        config = config or LockboxConfig.get_instance()
        security = config.security

        if security.key_derivation == "argon2id":
            key_derivation = argon2_key_derivation(security.argon2_salt)
        else:
            key_derivation = derive_key

        mapper = AttachmentMapper(eraser=SecureEraser(), temp_dir=config.paths.temp_dir)
        return cls(
            key_derivation=key_derivation,
            mapper=mapper,
            erase_iterations=security.erase_iterations,
        )

    @property
    def mapper(self) -> AttachmentMapper:
        return self._mapper

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self, password: str, data: bytes) -> None:
        """
        Replace all records with the contents of an encrypted vault.

        The container is left untouched if anything fails.

        Args:
            password: Master password
            data: Encrypted vault bytes

        Raises:
            VaultError: CORRUPTED_INPUT for a wrong password or damaged data
        """
        key = self._key_derivation(password)

        try:
            plaintext = self._codec.decrypt(key, bytes(data))
            document = json.loads(plaintext.decode("utf-8"))
            records = self._parse_document(document)
        except (CipherError, ValueError, KeyError, TypeError, RecursionError) as e:
            self._log.warning("Vault could not be loaded: wrong password or corrupted data")
            raise VaultError.corrupted_input() from e

        self._records = records
        self._log.info("Vault loaded (%s)", self._summary())

    def save(self, password: str) -> bytes:
        """
        Serialize and encrypt all records.

        Args:
            password: Master password

        Returns:
            Encrypted vault bytes
        """
        document = {
            kind.collection: [record.to_dict() for record in self._records[kind]]
            for kind in RecordKind
        }
        plaintext = json.dumps(document, indent=4, ensure_ascii=False).encode("utf-8")

        key = self._key_derivation(password)
        ciphertext = self._codec.encrypt(key, plaintext)
        self._log.info("Vault saved (%s)", self._summary())
        return ciphertext

    def load_from_file(self, password: str, path: Path | str) -> None:
        """
        Load a vault file.

        Raises:
            VaultError: FILE_ACCESS if the file cannot be read,
                CORRUPTED_INPUT if it cannot be decrypted and parsed
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise VaultError.file_access(path, "read") from e

        self.load(password, data)

    def save_to_file(self, password: str, path: Path | str) -> None:
        """
        Write the encrypted vault to a file.

        The file is overwritten in place; a crash mid-write can truncate it.

        Raises:
            VaultError: FILE_ACCESS if the file cannot be written
        """
        path = Path(path)
        data = self.save(password)
        try:
            path.write_bytes(data)
        except OSError as e:
            raise VaultError.file_access(path, "write") from e

    def clear(self) -> None:
        """Remove every record."""
        for records in self._records.values():
            records.clear()

    @staticmethod
    def _parse_document(document: Any) -> dict[RecordKind, list[Record]]:
        if not isinstance(document, dict):
            raise TypeError("Vault document must be an object")

        parsed: dict[RecordKind, list[Record]] = {}
        for kind in RecordKind:
            entries = document[kind.collection]
            # Older writers store an empty array as ""
            if entries == "":
                entries = []
            if not isinstance(entries, list):
                raise TypeError(f"{kind.collection} must be an array")

            record_type = RECORD_TYPES[kind]
            records = [record_type.from_dict(entry) for entry in entries]

            uids = [record.uid for record in records]
            if len(set(uids)) != len(uids):
                raise ValueError(f"Duplicate uid in {kind.collection}")

            parsed[kind] = records
        return parsed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def categories(self, kind: RecordKind | str) -> set[str]:
        """
        Distinct categories used by one record kind.

        Raises:
            VaultError: INVALID_LOOKUP for an unknown kind
        """
        kind = RecordKind.parse(kind)
        return {record.category for record in self._records[kind]}

    def elements_by_category(self, kind: RecordKind | str, category: str) -> dict[str, str]:
        """
        Map uid -> display title for records in exactly this category.

        Contacts are titled "last, first"; other kinds use their title.

        Raises:
            VaultError: INVALID_LOOKUP for an unknown kind
        """
        kind = RecordKind.parse(kind)
        return {
            record.uid: record.display_title
            for record in self._records[kind]
            if record.category == category
        }

    def get(self, kind: RecordKind | str, uid: str) -> Record:
        """
        Get a copy of one record.

        Raises:
            VaultError: INVALID_LOOKUP for an unknown kind or uid
        """
        kind = RecordKind.parse(kind)
        return dataclasses.replace(self._find(kind, uid))

    def records(self, kind: RecordKind | str) -> list[Record]:
        """Copies of all records of a kind, in insertion order."""
        kind = RecordKind.parse(kind)
        return [dataclasses.replace(record) for record in self._records[kind]]

    def login(self, uid: str) -> Credential:
        return self.get(RecordKind.CREDENTIAL, uid)

    def note(self, uid: str) -> Note:
        return self.get(RecordKind.NOTE, uid)

    def file(self, uid: str) -> Attachment:
        return self.get(RecordKind.ATTACHMENT, uid)

    def contact(self, uid: str) -> Contact:
        return self.get(RecordKind.CONTACT, uid)

    def _find(self, kind: RecordKind, uid: str) -> Record:
        for record in self._records[kind]:
            if record.uid == uid:
                return record

        self._log.debug("Lookup failed: %s %s", kind.value, uid)
        raise VaultError.invalid_lookup(kind, uid)

    def _index_of(self, kind: RecordKind, uid: str) -> int:
        for index, record in enumerate(self._records[kind]):
            if record.uid == uid:
                return index

        self._log.debug("Update target missing: %s %s", kind.value, uid)
        raise VaultError.invalid_lookup(kind, uid)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def upsert(self, kind: RecordKind | str, record: Record) -> str:
        """
        Insert a new record or replace an existing one.

        A record with an empty uid is appended under a freshly assigned uid.
        A record with a uid replaces the stored record with that uid.

        Args:
            kind: Record kind
            record: Record to store (a copy is kept)

        Returns:
            The record's uid

        Raises:
            VaultError: INVALID_LOOKUP for an unknown kind, or a uid that
                matches no stored record
            TypeError: If the record type does not match the kind
        """
        kind = RecordKind.parse(kind)
        if not isinstance(record, RECORD_TYPES[kind]):
            raise TypeError(f"Expected {RECORD_TYPES[kind].__name__}, got {type(record).__name__}")

        records = self._records[kind]

        if record.uid:
            index = self._index_of(kind, record.uid)
            records[index] = dataclasses.replace(record)
            self._log.debug("Updated %s %s", kind.value, record.uid)
            return record.uid

        uid = self._assign_uid(kind)
        records.append(dataclasses.replace(record, uid=uid))
        self._log.debug("Added %s %s", kind.value, uid)
        return uid

    def _assign_uid(self, kind: RecordKind) -> str:
        taken = {record.uid for record in self._records[kind]}
        for _ in range(MAX_UID_ATTEMPTS):
            uid = self._uid_factory()
            if uid and uid not in taken:
                return uid
        raise RuntimeError("uid factory keeps returning identifiers already in use")

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------

    def map_attachment(self, uid: str) -> Path:
        """
        Map a stored attachment to a plaintext file.

        The mapped path is kept on the stored record, so later get() calls
        and unmap_attachment() see it.

        Raises:
            VaultError: INVALID_LOOKUP for an unknown uid, FILE_ACCESS if
                the temp file cannot be written
        """
        attachment = self._find(RecordKind.ATTACHMENT, uid)
        return self._mapper.map(attachment)

    def unmap_attachment(self, uid: str, iterations: Optional[int] = None) -> None:
        """
        Securely erase a stored attachment's plaintext copy, if mapped.

        Raises:
            VaultError: INVALID_LOOKUP for an unknown uid, FILE_ACCESS if
                the erase fails
        """
        attachment = self._find(RecordKind.ATTACHMENT, uid)
        if iterations is None:
            iterations = self._erase_iterations
        self._mapper.unmap(attachment, iterations)

    def _summary(self) -> str:
        return ", ".join(f"{kind.collection}={len(self._records[kind])}" for kind in RecordKind)
