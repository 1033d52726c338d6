# Tests for the record model and its document schema
#
# Coverage:
#   - Record kinds, collection names, kind parsing
#   - to_dict/from_dict field mapping and validation
#   - Timestamp text form, aware values read and written as local time
#   - Contact titles, credential password generation

import string
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from lockbox.core.config import LockboxConfig, SecurityConfig
from lockbox.core.errors import ErrorKind, VaultError
from lockbox.core.store.records import (
    RECORD_TYPES,
    Attachment,
    Contact,
    Credential,
    Note,
    RecordKind,
)
from lockbox.core.store.timestamps import NOT_A_DATE_TIME, format_timestamp, parse_timestamp
from lockbox.utils.passwords import BASE_ALPHABET, DEFAULT_SPECIAL_CHARACTERS, generate_password


class TestRecordKind:

    def test_collections(self):
        assert RecordKind.CREDENTIAL.collection == "logins"
        assert RecordKind.NOTE.collection == "notes"
        assert RecordKind.ATTACHMENT.collection == "files"
        assert RecordKind.CONTACT.collection == "contacts"

    def test_parse_accepts_members_and_values(self):
        assert RecordKind.parse(RecordKind.NOTE) is RecordKind.NOTE
        assert RecordKind.parse("contact") is RecordKind.CONTACT

    def test_parse_unknown_is_invalid_lookup(self):
        with pytest.raises(VaultError) as exc_info:
            RecordKind.parse("password")
        assert exc_info.value.kind is ErrorKind.INVALID_LOOKUP
        assert exc_info.value.record_kind == "password"
        assert exc_info.value.uid is None

    def test_every_kind_has_a_type(self):
        assert set(RECORD_TYPES) == set(RecordKind)
        for kind, record_type in RECORD_TYPES.items():
            assert record_type.KIND is kind


class TestCredential:

    def test_to_dict_uses_document_keys(self):
        credential = Credential(
            uid="u1", title="Mail", category="Web", username="jane",
            secret="s3cret", url="https://mail.example",
            last_changed=datetime(2016, 3, 7, 8, 9, 10),
        )
        assert credential.to_dict() == {
            "uid": "u1",
            "title": "Mail",
            "category": "Web",
            "username": "jane",
            "password": "s3cret",
            "url": "https://mail.example",
            "last_change": "2016-Mar-07 08:09:10",
        }

    def test_from_dict_round_trip(self):
        credential = Credential(uid="u1", title="Mail", secret="x", last_changed=datetime(2020, 12, 31, 23, 59, 59))
        assert Credential.from_dict(credential.to_dict()) == credential

    def test_unset_timestamp(self):
        credential = Credential(uid="u1")
        data = credential.to_dict()
        assert data["last_change"] == NOT_A_DATE_TIME
        assert Credential.from_dict(data).last_changed is None

    def test_missing_field(self):
        data = Credential(uid="u1").to_dict()
        del data["password"]
        with pytest.raises(KeyError):
            Credential.from_dict(data)

    def test_missing_timestamp(self):
        data = Credential(uid="u1").to_dict()
        del data["last_change"]
        with pytest.raises(KeyError):
            Credential.from_dict(data)

    def test_non_string_field(self):
        data = Credential(uid="u1").to_dict()
        data["title"] = 42
        with pytest.raises(TypeError):
            Credential.from_dict(data)

    def test_non_object_entry(self):
        with pytest.raises(TypeError):
            Credential.from_dict(["uid", "title"])

    def test_generate_secret(self):
        credential = Credential(title="Bank")
        secret = credential.generate_secret(24)

        assert credential.secret == secret
        assert len(secret) == 24
        assert set(secret) <= set(BASE_ALPHABET + DEFAULT_SPECIAL_CHARACTERS)
        assert credential.last_changed is not None
        assert credential.last_changed.microsecond == 0

    def test_generate_secret_without_specials(self):
        credential = Credential()
        secret = credential.generate_secret(64, special_characters="")
        assert set(secret) <= set(string.ascii_letters + string.digits)

    def test_generate_secret_default_length(self):
        assert len(Credential().generate_secret()) == SecurityConfig().password_length

    def test_generate_secret_configured_length(self, monkeypatch):
        monkeypatch.setenv("LOCKBOX_SECURITY__PASSWORD_LENGTH", "40")
        LockboxConfig.reset_instance()
        assert len(Credential().generate_secret()) == 40


class TestNoteAndAttachment:

    def test_note_round_trip(self):
        note = Note(uid="n1", title="Wifi", category="Home", content="line 1\nline 2 ✓")
        assert Note.from_dict(note.to_dict()) == note

    def test_attachment_mapped_path_not_serialized(self):
        attachment = Attachment(uid="f1", title="a.txt", content="aGk=", mapped_path=Path("/tmp/x"))
        assert "mapped_path" not in attachment.to_dict()
        assert set(attachment.to_dict()) == {"uid", "title", "category", "content"}

    def test_attachment_equality_ignores_mapping(self):
        a = Attachment(uid="f1", content="aGk=", mapped_path=Path("/tmp/x"))
        b = Attachment(uid="f1", content="aGk=")
        assert a == b
        assert a.is_mapped and not b.is_mapped

    def test_display_titles(self):
        assert Note(title="N").display_title == "N"
        assert Attachment(title="A").display_title == "A"
        assert Credential(title="C").display_title == "C"


class TestContact:

    def test_title(self):
        contact = Contact(first_name="Jane", last_name="Doe")
        assert contact.title() == "Doe, Jane"
        assert contact.display_title == "Doe, Jane"

    def test_document_keys(self):
        keys = set(Contact().to_dict())
        assert keys == {
            "uid", "category", "first_name", "last_name", "email", "phone",
            "street", "zip", "city", "country", "comment",
        }

    def test_round_trip(self):
        contact = Contact(
            uid="c1", category="Family", first_name="Jane", last_name="Doe",
            email="jane@example.org", phone="+1 555 0100", street="1 Main St",
            zip="12345", city="Springfield", country="US", comment="",
        )
        assert Contact.from_dict(contact.to_dict()) == contact


class TestTimestamps:

    def test_format(self):
        assert format_timestamp(datetime(2016, 1, 5, 13, 45, 10)) == "2016-Jan-05 13:45:10"

    def test_format_fraction(self):
        value = datetime(2016, 1, 5, 13, 45, 10, 250000)
        assert format_timestamp(value) == "2016-Jan-05 13:45:10.250000"

    def test_parse_round_trip(self):
        for value in (datetime(1999, 12, 31, 0, 0, 0), datetime(2024, 2, 29, 12, 30, 1, 5)):
            assert parse_timestamp(format_timestamp(value)) == value

    def test_parse_short_fraction(self):
        assert parse_timestamp("2016-Jan-05 13:45:10.5").microsecond == 500000

    def test_parse_iso(self):
        assert parse_timestamp("2016-01-05T13:45:10") == datetime(2016, 1, 5, 13, 45, 10)

    def test_parse_iso_with_offset_is_local(self):
        parsed = parse_timestamp("2016-01-05T13:45:10+02:00")
        expected = datetime(2016, 1, 5, 13, 45, 10, tzinfo=timezone(timedelta(hours=2)))
        assert parsed.tzinfo is None
        assert parsed == expected.astimezone().replace(tzinfo=None)

    def test_format_aware_uses_local_time(self):
        value = datetime(2016, 1, 5, 11, 45, 10, tzinfo=timezone.utc)
        local = value.astimezone().replace(tzinfo=None)
        assert format_timestamp(value) == format_timestamp(local)

    def test_credential_normalises_aware_value(self):
        value = datetime(2020, 1, 1, 12, tzinfo=timezone(timedelta(hours=-5)))
        credential = Credential(last_changed=value)
        assert credential.last_changed.tzinfo is None
        assert Credential.from_dict(credential.to_dict()) == credential

    def test_parse_not_a_date_time(self):
        assert parse_timestamp(NOT_A_DATE_TIME) is None

    @pytest.mark.parametrize("text", ["", "yesterday", "2016-Foo-05 13:45:10", "2016-Jan-32 13:45:10"])
    def test_parse_invalid(self, text):
        with pytest.raises(ValueError):
            parse_timestamp(text)


class TestGeneratePassword:

    def test_length(self):
        assert len(generate_password(0)) == 0
        assert len(generate_password(40)) == 40

    def test_negative_length(self):
        with pytest.raises(ValueError):
            generate_password(-1)

    def test_custom_specials(self):
        password = generate_password(200, special_characters="#")
        assert set(password) <= set(BASE_ALPHABET + "#")
