# Tests for overwrite-then-delete
#
# Coverage:
#   - Every pass rewrites the whole file with fresh random bytes
#   - Zero passes only delete
#   - Files larger than one write block
#   - FILE_ACCESS on missing files, directories, unlink failures

from pathlib import Path

import pytest

from lockbox.core.errors import ErrorKind, VaultError
from lockbox.core.file_ops.secure_delete import BLOCK_SIZE, SecureEraser, secure_erase


@pytest.fixture
def plaintext_file(tmp_path):
    path = tmp_path / "plain.txt"
    path.write_bytes(b"attack at dawn" * 10)
    return path


def test_erase_deletes_file(eraser, plaintext_file):
    eraser.erase(plaintext_file, iterations=3)
    assert not plaintext_file.exists()


def test_each_pass_covers_whole_file(eraser, random_source, plaintext_file):
    size = plaintext_file.stat().st_size
    eraser.erase(plaintext_file, iterations=4)
    assert random_source.total == size * 4


def test_last_pass_content_replaces_original(random_source, plaintext_file, monkeypatch):
    size = plaintext_file.stat().st_size
    monkeypatch.setattr(Path, "unlink", lambda self, missing_ok=False: None)

    SecureEraser(random_bytes=random_source).erase(plaintext_file, iterations=2)

    # second request produced the final content: bytes (1 + i) % 256
    assert plaintext_file.read_bytes() == bytes((1 + i) % 256 for i in range(size))
    assert plaintext_file.stat().st_size == size


def test_zero_iterations_only_delete(eraser, random_source, plaintext_file):
    eraser.erase(plaintext_file, iterations=0)
    assert not plaintext_file.exists()
    assert random_source.requests == []


def test_empty_file(eraser, random_source, tmp_path):
    path = tmp_path / "empty"
    path.touch()
    eraser.erase(path, iterations=5)
    assert not path.exists()
    assert random_source.total == 0


def test_large_file_written_in_blocks(eraser, random_source, tmp_path):
    path = tmp_path / "large.bin"
    size = BLOCK_SIZE * 2 + 123
    path.write_bytes(b"\xaa" * size)

    eraser.erase(path, iterations=2)

    assert random_source.total == size * 2
    assert max(random_source.requests) <= BLOCK_SIZE
    assert not path.exists()


def test_missing_file_is_file_access_error(eraser, tmp_path):
    missing = tmp_path / "missing"
    with pytest.raises(VaultError) as exc_info:
        eraser.erase(missing)
    assert exc_info.value.kind is ErrorKind.FILE_ACCESS
    assert exc_info.value.path == missing


def test_directory_is_file_access_error(eraser, tmp_path):
    with pytest.raises(VaultError) as exc_info:
        eraser.erase(tmp_path)
    assert exc_info.value.kind is ErrorKind.FILE_ACCESS


def test_unlink_failure_is_file_access_error(eraser, plaintext_file, monkeypatch):
    def refuse(self, missing_ok=False):
        raise PermissionError("read-only filesystem")

    monkeypatch.setattr(Path, "unlink", refuse)

    with pytest.raises(VaultError) as exc_info:
        eraser.erase(plaintext_file, iterations=1)
    assert exc_info.value.kind is ErrorKind.FILE_ACCESS
    assert isinstance(exc_info.value.__cause__, PermissionError)


def test_negative_iterations_rejected(eraser, plaintext_file):
    with pytest.raises(ValueError):
        eraser.erase(plaintext_file, iterations=-1)
    assert plaintext_file.exists()


def test_module_function_uses_csprng(plaintext_file):
    secure_erase(plaintext_file, iterations=1)
    assert not plaintext_file.exists()


def test_accepts_string_path(eraser, plaintext_file):
    eraser.erase(str(plaintext_file), iterations=1)
    assert not plaintext_file.exists()
