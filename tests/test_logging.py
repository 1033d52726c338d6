# Tests for secret-filtering logging
#
# Coverage:
#   - Redaction of passwords, keys, base64 and hex runs
#   - uids and paths survive filtering
#   - File output, JSON formatter, configure_logging

import json
import logging
import uuid

import pytest

from lockbox.core.config import LoggingConfig
from lockbox.core.logging import (
    SecureLogFilter,
    StructuredLogFormatter,
    configure_logging,
    get_secure_logger,
)


def _record(msg, *args):
    return logging.LogRecord("lockbox.test", logging.INFO, __file__, 1, msg, args, None)


@pytest.fixture
def lockbox_logger():
    """Restore the shared "lockbox" logger after a test configures it."""
    logger = logging.getLogger("lockbox")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


class TestSecureLogFilter:

    def test_redacts_password_assignment(self):
        record = _record("login with password=hunter2 failed")
        SecureLogFilter().filter(record)
        assert "hunter2" not in record.getMessage()
        assert "[REDACTED]" in record.getMessage()

    def test_redacts_arguments(self):
        record = _record("content %s", "QUJDREVGR0hJSktMTU5PUFFSU1RVVldYWVphYmNkZWZnaGlq")
        SecureLogFilter().filter(record)
        assert "QUJDREVG" not in record.getMessage()

    def test_redacts_hex_key(self):
        record = _record("derived %s", "00112233445566778899aabbccddeeff0011")
        SecureLogFilter().filter(record)
        assert "00112233" not in record.getMessage()

    def test_uid_and_path_survive(self):
        uid = str(uuid.uuid4())
        record = _record("Mapped attachment %s to %s", uid, "/tmp/lockbox_temp/lockbox-abc.png")
        SecureLogFilter().filter(record)
        assert uid in record.getMessage()
        assert "/tmp/lockbox_temp/lockbox-abc.png" in record.getMessage()


def test_file_logger_writes_redacted(tmp_path):
    name = f"lockbox_test_{uuid.uuid4().hex[:8]}"
    logger = get_secure_logger(name, log_dir=tmp_path, enable_console=False)
    logger.info("secret=opensesame")
    for handler in logger.handlers:
        handler.flush()

    content = (tmp_path / f"{name}.log").read_text()
    assert "opensesame" not in content
    assert logger.propagate is False

    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


def test_structured_formatter():
    output = StructuredLogFormatter().format(_record("Vault saved (%s)", "notes=1"))
    data = json.loads(output)
    assert data["message"] == "Vault saved (notes=1)"
    assert data["level"] == "INFO"
    assert data["logger"] == "lockbox.test"


def test_configure_logging(lockbox_logger, tmp_path):
    config = LoggingConfig(level="DEBUG", enable_console=False, enable_file=True)
    logger = configure_logging(config, log_dir=tmp_path)

    assert logger is lockbox_logger
    assert logger.level == logging.DEBUG
    logging.getLogger("lockbox.container").debug("Added note uid-1")
    for handler in logger.handlers:
        handler.flush()

    assert "Added note uid-1" in (tmp_path / "lockbox.log").read_text()
