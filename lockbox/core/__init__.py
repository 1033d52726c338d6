"""
Core module - Contains configuration, logging, errors and the vault store.
"""

from lockbox.core.config import LockboxConfig
from lockbox.core.errors import ErrorKind, VaultError
from lockbox.core.logging import SecureLogFilter, configure_logging, get_secure_logger

__all__ = [
    "LockboxConfig",
    "ErrorKind",
    "VaultError",
    "SecureLogFilter",
    "configure_logging",
    "get_secure_logger",
]
