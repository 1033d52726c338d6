"""
Utils module - Utility functions and helpers.
"""

from lockbox.utils.paths import get_secure_temp_dir
from lockbox.utils.passwords import generate_password

__all__ = [
    "get_secure_temp_dir",
    "generate_password",
]
