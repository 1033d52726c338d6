"""
Password Generation
===================

Random passwords drawn from the OS CSPRNG.
"""

from __future__ import annotations

import secrets
import string
from typing import Final

DEFAULT_SPECIAL_CHARACTERS: Final[str] = "!@#$%^&*()`~-_=+[{]}\\|;:'\",<.>/?"
BASE_ALPHABET: Final[str] = string.ascii_letters + string.digits


def generate_password(
    length: int,
    special_characters: str = DEFAULT_SPECIAL_CHARACTERS,
) -> str:
    """
    Generate a random password.

    Args:
        length: Number of characters
        special_characters: Extra characters added to [a-zA-Z0-9]

    Returns:
        Password of exactly `length` characters

    Raises:
        ValueError: If length is negative
    """
    if length < 0:
        raise ValueError("Password length cannot be negative")

    alphabet = BASE_ALPHABET + special_characters
    return "".join(secrets.choice(alphabet) for _ in range(length))
