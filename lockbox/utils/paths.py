"""
Path Utilities
==============

OS-aware path handling for plaintext attachment copies.
"""

from __future__ import annotations

import platform
import tempfile
from pathlib import Path
from typing import Final

TEMP_DIR_NAME: Final[str] = "lockbox_temp"


def get_secure_temp_dir(base: Path | None = None) -> Path:
    """
    Get the private directory used for mapped attachments.

    Creates the directory with owner-only permissions if needed.

    Args:
        base: Parent directory (system temp dir if None)

    Returns:
        Path to the private temporary directory
    """
    temp_base = base or Path(tempfile.gettempdir())
    secure_temp = temp_base / TEMP_DIR_NAME

    secure_temp.mkdir(mode=0o700, parents=True, exist_ok=True)

    # On Windows, permissions work differently
    if platform.system().lower() != "windows":
        secure_temp.chmod(0o700)

    return secure_temp
