"""
Lockbox Configuration Module
============================

Provides immutable, environment-aware configuration with security-first defaults.

Security Features:
- Immutable configuration after initialization
- Environment variable override support
- Sensitive keys (salt, password, ...) are never read from the environment
- OS-aware path handling
"""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, Optional

# Security Constants
_SENSITIVE_KEYS: Final[frozenset[str]] = frozenset({
    "password", "secret", "key", "token", "private", "credential", "salt",
})

# Settings whose names match a sensitive word but hold no secret
_PLAIN_KEYS: Final[frozenset[str]] = frozenset({
    "security.key_derivation", "security.password_length",
})

KEY_DERIVATIONS: Final[frozenset[str]] = frozenset({"legacy", "argon2id"})
VAULT_FILE_NAME: Final[str] = "vault.lbx"


def _is_sensitive_key(key: str) -> bool:
    """Check if a configuration key might contain sensitive data."""
    if key in _PLAIN_KEYS:
        return False
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS)


def _get_default_data_dir() -> Path:
    """Get OS-appropriate default data directory."""
    system = platform.system().lower()

    if system == "windows":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
    elif system == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:  # Linux and others
        base = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))

    return base / "Lockbox"


def _get_default_log_dir() -> Path:
    """Get OS-appropriate default log directory."""
    system = platform.system().lower()

    if system == "windows":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
        return base / "Lockbox" / "Logs"
    elif system == "darwin":
        return Path.home() / "Library" / "Logs" / "Lockbox"
    else:  # Linux and others
        return Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state")) / "Lockbox" / "logs"


@dataclass(frozen=True, slots=True)
class PathConfig:
    """Immutable path configuration with OS-aware defaults."""

    data_dir: Path = field(default_factory=_get_default_data_dir)
    log_dir: Path = field(default_factory=_get_default_log_dir)
    # None selects a private directory under the system temp dir
    temp_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        """Validate paths after initialization."""
        for field_name in ["data_dir", "log_dir", "temp_dir"]:
            path = getattr(self, field_name)
            if path is not None and not path.is_absolute():
                raise ValueError(f"{field_name} must be an absolute path: {path}")

    @property
    def vault_file(self) -> Path:
        """Default location of the vault file."""
        return self.data_dir / VAULT_FILE_NAME


@dataclass(frozen=True, slots=True)
class SecurityConfig:
    """Immutable security configuration."""

    # Overwrite passes for secure erase of attachment copies
    erase_iterations: int = 10
    # Length of generated credential passwords
    password_length: int = 16
    # "legacy" keeps the vault file format; "argon2id" stretches the password
    key_derivation: str = "legacy"
    argon2_salt: bytes = b""

    def __post_init__(self) -> None:
        """Validate security settings."""
        if self.erase_iterations < 1:
            raise ValueError("Erase iterations must be at least 1")
        if self.password_length < 8:
            raise ValueError("Password length must be at least 8 characters")
        if self.key_derivation not in KEY_DERIVATIONS:
            raise ValueError(f"Unknown key derivation: {self.key_derivation}")
        if self.key_derivation == "argon2id" and len(self.argon2_salt) < 16:
            raise ValueError("Argon2id requires a salt of at least 16 bytes")

    def __repr__(self) -> str:
        """Safe representation without the salt."""
        return (
            f"SecurityConfig(erase_iterations={self.erase_iterations}, "
            f"password_length={self.password_length}, "
            f"key_derivation={self.key_derivation!r})"
        )


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Immutable logging configuration."""

    level: str = "INFO"
    max_file_size_bytes: int = 10 * 1024 * 1024  # 10 MB
    backup_count: int = 5
    enable_console: bool = True
    enable_file: bool = False

    def __post_init__(self) -> None:
        """Validate logging settings."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.level.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {self.level}")


class LockboxConfig:
    """
    Centralized, immutable configuration loader with environment override support.

    Usage:
        config = LockboxConfig.load()
        passes = config.security.erase_iterations
        container = Container.from_config(config)
    """

    __slots__ = ("_paths", "_security", "_logging", "_frozen")

    _instance: Optional[LockboxConfig] = None

    def __init__(
        self,
        paths: Optional[PathConfig] = None,
        security: Optional[SecurityConfig] = None,
        logging: Optional[LoggingConfig] = None,
    ) -> None:
        """Initialize configuration. Use LockboxConfig.load() for standard initialization."""
        # Use object.__setattr__ to bypass our immutability check during init
        object.__setattr__(self, "_frozen", False)
        object.__setattr__(self, "_paths", paths or PathConfig())
        object.__setattr__(self, "_security", security or SecurityConfig())
        object.__setattr__(self, "_logging", logging or LoggingConfig())
        object.__setattr__(self, "_frozen", True)

    @property
    def paths(self) -> PathConfig:
        return self._paths

    @property
    def security(self) -> SecurityConfig:
        return self._security

    @property
    def logging(self) -> LoggingConfig:
        return self._logging

    @classmethod
    def load(cls, env_prefix: str = "LOCKBOX") -> LockboxConfig:
        """
        Load configuration with environment variable overrides.

        Environment variables are prefixed with LOCKBOX_ and use double
        underscores for nested values.

        Examples:
            LOCKBOX_LOGGING__LEVEL=DEBUG
            LOCKBOX_SECURITY__ERASE_ITERATIONS=3
            LOCKBOX_PATHS__TEMP_DIR=/run/user/1000/lockbox

        Args:
            env_prefix: Prefix for environment variables (default: LOCKBOX)

        Returns:
            Configured LockboxConfig instance
        """
        env_overrides = cls._parse_env_overrides(env_prefix)

        paths_kwargs: dict[str, Any] = {}
        for name in ("data_dir", "log_dir", "temp_dir"):
            if f"paths.{name}" in env_overrides:
                paths_kwargs[name] = Path(env_overrides[f"paths.{name}"])

        security_kwargs: dict[str, Any] = {}
        if "security.erase_iterations" in env_overrides:
            security_kwargs["erase_iterations"] = int(env_overrides["security.erase_iterations"])
        if "security.password_length" in env_overrides:
            security_kwargs["password_length"] = int(env_overrides["security.password_length"])
        if "security.key_derivation" in env_overrides:
            security_kwargs["key_derivation"] = env_overrides["security.key_derivation"]

        logging_kwargs: dict[str, Any] = {}
        if "logging.level" in env_overrides:
            logging_kwargs["level"] = env_overrides["logging.level"]
        if "logging.enable_console" in env_overrides:
            logging_kwargs["enable_console"] = env_overrides["logging.enable_console"].lower() == "true"
        if "logging.enable_file" in env_overrides:
            logging_kwargs["enable_file"] = env_overrides["logging.enable_file"].lower() == "true"

        return cls(
            paths=PathConfig(**paths_kwargs) if paths_kwargs else None,
            security=SecurityConfig(**security_kwargs) if security_kwargs else None,
            logging=LoggingConfig(**logging_kwargs) if logging_kwargs else None,
        )

    @staticmethod
    def _parse_env_overrides(prefix: str) -> dict[str, str]:
        """Parse environment variables with the given prefix."""
        overrides: dict[str, str] = {}
        prefix_upper = f"{prefix.upper()}_"

        for key, value in os.environ.items():
            if key.startswith(prefix_upper):
                # Convert LOCKBOX_SECTION__KEY to section.key
                config_key = key[len(prefix_upper):].lower().replace("__", ".")

                # SECURITY: Skip sensitive keys from environment
                if _is_sensitive_key(config_key):
                    continue

                overrides[config_key] = value

        return overrides

    @classmethod
    def get_instance(cls) -> LockboxConfig:
        """Get or create the singleton configuration instance."""
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance. Use only for testing."""
        cls._instance = None

    def ensure_directories(self) -> None:
        """Create all required directories with secure permissions."""
        import stat

        directories = [self._paths.data_dir, self._paths.log_dir]
        if self._paths.temp_dir is not None:
            directories.append(self._paths.temp_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

            # Set restrictive permissions on Unix-like systems
            if platform.system().lower() != "windows":
                directory.chmod(stat.S_IRWXU)  # 700 - owner only

    def __repr__(self) -> str:
        """Safe string representation without sensitive data."""
        return f"LockboxConfig(paths={self._paths!r}, security={self._security!r}, logging={self._logging!r})"

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent modification after initialization."""
        if hasattr(self, "_frozen") and self._frozen:
            raise AttributeError("LockboxConfig is immutable after initialization")
        super().__setattr__(name, value)
