"""
Configuration Module
====================

Provides immutable, environment-aware configuration for transparent encryption.

Features:
- Immutable configuration after initialization
- Environment variable override support (ORDO_ prefix)
- No secrets accepted from the environment
- Explicitly passed to the controller (no process-wide state)
"""

from __future__ import annotations

import hashlib
import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Any, Optional


DEFAULT_SUFFIXES: Final[tuple[str, ...]] = ("ordo", "pgp", "gpg")

SUPPORTED_BACKENDS: Final[frozenset[str]] = frozenset({"gpg", "passphrase"})

# Keys that must never be taken from the environment
_SENSITIVE_KEYS: Final[frozenset[str]] = frozenset({
    "passphrase", "password", "secret", "token", "private", "credential",
})


def _is_sensitive_key(key: str) -> bool:
    """Check if a configuration key might carry secret material."""
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS)


def _split_list(value: str) -> tuple[str, ...]:
    """Split a comma separated environment value, dropping blanks."""
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _get_default_log_dir() -> Path:
    """Get OS-appropriate default log directory."""
    system = platform.system().lower()

    if system == "windows":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
        return base / "ordo" / "Logs"
    elif system == "darwin":
        return Path.home() / "Library" / "Logs" / "ordo"
    else:  # Linux and others
        return Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state")) / "ordo" / "logs"


@dataclass(frozen=True, slots=True)
class SuffixConfig:
    """Recognized encrypted-file suffixes and default recipients."""

    suffixes: tuple[str, ...] = DEFAULT_SUFFIXES
    default_recipients: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.suffixes:
            raise ValueError("At least one encrypted-file suffix is required")
        for suffix in self.suffixes:
            if not suffix or "." in suffix or "/" in suffix:
                raise ValueError(f"Invalid suffix: {suffix!r}")
        if len(set(self.suffixes)) != len(self.suffixes):
            raise ValueError("Suffixes must be unique")


@dataclass(frozen=True, slots=True)
class BackendConfig:
    """Crypto backend selection and parameters."""

    name: str = "gpg"
    gpg_program: str = "gpg"
    armor: bool = False
    always_trust: bool = False

    # Argon2id parameters for the passphrase backend
    kdf_time_cost: int = 3
    kdf_memory_cost: int = 65536  # 64 MB
    kdf_parallelism: int = 4

    def __post_init__(self) -> None:
        if self.name not in SUPPORTED_BACKENDS:
            raise ValueError(f"Unsupported backend: {self.name}")
        if self.kdf_time_cost < 1:
            raise ValueError("KDF time cost must be at least 1")
        if self.kdf_memory_cost < 8 * self.kdf_parallelism:
            raise ValueError("KDF memory cost must be at least 8 KiB per lane")
        if self.kdf_parallelism < 1:
            raise ValueError("KDF parallelism must be at least 1")


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Immutable logging configuration."""

    level: str = "WARNING"
    log_dir: Optional[Path] = field(default_factory=_get_default_log_dir)
    enable_console: bool = True
    enable_file: bool = False
    enable_json: bool = False
    # None keeps the per-handler default layouts
    format: Optional[str] = None

    def __post_init__(self) -> None:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.level.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {self.level}")


class OrdoConfig:
    """
    Immutable configuration aggregate with environment override support.

    The configuration is built once and handed to the lifecycle controller
    and the backend factory, so independent sessions (and tests) can run
    side by side with different suffixes or recipients.

    Usage:
        config = OrdoConfig.load()
        config.suffix.suffixes       # ("ordo", "pgp", "gpg")
        config.backend.name          # "gpg"
    """

    __slots__ = ("_suffix", "_backend", "_logging", "_frozen", "_config_hash")

    def __init__(
        self,
        suffix: Optional[SuffixConfig] = None,
        backend: Optional[BackendConfig] = None,
        logging: Optional[LoggingConfig] = None,
    ) -> None:
        object.__setattr__(self, "_frozen", False)
        object.__setattr__(self, "_suffix", suffix or SuffixConfig())
        object.__setattr__(self, "_backend", backend or BackendConfig())
        object.__setattr__(self, "_logging", logging or LoggingConfig())
        object.__setattr__(self, "_config_hash", self._compute_hash())
        object.__setattr__(self, "_frozen", True)

    def _compute_hash(self) -> str:
        """Compute a short hash of the configuration for diagnostics."""
        config_str = f"{self._suffix}|{self._backend}|{self._logging}"
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @property
    def suffix(self) -> SuffixConfig:
        return self._suffix

    @property
    def backend(self) -> BackendConfig:
        return self._backend

    @property
    def logging(self) -> LoggingConfig:
        return self._logging

    @property
    def config_hash(self) -> str:
        return self._config_hash

    @classmethod
    def load(cls, env_prefix: str = "ORDO") -> OrdoConfig:
        """
        Load configuration with environment variable overrides.

        Environment variables are prefixed with ORDO_ and use double
        underscores for nested values.

        Examples:
            ORDO_SUFFIXES=ordo,gpg
            ORDO_RECIPIENTS=alice@example.org,bob@example.org
            ORDO_BACKEND__NAME=passphrase
            ORDO_LOGGING__LEVEL=DEBUG

        Args:
            env_prefix: Prefix for environment variables (default: ORDO)

        Returns:
            Configured OrdoConfig instance
        """
        env_overrides = cls._parse_env_overrides(env_prefix)

        suffix_kwargs: dict[str, Any] = {}
        if "suffixes" in env_overrides:
            suffix_kwargs["suffixes"] = _split_list(env_overrides["suffixes"])
        if "recipients" in env_overrides:
            suffix_kwargs["default_recipients"] = _split_list(env_overrides["recipients"])

        backend_kwargs: dict[str, Any] = {}
        if "backend.name" in env_overrides:
            backend_kwargs["name"] = env_overrides["backend.name"].lower()
        if "backend.gpg_program" in env_overrides:
            backend_kwargs["gpg_program"] = env_overrides["backend.gpg_program"]
        if "backend.armor" in env_overrides:
            backend_kwargs["armor"] = env_overrides["backend.armor"].lower() == "true"
        if "backend.always_trust" in env_overrides:
            backend_kwargs["always_trust"] = env_overrides["backend.always_trust"].lower() == "true"
        for int_key in ("kdf_time_cost", "kdf_memory_cost", "kdf_parallelism"):
            if f"backend.{int_key}" in env_overrides:
                backend_kwargs[int_key] = int(env_overrides[f"backend.{int_key}"])

        logging_kwargs: dict[str, Any] = {}
        if "logging.level" in env_overrides:
            logging_kwargs["level"] = env_overrides["logging.level"].upper()
        if "logging.log_dir" in env_overrides:
            logging_kwargs["log_dir"] = Path(env_overrides["logging.log_dir"])
        if "logging.enable_console" in env_overrides:
            logging_kwargs["enable_console"] = env_overrides["logging.enable_console"].lower() == "true"
        if "logging.enable_file" in env_overrides:
            logging_kwargs["enable_file"] = env_overrides["logging.enable_file"].lower() == "true"
        if "logging.enable_json" in env_overrides:
            logging_kwargs["enable_json"] = env_overrides["logging.enable_json"].lower() == "true"
        if "logging.format" in env_overrides:
            logging_kwargs["format"] = env_overrides["logging.format"]

        return cls(
            suffix=SuffixConfig(**suffix_kwargs) if suffix_kwargs else None,
            backend=BackendConfig(**backend_kwargs) if backend_kwargs else None,
            logging=LoggingConfig(**logging_kwargs) if logging_kwargs else None,
        )

    @staticmethod
    def _parse_env_overrides(prefix: str) -> dict[str, str]:
        """Parse environment variables with the given prefix."""
        overrides: dict[str, str] = {}
        prefix_upper = f"{prefix.upper()}_"

        for key, value in os.environ.items():
            if key.startswith(prefix_upper):
                # ORDO_SECTION__KEY -> section.key
                config_key = key[len(prefix_upper):].lower().replace("__", ".")

                if _is_sensitive_key(config_key):
                    continue

                overrides[config_key] = value

        return overrides

    def replace(
        self,
        suffix: Optional[SuffixConfig] = None,
        backend: Optional[BackendConfig] = None,
        logging: Optional[LoggingConfig] = None,
    ) -> OrdoConfig:
        """Return a new configuration with the given sections swapped in."""
        return OrdoConfig(
            suffix=suffix or self._suffix,
            backend=backend or self._backend,
            logging=logging or self._logging,
        )

    def __repr__(self) -> str:
        return f"OrdoConfig(hash={self._config_hash}, backend={self._backend.name})"

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent modification after initialization."""
        if hasattr(self, "_frozen") and self._frozen:
            raise AttributeError("OrdoConfig is immutable after initialization")
        super().__setattr__(name, value)
