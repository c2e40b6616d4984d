"""
Key Derivation
==============

Passphrase to key derivation for the passphrase backend.

Implements:
    - Argon2id for memory-hard derivation
    - Random salt generation
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Final

from argon2.low_level import Type, hash_secret_raw

# Argon2id defaults (OWASP recommended)
ARGON2_TIME_COST: Final[int] = 3
ARGON2_MEMORY_COST: Final[int] = 65536  # 64 MB
ARGON2_PARALLELISM: Final[int] = 4

KEY_LENGTH: Final[int] = 32  # AES-256
SALT_LENGTH: Final[int] = 16


@dataclass(frozen=True, slots=True)
class KdfParameters:
    """Argon2id cost parameters, stored alongside the ciphertext."""

    time_cost: int = ARGON2_TIME_COST
    memory_cost: int = ARGON2_MEMORY_COST
    parallelism: int = ARGON2_PARALLELISM


def generate_salt() -> bytes:
    """Generate a random salt from the OS CSPRNG."""
    return secrets.token_bytes(SALT_LENGTH)


def derive_key(
    passphrase: str,
    salt: bytes,
    params: KdfParameters = KdfParameters(),
    length: int = KEY_LENGTH,
) -> bytes:
    """
    Derive a key from a passphrase using Argon2id.

    Args:
        passphrase: User passphrase
        salt: Random salt (at least 16 bytes)
        params: Argon2id cost parameters
        length: Output key length

    Returns:
        Derived key bytes
    """
    if len(salt) < SALT_LENGTH:
        raise ValueError(f"Salt must be at least {SALT_LENGTH} bytes")

    return hash_secret_raw(
        secret=passphrase.encode("utf-8"),
        salt=salt,
        time_cost=params.time_cost,
        memory_cost=params.memory_cost,
        parallelism=params.parallelism,
        hash_len=length,
        type=Type.ID,
    )
