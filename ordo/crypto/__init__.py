"""
ordo Crypto Backends
====================

The lifecycle controller talks to an encryption engine only through the
CryptoBackend contract. Two implementations ship with ordo:

    1. GpgBackend: delegates to the gpg program (public-key, recipients)
    2. PassphraseBackend: AES-256-GCM under an Argon2id-derived key

Both are single-shot: nothing here retries, caches or inspects
the document.
"""

from __future__ import annotations

from ordo.core.config import BackendConfig
from ordo.crypto.backend import (
    CryptoBackend,
    DecryptedContent,
    DecryptionError,
    EncryptionError,
    OrdoError,
)
from ordo.crypto.gpg import GpgBackend
from ordo.crypto.kdf import KdfParameters
from ordo.crypto.passphrase import PassphraseBackend, PassphraseProvider


def build_backend(config: BackendConfig, passphrase_provider: PassphraseProvider) -> CryptoBackend:
    """
    Build the backend selected by configuration.

    Args:
        config: Backend section of the configuration
        passphrase_provider: Prompt used by the passphrase backend

    Returns:
        Ready-to-use CryptoBackend
    """
    if config.name == "passphrase":
        return PassphraseBackend(
            passphrase_provider,
            KdfParameters(
                time_cost=config.kdf_time_cost,
                memory_cost=config.kdf_memory_cost,
                parallelism=config.kdf_parallelism,
            ),
        )
    return GpgBackend(
        program=config.gpg_program,
        armor=config.armor,
        always_trust=config.always_trust,
    )


__all__ = [
    "CryptoBackend",
    "DecryptedContent",
    "DecryptionError",
    "EncryptionError",
    "OrdoError",
    "GpgBackend",
    "PassphraseBackend",
    "KdfParameters",
    "build_backend",
]
