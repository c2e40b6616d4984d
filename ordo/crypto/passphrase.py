"""
Passphrase Backend
==================

Symmetric AES-256-GCM encryption under an Argon2id-derived key.

Security Properties:
    - 256-bit key derived per file from passphrase + random salt
    - 96-bit random nonce per encryption (never reused)
    - Header (magic, version, KDF parameters, salt, nonce) is
      authenticated as AAD
    - Integrity verified before any plaintext is returned

File Format:
    HEADER (46 bytes):
        - MAGIC: 4 bytes ("ORDO")
        - VERSION: 2 bytes (little-endian)
        - FLAGS: 2 bytes
        - TIME_COST: 4 bytes
        - MEMORY_COST: 4 bytes (KiB)
        - PARALLELISM: 2 bytes
        - SALT: 16 bytes
        - NONCE: 12 bytes
    CIPHERTEXT: remaining bytes (includes the 16-byte GCM tag)
"""

from __future__ import annotations

import logging
import secrets
import struct
from typing import Callable, Final, Optional

from argon2.exceptions import HashingError
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ordo.crypto.backend import (
    CryptoBackend,
    DecryptedContent,
    DecryptionError,
    EncryptionError,
)
from ordo.crypto.kdf import SALT_LENGTH, KdfParameters, derive_key, generate_salt


MAGIC_BYTES: Final[bytes] = b"ORDO"
FORMAT_VERSION: Final[int] = 1
NONCE_SIZE: Final[int] = 12
TAG_SIZE: Final[int] = 16

_PARAMS_STRUCT: Final[struct.Struct] = struct.Struct("<4sHHIIH")
HEADER_SIZE: Final[int] = _PARAMS_STRUCT.size + SALT_LENGTH + NONCE_SIZE

#: Called with (prompt, confirm) and returns the passphrase.
PassphraseProvider = Callable[[str, bool], str]


class PassphraseBackend(CryptoBackend):
    """
    Passphrase-based backend built on ``cryptography`` and ``argon2-cffi``.

    The passphrase is requested from the provider on every operation;
    caching is left to the provider.

    Usage:
        backend = PassphraseBackend(host.read_passphrase)
        blob = backend.encrypt(b"secret")
        backend.decrypt(blob).plaintext   # b"secret"
    """

    requires_recipients = False

    __slots__ = ("_provider", "_params", "_log")

    def __init__(
        self,
        passphrase_provider: PassphraseProvider,
        kdf_params: KdfParameters = KdfParameters(),
    ) -> None:
        self._provider = passphrase_provider
        self._params = kdf_params
        self._log = logging.getLogger("ordo.crypto.passphrase")

    def encrypt(self, plaintext: bytes, recipients: Optional[tuple[str, ...]] = None) -> bytes:
        passphrase = self._provider("Passphrase for encryption: ", True)
        if not passphrase:
            raise EncryptionError("Empty passphrase")

        salt = generate_salt()
        nonce = secrets.token_bytes(NONCE_SIZE)
        header = _PARAMS_STRUCT.pack(
            MAGIC_BYTES,
            FORMAT_VERSION,
            0,
            self._params.time_cost,
            self._params.memory_cost,
            self._params.parallelism,
        ) + salt + nonce

        try:
            key = derive_key(passphrase, salt, self._params)
            ciphertext = AESGCM(key).encrypt(nonce, plaintext, header)
        except (HashingError, ValueError, TypeError) as e:
            raise EncryptionError("Encryption failed") from e

        self._log.debug("Encrypted %d bytes", len(plaintext))
        return header + ciphertext

    def decrypt(self, raw: bytes) -> DecryptedContent:
        if len(raw) < HEADER_SIZE + TAG_SIZE:
            raise DecryptionError("Data too short for an encrypted file")

        magic, version, _flags, time_cost, memory_cost, parallelism = _PARAMS_STRUCT.unpack(
            raw[:_PARAMS_STRUCT.size]
        )
        if magic != MAGIC_BYTES:
            raise DecryptionError("Invalid file format (bad magic bytes)")
        if version != FORMAT_VERSION:
            raise DecryptionError(f"Unsupported file format version: {version}")

        salt_start = _PARAMS_STRUCT.size
        salt = raw[salt_start:salt_start + SALT_LENGTH]
        nonce = raw[salt_start + SALT_LENGTH:HEADER_SIZE]
        header = raw[:HEADER_SIZE]

        passphrase = self._provider("Passphrase: ", False)
        if not passphrase:
            raise DecryptionError("Empty passphrase")

        params = KdfParameters(time_cost, memory_cost, parallelism)
        try:
            key = derive_key(passphrase, salt, params)
            plaintext = AESGCM(key).decrypt(nonce, raw[HEADER_SIZE:], header)
        except (InvalidTag, HashingError, ValueError) as e:
            # Generic error to prevent information leakage
            raise DecryptionError("Decryption failed") from e

        self._log.debug("Decrypted %d bytes", len(plaintext))
        return DecryptedContent(plaintext=plaintext)
