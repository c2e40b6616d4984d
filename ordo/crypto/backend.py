"""
Crypto Backend Contract
=======================

The lifecycle controller never performs cryptography itself. It talks to
a CryptoBackend through two single-shot operations:

    decrypt(raw) -> DecryptedContent
    encrypt(plaintext, recipients) -> ciphertext

Neither operation is retried by the caller. Any failure surfaces as
DecryptionError or EncryptionError with a message that does not reveal
key material.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ordo.core.errors import OrdoError


class DecryptionError(OrdoError):
    """
    Raised when decryption fails.

    Covers a bad passphrase, corrupt input, a missing key and backend
    failures alike, without saying which.
    """
    pass


class EncryptionError(OrdoError):
    """Raised when no usable recipient can be resolved or the backend fails."""
    pass


@dataclass(frozen=True, slots=True)
class DecryptedContent:
    """
    Result of a successful decryption.

    Attributes:
        plaintext: The decrypted bytes
        recipients: Identities the content was encrypted to, when the
            backend can report them (empty otherwise)
    """

    plaintext: bytes
    recipients: tuple[str, ...] = ()

    def __repr__(self) -> str:
        return f"DecryptedContent(size={len(self.plaintext)}, recipients={self.recipients!r})"


class CryptoBackend(ABC):
    """Abstract encryption engine used by the lifecycle controller."""

    #: Whether encrypt() needs recipients resolved by the caller.
    requires_recipients: bool = False

    @abstractmethod
    def decrypt(self, raw: bytes) -> DecryptedContent:
        """
        Decrypt raw file content.

        Raises:
            DecryptionError: On any failure
        """

    @abstractmethod
    def encrypt(self, plaintext: bytes, recipients: Optional[tuple[str, ...]] = None) -> bytes:
        """
        Encrypt plaintext for the given recipients.

        Raises:
            EncryptionError: On any failure
        """
