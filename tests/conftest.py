from __future__ import annotations

import logging
import secrets
from pathlib import Path
from typing import Optional

import pytest

from ordo.core.config import LoggingConfig, OrdoConfig, SuffixConfig
from ordo.core.lifecycle import LifecycleController
from ordo.crypto.backend import CryptoBackend, DecryptedContent, DecryptionError, EncryptionError
from ordo.host.memory import MemoryHost


FAKE_MAGIC = b"FAKE:"


def _mask(data: bytes) -> bytes:
    return bytes(b ^ 0x5A for b in data)


def seal(plaintext: bytes, recipients: tuple[str, ...] = ("alice",)) -> bytes:
    """Ciphertext the FakeBackend can open, with a random nonce."""
    return FAKE_MAGIC + ",".join(recipients).encode() + b"\n" + secrets.token_bytes(4) + _mask(plaintext)


class FakeBackend(CryptoBackend):
    """Reversible, nonce-randomized stand-in for a real backend."""

    requires_recipients = True

    def __init__(self) -> None:
        self.encrypt_calls: list[tuple[bytes, Optional[tuple[str, ...]]]] = []
        self.decrypt_calls = 0
        self.fail_encrypt = False
        self.fail_decrypt = False
        self.echo_plaintext = False

    def encrypt(self, plaintext: bytes, recipients: Optional[tuple[str, ...]] = None) -> bytes:
        self.encrypt_calls.append((plaintext, recipients))
        if self.fail_encrypt:
            raise EncryptionError("backend failure")
        if not recipients:
            raise EncryptionError("no recipients")
        if self.echo_plaintext:
            return plaintext
        return seal(plaintext, recipients)

    def decrypt(self, raw: bytes) -> DecryptedContent:
        self.decrypt_calls += 1
        if self.fail_decrypt or not raw.startswith(FAKE_MAGIC):
            raise DecryptionError("Decryption failed")
        header, _, rest = raw[len(FAKE_MAGIC):].partition(b"\n")
        recipients = tuple(r for r in header.decode().split(",") if r)
        return DecryptedContent(plaintext=_mask(rest[4:]), recipients=recipients)


@pytest.fixture(autouse=True)
def _reset_ordo_logger():
    yield
    logger = logging.getLogger("ordo")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def config() -> OrdoConfig:
    return OrdoConfig(logging=LoggingConfig(enable_console=False, log_dir=None))


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def host() -> MemoryHost:
    return MemoryHost()


@pytest.fixture
def controller(host: MemoryHost, backend: FakeBackend, config: OrdoConfig) -> LifecycleController:
    return LifecycleController(host, backend, config)


@pytest.fixture
def secret_file(host: MemoryHost) -> Path:
    path = Path("secret.gpg")
    host.files[path] = seal(b"P0 plaintext\n")
    return path


@pytest.fixture
def recipient_config() -> OrdoConfig:
    return OrdoConfig(
        suffix=SuffixConfig(default_recipients=("bob",)),
        logging=LoggingConfig(enable_console=False, log_dir=None),
    )
