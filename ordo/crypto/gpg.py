"""
GnuPG Backend
=============

Delegates encryption and decryption to the ``gpg`` program.

Content travels through stdin/stdout pipes; no plaintext file is ever
created. On decryption the ``--status-fd`` output is scanned for
``[GNUPG:] ENC_TO <keyid> ...`` lines so the document can remember which
keys it was encrypted to.

Passphrase entry and key selection stay with gpg and its agent.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Final, Optional, Sequence

from ordo.crypto.backend import (
    CryptoBackend,
    DecryptedContent,
    DecryptionError,
    EncryptionError,
)


_STATUS_PREFIX: Final[str] = "[GNUPG:] "


def parse_enc_to(status_output: str) -> tuple[str, ...]:
    """
    Extract recipient key ids from gpg status output.

    Lines look like ``[GNUPG:] ENC_TO ABCDEF0123456789 1 0``; duplicates
    are dropped, order is preserved. Hidden recipients (``--throw-keyids``)
    report an all-zero key id, which cannot be encrypted to and is skipped.
    """
    keyids: list[str] = []
    for line in status_output.splitlines():
        if not line.startswith(_STATUS_PREFIX + "ENC_TO"):
            continue
        parts = line.split()
        if len(parts) < 3 or parts[2] in keyids or not parts[2].strip("0"):
            continue
        keyids.append(parts[2])
    return tuple(keyids)


class GpgBackend(CryptoBackend):
    """
    Backend driving the gpg command line program.

    Usage:
        backend = GpgBackend(armor=True)
        blob = backend.encrypt(b"secret", ("alice@example.org",))
        result = backend.decrypt(blob)
        result.recipients   # ("ABCDEF0123456789",)
    """

    requires_recipients = True

    __slots__ = ("_program", "_armor", "_always_trust", "_extra_args", "_log")

    def __init__(
        self,
        program: str = "gpg",
        armor: bool = False,
        always_trust: bool = False,
        extra_args: Sequence[str] = (),
    ) -> None:
        self._program = program
        self._armor = armor
        self._always_trust = always_trust
        self._extra_args = tuple(extra_args)
        self._log = logging.getLogger("ordo.crypto.gpg")

    def _run(self, args: list[str], data: bytes) -> subprocess.CompletedProcess:
        cmd = [self._program, *self._extra_args, *args]
        return subprocess.run(cmd, input=data, capture_output=True, check=False)

    def decrypt(self, raw: bytes) -> DecryptedContent:
        try:
            result = self._run(["--quiet", "--yes", "--status-fd", "2", "--decrypt"], raw)
        except OSError as e:
            raise DecryptionError(f"Cannot run {self._program}: {e.strerror}") from e

        status = result.stderr.decode("utf-8", errors="replace")
        if result.returncode != 0:
            self._log.warning("gpg decryption exited with status %d", result.returncode)
            raise DecryptionError(f"gpg decryption failed (exit status {result.returncode})")

        recipients = parse_enc_to(status)
        self._log.debug("Decrypted %d bytes for %d recipient(s)", len(result.stdout), len(recipients))
        return DecryptedContent(plaintext=result.stdout, recipients=recipients)

    def encrypt(self, plaintext: bytes, recipients: Optional[tuple[str, ...]] = None) -> bytes:
        if not recipients:
            raise EncryptionError("No recipients given for gpg encryption")

        args = ["--batch", "--quiet", "--yes", "--encrypt"]
        if self._armor:
            args.append("--armor")
        if self._always_trust:
            args.extend(["--trust-model", "always"])
        for recipient in recipients:
            args.extend(["--recipient", recipient])

        try:
            result = self._run(args, plaintext)
        except OSError as e:
            raise EncryptionError(f"Cannot run {self._program}: {e.strerror}") from e

        if result.returncode != 0:
            self._log.warning("gpg encryption exited with status %d", result.returncode)
            message = result.stderr.decode("utf-8", errors="replace").strip()
            raise EncryptionError(f"gpg encryption failed: {message or result.returncode}")

        if not result.stdout:
            raise EncryptionError("gpg produced no output")

        return result.stdout
