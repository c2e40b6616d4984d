"""
Encrypted Document Lifecycle
============================

State machine moving documents between PLAIN and TRANSPARENT mode.

Guarantees:
- A TRANSPARENT document always has exactly one active
  SaveInterceptHandle installed as its saver; a PLAIN document has none
- Every prompt of a transition is answered before its first mutation,
  so UserCancelled leaves the document exactly as it was
- Encryption works on a wiped-after-use scratch copy, never on the
  live buffer
- A failed encrypted save leaves the document dirty and TRANSPARENT,
  and the file on disk untouched
- Encrypted save-as rebinds the document only after the ciphertext is
  written, so a prompt cancelled inside the backend changes nothing

Transitions:
    open_encrypted      PLAIN -> TRANSPARENT (decrypt current content)
    ordoify             PLAIN -> TRANSPARENT (adopt a new encrypted path)
    disable             TRANSPARENT -> PLAIN (after confirmation)
    encrypted_save      TRANSPARENT -> TRANSPARENT (clean)
    encrypted_save_as   TRANSPARENT -> TRANSPARENT or PLAIN
"""

from __future__ import annotations

import hmac
import logging
import os
from pathlib import Path
from typing import Optional

from ordo.core.config import OrdoConfig
from ordo.core.document import PLAIN_SAVE, Document, DocumentMode, SaveStrategy
from ordo.core.errors import PreconditionViolation, UserCancelled
from ordo.core.scratch import ScratchBuffer
from ordo.core.suffix import SuffixPolicy
from ordo.crypto.backend import CryptoBackend, DecryptionError, EncryptionError
from ordo.host.base import HostEditor


class SaveInterceptHandle(SaveStrategy):
    """
    Registration token redirecting a document's saves to encrypted_save.

    Released handles refuse to save; a released handle is never
    reinstalled.
    """

    __slots__ = ("_controller", "_active", "_auto_save_before")

    def __init__(self, controller: "LifecycleController", auto_save_before: bool) -> None:
        self._controller = controller
        self._active = True
        self._auto_save_before = auto_save_before

    @property
    def active(self) -> bool:
        return self._active

    @property
    def auto_save_before(self) -> bool:
        """Auto-save setting to restore when the handle is released."""
        return self._auto_save_before

    def release(self) -> None:
        self._active = False

    def save(self, host: HostEditor, document: Document) -> None:
        if not self._active:
            raise PreconditionViolation("save intercept handle has been released")
        self._controller.encrypted_save(document)

    def __repr__(self) -> str:
        return f"SaveInterceptHandle(active={self._active})"


class LifecycleController:
    """
    Orchestrates decrypt-on-open, encrypt-on-save, save-as and mode toggles.

    Usage:
        controller = LifecycleController(host, backend, OrdoConfig.load())
        doc = controller.visit(Path("secret.gpg"))
        doc.content = b"edited"
        host.save(doc)            # routed through encrypted_save
        controller.disable(doc)   # asks first
    """

    __slots__ = ("_host", "_backend", "_config", "_policy", "_log")

    def __init__(
        self,
        host: HostEditor,
        backend: CryptoBackend,
        config: Optional[OrdoConfig] = None,
    ) -> None:
        self._host = host
        self._backend = backend
        self._config = config or OrdoConfig()
        self._policy = SuffixPolicy(self._config.suffix.suffixes)
        self._log = logging.getLogger("ordo.lifecycle")

    @property
    def host(self) -> HostEditor:
        return self._host

    @property
    def policy(self) -> SuffixPolicy:
        return self._policy

    @property
    def config(self) -> OrdoConfig:
        return self._config

    # -- commands -----------------------------------------------------

    def visit(self, path: str | os.PathLike[str]) -> Document:
        """
        Open ``path`` the way the editor's find-file would.

        Existing files with a recognized suffix are decrypted; new files
        with a recognized suffix start out TRANSPARENT and empty. Other
        files stay PLAIN.
        """
        path = Path(path)
        encrypted = self._policy.has_suffix(path)

        if self._host.file_exists(path):
            document = self._host.load(path)
            if encrypted:
                self.open_encrypted(document)
        else:
            document = self._host.new_document(path)
            if encrypted:
                self._adopt(document)
                self._log.info("New encrypted document %s", path)

        return document

    def open_encrypted(self, document: Document) -> None:
        """
        Decrypt the document's raw content and enter TRANSPARENT mode.

        Dirty and read-only flags are preserved exactly. On failure
        nothing is changed.

        Raises:
            PreconditionViolation: Already TRANSPARENT, or no storage path
            DecryptionError: Propagated verbatim from the backend
        """
        self._require(document, DocumentMode.PLAIN, "already in transparent mode")
        if document.storage_path is None:
            raise PreconditionViolation("document has no target identity")

        try:
            result = self._backend.decrypt(document.content)
        except DecryptionError:
            self._log.warning("Decryption of %s failed", document.storage_path)
            raise

        if result.recipients:
            document.recipients = result.recipients
        self._adopt(document, plaintext=result.plaintext)
        self._log.info("Opened %s in transparent mode", document.storage_path)

    def ordoify(self, document: Document, path: Optional[str | os.PathLike[str]] = None) -> None:
        """
        Adopt TRANSPARENT mode for a path that does not hold ciphertext yet.

        Content is already plaintext, so nothing is decrypted. The
        document is marked dirty because its encrypted form does not
        exist until the next save.
        """
        self._require(document, DocumentMode.PLAIN, "already in transparent mode")

        if path is None:
            default = None
            if document.storage_path is not None:
                default = Path(f"{document.storage_path}.{self._policy.suffixes[0]}")
            path = self._host.read_file_name("Encrypt to file: ", default)

        target = self._resolve_target(document, Path(path))
        if self._host.file_exists(target) and target != document.storage_path:
            if not self._host.yes_or_no(f"File {target} exists; replace it on save? "):
                raise UserCancelled("replacement declined")

        self._host.rebind_path(document, target)
        self._adopt(document)
        document.dirty = True
        self._log.info("Document now encrypted as %s", target)

    def disable(self, document: Document) -> bool:
        """
        Leave TRANSPARENT mode after explicit confirmation.

        The document is detached from its encrypted file so a later save
        has to pick a new (plaintext) destination. Content is untouched.

        Returns:
            True when disabled, False when the user declined
        """
        self._require(document, DocumentMode.TRANSPARENT, "not in transparent mode")

        if not self._host.yes_or_no(
            "Disable transparent encryption? Future saves will write plaintext. "
        ):
            return False

        path = document.storage_path
        self._release(document)
        self._host.detach_file(document)
        self._log.warning("Transparent encryption disabled for %s", path)
        return True

    def save(self, document: Document) -> None:
        """The host's generic save command."""
        self._host.save(document)

    def encrypted_save(self, document: Document) -> None:
        """
        Encrypt the document and write the ciphertext to its storage path.

        Raises:
            PreconditionViolation: Not TRANSPARENT, or no target identity
            EncryptionError: No recipient resolvable or backend failure
            OSError: The host could not write the file
        """
        if not document.is_transparent:
            raise PreconditionViolation("not in transparent mode")
        if document.storage_path is None or not str(document.storage_path):
            raise PreconditionViolation("document has no target identity")

        recipients = self._resolve_recipients(document)
        self._write_encrypted(document, recipients)

    def encrypted_save_as(
        self,
        document: Document,
        new_path: Optional[str | os.PathLike[str]] = None,
        confirm: bool = True,
    ) -> None:
        """
        Write the document under a new name.

        Targets with a recognized suffix are written encrypted. For any
        other target the user chooses between encrypted and plaintext;
        the plaintext branch leaves TRANSPARENT mode and hands the
        document to the host's ordinary save.
        """
        self._require(document, DocumentMode.TRANSPARENT, "not in transparent mode")

        if new_path is None:
            new_path = self._host.read_file_name("Write encrypted file: ", document.storage_path)

        target = self._resolve_target(document, Path(new_path))
        if confirm and target != document.storage_path and self._host.file_exists(target):
            if not self._host.yes_or_no(f"File {target} exists; overwrite? "):
                raise UserCancelled("overwrite declined")

        if self._policy.has_suffix(target) or self._ask_encrypt(target):
            recipients = self._resolve_recipients(document)
            # Backends may prompt inside encrypt; the document is rebound
            # only once the ciphertext is on disk
            ciphertext = self._encrypt(document, recipients)
            self._store(target, ciphertext)
            self._host.rebind_path(document, target)
            # Rebinding invalidates the previous registration
            self._adopt(document)
            self._mark_saved(document, recipients, len(ciphertext))
        else:
            self._log.warning("Writing %s without encryption", target)
            self._release(document)
            document.logical_name = None
            self._host.rebind_path(document, target)
            self._host.detect_mode(document, str(target))
            document.dirty = True
            self._host.plain_save(document)

    def check_invariant(self, document: Document) -> bool:
        """True iff TRANSPARENT mode and an active intercept handle coincide."""
        saver = document.saver
        intercepted = isinstance(saver, SaveInterceptHandle) and saver.active
        if document.is_transparent:
            return intercepted
        return saver is PLAIN_SAVE

    # -- internals ----------------------------------------------------

    @staticmethod
    def _require(document: Document, mode: DocumentMode, message: str) -> None:
        if document.mode is not mode:
            raise PreconditionViolation(message)

    def _install(self, document: Document) -> None:
        previous = document.saver
        if isinstance(previous, SaveInterceptHandle):
            auto_save_before = previous.auto_save_before
            previous.release()
        else:
            auto_save_before = document.auto_save

        document.saver = SaveInterceptHandle(self, auto_save_before)
        document.mode = DocumentMode.TRANSPARENT
        # Background saves would write plaintext
        self._host.set_auto_save(document, False)

    def _release(self, document: Document) -> None:
        handle = document.saver
        document.saver = PLAIN_SAVE
        document.mode = DocumentMode.PLAIN
        if isinstance(handle, SaveInterceptHandle):
            handle.release()
            self._host.set_auto_save(document, handle.auto_save_before)

    def _adopt(self, document: Document, plaintext: Optional[bytes] = None) -> None:
        self._install(document)

        if plaintext is not None:
            dirty, read_only = document.dirty, document.read_only
            self._host.replace_content(document, plaintext)
            document.dirty, document.read_only = dirty, read_only

        logical_name = self._policy.strip_suffix(document.storage_path)
        document.logical_name = logical_name
        self._host.detect_mode(document, logical_name)

    def _resolve_target(self, document: Document, path: Path) -> Path:
        if not self._host.is_directory(path):
            return path
        if not document.name:
            raise PreconditionViolation(f"cannot derive a file name inside directory {path}")
        return path / document.name

    def _ask_encrypt(self, target: Path) -> bool:
        prompt = f"{target.name} has no encrypted suffix. Save (e)ncrypted or (p)laintext? "
        while True:
            answer = self._host.read_char(prompt, ("e", "p")).strip().lower()
            if answer == "e":
                return True
            if answer == "p":
                return False
            self._host.message("Please answer e or p.")

    def _resolve_recipients(self, document: Document) -> Optional[tuple[str, ...]]:
        if document.recipients:
            return document.recipients
        if self._config.suffix.default_recipients:
            return self._config.suffix.default_recipients
        if not self._backend.requires_recipients:
            return None

        recipients = self._host.read_recipients("Encrypt for recipients: ")
        if not recipients:
            raise EncryptionError("No recipients selected")
        return recipients

    def _encrypt(self, document: Document, recipients: Optional[tuple[str, ...]]) -> bytes:
        """Encrypt a scratch copy of the content; the document is not touched."""
        with ScratchBuffer(document.content) as scratch:
            plaintext = scratch.data
            try:
                ciphertext = self._backend.encrypt(plaintext, recipients)
            except EncryptionError:
                self._log.warning("Encryption for %s failed", document.storage_path)
                raise

            if hmac.compare_digest(ciphertext, plaintext):
                raise EncryptionError("Backend returned unencrypted content")
        return ciphertext

    def _store(self, path: Path, ciphertext: bytes) -> None:
        try:
            self._host.write_bytes(path, ciphertext)
        except OSError:
            self._log.error("Writing %s failed", path)
            raise

    def _mark_saved(
        self,
        document: Document,
        recipients: Optional[tuple[str, ...]],
        size: int,
    ) -> None:
        document.dirty = False
        self._host.refresh_modtime(document)
        if recipients:
            document.recipients = recipients
        self._log.info("Saved %s (%d bytes encrypted)", document.storage_path, size)

    def _write_encrypted(self, document: Document, recipients: Optional[tuple[str, ...]]) -> None:
        ciphertext = self._encrypt(document, recipients)
        self._store(document.storage_path, ciphertext)
        self._mark_saved(document, recipients, len(ciphertext))
