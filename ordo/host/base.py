"""
Host Editor Contract
====================

Everything the lifecycle controller needs from the surrounding editor:

- generic save dispatch (through ``document.saver``)
- full content replace
- raw byte write to a path (atomic with respect to the target)
- rebind / detach a document's on-disk identity without touching disk
- line, character, yes/no, recipient and passphrase prompts
- auto-save toggle and format detection with a substitute identity

Prompts either return a value or raise UserCancelled; they never
return a sentinel for "aborted".
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence

from ordo.core.document import Document


class HostEditor(ABC):
    """Abstract editing host."""

    # -- generic save ------------------------------------------------

    def save(self, document: Document) -> None:
        """Generic save command; dispatches to the document's strategy."""
        document.saver.save(self, document)

    @abstractmethod
    def plain_save(self, document: Document) -> None:
        """Write content unchanged to ``document.storage_path``."""

    # -- content and persistence --------------------------------------

    @abstractmethod
    def load(self, path: Path) -> Document:
        """Create a PLAIN document holding the raw bytes stored at ``path``."""

    def new_document(self, path: Optional[Path] = None, content: bytes = b"") -> Document:
        """Create a PLAIN document for a file that does not exist yet."""
        return Document(content=content, storage_path=path)

    def replace_content(self, document: Document, content: bytes) -> None:
        """Replace the full buffer content, ignoring the read-only flag."""
        document.content = content
        document.dirty = True

    @abstractmethod
    def write_bytes(self, path: Path, data: bytes) -> None:
        """Persist ``data`` at ``path``; the old content survives a failure."""

    @abstractmethod
    def file_exists(self, path: Path) -> bool:
        """True when something is stored at ``path``."""

    @abstractmethod
    def is_directory(self, path: Path) -> bool:
        """True when ``path`` names a directory."""

    @abstractmethod
    def file_modtime(self, path: Path) -> Optional[float]:
        """Modification time of ``path``, or None when missing."""

    # -- identity -----------------------------------------------------

    def rebind_path(self, document: Document, path: Path) -> None:
        """Point the document at a new on-disk identity without writing."""
        document.storage_path = Path(path)
        document.modtime = None

    def detach_file(self, document: Document) -> None:
        """Forget the visited file entirely."""
        document.storage_path = None
        document.logical_name = None
        document.modtime = None

    def refresh_modtime(self, document: Document) -> None:
        """Record the current on-disk modification time of the document."""
        if document.storage_path is not None:
            document.modtime = self.file_modtime(document.storage_path)

    def set_auto_save(self, document: Document, enabled: bool) -> None:
        document.auto_save = enabled

    @abstractmethod
    def detect_mode(self, document: Document, identity: str) -> None:
        """Run format/mode detection as if the document were named ``identity``."""

    # -- prompts ------------------------------------------------------

    @abstractmethod
    def read_file_name(self, prompt: str, default: Optional[Path] = None) -> Path:
        """Ask for a path."""

    @abstractmethod
    def read_char(self, prompt: str, choices: Sequence[str]) -> str:
        """Ask for a single character; may return anything the user typed."""

    @abstractmethod
    def yes_or_no(self, prompt: str) -> bool:
        """Ask a yes/no question."""

    @abstractmethod
    def read_recipients(self, prompt: str) -> tuple[str, ...]:
        """Ask for encryption recipients."""

    @abstractmethod
    def read_passphrase(self, prompt: str, confirm: bool = False) -> str:
        """Ask for a passphrase, twice when ``confirm`` is set."""

    def message(self, text: str) -> None:
        """Show an informational message; silent by default."""
