"""
Document State
==============

Per-document record owned by an editing session.

A document's save operation is polymorphic over its ``saver``:
PlainSave writes content as-is through the host, while the lifecycle
controller installs a SaveInterceptHandle that routes every save through
encryption. Only the controller changes ``mode`` and ``saver``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ordo.host.base import HostEditor


class DocumentMode(Enum):
    """Whether a document is stored as-is or encrypted at rest."""
    PLAIN = "plain"
    TRANSPARENT = "transparent"


class SaveStrategy(ABC):
    """How a document's generic save is carried out."""

    @abstractmethod
    def save(self, host: "HostEditor", document: "Document") -> None:
        """Persist ``document`` using ``host`` primitives."""


class PlainSave(SaveStrategy):
    """Ordinary save: content goes to disk unchanged."""

    def save(self, host: "HostEditor", document: "Document") -> None:
        host.plain_save(document)

    def __repr__(self) -> str:
        return "PlainSave()"


PLAIN_SAVE = PlainSave()


@dataclass(eq=False)
class Document:
    """
    One open editing session.

    Attributes:
        content: In-memory buffer content (plaintext while transparent)
        storage_path: On-disk identity, None when detached
        logical_name: storage_path minus its encrypted suffix
        mode: PLAIN or TRANSPARENT
        read_only: Editor read-only flag
        dirty: Modified since last save
        auto_save: Host background persistence enabled
        modtime: Recorded modification time of the visited file
        content_type: Result of the host's format detection
        recipients: Identities remembered for re-encryption
        saver: Strategy the host's generic save dispatches to
    """

    content: bytes = b""
    storage_path: Optional[Path] = None
    logical_name: Optional[str] = None
    mode: DocumentMode = DocumentMode.PLAIN
    read_only: bool = False
    dirty: bool = False
    auto_save: bool = True
    modtime: Optional[float] = None
    content_type: Optional[str] = None
    recipients: tuple[str, ...] = ()
    saver: SaveStrategy = field(default=PLAIN_SAVE)

    @property
    def is_transparent(self) -> bool:
        return self.mode is DocumentMode.TRANSPARENT

    @property
    def name(self) -> str:
        """Base name of the storage path, or an empty string."""
        return self.storage_path.name if self.storage_path is not None else ""

    def __repr__(self) -> str:
        # Never include content
        return (
            f"Document(storage_path={str(self.storage_path) if self.storage_path else None!r}, "
            f"mode={self.mode.value}, dirty={self.dirty}, read_only={self.read_only})"
        )
