"""
Console host.

Real filesystem, terminal prompts. Prompts are written to stderr so
stdout stays free for document content; passphrases are read with
getpass. End of input or Ctrl-C at a prompt raises UserCancelled.
"""

from __future__ import annotations

import getpass
import mimetypes
import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

from ordo.core.document import Document
from ordo.core.errors import UserCancelled
from ordo.host.base import HostEditor
from ordo.utils.paths import atomic_write_bytes, file_modtime


class ConsoleHost(HostEditor):
    """Host for command line use."""

    def __init__(self, stdin: TextIO = sys.stdin, stderr: TextIO = sys.stderr) -> None:
        self._in = stdin
        self._err = stderr

    # -- persistence --------------------------------------------------

    def load(self, path: Path) -> Document:
        path = Path(path)
        return Document(
            content=path.read_bytes(),
            storage_path=path,
            modtime=file_modtime(path),
        )

    def plain_save(self, document: Document) -> None:
        if document.storage_path is None:
            document.storage_path = self.read_file_name("File to save in: ")
        atomic_write_bytes(document.storage_path, document.content)
        document.dirty = False
        self.refresh_modtime(document)

    def write_bytes(self, path: Path, data: bytes) -> None:
        atomic_write_bytes(path, data)

    def file_exists(self, path: Path) -> bool:
        return Path(path).exists()

    def is_directory(self, path: Path) -> bool:
        return Path(path).is_dir()

    def file_modtime(self, path: Path) -> Optional[float]:
        return file_modtime(path)

    def detect_mode(self, document: Document, identity: str) -> None:
        mime_type, _ = mimetypes.guess_type(identity)
        document.content_type = mime_type

    # -- prompts ------------------------------------------------------

    def _read_line(self, prompt: str) -> str:
        self._err.write(prompt)
        self._err.flush()
        try:
            line = self._in.readline()
        except KeyboardInterrupt:
            raise UserCancelled(prompt) from None
        if not line:
            raise UserCancelled(prompt)
        return line.rstrip("\r\n")

    def read_file_name(self, prompt: str, default: Optional[Path] = None) -> Path:
        shown = f"{prompt}[{default}] " if default is not None else prompt
        answer = self._read_line(shown).strip()
        if not answer:
            if default is None:
                raise UserCancelled(prompt)
            return Path(default)
        return Path(answer).expanduser()

    def read_char(self, prompt: str, choices: Sequence[str]) -> str:
        return self._read_line(f"{prompt}({'/'.join(choices)}) ")[:1]

    def yes_or_no(self, prompt: str) -> bool:
        while True:
            answer = self._read_line(f"{prompt}(yes or no) ").strip().lower()
            if answer in ("yes", "y"):
                return True
            if answer in ("no", "n"):
                return False
            self.message("Please answer yes or no.")

    def read_recipients(self, prompt: str) -> tuple[str, ...]:
        answer = self._read_line(prompt)
        return tuple(r.strip() for r in answer.split(",") if r.strip())

    def read_passphrase(self, prompt: str, confirm: bool = False) -> str:
        try:
            passphrase = getpass.getpass(prompt, stream=self._err)
            if confirm:
                again = getpass.getpass("Repeat passphrase: ", stream=self._err)
                if again != passphrase:
                    self.message("Passphrases do not match.")
                    raise UserCancelled(prompt)
        except (EOFError, KeyboardInterrupt):
            raise UserCancelled(prompt) from None
        return passphrase

    def message(self, text: str) -> None:
        self._err.write(text + "\n")
        self._err.flush()
