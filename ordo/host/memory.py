"""
In-memory host.

Keeps "files" in a dictionary and answers prompts from a script, which
makes it suitable for embedding ordo in another program and for tests.
A scripted answer of ``None``, or running out of answers, raises
UserCancelled, like pressing the escape key at a real prompt.
"""

from __future__ import annotations

from collections import deque
from pathlib import Path, PurePath
from typing import Any, Iterable, Optional, Sequence

from ordo.core.document import Document
from ordo.core.errors import UserCancelled
from ordo.host.base import HostEditor


class MemoryHost(HostEditor):
    """
    Host backed by a dictionary of path -> bytes.

    Attributes:
        files: Stored content by path
        writes: Every (path, data) written, in order
        plain_saves: Paths written by plain_save
        prompts: Every prompt shown, in order
        messages: Every message shown, in order
        directories: Paths that behave as directories
        fail_writes: When set, write_bytes raises OSError
    """

    def __init__(
        self,
        files: Optional[dict[Any, bytes]] = None,
        answers: Iterable[Any] = (),
        directories: Iterable[Any] = (),
    ) -> None:
        self.files: dict[Path, bytes] = {Path(k): v for k, v in (files or {}).items()}
        self.directories: set[Path] = {Path(d) for d in directories}
        self.writes: list[tuple[Path, bytes]] = []
        self.plain_saves: list[Path] = []
        self.prompts: list[str] = []
        self.messages: list[str] = []
        self.fail_writes = False
        self._answers: deque[Any] = deque(answers)
        self._clock = 0.0
        self._modtimes: dict[Path, float] = {path: self._tick() for path in self.files}

    def _tick(self) -> float:
        self._clock += 1.0
        return self._clock

    def answer(self, *answers: Any) -> None:
        """Queue more scripted prompt answers."""
        self._answers.extend(answers)

    @property
    def pending_answers(self) -> int:
        return len(self._answers)

    def _next_answer(self, prompt: str) -> Any:
        self.prompts.append(prompt)
        if not self._answers:
            raise UserCancelled(prompt)
        answer = self._answers.popleft()
        if answer is None:
            raise UserCancelled(prompt)
        return answer

    # -- persistence --------------------------------------------------

    def load(self, path: Path) -> Document:
        path = Path(path)
        if path not in self.files:
            raise FileNotFoundError(f"File not found: {path}")
        return Document(
            content=self.files[path],
            storage_path=path,
            modtime=self._modtimes.get(path),
        )

    def plain_save(self, document: Document) -> None:
        if document.storage_path is None:
            document.storage_path = self.read_file_name("File to save in: ")
        self.write_bytes(document.storage_path, document.content)
        self.plain_saves.append(document.storage_path)
        document.dirty = False
        self.refresh_modtime(document)

    def write_bytes(self, path: Path, data: bytes) -> None:
        if self.fail_writes:
            raise OSError(f"Write to {path} failed")
        path = Path(path)
        self.files[path] = bytes(data)
        self._modtimes[path] = self._tick()
        self.writes.append((path, bytes(data)))

    def file_exists(self, path: Path) -> bool:
        path = Path(path)
        return path in self.files or path in self.directories

    def is_directory(self, path: Path) -> bool:
        return Path(path) in self.directories

    def file_modtime(self, path: Path) -> Optional[float]:
        return self._modtimes.get(Path(path))

    def detect_mode(self, document: Document, identity: str) -> None:
        suffix = PurePath(identity).suffix
        document.content_type = suffix.lstrip(".") or "fundamental"

    # -- prompts ------------------------------------------------------

    def read_file_name(self, prompt: str, default: Optional[Path] = None) -> Path:
        answer = self._next_answer(prompt)
        if answer == "" and default is not None:
            return Path(default)
        return Path(answer)

    def read_char(self, prompt: str, choices: Sequence[str]) -> str:
        return str(self._next_answer(prompt))

    def yes_or_no(self, prompt: str) -> bool:
        return bool(self._next_answer(prompt))

    def read_recipients(self, prompt: str) -> tuple[str, ...]:
        answer = self._next_answer(prompt)
        if isinstance(answer, str):
            return tuple(r for r in answer.split(",") if r)
        return tuple(answer)

    def read_passphrase(self, prompt: str, confirm: bool = False) -> str:
        return str(self._next_answer(prompt))

    def message(self, text: str) -> None:
        self.messages.append(text)
