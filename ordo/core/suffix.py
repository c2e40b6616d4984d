"""
Encrypted-file suffix policy.

Decides from a file name whether it denotes an encrypted document and
derives the logical name used for content-type detection.
"""

from __future__ import annotations

import os
from typing import Iterable

from ordo.core.config import DEFAULT_SUFFIXES


class SuffixPolicy:
    """
    Suffix matching over an ordered set of recognized suffixes.

    The first configured suffix that matches wins; there is no
    longest-match rule.

    Usage:
        policy = SuffixPolicy(("ordo", "pgp", "gpg"))
        policy.strip_suffix("report.ordo")   # "report"
        policy.has_suffix("a.gpg.bak")       # False
    """

    __slots__ = ("_suffixes",)

    def __init__(self, suffixes: Iterable[str] = DEFAULT_SUFFIXES) -> None:
        self._suffixes = tuple(suffixes)

    @property
    def suffixes(self) -> tuple[str, ...]:
        return self._suffixes

    def _match(self, name: str) -> str | None:
        for suffix in self._suffixes:
            if name.endswith("." + suffix):
                return suffix
        return None

    def strip_suffix(self, name: str | os.PathLike[str]) -> str:
        """Return ``name`` without its recognized suffix, or unchanged."""
        name = os.fspath(name)
        suffix = self._match(name)
        if suffix is None:
            return name
        return name[: -(len(suffix) + 1)]

    def has_suffix(self, name: str | os.PathLike[str]) -> bool:
        """True iff ``name`` ends with ``.`` plus a recognized suffix."""
        return self._match(os.fspath(name)) is not None

    def __repr__(self) -> str:
        return f"SuffixPolicy(suffixes={self._suffixes!r})"
