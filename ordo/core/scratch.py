"""
Scratch Buffer Module
=====================

Isolated, wipeable copies of document content.

Every encrypted save works on a ScratchBuffer instead of the live
document, so a failure mid-encryption cannot touch what the user sees.
The buffer is zeroed when its ``with`` block exits, on success or error.

WARNING:
- Python's memory model doesn't guarantee secure erasure
- Immutable ``bytes`` handed to a backend may outlive the wipe
- This narrows the window, it does not close it
"""

from __future__ import annotations

import ctypes


def secure_zero(data: bytearray) -> None:
    """
    Overwrite a bytearray in place.

    Uses ctypes for direct memory access, with a Python-level
    fallback when the buffer cannot be exported.
    """
    if len(data) == 0:
        return

    try:
        addr = ctypes.addressof((ctypes.c_char * len(data)).from_buffer(data))
        ctypes.memset(addr, 0, len(data))
        ctypes.memset(addr, 0xFF, len(data))
        ctypes.memset(addr, 0, len(data))
    except (TypeError, ValueError, BufferError):
        for i in range(len(data)):
            data[i] = 0


class ScratchBuffer:
    """
    Private copy of document content with automatic wiping.

    Usage:
        with ScratchBuffer(document.content) as scratch:
            ciphertext = backend.encrypt(scratch.data, recipients)
        # scratch is now zeroed
    """

    __slots__ = ("_data", "_wiped", "_size", "__weakref__")

    def __init__(self, data: bytes | bytearray) -> None:
        self._data = bytearray(data)
        self._size = len(data)
        self._wiped = False

    @property
    def data(self) -> bytes:
        """
        Get data as immutable bytes.

        Every access returns a new copy that wipe() cannot reach; read it
        once per operation.
        """
        if self._wiped:
            raise ValueError("Scratch buffer has been wiped")
        return bytes(self._data)

    @property
    def size(self) -> int:
        return self._size

    @property
    def is_wiped(self) -> bool:
        return self._wiped

    def wipe(self) -> None:
        """Zero the buffer; further reads raise ValueError."""
        if not self._wiped:
            secure_zero(self._data)
            self._wiped = True

    def __enter__(self) -> "ScratchBuffer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.wipe()

    def __del__(self) -> None:
        try:
            self.wipe()
        except Exception:
            pass

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        if self._wiped:
            return "ScratchBuffer(WIPED)"
        return f"ScratchBuffer(size={self._size})"
