"""Tests for wipeable scratch buffers."""

import pytest

from ordo.core.scratch import ScratchBuffer, secure_zero


def test_secure_zero():
    data = bytearray(b"plaintext")
    secure_zero(data)
    assert data == bytearray(len(b"plaintext"))


def test_secure_zero_empty():
    data = bytearray()
    secure_zero(data)
    assert data == bytearray()


class TestScratchBuffer:

    def test_copy_is_independent(self):
        source = bytearray(b"live buffer")
        scratch = ScratchBuffer(source)
        source[:4] = b"XXXX"

        assert scratch.data == b"live buffer"

    def test_wiped_on_exit(self):
        with ScratchBuffer(b"secret") as scratch:
            assert scratch.data == b"secret"
        assert scratch.is_wiped
        with pytest.raises(ValueError):
            scratch.data

    def test_wiped_on_error(self):
        with pytest.raises(RuntimeError):
            with ScratchBuffer(b"secret") as scratch:
                raise RuntimeError("backend failed")
        assert scratch.is_wiped

    def test_repr_hides_content(self):
        scratch = ScratchBuffer(b"secret")
        assert repr(scratch) == "ScratchBuffer(size=6)"
        scratch.wipe()
        assert repr(scratch) == "ScratchBuffer(WIPED)"
        assert len(scratch) == 6
