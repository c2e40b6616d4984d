"""Tests for the terminal host."""

import io
from pathlib import Path
from unittest.mock import patch

import pytest

from ordo.core.errors import UserCancelled
from ordo.host.console import ConsoleHost


def _host(text=""):
    return ConsoleHost(stdin=io.StringIO(text), stderr=io.StringIO())


class TestPrompts:

    def test_prompts_go_to_stderr(self):
        host = _host("out.gpg\n")
        assert host.read_file_name("Write encrypted file: ") == Path("out.gpg")
        assert "Write encrypted file: " in host._err.getvalue()

    def test_file_name_default(self):
        host = _host("\n")
        assert host.read_file_name("File: ", Path("a.gpg")) == Path("a.gpg")
        assert "[a.gpg]" in host._err.getvalue()

    def test_empty_file_name_without_default(self):
        with pytest.raises(UserCancelled):
            _host("\n").read_file_name("File: ")

    def test_end_of_input_cancels(self):
        with pytest.raises(UserCancelled):
            _host("").read_char("Save? ", ("e", "p"))

    def test_read_char_returns_first_character(self):
        assert _host("plain\n").read_char("Save? ", ("e", "p")) == "p"

    def test_yes_or_no_repeats_until_answered(self):
        host = _host("maybe\nYES\n")
        assert host.yes_or_no("Overwrite? ") is True
        assert "Please answer yes or no." in host._err.getvalue()

    def test_yes_or_no_no(self):
        assert _host("n\n").yes_or_no("Overwrite? ") is False

    def test_read_recipients(self):
        host = _host("alice@example.org, BOBKEY ,\n")
        assert host.read_recipients("Recipients: ") == ("alice@example.org", "BOBKEY")

    @patch("ordo.host.console.getpass.getpass", side_effect=["pw", "pw"])
    def test_passphrase_confirmed(self, mock_getpass):
        assert _host().read_passphrase("Passphrase: ", confirm=True) == "pw"
        assert mock_getpass.call_count == 2

    @patch("ordo.host.console.getpass.getpass", side_effect=["pw", "other"])
    def test_passphrase_mismatch_cancels(self, mock_getpass):
        host = _host()
        with pytest.raises(UserCancelled):
            host.read_passphrase("Passphrase: ", confirm=True)
        assert "Passphrases do not match." in host._err.getvalue()

    @patch("ordo.host.console.getpass.getpass", side_effect=KeyboardInterrupt)
    def test_passphrase_interrupted(self, mock_getpass):
        with pytest.raises(UserCancelled):
            _host().read_passphrase("Passphrase: ")


class TestFilesystem:

    def test_load_and_plain_save(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_bytes(b"hello")
        host = _host()

        doc = host.load(path)
        assert doc.content == b"hello"
        assert doc.modtime == path.stat().st_mtime

        doc.content = b"changed"
        doc.dirty = True
        host.plain_save(doc)

        assert path.read_bytes() == b"changed"
        assert doc.dirty is False

    def test_write_bytes_and_queries(self, tmp_path):
        host = _host()
        target = tmp_path / "a.gpg"

        host.write_bytes(target, b"cipher")

        assert host.file_exists(target)
        assert host.is_directory(tmp_path)
        assert not host.is_directory(target)
        assert host.file_modtime(target) is not None

    def test_detect_mode_uses_identity(self):
        host = _host()
        doc = host.new_document(Path("page.html.gpg"))
        host.detect_mode(doc, "page.html")
        assert doc.content_type == "text/html"
