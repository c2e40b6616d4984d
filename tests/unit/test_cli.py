"""Tests for the command line interface."""

import io
import json
import logging
from pathlib import Path

import pytest

from conftest import seal
from ordo.cli import EXIT_CANCELLED, EXIT_ERROR, EXIT_OK, build_parser, main


@pytest.fixture
def run(host, backend, config):
    """Invoke main() against the in-memory host; returns (status, stdout bytes)."""

    def _run(*argv, stdin=b""):
        stdout = io.BytesIO()
        status = main(
            list(argv),
            config=config,
            host=host,
            backend=backend,
            stdin=io.BytesIO(stdin),
            stdout=stdout,
        )
        return status, stdout.getvalue()

    return _run


class TestCat:

    def test_prints_plaintext(self, run, secret_file):
        assert run("cat", "secret.gpg") == (EXIT_OK, b"P0 plaintext\n")

    def test_does_not_write(self, run, host, secret_file):
        run("cat", "secret.gpg")
        assert host.writes == []

    def test_missing_file(self, run, host):
        status, _ = run("cat", "nothing.gpg")
        assert status == EXIT_ERROR
        assert host.messages == ["ordo: nothing.gpg does not exist"]

    def test_plain_file_rejected(self, run, host):
        host.files[Path("notes.txt")] = b"hello"
        status, out = run("cat", "notes.txt")
        assert status == EXIT_ERROR
        assert out == b""

    def test_decryption_failure(self, run, backend, secret_file):
        backend.fail_decrypt = True
        assert run("cat", "secret.gpg")[0] == EXIT_ERROR

    def test_custom_suffix(self, run, host):
        host.files[Path("diary.age")] = seal(b"dear diary")
        assert run("--suffix", "age", "cat", "diary.age") == (EXIT_OK, b"dear diary")


class TestCreate:

    def test_encrypts_stdin(self, run, host, backend):
        status, _ = run("-r", "alice", "create", "new.gpg", stdin=b"fresh text")

        assert status == EXIT_OK
        stored = host.files[Path("new.gpg")]
        assert b"fresh text" not in stored
        assert backend.decrypt(stored).plaintext == b"fresh text"
        assert backend.encrypt_calls[-1][1] == ("alice",)

    def test_prompts_for_recipients(self, run, host, backend):
        host.answer("carol")
        assert run("create", "new.gpg", stdin=b"x")[0] == EXIT_OK
        assert backend.encrypt_calls[-1][1] == ("carol",)

    def test_cancelled_prompt(self, run, host):
        assert run("create", "new.gpg", stdin=b"x")[0] == EXIT_CANCELLED
        assert Path("new.gpg") not in host.files

    def test_encryption_failure(self, run, host, backend):
        backend.fail_encrypt = True
        status, _ = run("-r", "alice", "create", "new.gpg", stdin=b"x")

        assert status == EXIT_ERROR
        assert host.messages == ["ordo: backend failure"]
        assert Path("new.gpg") not in host.files


class TestSaveAs:

    def test_writes_encrypted_copy(self, run, host, backend, secret_file):
        assert run("save-as", "secret.gpg", "copy.ordo")[0] == EXIT_OK
        assert backend.decrypt(host.files[Path("copy.ordo")]).plaintext == b"P0 plaintext\n"

    def test_overwrite_declined(self, run, host, secret_file):
        host.files[Path("copy.ordo")] = b"keep"
        host.answer(False)

        assert run("save-as", "secret.gpg", "copy.ordo")[0] == EXIT_CANCELLED
        assert host.files[Path("copy.ordo")] == b"keep"

    def test_no_confirm(self, run, host, secret_file):
        host.files[Path("copy.ordo")] = b"old"

        assert run("save-as", "--no-confirm", "secret.gpg", "copy.ordo")[0] == EXIT_OK
        assert host.prompts == []

    def test_plaintext_target(self, run, host, secret_file):
        host.answer("p")
        assert run("save-as", "secret.gpg", "plain.txt")[0] == EXIT_OK
        assert host.files[Path("plain.txt")] == b"P0 plaintext\n"


class TestRecrypt:

    def test_uses_remembered_recipients(self, run, host, backend, secret_file):
        original = host.files[secret_file]

        assert run("recrypt", "secret.gpg")[0] == EXIT_OK
        assert host.files[secret_file] != original
        assert backend.encrypt_calls[-1] == (b"P0 plaintext\n", ("alice",))

    def test_new_recipients(self, run, host, backend, secret_file):
        assert run("recrypt", "secret.gpg", "--to", "bob", "--to", "carol")[0] == EXIT_OK
        assert backend.decrypt(host.files[secret_file]).recipients == ("bob", "carol")


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_parser_rejects_unknown_backend():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--backend", "rot13", "cat", "a.gpg"])


def test_logging_configuration_reaches_the_log_file(host, backend, secret_file, tmp_path):
    from ordo.core.config import LoggingConfig, OrdoConfig

    config = OrdoConfig(logging=LoggingConfig(
        level="INFO", log_dir=tmp_path, enable_console=False, enable_file=True, enable_json=True,
    ))

    status = main(["cat", "secret.gpg"], config=config, host=host, backend=backend,
                  stdin=io.BytesIO(), stdout=io.BytesIO())
    for handler in logging.getLogger("ordo").handlers:
        handler.flush()

    assert status == EXIT_OK
    records = [json.loads(line) for line in (tmp_path / "ordo.log").read_text().splitlines()]
    assert any(r["logger"] == "ordo.lifecycle" and "secret.gpg" in r["message"] for r in records)
    assert all("P0 plaintext" not in r["message"] for r in records)
