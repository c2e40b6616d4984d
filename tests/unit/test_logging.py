"""Tests for the secret-filtering logger."""

import json
import logging

from ordo.core.logging import SecureLogFilter, StructuredLogFormatter, get_secure_logger


def _record(msg, *args):
    return logging.LogRecord("ordo.test", logging.INFO, __file__, 1, msg, args or None, None)


class TestSecureLogFilter:

    def test_redacts_passphrase_assignment(self):
        record = _record("login with passphrase=hunter2 ok")
        SecureLogFilter().filter(record)

        assert "hunter2" not in record.getMessage()
        assert "[REDACTED]" in record.getMessage()

    def test_redacts_string_arguments(self):
        record = _record("loaded %s", "token: abc123")
        SecureLogFilter().filter(record)

        assert "abc123" not in record.getMessage()

    def test_redacts_armored_blobs(self):
        blob = "hQEMA" + "x" * 60
        record = _record("gpg said %s", blob)
        SecureLogFilter().filter(record)

        assert blob not in record.getMessage()

    def test_leaves_ordinary_messages(self):
        record = _record("Saved %s (%d bytes encrypted)", "secret.gpg", 42)
        assert SecureLogFilter().filter(record) is True
        assert record.getMessage() == "Saved secret.gpg (42 bytes encrypted)"


def test_structured_formatter_emits_json():
    output = StructuredLogFormatter().format(_record("hello %s", "world"))
    data = json.loads(output)

    assert data["message"] == "hello world"
    assert data["level"] == "INFO"
    assert data["logger"] == "ordo.test"


class TestGetSecureLogger:

    def test_configures_once(self):
        logger = get_secure_logger("ordo", level="INFO", enable_console=True)
        count = len(logger.handlers)

        again = get_secure_logger("ordo", level="DEBUG")

        assert again is logger
        assert len(again.handlers) == count
        assert logger.level == logging.INFO

    def test_file_output(self, tmp_path):
        logger = get_secure_logger(
            "ordo", log_dir=tmp_path, level="INFO", enable_console=False, enable_file=True,
        )
        logging.getLogger("ordo.lifecycle").info("opened with passphrase=letmein")
        for handler in logger.handlers:
            handler.flush()

        text = (tmp_path / "ordo.log").read_text()
        assert "opened with" in text
        assert "letmein" not in text

    def test_custom_text_format(self, tmp_path):
        logger = get_secure_logger(
            "ordo", log_dir=tmp_path, level="INFO", enable_console=False, enable_file=True,
            log_format="%(levelname)s:%(name)s:%(message)s",
        )
        logging.getLogger("ordo.lifecycle").info("Saved %s", "a.gpg")
        for handler in logger.handlers:
            handler.flush()

        assert (tmp_path / "ordo.log").read_text() == "INFO:ordo.lifecycle:Saved a.gpg\n"
