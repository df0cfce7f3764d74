import logging

from finance_tracker.config import Config
from finance_tracker.logging_config import setup_logging


def test_check_import_file(monkeypatch):
    assert Config.check_import_file("history.CSV", 120) is None
    assert Config.check_import_file("history.json", 0) == "File is empty"
    assert Config.check_import_file("statement.pdf", 120).startswith("Unsupported file format")

    monkeypatch.setattr(Config, "MAX_FILE_SIZE_MB", 1)
    assert Config.check_import_file("big.csv", 2 * 1024 * 1024).startswith("File too large")


def test_setup_logging_writes_log_file():
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    try:
        setup_logging(log_level="debug", log_file="test.log", console_output=False)
        assert root.level == logging.DEBUG
        logging.getLogger("finance_tracker.test").info("hello")
        for handler in root.handlers:
            handler.flush()
        assert "hello" in (Config.LOG_DIR / "test.log").read_text(encoding="utf-8")
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])
