"""Tests for logging setup and structured events."""

import io
import json
import logging

import pytest

from catalog_import.logging_config import (
    ColoredConsoleHandler,
    JSONLFileHandler,
    get_logger,
    log_import_event,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _clean_logger(reset_package_logger):
    yield


def read_entries(log_dir):
    files = list(log_dir.glob("import_*.jsonl"))
    assert len(files) == 1
    return [json.loads(line) for line in files[0].read_text(encoding="utf-8").splitlines()]


class TestSetupLogging:

    def test_console_and_file_handlers(self, tmp_path):
        logger = setup_logging(log_dir=tmp_path)

        kinds = {type(h) for h in logger.handlers}
        assert kinds == {ColoredConsoleHandler, JSONLFileHandler}

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path):
        setup_logging(log_dir=tmp_path)
        logger = setup_logging(log_dir=tmp_path)
        assert len(logger.handlers) == 2

    def test_without_file(self, tmp_path):
        logger = setup_logging(log_to_file=False, log_dir=tmp_path)
        assert [type(h) for h in logger.handlers] == [ColoredConsoleHandler]
        assert list(tmp_path.glob("*.jsonl")) == []

    def test_child_loggers_write_jsonl(self, tmp_path):
        setup_logging(log_to_console=False, log_dir=tmp_path)

        get_logger("engine").warning("⚠️ Product skipped")

        entries = read_entries(tmp_path)
        assert entries[0]["level"] == "WARNING"
        assert entries[0]["logger"] == "catalog_import.engine"
        assert entries[0]["message"] == "⚠️ Product skipped"


class TestLogImportEvent:

    def test_structured_fields(self, tmp_path):
        setup_logging(log_to_console=False, log_dir=tmp_path)

        log_import_event("product_skipped", {
            "message": "Skipped product TL-200",
            "path": ["ArtLight", "indoor", "track-light", "TL-200"],
            "error": "boom",
        }, logger_name="engine")

        entry = read_entries(tmp_path)[0]
        assert entry["event_type"] == "product_skipped"
        assert entry["message"] == "Skipped product TL-200"
        assert entry["path"][-1] == "TL-200"
        assert entry["error"] == "boom"

    def test_disabled_level_is_dropped(self, tmp_path):
        logger = setup_logging(log_to_console=False, log_dir=tmp_path)
        logger.setLevel(logging.WARNING)

        log_import_event("run_complete", {"processed_products": 3})

        assert list(tmp_path.glob("*.jsonl")) == []


class TestColoredConsoleHandler:

    def test_plain_output_when_not_a_tty(self):
        stream = io.StringIO()
        handler = ColoredConsoleHandler(stream)
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        record = logging.LogRecord("catalog_import", logging.ERROR, __file__, 1, "failed", (), None)

        handler.emit(record)

        assert stream.getvalue() == "[ERROR] failed\n"
