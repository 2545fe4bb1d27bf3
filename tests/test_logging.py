# pylint: disable=missing-class-docstring,missing-function-docstring
import json
import logging
from logging.handlers import RotatingFileHandler

import pytest

from api.core import config, setup_logging
from api.core.logging import JSONFormatter, TextFormatter, request_id_ctx


def _record(name="dla.table_detection", level=logging.INFO, msg="3 tables attached", **extra):
    record = logging.LogRecord(name, level, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def request_id():
    token = request_id_ctx.set("req-42")
    yield "req-42"
    request_id_ctx.reset(token)


class TestJSONFormatter:
    def test_fields(self):
        entry = json.loads(JSONFormatter().format(_record()))
        assert entry["component"] == "table_detection"
        assert entry["level"] == "INFO"
        assert entry["message"] == "3 tables attached"
        assert "request_id" not in entry
        assert "location" not in entry

    def test_request_id_and_data(self, request_id):
        entry = json.loads(JSONFormatter().format(_record(extra_data={"pages": 2})))
        assert entry["request_id"] == request_id
        assert entry["data"] == {"pages": 2}

    def test_warnings_carry_their_location(self):
        entry = json.loads(JSONFormatter().format(_record(level=logging.WARNING)))
        assert entry["location"].endswith(":10")

    def test_foreign_logger_name_is_kept(self):
        entry = json.loads(JSONFormatter().format(_record(name="uvicorn.error")))
        assert entry["component"] == "uvicorn.error"


class TestTextFormatter:
    def test_line(self, request_id):
        line = TextFormatter().format(_record(name="dla.extractors.camelot", extra_data={"status": 1}))
        assert f"[{request_id}] extractors.camelot | 3 tables attached | {{'status': 1}}" in line
        assert "| INFO     |" in line


class TestSetupLogging:
    @pytest.fixture
    def logger_name(self):
        name = "dla_setup_test"
        yield name
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def test_console_only(self, logger_name):
        logger = setup_logging(logger_name, level="DEBUG", log_to_file=False, fmt="text")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, TextFormatter)
        assert not logger.propagate

    def test_file_handler(self, logger_name, tmp_path, monkeypatch):
        log_file = tmp_path / "logs" / "tables.log"
        monkeypatch.setattr(config, "LOG_FILE_PATH", str(log_file))

        logger = setup_logging(logger_name, level="INFO", log_to_file=True, fmt="json")
        logger.info("written")
        for handler in logger.handlers:
            handler.flush()

        assert any(isinstance(h, RotatingFileHandler) for h in logger.handlers)
        assert json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])["message"] == "written"

    def test_is_configured_once(self, logger_name):
        first = setup_logging(logger_name, log_to_file=False)
        second = setup_logging(logger_name, log_to_file=True)
        assert first is second
        assert len(second.handlers) == 1
