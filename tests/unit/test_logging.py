"""Unit tests for the logging utilities and the exception hierarchy."""

import json
import logging

import pytest

from src.communications.exceptions import RequestFailedError
from src.components.common.exceptions import LanguageNotSupportedError
from src.components.common.logging import ComponentLoggerMixin, log_component_operation
from src.utils.exceptions import BaseAppException, ConfigurationError, ValidationError
from src.utils.logging import (
    ColoredFormatter,
    ContextFilter,
    JSONFormatter,
    apply_logger_levels,
    get_logger,
    setup_logging,
)


def make_record(message="hello", **extra):
    record = logging.LogRecord("test", logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class Worker(ComponentLoggerMixin):

    @log_component_operation("work")
    def work(self, fail=False):
        if fail:
            raise ValueError("broken")
        return "done"


class TestFormatters:
    """Test log formatters and filters."""

    def test_json_formatter_includes_extra_fields(self):
        record = make_record(extra_fields={"component": "QAnswer"})

        entry = json.loads(JSONFormatter().format(record))

        assert entry["message"] == "hello"
        assert entry["level"] == "INFO"
        assert entry["component"] == "QAnswer"

    def test_colored_formatter_restores_levelname(self):
        record = make_record()

        output = ColoredFormatter("%(levelname)s %(message)s").format(record)

        assert "\033[32m" in output
        assert record.levelname == "INFO"

    def test_context_filter_keeps_explicit_fields(self):
        record = make_record(extra_fields={"component": "explicit"})

        ContextFilter({"component": "context", "layer": "api"}).filter(record)

        assert record.extra_fields == {"component": "explicit", "layer": "api"}

    def test_get_logger_adds_single_context_filter(self):
        logger = get_logger("tests.single_filter", context={"a": 1})
        get_logger("tests.single_filter", context={"a": 1})

        assert sum(isinstance(f, ContextFilter) for f in logger.filters) == 1

    def test_setup_logging_json_file(self, tmp_path):
        log_file = tmp_path / "logs" / "app.log"
        root_logger = logging.getLogger()
        previous_handlers = list(root_logger.handlers)
        previous_level = root_logger.level

        try:
            setup_logging(level="DEBUG", log_file=str(log_file), use_rich=False, use_json=True)
            logging.getLogger("tests.setup").info("written", extra={"extra_fields": {"k": "v"}})
            for handler in root_logger.handlers:
                handler.flush()
        finally:
            for handler in root_logger.handlers:
                handler.close()
            root_logger.handlers = previous_handlers
            root_logger.setLevel(previous_level)

        entry = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
        assert entry["message"] == "written"
        assert entry["k"] == "v"
        assert entry["app"] == "qanary-qa-components"

    def test_apply_logger_levels(self):
        logger = logging.getLogger("tests.levels.component")
        previous_level = logger.level

        try:
            apply_logger_levels({"tests.levels.component": "debug"})
            assert logger.level == logging.DEBUG
        finally:
            logger.setLevel(previous_level)


class TestComponentOperationLogging:
    """Test the operation decorator."""

    def test_success_logged(self, caplog):
        with caplog.at_level(logging.INFO):
            assert Worker().work() == "done"

        messages = [record.getMessage() for record in caplog.records]
        assert "Starting work" in messages
        assert any(message.startswith("Completed work in") for message in messages)

    def test_failure_logged_and_reraised(self, caplog):
        with caplog.at_level(logging.INFO):
            with pytest.raises(ValueError):
                Worker().work(fail=True)

        failed = [record for record in caplog.records if record.levelno == logging.ERROR]
        assert failed[0].extra_fields["error_type"] == "ValueError"
        assert failed[0].extra_fields["component"] == "Worker"


class TestExceptions:
    """Test the exception hierarchy."""

    def test_to_dict(self):
        error = RequestFailedError("down", method="GET", uri="http://x", status_code=503)

        assert error.to_dict() == {
            "error_type": "RequestFailedError",
            "message": "down",
            "error_code": "REQUEST_FAILED",
            "details": {"method": "GET", "uri": "http://x", "status_code": 503},
        }
        assert isinstance(error, BaseAppException)

    def test_str_includes_details(self):
        assert str(BaseAppException("plain")) == "plain"
        assert "Details" in str(ConfigurationError("bad", missing_keys=["endpoint_url"]))

    def test_language_error_is_validation_error(self):
        assert isinstance(LanguageNotSupportedError("de", ["en"]), ValidationError)
