import logging

from proto2fetch import log
from proto2fetch.logger import Proto2FetchLogger, get_logger


class TestLogger:
    def test_package_logger_class(self) -> None:
        assert isinstance(log, Proto2FetchLogger)
        assert get_logger("proto2fetch") is log

    def test_other_loggers_keep_default_class(self) -> None:
        get_logger("proto2fetch.scratch")
        assert logging.getLoggerClass() is logging.Logger


class TestReportHelpers:
    def test_summary_table(self) -> None:
        with log.console.capture() as capture:
            log.summary("Parsed schema", {"Services": 2, "Messages": 11})
        output = capture.get()
        assert "Parsed schema" in output
        assert "Services" in output
        assert "11" in output

    def test_success_and_hint(self) -> None:
        with log.console.capture() as capture:
            log.success("Generated 4 files")
            log.hint("Add --include-path")
        output = capture.get()
        assert "✓ Generated 4 files" in output
        assert "Add --include-path" in output
