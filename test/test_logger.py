"""
Tests del Logger
=================
"""

import logging

from src.utils.logger import ColoredFormatter, get_logger, log_exception


def test_get_logger_does_not_duplicate_handlers():
    first = get_logger("test.logger.handlers")
    second = get_logger("test.logger.handlers")

    assert first is second
    assert len(second.handlers) == len(first.handlers)


def test_log_exception_records_error(caplog):
    logger = get_logger("test.logger.exception")
    logger.addHandler(caplog.handler)

    try:
        try:
            raise ValueError("bad candle")
        except ValueError as e:
            log_exception(logger, "Parse failed", e)
    finally:
        logger.removeHandler(caplog.handler)

    assert "Parse failed: ValueError: bad candle" in caplog.text


def test_colored_formatter_wraps_level():
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "mensaje", None, None)
    output = ColoredFormatter().format(record)

    assert "WARNING" in output
    assert "mensaje" in output


def test_logger_does_not_propagate_to_root():
    assert get_logger("test.logger.propagation").propagate is False
