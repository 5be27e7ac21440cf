"""Tests for the utils module."""

import logging
from decimal import Decimal

import pytest

from dex_scanner.utils import (
    LOG_FORMAT,
    floor_decimal,
    get_logger,
    timestamp_to_iso,
    to_decimal,
    to_percent,
)


def test_timestamps():
    assert timestamp_to_iso(0) == "1970-01-01T00:00:00+00:00"


class TestDecimalHelpers:
    def test_to_decimal(self):
        assert to_decimal(Decimal("1.5")) == Decimal("1.5")
        assert to_decimal(3) == Decimal("3")
        assert to_decimal("0.1") == Decimal("0.1")

    @pytest.mark.parametrize("value", [0.1, True])
    def test_to_decimal_rejects_inexact(self, value):
        with pytest.raises(TypeError):
            to_decimal(value)

    def test_to_percent_accepts_float(self):
        assert to_percent(0.1) == Decimal("0.1")
        assert to_percent(Decimal("2")) == Decimal("2")

    def test_floor_decimal(self):
        assert floor_decimal(Decimal("218.4")) == Decimal("218")
        assert floor_decimal(Decimal("39.0")) == Decimal("39")


def test_get_logger_basic():
    logger = get_logger(__name__)
    assert isinstance(logger, logging.Logger)
    assert logger.name == __name__


def test_get_logger_with_level():
    logger = get_logger(__name__ + ".debug", level=logging.DEBUG)
    assert logger.level == logging.DEBUG


def test_get_logger_single_handler():
    name = __name__ + ".single"
    get_logger(name)
    logger = get_logger(name)
    assert len(logger.handlers) == 1


def test_get_logger_propagates(caplog):
    logger = get_logger(__name__ + ".propagate")
    with caplog.at_level(logging.INFO):
        logger.info("scan complete")
    assert "scan complete" in caplog.text


def test_get_logger_format():
    logger = get_logger(__name__ + ".format")
    formatter = logger.handlers[0].formatter
    assert formatter._fmt == LOG_FORMAT
    assert formatter.datefmt == "%H:%M:%S"
