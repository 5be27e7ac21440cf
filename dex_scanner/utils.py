"""
Common utilities for the scanner: timestamps, decimal coercion and logging.
"""

import logging
from datetime import datetime, timezone
from decimal import ROUND_FLOOR, Decimal
from typing import Union


# Timestamp utilities
def timestamp_to_iso(timestamp: float) -> str:
    """Convert Unix timestamp to ISO 8601 string."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


# Decimal utilities
def to_decimal(value: Union[Decimal, int, str]) -> Decimal:
    """
    Coerce an amount to Decimal without passing through float.

    Args:
        value: Decimal, int or decimal string

    Returns:
        Decimal amount

    Raises:
        TypeError: If value is a float (would lose exactness)
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"Amounts must be exact, got {type(value).__name__}")
    return Decimal(value)


def to_percent(value) -> Decimal:
    """Coerce a percentage (price impact, spread) to Decimal; floats allowed."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def floor_decimal(value: Decimal) -> Decimal:
    """Floor a non-negative Decimal to a whole number."""
    return value.to_integral_value(rounding=ROUND_FLOOR)


# Logging utilities
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"


def get_logger(name: str, level: Union[str, int] = logging.INFO) -> logging.Logger:
    """
    Module logger with a console handler attached once.

    The level is only set if the logger has none yet, so an explicit
    level from logging_config survives repeated calls.
    """
    logger = logging.getLogger(name)

    if logger.level == logging.NOTSET:
        logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        logger.addHandler(handler)

    return logger
