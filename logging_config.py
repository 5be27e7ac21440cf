"""
Logging configuration for cleaner scanner output.

Usage:
    import logging_config
    logging_config.setup()
"""

import logging
import sys

APP_LOGGER_PREFIX = "dex_scanner"


def _app_loggers():
    for name, logger in logging.Logger.manager.loggerDict.items():
        if name.startswith(APP_LOGGER_PREFIX) and isinstance(logger, logging.Logger):
            yield logger


def setup(level=logging.INFO):
    """
    Configure logging for cleaner, more readable output.

    - Suppresses verbose HTTP/RPC logs from web3 and urllib3
    - Uses shorter timestamp format (HH:MM:SS instead of full datetime)
    - Routes scanner module loggers through the root handler only
    """

    # Root logger - minimal format
    root = logging.getLogger()
    root.setLevel(level)

    # Clear existing handlers
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    # Minimal format: time + level + message
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S"
    )
    console.setFormatter(formatter)
    root.addHandler(console)

    # Suppress noisy loggers
    logging.getLogger("web3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    # Module loggers carry their own handler from get_logger(); drop it so
    # lines are not printed twice
    logging.getLogger("__main__").setLevel(level)
    logging.getLogger(APP_LOGGER_PREFIX).setLevel(level)
    for logger in _app_loggers():
        logger.handlers.clear()
        logger.setLevel(level)


def setup_minimal():
    """
    Only warnings and errors.
    """
    setup(level=logging.WARNING)


def setup_debug():
    """
    Verbose logging for debugging, including RPC requests.
    """
    setup(level=logging.DEBUG)
    logging.getLogger("web3").setLevel(logging.DEBUG)
