"""
Logging configuration for procrec.

Provides centralized logging setup with clean, concise terminal output.
Console output goes to stderr so that recorded samples printed on stdout
can be piped without log noise.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "procrec"


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Configure and return a logger with consistent formatting.

    Args:
        name: Logger name (typically __name__)
        level: Logging level (default: INFO)
        log_file: Optional file path for log output

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(fmt='[%(levelname)s] %(message)s'))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)

        file_formatter = logging.Formatter(
            fmt='%(asctime)s [%(levelname)s] %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Return a module logger that propagates into the package logger.

    Modules inside procrec call this instead of setup_logger so that a
    single call to configure_logging() controls level and handlers for
    the whole package.
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def verbosity_to_level(verbose: int) -> int:
    if verbose >= 2:
        return logging.DEBUG
    return logging.INFO


def configure_logging(verbose: int = 0, log_file: Optional[Path] = None) -> logging.Logger:
    """Configure the package logger from the CLI verbosity count."""
    return setup_logger(PACKAGE_LOGGER, level=verbosity_to_level(verbose), log_file=log_file)
