"""
Central logging configuration and debug decorator.

Provides structured logging with file and console handlers, plus a decorator
for automatic function-level observability of ingestion entry points.
"""

import functools
import logging
import os
import traceback
from pathlib import Path
from time import time
from typing import Any, Callable, TypeVar

# Type variable for function return types
F = TypeVar("F", bound=Callable[..., Any])

# Log file path
LOG_FILE = Path(
    os.environ.get(
        "SALESBOARD_LOG_FILE",
        Path(__file__).resolve().parent.parent / "salesboard_debug.log",
    )
)

_FORMAT = "[%(asctime)s] [%(levelname)s] [%(module)s]: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Configure package logger
_logger = logging.getLogger("salesboard")
_logger.setLevel(logging.DEBUG)

# Prevent duplicate handlers
if not _logger.handlers:
    # Console handler (INFO level)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
    _logger.addHandler(console_handler)

    # File handler (DEBUG level)
    try:
        file_handler = logging.FileHandler(LOG_FILE, mode="a", encoding="utf-8")
    except OSError as exc:
        _logger.warning(f"Debug log file unavailable ({LOG_FILE}): {exc}")
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
        _logger.addHandler(file_handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Optional module name. If None, returns the package logger.

    Returns:
        Logger instance sharing the package's console and file handlers.
    """
    if name:
        if name == "salesboard" or name.startswith("salesboard."):
            return logging.getLogger(name)
        return logging.getLogger(f"salesboard.{name}")
    return _logger


def set_console_level(level: int | str) -> None:
    """Change the console handler threshold (e.g. DEBUG for --debug)."""
    for handler in _logger.handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)


def debug_watcher(func: F) -> F:
    """
    Decorator that logs function entry, execution time, and exceptions.

    Logs:
    - Function start with arguments (DEBUG)
    - Function completion with execution time (DEBUG)
    - Full traceback on exceptions (to file only)

    Args:
        func: Function to wrap.

    Returns:
        Wrapped function with logging.
    """
    logger = get_logger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        func_name = func.__name__
        start_time = time()

        args_str = ", ".join([str(arg)[:100] for arg in args[:3]])  # Limit arg display
        kwargs_str = ", ".join([f"{k}={str(v)[:50]}" for k, v in list(kwargs.items())[:3]])
        params_str = ", ".join(filter(None, [args_str, kwargs_str]))
        logger.debug(f"Starting {func_name}... ({params_str})")

        try:
            result = func(*args, **kwargs)

            elapsed = time() - start_time
            logger.debug(f"Completed {func_name} in {elapsed:.3f} seconds.")

            return result

        except Exception as e:
            elapsed = time() - start_time
            error_msg = f"Exception in {func_name} after {elapsed:.3f} seconds: {type(e).__name__}: {str(e)}"
            logger.warning(error_msg)
            logger.debug(f"Full traceback for {func_name}:\n{traceback.format_exc()}")

            # Re-raise to maintain normal error handling
            raise

    return wrapper  # type: ignore[return-value]
