"""
Centralized Logging Utilities and Decorators

Provides reusable logging setup and a function decorator for consistent logging
across the audio_audit project. The decorator works on both plain functions and
coroutine functions, so the async audit pipeline is logged the same way as the
synchronous database and reporting helpers.

Usage:
    from audio_audit.logger import setup_logging, log_function

    logger = setup_logging(
        logger_name="audit",
        log_file="logs/audit.log",
        verbose=True
    )

    @log_function(logger_name="audit", log_args=True)
    async def audit_category(category):
        ...
"""

import functools
import inspect
import logging
import time
from pathlib import Path
from typing import Optional, Callable, Any


def setup_logging(
    logger_name: str,
    log_file: str = "logs/audio_audit.log",
    verbose: bool = False,
    level: int = logging.INFO,
) -> logging.Logger:
    """
    Set up logging with file and optional console handlers.

    Args:
        logger_name: Name for the logger (e.g., "audit")
        log_file: Path to log file (default: "logs/audio_audit.log")
        verbose: If True, add console handler with DEBUG level (default: False)
        level: Base logging level (default: logging.INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Avoid adding multiple handlers if already configured
    if logger.handlers:
        if verbose:
            logger.setLevel(logging.DEBUG)
        return logger

    logger.setLevel(logging.DEBUG if verbose else level)

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(level)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(file_handler)

    # Console handler for verbose mode
    if verbose:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        logger.addHandler(console_handler)

    return logger


def _resolve_logger(logger_name: str, log_file: Optional[str], level: int):
    if log_file:
        return setup_logging(logger_name=logger_name, log_file=log_file, level=level)
    return logging.getLogger(logger_name)


def _describe_call(func_name: str, log_args: bool, args, kwargs) -> str:
    log_msg = f"Calling {func_name}"
    if log_args and (args or kwargs):
        args_repr = [repr(a) for a in args]
        kwargs_repr = [f"{k}={v!r}" for k, v in kwargs.items()]
        log_msg += f" with args: {', '.join(args_repr + kwargs_repr)}"
    return log_msg


def log_function(
    logger_name: Optional[str] = None,
    log_file: Optional[str] = None,
    level: int = logging.INFO,
    log_args: bool = False,
    log_result: bool = False,
    log_execution_time: bool = True,
) -> Callable:
    """
    Decorator to automatically log function entry, exit, execution time, and exceptions.

    Coroutine functions are wrapped with an async wrapper so the timing covers
    the awaited body rather than coroutine creation.

    Args:
        logger_name: Custom logger name (if None, uses the decorated function's module name)
        log_file: Optional custom log file path (if None, uses existing logger config)
        level: Log level for entry/exit messages (default: logging.INFO)
        log_args: If True, log function arguments (default: False)
        log_result: If True, log return value (default: False)
        log_execution_time: If True, log execution duration (default: True)

    Returns:
        Decorated function with logging

    Example:
        @log_function(logger_name="audit", log_args=True, log_execution_time=True)
        def write_missing_csv(summary, output_dir):
            ...
    """

    def decorator(func: Callable) -> Callable:
        name = logger_name or func.__module__
        func_name = func.__name__

        def _completed(logger: logging.Logger, start_time: float, result: Any) -> None:
            completion_msg = f"Completed {func_name}"
            if log_execution_time:
                completion_msg += f" in {time.time() - start_time:.2f}s"
            if log_result:
                completion_msg += f" with result: {result!r}"
            logger.log(level, completion_msg)

        def _failed(logger: logging.Logger, start_time: float, e: Exception) -> None:
            execution_time = time.time() - start_time
            logger.error(
                f"Exception in {func_name} after {execution_time:.2f}s: {type(e).__name__}: {e}",
                exc_info=True,
            )

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs) -> Any:
                logger = _resolve_logger(name, log_file, level)
                logger.log(level, _describe_call(func_name, log_args, args, kwargs))
                start_time = time.time()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _failed(logger, start_time, e)
                    raise
                _completed(logger, start_time, result)
                return result

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            logger = _resolve_logger(name, log_file, level)
            logger.log(level, _describe_call(func_name, log_args, args, kwargs))
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _failed(logger, start_time, e)
                raise
            _completed(logger, start_time, result)
            return result

        return wrapper

    return decorator
