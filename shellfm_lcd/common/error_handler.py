"""
Error Handling Utilities

Common error handling patterns and utilities for consistent error handling
across the shellfm-lcd codebase.
"""

import logging
from typing import Any, Callable, Optional, TypeVar, Dict
from shellfm_lcd.exceptions import ShellFMLCDError

T = TypeVar('T')


def handle_file_operation(
    operation: Callable[[], T],
    error_message: str,
    logger: logging.Logger,
    default: Optional[T] = None,
    context: Optional[Dict[str, Any]] = None
) -> Optional[T]:
    """
    Handle file operations with consistent error handling.

    Args:
        operation: Function to execute (file read/write)
        error_message: Base error message
        logger: Logger instance
        default: Default value to return on error
        context: Optional context dictionary for error details

    Returns:
        Result of operation or default value
    """
    try:
        return operation()
    except FileNotFoundError as e:
        logger.warning("%s: File not found: %s", error_message, e, extra=_extra(context))
        return default
    except PermissionError as e:
        logger.error("%s: Permission denied: %s", error_message, e, extra=_extra(context))
        return default
    except (IOError, OSError) as e:
        logger.error("%s: I/O error: %s", error_message, e, exc_info=True, extra=_extra(context))
        return default


def handle_json_operation(
    operation: Callable[[], T],
    error_message: str,
    logger: logging.Logger,
    default: Optional[T] = None,
    context: Optional[Dict[str, Any]] = None
) -> Optional[T]:
    """
    Handle JSON operations with consistent error handling.

    Args:
        operation: Function to execute (JSON load/dump)
        error_message: Base error message
        logger: Logger instance
        default: Default value to return on error
        context: Optional context dictionary for error details

    Returns:
        Result of operation or default value
    """
    try:
        return operation()
    except FileNotFoundError as e:
        logger.warning("%s: File not found: %s", error_message, e, extra=_extra(context))
        return default
    except PermissionError as e:
        logger.error("%s: Permission denied: %s", error_message, e, extra=_extra(context))
        return default
    except ValueError as e:
        logger.error("%s: Invalid JSON: %s", error_message, e, extra=_extra(context))
        return default
    except (IOError, OSError) as e:
        logger.error("%s: I/O error: %s", error_message, e, exc_info=True, extra=_extra(context))
        return default


def safe_execute(
    operation: Callable[[], T],
    error_message: str,
    logger: logging.Logger,
    default: Optional[T] = None
) -> Optional[T]:
    """
    Run an operation, logging any error and returning default instead.

    Args:
        operation: Function to execute
        error_message: Base error message
        logger: Logger instance
        default: Default value to return on error

    Returns:
        Result of operation or default value
    """
    try:
        return operation()
    except Exception as e:  # pylint: disable=broad-except
        logger.error("%s: %s", error_message, e, exc_info=True)
        return default


def log_and_continue(
    logger: logging.Logger,
    message: str,
    level: int = logging.WARNING,
    context: Optional[Dict[str, Any]] = None
):
    """
    Log a message and continue execution (for non-critical errors).

    Args:
        logger: Logger instance
        message: Log message
        level: Log level (default: WARNING)
        context: Optional context dictionary
    """
    if context:
        logger.log(level, "%s (context: %s)", message, context)
    else:
        logger.log(level, message)


def log_and_raise(
    logger: logging.Logger,
    message: str,
    exception_type: type = ShellFMLCDError,
    context: Optional[Dict[str, Any]] = None
):
    """
    Log an error and raise an exception.

    Args:
        logger: Logger instance
        message: Error message
        exception_type: Type of exception to raise
        context: Optional context dictionary

    Raises:
        exception_type: The specified exception type
    """
    logger.error(message)
    raise exception_type(message, context=context)


def _extra(context: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {'context': context} if context else {}
