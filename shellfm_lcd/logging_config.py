"""
Centralized Logging Configuration

Provides consistent logging configuration across shellfm-lcd.
Supports structured logging with context information and appropriate log levels.
"""

import logging
import sys
import os
import json
from typing import Optional, Dict, Any
from datetime import datetime


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'thread': record.threadName,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        if hasattr(record, 'context'):
            log_data['context'] = record.context

        if hasattr(record, 'task'):
            log_data['task'] = record.task

        return json.dumps(log_data)


class ContextualFormatter(logging.Formatter):
    """Human-readable formatter with context information."""

    def __init__(self, include_location: bool = False):
        """
        Initialize formatter.

        Args:
            include_location: Include thread/module/function/line information
        """
        if include_location:
            fmt = '%(asctime)s.%(msecs)03d - %(levelname)s - %(threadName)s - %(name)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s'
        else:
            fmt = '%(asctime)s.%(msecs)03d - %(levelname)s - %(name)s - %(message)s'

        super().__init__(fmt=fmt, datefmt='%Y-%m-%d %H:%M:%S')

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with context."""
        context_parts = []

        if hasattr(record, 'task'):
            context_parts.append(f"[Task: {record.task}]")

        if hasattr(record, 'context') and isinstance(record.context, dict):
            for key, value in record.context.items():
                context_parts.append(f"[{key}: {value}]")

        if context_parts:
            # Prefix a copy; the same record also goes to the other handlers
            record = logging.makeLogRecord(record.__dict__)
            record.msg = ' '.join(context_parts) + ' ' + str(record.msg)

        return super().format(record)


def setup_logging(
    level: Optional[int] = None,
    format_type: str = 'readable',
    include_location: bool = False,
    log_file: Optional[str] = None
) -> None:
    """
    Set up centralized logging configuration.

    Args:
        level: Log level (defaults to INFO, or DEBUG if SHELLFM_LCD_DEBUG is set)
        format_type: 'readable' for human-readable, 'json' for structured JSON
        include_location: Include thread/module/function/line in readable format
        log_file: Optional file path for file logging
    """
    if level is None:
        if os.environ.get('SHELLFM_LCD_DEBUG', '').lower() == 'true':
            level = logging.DEBUG
        else:
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    if format_type == 'json':
        formatter = StructuredFormatter()
    else:
        formatter = ContextualFormatter(include_location=include_location)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except (IOError, OSError, PermissionError) as e:
            # Log to stderr since file logging failed
            sys.stderr.write(f"Warning: Could not set up file logging to {log_file}: {e}\n")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with consistent configuration.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    context: Optional[Dict[str, Any]] = None,
    task: Optional[str] = None,
    exc_info: Optional[Any] = None
) -> None:
    """
    Log a message with context information.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, logging.ERROR, etc.)
        message: Log message
        context: Optional context dictionary
        task: Optional name of the periodic task emitting the message
        exc_info: Optional exception info for error logging
    """
    extra = {}

    if context:
        extra['context'] = context

    if task:
        extra['task'] = task

    logger.log(level, message, extra=extra, exc_info=exc_info)

