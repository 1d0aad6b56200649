"""
Common utilities and helpers for shellfm-lcd.

This package provides reusable error handling functionality for the core
modules.
"""

from shellfm_lcd.common.error_handler import (
    handle_file_operation,
    handle_json_operation,
    safe_execute,
    log_and_continue,
    log_and_raise
)

__all__ = [
    'handle_file_operation',
    'handle_json_operation',
    'safe_execute',
    'log_and_continue',
    'log_and_raise',
]
