"""
Custom exception hierarchy for shellfm-lcd.

Provides specific exception types for different error categories,
enabling better error handling and debugging.
"""


class ShellFMLCDError(Exception):
    """Base exception for all shellfm-lcd errors."""

    def __init__(self, message: str, context: dict = None):
        """
        Initialize the exception.

        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ConfigError(ShellFMLCDError):
    """Exception raised for configuration-related errors."""

    def __init__(self, message: str, config_path: str = None, field: str = None, context: dict = None):
        """
        Initialize config error.

        Args:
            message: Error message
            config_path: Optional path to config file
            field: Optional field name that caused the error
            context: Optional context dictionary
        """
        if config_path or field:
            context = context or {}
            if config_path:
                context['config_path'] = config_path
            if field:
                context['field'] = field
        super().__init__(message, context)
        self.config_path = config_path
        self.field = field


class DisplayError(ShellFMLCDError):
    """Exception raised when the LCD cannot be opened or driven."""

    def __init__(self, message: str, driver: str = None, context: dict = None):
        """
        Initialize display error.

        Args:
            message: Error message
            driver: Optional driver name that caused the error
            context: Optional context dictionary
        """
        if driver:
            context = context or {}
            context['driver'] = driver
        super().__init__(message, context)
        self.driver = driver


class DaemonError(ShellFMLCDError):
    """Exception raised for failures talking to the shell-fm daemon."""

    def __init__(self, message: str, command: str = None, context: dict = None):
        """
        Initialize daemon error.

        Args:
            message: Error message
            command: Optional command line that was being sent
            context: Optional context dictionary
        """
        if command:
            context = context or {}
            context['command'] = command
        super().__init__(message, context)
        self.command = command


class DaemonConnectionError(DaemonError):
    """Socket open, write or read failed."""


class DaemonProtocolError(DaemonError):
    """Daemon answered with an empty or malformed response."""


class AlarmError(ShellFMLCDError):
    """Exception raised for malformed alarm rules."""

    def __init__(self, message: str, rule_index: int = None, context: dict = None):
        """
        Initialize alarm error.

        Args:
            message: Error message
            rule_index: Optional position of the offending rule in the source
            context: Optional context dictionary
        """
        if rule_index is not None:
            context = context or {}
            context['rule_index'] = rule_index
        super().__init__(message, context)
        self.rule_index = rule_index
