import pytest
import logging
import json
from shellfm_lcd.exceptions import (
    AlarmError,
    ConfigError,
    DaemonConnectionError,
    DaemonError,
    DisplayError,
    ShellFMLCDError,
)
from shellfm_lcd.common.error_handler import (
    handle_file_operation,
    handle_json_operation,
    safe_execute,
    log_and_continue,
    log_and_raise
)


class TestCustomExceptions:
    """Test custom exception classes."""

    def test_base_error_without_context(self):
        """Test the message is unchanged when there is no context."""
        assert str(ShellFMLCDError("Something failed")) == "Something failed"

    def test_config_error(self):
        """Test ConfigError initialization."""
        error = ConfigError("Config invalid", config_path='config.json', field='daemon.port')
        assert "Config invalid" in str(error)
        assert error.context.get('config_path') == 'config.json'
        assert error.context.get('field') == 'daemon.port'

    def test_display_error(self):
        """Test DisplayError initialization."""
        error = DisplayError("LCD not found", driver='hd44780')
        assert "LCD not found" in str(error)
        assert error.context.get('driver') == 'hd44780'

    def test_daemon_error_hierarchy(self):
        """Test connection errors are daemon errors."""
        error = DaemonConnectionError("refused", command="info %v")
        assert isinstance(error, DaemonError)
        assert isinstance(error, ShellFMLCDError)
        assert error.context.get('command') == "info %v"

    def test_alarm_error_index_zero(self):
        """Test rule index 0 is kept in the context."""
        error = AlarmError("bad rule", rule_index=0)
        assert error.context.get('rule_index') == 0
        assert "rule_index=0" in str(error)


class TestErrorHandlerUtilities:
    """Test error handler utilities."""

    def test_handle_file_operation_read_success(self, tmp_path):
        """Test successful file read."""
        test_file = tmp_path / "test.txt"
        test_file.write_text("test content")

        result = handle_file_operation(
            lambda: test_file.read_text(),
            "Read failed",
            logging.getLogger(__name__),
            default=""
        )
        assert result == "test content"

    def test_handle_file_operation_read_failure(self, tmp_path):
        """Test file read failure."""
        non_existent = tmp_path / "nonexistent.txt"

        result = handle_file_operation(
            lambda: non_existent.read_text(),
            "Read failed",
            logging.getLogger(__name__),
            default="fallback",
            context={'glyph': 'nonexistent.txt'}
        )
        assert result == "fallback"

    def test_handle_json_operation_failure(self, tmp_path):
        """Test JSON parse failure."""
        test_file = tmp_path / "invalid.json"
        test_file.write_text('invalid json {')

        result = handle_json_operation(
            lambda: json.loads(test_file.read_text()),
            "JSON parse failed",
            logging.getLogger(__name__),
            default={"default": True}
        )
        assert result == {"default": True}

    def test_safe_execute_failure(self):
        """Test failure handling with safe_execute."""
        def failing_func():
            raise ValueError("Something went wrong")

        result = safe_execute(
            failing_func,
            "Execution failed",
            logging.getLogger(__name__),
            default="fallback"
        )
        assert result == "fallback"

    def test_safe_execute_logs_own_errors(self, caplog):
        """Test our own errors are logged and replaced by the default."""
        def failing_func():
            raise DisplayError("LCD write failed", driver="hd44780")

        with caplog.at_level(logging.ERROR):
            result = safe_execute(failing_func, "Goodbye failed", logging.getLogger(__name__))
        assert result is None
        assert "Goodbye failed" in caplog.text

    def test_log_and_continue(self, caplog):
        """Test log_and_continue logs with context."""
        with caplog.at_level(logging.WARNING):
            log_and_continue(logging.getLogger(__name__), "Command failed", context={'command': 'stop'})
        assert "Command failed" in caplog.text
        assert "stop" in caplog.text

    def test_log_and_raise(self, caplog):
        """Test log_and_raise logs then raises."""
        with caplog.at_level(logging.ERROR):
            with pytest.raises(ConfigError):
                log_and_raise(logging.getLogger(__name__), "Invalid configuration", ConfigError)
        assert "Invalid configuration" in caplog.text
