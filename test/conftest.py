"""
Pytest configuration and fixtures for shellfm-lcd tests.

Provides common fixtures for mocking the daemon and the display, and for
building configurations on disk.
"""

import json
import pytest
import sys
from pathlib import Path
from unittest.mock import Mock, MagicMock
from typing import Dict, Any

# Add project root to path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture
def emulated_display():
    """Create an in-memory 20x4 display."""
    from shellfm_lcd.display_manager import EmulatedDisplay
    return EmulatedDisplay(cols=20, rows=4)


@pytest.fixture
def mock_display_driver():
    """Create a mock DisplayDriver for testing."""
    mock = MagicMock()
    mock.cols = 20
    mock.rows = 4
    mock.clear = Mock()
    mock.write_text = Mock()
    mock.write_glyph = Mock()
    mock.set_backlight = Mock()
    mock.load_glyph = Mock()
    mock.close = Mock()
    return mock


@pytest.fixture
def mock_client():
    """Create a mock ShellFMClient that records commands."""
    mock = MagicMock()
    mock.sent = []

    def mock_send_command(command: str) -> bool:
        mock.sent.append(command)
        return True

    mock.send_command = Mock(side_effect=mock_send_command)
    mock.get_volume = Mock(return_value=65)
    mock.query = Mock(return_value=None)
    return mock


@pytest.fixture
def glyph_map() -> Dict[str, int]:
    """Glyph name to slot mapping matching the bundled icons."""
    return {"cd": 0, "guitar": 1, "notes": 2, "pause": 3, "play": 4}


@pytest.fixture
def icons_dir(tmp_path):
    """Create an icons directory with two valid .chr glyphs."""
    directory = tmp_path / "icons"
    directory.mkdir()
    rows = "\n".join(["#...#"] * 8)
    (directory / "play.chr").write_text(rows)
    (directory / "pause.chr").write_text("; pause\n" + rows)
    return directory


@pytest.fixture
def test_config() -> Dict[str, Any]:
    """Provide a complete test configuration."""
    return {
        "daemon": {"host": "localhost", "port": 54311, "timeout": 1.0},
        "intervals": {
            "poll": 4.0,
            "scroll": 0.5,
            "display_poll": 0.05,
            "countdown": 1.0,
            "alarm_check": 5.0
        },
        "backlight": {"timeout": 30},
        "display": {
            "driver": "emulator",
            "cols": 20,
            "rows": 4,
            "icons_directory": "assets/lcd_icons",
            "splash": ["shell.fm LCD display"],
            "splash_duration": 0,
            "goodbye_duration": 0
        },
        "alarms": {"enabled": False, "path": "config/alarms.json", "restore_volume": 80},
        "timezone": "UTC"
    }


@pytest.fixture
def config_files(tmp_path, test_config):
    """Write a config and a matching template, returning their paths."""
    config_path = tmp_path / "config.json"
    template_path = tmp_path / "config.template.json"
    config_path.write_text(json.dumps(test_config))
    template_path.write_text(json.dumps(test_config))
    return config_path, template_path


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test."""
    import logging
    logging.root.handlers = []
    logging.root.setLevel(logging.WARNING)
    yield
    logging.root.handlers = []
    logging.root.setLevel(logging.WARNING)
