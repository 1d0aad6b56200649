import logging
import sys
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from shellfm_lcd.display_manager import CharLCDDisplay, EmulatedDisplay, create_display
from shellfm_lcd.exceptions import DisplayError
from shellfm_lcd.settings import DisplaySettings


@pytest.fixture
def fake_rplcd():
    """Replace the RPLCD I2C module with a mock CharLCD class."""
    char_lcd_class = MagicMock(name="CharLCD")
    i2c_module = SimpleNamespace(CharLCD=char_lcd_class)
    with patch.dict(sys.modules, {"RPLCD": MagicMock(i2c=i2c_module), "RPLCD.i2c": i2c_module}):
        yield char_lcd_class


class TestEmulatedDisplay:
    """Test the in-memory display."""

    def test_starts_blank(self, emulated_display):
        assert emulated_display.lines() == [" " * 20] * 4
        assert emulated_display.backlight is False

    def test_write_text(self, emulated_display):
        emulated_display.write_text(1, 2, "Kind of Blue")
        assert emulated_display.lines()[1] == "  Kind of Blue      "
        assert emulated_display.writes == 1

    def test_write_clips_at_edge(self, emulated_display):
        emulated_display.write_text(0, 15, "overflowing")
        assert emulated_display.lines()[0] == " " * 15 + "overf"

    def test_write_outside_rows_is_ignored(self, emulated_display):
        emulated_display.write_text(4, 0, "nowhere")
        assert emulated_display.writes == 0

    def test_glyph_placeholder(self, emulated_display):
        emulated_display.write_glyph(3, 0, 4)
        assert emulated_display.lines()[3][0] == "\x04"
        assert emulated_display.printable_lines()[3][0] == "*"

    def test_clear(self, emulated_display):
        emulated_display.write_text(0, 0, "text")
        emulated_display.clear()
        assert emulated_display.lines()[0] == " " * 20

    def test_backlight_and_close(self, emulated_display):
        emulated_display.set_backlight(True)
        assert emulated_display.backlight is True
        emulated_display.close()
        assert emulated_display.closed is True

    def test_debug_frame_logging(self, caplog):
        display = EmulatedDisplay(16, 4)
        with caplog.at_level(logging.DEBUG, logger="shellfm_lcd.display_manager"):
            display.write_text(0, 0, "hello")
        assert "hello" in caplog.text


class TestCharLCDDisplay:
    """Test the RPLCD driver with the library mocked."""

    def test_opens_lcd(self, fake_rplcd):
        CharLCDDisplay(cols=20, rows=4, i2c_expander="PCF8574", address=0x3F, port=0)
        fake_rplcd.assert_called_once_with(i2c_expander="PCF8574", address=0x3F, port=0,
                                           cols=20, rows=4, auto_linebreaks=False)

    def test_primitives(self, fake_rplcd):
        display = CharLCDDisplay()
        lcd = fake_rplcd.return_value

        display.write_text(2, 3, "So What")
        assert lcd.cursor_pos == (2, 3)
        lcd.write_string.assert_called_with("So What")

        display.write_glyph(0, 0, 5)
        lcd.write_string.assert_called_with("\x05")

        display.set_backlight(False)
        assert lcd.backlight_enabled is False

        display.clear()
        lcd.clear.assert_called_once()

        display.close()
        lcd.close.assert_called_once_with(clear=False)

    def test_load_glyph(self, fake_rplcd, icons_dir):
        display = CharLCDDisplay()
        display.load_glyph(2, str(icons_dir / "play.chr"))
        fake_rplcd.return_value.create_char.assert_called_once_with(2, (17,) * 8)

    def test_open_failure(self, fake_rplcd):
        fake_rplcd.side_effect = OSError("No such device")
        with pytest.raises(DisplayError) as exc_info:
            CharLCDDisplay()
        assert exc_info.value.driver == "hd44780"


class TestCreateDisplay:
    """Test the driver factory."""

    def test_emulator(self):
        display = create_display(DisplaySettings(driver="emulator", cols=16, rows=4))
        assert isinstance(display, EmulatedDisplay)
        assert display.cols == 16

    def test_hd44780(self, fake_rplcd):
        display = create_display(DisplaySettings(driver="hd44780"))
        assert isinstance(display, CharLCDDisplay)

    def test_unknown_driver(self):
        with pytest.raises(DisplayError):
            create_display(DisplaySettings(driver="vfd"))
