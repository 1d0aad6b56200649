"""
Display Drivers

Character-cell primitives used by the coordinator and the controller:
clear, write text at a position, write a custom glyph, switch the backlight
and load glyph bitmaps.

CharLCDDisplay drives an HD44780 panel behind a PCF8574-style I2C backpack
through RPLCD. EmulatedDisplay keeps the same state in memory so the program
and its tests run without hardware.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from shellfm_lcd.exceptions import DisplayError
from shellfm_lcd.glyphs import load_glyph_bitmap
from shellfm_lcd.logging_config import get_logger

# Placeholder used when printing emulator frames that contain glyph characters
GLYPH_PLACEHOLDER = "*"


class DisplayDriver(ABC):
    """Character LCD primitives. Calls are synchronous."""

    cols: int
    rows: int

    @abstractmethod
    def clear(self) -> None:
        """Blank the whole display."""

    @abstractmethod
    def write_text(self, row: int, col: int, text: str) -> None:
        """Write text starting at (row, col); characters 0-7 show custom glyphs."""

    @abstractmethod
    def write_glyph(self, row: int, col: int, glyph_id: int) -> None:
        """Write the custom glyph in CGRAM slot glyph_id at (row, col)."""

    @abstractmethod
    def set_backlight(self, on: bool) -> None:
        """Switch the backlight."""

    @abstractmethod
    def load_glyph(self, glyph_id: int, bitmap_file: str) -> None:
        """Load a 5x8 glyph from bitmap_file into CGRAM slot glyph_id."""

    def close(self) -> None:
        """Release the hardware."""


class CharLCDDisplay(DisplayDriver):
    """HD44780 character LCD over I2C using RPLCD."""

    def __init__(self, cols: int = 20, rows: int = 4, i2c_expander: str = "PCF8574",
                 address: int = 0x27, port: int = 1, logger: Optional[logging.Logger] = None):
        """
        Open the LCD.

        Args:
            cols: Characters per row
            rows: Number of rows
            i2c_expander: RPLCD expander name (PCF8574, MCP23008, MCP23017)
            address: I2C address of the backpack
            port: I2C bus number
            logger: Optional logger instance

        Raises:
            DisplayError: If the LCD can't be opened
        """
        self.cols = cols
        self.rows = rows
        self.logger = logger or get_logger(__name__)
        try:
            from RPLCD.i2c import CharLCD
            self.lcd = CharLCD(
                i2c_expander=i2c_expander,
                address=address,
                port=port,
                cols=cols,
                rows=rows,
                auto_linebreaks=False,
            )
        except (ImportError, OSError, ValueError) as e:
            raise DisplayError(f"Could not open LCD at 0x{address:02X} on I2C bus {port}: {e}",
                               driver="hd44780") from e
        self.logger.info("HD44780 LCD initialized at 0x%02X (%dx%d)", address, cols, rows)

    def clear(self) -> None:
        self.lcd.clear()

    def write_text(self, row: int, col: int, text: str) -> None:
        self.lcd.cursor_pos = (row, col)
        self.lcd.write_string(text)

    def write_glyph(self, row: int, col: int, glyph_id: int) -> None:
        self.lcd.cursor_pos = (row, col)
        self.lcd.write_string(chr(glyph_id))

    def set_backlight(self, on: bool) -> None:
        self.lcd.backlight_enabled = on

    def load_glyph(self, glyph_id: int, bitmap_file: str) -> None:
        self.lcd.create_char(glyph_id, load_glyph_bitmap(bitmap_file))

    def close(self) -> None:
        self.lcd.close(clear=False)


class EmulatedDisplay(DisplayDriver):
    """In-memory character display."""

    def __init__(self, cols: int = 20, rows: int = 4, logger: Optional[logging.Logger] = None):
        self.cols = cols
        self.rows = rows
        self.logger = logger or get_logger(__name__)
        self.backlight = False
        self.glyphs: Dict[int, Tuple[int, ...]] = {}
        self.writes = 0
        self.closed = False
        self._cells: List[List[str]] = []
        self.clear()

    def clear(self) -> None:
        self._cells = [[" "] * self.cols for _ in range(self.rows)]

    def write_text(self, row: int, col: int, text: str) -> None:
        if not 0 <= row < self.rows:
            return
        for offset, char in enumerate(text):
            if col + offset >= self.cols:
                break
            self._cells[row][col + offset] = char
        self.writes += 1
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug("Frame after write at (%d,%d):\n%s", row, col, "\n".join(self.printable_lines()))

    def write_glyph(self, row: int, col: int, glyph_id: int) -> None:
        self.write_text(row, col, chr(glyph_id))

    def set_backlight(self, on: bool) -> None:
        self.backlight = on
        self.logger.info("Backlight %s", "on" if on else "off")

    def load_glyph(self, glyph_id: int, bitmap_file: str) -> None:
        self.glyphs[glyph_id] = load_glyph_bitmap(bitmap_file)

    def close(self) -> None:
        self.closed = True

    def lines(self) -> List[str]:
        """Current frame, one string per row."""
        return ["".join(row) for row in self._cells]

    def printable_lines(self) -> List[str]:
        """Current frame with glyph characters replaced for printing."""
        return [
            "".join(GLYPH_PLACEHOLDER if ord(c) < 8 else c for c in line)
            for line in self.lines()
        ]


def create_display(display_settings) -> DisplayDriver:
    """
    Build the driver named in the display settings.

    Args:
        display_settings: DisplaySettings instance

    Raises:
        DisplayError: If the driver is unknown or the hardware can't be opened
    """
    if display_settings.driver == "emulator":
        return EmulatedDisplay(display_settings.cols, display_settings.rows)
    if display_settings.driver == "hd44780":
        return CharLCDDisplay(
            cols=display_settings.cols,
            rows=display_settings.rows,
            i2c_expander=display_settings.i2c_expander,
            address=display_settings.i2c_address,
            port=display_settings.i2c_port,
        )
    raise DisplayError(f"Unknown display driver {display_settings.driver!r}",
                       driver=display_settings.driver)
