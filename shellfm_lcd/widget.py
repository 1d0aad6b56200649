"""
Widget

A block of text bound to a fixed position and width on the character LCD.
Text longer than the widget width is scrolled horizontally; the scrolled
text is padded with two spaces on each side so the wrap point stays readable.

Every public method takes the widget's own lock, so the poll, countdown,
scroll and render threads may share a widget without seeing a half-applied
update (for example a new value paired with the previous value's scroll
offset).
"""

import threading
from enum import Enum
from typing import Callable, Dict, Optional, Tuple, Union

from shellfm_lcd.exceptions import ConfigError

SCROLL_PADDING = "  "


class WidgetFormat(Enum):
    """How a widget's stored value is turned into display text."""
    PLAIN = "plain"
    TIME = "time"
    GLYPH_SEQUENCE = "glyph_sequence"


class Alignment(Enum):
    """Placement of text that fits within the widget width."""
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


def format_as_time(value: str) -> str:
    """
    Format a count of seconds as MM:SS.

    Negative or non-numeric values are shown as 00:00.

    Args:
        value: Signed integer seconds, as a string

    Returns:
        The formatted time string
    """
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        seconds = 0
    if seconds < 0:
        seconds = 0
    minutes, seconds = divmod(seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def padded(text: str) -> str:
    """Pad text for scrolling."""
    return f"{SCROLL_PADDING}{text}{SCROLL_PADDING}"


class Widget:
    """
    Renderable, scrollable text field.

    Attributes are only read or written while holding the widget lock; use
    the properties or snapshot() from other threads.
    """

    def __init__(
        self,
        name: str,
        position: Tuple[int, int],
        max_width: int,
        value: str = "",
        widget_format: Union[WidgetFormat, str] = WidgetFormat.PLAIN,
        alignment: Union[Alignment, str] = Alignment.LEFT,
        glyphs: Optional[Dict[str, int]] = None
    ):
        """
        Initialize the widget.

        Args:
            name: Identifier used in logs
            position: (row, col) of the first character, 0-based
            max_width: Number of characters the widget occupies
            value: Initial value
            widget_format: PLAIN, TIME or GLYPH_SEQUENCE
            alignment: LEFT, RIGHT or CENTER for text that fits
            glyphs: Glyph name to CGRAM slot mapping for GLYPH_SEQUENCE widgets

        Raises:
            ConfigError: If width, format or alignment is invalid
        """
        if not isinstance(max_width, int) or max_width <= 0:
            raise ConfigError(f"Widget width must be a positive integer, got {max_width!r}",
                              field=f"{name}.max_width")
        try:
            self.format = WidgetFormat(widget_format)
        except ValueError as e:
            raise ConfigError(f"Invalid widget format {widget_format!r}",
                              field=f"{name}.format") from e
        try:
            self.alignment = Alignment(alignment)
        except ValueError as e:
            raise ConfigError(f"Invalid widget alignment {alignment!r}",
                              field=f"{name}.alignment") from e

        self.name = name
        self.position = tuple(position)
        self.max_width = max_width
        self.glyphs = dict(glyphs or {})

        self._lock = threading.RLock()
        self._value = value
        self._scroll_offset = 1
        # A new widget has never been drawn.
        self._needs_redraw = True

    def __repr__(self) -> str:
        return f"Widget({self.name!r}, position={self.position}, max_width={self.max_width})"

    @property
    def value(self) -> str:
        with self._lock:
            return self._value

    @property
    def scroll_offset(self) -> int:
        with self._lock:
            return self._scroll_offset

    @property
    def needs_redraw(self) -> bool:
        with self._lock:
            return self._needs_redraw

    def snapshot(self) -> Tuple[str, int, bool]:
        """Return (value, scroll_offset, needs_redraw) read atomically."""
        with self._lock:
            return self._value, self._scroll_offset, self._needs_redraw

    def set_value(self, value: str) -> bool:
        """
        Replace the widget value.

        A changed value restarts scrolling and marks the widget for redraw.
        Setting the current value again does nothing.

        Returns:
            True if the value changed
        """
        with self._lock:
            if value == self._value:
                return False
            self._value = value
            self._scroll_offset = 1
            self._needs_redraw = True
            return True

    def update(self, transform: Callable[[str], Optional[str]]) -> bool:
        """
        Replace the value with transform(current value) in one locked step.

        The transform may return None to leave the value untouched.

        Returns:
            True if the value changed
        """
        with self._lock:
            new_value = transform(self._value)
            if new_value is None:
                return False
            return self.set_value(new_value)

    def advance_scroll(self) -> bool:
        """
        Move the scroll window one character to the right.

        The window restarts at offset 1 once the remaining padded text would
        no longer fill the widget.

        Returns:
            True if the widget scrolled
        """
        with self._lock:
            text = self._display_text()
            if len(text) <= self.max_width:
                return False
            self._scroll_offset += 1
            if len(padded(text)[self._scroll_offset - 1:]) < self.max_width:
                self._scroll_offset = 1
            self._needs_redraw = True
            return True

    def render(self) -> str:
        """
        Render the widget to exactly max_width characters.

        Rendering acknowledges the drawn state, so only the render thread
        should call this.
        """
        with self._lock:
            self._needs_redraw = False
            return self._render_locked()

    def render_if_needed(self) -> Optional[str]:
        """Render the widget if it changed since the last render, else None."""
        with self._lock:
            if not self._needs_redraw:
                return None
            self._needs_redraw = False
            return self._render_locked()

    def _render_locked(self) -> str:
        text = self._display_text()
        if len(text) > self.max_width:
            start = self._scroll_offset - 1
            return padded(text)[start:start + self.max_width].ljust(self.max_width)
        if self.alignment is Alignment.RIGHT:
            return text.rjust(self.max_width)
        if self.alignment is Alignment.CENTER:
            return text.center(self.max_width)
        return text.ljust(self.max_width)

    def _display_text(self) -> str:
        if self.format is WidgetFormat.TIME:
            return format_as_time(self._value)
        if self.format is WidgetFormat.GLYPH_SEQUENCE:
            return "".join(
                chr(self.glyphs[name]) if name in self.glyphs else "?"
                for name in self._value.split()
            )
        if self.format is WidgetFormat.PLAIN:
            return self._value
        raise ConfigError(f"Unhandled widget format {self.format!r}", field=f"{self.name}.format")
