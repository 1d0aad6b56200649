"""
Display Coordinator

Owns every widget on the LCD and the current playback status, and decides
what has to be written to the display on each render tick.

Two layouts exist for the lifetime of the process:

- playing (also used while paused): artist, album and title rows with icons,
  plus a bottom row with the status icon, remaining time and help text
- stopped: a single centered banner

Entering or leaving the stopped state switches layout, which forces a full
clear-and-redraw on the next render tick. Otherwise only widgets that changed
since they were last drawn are written, keeping I2C traffic low.
"""

import threading
from enum import Enum
from typing import Dict, List, Optional, Tuple

from shellfm_lcd.logging_config import get_logger
from shellfm_lcd.status_tracker import PlaybackStatus, TrackSample
from shellfm_lcd.widget import Alignment, Widget, WidgetFormat

logger = get_logger(__name__)

DEFAULT_HELP_TEXT = "shell.fm"
DEFAULT_STOPPED_TEXT = "shell.fm stopped"

# Column where text starts on rows that carry an icon
TEXT_COLUMN = 2
REMAINING_WIDTH = 7

STATUS_ICONS = {
    PlaybackStatus.PLAYING: "play",
    PlaybackStatus.PAUSED: "pause",
}


class Layout(Enum):
    """Screen layouts."""
    PLAYING = "playing"
    STOPPED = "stopped"


class DisplayCoordinator:
    """
    Shared display state for the poll, countdown, scroll and render threads.

    The coordinator lock guards the status and the active layout; each widget
    guards its own fields.
    """

    def __init__(
        self,
        cols: int = 20,
        rows: int = 4,
        glyphs: Optional[Dict[str, int]] = None,
        help_text: str = DEFAULT_HELP_TEXT,
        stopped_text: str = DEFAULT_STOPPED_TEXT
    ):
        """
        Build both layouts.

        Args:
            cols: Display width in characters
            rows: Display height in rows (at least 4)
            glyphs: Glyph name to CGRAM slot mapping for loaded icons
            help_text: Text shown at the bottom right of the playing layout
            stopped_text: Banner shown while the daemon is stopped
        """
        self.cols = cols
        self.rows = rows
        self.glyphs: Dict[str, int] = dict(glyphs or {})

        self._lock = threading.RLock()
        self._status = PlaybackStatus.STOPPED
        self._layout = Layout.STOPPED
        # Nothing has been drawn yet.
        self._layout_switch_pending = True

        text_width = cols - TEXT_COLUMN
        self.artist = Widget("artist", (0, TEXT_COLUMN), text_width)
        self.album = Widget("album", (1, TEXT_COLUMN), text_width)
        self.title = Widget("title", (2, TEXT_COLUMN), text_width)
        self.status_icon = Widget("status_icon", (3, 0), 1,
                                  widget_format=WidgetFormat.GLYPH_SEQUENCE, glyphs=self.glyphs)
        self.remaining = Widget("remaining", (3, TEXT_COLUMN), REMAINING_WIDTH,
                                widget_format=WidgetFormat.TIME)
        help_column = TEXT_COLUMN + REMAINING_WIDTH + 1
        self.help_text = Widget("help_text", (3, help_column), cols - help_column,
                                value=help_text, alignment=Alignment.RIGHT)
        self.banner = Widget("banner", (1, 0), cols, value=stopped_text, alignment=Alignment.CENTER)

        self._layouts: Dict[Layout, List[Widget]] = {
            Layout.PLAYING: [self.artist, self.album, self.title,
                             self.status_icon, self.remaining, self.help_text],
            Layout.STOPPED: [self.banner],
        }
        # Static icons drawn once per layout switch: (glyph name, row, col)
        self._decorations: Dict[Layout, List[Tuple[str, int, int]]] = {
            Layout.PLAYING: [("guitar", 0, 0), ("cd", 1, 0), ("notes", 2, 0)],
            Layout.STOPPED: [],
        }

    @property
    def status(self) -> PlaybackStatus:
        with self._lock:
            return self._status

    @property
    def layout(self) -> Layout:
        with self._lock:
            return self._layout

    def active_widgets(self) -> List[Widget]:
        """Widgets of the layout currently on screen."""
        with self._lock:
            return list(self._layouts[self._layout])

    def set_status(self, status: PlaybackStatus) -> bool:
        """
        Record a new playback status.

        Crossing into or out of STOPPED switches layout; PLAYING and PAUSED
        only swap the status icon.

        Returns:
            True if the status changed
        """
        with self._lock:
            if status is self._status:
                return False
            previous = self._status
            self._status = status

            if (previous is PlaybackStatus.STOPPED) != (status is PlaybackStatus.STOPPED):
                self._layout = Layout.STOPPED if status is PlaybackStatus.STOPPED else Layout.PLAYING
                self._layout_switch_pending = True
                logger.info("Switching to %s layout", self._layout.value)

            if status in STATUS_ICONS:
                self.status_icon.set_value(STATUS_ICONS[status])

            logger.info("Playback status changed: %s -> %s", previous.value, status.value)
            return True

    def update_track(self, sample: TrackSample) -> bool:
        """
        Push a daemon reading into the track widgets.

        Returns:
            True if any widget value changed
        """
        changed = False
        for widget, value in (
            (self.artist, sample.artist),
            (self.album, sample.album),
            (self.title, sample.title),
            (self.remaining, str(sample.remaining_seconds)),
        ):
            changed = widget.set_value(value) or changed
        return changed

    def countdown_tick(self) -> bool:
        """
        Count the remaining-time widget down by one second while playing.

        Returns:
            True if the widget value changed
        """
        with self._lock:
            if self._status is not PlaybackStatus.PLAYING:
                return False
            return self.remaining.update(_decrement_seconds)

    def force_redraw(self) -> None:
        """Redraw the whole active layout on the next render tick."""
        with self._lock:
            self._layout_switch_pending = True

    def render_pending(self, driver) -> int:
        """
        Write everything that changed to the display driver.

        Args:
            driver: DisplayDriver to write to; only the render thread may call this

        Returns:
            Number of widgets written
        """
        with self._lock:
            full_redraw = self._layout_switch_pending
            self._layout_switch_pending = False
            layout = self._layout
            widgets = list(self._layouts[layout])

        if full_redraw:
            driver.clear()
            for glyph_name, row, col in self._decorations[layout]:
                slot = self.glyphs.get(glyph_name)
                if slot is None:
                    logger.debug("Icon %s not loaded, skipping", glyph_name)
                    continue
                driver.write_glyph(row, col, slot)
            for widget in widgets:
                row, col = widget.position
                driver.write_text(row, col, widget.render())
            return len(widgets)

        written = 0
        for widget in widgets:
            text = widget.render_if_needed()
            if text is None:
                continue
            row, col = widget.position
            driver.write_text(row, col, text)
            written += 1
        return written


def _decrement_seconds(value: str) -> Optional[str]:
    try:
        return str(int(value) - 1)
    except ValueError:
        return None
