"""
Scroll Engine

Advances the scroll window of every overflowing widget on the active screen.
The per-widget wrap logic lives in Widget.advance_scroll; this module only
decides which widgets take a step on each tick of the scroll thread.
"""

from typing import Callable, Iterable, Optional
import logging

from shellfm_lcd.widget import Widget
from shellfm_lcd.logging_config import get_logger


class ScrollEngine:
    """Timer-driven scroller for a changing set of widgets."""

    def __init__(self, widget_source: Callable[[], Iterable[Widget]], interval: float = 0.5,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the ScrollEngine.

        Args:
            widget_source: Callable returning the widgets to scroll; called on
                every tick so layout switches are picked up
            interval: Seconds between scroll steps
            logger: Optional logger instance
        """
        self.widget_source = widget_source
        self.interval = interval
        self.logger = logger or get_logger(__name__)
        self.ticks = 0

    def tick(self) -> int:
        """
        Advance every widget by one character.

        Returns:
            Number of widgets that scrolled
        """
        scrolled = 0
        for widget in self.widget_source():
            if widget.advance_scroll():
                scrolled += 1
        self.ticks += 1
        if scrolled and self.ticks % 100 == 0:
            self.logger.debug("Scroll tick %d advanced %d widget(s)", self.ticks, scrolled)
        return scrolled
