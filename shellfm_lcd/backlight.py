"""
Backlight Controller

Keeps the LCD backlight on while something on screen is changing and turns it
off after a period of inactivity. Activity can be reported from any thread;
the resulting on/off commands are only sent to the display from tick(), which
runs on the render thread.
"""

import threading
import logging
from typing import List, Optional

from shellfm_lcd.logging_config import get_logger


class BacklightController:
    """Timeout-based backlight state machine."""

    def __init__(self, driver, timeout: float, logger: Optional[logging.Logger] = None):
        """
        Initialize the controller with the backlight off.

        Args:
            driver: DisplayDriver whose backlight is controlled
            timeout: Seconds of inactivity before the backlight turns off;
                zero or less keeps it on permanently
            logger: Optional logger instance
        """
        self.driver = driver
        self.timeout = timeout
        self.logger = logger or get_logger(__name__)
        self._lock = threading.Lock()
        self._pending_on = False

        if timeout > 0:
            self._time_remaining = 0.0
        else:
            self._time_remaining = float('inf')
            self._pending_on = True

    @property
    def time_remaining(self) -> float:
        with self._lock:
            return self._time_remaining

    @property
    def is_on(self) -> bool:
        with self._lock:
            return self._time_remaining > 0

    def notify_activity(self) -> bool:
        """
        Refill the inactivity timer.

        Returns:
            True if this turned the backlight on
        """
        if self.timeout <= 0:
            return False
        with self._lock:
            was_on = self._time_remaining > 0
            self._time_remaining = self.timeout
            if not was_on:
                self._pending_on = True
            return not was_on

    def tick(self, elapsed: float) -> None:
        """
        Advance the timer and send any pending backlight command.

        Args:
            elapsed: Seconds since the previous tick
        """
        commands: List[bool] = []
        with self._lock:
            if self._pending_on:
                self._pending_on = False
                commands.append(True)
            if self._time_remaining > 0:
                self._time_remaining = max(0.0, self._time_remaining - elapsed)
                if self._time_remaining == 0:
                    commands.append(False)

        for on in commands:
            self.logger.debug("Backlight %s", "on" if on else "off")
            self.driver.set_backlight(on)

    def force_off(self) -> None:
        """Turn the backlight off immediately (used on shutdown)."""
        with self._lock:
            self._time_remaining = 0.0
            self._pending_on = False
        self.driver.set_backlight(False)
