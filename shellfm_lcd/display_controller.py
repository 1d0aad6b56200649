"""
Display Controller

Wires the daemon client, status tracker, coordinator, scroll engine,
backlight and alarm scheduler together and runs each periodic task on its
own daemon thread:

- poll: query shell-fm and feed the status tracker
- countdown: count the remaining time down between polls
- scroll: advance overflowing widgets
- render: write pending changes and drive the backlight (the only thread
  that talks to the display)
- alarm: evaluate alarm rules (only when alarms are enabled)

All threads share one stop event; shutdown() stops them, shows the goodbye
text and releases the display.
"""

import logging
import signal
import threading
import time
from typing import Callable, List, Optional

from shellfm_lcd.alarm_scheduler import AlarmScheduler
from shellfm_lcd.alarm_source import JsonAlarmSource
from shellfm_lcd.backlight import BacklightController
from shellfm_lcd.common.error_handler import safe_execute
from shellfm_lcd.config_manager import ConfigManager
from shellfm_lcd.daemon_client import ShellFMClient
from shellfm_lcd.display_coordinator import DisplayCoordinator
from shellfm_lcd.display_manager import DisplayDriver, create_display
from shellfm_lcd.glyphs import load_glyphs
from shellfm_lcd.logging_config import get_logger, log_with_context
from shellfm_lcd.scroll_engine import ScrollEngine
from shellfm_lcd.settings import Settings
from shellfm_lcd.status_tracker import StatusTracker

logger = get_logger(__name__)

# Seconds to wait for each task thread on shutdown
THREAD_JOIN_TIMEOUT = 2.0
# Row the goodbye text is written on
GOODBYE_ROW = 1


class DisplayController:
    """Runs the now-playing display until stopped."""

    def __init__(self, settings: Settings, display: DisplayDriver,
                 client: Optional[ShellFMClient] = None, alarm_source=None):
        """
        Build every component.

        Args:
            settings: Validated Settings
            display: DisplayDriver to draw on
            client: Optional ShellFMClient; built from the daemon settings if omitted
            alarm_source: Optional AlarmSource; a JsonAlarmSource on the configured
                path is used when alarms are enabled and none is given
        """
        self.settings = settings
        self.display = display
        self.client = client or ShellFMClient(
            host=settings.daemon.host,
            port=settings.daemon.port,
            timeout=settings.daemon.timeout,
        )

        glyphs = load_glyphs(display, settings.display.icons_directory)
        self.coordinator = DisplayCoordinator(
            cols=settings.display.cols,
            rows=settings.display.rows,
            glyphs=glyphs,
            help_text=settings.display.help_text,
            stopped_text=settings.display.stopped_text,
        )
        self.tracker = StatusTracker(self.coordinator)
        self.scroll_engine = ScrollEngine(self.coordinator.active_widgets,
                                          interval=settings.intervals.scroll)
        self.backlight = BacklightController(display, settings.backlight_timeout)

        self.alarm_scheduler: Optional[AlarmScheduler] = None
        if settings.alarms.enabled or alarm_source is not None:
            self.alarm_scheduler = AlarmScheduler(
                alarm_source or JsonAlarmSource(settings.alarms.path),
                self.client,
                lambda: self.coordinator.status,
                default_station=settings.alarms.default_station,
                restore_volume=settings.alarms.restore_volume,
                timezone=settings.timezone,
                check_interval=settings.intervals.alarm_check,
            )

        self.stop_event = threading.Event()
        self.threads: List[threading.Thread] = []
        self._shutdown_lock = threading.Lock()
        self._shut_down = False
        self._last_render: Optional[float] = None

    def poll_once(self) -> None:
        """Query the daemon once and apply the result."""
        sample = self.client.query()
        update = self.tracker.process(sample)
        if sample is None:
            logger.debug("Poll returned no track data")
        if update.activity:
            self.backlight.notify_activity()

    def countdown_once(self) -> None:
        """Count the remaining time down by one second while playing."""
        if self.coordinator.countdown_tick():
            self.backlight.notify_activity()

    def render_once(self) -> int:
        """
        Write pending widget changes and advance the backlight timer.

        Returns:
            Number of widgets written
        """
        now = time.monotonic()
        elapsed = 0.0 if self._last_render is None else now - self._last_render
        self._last_render = now

        written = self.coordinator.render_pending(self.display)
        self.backlight.tick(elapsed)
        return written

    def _start_task(self, name: str, interval: float, operation: Callable[[], object]) -> threading.Thread:
        """Run operation every interval seconds on a daemon thread until stopped."""
        def loop():
            log_with_context(logger, logging.DEBUG, f"Task started (every {interval:.2f}s)", task=name)
            while not self.stop_event.is_set():
                try:
                    operation()
                except Exception:  # pylint: disable=broad-except
                    log_with_context(logger, logging.ERROR, f"Error in {name} task",
                                     task=name, exc_info=True)
                self.stop_event.wait(interval)
            logger.debug("Task %s stopped", name)

        thread = threading.Thread(target=loop, name=name, daemon=True)
        thread.start()
        self.threads.append(thread)
        return thread

    def start(self) -> None:
        """Start every periodic task."""
        intervals = self.settings.intervals
        self._start_task("poll", intervals.poll, self.poll_once)
        self._start_task("countdown", intervals.countdown, self.countdown_once)
        self._start_task("scroll", intervals.scroll, self.scroll_engine.tick)
        self._start_task("render", intervals.display_poll, self.render_once)
        if self.alarm_scheduler is not None:
            thread = threading.Thread(target=self.alarm_scheduler.run, args=(self.stop_event,),
                                      name="alarm", daemon=True)
            thread.start()
            self.threads.append(thread)
        logger.info("Started %d task thread(s)", len(self.threads))

    def show_splash(self) -> None:
        """Show the splash lines centered on the display, then clear it."""
        lines = self.settings.display.splash
        if not lines:
            return
        cols = self.settings.display.cols
        first_row = max(0, (self.settings.display.rows - len(lines)) // 2)
        self.display.clear()
        self.display.set_backlight(True)
        for offset, line in enumerate(lines):
            self.display.write_text(first_row + offset, 0, line[:cols].center(cols))
        self.stop_event.wait(self.settings.display.splash_duration)
        self.display.clear()

    def run(self) -> None:
        """Run until request_stop() is called or the process is interrupted."""
        try:
            self.show_splash()
            self.coordinator.force_redraw()
            self.backlight.notify_activity()
            self.start()
            while not self.stop_event.is_set():
                self.stop_event.wait(1.0)
        except KeyboardInterrupt:
            logger.info("Received interrupt signal, shutting down...")
        except Exception:  # pylint: disable=broad-except
            logger.exception("Unexpected error in display controller")
        finally:
            self.shutdown()

    def request_stop(self) -> None:
        """Ask every task thread to stop."""
        self.stop_event.set()

    def shutdown(self) -> None:
        """Stop the threads, say goodbye and release the display. Safe to call twice."""
        with self._shutdown_lock:
            if self._shut_down:
                return
            self._shut_down = True

        logger.info("Shutting down display controller...")
        self.stop_event.set()
        for thread in self.threads:
            thread.join(timeout=THREAD_JOIN_TIMEOUT)
            if thread.is_alive():
                logger.warning("Task %s did not stop within %.1fs", thread.name, THREAD_JOIN_TIMEOUT)

        safe_execute(self._show_goodbye, "Could not show goodbye text", logger)
        safe_execute(self.backlight.force_off, "Could not turn the backlight off", logger)
        safe_execute(self.display.close, "Could not close the display", logger)
        logger.info("Cleanup complete.")

    def _show_goodbye(self) -> None:
        text = self.settings.display.goodbye_text
        if not text:
            return
        cols = self.settings.display.cols
        self.display.clear()
        self.display.write_text(GOODBYE_ROW, 0, text[:cols].center(cols))
        time.sleep(self.settings.display.goodbye_duration)


def main(config_path: Optional[str] = None, emulator: bool = False) -> None:
    """
    Load the configuration and run the display until interrupted.

    Args:
        config_path: Optional path to config.json
        emulator: Use the in-memory display instead of the LCD
    """
    settings = ConfigManager(config_path).get_settings()
    if emulator:
        settings.display.driver = "emulator"

    display = create_display(settings.display)
    controller = DisplayController(settings, display)

    def handle_sigterm(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        controller.request_stop()

    signal.signal(signal.SIGTERM, handle_sigterm)
    controller.run()


if __name__ == "__main__":
    main()
