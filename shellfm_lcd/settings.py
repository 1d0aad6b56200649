"""
Typed Settings

Converts the configuration dictionary into dataclasses with defaults, so the
runtime receives plain values instead of reaching into nested dicts.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytz


@dataclass
class DaemonSettings:
    """shell-fm network interface."""
    host: str = "localhost"
    port: int = 54311
    timeout: float = 2.0


@dataclass
class IntervalSettings:
    """Task periods in seconds."""
    poll: float = 4.0
    scroll: float = 0.5
    # Render tick: lower is more responsive, higher writes to the bus less often
    display_poll: float = 0.05
    countdown: float = 1.0
    alarm_check: float = 5.0


@dataclass
class DisplaySettings:
    """LCD hardware and screen text."""
    driver: str = "hd44780"
    i2c_expander: str = "PCF8574"
    i2c_address: int = 0x27
    i2c_port: int = 1
    cols: int = 20
    rows: int = 4
    icons_directory: str = "assets/lcd_icons"
    splash: List[str] = field(default_factory=lambda: ["shell.fm LCD display"])
    splash_duration: float = 1.0
    help_text: str = "shell.fm"
    stopped_text: str = "shell.fm stopped"
    goodbye_text: str = "Bye!"
    goodbye_duration: float = 1.0


@dataclass
class AlarmSettings:
    """Scheduled playback commands."""
    enabled: bool = False
    path: str = "config/alarms.json"
    default_station: Optional[str] = None
    restore_volume: int = 80


@dataclass
class Settings:
    """Everything the runtime needs."""
    daemon: DaemonSettings = field(default_factory=DaemonSettings)
    intervals: IntervalSettings = field(default_factory=IntervalSettings)
    backlight_timeout: float = 30.0
    display: DisplaySettings = field(default_factory=DisplaySettings)
    alarms: AlarmSettings = field(default_factory=AlarmSettings)
    timezone: str = "UTC"

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'Settings':
        """
        Create Settings from the main configuration dictionary.

        Missing keys fall back to the dataclass defaults.

        Args:
            config: Main config dict

        Returns:
            Settings instance
        """
        daemon = config.get('daemon', {})
        intervals = config.get('intervals', {})
        display = config.get('display', {})
        alarms = config.get('alarms', {})
        defaults = DisplaySettings()

        return cls(
            daemon=DaemonSettings(
                host=daemon.get('host', 'localhost'),
                port=int(daemon.get('port', 54311)),
                timeout=float(daemon.get('timeout', 2.0)),
            ),
            intervals=IntervalSettings(
                poll=float(intervals.get('poll', 4.0)),
                scroll=float(intervals.get('scroll', 0.5)),
                display_poll=float(intervals.get('display_poll', 0.05)),
                countdown=float(intervals.get('countdown', 1.0)),
                alarm_check=float(intervals.get('alarm_check', 5.0)),
            ),
            backlight_timeout=float(config.get('backlight', {}).get('timeout', 30.0)),
            display=DisplaySettings(
                driver=display.get('driver', defaults.driver),
                i2c_expander=display.get('i2c_expander', defaults.i2c_expander),
                i2c_address=int(display.get('i2c_address', defaults.i2c_address)),
                i2c_port=int(display.get('i2c_port', defaults.i2c_port)),
                cols=int(display.get('cols', defaults.cols)),
                rows=int(display.get('rows', defaults.rows)),
                icons_directory=display.get('icons_directory', defaults.icons_directory),
                splash=list(display.get('splash', defaults.splash)),
                splash_duration=float(display.get('splash_duration', defaults.splash_duration)),
                help_text=display.get('help_text', defaults.help_text),
                stopped_text=display.get('stopped_text', defaults.stopped_text),
                goodbye_text=display.get('goodbye_text', defaults.goodbye_text),
                goodbye_duration=float(display.get('goodbye_duration', defaults.goodbye_duration)),
            ),
            alarms=AlarmSettings(
                enabled=bool(alarms.get('enabled', False)),
                path=alarms.get('path', 'config/alarms.json'),
                default_station=alarms.get('default_station'),
                restore_volume=int(alarms.get('restore_volume', 80)),
            ),
            timezone=config.get('timezone', 'UTC'),
        )

    def validate(self) -> List[str]:
        """
        Validate values the schema can't express.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        for name in ('poll', 'scroll', 'display_poll', 'countdown', 'alarm_check'):
            value = getattr(self.intervals, name)
            if value <= 0:
                errors.append(f"intervals.{name} must be > 0, got {value}")

        if self.intervals.display_poll > self.intervals.scroll:
            errors.append(
                f"intervals.display_poll ({self.intervals.display_poll}) must not exceed "
                f"intervals.scroll ({self.intervals.scroll})"
            )

        if self.display.cols < 16:
            errors.append(f"display.cols must be >= 16, got {self.display.cols}")
        if self.display.rows < 4:
            errors.append(f"display.rows must be >= 4, got {self.display.rows}")

        if len(self.display.splash) > self.display.rows:
            errors.append(f"display.splash has {len(self.display.splash)} lines, "
                          f"the display has {self.display.rows} rows")

        if not 0 <= self.alarms.restore_volume <= 100:
            errors.append(f"alarms.restore_volume must be 0-100, got {self.alarms.restore_volume}")

        if self.timezone not in pytz.all_timezones_set:
            errors.append(f"timezone {self.timezone!r} is not a known time zone")

        return errors
