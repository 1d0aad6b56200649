"""
Alarm Scheduler

Minute-resolution scheduler that starts, pauses or stops playback at
configured times of day. The alarm thread calls tick() every few seconds;
each wall-clock minute is evaluated exactly once, so a short check interval
tolerates clock drift and late wake-ups without firing a rule twice.

Rules are reloaded from their source on every evaluated minute, so edits to
the alarm file take effect without a restart.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Protocol, Tuple

import pytz

from shellfm_lcd.common.error_handler import log_and_continue
from shellfm_lcd.exceptions import AlarmError, ConfigError, ShellFMLCDError
from shellfm_lcd.logging_config import get_logger
from shellfm_lcd.status_tracker import PlaybackStatus

WEEKDAYS = {
    "mon": 0, "tue": 1, "wed": 2, "thu": 3, "fri": 4, "sat": 5, "sun": 6,
}
DEFAULT_RESTORE_VOLUME = 80
DEFAULT_CHECK_INTERVAL = 5.0


class AlarmAction(Enum):
    """Playback command issued by an alarm."""
    PLAY = "play"
    PAUSE = "pause"
    STOP = "stop"


@dataclass(frozen=True)
class AlarmRule:
    """A time-of-day rule; fires when the weekday and HH:MM both match."""
    days: FrozenSet[int]
    time_of_day: str
    action: AlarmAction
    station: Optional[str] = None

    def matches(self, now: datetime) -> bool:
        return now.weekday() in self.days and now.strftime("%H:%M") == self.time_of_day

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: Optional[int] = None) -> 'AlarmRule':
        """
        Build a rule from its JSON form.

        Args:
            data: Dict with 'days', 'time', 'action' and optional 'station'
            index: Position of the rule in its source, for error messages

        Returns:
            AlarmRule instance

        Raises:
            AlarmError: If any field is invalid
        """
        try:
            action = AlarmAction(data.get("action"))
        except ValueError as e:
            raise AlarmError(f"Unknown alarm action {data.get('action')!r}", rule_index=index) from e

        days = set()
        for day in data.get("days", []):
            key = str(day).strip().lower()[:3]
            if key not in WEEKDAYS:
                raise AlarmError(f"Unknown weekday {day!r}", rule_index=index)
            days.add(WEEKDAYS[key])
        if not days:
            raise AlarmError("Alarm has no days", rule_index=index)

        raw_time = str(data.get("time", ""))
        try:
            time_of_day = datetime.strptime(raw_time, "%H:%M").strftime("%H:%M")
        except ValueError as e:
            raise AlarmError(f"Invalid alarm time {raw_time!r}", rule_index=index) from e

        return cls(days=frozenset(days), time_of_day=time_of_day, action=action,
                   station=data.get("station") or None)


class AlarmSource(Protocol):
    """Anything that can produce the current ordered list of rules."""

    def load_rules(self) -> List[AlarmRule]: ...


class AlarmScheduler:
    """Evaluates alarm rules once per minute and drives the daemon."""

    def __init__(
        self,
        source: AlarmSource,
        client,
        status_provider: Callable[[], PlaybackStatus],
        default_station: Optional[str] = None,
        restore_volume: int = DEFAULT_RESTORE_VOLUME,
        timezone: str = "UTC",
        check_interval: float = DEFAULT_CHECK_INTERVAL,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the scheduler.

        Args:
            source: AlarmSource consulted on every evaluated minute
            client: ShellFMClient used to send commands
            status_provider: Returns the current playback status
            default_station: Station for play rules that name none
            restore_volume: Volume restored when the current one can't be read
            timezone: pytz zone name for the alarm clock
            check_interval: Seconds between tick() calls from the alarm thread
            logger: Optional logger instance

        Raises:
            ConfigError: If the timezone name is unknown
        """
        self.source = source
        self.client = client
        self.status_provider = status_provider
        self.default_station = default_station
        self.restore_volume = restore_volume
        try:
            self.timezone = pytz.timezone(timezone)
        except pytz.UnknownTimeZoneError as e:
            raise ConfigError(f"Unknown timezone {timezone!r}", field="timezone") from e
        self.check_interval = check_interval
        self.logger = logger or get_logger(__name__)
        self._last_minute: Optional[Tuple] = None
        # Local date each rule last fired on; a repeated wall-clock minute
        # (DST fall-back) must not fire the same rule twice in one day.
        self._fired_on: Dict[AlarmRule, date] = {}

    def now(self) -> datetime:
        return datetime.now(self.timezone)

    def tick(self, now: Optional[datetime] = None) -> int:
        """
        Evaluate the rules if the wall-clock minute changed since the last tick.

        Args:
            now: Current time (defaults to the scheduler clock)

        Returns:
            Number of rules fired
        """
        now = now or self.now()
        if now.tzinfo is not None:
            now = now.astimezone(self.timezone)
        minute = (now.date(), now.hour, now.minute)
        if minute == self._last_minute:
            return 0
        self._last_minute = minute

        fired = 0
        for rule in self._load_rules():
            if rule.matches(now):
                if self._fired_on.get(rule) == now.date():
                    self.logger.debug("Alarm %s at %s already fired today", rule.action.value, rule.time_of_day)
                    continue
                self._fired_on[rule] = now.date()
                self.logger.info("Alarm %s at %s firing", rule.action.value, rule.time_of_day)
                self.fire(rule)
                fired += 1
        return fired

    def run(self, stop_event: threading.Event) -> None:
        """
        Call tick() every check_interval seconds until stop_event is set.

        Errors from a single tick are logged and the loop keeps going.
        """
        self.logger.info("Alarm scheduler started (checking every %.1fs)", self.check_interval)
        while not stop_event.is_set():
            try:
                self.tick()
            except Exception:  # pylint: disable=broad-except
                self.logger.exception("Error evaluating alarms")
            stop_event.wait(self.check_interval)
        self.logger.info("Alarm scheduler stopped")

    def fire(self, rule: AlarmRule) -> None:
        """Issue the daemon commands for one rule."""
        status = self.status_provider()

        if rule.action is AlarmAction.PLAY:
            volume = self._mute()
            if status is PlaybackStatus.PAUSED:
                self._send("pause")
            station = rule.station or self.default_station
            if station:
                self._send(f"play {station}")
            else:
                self.logger.warning("Play alarm at %s has no station", rule.time_of_day)
            if status is not PlaybackStatus.STOPPED:
                self._send("skip")
            self._send(f"volume {volume}")

        elif rule.action is AlarmAction.PAUSE:
            if status is PlaybackStatus.PLAYING:
                self._send("pause")

        elif rule.action is AlarmAction.STOP:
            volume = self._mute()
            if status is PlaybackStatus.PAUSED:
                self._send("pause")
            self._send("stop")
            self._send(f"volume {volume}")

    def _load_rules(self) -> List[AlarmRule]:
        try:
            return list(self.source.load_rules())
        except ShellFMLCDError as e:
            self.logger.error("Could not load alarm rules, none will fire this minute: %s", e)
            return []

    def _mute(self) -> int:
        volume = self.client.get_volume()
        if volume is None:
            volume = self.restore_volume
        self._send("volume 0")
        return volume

    def _send(self, command: str) -> bool:
        ok = self.client.send_command(command)
        if not ok:
            log_and_continue(self.logger, "Alarm command failed, not retrying",
                             context={'command': command})
        return ok
