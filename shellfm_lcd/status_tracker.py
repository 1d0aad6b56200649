"""
Status Tracker

shell-fm does not report whether it is paused, so the transport state is
inferred from the "seconds remaining" counter: a counter that went down since
the previous poll means Playing, a counter that stood still (or jumped up)
means Paused, and a failed or empty poll means Stopped.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

from shellfm_lcd.logging_config import get_logger

if TYPE_CHECKING:
    from shellfm_lcd.display_coordinator import DisplayCoordinator

logger = get_logger(__name__)


class PlaybackStatus(Enum):
    """Transport state of the daemon."""
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass(frozen=True)
class TrackSample:
    """One now-playing reading from the daemon."""
    artist: str
    title: str
    album: str
    remaining_seconds: int


@dataclass(frozen=True)
class StatusUpdate:
    """Result of feeding one poll result to the tracker."""
    status: PlaybackStatus
    changed: bool
    activity: bool


class StatusTracker:
    """
    Classifies successive poll results and pushes them to the coordinator.

    Only the poll thread calls process(), so the previous sample needs no lock.
    """

    def __init__(self, coordinator: 'DisplayCoordinator'):
        self.coordinator = coordinator
        self.previous_remaining: Optional[int] = None

    def process(self, sample: Optional[TrackSample]) -> StatusUpdate:
        """
        Apply one poll result.

        Args:
            sample: The daemon reading, or None when the daemon was unreachable
                or had nothing to report

        Returns:
            StatusUpdate with the resulting status, whether it changed, and
            whether anything on screen changed (activity)
        """
        if sample is None:
            changed = self.coordinator.set_status(PlaybackStatus.STOPPED)
            return StatusUpdate(PlaybackStatus.STOPPED, changed, changed)

        previous = self.previous_remaining
        self.previous_remaining = sample.remaining_seconds

        if previous is None:
            # First reading ever only seeds the comparison.
            status = self.coordinator.status
            logger.debug("Seeded remaining time at %ds", sample.remaining_seconds)
        elif 0 < sample.remaining_seconds < previous:
            status = PlaybackStatus.PLAYING
        else:
            status = PlaybackStatus.PAUSED

        changed = self.coordinator.set_status(status)
        values_changed = self.coordinator.update_track(sample)
        return StatusUpdate(status, changed, changed or values_changed)
