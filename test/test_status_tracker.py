from shellfm_lcd.display_coordinator import DisplayCoordinator, Layout
from shellfm_lcd.status_tracker import PlaybackStatus, StatusTracker, TrackSample


def sample(remaining, artist="Miles Davis", album="Kind of Blue", title="So What"):
    return TrackSample(artist=artist, title=title, album=album, remaining_seconds=remaining)


class TestStatusTracker:
    """Test status classification from successive polls."""

    def setup_method(self):
        self.coordinator = DisplayCoordinator()
        self.tracker = StatusTracker(self.coordinator)

    def test_first_sample_only_seeds(self):
        update = self.tracker.process(sample(30))
        assert update.status is PlaybackStatus.STOPPED
        assert update.changed is False
        assert self.tracker.previous_remaining == 30
        assert self.coordinator.artist.value == "Miles Davis"

    def test_decreasing_remaining_is_playing(self):
        self.tracker.process(sample(30))
        update = self.tracker.process(sample(29))
        assert update.status is PlaybackStatus.PLAYING
        assert update.changed is True
        assert update.activity is True
        assert self.coordinator.layout is Layout.PLAYING

        update = self.tracker.process(sample(28))
        assert update.status is PlaybackStatus.PLAYING
        assert update.changed is False

    def test_equal_remaining_is_paused(self):
        self.tracker.process(sample(30))
        self.tracker.process(sample(29))
        update = self.tracker.process(sample(29))
        assert update.status is PlaybackStatus.PAUSED
        assert update.changed is True
        assert self.coordinator.status_icon.value == "pause"

    def test_increasing_remaining_is_paused(self):
        self.tracker.process(sample(30))
        self.tracker.process(sample(29))
        update = self.tracker.process(sample(240, title="Freddie Freeloader"))
        assert update.status is PlaybackStatus.PAUSED
        assert self.coordinator.title.value == "Freddie Freeloader"

    def test_zero_remaining_is_paused(self):
        self.tracker.process(sample(3))
        update = self.tracker.process(sample(0))
        assert update.status is PlaybackStatus.PAUSED

    def test_none_is_stopped_then_recovers(self):
        self.tracker.process(sample(30))
        self.tracker.process(sample(29))

        update = self.tracker.process(None)
        assert update.status is PlaybackStatus.STOPPED
        assert update.changed is True
        assert self.coordinator.layout is Layout.STOPPED

        update = self.tracker.process(None)
        assert update.changed is False
        assert update.activity is False

        # The previous reading survives the stopped period.
        update = self.tracker.process(sample(28))
        assert update.status is PlaybackStatus.PLAYING
        assert self.coordinator.layout is Layout.PLAYING

    def test_activity_on_value_change_without_status_change(self):
        self.tracker.process(sample(30))
        self.tracker.process(sample(29))
        update = self.tracker.process(sample(28, title="Blue in Green"))
        assert update.changed is False
        assert update.activity is True
