from shellfm_lcd.settings import Settings


class TestSettings:
    """Test the typed settings."""

    def test_defaults(self):
        settings = Settings.from_config({})
        assert settings.daemon.port == 54311
        assert settings.intervals.poll == 4.0
        assert settings.intervals.scroll == 0.5
        assert settings.intervals.display_poll == 0.05
        assert settings.display.cols == 20
        assert settings.display.splash == ["shell.fm LCD display"]
        assert settings.display.goodbye_text == "Bye!"
        assert settings.alarms.enabled is False
        assert settings.timezone == "UTC"
        assert settings.validate() == []

    def test_from_config(self, test_config):
        test_config["backlight"]["timeout"] = 0
        test_config["alarms"]["default_station"] = "lastfm://globaltags/jazz"
        settings = Settings.from_config(test_config)
        assert settings.backlight_timeout == 0
        assert settings.alarms.default_station == "lastfm://globaltags/jazz"
        assert settings.display.splash_duration == 0

    def test_validate_intervals(self):
        settings = Settings.from_config({"intervals": {"poll": 0, "display_poll": 1.0}})
        errors = settings.validate()
        assert any("intervals.poll" in e for e in errors)
        assert any("must not exceed" in e for e in errors)

    def test_validate_dimensions(self):
        settings = Settings.from_config({"display": {"cols": 8, "rows": 2}})
        errors = settings.validate()
        assert any("display.cols" in e for e in errors)
        assert any("display.rows" in e for e in errors)

    def test_validate_splash_lines(self):
        settings = Settings.from_config({"display": {"splash": ["a", "b", "c", "d", "e"]}})
        assert any("splash" in e for e in settings.validate())

    def test_validate_restore_volume(self):
        settings = Settings.from_config({"alarms": {"restore_volume": 120}})
        assert any("restore_volume" in e for e in settings.validate())

    def test_validate_timezone(self):
        settings = Settings.from_config({"timezone": "Mars/Olympus"})
        assert any("timezone" in e for e in settings.validate())
        assert Settings.from_config({"timezone": "Europe/Berlin"}).validate() == []
