import json

from shellfm_lcd.alarm_scheduler import AlarmAction
from shellfm_lcd.alarm_source import JsonAlarmSource


def write_alarms(path, document):
    path.write_text(json.dumps(document))
    return path


class TestJsonAlarmSource:
    """Test loading alarm rules from JSON."""

    def test_loads_rules_in_order(self, tmp_path):
        path = write_alarms(tmp_path / "alarms.json", {"alarms": [
            {"days": ["mon", "tue"], "time": "07:30", "action": "play",
             "station": "lastfm://globaltags/jazz"},
            {"days": ["sat"], "time": "23:00", "action": "stop"},
        ]})
        rules = JsonAlarmSource(str(path)).load_rules()
        assert [r.action for r in rules] == [AlarmAction.PLAY, AlarmAction.STOP]
        assert rules[0].days == frozenset({0, 1})
        assert rules[1].station is None

    def test_missing_file(self, tmp_path):
        assert JsonAlarmSource(str(tmp_path / "nope.json")).load_rules() == []

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "alarms.json"
        path.write_text("{not json")
        assert JsonAlarmSource(str(path)).load_rules() == []

    def test_schema_violation(self, tmp_path):
        path = write_alarms(tmp_path / "alarms.json", {"alarms": [
            {"days": ["mon"], "time": "7.30", "action": "play"},
        ]})
        assert JsonAlarmSource(str(path)).load_rules() == []

    def test_bad_weekday_drops_all_rules(self, tmp_path):
        path = write_alarms(tmp_path / "alarms.json", {"alarms": [
            {"days": ["mon"], "time": "07:30", "action": "play"},
            {"days": ["caturday"], "time": "08:00", "action": "stop"},
        ]})
        assert JsonAlarmSource(str(path)).load_rules() == []

    def test_edits_apply_on_next_load(self, tmp_path):
        path = write_alarms(tmp_path / "alarms.json", {"alarms": []})
        source = JsonAlarmSource(str(path))
        assert source.load_rules() == []
        write_alarms(path, {"alarms": [{"days": ["sun"], "time": "09:00", "action": "pause"}]})
        assert len(source.load_rules()) == 1

    def test_example_file_is_valid(self):
        from pathlib import Path
        example = Path(__file__).parent.parent / "config" / "alarms.example.json"
        assert len(JsonAlarmSource(str(example)).load_rules()) == 3
