"""
JSON Alarm Source

Loads alarm rules from a JSON file of the form:

    {
        "alarms": [
            {"days": ["mon", "tue"], "time": "07:30", "action": "play",
             "station": "lastfm://user/someone/library"},
            {"days": ["sat", "sun"], "time": "23:00", "action": "stop"}
        ]
    }

The file is read again on every call so edits apply within a minute. Any
problem with the file (missing, unreadable, invalid JSON, schema violation,
bad rule) yields an empty rule list for that call.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from jsonschema import Draft7Validator

from shellfm_lcd.alarm_scheduler import AlarmRule
from shellfm_lcd.common.error_handler import handle_json_operation
from shellfm_lcd.exceptions import AlarmError
from shellfm_lcd.logging_config import get_logger

ALARMS_SCHEMA = {
    "type": "object",
    "properties": {
        "alarms": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "days": {
                        "type": "array",
                        "minItems": 1,
                        "items": {"type": "string"}
                    },
                    "time": {
                        "type": "string",
                        "pattern": "^([01]?[0-9]|2[0-3]):[0-5][0-9]$"
                    },
                    "action": {"enum": ["play", "pause", "stop"]},
                    "station": {"type": ["string", "null"]}
                },
                "required": ["days", "time", "action"]
            }
        }
    },
    "required": ["alarms"]
}


class JsonAlarmSource:
    """Reads AlarmRules from a JSON file on every call."""

    def __init__(self, path: str, logger: Optional[logging.Logger] = None):
        """
        Initialize the source.

        Args:
            path: Path to the alarm file
            logger: Optional logger instance
        """
        self.path = Path(path)
        self.logger = logger or get_logger(__name__)
        self._validator = Draft7Validator(ALARMS_SCHEMA)

    def load_rules(self) -> List[AlarmRule]:
        """
        Parse the alarm file.

        Returns:
            Rules in file order, or an empty list if the file is missing or invalid
        """
        if not self.path.exists():
            self.logger.debug("Alarm file %s not found, no alarms", self.path)
            return []

        document = handle_json_operation(
            lambda: json.loads(self.path.read_text(encoding="utf-8")),
            f"Could not read alarm file {self.path}",
            self.logger,
            default=None
        )
        if document is None:
            return []

        errors = [
            f"{'.'.join(str(p) for p in error.path) or 'root'}: {error.message}"
            for error in self._validator.iter_errors(document)
        ]
        if errors:
            self.logger.error("Alarm file %s is invalid: %s", self.path, "; ".join(errors))
            return []

        rules = []
        for index, entry in enumerate(document["alarms"]):
            try:
                rules.append(AlarmRule.from_dict(entry, index=index))
            except AlarmError as e:
                self.logger.error("Alarm file %s has a bad rule: %s", self.path, e)
                return []
        self.logger.debug("Loaded %d alarm rule(s) from %s", len(rules), self.path)
        return rules
