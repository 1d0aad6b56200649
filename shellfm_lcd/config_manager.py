import json
import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional, List, Tuple

from jsonschema import Draft7Validator, ValidationError

from shellfm_lcd.exceptions import ConfigError
from shellfm_lcd.logging_config import get_logger
from shellfm_lcd.common.error_handler import log_and_raise
from shellfm_lcd.settings import Settings

_POSITIVE_NUMBER = {"type": "number", "exclusiveMinimum": 0}

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "daemon": {
            "type": "object",
            "properties": {
                "host": {"type": "string", "minLength": 1},
                "port": {"type": "integer", "minimum": 1, "maximum": 65535},
                "timeout": _POSITIVE_NUMBER,
            },
        },
        "intervals": {
            "type": "object",
            "properties": {
                "poll": _POSITIVE_NUMBER,
                "scroll": _POSITIVE_NUMBER,
                "display_poll": _POSITIVE_NUMBER,
                "countdown": _POSITIVE_NUMBER,
                "alarm_check": {"type": "number", "exclusiveMinimum": 0, "maximum": 30},
            },
        },
        "backlight": {
            "type": "object",
            "properties": {
                "timeout": {"type": "number"},
            },
        },
        "display": {
            "type": "object",
            "properties": {
                "driver": {"enum": ["hd44780", "emulator"]},
                "i2c_expander": {"enum": ["PCF8574", "MCP23008", "MCP23017"]},
                "i2c_address": {"type": "integer", "minimum": 0, "maximum": 127},
                "i2c_port": {"type": "integer", "minimum": 0},
                "cols": {"type": "integer", "minimum": 16},
                "rows": {"type": "integer", "minimum": 4},
                "icons_directory": {"type": "string"},
                "splash": {"type": "array", "items": {"type": "string"}},
                "splash_duration": {"type": "number", "minimum": 0},
                "help_text": {"type": "string"},
                "stopped_text": {"type": "string"},
                "goodbye_text": {"type": "string"},
                "goodbye_duration": {"type": "number", "minimum": 0},
            },
        },
        "alarms": {
            "type": "object",
            "properties": {
                "enabled": {"type": "boolean"},
                "path": {"type": "string"},
                "default_station": {"type": ["string", "null"]},
                "restore_volume": {"type": "integer", "minimum": 0, "maximum": 100},
            },
        },
        "timezone": {"type": "string"},
    },
}


class ConfigManager:
    def __init__(self, config_path: Optional[str] = None, template_path: Optional[str] = None) -> None:
        # Use current working directory as base
        self.config_path: str = config_path or "config/config.json"
        self.template_path: str = template_path or "config/config.template.json"
        self.config: Dict[str, Any] = {}
        self.logger: logging.Logger = get_logger(__name__)
        self._validator = Draft7Validator(CONFIG_SCHEMA)

    def get_config_path(self) -> str:
        return self.config_path

    def load_config(self) -> Dict[str, Any]:
        """Load and validate configuration from the JSON file."""
        try:
            # Check if config file exists, if not create from template
            if not os.path.exists(self.config_path):
                self._create_config_from_template()

            self.logger.info(f"Attempting to load config from: {os.path.abspath(self.config_path)}")
            with open(self.config_path, 'r') as f:
                config = json.load(f)

        except json.JSONDecodeError as e:
            error_msg = f"Error parsing configuration file {os.path.abspath(self.config_path)}"
            self.logger.error(error_msg, exc_info=True)
            raise ConfigError(error_msg, config_path=self.config_path) from e
        except (IOError, OSError, PermissionError) as e:
            error_msg = f"Error loading configuration from {os.path.abspath(self.config_path)}"
            self.logger.error(error_msg, exc_info=True)
            raise ConfigError(error_msg, config_path=self.config_path) from e

        if not isinstance(config, dict):
            log_and_raise(self.logger, "Configuration root must be a JSON object", ConfigError,
                          context={'config_path': self.config_path})
        self.config = config

        # Migrate config to add any new items from template
        self._migrate_config()

        is_valid, errors = self.validate_config(self.config)
        if not is_valid:
            log_and_raise(
                self.logger,
                "Invalid configuration:\n" + "\n".join(f"  - {e}" for e in errors),
                ConfigError,
                context={'config_path': self.config_path}
            )

        return self.config

    def validate_config(self, config: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """
        Validate a configuration dictionary.

        Runs the JSON Schema first, then the cross-field checks in Settings.

        Returns:
            Tuple of (is_valid, list_of_error_messages)
        """
        errors = [self._format_validation_error(error) for error in self._validator.iter_errors(config)]
        if errors:
            return False, errors

        errors = Settings.from_config(config).validate()
        return not errors, errors

    def _format_validation_error(self, error: ValidationError) -> str:
        """Format a validation error into a readable message."""
        path = '.'.join(str(p) for p in error.path)
        field_path = f"'{path}'" if path else "root"

        if error.validator == 'type':
            expected = error.validator_value
            actual = type(error.instance).__name__
            return f"Field {field_path}: Expected type {expected}, got {actual}"
        elif error.validator == 'enum':
            allowed = ', '.join(str(v) for v in error.validator_value)
            return f"Field {field_path}: Value {error.instance!r} not in allowed values: {allowed}"
        elif error.validator in ('minimum', 'maximum', 'exclusiveMinimum'):
            return f"Field {field_path}: {error.message}"
        return f"Field {field_path}: {error.message}"

    def save_config(self, new_config_data: Dict[str, Any]) -> None:
        """Save configuration to the main JSON file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(new_config_data, f, indent=4)

            self.config = new_config_data
            self.logger.info(f"Configuration successfully saved to {os.path.abspath(self.config_path)}")

        except (IOError, OSError, PermissionError) as e:
            error_msg = f"Error writing configuration to file {os.path.abspath(self.config_path)}"
            self.logger.error(error_msg, exc_info=True)
            raise ConfigError(error_msg, config_path=self.config_path) from e

    def _create_config_from_template(self) -> None:
        """Create config.json from template if it doesn't exist."""
        if not os.path.exists(self.template_path):
            error_msg = f"Template file not found at {os.path.abspath(self.template_path)}"
            self.logger.error(error_msg)
            raise ConfigError(error_msg, config_path=self.template_path)

        self.logger.info(f"Creating config.json from template at {os.path.abspath(self.template_path)}")

        Path(self.config_path).parent.mkdir(parents=True, exist_ok=True)

        with open(self.template_path, 'r') as template_file:
            template_data = json.load(template_file)

        with open(self.config_path, 'w') as config_file:
            json.dump(template_data, config_file, indent=4)

        self.logger.info(f"Created config.json from template at {os.path.abspath(self.config_path)}")

    def _migrate_config(self) -> None:
        """Migrate config to add new items from template with defaults."""
        if not os.path.exists(self.template_path):
            self.logger.warning(f"Template file not found at {os.path.abspath(self.template_path)}, skipping migration")
            return

        try:
            with open(self.template_path, 'r') as f:
                template_config = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            self.logger.error(f"Error reading template during config migration: {e}")
            return

        if not self._has_new_keys(self.config, template_config):
            self.logger.debug("Config is up to date, no migration needed")
            return

        self.logger.info("Config migration needed - adding new configuration items with defaults")

        backup_path = f"{self.config_path}.backup"
        try:
            with open(backup_path, 'w') as backup_file:
                json.dump(self.config, backup_file, indent=4)
            self.logger.info(f"Created backup of current config at {os.path.abspath(backup_path)}")
        except OSError as e:
            self.logger.error(f"Could not back up config before migration, skipping migration: {e}")
            return

        self._merge_template_defaults(self.config, template_config)

        try:
            self.save_config(self.config)
        except ConfigError as e:
            # The merged config is still used in memory
            self.logger.warning(f"Config migration completed but could not be saved: {e}")

    def _has_new_keys(self, current: Dict[str, Any], template: Dict[str, Any]) -> bool:
        """Recursively check if template has keys not in current config."""
        for key, value in template.items():
            if key not in current:
                return True
            if isinstance(value, dict) and isinstance(current[key], dict):
                if self._has_new_keys(current[key], value):
                    return True
        return False

    def _merge_template_defaults(self, current: Dict[str, Any], template: Dict[str, Any]) -> None:
        """Recursively merge template defaults into current config."""
        for key, value in template.items():
            if key not in current:
                current[key] = value
                self.logger.debug(f"Added new config key: {key}")
            elif isinstance(value, dict) and isinstance(current[key], dict):
                self._merge_template_defaults(current[key], value)

    def get_config(self) -> Dict[str, Any]:
        """Get the full configuration dictionary.

        Returns:
            The complete configuration dictionary. If config hasn't been loaded yet,
            it will be loaded first.
        """
        if not self.config:
            self.load_config()
        return self.config

    def get_settings(self) -> Settings:
        """Get the configuration as typed Settings."""
        return Settings.from_config(self.get_config())
