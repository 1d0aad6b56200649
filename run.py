#!/usr/bin/env python3
import logging
import sys
import os
import argparse

# Add project directory to Python path (needed before importing shellfm_lcd)
project_dir = os.path.dirname(os.path.abspath(__file__))
if project_dir not in sys.path:
    sys.path.insert(0, project_dir)

parser = argparse.ArgumentParser(description='shell.fm LCD display')
parser.add_argument('-c', '--config', default=None,
                    help='Path to config.json (default: config/config.json)')
parser.add_argument('-e', '--emulator', action='store_true',
                    help='Run in emulator mode (in-memory display instead of the I2C LCD)')
parser.add_argument('-d', '--debug', action='store_true',
                    help='Enable debug logging and verbose output')
parser.add_argument('--log-format', choices=['readable', 'json'], default='readable',
                    help='Log output format')
parser.add_argument('--log-file', default=None,
                    help='Also write logs to this file')
args = parser.parse_args()

debug_mode = args.debug or os.environ.get('SHELLFM_LCD_DEBUG', '').lower() == 'true'
if debug_mode:
    print(f"DEBUG: Project directory: {project_dir}", flush=True)
    print(f"DEBUG: Current working directory: {os.getcwd()}", flush=True)
    print(f"DEBUG: Emulator mode: {args.emulator}", flush=True)

# Configure logging before importing any other modules
from shellfm_lcd.logging_config import setup_logging

log_level = logging.DEBUG if debug_mode else logging.INFO
setup_logging(level=log_level, format_type=args.log_format,
              include_location=debug_mode, log_file=args.log_file)

from shellfm_lcd.display_controller import main
from shellfm_lcd.exceptions import ShellFMLCDError

if __name__ == "__main__":
    try:
        main(config_path=args.config, emulator=args.emulator)
    except ShellFMLCDError as e:
        logging.getLogger(__name__).error("Could not start: %s", e)
        sys.exit(1)
