"""Now-playing display for shell-fm on HD44780 character LCDs."""

__version__ = "1.0.0"
