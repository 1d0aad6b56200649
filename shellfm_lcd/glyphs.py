"""
Custom Glyphs

HD44780 displays have eight CGRAM slots for user-defined 5x8 characters.
Icons are read from an icons directory and loaded into the slots in sorted
filename order; the file stem becomes the glyph name ("play.chr" -> "play").

Two bitmap formats are supported:

- ``.chr`` text files: eight rows of five cells, where ``1``, ``#``, ``X``
  or ``*`` marks a lit pixel and anything else is dark. Blank lines and lines
  starting with ``;`` are ignored.
- images (``.png``, ``.bmp``, ``.gif``): converted to grayscale and resized to
  5x8; dark pixels are lit.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
from PIL import Image

from shellfm_lcd.common.error_handler import handle_file_operation
from shellfm_lcd.exceptions import DisplayError
from shellfm_lcd.logging_config import get_logger

GLYPH_WIDTH = 5
GLYPH_HEIGHT = 8
MAX_GLYPHS = 8
LIT_CELLS = set("1#Xx*")
IMAGE_SUFFIXES = {".png", ".bmp", ".gif"}
GLYPH_SUFFIXES = {".chr"} | IMAGE_SUFFIXES
DARK_THRESHOLD = 128

# Column weights for packing one pixel row into a byte, leftmost pixel highest
_ROW_WEIGHTS = 1 << np.arange(GLYPH_WIDTH - 1, -1, -1)

logger = get_logger(__name__)


def parse_chr(text: str, source: str = "<string>") -> Tuple[int, ...]:
    """
    Parse the text glyph format.

    Args:
        text: File contents
        source: Name used in error messages

    Returns:
        Eight row bytes, each using the low five bits

    Raises:
        DisplayError: If the bitmap is not 5x8
    """
    rows = [
        line.strip() for line in text.splitlines()
        if line.strip() and not line.strip().startswith(";")
    ]
    if len(rows) != GLYPH_HEIGHT:
        raise DisplayError(f"Glyph must have {GLYPH_HEIGHT} rows, got {len(rows)}",
                           context={'glyph': source})

    bitmap = []
    for row in rows:
        if len(row) != GLYPH_WIDTH:
            raise DisplayError(f"Glyph rows must be {GLYPH_WIDTH} cells wide, got {row!r}",
                               context={'glyph': source})
        value = 0
        for cell in row:
            value = (value << 1) | (1 if cell in LIT_CELLS else 0)
        bitmap.append(value)
    return tuple(bitmap)


def bitmap_from_image(image: Image.Image) -> Tuple[int, ...]:
    """Convert an image to row bytes, lighting the dark pixels."""
    gray = image.convert("L")
    if gray.size != (GLYPH_WIDTH, GLYPH_HEIGHT):
        gray = gray.resize((GLYPH_WIDTH, GLYPH_HEIGHT))
    lit = np.asarray(gray) < DARK_THRESHOLD
    return tuple(int(value) for value in (lit * _ROW_WEIGHTS).sum(axis=1))


def load_glyph_bitmap(path: str) -> Tuple[int, ...]:
    """
    Load a glyph bitmap from a .chr or image file.

    Raises:
        DisplayError: If the file can't be read or isn't a valid glyph
    """
    glyph_path = Path(path)
    if glyph_path.suffix.lower() in IMAGE_SUFFIXES:
        try:
            with Image.open(glyph_path) as image:
                return bitmap_from_image(image)
        except (OSError, ValueError) as e:
            raise DisplayError(f"Could not read glyph image: {e}", context={'glyph': str(path)}) from e

    text = handle_file_operation(
        lambda: glyph_path.read_text(encoding="utf-8"),
        "Could not read glyph file",
        logger,
        default=None,
        context={'glyph': str(path)}
    )
    if text is None:
        raise DisplayError("Could not read glyph file", context={'glyph': str(path)})
    return parse_chr(text, source=str(path))


def discover_glyphs(directory: str, log: Optional[logging.Logger] = None) -> List[Tuple[str, Path]]:
    """
    List glyph files in slot order.

    Returns:
        (name, path) pairs, at most MAX_GLYPHS of them
    """
    log = log or logger
    icons_dir = Path(directory)
    if not icons_dir.is_dir():
        log.warning("Icons directory %s not found, no icons will be shown", icons_dir)
        return []

    files = sorted(p for p in icons_dir.iterdir() if p.suffix.lower() in GLYPH_SUFFIXES)
    if len(files) > MAX_GLYPHS:
        log.warning("Found %d icons but the display only holds %d; ignoring %s",
                    len(files), MAX_GLYPHS, ", ".join(p.name for p in files[MAX_GLYPHS:]))
        files = files[:MAX_GLYPHS]
    return [(p.stem, p) for p in files]


def load_glyphs(driver, directory: str, log: Optional[logging.Logger] = None) -> Dict[str, int]:
    """
    Load every icon in directory into the display.

    Args:
        driver: DisplayDriver to load the glyphs into
        directory: Icons directory
        log: Optional logger instance

    Returns:
        Mapping of glyph name to CGRAM slot for the icons that loaded
    """
    log = log or logger
    glyphs: Dict[str, int] = {}
    for slot, (name, path) in enumerate(discover_glyphs(directory, log)):
        try:
            driver.load_glyph(slot, str(path))
        except DisplayError as e:
            log.warning("Skipping icon %s: %s", name, e)
            continue
        glyphs[name] = slot
    log.info("Loaded %d icon(s): %s", len(glyphs), ", ".join(sorted(glyphs)) or "none")
    return glyphs
