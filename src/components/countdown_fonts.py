"""Process-wide font registration for countdown rendering.

Fonts are discovered once, lazily, before the first render. The registry
builds a complete FontTable and publishes it with a single assignment under
a lock, so concurrent callers see either no table or a fully built one.
"""

import logging
import os
import threading
import warnings
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, NamedTuple, Optional

from PIL import ImageFont

from src.components.countdown_errors import ConfigurationWarning

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent
BUNDLED_FONT_DIR = PROJECT_ROOT / 'fonts'
DEFAULT_FAMILY = 'GillSans Regular'


def _candidate_fonts() -> Dict[str, str]:
    home_dir = os.path.expanduser("~")
    return {
        'GillSans Regular': str(BUNDLED_FONT_DIR / 'GillSans Regular.ttf'),
        'Roboto': f"{home_dir}/.fonts/Roboto-Regular.ttf",
        'Arial': "/usr/share/fonts/truetype/msttcorefonts/Arial.ttf",
        'DejaVu Sans': "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        'Helvetica': "/System/Library/Fonts/Helvetica.ttc",
    }


class FontSpec(NamedTuple):
    family: str
    size: int


@dataclass(frozen=True)
class FontTable:
    """Immutable family -> font file mapping."""
    paths: Dict[str, str] = field(default_factory=dict)
    # When a custom font is configured it replaces every requested family
    override_family: Optional[str] = None

    def resolve(self, family: str) -> Optional[str]:
        if self.override_family:
            family = self.override_family
        if family in self.paths:
            return self.paths[family]
        # Any registered font beats the built-in bitmap fallback
        return next(iter(self.paths.values()), None)


@lru_cache(maxsize=64)
def _load_truetype(path: str, size: int) -> ImageFont.FreeTypeFont:
    return ImageFont.truetype(path, size)


@lru_cache(maxsize=16)
def _load_default(size: int):
    return ImageFont.load_default(size=size)


def _usable(path: str) -> bool:
    try:
        _load_truetype(path, 12)
        return True
    except OSError:
        return False


class FontRegistry:
    """Lazy, at-most-once font discovery."""

    def __init__(self, candidates: Optional[Dict[str, str]] = None):
        self._candidates = candidates
        self._lock = threading.Lock()
        self._table: Optional[FontTable] = None

    @property
    def is_registered(self) -> bool:
        return self._table is not None

    def register(self, font_path: Optional[str] = None, font_family: str = 'CustomFont') -> FontTable:
        """Discover fonts and publish the table. Later calls return the first result."""
        table = self._table
        if table is not None:
            return table

        with self._lock:
            if self._table is None:
                self._table = self._build_table(font_path, font_family)
            return self._table

    def _build_table(self, font_path: Optional[str], font_family: str) -> FontTable:
        candidates = self._candidates if self._candidates is not None else _candidate_fonts()
        paths = {}
        for family, path in candidates.items():
            if os.path.exists(path) and _usable(path):
                paths[family] = path
                logger.debug(f"Registered font '{family}' from {path}")

        override_family = None
        if font_path:
            if os.path.exists(font_path) and _usable(font_path):
                paths[font_family] = font_path
                override_family = font_family
                logger.info(f"Registered custom font '{font_family}' from {font_path}")
            else:
                message = f"Custom FONT_PATH {font_path} is missing or unreadable, using default fonts"
                logger.warning(message)
                warnings.warn(message, ConfigurationWarning, stacklevel=3)

        if not paths:
            logger.warning("No TrueType fonts found, using Pillow's built-in font")

        return FontTable(paths=paths, override_family=override_family)

    def get_font(self, font: FontSpec):
        """Return a Pillow font for ``font``, registering defaults on first use."""
        table = self.register()
        path = table.resolve(font.family)
        if path is None:
            return _load_default(font.size)
        return _load_truetype(path, font.size)


default_registry = FontRegistry()


def register_fonts(font_path: Optional[str] = None, font_family: str = 'CustomFont') -> FontTable:
    return default_registry.register(font_path, font_family)
