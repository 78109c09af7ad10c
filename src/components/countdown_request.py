"""Input sanitizer for countdown image requests.

Turns untrusted query parameters into a typed RenderRequest. Only the target
date can reject a request; every other field degrades silently to a default.
"""

import logging
import re
import unicodedata
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

import pytz

from src.components.countdown_errors import InvalidTarget
from src.utils.time_utils import wants_animation

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 64
DEFAULT_LABEL = 'Sale ends in'
DEFAULT_ACCENT_COLOR = '#22d3ee'
DEFAULT_BG_COLOR = '#0f172a'
DEFAULT_TEXT_COLOR = '#ffffff'

HEX_COLOR_PATTERN = re.compile(r'^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')


@dataclass(frozen=True)
class RenderRequest:
    target: datetime
    label: str = DEFAULT_LABEL
    sub_label: str = ''
    accent_color: str = DEFAULT_ACCENT_COLOR
    background_color: str = DEFAULT_BG_COLOR
    text_color: str = DEFAULT_TEXT_COLOR
    animated: bool = False
    cache_bust: Optional[str] = None

    @property
    def target_ms(self) -> int:
        return int(self.target.timestamp() * 1000)


def _first(value: Any) -> Optional[str]:
    """Collapse a repeated query parameter to its first value."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    return str(value)


def parse_target_date(value: Optional[str], default_tz: str = 'UTC') -> Optional[datetime]:
    """Parse an ISO-8601 style date or date-time into an aware datetime.

    A trailing ``Z`` is accepted. Values without an offset are localized to
    ``default_tz``. Returns None when the value cannot be parsed.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        try:
            tz = pytz.timezone(default_tz)
        except pytz.UnknownTimeZoneError:
            logger.warning(f"Unknown DEFAULT_TIMEZONE '{default_tz}', using UTC")
            tz = pytz.utc
        try:
            parsed = tz.localize(parsed)
        except OverflowError:
            # Dates at the edge of the calendar cannot be shifted into the zone
            logger.info(f"Target {value!r} is out of range for {default_tz}")
            return None
    return parsed


def clean_text(value: Optional[str]) -> str:
    """Collapse control characters and whitespace runs into single spaces.

    Labels are drawn as a single line, so newlines and tabs become spaces.
    """
    if not value:
        return ''
    printable = ''.join(' ' if unicodedata.category(char).startswith('C') else char for char in value)
    return ' '.join(printable.split())


def pick_color(value: Optional[str], fallback: str) -> str:
    if not value:
        return fallback
    color = value.strip()
    return color if HEX_COLOR_PATTERN.match(color) else fallback


def sanitize_query(query: Mapping[str, Any], default_tz: str = 'UTC') -> RenderRequest:
    """Build a RenderRequest from raw query parameters.

    Args:
        query: Mapping of parameter name to a string or list of strings
        default_tz: Timezone for target dates given without an offset

    Returns:
        RenderRequest with every optional field defaulted or truncated

    Raises:
        InvalidTarget: If ``target`` is missing or not a valid date
    """
    raw_target = _first(query.get('target'))
    target = parse_target_date(raw_target, default_tz)
    if target is None:
        raise InvalidTarget(raw_target)

    label = (clean_text(_first(query.get('label'))) or DEFAULT_LABEL)[:MAX_TEXT_LENGTH]
    sub_label = clean_text(_first(query.get('sub')))[:MAX_TEXT_LENGTH]

    return RenderRequest(
        target=target,
        label=label,
        sub_label=sub_label,
        accent_color=pick_color(_first(query.get('accent')), DEFAULT_ACCENT_COLOR),
        background_color=pick_color(_first(query.get('bg')), DEFAULT_BG_COLOR),
        text_color=pick_color(_first(query.get('text')), DEFAULT_TEXT_COLOR),
        animated=wants_animation(query),
        cache_bust=_first(query.get('cb')) or None,
    )
