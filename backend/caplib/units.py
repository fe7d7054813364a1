"""
Unit conversion helpers for capacity figures.

Allocations are entered as hours ("H:MM") but stored as a percentage of a
40-hour week. Every helper here is total: malformed input never raises, it
collapses to 0.
"""
import math
import re
from typing import Any

HOURS_PER_WEEK = 40
WORKDAYS_PER_WEEK = 5
LEAVE_HOURS_PER_DAY = HOURS_PER_WEEK / WORKDAYS_PER_WEEK
WEEKS_IN_HORIZON = 4
COMMENT_WORD_LIMIT = 250

_NON_DIGITS = re.compile(r'\D+')
_WHITESPACE = re.compile(r'\s+')
_WORD_WITH_SPACING = re.compile(r'\S+\s*')


def _to_float(value: Any) -> float:
    """Coerce like a JS ``Number(...)`` call; anything unusable becomes NaN."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    if isinstance(value, str):
        s = value.strip()
        if s == '':
            return 0.0
        try:
            return float(s)
        except ValueError:
            return math.nan
    return math.nan


def _is_finite(value: Any) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large for a float
        return False


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 always going up (matches Math.round)."""
    return int(math.floor(value + 0.5))


def clamp_capacity(value: Any) -> float:
    """Canonical stored allocation: 3 decimals, never negative, NaN/inf -> 0."""
    if not _is_finite(value):
        return 0
    rounded = math.floor(value * 1000 + 0.5) / 1000
    return max(0, rounded)


def normalize_capacity_input(value: Any) -> float:
    """Coerce a raw percentage field.

    Strings keep only their digit characters ("12.5" -> 125), leading zeros
    are dropped, then the result is clamped.
    """
    if _is_finite(value) or isinstance(value, float):
        return clamp_capacity(value)
    if isinstance(value, str):
        trimmed = value.strip()
        if trimmed == '':
            return 0
        digits_only = _NON_DIGITS.sub('', trimmed)
        if digits_only == '':
            return 0
        without_leading_zeros = digits_only.lstrip('0') or '0'
        return clamp_capacity(float(without_leading_zeros))
    return clamp_capacity(_to_float(value))


def percent_to_hours(percent: Any) -> float:
    if not _is_finite(percent):
        return 0
    return max(0, (percent / 100) * HOURS_PER_WEEK)


def hours_to_percent(hours: Any) -> float:
    if not _is_finite(hours):
        return 0
    return clamp_capacity((hours / HOURS_PER_WEEK) * 100)


def normalize_hours_input(value: Any) -> float:
    """Parse an hours field: number, "H:MM", numeric text, or junk.

    "H:MM" strips non-digits from each side of the colon separately;
    unparseable text keeps its digits as a whole number of hours.
    """
    if _is_finite(value):
        return max(0, value)
    if isinstance(value, str):
        trimmed = value.strip()
        if trimmed == '':
            return 0
        compact = _WHITESPACE.sub('', trimmed)
        if ':' in compact:
            raw_hours, _, rest = compact.partition(':')
            raw_minutes = rest.split(':', 1)[0]
            hours_digits = _NON_DIGITS.sub('', raw_hours)
            minute_digits = _NON_DIGITS.sub('', raw_minutes)
            if hours_digits == '' and minute_digits == '':
                return 0
            hours_value = float(hours_digits) if hours_digits else 0
            minutes_value = float(minute_digits) if minute_digits else 0
            total = (hours_value * 60 + minutes_value) / 60
            return max(0, total) if _is_finite(total) else 0
        numeric = _to_float(compact)
        if _is_finite(numeric):
            return max(0, numeric)
        digits_only = _NON_DIGITS.sub('', compact)
        if digits_only == '':
            return 0
        whole = float(digits_only)
        return whole if _is_finite(whole) else 0
    fallback = _to_float(value)
    return max(0, fallback) if _is_finite(fallback) else 0


def format_hours_input(hours: Any) -> str:
    """Render hours as "H:MM", rounded to the nearest minute."""
    if not _is_finite(hours):
        return '0:00'
    total_minutes = max(0, round_half_up(hours * 60))
    whole_hours, minutes = divmod(total_minutes, 60)
    return f"{whole_hours}:{minutes:02d}"


def round_to_minute(hours: float) -> float:
    """Hours rounded to minute precision, floored at 0."""
    return max(0, round_half_up(hours * 60) / 60)


def clamp_week_load_percent(value: Any) -> int:
    """Whole-percent load clamped to [0, 100] for badges and buckets."""
    if not _is_finite(value):
        return 0
    return max(0, min(100, round_half_up(value)))


def limit_to_word_count(value: str, max_words: int = COMMENT_WORD_LIMIT) -> str:
    words = _WORD_WITH_SPACING.findall(value or '')
    if len(words) <= max_words:
        return value
    return ''.join(words[:max_words]).rstrip()
