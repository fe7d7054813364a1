"""
Date helpers for the 4-week horizon: local ISO parsing, week labels and
compression of leave days into readable spans.

All dates are naive local calendar dates; nothing here touches UTC.
"""
import re
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from dateutil import parser as dateparser

from .units import WEEKS_IN_HORIZON, WORKDAYS_PER_WEEK

LEAVE_DAY_LABELS = ['Mon', 'Tues', 'Wed', 'Thurs', 'Fri']
EN_DASH = '–'

_MONTHS_LONG = [
    'January', 'February', 'March', 'April', 'May', 'June', 'July',
    'August', 'September', 'October', 'November', 'December',
]
_MONTHS_SHORT = [m[:3] for m in _MONTHS_LONG]
# en-GB renders September as "Sept"
_MONTHS_SHORT[8] = 'Sept'

_TRAILING_YEAR = re.compile(r' \d{4}$')


def _month_long(d: date) -> str:
    return _MONTHS_LONG[d.month - 1]


def _month_short(d: date) -> str:
    return _MONTHS_SHORT[d.month - 1]


def parse_iso_date_local(date_str: str) -> Optional[date]:
    """Parse ``YYYY-MM-DD`` as a local calendar date.

    Falls back to generic parsing when the strict shape does not validate;
    returns None when nothing can be made of the input.
    """
    if not isinstance(date_str, str):
        return None
    parts = date_str.split('-')
    if len(parts) == 3:
        try:
            year, month, day = int(parts[0]), int(parts[1]), int(parts[2])
        except ValueError:
            year = month = day = 0
        if 1 <= month <= 12 and 1 <= day <= 31 and year > 0:
            # day 31 of a short month rolls over, as Date(y, m, d) does
            try:
                return date(year, month, 1) + timedelta(days=day - 1)
            except OverflowError:
                return None
    try:
        return dateparser.parse(date_str).date()
    except (ValueError, OverflowError, TypeError):
        return None


def format_iso_date_local(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def format_display_date(date_str: str) -> str:
    """``2026-02-02`` -> ``2 February 2026``."""
    d = parse_iso_date_local(date_str)
    if d is None:
        return date_str
    return f"{d.day} {_month_long(d)} {d.year}"


def get_current_week_start(today: Optional[date] = None) -> str:
    """ISO date of the Monday of the current local week (Sunday belongs to the week before)."""
    if today is None:
        today = datetime.now().date()
    elif isinstance(today, datetime):
        today = today.date()
    monday = today - timedelta(days=today.weekday())
    return format_iso_date_local(monday)


def _week_monday(start: date, week_index: int) -> date:
    return start + timedelta(days=week_index * 7)


def get_week_labels(start_date_str: str) -> List[str]:
    """One Monday–Friday label per week of the horizon."""
    start = parse_iso_date_local(start_date_str)
    if start is None:
        return ['-'] * WEEKS_IN_HORIZON
    labels = []
    for i in range(WEEKS_IN_HORIZON):
        monday = _week_monday(start, i)
        friday = monday + timedelta(days=WORKDAYS_PER_WEEK - 1)
        if monday.month == friday.month:
            labels.append(f"{monday.day}{EN_DASH}{friday.day} {_month_long(friday)} {friday.year}")
        else:
            labels.append(
                f"{monday.day} {_month_long(monday)} {EN_DASH} "
                f"{friday.day} {_month_long(friday)} {friday.year}"
            )
    return labels


def strip_label_year(label: str) -> str:
    return _TRAILING_YEAR.sub('', label)


def get_dashboard_span_label(week_start: str) -> str:
    """``<Monday of week 1> to <Friday of week 4>`` in display format."""
    start = parse_iso_date_local(week_start)
    if start is None:
        return '-'
    end = start + timedelta(days=(WEEKS_IN_HORIZON - 1) * 7 + WORKDAYS_PER_WEEK - 1)
    return f"{format_display_date(format_iso_date_local(start))} to {format_display_date(format_iso_date_local(end))}"


def _runs(indexes: Sequence[int]) -> List[Tuple[int, int]]:
    """Group sorted integers into (start, end) runs of consecutive values."""
    runs: List[Tuple[int, int]] = []
    for idx in indexes:
        if runs and idx == runs[-1][1] + 1:
            runs[-1] = (runs[-1][0], idx)
        else:
            runs.append((idx, idx))
    return runs


def format_leave_day_spans(week_leave: Sequence[bool]) -> str:
    """``[T, T, F, T, F]`` -> ``Mon–Tues, Thurs``; no leave -> ``-``."""
    selected = [i for i, is_off in enumerate(week_leave or []) if is_off]
    if not selected:
        return '-'

    def label(i: int) -> str:
        return LEAVE_DAY_LABELS[i] if i < len(LEAVE_DAY_LABELS) else f"Day {i + 1}"

    segments = []
    for start, end in _runs(selected):
        if start == end:
            segments.append(label(start))
        else:
            segments.append(f"{label(start)}{EN_DASH}{label(end)}")
    return ', '.join(segments)


def get_all_leave_dates(start_date_str: str, annual_leave: Sequence[Sequence[bool]]) -> str:
    """Compress the whole leave grid into calendar spans grouped by month.

    e.g. ``2–3, 6 Feb, 27 Feb–2 Mar`` ; ``-`` when there is no leave.
    """
    start = parse_iso_date_local(start_date_str)
    if start is None:
        return '-'
    ordinals = sorted({
        (start + timedelta(days=week_idx * 7 + day_idx)).toordinal()
        for week_idx, week in enumerate(annual_leave or [])
        for day_idx, is_off in enumerate(week or [])
        if is_off
    })
    if not ordinals:
        return '-'

    result_parts: List[str] = []
    month_parts: List[str] = []
    month_label = ''

    def flush_month():
        if month_parts:
            result_parts.append(f"{', '.join(month_parts)} {month_label}")

    for first, last in _runs(ordinals):
        range_start = date.fromordinal(first)
        range_end = date.fromordinal(last)
        start_month = _month_short(range_start)
        end_month = _month_short(range_end)

        if start_month != end_month:
            flush_month()
            month_parts = []
            month_label = ''
            result_parts.append(f"{range_start.day} {start_month}{EN_DASH}{range_end.day} {end_month}")
            continue

        if start_month != month_label:
            flush_month()
            month_parts = []
            month_label = start_month

        if range_start == range_end:
            month_parts.append(f"{range_start.day}")
        else:
            month_parts.append(f"{range_start.day}{EN_DASH}{range_end.day}")

    flush_month()
    return ', '.join(result_parts)
