"""
Load aggregation: per-week load of an entry, latest-entry resolution and the
derived dashboard rows.

The canonical load is a percentage of a 40-hour week rounded to 3 decimals
(``week_load_percent``). Hours for the employee form and whole percents for
the dashboard are both derived from it.
"""
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .dates import parse_iso_date_local
from .entries import matter_totals
from .units import (
    HOURS_PER_WEEK, WEEKS_IN_HORIZON, WORKDAYS_PER_WEEK, clamp_capacity,
    clamp_week_load_percent, percent_to_hours, round_half_up, round_to_minute,
)

# Bucket thresholds (percent of a week)
SEVERE_THRESHOLD = 100
ELEVATED_THRESHOLD = 80
MODERATE_THRESHOLD = 40

# Employee-form thresholds (hours of a week)
ELEVATED_HOURS = 32
MODERATE_HOURS = 16


# ── Per-entry loads ────────────────────────────────────────────

def project_load_percent(entry: Dict[str, Any], week_index: int) -> float:
    total = 0.0
    for project in entry.get('projects') or []:
        capacities = project.get('capacities') or []
        if week_index < len(capacities):
            total += capacities[week_index] or 0
    return total


def leave_day_count(entry: Dict[str, Any], week_index: int) -> int:
    leave = entry.get('annualLeave') or []
    if week_index >= len(leave):
        return 0
    return sum(1 for is_off in (leave[week_index] or []) if is_off)


def leave_load_percent(entry: Dict[str, Any], week_index: int) -> float:
    return leave_day_count(entry, week_index) / WORKDAYS_PER_WEEK * 100


def week_load_percent(entry: Dict[str, Any], week_index: int) -> float:
    """Matters plus leave for one week, as a 3-decimal percentage."""
    return clamp_capacity(project_load_percent(entry, week_index) + leave_load_percent(entry, week_index))


def weekly_load_percents(entry: Dict[str, Any]) -> List[float]:
    return [week_load_percent(entry, i) for i in range(WEEKS_IN_HORIZON)]


def weekly_hours(entry: Dict[str, Any]) -> List[float]:
    """Weekly totals in hours, minute precision (employee form)."""
    return [round_to_minute(percent_to_hours(p)) for p in weekly_load_percents(entry)]


def weekly_loads(entry: Dict[str, Any]) -> List[int]:
    """Weekly totals in whole percent (dashboard), clamped to [0, 100]."""
    return [clamp_week_load_percent(p) for p in weekly_load_percents(entry)]


# ── Classification ─────────────────────────────────────────────

def load_bucket(load: float) -> str:
    if load >= SEVERE_THRESHOLD:
        return 'severe'
    if load >= ELEVATED_THRESHOLD:
        return 'elevated'
    if load >= MODERATE_THRESHOLD:
        return 'moderate'
    return 'light'


def hours_status(hours: float) -> str:
    if hours > HOURS_PER_WEEK:
        return 'severe'
    if hours >= ELEVATED_HOURS:
        return 'elevated'
    if hours >= MODERATE_HOURS:
        return 'moderate'
    return 'light'


def project_badge(load: float) -> str:
    if load >= 50:
        return 'severe'
    if load >= 25:
        return 'elevated'
    if load > 0:
        return 'moderate'
    return 'none'


# ── Latest-entry resolution ────────────────────────────────────

def employee_key(name: Any) -> str:
    """Deduplication key: trimmed, case-insensitive."""
    return (name if isinstance(name, str) else '').strip().lower()


def _recency(entry: Dict[str, Any]):
    week = parse_iso_date_local(entry.get('weekDate') or '') or date.min
    return week, entry.get('lastUpdated') or ''


def _is_newer(candidate: Dict[str, Any], existing: Dict[str, Any]) -> bool:
    return _recency(candidate) > _recency(existing)


def resolve_latest_entries(entries: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """One entry per employee: greatest weekDate, then greatest lastUpdated.

    Result keeps the order in which each employee was first seen.
    """
    by_employee: Dict[str, Dict[str, Any]] = {}
    for entry in entries:
        key = employee_key(entry.get('employeeName'))
        existing = by_employee.get(key)
        if existing is None or _is_newer(entry, existing):
            by_employee[key] = entry
    return list(by_employee.values())


def get_latest_entry_for_employee(employee_name: str,
                                  db: Dict[str, Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Latest entry whose name matches exactly (the signed-in employee's own record)."""
    latest = None
    for entry in db.values():
        if entry.get('employeeName') != employee_name:
            continue
        if latest is None or _is_newer(entry, latest):
            latest = entry
    return latest


# ── Dashboard rows ─────────────────────────────────────────────

def build_dashboard_row(entry: Dict[str, Any]) -> Dict[str, Any]:
    percents = weekly_load_percents(entry)
    loads = [clamp_week_load_percent(p) for p in percents]
    totals = matter_totals(entry.get('projects') or [])
    row = {
        **entry,
        'weekly_loads': loads,
        'weekly_hours': weekly_hours(entry),
        'average_load': round_half_up(sum(loads) / len(loads)),
        'load_delta': loads[-1] - loads[0],
        'weekly_load_percents': percents,
        # flagged from the raw total, the whole-percent load stops at 100
        'over_capacity': [round_half_up(p) >= SEVERE_THRESHOLD for p in percents],
        'total_category1': totals['Category1'],
        'total_category2': totals['Category2'],
        'total_projects': totals['Project'],
    }
    for i, load in enumerate(loads):
        row[f'week_load_{i + 1}'] = load
    return row


def build_dashboard_rows(db: Dict[str, Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Latest entry per employee, each expanded into a dashboard row."""
    return [build_dashboard_row(e) for e in resolve_latest_entries(db.values())]


def weekly_summary(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Team-level figures for each week of the horizon."""
    summary = []
    for week_idx in range(WEEKS_IN_HORIZON):
        week_loads = [row['weekly_loads'][week_idx] for row in rows]
        count = len(week_loads)
        total_leave_days = sum(leave_day_count(row, week_idx) for row in rows)
        summary.append({
            'week_index': week_idx,
            'avg_load': round_half_up(sum(week_loads) / count) if count else 0,
            'with_capacity': sum(1 for load in week_loads if load < ELEVATED_THRESHOLD),
            'at_or_over_capacity': sum(1 for load in week_loads if load >= ELEVATED_THRESHOLD),
            'avg_leave_days': f"{(total_leave_days / count) if count else 0:.1f}",
        })
    return summary
