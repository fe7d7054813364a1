"""
Queries over dashboard rows for one selected week: top-N people and matters,
capacity bucket counts, and the sortable team table.
"""
from typing import Any, Dict, List, Optional

from .loads import ELEVATED_THRESHOLD, SEVERE_THRESHOLD, resolve_latest_entries
from .units import WEEKS_IN_HORIZON, round_half_up

TOP_N = 3
UNTITLED_MATTER = '(Untitled)'

STRING_SORT_KEYS = ('employeeName', 'office', 'availability2Weeks')
NUMERIC_SORT_KEYS = tuple(
    [f'week_load_{i + 1}' for i in range(WEEKS_IN_HORIZON)]
    + ['average_load', 'load_delta', 'total_category1', 'total_category2', 'total_projects']
)
SORT_KEYS = STRING_SORT_KEYS + NUMERIC_SORT_KEYS


def _week_load(row: Dict[str, Any], week_index: int) -> int:
    loads = row.get('weekly_loads') or []
    return loads[week_index] if week_index < len(loads) else 0


def _person(row: Dict[str, Any], week_index: int) -> Dict[str, Any]:
    return {
        'name': (row.get('employeeName') or '').strip(),
        'load': _week_load(row, week_index),
    }


# ── Top-N people ───────────────────────────────────────────────

def busiest(rows: List[Dict[str, Any]], week_index: int, limit: int = TOP_N) -> List[Dict[str, Any]]:
    """Highest loads first; equal loads fall back to name order."""
    ranked = sorted(rows, key=lambda r: (-_week_load(r, week_index), _name_key(r)))
    return [_person(r, week_index) for r in ranked[:limit]]


def least_busy(rows: List[Dict[str, Any]], week_index: int, limit: int = TOP_N) -> List[Dict[str, Any]]:
    ranked = sorted(rows, key=lambda r: (_week_load(r, week_index), _name_key(r)))
    return [_person(r, week_index) for r in ranked[:limit]]


def _name_key(row: Dict[str, Any]):
    name = (row.get('employeeName') or '').strip()
    return name.casefold(), name


# ── Matters ────────────────────────────────────────────────────

def _capacity(project: Dict[str, Any], week_index: int) -> float:
    capacities = project.get('capacities') or []
    return (capacities[week_index] or 0) if week_index < len(capacities) else 0


def top_matters(rows: List[Dict[str, Any]], week_index: int, limit: int = TOP_N) -> List[Dict[str, Any]]:
    """Matters with the most demand across the team, merged by name."""
    totals: Dict[str, float] = {}
    for row in rows:
        for project in row.get('projects') or []:
            load = _capacity(project, week_index)
            if load <= 0:
                continue
            name = project.get('name') or UNTITLED_MATTER
            totals[name] = totals.get(name, 0) + load
    ranked = sorted(
        ((name, total) for name, total in totals.items() if total > 0),
        key=lambda item: -item[1],
    )
    return [{'name': name, 'total': round_half_up(total)} for name, total in ranked[:limit]]


def top_matters_for_row(row: Dict[str, Any], week_index: int, limit: int = 4) -> List[Dict[str, Any]]:
    """An employee's own heaviest matters for the week (table column)."""
    active = [p for p in row.get('projects') or [] if _capacity(p, week_index) > 0]
    active.sort(key=lambda p: -_capacity(p, week_index))
    return active[:limit]


# ── Buckets and insights ───────────────────────────────────────

def capacity_bucket_counts(rows: List[Dict[str, Any]], week_index: int) -> Dict[str, int]:
    loads = [_week_load(r, week_index) for r in rows]
    return {
        'looking_for_work': sum(1 for load in loads if load < ELEVATED_THRESHOLD),
        'at_capacity': sum(1 for load in loads if ELEVATED_THRESHOLD <= load < SEVERE_THRESHOLD),
        'over_capacity': sum(1 for load in loads if load >= SEVERE_THRESHOLD),
    }


def week_insights(rows: List[Dict[str, Any]], week_index: int) -> Dict[str, Any]:
    """Everything the insight panel shows for the selected week."""
    unique_rows = resolve_latest_entries(rows)
    loads = [_week_load(r, week_index) for r in unique_rows]
    return {
        'week_index': week_index,
        'average_load': round_half_up(sum(loads) / len(loads)) if loads else 0,
        **capacity_bucket_counts(unique_rows, week_index),
        'most_loaded': busiest(unique_rows, week_index),
        'least_loaded': least_busy(unique_rows, week_index),
        'top_matters': top_matters(unique_rows, week_index),
    }


# ── Table sort ─────────────────────────────────────────────────

class SortState:
    """Active table sort: one key plus a direction.

    With no key chosen the table is ordered by the active week's load,
    heaviest first.
    """

    def __init__(self, key: Optional[str] = None, direction: str = 'asc'):
        if key is not None and key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {key}")
        self.key = key
        self.direction = direction

    def request_sort(self, key: str) -> 'SortState':
        """Header click: same key flips asc -> desc, a new key starts ascending."""
        if key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {key}")
        direction = 'asc'
        if self.key == key and self.direction == 'asc':
            direction = 'desc'
        self.key = key
        self.direction = direction
        return self

    def applied(self, active_week_index: int = 0):
        if self.key is None:
            return f'week_load_{active_week_index + 1}', 'desc'
        return self.key, self.direction

    def as_dict(self) -> Dict[str, Any]:
        return {'key': self.key, 'direction': self.direction if self.key else None}


def sort_rows(rows: List[Dict[str, Any]], sort_state: Optional[SortState] = None,
              active_week_index: int = 0) -> List[Dict[str, Any]]:
    """View-only ordering of dashboard rows; the input list is not modified."""
    key, direction = (sort_state or SortState()).applied(active_week_index)
    reverse = direction == 'desc'
    if key in STRING_SORT_KEYS:
        def sort_key(row):
            value = row.get(key) or ''
            return value.casefold(), value
    else:
        def sort_key(row):
            return row.get(key) or 0
    return sorted(rows, key=sort_key, reverse=reverse)
