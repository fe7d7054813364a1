"""
Weekly entry records: canonical shape, migration of older records, and the
save-time ordering of matters.

An entry is a plain dict keyed like the stored JSON (``weekDate``,
``employeeName``, ``annualLeave`` ...). ``normalize_weekly_entry`` is the one
ingestion point for records of unknown shape and is idempotent.
"""
import uuid
from enum import Enum
from typing import Any, Dict, List, Optional

from .units import (
    WEEKS_IN_HORIZON, WORKDAYS_PER_WEEK, clamp_capacity, normalize_capacity_input,
)


class MatterCategory(str, Enum):
    CATEGORY1 = 'Category1'
    CATEGORY2 = 'Category2'
    PROJECT = 'Project'


class Availability(str, Enum):
    WITH_CAPACITY = 'With Capacity'
    LIMITED_CAPACITY = 'Limited Capacity'
    NO_CAPACITY = 'No Capacity'
    OVER_CAPACITY = 'Over Capacity'


MATTER_CATEGORIES = [c.value for c in MatterCategory]
FALLBACK_CATEGORY = MatterCategory.PROJECT
CATEGORY_ORDER = {c.value: i for i, c in enumerate(MatterCategory)}

MATTER_CATEGORY_ALIASES: Dict[str, MatterCategory] = {
    'Category1': MatterCategory.CATEGORY1,
    'Category2': MatterCategory.CATEGORY2,
    'Project': MatterCategory.PROJECT,
    'Category 1': MatterCategory.CATEGORY1,
    'Category 2': MatterCategory.CATEGORY2,
    'Category A': MatterCategory.CATEGORY1,
    'Category B': MatterCategory.CATEGORY2,
    'Category C': MatterCategory.PROJECT,
}

AVAILABILITY_ALIASES: Dict[str, Availability] = {
    **{a.value: a for a in Availability},
    'Open Capacity': Availability.WITH_CAPACITY,
    'At Capacity': Availability.NO_CAPACITY,
}

MENTOR_PLACEHOLDER = 'Select Mentor'


# ── Category resolution ────────────────────────────────────────

def coerce_matter_category(value: Any) -> Optional[MatterCategory]:
    """Map a raw category label onto the enumeration, or None if unknown."""
    if not isinstance(value, str):
        return None
    return MATTER_CATEGORY_ALIASES.get(value.strip())


def get_project_category(project: Dict[str, Any]) -> MatterCategory:
    """``category`` wins, then legacy ``matterType``, then the fallback bucket."""
    return (
        coerce_matter_category(project.get('category'))
        or coerce_matter_category(project.get('matterType'))
        or FALLBACK_CATEGORY
    )


def coerce_availability(value: Any) -> Availability:
    if isinstance(value, str):
        found = AVAILABILITY_ALIASES.get(value.strip())
        if found is not None:
            return found
    return Availability.WITH_CAPACITY


# ── Normalisation ──────────────────────────────────────────────

def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ''


def _normalize_capacities(raw: Any) -> List[float]:
    values = raw if isinstance(raw, (list, tuple)) else []
    return [
        normalize_capacity_input(values[i]) if i < len(values) else 0
        for i in range(WEEKS_IN_HORIZON)
    ]


def _normalize_annual_leave(raw: Any) -> List[List[bool]]:
    weeks = raw if isinstance(raw, (list, tuple)) else []
    grid = []
    for w in range(WEEKS_IN_HORIZON):
        days = weeks[w] if w < len(weeks) and isinstance(weeks[w], (list, tuple)) else []
        grid.append([
            bool(days[d]) if d < len(days) and isinstance(days[d], (bool, int)) else False
            for d in range(WORKDAYS_PER_WEEK)
        ])
    return grid


def _normalize_comments(raw: Any) -> List[str]:
    comments = raw if isinstance(raw, (list, tuple)) else []
    return [
        _as_str(comments[i]) if i < len(comments) else ''
        for i in range(WEEKS_IN_HORIZON)
    ]


def _normalize_languages(raw: Any) -> List[str]:
    if not isinstance(raw, (list, tuple)):
        return []
    return [lang for lang in raw if isinstance(lang, str)]


def normalize_project(project: Dict[str, Any]) -> Dict[str, Any]:
    category = get_project_category(project).value
    raw_id = project.get('id')
    return {
        **project,
        'id': raw_id if isinstance(raw_id, str) else ('' if raw_id is None else str(raw_id)),
        'name': _as_str(project.get('name')),
        'category': category,
        'matterType': category,
        'owner': _as_str(project.get('owner')),
        'tasks': _as_str(project.get('tasks')),
        'capacities': _normalize_capacities(project.get('capacities')),
    }


def normalize_weekly_entry(entry: Dict[str, Any]) -> Dict[str, Any]:
    """Return the canonical form of a stored or submitted entry.

    Unknown keys are preserved. ``selfAssessment`` is read as a legacy alias
    of ``availability2Weeks`` and dropped from the result.
    """
    if not isinstance(entry, dict):
        entry = {}
    raw_projects = entry.get('projects')
    projects = raw_projects if isinstance(raw_projects, (list, tuple)) else []
    availability_raw = entry.get('availability2Weeks', entry.get('selfAssessment'))
    result = {
        **entry,
        'weekDate': _as_str(entry.get('weekDate')),
        'employeeName': _as_str(entry.get('employeeName')),
        'office': _as_str(entry.get('office')),
        'mentor': _as_str(entry.get('mentor')),
        'languages': _normalize_languages(entry.get('languages')),
        'interests': _as_str(entry.get('interests')),
        'annualLeave': _normalize_annual_leave(entry.get('annualLeave')),
        'availability2Weeks': coerce_availability(availability_raw).value,
        'capacityComments': _normalize_comments(entry.get('capacityComments')),
        'projects': [normalize_project(p) for p in projects if isinstance(p, dict)],
        'lastUpdated': _as_str(entry.get('lastUpdated')),
    }
    result.pop('selfAssessment', None)
    return result


def normalize_db(source: Any) -> Dict[str, Dict[str, Any]]:
    """Normalise every entry of a stored key -> entry mapping."""
    if not isinstance(source, dict):
        return {}
    return {
        str(key): normalize_weekly_entry(entry)
        for key, entry in source.items()
        if isinstance(entry, dict)
    }


def entry_key(entry: Dict[str, Any]) -> str:
    """Storage key: ``<employeeName>-<weekDate>``."""
    return f"{entry.get('employeeName', '')}-{entry.get('weekDate', '')}"


# ── Construction ───────────────────────────────────────────────

def empty_leave_grid() -> List[List[bool]]:
    return [[False] * WORKDAYS_PER_WEEK for _ in range(WEEKS_IN_HORIZON)]


def make_default_entry(employee_name: str, week_date: str, offices: List[str],
                       last_updated: str = '') -> Dict[str, Any]:
    """Blank entry for an employee with no record yet."""
    return {
        'weekDate': week_date,
        'employeeName': employee_name,
        'office': offices[0] if offices else '',
        'mentor': '',
        'languages': ['English'],
        'interests': '',
        'annualLeave': empty_leave_grid(),
        'availability2Weeks': Availability.WITH_CAPACITY.value,
        'capacityComments': [''] * WEEKS_IN_HORIZON,
        'lastUpdated': last_updated,
        'projects': [],
    }


def new_project(project_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        'id': project_id or uuid.uuid4().hex,
        'name': '',
        'category': FALLBACK_CATEGORY.value,
        'matterType': FALLBACK_CATEGORY.value,
        'owner': '',
        'tasks': '',
        'capacities': [0] * WEEKS_IN_HORIZON,
    }


def set_project_capacity(project: Dict[str, Any], week_index: int, value: Any) -> Dict[str, Any]:
    capacities = list(project.get('capacities') or [0] * WEEKS_IN_HORIZON)
    capacities[week_index] = clamp_capacity(value)
    return {**project, 'capacities': capacities}


# ── Derived counts and ordering ────────────────────────────────

def matter_totals(projects: List[Dict[str, Any]]) -> Dict[str, int]:
    """Number of matters per canonical category."""
    totals = {c: 0 for c in MATTER_CATEGORIES}
    for p in projects:
        totals[get_project_category(p).value] += 1
    return totals


def _save_sort_key(project: Dict[str, Any]):
    capacities = list(project.get('capacities') or [])
    capacities += [0] * (WEEKS_IN_HORIZON - len(capacities))
    return (
        CATEGORY_ORDER[get_project_category(project).value],
        *(-(c or 0) for c in capacities[:WEEKS_IN_HORIZON]),
        -sum(c or 0 for c in capacities[:WEEKS_IN_HORIZON]),
        (project.get('name') or '').casefold(),
        project.get('name') or '',
    )


def sort_projects_for_save(projects: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Category order, then heaviest week 1..4, then total load, then name."""
    return sorted(projects, key=_save_sort_key)
