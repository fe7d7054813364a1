"""
The signed-in employee's own 4-week form: edits, required-field checks,
explicit save and debounced autosave.
"""
import copy
import threading
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError, field_validator

from caplib.dates import get_current_week_start, get_week_labels
from caplib.entries import (
    MENTOR_PLACEHOLDER, get_project_category, make_default_entry, new_project,
    normalize_weekly_entry, set_project_capacity, sort_projects_for_save,
)
from caplib.loads import get_latest_entry_for_employee, hours_status, weekly_hours
from caplib.units import (
    COMMENT_WORD_LIMIT, format_hours_input, hours_to_percent, limit_to_word_count,
    normalize_hours_input, percent_to_hours,
)
from .. import dependencies as deps
from ..autosave import Debouncer
from ..dependencies import _logger, _failure
from ..state import AppState
from ..types import EntryRecord, ProjectRecord, ServiceResult

PROFILE_FIELDS = ('office', 'mentor', 'languages', 'interests', 'availability2Weeks')
PROJECT_FIELDS = ('name', 'category', 'owner', 'tasks')


# ── Required fields ────────────────────────────────────────────

def _required(v: Any) -> str:
    if not isinstance(v, str) or v.strip() == '':
        raise ValueError('required')
    return v


class MatterForm(BaseModel):
    name: str = ''
    category: str = ''
    owner: str = ''

    @field_validator('name', 'category', 'owner')
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _required(v)


class EntryForm(BaseModel):
    office: str = ''
    mentor: str = ''
    languages: List[str] = []
    projects: List[MatterForm] = []

    @field_validator('office')
    @classmethod
    def office_selected(cls, v: str) -> str:
        return _required(v)

    @field_validator('mentor')
    @classmethod
    def mentor_selected(cls, v: str) -> str:
        if v == MENTOR_PLACEHOLDER:
            raise ValueError('required')
        return _required(v)

    @field_validator('languages')
    @classmethod
    def has_language(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError('required')
        return v


_FIELD_MSGS = {
    'office': 'Office is required.',
    'mentor': 'Mentor is required.',
    'languages': 'Working Language(s) is required.',
}
_MATTER_MSGS = {
    'name': 'Matter Name is required.',
    'category': 'Category is required.',
    'owner': 'Supervisor is required.',
}


def required_field_issues(entry: EntryRecord) -> List[str]:
    """Human-readable list of missing required fields, in form order."""
    try:
        EntryForm.model_validate(entry)
    except ValidationError as exc:
        issues = []
        for e in exc.errors():
            loc = e.get('loc', ())
            if len(loc) == 3 and loc[0] == 'projects':
                issues.append(f"Matter {loc[1] + 1}: {_MATTER_MSGS.get(loc[2], 'Invalid value.')}")
            elif loc:
                issues.append(_FIELD_MSGS.get(loc[0], f"{loc[0]}: Invalid value."))
        return issues
    return []


# ── Form session ───────────────────────────────────────────────

class EmployeeFormSession:
    """Editable copy of one employee's latest entry.

    Every edit re-validates and, when the form is valid and editable,
    schedules an autosave. ``close()`` must be called when the form goes
    away so a pending autosave cannot write stale data.
    """

    def __init__(self, state: AppState, user: str, read_only: bool = False,
                 entry: Optional[EntryRecord] = None, today=None,
                 autosave_delay: Optional[float] = None,
                 timer_factory=threading.Timer):
        self.state = state
        self.user = user
        self.read_only = read_only
        self.current_week_start = get_current_week_start(today)
        initial = entry or get_latest_entry_for_employee(user, state.store.all())
        if initial is None:
            initial = make_default_entry(user, self.current_week_start, state.offices)
        self.data: EntryRecord = normalize_weekly_entry(copy.deepcopy(initial))
        if not read_only:
            self.data['weekDate'] = self.current_week_start
        self.capacity_drafts: Dict[str, str] = {}
        self.pending_removal: Optional[Dict[str, str]] = None
        self.last_issues: Optional[List[str]] = None
        self._write_lock = threading.Lock()
        delay = deps.AUTOSAVE_DELAY if autosave_delay is None else autosave_delay
        self._autosave = Debouncer(delay, self._autosave_now, timer_factory=timer_factory,
                                   guard=self._write_lock)

    # ── Validation ─────────────────────────────────────────────
    def issues(self) -> List[str]:
        return required_field_issues(self.data)

    @property
    def is_valid(self) -> bool:
        return not self.issues()

    def _changed(self) -> None:
        if self.read_only or not self.is_valid:
            self._autosave.cancel()
            return
        self._autosave.trigger(copy.deepcopy(self.data))

    def _find_project(self, project_id: str) -> int:
        for i, p in enumerate(self.data['projects']):
            if p['id'] == project_id:
                return i
        raise KeyError(project_id)

    # ── Profile ────────────────────────────────────────────────
    def update_profile(self, field: str, value: Any) -> None:
        if self.read_only:
            return
        if field not in PROFILE_FIELDS:
            raise ValueError(f"Unknown profile field: {field}")
        if field == 'interests' and isinstance(value, str):
            value = limit_to_word_count(value, COMMENT_WORD_LIMIT)
        self.data = normalize_weekly_entry({**self.data, field: value})
        self._changed()

    def toggle_leave_day(self, week_index: int, day_index: int) -> None:
        if self.read_only:
            return
        week = self.data['annualLeave'][week_index]
        week[day_index] = not week[day_index]
        self._changed()

    def update_capacity_comment(self, week_index: int, value: str) -> None:
        if self.read_only:
            return
        self.data['capacityComments'][week_index] = limit_to_word_count(value or '', COMMENT_WORD_LIMIT)
        self._changed()

    # ── Matters ────────────────────────────────────────────────
    def add_project(self, project_id: Optional[str] = None) -> Optional[ProjectRecord]:
        """New blank matter at the top of the list."""
        if self.read_only:
            return None
        project = new_project(project_id)
        self.data['projects'].insert(0, project)
        self._changed()
        return project

    def update_project(self, project_id: str, field: str, value: Any) -> None:
        if field not in PROJECT_FIELDS:
            raise ValueError(f"Unknown matter field: {field}")
        if self.read_only:
            return
        idx = self._find_project(project_id)
        project = dict(self.data['projects'][idx])
        if field == 'category':
            category = get_project_category({'category': value, 'matterType': project.get('matterType')}).value
            project['category'] = category
            project['matterType'] = category
        elif field == 'tasks' and isinstance(value, str):
            project['tasks'] = limit_to_word_count(value, COMMENT_WORD_LIMIT)
        else:
            project[field] = value
        self.data['projects'][idx] = project
        self._changed()

    @staticmethod
    def _draft_key(project_id: str, week_index: int) -> str:
        return f"{project_id}-{week_index}"

    def capacity_input_value(self, project_id: str, week_index: int) -> str:
        """What the hours box shows: the raw draft while typing, else "H:MM"."""
        key = self._draft_key(project_id, week_index)
        if key in self.capacity_drafts:
            return self.capacity_drafts[key]
        project = self.data['projects'][self._find_project(project_id)]
        return format_hours_input(percent_to_hours(project['capacities'][week_index]))

    def set_capacity_hours(self, project_id: str, week_index: int, raw_value: Any) -> float:
        """Store an hours entry as a percentage; returns the stored percentage."""
        idx = self._find_project(project_id)
        if self.read_only:
            return self.data['projects'][idx]['capacities'][week_index]
        if isinstance(raw_value, str):
            self.capacity_drafts[self._draft_key(project_id, week_index)] = raw_value
        percent = hours_to_percent(normalize_hours_input(raw_value))
        self.data['projects'][idx] = set_project_capacity(self.data['projects'][idx], week_index, percent)
        self._changed()
        return self.data['projects'][idx]['capacities'][week_index]

    def blur_capacity(self, project_id: str, week_index: int) -> None:
        self.capacity_drafts.pop(self._draft_key(project_id, week_index), None)

    def request_remove_project(self, project_id: str) -> Dict[str, str]:
        project = self.data['projects'][self._find_project(project_id)]
        label = (project.get('name') or '').strip() or 'Untitled Project'
        self.pending_removal = {'id': project_id, 'name': label}
        return self.pending_removal

    def cancel_remove_project(self) -> None:
        self.pending_removal = None

    def confirm_remove_project(self) -> bool:
        pending, self.pending_removal = self.pending_removal, None
        if pending is None or self.read_only:
            return False
        before = len(self.data['projects'])
        self.data['projects'] = [p for p in self.data['projects'] if p['id'] != pending['id']]
        for key in [k for k in self.capacity_drafts if k.startswith(f"{pending['id']}-")]:
            del self.capacity_drafts[key]
        self._changed()
        return len(self.data['projects']) < before

    # ── Saving ─────────────────────────────────────────────────
    def _autosave_now(self, entry: EntryRecord) -> None:
        # runs with _write_lock held by the debouncer
        try:
            self.state.store.upsert(entry)
            _logger.debug("AUTOSAVE | user=%s week=%s", self.user, entry.get('weekDate'))
        except OSError as e:
            _failure(e, f'autosave/{self.user}')

    def save(self) -> ServiceResult:
        """Explicit save: blocked with the issue list while required fields are missing."""
        if self.read_only:
            return {"ok": False, "error": "Read-only entry"}
        issues = self.issues()
        if issues:
            self.last_issues = issues
            return {"ok": False, "issues": issues}
        self.last_issues = None
        self.data['projects'] = sort_projects_for_save(self.data['projects'])
        with self._write_lock:
            self._autosave.cancel()
            try:
                stored = self.state.store.upsert(self.data)
            except OSError as e:
                return _failure(e, f'save/{self.user}')
        self.data = copy.deepcopy(stored)
        _logger.info("SAVE | user=%s week=%s matters=%d", self.user, stored['weekDate'], len(stored['projects']))
        return {"ok": True, "message": "Entry saved successfully.", "record": stored}

    def close(self) -> bool:
        """Cancel any pending autosave. Returns True if one was dropped."""
        with self._write_lock:
            return self._autosave.cancel()

    @property
    def autosave_pending(self) -> bool:
        return self._autosave.pending

    # ── View ───────────────────────────────────────────────────
    def view(self) -> dict:
        week_date = self.data['weekDate'] if self.read_only else self.current_week_start
        hours = weekly_hours(self.data)
        return {
            "entry": copy.deepcopy(self.data),
            "week_labels": get_week_labels(week_date),
            "weekly_hours": hours,
            "weekly_hours_display": [format_hours_input(h) for h in hours],
            "weekly_status": [hours_status(h) for h in hours],
            "is_valid": self.is_valid,
            "read_only": self.read_only,
        }
