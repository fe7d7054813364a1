"""Settings lists (offices, mentors, languages) and the employee list.

Every removal goes through ``SettingsEditor``: ``request_*`` only records
what would be deleted, ``confirm_delete`` applies it and ``cancel_delete``
forgets it without touching any list.
"""
from typing import Callable, Optional

from pydantic import BaseModel

from ..dependencies import _logger
from ..state import AppState
from ..types import ServiceResult
from .auth import verify_it_password

LISTS = ('offices', 'mentors', 'languages')
_LIST_LABELS = {'offices': 'Offices', 'mentors': 'Mentors', 'languages': 'Languages'}


class EmployeeCreate(BaseModel):
    name: str = ''
    password: str = ''


class PendingDelete(BaseModel):
    title: str
    message: str
    kind: str
    target: str


# ── List items ─────────────────────────────────────────────────

def _get_list(state: AppState, list_name: str) -> list:
    if list_name not in LISTS:
        raise ValueError(f"Unknown settings list: {list_name}")
    return getattr(state, list_name)


def add_item(state: AppState, list_name: str, item: str) -> ServiceResult:
    """Append a trimmed item; blanks and exact duplicates are ignored."""
    items = _get_list(state, list_name)
    value = (item or '').strip()
    if not value or value in items:
        return {"ok": False, "items": list(items)}
    items.append(value)
    _logger.warning("AUDIT SETTINGS_ADD | list=%s item=%s", list_name, value)
    return {"ok": True, "items": list(items)}


# ── Employees ──────────────────────────────────────────────────

def add_employee(state: AppState, body: EmployeeCreate) -> ServiceResult:
    name = body.name.strip()
    password = body.password.strip()
    if not name or not password:
        return {"ok": False, "error": "Name and password are required."}
    if any(e['name'].lower() == name.lower() for e in state.employees):
        return {"ok": False, "error": "An employee with that name already exists."}
    record = {'name': name, 'password': password}
    state.employees.append(record)
    _logger.warning("AUDIT EMPLOYEE_CREATE | name=%s", name)
    return {"ok": True, "record": {'name': name}}


# ── Confirmed removal ──────────────────────────────────────────

class SettingsEditor:
    """Holds at most one removal waiting for confirmation."""

    def __init__(self, state: AppState):
        self.state = state
        self.pending: Optional[PendingDelete] = None

    def request_remove_item(self, list_name: str, item: str) -> PendingDelete:
        _get_list(self.state, list_name)
        self.pending = PendingDelete(
            title='Delete Item',
            message=f'Are you sure you wish to delete "{item}" from {_LIST_LABELS[list_name]}?',
            kind=list_name,
            target=item,
        )
        return self.pending

    def request_remove_employee(self, name: str) -> PendingDelete:
        self.pending = PendingDelete(
            title='Delete Employee',
            message=f'Are you sure you wish to delete "{name}"?',
            kind='employees',
            target=name,
        )
        return self.pending

    def cancel_delete(self) -> None:
        self.pending = None

    def confirm_delete(self) -> ServiceResult:
        pending, self.pending = self.pending, None
        if pending is None:
            return {"ok": False, "removed": 0}
        if pending.kind == 'employees':
            items = self.state.employees
            before = len(items)
            items[:] = [e for e in items if e['name'] != pending.target]
        else:
            items = _get_list(self.state, pending.kind)
            before = len(items)
            items[:] = [i for i in items if i != pending.target]
        removed = before - len(items)
        _logger.warning(
            "AUDIT SETTINGS_DELETE | list=%s item=%s removed=%d",
            pending.kind, pending.target, removed
        )
        return {"ok": True, "removed": removed}


# ── Password reveal / change ───────────────────────────────────

class PasswordDialog:
    """IT-password gate in front of viewing or changing one employee's password."""

    def __init__(self, state: AppState, employee_name: str,
                 verify: Callable[[str], bool] = verify_it_password):
        self.state = state
        self.employee_name = employee_name
        self._verify = verify
        self.authorized = False
        self.error = ''
        self.draft = ''

    def unlock(self, it_password: str) -> bool:
        if not self._verify(it_password):
            self.error = 'Invalid IT password.'
            _logger.warning("AUDIT PASSWORD_REVEAL_DENIED | employee=%s", self.employee_name)
            return False
        employee = self.state.find_employee(self.employee_name)
        self.authorized = True
        self.error = ''
        self.draft = employee['password'] if employee else ''
        return True

    def reveal(self) -> Optional[str]:
        return self.draft if self.authorized else None

    def save(self, new_password: str) -> ServiceResult:
        if not self.authorized:
            return {"ok": False, "error": "Invalid IT password."}
        value = (new_password or '').strip()
        if not value:
            self.error = 'Password cannot be empty.'
            return {"ok": False, "error": self.error}
        employee = self.state.find_employee(self.employee_name)
        if employee is None:
            return {"ok": False, "error": "Employee not found."}
        employee['password'] = value
        _logger.warning("AUDIT PASSWORD_CHANGE | employee=%s", self.employee_name)
        return {"ok": True}
