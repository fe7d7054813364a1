"""Login checks for the four access levels."""
from typing import Literal, Optional

from pydantic import BaseModel

from .. import dependencies as deps
from ..dependencies import _logger
from ..state import AppState
from ..types import ServiceResult

# role -> (view opened on success, display user, failure message)
_ROLE_VIEWS = {
    'management': ('management', 'Admin', 'Invalid Manager Password'),
    'operations': ('operations', 'Admin', 'Invalid Team Dashboard Password'),
    'it': ('settings', 'IT', 'Invalid IT Password'),
}


class LoginBody(BaseModel):
    role: Literal['employee', 'management', 'operations', 'it']
    password: str = ''
    employee_name: Optional[str] = None


def login(state: AppState, body: LoginBody) -> ServiceResult:
    """Check a password for the chosen role.

    Plain equality against the configured passwords; no lockout.
    """
    if body.role in _ROLE_VIEWS:
        view, user, message = _ROLE_VIEWS[body.role]
        expected = deps.IT_MASTER_PASSWORD if body.role == 'it' else deps.MANAGER_PASSWORD
        if body.password == expected:
            _logger.info("LOGIN | role=%s", body.role)
            return {"ok": True, "view": view, "user": user}
        _logger.warning("LOGIN FAILED | role=%s", body.role)
        return {"ok": False, "error": message}

    if not body.employee_name:
        return {"ok": False, "error": "Please select an Employee."}
    employee = state.find_employee(body.employee_name)
    if employee is not None and body.password == employee['password']:
        _logger.info("LOGIN | role=employee user=%s", body.employee_name)
        return {"ok": True, "view": "employee", "user": body.employee_name}
    _logger.warning("LOGIN FAILED | role=employee user=%s", body.employee_name)
    return {"ok": False, "error": "Invalid Password"}


def verify_it_password(password: str) -> bool:
    return password == deps.IT_MASTER_PASSWORD
