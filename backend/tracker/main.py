"""Session controller for the capacity tracker.

One ``CapacityTrackerApp`` per signed-in browser/session: it owns the
application state, switches between the five views and hands out the
service object for whichever view is open.
"""
from typing import Any, Optional

from .dependencies import _logger, get_store
from .state import AppState
from .services.auth import LoginBody, login
from .services.dashboard import DashboardView, management_dashboard, team_dashboard
from .services.employee_form import EmployeeFormSession
from .services.settings import SettingsEditor

VIEWS = ('login', 'employee', 'management', 'operations', 'settings')


class CapacityTrackerApp:

    def __init__(self, state: Optional[AppState] = None, data_dir: Optional[str] = None, today=None):
        self.state = state or AppState(store=get_store(data_dir))
        self.today = today
        self.view = 'login'
        self.current_user = ''
        self.screen: Any = None

    def login(self, role: str, password: str = '', employee_name: Optional[str] = None) -> dict:
        result = login(self.state, LoginBody(role=role, password=password, employee_name=employee_name))
        if not result['ok']:
            return result
        self._close_screen()
        self.view = result['view']
        self.current_user = result['user']
        self.screen = self._open_screen()
        return result

    def logout(self) -> None:
        _logger.info("LOGOUT | user=%s view=%s", self.current_user, self.view)
        self._close_screen()
        self.view = 'login'
        self.current_user = ''

    def _open_screen(self):
        if self.view == 'employee':
            return EmployeeFormSession(self.state, self.current_user, today=self.today)
        if self.view == 'management':
            return management_dashboard(self.state, today=self.today)
        if self.view == 'operations':
            return team_dashboard(self.state, today=self.today)
        if self.view == 'settings':
            return SettingsEditor(self.state)
        return None

    def _close_screen(self) -> None:
        # a pending autosave must not outlive the form it belongs to
        if isinstance(self.screen, EmployeeFormSession):
            self.screen.close()
        self.screen = None

    @property
    def form(self) -> Optional[EmployeeFormSession]:
        return self.screen if isinstance(self.screen, EmployeeFormSession) else None

    @property
    def dashboard(self) -> Optional[DashboardView]:
        return self.screen if isinstance(self.screen, DashboardView) else None

    @property
    def settings(self) -> Optional[SettingsEditor]:
        return self.screen if isinstance(self.screen, SettingsEditor) else None
