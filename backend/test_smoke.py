"""
Smoke tests for the capacity tracker session controller.
These run the whole flow (login, edit, save, dashboards, settings, logout)
against a temporary data directory.
"""
import os
import sys
from datetime import date

import pytest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from tracker.main import CapacityTrackerApp  # noqa: E402

TODAY = date(2026, 2, 4)


@pytest.fixture
def app(tmp_path, monkeypatch):
    from tracker import dependencies as deps
    monkeypatch.setattr(deps, "MANAGER_PASSWORD", "admin123")
    monkeypatch.setattr(deps, "IT_MASTER_PASSWORD", "itpass123")
    monkeypatch.setattr(deps, "AUTOSAVE_DELAY", 30.0)
    return CapacityTrackerApp(data_dir=str(tmp_path / "data"), today=TODAY)


# ── Login / logout ────────────────────────────────────────────────────────────

def test_starts_at_login(app):
    assert app.view == "login"
    assert app.screen is None


def test_failed_login_keeps_view(app):
    result = app.login("management", "wrong")
    assert result == {"ok": False, "error": "Invalid Manager Password"}
    assert app.view == "login"


def test_each_role_opens_its_view(app):
    assert app.login("employee", "pass123", "Employee A")["ok"]
    assert app.view == "employee" and app.form is not None
    assert app.login("management", "admin123")["ok"]
    assert app.view == "management" and app.dashboard.show_insights
    assert app.login("operations", "admin123")["ok"]
    assert app.view == "operations" and not app.dashboard.show_insights
    assert app.login("it", "itpass123")["ok"]
    assert app.view == "settings" and app.settings is not None
    app.logout()
    assert app.view == "login" and app.current_user == ""


# ── End-to-end flow ───────────────────────────────────────────────────────────

def test_employee_save_shows_on_dashboard(app):
    app.login("employee", "pass123", "Employee C")
    form = app.form
    form.update_profile("mentor", "Mentor 3")
    project = form.add_project("c-1")
    form.update_project(project["id"], "name", "Audit")
    form.update_project(project["id"], "owner", "Supervisor 1")
    form.set_capacity_hours(project["id"], 0, "36:00")
    assert form.save()["ok"] is True
    app.logout()

    app.login("management", "admin123")
    payload = app.dashboard.payload()
    rows = {r["employeeName"]: r for r in payload["rows"]}
    assert rows["Employee C"]["week_load_1"] == 90
    assert payload["rows"][0]["employeeName"] == "Employee C"
    assert payload["insights"]["at_capacity"] == 1
    assert payload["insights"]["top_matters"][0] == {"name": "Audit", "total": 90}


def test_logout_drops_pending_autosave(app):
    app.login("employee", "pass123", "Employee A")
    form = app.form
    form.update_capacity_comment(0, "not saved")
    assert form.autosave_pending
    app.logout()
    assert not form.autosave_pending
    assert app.state.store.get("Employee A-2026-02-02")["capacityComments"][0] == ""


def test_settings_changes_apply_to_login(app):
    from tracker.services.settings import add_employee, EmployeeCreate
    app.login("it", "itpass123")
    add_employee(app.state, EmployeeCreate(name="Employee G", password="g-pass"))
    app.settings.request_remove_employee("Employee A")
    app.settings.confirm_delete()
    app.logout()
    assert app.login("employee", "g-pass", "Employee G")["ok"] is True
    assert app.login("employee", "pass123", "Employee A")["error"] == "Invalid Password"
