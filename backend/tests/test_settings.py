"""
Settings lists, employee list and the IT-gated password dialog.
"""
import pytest


# ─────────────────────────────────────────────────────────────
# Lists
# ─────────────────────────────────────────────────────────────

class TestListItems:
    def test_add_trimmed(self, state):
        from tracker.services.settings import add_item
        result = add_item(state, "offices", "  Office G ")
        assert result["ok"] is True
        assert state.offices[-1] == "Office G"

    def test_duplicate_and_blank_ignored(self, state):
        from tracker.services.settings import add_item
        before = list(state.mentors)
        assert add_item(state, "mentors", "Mentor 1")["ok"] is False
        assert add_item(state, "mentors", "   ")["ok"] is False
        assert state.mentors == before

    def test_unknown_list(self, state):
        from tracker.services.settings import add_item
        with pytest.raises(ValueError):
            add_item(state, "employees", "x")

    def test_lists_are_per_state(self, store):
        from tracker.state import AppState
        from tracker.services.settings import add_item
        first, second = AppState(store=store), AppState(store=store)
        add_item(first, "languages", "Italian")
        assert "Italian" not in second.languages


class TestEmployees:
    def test_add(self, state):
        from tracker.services.settings import add_employee, EmployeeCreate
        result = add_employee(state, EmployeeCreate(name=" Employee G ", password="pw"))
        assert result == {"ok": True, "record": {"name": "Employee G"}}
        assert state.find_employee("Employee G")["password"] == "pw"

    def test_required(self, state):
        from tracker.services.settings import add_employee, EmployeeCreate
        result = add_employee(state, EmployeeCreate(name="New", password="  "))
        assert result["error"] == "Name and password are required."

    def test_case_insensitive_duplicate(self, state):
        from tracker.services.settings import add_employee, EmployeeCreate
        result = add_employee(state, EmployeeCreate(name="employee a", password="pw"))
        assert result["error"] == "An employee with that name already exists."


# ─────────────────────────────────────────────────────────────
# Confirmed removal
# ─────────────────────────────────────────────────────────────

class TestRemoval:
    def test_request_does_not_remove(self, state):
        from tracker.services.settings import SettingsEditor
        editor = SettingsEditor(state)
        pending = editor.request_remove_item("mentors", "Mentor 1")
        assert pending.message == 'Are you sure you wish to delete "Mentor 1" from Mentors?'
        assert "Mentor 1" in state.mentors

    def test_confirm_removes(self, state):
        from tracker.services.settings import SettingsEditor
        editor = SettingsEditor(state)
        editor.request_remove_item("offices", "Office B")
        assert editor.confirm_delete() == {"ok": True, "removed": 1}
        assert "Office B" not in state.offices
        assert editor.pending is None

    def test_cancel_is_a_no_op(self, state):
        from tracker.services.settings import SettingsEditor
        editor = SettingsEditor(state)
        before = list(state.languages)
        editor.request_remove_item("languages", "German")
        editor.cancel_delete()
        assert editor.confirm_delete() == {"ok": False, "removed": 0}
        assert state.languages == before

    def test_remove_employee(self, state):
        from tracker.services.settings import SettingsEditor
        editor = SettingsEditor(state)
        pending = editor.request_remove_employee("Employee F")
        assert pending.title == "Delete Employee"
        editor.confirm_delete()
        assert state.find_employee("Employee F") is None
        assert len(state.employees) == 5

    def test_unknown_list_rejected(self, state):
        from tracker.services.settings import SettingsEditor
        with pytest.raises(ValueError):
            SettingsEditor(state).request_remove_item("planets", "Mars")


# ─────────────────────────────────────────────────────────────
# Password dialog
# ─────────────────────────────────────────────────────────────

class TestPasswordDialog:
    def test_wrong_it_password(self, state):
        from tracker.services.settings import PasswordDialog
        dialog = PasswordDialog(state, "Employee A")
        assert dialog.unlock("nope") is False
        assert dialog.error == "Invalid IT password."
        assert dialog.reveal() is None
        assert dialog.save("x")["ok"] is False

    def test_reveal_and_change(self, state):
        from tracker.services.settings import PasswordDialog
        from tracker.services.auth import LoginBody, login
        dialog = PasswordDialog(state, "Employee A")
        assert dialog.unlock("itpass123") is True
        assert dialog.reveal() == "pass123"
        assert dialog.save(" newpass ") == {"ok": True}
        assert login(state, LoginBody(role="employee", employee_name="Employee A",
                                      password="newpass"))["ok"] is True

    def test_empty_password_rejected(self, state):
        from tracker.services.settings import PasswordDialog
        dialog = PasswordDialog(state, "Employee A")
        dialog.unlock("itpass123")
        assert dialog.save("   ") == {"ok": False, "error": "Password cannot be empty."}
        assert state.find_employee("Employee A")["password"] == "pass123"

    def test_injected_verifier(self, state):
        from tracker.services.settings import PasswordDialog
        dialog = PasswordDialog(state, "Employee B", verify=lambda pw: pw == "ok")
        assert dialog.unlock("ok") is True
