"""Tracker services package."""
from . import auth, settings, employee_form, dashboard

__all__ = ['auth', 'settings', 'employee_form', 'dashboard']
