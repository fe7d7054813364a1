"""Application state passed explicitly to every service."""
from dataclasses import dataclass, field
from typing import List

from caplib.store import EntryStore
from .types import EmployeeList

INITIAL_OFFICES = ['Office A', 'Office B', 'Office C', 'Office D', 'Office E', 'Office F']
INITIAL_MENTORS = ['Mentor 1', 'Mentor 2', 'Mentor 3', 'Mentor 4']
INITIAL_LANGUAGES = ['English', 'French', 'German', 'Dutch', 'Spanish', 'Mandarin', 'Arabic']
INITIAL_EMPLOYEES = [
    {'name': f'Employee {letter}', 'password': 'pass123'} for letter in 'ABCDEF'
]


@dataclass
class AppState:
    """Entry store plus the settings lists (held in memory only)."""
    store: EntryStore
    offices: List[str] = field(default_factory=lambda: list(INITIAL_OFFICES))
    mentors: List[str] = field(default_factory=lambda: list(INITIAL_MENTORS))
    languages: List[str] = field(default_factory=lambda: list(INITIAL_LANGUAGES))
    employees: EmployeeList = field(default_factory=lambda: [dict(e) for e in INITIAL_EMPLOYEES])

    def find_employee(self, name: str):
        for employee in self.employees:
            if employee['name'] == name:
                return employee
        return None
