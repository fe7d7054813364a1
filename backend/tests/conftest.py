"""
Shared test fixtures for the capacity tracker backend tests.
"""
import os
import sys
import tempfile
from datetime import date

import pytest

# ── Python path setup ──────────────────────────────────────────────────────────
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

# Keep test runs out of the default log location
os.environ.setdefault("CAPTRACK_LOG_FILE", os.path.join(tempfile.gettempdir(), "captrack-tests.log"))

# Wednesday of the seeded week (2026-02-02)
TODAY = date(2026, 2, 4)


# ── Fake timer ─────────────────────────────────────────────────────────────────

class FakeTimer:
    """Stands in for threading.Timer; fires only when the test says so."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args, **self.kwargs)


class FakeTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function, args=None, kwargs=None):
        timer = FakeTimer(interval, function, args=args, kwargs=kwargs)
        self.timers.append(timer)
        return timer

    @property
    def last(self):
        return self.timers[-1]

    def live(self):
        return [t for t in self.timers if not t.cancelled]


# ── Fixtures ───────────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def default_passwords(monkeypatch):
    """Pin the configured passwords regardless of the caller's environment."""
    from tracker import dependencies as deps
    monkeypatch.setattr(deps, "MANAGER_PASSWORD", "admin123")
    monkeypatch.setattr(deps, "IT_MASTER_PASSWORD", "itpass123")


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def data_dir(tmp_path):
    """Function-scoped empty data directory."""
    path = tmp_path / "data"
    path.mkdir()
    return str(path)


@pytest.fixture
def store(data_dir):
    """Entry store loaded from an empty directory, i.e. the seeded dataset."""
    from caplib.store import EntryStore
    s = EntryStore(data_dir)
    s.load()
    return s


@pytest.fixture
def state(store):
    from tracker.state import AppState
    return AppState(store=store)


@pytest.fixture
def fake_timers():
    return FakeTimerFactory()


def make_entry(name, projects=(), leave=None, week_date="2026-02-02", last_updated="", **extra):
    """Normalised entry with ``projects`` given as (name, category, capacities) tuples."""
    from caplib.entries import normalize_weekly_entry
    entry = {
        "weekDate": week_date,
        "employeeName": name,
        "office": "Office A",
        "mentor": "Mentor 1",
        "languages": ["English"],
        "annualLeave": leave,
        "lastUpdated": last_updated,
        "projects": [
            {"id": f"{name}-{i}", "name": p_name, "category": category,
             "owner": "Supervisor 1", "capacities": list(caps)}
            for i, (p_name, category, caps) in enumerate(projects)
        ],
    }
    entry.update(extra)
    return normalize_weekly_entry(entry)


@pytest.fixture
def entry_factory():
    return make_entry
