"""
JSON persistence for weekly entries.

The whole key -> entry mapping lives in one file and is written in full on
every change. Reads normalise everything; an unreadable file yields the
seeded demo dataset.
"""
import copy
import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .entries import empty_leave_grid, entry_key, normalize_db, normalize_weekly_entry

STORAGE_KEY_DB = 'capacity_tracker_db_v1'

SEED_WEEK = '2026-02-02'


def _seed_entries() -> Dict[str, Dict[str, Any]]:
    employee_b_leave = empty_leave_grid()
    employee_b_leave[0][0] = True
    employee_b_leave[3] = [True] * 5
    return {
        f'Employee A-{SEED_WEEK}': {
            'weekDate': SEED_WEEK,
            'employeeName': 'Employee A',
            'office': 'Office A',
            'mentor': 'Mentor 2',
            'languages': ['English', 'Spanish'],
            'interests': '',
            'annualLeave': empty_leave_grid(),
            'availability2Weeks': 'Limited Capacity',
            'capacityComments': [''] * 4,
            'lastUpdated': '',
            'projects': [
                {'id': '1', 'name': 'Task1', 'category': 'Category1', 'matterType': 'Category1',
                 'owner': 'Supervisor 1', 'tasks': '', 'capacities': [25, 25, 20, 10]},
                {'id': '2', 'name': 'Task2', 'category': 'Category1', 'matterType': 'Category1',
                 'owner': 'Supervisor 2', 'tasks': '', 'capacities': [20, 20, 15, 10]},
            ],
        },
        f'Employee B-{SEED_WEEK}': {
            'weekDate': SEED_WEEK,
            'employeeName': 'Employee B',
            'office': 'Office E',
            'mentor': 'Mentor 1',
            'languages': ['French'],
            'interests': '',
            'annualLeave': employee_b_leave,
            'availability2Weeks': 'No Capacity',
            'capacityComments': [''] * 4,
            'lastUpdated': '',
            'projects': [],
        },
    }


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC with milliseconds, e.g. ``2026-02-02T09:15:00.123Z``."""
    now = now or datetime.now(timezone.utc)
    return now.strftime('%Y-%m-%dT%H:%M:%S.') + f"{now.microsecond // 1000:03d}Z"


def seed_db(now: Optional[datetime] = None) -> Dict[str, Dict[str, Any]]:
    stamp = utc_timestamp(now)
    seeded = _seed_entries()
    for entry in seeded.values():
        entry['lastUpdated'] = stamp
    return normalize_db(seeded)


class EntryStore:
    """Entries keyed by ``<employeeName>-<weekDate>`` backed by a JSON file."""

    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        self._entries: Dict[str, Dict[str, Any]] = {}
        # True when the last load() fell back to the seeded dataset
        self.seeded = False
        # Set when the file existed but could not be parsed
        self.load_error: Optional[str] = None

    @property
    def path(self) -> str:
        return os.path.join(self.data_dir, f"{STORAGE_KEY_DB}.json")

    # ── Read ───────────────────────────────────────────────────
    def load(self) -> Dict[str, Dict[str, Any]]:
        """Read and normalise the stored mapping once (call at startup)."""
        self.load_error = None
        raw = None
        if os.path.exists(self.path):
            try:
                with open(self.path, 'r', encoding='utf-8') as f:
                    raw = json.load(f)
            except (OSError, ValueError) as e:
                self.load_error = f"{type(e).__name__}: {e}"
                raw = None
            if raw is not None and not isinstance(raw, dict):
                self.load_error = f"unexpected payload type {type(raw).__name__}"
                raw = None
        if raw is None:
            self._entries = seed_db()
            self.seeded = True
        else:
            self._entries = normalize_db(raw)
            self.seeded = False
        return self.all()

    def all(self) -> Dict[str, Dict[str, Any]]:
        """Snapshot of every entry; callers may not mutate the store through it."""
        return copy.deepcopy(self._entries)

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        entry = self._entries.get(key)
        return copy.deepcopy(entry) if entry is not None else None

    def __len__(self) -> int:
        return len(self._entries)

    # ── Write ──────────────────────────────────────────────────
    def save(self) -> None:
        """Write the full mapping atomically."""
        self._write(self._entries)

    def _write(self, entries: Dict[str, Dict[str, Any]]) -> None:
        os.makedirs(self.data_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix='.captrack-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(entries, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def upsert(self, entry: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        """Normalise, stamp, store under the employee+week key and persist."""
        updated = {**normalize_weekly_entry(entry), 'lastUpdated': utc_timestamp(now)}
        entries = {**self._entries, entry_key(updated): updated}
        # memory follows disk only once the write went through
        self._write(entries)
        self._entries = entries
        return copy.deepcopy(updated)
