"""
Management and team dashboards over the latest entry of every employee.

The management dashboard always has an active week (week 1 by default) and
shows the insight panel; selecting a row opens that employee's form read-only.
The team dashboard starts with no active week, hides insights, and opens a
compact employee profile instead.
"""
from typing import Any, Dict, Optional

from caplib.dates import (
    format_leave_day_spans, get_all_leave_dates, get_current_week_start,
    get_dashboard_span_label, get_week_labels, strip_label_year,
)
from caplib.loads import (
    build_dashboard_rows, load_bucket, project_badge, weekly_load_percents, weekly_summary,
)
from caplib.ranking import SortState, sort_rows, top_matters_for_row, week_insights
from caplib.units import WEEKS_IN_HORIZON, clamp_week_load_percent
from ..dependencies import _logger
from ..state import AppState
from ..types import DashboardRow, DashboardRowList, EntryRecord
from .employee_form import EmployeeFormSession

RELATIVE_WEEK_LABELS = ['This week', 'Next week', 'Week 3', 'Week 4']
PEOPLE_MODES = ('most', 'least')


def employee_profile(entry: EntryRecord) -> Dict[str, Any]:
    """Read-only profile shown from the team dashboard."""
    labels = [strip_label_year(label) for label in get_week_labels(entry.get('weekDate') or '')]
    loads = [clamp_week_load_percent(p) for p in weekly_load_percents(entry)]
    comments = entry.get('capacityComments') or [''] * WEEKS_IN_HORIZON
    leave = entry.get('annualLeave') or []
    interests = entry.get('interests') or ''
    weeks = []
    for week_idx in range(WEEKS_IN_HORIZON):
        comment = (comments[week_idx] if week_idx < len(comments) else '') or ''
        weeks.append({
            'week_index': week_idx,
            'label': labels[week_idx] if week_idx < len(labels) else f'Week {week_idx + 1}',
            'load': loads[week_idx],
            'bucket': load_bucket(loads[week_idx]),
            'comment': comment.strip() or '-',
            'leave': format_leave_day_spans(leave[week_idx] if week_idx < len(leave) else []),
        })
    return {
        'employeeName': entry.get('employeeName', ''),
        'office': entry.get('office') or '-',
        'languages': ' / '.join(entry.get('languages') or []) or '-',
        'status': entry.get('availability2Weeks', ''),
        'interests': interests if interests.strip() else '-',
        'weeks': weeks,
    }


class DashboardView:
    """Interactive state of one dashboard: active week, sort, people toggle, selection."""

    def __init__(self, state: AppState, week_driven: bool = False, today=None):
        self.state = state
        self.week_driven = week_driven
        self.today = today
        self.active_week: Optional[int] = None if week_driven else 0
        self.people_mode = 'most'
        self.sort = SortState()
        self.selected: Optional[EntryRecord] = None

    @property
    def show_insights(self) -> bool:
        return not self.week_driven

    @property
    def selected_week_index(self) -> int:
        return self.active_week if self.active_week is not None else 0

    # ── Interactions ───────────────────────────────────────────
    def select_week(self, week_index: int) -> Optional[int]:
        """Week card click; on the team dashboard a second click clears the selection."""
        if not 0 <= week_index < WEEKS_IN_HORIZON:
            raise ValueError(f"Week index out of range: {week_index}")
        if self.week_driven and self.active_week == week_index:
            self.active_week = None
        else:
            self.active_week = week_index
        return self.active_week

    def set_people_mode(self, mode: str) -> None:
        if mode not in PEOPLE_MODES:
            raise ValueError(f"Unknown people mode: {mode}")
        self.people_mode = mode

    def request_sort(self, key: str) -> Dict[str, Any]:
        return self.sort.request_sort(key).as_dict()

    def select_employee(self, employee_name: str):
        """Open the latest entry for ``employee_name``.

        Returns a profile dict on the team dashboard and a read-only form
        session on the management dashboard; ``None`` if nobody matches.
        """
        for row in self.rows():
            if row.get('employeeName') == employee_name:
                self.selected = row
                break
        else:
            return None
        _logger.info("DASHBOARD OPEN | employee=%s team=%s", employee_name, self.week_driven)
        if self.week_driven:
            return employee_profile(self.selected)
        return EmployeeFormSession(self.state, employee_name, read_only=True,
                                   entry=self.selected, today=self.today)

    def back(self) -> None:
        self.selected = None

    # ── Data ───────────────────────────────────────────────────
    def rows(self) -> DashboardRowList:
        return build_dashboard_rows(self.state.store.all())

    def _table_row(self, row: DashboardRow) -> Dict[str, Any]:
        out = dict(row)
        if self.week_driven:
            out['leave_label'] = (
                format_leave_day_spans(row['annualLeave'][self.active_week])
                if self.active_week is not None else None
            )
        else:
            out['leave_label'] = get_all_leave_dates(row.get('weekDate', ''), row.get('annualLeave'))
            out['top_matters'] = [
                self._matter_badge(p) for p in top_matters_for_row(row, self.selected_week_index)
            ]
        return out

    def _matter_badge(self, project: dict) -> Dict[str, Any]:
        load = clamp_week_load_percent(project['capacities'][self.selected_week_index])
        return {**project, 'week_load': load, 'badge': project_badge(load)}

    def payload(self) -> Dict[str, Any]:
        rows = self.rows()
        week_start = get_current_week_start(self.today)
        labels = get_week_labels(week_start)
        summary = weekly_summary(rows)
        cards = [{
            **summary[week_idx],
            'title': RELATIVE_WEEK_LABELS[week_idx],
            'label': strip_label_year(labels[week_idx]),
            'active': self.active_week == week_idx,
        } for week_idx in range(WEEKS_IN_HORIZON)]

        result: Dict[str, Any] = {
            'span_label': get_dashboard_span_label(week_start),
            'week_labels': labels,
            'cards': cards,
            'active_week': self.active_week,
            'sort': self.sort.as_dict(),
            'rows': [self._table_row(r) for r in sort_rows(rows, self.sort, self.selected_week_index)],
        }
        if self.show_insights:
            insights = week_insights(rows, self.selected_week_index)
            result['insights'] = insights
            result['people_mode'] = self.people_mode
            result['people'] = insights['most_loaded' if self.people_mode == 'most' else 'least_loaded']
        return result


def management_dashboard(state: AppState, today=None) -> DashboardView:
    return DashboardView(state, week_driven=False, today=today)


def team_dashboard(state: AppState, today=None) -> DashboardView:
    return DashboardView(state, week_driven=True, today=today)
