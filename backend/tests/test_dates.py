"""
Date helpers: local ISO parsing, week labels and leave span compression.
"""
from datetime import date, datetime


def _grid(*days):
    """Leave grid with the given (week, day) cells switched on."""
    grid = [[False] * 5 for _ in range(4)]
    for week_idx, day_idx in days:
        grid[week_idx][day_idx] = True
    return grid


# ─────────────────────────────────────────────────────────────
# Parsing and formatting
# ─────────────────────────────────────────────────────────────

class TestParsing:
    def test_iso_date(self):
        from caplib.dates import parse_iso_date_local
        assert parse_iso_date_local("2026-02-02") == date(2026, 2, 2)

    def test_day_overflow_rolls_into_next_month(self):
        from caplib.dates import parse_iso_date_local
        assert parse_iso_date_local("2026-02-31") == date(2026, 3, 3)

    def test_generic_fallback(self):
        from caplib.dates import parse_iso_date_local
        assert parse_iso_date_local("2026/02/05") == date(2026, 2, 5)

    def test_unparseable(self):
        from caplib.dates import parse_iso_date_local
        assert parse_iso_date_local("not a date") is None
        assert parse_iso_date_local("") is None
        assert parse_iso_date_local(None) is None

    def test_format_iso(self):
        from caplib.dates import format_iso_date_local
        assert format_iso_date_local(date(2026, 3, 5)) == "2026-03-05"

    def test_display_date(self):
        from caplib.dates import format_display_date
        assert format_display_date("2026-02-02") == "2 February 2026"
        assert format_display_date("garbage") == "garbage"


class TestCurrentWeek:
    def test_midweek(self):
        from caplib.dates import get_current_week_start
        assert get_current_week_start(date(2026, 2, 4)) == "2026-02-02"

    def test_sunday_belongs_to_previous_week(self):
        from caplib.dates import get_current_week_start
        assert get_current_week_start(date(2026, 2, 8)) == "2026-02-02"

    def test_monday(self):
        from caplib.dates import get_current_week_start
        assert get_current_week_start(date(2026, 2, 9)) == "2026-02-09"

    def test_accepts_datetime(self):
        from caplib.dates import get_current_week_start
        assert get_current_week_start(datetime(2026, 2, 6, 23, 59)) == "2026-02-02"

    def test_default_is_a_monday(self):
        from caplib.dates import get_current_week_start, parse_iso_date_local
        assert parse_iso_date_local(get_current_week_start()).weekday() == 0


# ─────────────────────────────────────────────────────────────
# Labels
# ─────────────────────────────────────────────────────────────

class TestWeekLabels:
    def test_same_month(self):
        from caplib.dates import get_week_labels
        assert get_week_labels("2026-02-02") == [
            "2–6 February 2026",
            "9–13 February 2026",
            "16–20 February 2026",
            "23–27 February 2026",
        ]

    def test_month_boundary(self):
        from caplib.dates import get_week_labels
        assert get_week_labels("2026-03-30")[0] == "30 March – 3 April 2026"

    def test_invalid_start(self):
        from caplib.dates import get_week_labels
        assert get_week_labels("") == ["-"] * 4

    def test_strip_year(self):
        from caplib.dates import strip_label_year
        assert strip_label_year("2–6 February 2026") == "2–6 February"
        assert strip_label_year("-") == "-"

    def test_dashboard_span(self):
        from caplib.dates import get_dashboard_span_label
        assert get_dashboard_span_label("2026-02-02") == "2 February 2026 to 27 February 2026"


# ─────────────────────────────────────────────────────────────
# Leave spans
# ─────────────────────────────────────────────────────────────

class TestLeaveDaySpans:
    def test_runs_and_singles(self):
        from caplib.dates import format_leave_day_spans
        assert format_leave_day_spans([True, True, False, True, False]) == "Mon–Tues, Thurs"

    def test_whole_week(self):
        from caplib.dates import format_leave_day_spans
        assert format_leave_day_spans([True] * 5) == "Mon–Fri"

    def test_no_leave(self):
        from caplib.dates import format_leave_day_spans
        assert format_leave_day_spans([False] * 5) == "-"
        assert format_leave_day_spans([]) == "-"


class TestAllLeaveDates:
    def test_grouped_by_month(self):
        from caplib.dates import get_all_leave_dates
        assert get_all_leave_dates("2026-02-02", _grid((0, 0), (0, 1), (0, 4))) == "2–3, 6 Feb"

    def test_across_weekend_and_month(self):
        from caplib.dates import get_all_leave_dates
        assert get_all_leave_dates("2026-02-23", _grid((0, 4), (1, 0))) == "27 Feb, 2 Mar"

    def test_run_spanning_months(self):
        from caplib.dates import get_all_leave_dates
        assert get_all_leave_dates("2026-03-30", _grid((0, 0), (0, 1), (0, 2))) == "30 Mar–1 Apr"

    def test_seed_pattern(self):
        from caplib.dates import get_all_leave_dates
        grid = _grid((0, 0), (3, 0), (3, 1), (3, 2), (3, 3), (3, 4))
        assert get_all_leave_dates("2026-02-02", grid) == "2, 23–27 Feb"

    def test_september_short_name(self):
        from caplib.dates import get_all_leave_dates
        assert get_all_leave_dates("2026-09-07", _grid((0, 0))) == "7 Sept"

    def test_no_leave(self):
        from caplib.dates import get_all_leave_dates
        assert get_all_leave_dates("2026-02-02", _grid()) == "-"
        assert get_all_leave_dates("bad", _grid((0, 0))) == "-"
