from datetime import date, datetime, timedelta

import pytest

from student_invoice.services import term_calendar

EXPECTED_2025 = [
    ("1st", "autumn", date(2025, 9, 1), date(2025, 10, 25), 8),
    ("2nd", "autumn", date(2025, 11, 3), date(2025, 12, 20), 7),
    ("1st", "spring", date(2026, 1, 5), date(2026, 2, 14), 6),
    ("2nd", "spring", date(2026, 2, 23), date(2026, 3, 28), 5),
    ("1st", "summer", date(2026, 4, 13), date(2026, 5, 23), 6),
    ("2nd", "summer", date(2026, 6, 1), date(2026, 7, 18), 7),
]


def test_academic_year_has_six_ordered_periods():
    periods = term_calendar.periods_for_academic_year(2025)

    assert [(p.half, p.season, p.start_date, p.end_date) for p in periods] == [
        row[:4] for row in EXPECTED_2025
    ]
    for earlier, later in zip(periods, periods[1:]):
        assert earlier.end_date < later.start_date


def test_academic_year_is_restartable():
    assert term_calendar.periods_for_academic_year(2030) == term_calendar.periods_for_academic_year(2030)


@pytest.mark.parametrize("half,season,start,end,weeks", EXPECTED_2025)
def test_every_day_inside_a_window_resolves(half, season, start, end, weeks):
    day = start
    while day <= end:
        resolved = term_calendar.resolve(day)
        assert resolved is not None, day
        assert (resolved.term.half, resolved.term.season) == (half, season)
        assert resolved.term.start_date == start
        assert resolved.weeks_count == weeks
        day += timedelta(days=1)


@pytest.mark.parametrize("day", [
    date(2025, 10, 26),
    date(2025, 10, 30),
    date(2025, 11, 2),
    date(2025, 12, 21),
    date(2025, 12, 31),
    date(2026, 1, 4),
    date(2026, 2, 15),
    date(2026, 2, 22),
    date(2026, 3, 29),
    date(2026, 4, 12),
    date(2026, 5, 24),
    date(2026, 5, 31),
    date(2026, 7, 19),
    date(2026, 8, 31),
])
def test_holidays_resolve_to_none(day):
    assert term_calendar.resolve(day) is None


def test_new_years_eve_is_outside_term():
    assert term_calendar.resolve(date(2024, 12, 31)) is None


def test_boundaries_are_inclusive():
    assert term_calendar.resolve(date(2025, 9, 1)).term.season == "autumn"
    assert term_calendar.resolve(date(2025, 10, 25)).term.half == "1st"
    assert term_calendar.resolve(date(2026, 7, 18)).term.half == "2nd"


def test_spring_dates_belong_to_previous_autumn_year():
    resolved = term_calendar.resolve(date(2026, 2, 1))

    assert resolved.term.season == "spring"
    assert resolved.term.start_date == date(2026, 1, 5)


def test_time_of_day_is_ignored():
    assert term_calendar.resolve(datetime(2025, 10, 25, 23, 59)) == term_calendar.resolve(date(2025, 10, 25))


def test_leap_year_spring_second_half():
    # Feb 23 - Mar 28 2024 spans 34 days
    resolved = term_calendar.resolve(date(2024, 3, 1))
    assert resolved.term.span_days == 34
    assert resolved.weeks_count == 5


def test_resolved_term_label():
    resolved = term_calendar.resolve(date(2025, 9, 15))
    assert resolved.label == "1st half autumn term (8 weeks)"


def test_academic_start_year():
    assert term_calendar.academic_start_year(date(2025, 9, 1)) == 2025
    assert term_calendar.academic_start_year(date(2025, 8, 31)) == 2024
    assert term_calendar.academic_start_year(date(2026, 1, 1)) == 2025


@pytest.mark.parametrize("day,expected", [
    (date.min, None),
    (date(1, 3, 1), ("2nd", "spring")),
    (date(9999, 10, 1), ("1st", "autumn")),
    (date.max, None),
])
def test_first_and_last_representable_years(day, expected):
    resolved = term_calendar.resolve(day)
    if expected is None:
        assert resolved is None
    else:
        assert (resolved.term.half, resolved.term.season) == expected


def test_edge_years_drop_unrepresentable_rows():
    assert [p.season for p in term_calendar.periods_for_academic_year(0)] == ["spring"] * 2 + ["summer"] * 2
    assert [p.season for p in term_calendar.periods_for_academic_year(9999)] == ["autumn", "autumn"]
