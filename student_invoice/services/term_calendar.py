# student_invoice/services/term_calendar.py - UK school half-term lookup
"""
Fixed half-term calendar.

An academic year starts in September of year Y and finishes in July of
Y + 1. It is split into six half-terms whose month/day boundaries are
hard-coded below; they are not read from any external calendar.
"""
import math
from datetime import MAXYEAR, MINYEAR, date, datetime
from typing import List, Optional

from student_invoice.schemas.term import ResolvedTerm, TermPeriod

# (half, season, year offset, (start month, start day), (end month, end day))
TERM_BOUNDARIES = (
    ("1st", "autumn", 0, (9, 1), (10, 25)),
    ("2nd", "autumn", 0, (11, 3), (12, 20)),
    ("1st", "spring", 1, (1, 5), (2, 14)),
    ("2nd", "spring", 1, (2, 23), (3, 28)),
    ("1st", "summer", 1, (4, 13), (5, 23)),
    ("2nd", "summer", 1, (6, 1), (7, 18)),
)

ACADEMIC_YEAR_START_MONTH = 9


def academic_start_year(day: date) -> int:
    """Calendar year in which the academic year containing ``day`` began"""
    if day.month >= ACADEMIC_YEAR_START_MONTH:
        return day.year
    return day.year - 1


def periods_for_academic_year(start_year: int) -> List[TermPeriod]:
    """
    The half-terms of the academic year starting in ``start_year``, in order.

    Rows that would fall outside the representable date range are left
    out, so the first and last years of the calendar yield fewer than six.
    """
    periods = []
    for half, season, offset, (start_month, start_day), (end_month, end_day) in TERM_BOUNDARIES:
        year = start_year + offset
        if not MINYEAR <= year <= MAXYEAR:
            continue
        periods.append(
            TermPeriod(
                start_date=date(year, start_month, start_day),
                end_date=date(year, end_month, end_day),
                half=half,
                season=season,
            )
        )
    return periods


def weeks_in(period: TermPeriod) -> int:
    return math.ceil(period.span_days / 7)


def resolve(day: date) -> Optional[ResolvedTerm]:
    """
    Find the half-term containing ``day``.

    Returns None when the date falls in a holiday between windows.
    """
    if isinstance(day, datetime):
        day = day.date()
    for period in periods_for_academic_year(academic_start_year(day)):
        if period.contains(day):
            return ResolvedTerm(term=period, weeks_count=weeks_in(period))
    return None
