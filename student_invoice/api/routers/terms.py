# student_invoice/api/routers/terms.py - Half-term lookup
from fastapi import APIRouter, Depends, Path, Query
from datetime import date
from typing import Callable, Optional

from student_invoice.api.deps.services import get_clock
from student_invoice.schemas.term import AcademicYearOut, CurrentTermOut
from student_invoice.services import term_calendar

router = APIRouter()


@router.get("/current", response_model=CurrentTermOut)
async def get_current_term(
    on: Optional[date] = Query(default=None, description="Date to resolve; defaults to today"),
    clock: Callable[[], date] = Depends(get_clock),
):
    """Which half-term a date falls in, or 'Outside term time'"""
    on = on or clock()
    return CurrentTermOut.from_resolved(on, term_calendar.resolve(on))


@router.get("/academic-year/{start_year}", response_model=AcademicYearOut)
async def get_academic_year(start_year: int = Path(..., ge=1900, le=2999)):
    """The six half-terms of the academic year starting in September of start_year"""
    return AcademicYearOut(
        start_year=start_year,
        periods=term_calendar.periods_for_academic_year(start_year),
    )
