# student_invoice/schemas/term.py - Half-term periods
from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Half = Literal["1st", "2nd"]
Season = Literal["autumn", "spring", "summer"]


class TermPeriod(BaseModel):
    """A half-term window; both ends inclusive"""
    model_config = ConfigDict(frozen=True)

    start_date: date
    end_date: date
    half: Half
    season: Season

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    @property
    def span_days(self) -> int:
        return (self.end_date - self.start_date).days


class ResolvedTerm(BaseModel):
    """A period paired with the number of whole weeks it is billed for"""
    model_config = ConfigDict(frozen=True)

    term: TermPeriod
    weeks_count: int = Field(..., ge=1)

    @property
    def label(self) -> str:
        return f"{self.term.half} half {self.term.season} term ({self.weeks_count} weeks)"


OUTSIDE_TERM_LABEL = "Outside term time"


class CurrentTermOut(BaseModel):
    on: date
    in_term: bool
    label: str
    term: Optional[TermPeriod] = None
    weeks_count: Optional[int] = None

    @classmethod
    def from_resolved(cls, on: date, resolved: Optional[ResolvedTerm]) -> "CurrentTermOut":
        if resolved is None:
            return cls(on=on, in_term=False, label=OUTSIDE_TERM_LABEL)
        return cls(
            on=on,
            in_term=True,
            label=resolved.label,
            term=resolved.term,
            weeks_count=resolved.weeks_count,
        )


class AcademicYearOut(BaseModel):
    start_year: int
    periods: list[TermPeriod]
