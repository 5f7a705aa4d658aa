# student_invoice/services/invoice_composer.py - Lesson dates, totals and invoice text
"""
Invoice composition for one billing template in one half-term.

Everything here is a pure function of its arguments: the same template,
term and body template always produce the same InvoiceResult.
"""
import re
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional

from student_invoice.schemas.invoice import InvoiceResult
from student_invoice.schemas.template import BillingTemplateBase
from student_invoice.schemas.term import ResolvedTerm

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

DEFAULT_SIGN_OFF = "Robert"


class Placeholder(str, Enum):
    """Names recognised inside ``{{...}}`` in a custom body template"""

    RECIPIENT = "recipient"
    STUDENTS = "students"
    INSTRUMENT = "instrument"
    TERM_INFO = "termInfo"
    WEEKS_COUNT = "weeksCount"
    LESSON_COUNT_TEXT = "lessonCountText"
    DATE_RANGE = "dateRange"
    COST = "cost"
    TOTAL_COST = "totalCost"
    IS_ARE = "isAre"

    @property
    def token(self) -> str:
        return "{{" + self.value + "}}"


PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")

# Rendering this gives the default body, minus the sign-off name
DEFAULT_BODY_TEMPLATE = (
    "Hi {{recipient}},\n"
    "\n"
    "Here is my invoice for {{students}}'s {{instrument}} lessons {{termInfo}}.\n"
    "\n"
    "--------\n"
    "There {{isAre}} {{weeksCount}} {{lessonCountText}}. "
    "This {{termInfo}} runs from {{dateRange}}.\n"
    "\n"
    "{{weeksCount}} x £{{cost}} = £{{totalCost}}\n"
    "\n"
    "Thank you\n"
    "--------\n"
    "\n"
    "Kind regards\n"
)


def ordinal_suffix(day: int) -> str:
    if 3 < day < 21:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def format_lesson_date(day: date) -> str:
    """e.g. 'Monday 1st September'"""
    return f"{WEEKDAYS[day.weekday()]} {day.day}{ordinal_suffix(day.day)} {MONTHS[day.month - 1]}"


def format_date_range(first: date, last: date) -> str:
    return f"{format_lesson_date(first)} to and including {format_lesson_date(last)}"


def first_lesson_date(term_start: date, lesson_weekday: str) -> date:
    """First date on or after ``term_start`` that falls on ``lesson_weekday``"""
    target = WEEKDAYS.index(lesson_weekday)
    current = term_start
    while current.weekday() != target:
        current += timedelta(days=1)
    return current


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def term_info(resolved_term: ResolvedTerm) -> str:
    term = resolved_term.term
    return f"{term.half} half {term.season} term {term.start_date.year}"


def default_body_template(sign_off: str = DEFAULT_SIGN_OFF) -> str:
    """The default layout written with placeholders, as offered for customisation"""
    return DEFAULT_BODY_TEMPLATE + sign_off


def render_body_template(body_template: str, values: Dict[Placeholder, str]) -> str:
    """
    Substitute every known ``{{placeholder}}`` in a single pass.

    Unknown placeholders are left as they are. Substituted values are not
    scanned again, so a value that itself looks like ``{{...}}`` is kept
    literally.
    """
    lookup = {placeholder.value: value for placeholder, value in values.items()}

    def substitute(match: "re.Match[str]") -> str:
        return lookup.get(match.group(1), match.group(0))

    return PLACEHOLDER_PATTERN.sub(substitute, body_template)


def placeholder_values(
    template: BillingTemplateBase,
    resolved_term: ResolvedTerm,
    info: str,
    date_range: str,
    total_cost: Decimal,
) -> Dict[Placeholder, str]:
    weeks = resolved_term.weeks_count
    return {
        Placeholder.RECIPIENT: template.recipient,
        Placeholder.STUDENTS: template.students,
        Placeholder.INSTRUMENT: template.instrument,
        Placeholder.TERM_INFO: info,
        Placeholder.WEEKS_COUNT: str(weeks),
        Placeholder.LESSON_COUNT_TEXT: "session" if weeks == 1 else "sessions",
        Placeholder.DATE_RANGE: date_range,
        Placeholder.COST: f"{template.cost:.2f}",
        Placeholder.TOTAL_COST: f"{total_cost:.2f}",
        Placeholder.IS_ARE: "is" if weeks == 1 else "are",
    }


def compose(
    template: BillingTemplateBase,
    resolved_term: Optional[ResolvedTerm],
    custom_body_template: Optional[str] = None,
    sign_off: str = DEFAULT_SIGN_OFF,
) -> InvoiceResult:
    """
    Build the invoice for ``template`` in ``resolved_term``.

    Args:
        template: Billing template (schema or ORM row; read by attribute)
        resolved_term: Term from term_calendar.resolve; must not be None
        custom_body_template: Placeholder template replacing the default body
        sign_off: Name under "Kind regards" in the default body

    Raises:
        ValueError: If called outside term time (resolved_term is None)
    """
    if resolved_term is None:
        raise ValueError("Cannot compose an invoice outside term time")

    weeks = resolved_term.weeks_count
    first = first_lesson_date(resolved_term.term.start_date, template.day)
    last = first + timedelta(days=(weeks - 1) * 7)

    info = term_info(resolved_term)
    date_range = format_date_range(first, last)
    cost = Decimal(str(template.cost))
    total_cost = cost * weeks

    values = placeholder_values(template, resolved_term, info, date_range, total_cost)
    if custom_body_template:
        body = render_body_template(custom_body_template, values)
    else:
        body = render_body_template(DEFAULT_BODY_TEMPLATE, values) + sign_off

    return InvoiceResult(
        subject=f"Invoice for {capitalize_first(template.instrument)} Lessons {info}",
        body=body,
        total_cost=total_cost,
        lesson_count=weeks,
        term_info=info,
        date_range=date_range,
        first_lesson_date=first,
        last_lesson_date=last,
        recipient=template.recipient,
        template_id=getattr(template, "id", None),
    )


def compose_all(
    templates: Iterable[BillingTemplateBase],
    resolved_term: Optional[ResolvedTerm],
    custom_body_template: Optional[str] = None,
    sign_off: str = DEFAULT_SIGN_OFF,
) -> List[InvoiceResult]:
    """compose() for each template, in input order"""
    return [
        compose(template, resolved_term, custom_body_template, sign_off=sign_off)
        for template in templates
    ]
