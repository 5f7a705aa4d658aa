# student_invoice/schemas/invoice.py
from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict


class InvoiceResult(BaseModel):
    """Rendered invoice for one template in one half-term; never persisted"""
    model_config = ConfigDict(frozen=True)

    subject: str
    body: str
    total_cost: Decimal
    lesson_count: int
    term_info: str
    date_range: str
    first_lesson_date: date
    last_lesson_date: date
    recipient: str
    template_id: Optional[str] = None


class DispatchOut(BaseModel):
    mode: Literal["clipboard", "gmail-draft"]
    subject: str
    body: str
    draft_id: Optional[str] = None


class BulkDispatchOut(BaseModel):
    mode: Literal["clipboard", "gmail-draft"]
    success: int = 0
    failed: int = 0
    errors: List[str] = []
    invoices: List[InvoiceResult] = []
    draft_ids: List[str] = []
