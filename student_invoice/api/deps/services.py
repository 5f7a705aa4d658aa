# student_invoice/api/deps/services.py - Per-request service wiring
from datetime import date
from typing import Callable, Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from student_invoice.core.db import get_db
from student_invoice.services.gmail_service import GmailService
from student_invoice.services.invoice_service import InvoiceService
from student_invoice.services.settings_service import SettingsService
from student_invoice.services.template_service import TemplateService


def get_clock() -> Callable[[], date]:
    """Source of 'today'; overridden in tests"""
    return date.today


def get_settings_service(db: Session = Depends(get_db)) -> SettingsService:
    return SettingsService(db)


def get_template_service(db: Session = Depends(get_db)) -> TemplateService:
    return TemplateService(db)


def get_gmail_service(db: Session = Depends(get_db)) -> Generator[GmailService, None, None]:
    with GmailService(db) as service:
        yield service


def get_invoice_service(
    db: Session = Depends(get_db),
    clock: Callable[[], date] = Depends(get_clock),
    gmail: GmailService = Depends(get_gmail_service),
) -> InvoiceService:
    return InvoiceService(db, today=clock, gmail=gmail)
