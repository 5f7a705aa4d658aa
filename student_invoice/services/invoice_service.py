# student_invoice/services/invoice_service.py - Wires stored state into the invoice core
from sqlalchemy.orm import Session
from contextlib import nullcontext
from datetime import date
from typing import Callable, List, Optional
import logging

from student_invoice.core.config import settings
from student_invoice.schemas.invoice import BulkDispatchOut, DispatchOut, InvoiceResult
from student_invoice.schemas.term import ResolvedTerm
from student_invoice.services import invoice_composer, term_calendar
from student_invoice.services.gmail_service import GmailService
from student_invoice.services.settings_service import SettingsService
from student_invoice.services.template_service import TemplateService

logger = logging.getLogger(__name__)


class OutsideTermError(Exception):
    """No half-term contains the requested date"""

    def __init__(self, on: date):
        super().__init__(f"{on.isoformat()} is outside term time")
        self.on = on


class NoTemplateSelectedError(LookupError):
    """An operation needed the current template but none is selected"""


class InvoiceService:
    """
    Explicit state container for invoice generation.

    Holds the database session (templates, settings), the clock and the
    optional Gmail dispatcher. The term calendar and composer receive
    everything as arguments and never read this state themselves.
    """

    def __init__(
        self,
        db: Session,
        today: Callable[[], date] = date.today,
        gmail: Optional[GmailService] = None,
    ):
        self.db = db
        self.today = today
        self.templates = TemplateService(db)
        self.settings = SettingsService(db)
        self.gmail = gmail

    def _gmail(self):
        """The injected dispatcher, or a short-lived one that closes its HTTP client"""
        if self.gmail is not None:
            return nullcontext(self.gmail)
        return GmailService(self.db)

    def resolve_term(self, on: Optional[date] = None) -> Optional[ResolvedTerm]:
        return term_calendar.resolve(on or self.today())

    def require_term(self, on: Optional[date] = None) -> ResolvedTerm:
        on = on or self.today()
        resolved = term_calendar.resolve(on)
        if resolved is None:
            raise OutsideTermError(on)
        return resolved

    def invoice_for(self, template_id: str, on: Optional[date] = None) -> InvoiceResult:
        template = self.templates.get_template(template_id)
        return invoice_composer.compose(
            template,
            self.require_term(on),
            self.settings.get_custom_body_template(),
            sign_off=settings.INVOICE_SIGN_OFF,
        )

    def current_invoice(self, on: Optional[date] = None) -> InvoiceResult:
        template = self.templates.get_current_template()
        if template is None:
            raise NoTemplateSelectedError("No template selected")
        return invoice_composer.compose(
            template,
            self.require_term(on),
            self.settings.get_custom_body_template(),
            sign_off=settings.INVOICE_SIGN_OFF,
        )

    def all_invoices(self, on: Optional[date] = None) -> List[InvoiceResult]:
        return invoice_composer.compose_all(
            self.templates.list_templates(),
            self.require_term(on),
            self.settings.get_custom_body_template(),
            sign_off=settings.INVOICE_SIGN_OFF,
        )

    def dispatch_current(self, on: Optional[date] = None) -> DispatchOut:
        """
        Send the current invoice through the configured email mode.

        In clipboard mode the text is returned for the shell to copy; in
        gmail-draft mode a draft is created first.
        """
        invoice = self.current_invoice(on)
        mode = self.settings.get_settings().email_mode

        if mode == "clipboard":
            return DispatchOut(mode=mode, subject=invoice.subject, body=invoice.body)

        with self._gmail() as gmail:
            draft = gmail.create_draft(invoice.subject, invoice.body)
        return DispatchOut(mode=mode, subject=invoice.subject, body=invoice.body, draft_id=draft.id)

    def dispatch_all(self, on: Optional[date] = None) -> BulkDispatchOut:
        """Dispatch an invoice per template; Gmail failures are reported, not raised"""
        invoices = self.all_invoices(on)
        if not invoices:
            raise NoTemplateSelectedError("No templates to create invoices for")

        mode = self.settings.get_settings().email_mode
        if mode == "clipboard":
            return BulkDispatchOut(mode=mode, success=len(invoices), invoices=invoices)

        with self._gmail() as gmail:
            results = gmail.create_drafts(invoices)
        logger.info(f"Bulk drafts: {results['success']} created, {results['failed']} failed")
        return BulkDispatchOut(mode=mode, invoices=invoices, **results)
