# student_invoice/api/routers/invoices.py - Invoice preview and dispatch
from fastapi import APIRouter, Depends, HTTPException, status, Query
from datetime import date
from typing import List, Optional
import logging

from student_invoice.api.deps.services import get_invoice_service
from student_invoice.schemas.invoice import BulkDispatchOut, DispatchOut, InvoiceResult
from student_invoice.services.gmail_service import (
    GmailApiError,
    GmailConfigurationError,
    GmailError,
    GmailNotConnectedError,
)
from student_invoice.services.invoice_service import (
    InvoiceService,
    NoTemplateSelectedError,
    OutsideTermError,
)
from student_invoice.services.template_service import TemplateNotFoundError

logger = logging.getLogger(__name__)
router = APIRouter()

ON_QUERY = Query(default=None, description="Date to invoice for; defaults to today")


def to_http_error(e: Exception) -> HTTPException:
    """Map service errors onto HTTP status codes"""
    if isinstance(e, OutsideTermError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Outside term time")
    if isinstance(e, (TemplateNotFoundError, NoTemplateSelectedError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, GmailConfigurationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, GmailNotConnectedError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    if isinstance(e, GmailApiError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.get("", response_model=List[InvoiceResult])
async def list_invoices(
    on: Optional[date] = ON_QUERY,
    service: InvoiceService = Depends(get_invoice_service),
):
    """Invoices for every template in the half-term containing ``on``"""
    try:
        return service.all_invoices(on)
    except OutsideTermError as e:
        raise to_http_error(e)


@router.get("/current", response_model=InvoiceResult)
async def get_current_invoice(
    on: Optional[date] = ON_QUERY,
    service: InvoiceService = Depends(get_invoice_service),
):
    """Invoice for the selected template"""
    try:
        return service.current_invoice(on)
    except (OutsideTermError, NoTemplateSelectedError) as e:
        raise to_http_error(e)


@router.post("/current/dispatch", response_model=DispatchOut)
def dispatch_current_invoice(
    on: Optional[date] = ON_QUERY,
    service: InvoiceService = Depends(get_invoice_service),
):
    """Return the text for the clipboard, or create a Gmail draft, per settings"""
    try:
        return service.dispatch_current(on)
    except (OutsideTermError, NoTemplateSelectedError, GmailError) as e:
        logger.warning(f"Dispatch failed: {e}")
        raise to_http_error(e)


@router.post("/dispatch", response_model=BulkDispatchOut)
def dispatch_all_invoices(
    on: Optional[date] = ON_QUERY,
    service: InvoiceService = Depends(get_invoice_service),
):
    """Dispatch every template's invoice; per-invoice Gmail failures are reported in the body"""
    try:
        return service.dispatch_all(on)
    except (OutsideTermError, NoTemplateSelectedError) as e:
        raise to_http_error(e)


@router.get("/{template_id}", response_model=InvoiceResult)
async def get_invoice_for_template(
    template_id: str,
    on: Optional[date] = ON_QUERY,
    service: InvoiceService = Depends(get_invoice_service),
):
    try:
        return service.invoice_for(template_id, on)
    except (OutsideTermError, TemplateNotFoundError) as e:
        raise to_http_error(e)
