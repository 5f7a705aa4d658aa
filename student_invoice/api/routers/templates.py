# student_invoice/api/routers/templates.py - Billing template CRUD
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
import logging

from student_invoice.api.deps.services import get_template_service
from student_invoice.schemas.template import (
    BillingTemplateCreate,
    BillingTemplateOut,
    BillingTemplateUpdate,
    CurrentTemplateIn,
    CurrentTemplateOut,
)
from student_invoice.services.template_service import TemplateNotFoundError, TemplateService

logger = logging.getLogger(__name__)
router = APIRouter()


def _not_found(e: TemplateNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("", response_model=List[BillingTemplateOut])
async def list_templates(service: TemplateService = Depends(get_template_service)):
    """All saved billing templates"""
    return [BillingTemplateOut.model_validate(t) for t in service.list_templates()]


@router.post("", response_model=BillingTemplateOut, status_code=status.HTTP_201_CREATED)
async def create_template(
    data: BillingTemplateCreate,
    service: TemplateService = Depends(get_template_service),
):
    """Create a template and select it"""
    return BillingTemplateOut.model_validate(service.create_template(data))


# ==================== SELECTION ====================

@router.get("/current", response_model=CurrentTemplateOut)
async def get_current_template(service: TemplateService = Depends(get_template_service)):
    template = service.get_current_template()
    if template is None:
        return CurrentTemplateOut(template_id=None)
    return CurrentTemplateOut(template_id=template.id, template=BillingTemplateOut.model_validate(template))


@router.put("/current", response_model=CurrentTemplateOut)
async def set_current_template(
    data: CurrentTemplateIn,
    service: TemplateService = Depends(get_template_service),
):
    """Select a template, or clear the selection with a null id"""
    try:
        template = service.set_current_template(data.template_id)
    except TemplateNotFoundError as e:
        raise _not_found(e)

    if template is None:
        return CurrentTemplateOut(template_id=None)
    return CurrentTemplateOut(template_id=template.id, template=BillingTemplateOut.model_validate(template))


# ==================== SINGLE TEMPLATE ====================

@router.get("/{template_id}", response_model=BillingTemplateOut)
async def get_template(template_id: str, service: TemplateService = Depends(get_template_service)):
    try:
        return BillingTemplateOut.model_validate(service.get_template(template_id))
    except TemplateNotFoundError as e:
        raise _not_found(e)


@router.put("/{template_id}", response_model=BillingTemplateOut)
async def update_template(
    template_id: str,
    updates: BillingTemplateUpdate,
    service: TemplateService = Depends(get_template_service),
):
    """Update the fields present in the body"""
    try:
        return BillingTemplateOut.model_validate(service.update_template(template_id, updates))
    except TemplateNotFoundError as e:
        raise _not_found(e)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(template_id: str, service: TemplateService = Depends(get_template_service)):
    try:
        service.delete_template(template_id)
    except TemplateNotFoundError as e:
        raise _not_found(e)
