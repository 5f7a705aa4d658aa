# student_invoice/api/routers/settings.py - User settings
from fastapi import APIRouter, Depends

from student_invoice.api.deps.services import get_settings_service
from student_invoice.core.config import settings as app_config
from student_invoice.schemas.settings import AppSettingsPublic, AppSettingsUpdate, DefaultBodyTemplateOut
from student_invoice.services.invoice_composer import Placeholder, default_body_template
from student_invoice.services.settings_service import SettingsService

router = APIRouter()


@router.get("", response_model=AppSettingsPublic)
async def get_settings(service: SettingsService = Depends(get_settings_service)):
    return AppSettingsPublic.from_settings(service.get_settings())


@router.patch("", response_model=AppSettingsPublic)
async def update_settings(
    updates: AppSettingsUpdate,
    service: SettingsService = Depends(get_settings_service),
):
    """Partial update; an empty custom body template resets to the default layout"""
    return AppSettingsPublic.from_settings(service.update_settings(updates))


@router.get("/email-body-template/default", response_model=DefaultBodyTemplateOut)
async def get_default_body_template():
    """Default invoice body written with placeholders, as a starting point for editing"""
    return DefaultBodyTemplateOut(
        template=default_body_template(app_config.INVOICE_SIGN_OFF),
        placeholders=[placeholder.token for placeholder in Placeholder],
    )
