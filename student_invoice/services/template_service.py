# student_invoice/services/template_service.py - Billing template CRUD and selection
from sqlalchemy.orm import Session
from sqlalchemy import select
from datetime import datetime
from typing import List, Optional
import logging

from student_invoice.models.billing_template import BillingTemplate
from student_invoice.schemas.template import BillingTemplateCreate, BillingTemplateUpdate
from student_invoice.services.settings_service import SettingsService, CURRENT_TEMPLATE_KEY

logger = logging.getLogger(__name__)


class TemplateNotFoundError(LookupError):
    """Raised when a template id does not match a stored template"""

    def __init__(self, template_id: str):
        super().__init__(f"Template not found: {template_id}")
        self.template_id = template_id


class TemplateService:
    """Service class for billing template operations"""

    def __init__(self, db: Session):
        self.db = db
        self.settings = SettingsService(db)

    def list_templates(self) -> List[BillingTemplate]:
        """All templates, oldest first"""
        return list(
            self.db.execute(
                select(BillingTemplate).order_by(BillingTemplate.created_at, BillingTemplate.id)
            ).scalars().all()
        )

    def get_template(self, template_id: str) -> BillingTemplate:
        """
        Fetch one template

        Raises:
            TemplateNotFoundError: If no template has this id
        """
        template = self.db.get(BillingTemplate, template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def create_template(self, data: BillingTemplateCreate, select_new: bool = True) -> BillingTemplate:
        """
        Store a new template with a generated id and fresh timestamps

        Args:
            data: Validated template fields
            select_new: Make the new template the current selection
        """
        now = datetime.now()
        template = BillingTemplate(**data.model_dump(), created_at=now, updated_at=now)
        self.db.add(template)
        self.db.flush()

        if select_new:
            self.settings.set_value(CURRENT_TEMPLATE_KEY, template.id, commit=False)

        self.db.commit()
        self.db.refresh(template)

        logger.info(f"Template created: {template.id} ({template.recipient})")
        return template

    def update_template(self, template_id: str, updates: BillingTemplateUpdate) -> BillingTemplate:
        """Apply the fields present in ``updates`` and refresh updated_at"""
        template = self.get_template(template_id)

        for field, value in updates.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(template, field, value)
        template.updated_at = datetime.now()

        self.db.commit()
        self.db.refresh(template)

        logger.info(f"Template updated: {template.id}")
        return template

    def delete_template(self, template_id: str) -> None:
        """Remove a template, clearing the selection if it pointed at it"""
        template = self.get_template(template_id)
        self.db.delete(template)

        if self.settings.get_value(CURRENT_TEMPLATE_KEY) == template_id:
            self.settings.delete_value(CURRENT_TEMPLATE_KEY, commit=False)
        if self.settings.get_value("default_template_id") == template_id:
            self.settings.delete_value("default_template_id", commit=False)

        self.db.commit()
        logger.info(f"Template deleted: {template_id}")

    def get_current_template(self) -> Optional[BillingTemplate]:
        """
        The selected template.

        Falls back to the default template from settings when nothing is
        selected; a selection pointing at a deleted template yields None.
        """
        template_id = self.settings.get_value(CURRENT_TEMPLATE_KEY)
        if template_id is None:
            template_id = self.settings.get_value("default_template_id")
        if template_id is None:
            return None
        return self.db.get(BillingTemplate, template_id)

    def set_current_template(self, template_id: Optional[str]) -> Optional[BillingTemplate]:
        """Select a template by id, or clear the selection with None"""
        if template_id is None:
            self.settings.delete_value(CURRENT_TEMPLATE_KEY)
            logger.info("Template selection cleared")
            return None

        template = self.get_template(template_id)
        self.settings.set_value(CURRENT_TEMPLATE_KEY, template.id)
        logger.info(f"Template selected: {template.id}")
        return template
