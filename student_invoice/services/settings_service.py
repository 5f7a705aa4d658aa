# student_invoice/services/settings_service.py - Key-value settings store
from sqlalchemy.orm import Session
from sqlalchemy import select
from typing import Any, Optional
import logging

from student_invoice.models.app_setting import AppSetting
from student_invoice.schemas.settings import AppSettingsOut, AppSettingsUpdate

logger = logging.getLogger(__name__)

# Keys outside AppSettingsOut; the shell never edits these directly
CURRENT_TEMPLATE_KEY = "current_template_id"
GMAIL_TOKEN_KEY = "gmail_token"
GMAIL_PENDING_AUTH_KEY = "gmail_pending_auth"

SECRET_KEYS = {"gmail_client_secret", GMAIL_TOKEN_KEY, GMAIL_PENDING_AUTH_KEY}


class SettingsService:
    """Read and write the flat settings blob stored one key per row"""

    def __init__(self, db: Session):
        self.db = db

    def get_value(self, key: str, default: Any = None) -> Any:
        row = self.db.get(AppSetting, key)
        if row is None or row.value is None:
            return default
        return row.value

    def set_value(self, key: str, value: Any, commit: bool = True) -> None:
        row = self.db.get(AppSetting, key)
        if row is None:
            self.db.add(AppSetting(key=key, value=value))
        else:
            row.value = value

        if commit:
            self.db.commit()

        shown = "***" if key in SECRET_KEYS else value
        logger.debug(f"Setting stored: {key}={shown}")

    def delete_value(self, key: str, commit: bool = True) -> None:
        row = self.db.get(AppSetting, key)
        if row is not None:
            self.db.delete(row)
            if commit:
                self.db.commit()

    def get_settings(self) -> AppSettingsOut:
        """Stored settings merged over the defaults"""
        rows = self.db.execute(
            select(AppSetting).where(AppSetting.key.in_(AppSettingsOut.model_fields.keys()))
        ).scalars().all()
        stored = {row.key: row.value for row in rows if row.value is not None}
        return AppSettingsOut(**stored)

    def update_settings(self, updates: AppSettingsUpdate) -> AppSettingsOut:
        """
        Apply a partial update.

        Only fields explicitly sent are written. Sending null for an
        optional field clears it.
        """
        changes = updates.model_dump(exclude_unset=True)
        for key, value in changes.items():
            if value is None:
                self.delete_value(key, commit=False)
            else:
                self.set_value(key, value, commit=False)
        self.db.commit()

        logger.info(f"Settings updated: {sorted(changes)}")
        return self.get_settings()

    def get_custom_body_template(self) -> Optional[str]:
        return self.get_value("custom_email_body_template")
