# student_invoice/schemas/settings.py - Persisted user settings
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

Theme = Literal["light", "dark"]
EmailMode = Literal["clipboard", "gmail-draft"]


class AppSettingsOut(BaseModel):
    theme: Theme = "dark"
    email_mode: EmailMode = "clipboard"
    default_template_id: Optional[str] = None
    gmail_client_id: Optional[str] = None
    gmail_client_secret: Optional[str] = None
    custom_email_body_template: Optional[str] = None
    auto_save: bool = True
    show_notifications: bool = True

    @property
    def has_gmail_credentials(self) -> bool:
        return bool(self.gmail_client_id and self.gmail_client_secret)


class AppSettingsPublic(BaseModel):
    """Settings as returned over HTTP; the client secret is reported, never echoed"""
    theme: Theme
    email_mode: EmailMode
    default_template_id: Optional[str]
    gmail_client_id: Optional[str]
    has_gmail_client_secret: bool
    custom_email_body_template: Optional[str]
    auto_save: bool
    show_notifications: bool

    @classmethod
    def from_settings(cls, stored: AppSettingsOut) -> "AppSettingsPublic":
        return cls(
            **stored.model_dump(exclude={"gmail_client_secret"}),
            has_gmail_client_secret=bool(stored.gmail_client_secret),
        )


class AppSettingsUpdate(BaseModel):
    """Partial update; only the fields present in the request are written"""
    theme: Optional[Theme] = None
    email_mode: Optional[EmailMode] = None
    default_template_id: Optional[str] = None
    gmail_client_id: Optional[str] = Field(None, max_length=256)
    gmail_client_secret: Optional[str] = Field(None, max_length=256)
    custom_email_body_template: Optional[str] = Field(None, max_length=20000)
    auto_save: Optional[bool] = None
    show_notifications: Optional[bool] = None

    @field_validator("custom_email_body_template")
    @classmethod
    def blank_template_resets(cls, v: Optional[str]) -> Optional[str]:
        """An empty template means 'use the default layout'"""
        if v is None:
            return v
        return v if v.strip() else None


class DefaultBodyTemplateOut(BaseModel):
    template: str
    placeholders: list[str]
