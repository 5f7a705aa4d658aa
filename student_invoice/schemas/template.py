# student_invoice/schemas/template.py - Billing template request/response models
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Weekday = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def _not_blank(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if not v.strip():
        raise ValueError("must not be empty or whitespace")
    return v.strip()


class BillingTemplateBase(BaseModel):
    recipient: str = Field(..., min_length=1, max_length=128)
    cost: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    instrument: str = Field(..., min_length=1, max_length=64)
    day: Weekday
    students: str = Field(..., min_length=1, max_length=255)

    @field_validator("recipient", "instrument", "students")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Ensure free-text fields are not just whitespace"""
        return _not_blank(v)


class BillingTemplateCreate(BillingTemplateBase):
    pass


class BillingTemplateUpdate(BaseModel):
    """Partial update; omitted fields keep their stored value"""
    recipient: Optional[str] = Field(None, min_length=1, max_length=128)
    cost: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    instrument: Optional[str] = Field(None, min_length=1, max_length=64)
    day: Optional[Weekday] = None
    students: Optional[str] = Field(None, min_length=1, max_length=255)

    @field_validator("recipient", "instrument", "students")
    @classmethod
    def validate_text(cls, v: Optional[str]) -> Optional[str]:
        return _not_blank(v)


class BillingTemplateOut(BillingTemplateBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime
    updated_at: datetime


class CurrentTemplateIn(BaseModel):
    template_id: Optional[str] = None


class CurrentTemplateOut(BaseModel):
    template_id: Optional[str]
    template: Optional[BillingTemplateOut] = None
