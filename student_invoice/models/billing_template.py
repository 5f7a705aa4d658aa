# student_invoice/models/billing_template.py
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Numeric, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from student_invoice.models.base import Base

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class BillingTemplate(Base):
    """A saved recurring-student billing profile"""
    __tablename__ = "billing_templates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    recipient: Mapped[str] = mapped_column(String(128), nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    instrument: Mapped[str] = mapped_column(String(64), nullable=False)
    day: Mapped[str] = mapped_column(String(9), nullable=False)  # Monday..Sunday
    students: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (
        CheckConstraint("cost >= 0", name="ck_billing_template_cost"),
        CheckConstraint(
            "day IN (" + ", ".join(f"'{name}'" for name in WEEKDAY_NAMES) + ")",
            name="ck_billing_template_day"
        ),
    )

    def __repr__(self):
        return f"<BillingTemplate(id={self.id}, recipient={self.recipient}, day={self.day})>"
