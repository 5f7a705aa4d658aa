# student_invoice/models/app_setting.py
from datetime import datetime
from typing import Any

from sqlalchemy import String, JSON, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from student_invoice.models.base import Base


class AppSetting(Base):
    """Flat key-value settings record; values are stored as JSON"""
    __tablename__ = "app_settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def __repr__(self):
        return f"<AppSetting(key={self.key}, value={self.value})>"
