# student_invoice/models/__init__.py - Import all models so SQLAlchemy can discover them

from student_invoice.models.base import Base
from student_invoice.models.billing_template import BillingTemplate
from student_invoice.models.app_setting import AppSetting

__all__ = [
    "Base",
    "BillingTemplate",
    "AppSetting",
]
