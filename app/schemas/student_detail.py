"""Student views that embed classes and payments."""

from decimal import Decimal

from pydantic import BaseModel

from app.schemas.class_model import ClassBrief
from app.schemas.payment import MonthTotal, PaymentBrief
from app.schemas.student import StudentBrief, StudentListItem


class StudentDetail(StudentListItem):
    """Single student with classes, payments and monthly totals."""

    classes: list[ClassBrief]
    payments: list[PaymentBrief]
    monthly_payments: list[MonthTotal]


class StudentClassesData(BaseModel):
    student: StudentBrief
    classes: list[ClassBrief]
    total_monthly_fees: Decimal
