"""Payment schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, Field

from app.models.payment import PaymentMethod, PaymentStatus
from app.schemas.class_model import ClassBrief
from app.schemas.student import StudentBrief
from app.schemas.subject import SubjectBrief
from app.schemas.validators import Month, Year


class PaymentCreate(BaseModel):
    """Schema for creating a payment."""

    student_id: int
    class_id: int
    subject_id: int | None = None
    amount: Decimal = Field(..., ge=0, decimal_places=2, description="Payment amount")
    payment_method: PaymentMethod
    payment_date: date
    month: Month
    year: Year
    reference_number: str | None = Field(None, max_length=100)
    notes: str | None = None
    status: PaymentStatus = PaymentStatus.COMPLETED


class PaymentUpdate(BaseModel):
    """Schema for updating a payment (partial)."""

    student_id: int | None = None
    class_id: int | None = None
    subject_id: int | None = None
    amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    payment_method: PaymentMethod | None = None
    payment_date: date | None = None
    month: Month | None = None
    year: Year | None = None
    reference_number: str | None = Field(None, max_length=100)
    notes: str | None = None
    status: PaymentStatus | None = None


class PaymentBrief(BaseModel):
    """Payment row without nested objects."""

    id: int
    student_id: int
    class_id: int
    subject_id: int | None
    amount: Decimal
    payment_method: PaymentMethod
    payment_date: date
    month: int
    year: int
    status: PaymentStatus
    reference_number: str | None
    notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class PaymentResponse(PaymentBrief):
    """Payment with its student, class and subject."""

    student: StudentBrief | None = None
    class_: ClassBrief | None = Field(
        default=None,
        validation_alias=AliasChoices("class_model", "class"),
        serialization_alias="class",
    )
    subject: SubjectBrief | None = None
    updated_at: datetime


class StudentPaymentSummary(BaseModel):
    total_paid: Decimal
    pending_payments_count: int
    pending_amount: Decimal


class StudentPaymentsData(BaseModel):
    student: StudentBrief
    payments: list[PaymentResponse]
    summary: StudentPaymentSummary


class ClassPaymentSummary(BaseModel):
    total_collected: Decimal
    expected_revenue: Decimal
    collection_rate: Decimal
    total_students: int


class ClassPaymentsData(BaseModel):
    class_: ClassBrief = Field(
        validation_alias=AliasChoices("class_", "class"),
        serialization_alias="class",
    )
    payments: list[PaymentResponse]
    summary: ClassPaymentSummary


class MethodTotal(BaseModel):
    payment_method: str
    total: Decimal
    count: int


class MonthTotal(BaseModel):
    year: int
    month: int
    total: Decimal


class PaymentStatistics(BaseModel):
    total_payments: int
    completed_payments: int
    pending_payments: int
    total_amount: Decimal
    payment_methods: list[MethodTotal]
    monthly_revenue: list[MonthTotal]
