"""Teacher schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field

from app.models.teacher import TeacherStatus
from app.schemas.subject import SubjectBrief
from app.schemas.validators import Month, PhoneNumber, Year


class TeacherCreate(BaseModel):
    """Schema for creating a teacher."""

    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: PhoneNumber
    address: str | None = None
    qualification: str = Field(..., min_length=1, max_length=255)
    experience_years: int = Field(..., ge=0)
    hourly_rate: Decimal = Field(..., ge=0, decimal_places=2)
    monthly_percentage: Decimal | None = Field(None, ge=0, le=100, decimal_places=2)
    subjects: list[int] = Field(default_factory=list)
    status: TeacherStatus = TeacherStatus.ACTIVE


class TeacherUpdate(BaseModel):
    """Schema for updating a teacher (partial)."""

    first_name: str | None = Field(None, min_length=1, max_length=255)
    last_name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: PhoneNumber | None = None
    address: str | None = None
    qualification: str | None = Field(None, min_length=1, max_length=255)
    experience_years: int | None = Field(None, ge=0)
    hourly_rate: Decimal | None = Field(None, ge=0, decimal_places=2)
    monthly_percentage: Decimal | None = Field(None, ge=0, le=100, decimal_places=2)
    subjects: list[int] | None = None
    status: TeacherStatus | None = None


class TeacherBrief(BaseModel):
    """Teacher summary nested in other resources."""

    id: int
    first_name: str
    last_name: str
    email: str

    model_config = {"from_attributes": True}


class TeacherResponse(TeacherBrief):
    """Teacher response schema."""

    phone: str
    address: str | None
    qualification: str
    experience_years: int
    hourly_rate: Decimal
    monthly_percentage: Decimal | None
    status: TeacherStatus
    subjects: list[SubjectBrief]
    created_at: datetime
    updated_at: datetime


class TeacherStatistics(BaseModel):
    total_classes: int
    active_classes: int
    total_students: int
    total_paid: Decimal


class TeacherStatisticsData(BaseModel):
    teacher: TeacherResponse
    statistics: TeacherStatistics


class TeacherPaymentCreate(BaseModel):
    """Schema for recording a monthly teacher payment."""

    amount: Decimal = Field(..., ge=0, decimal_places=2)
    month: Month
    year: Year
    payment_date: date
    notes: str | None = None


class TeacherPaymentResponse(BaseModel):
    id: int
    teacher_id: int
    amount: Decimal
    month: int
    year: int
    payment_date: date
    notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
