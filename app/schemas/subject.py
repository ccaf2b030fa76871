"""Subject schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.models.subject import SubjectStatus
from app.schemas.validators import GradeLevel


class SubjectCreate(BaseModel):
    """Schema for creating a subject."""

    name_en: str = Field(..., min_length=1, max_length=255)
    name_ar: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50)
    description_en: str | None = None
    description_ar: str | None = None
    grade_level: GradeLevel
    hours_per_week: int = Field(..., ge=1, le=20)
    price_per_hour: Decimal = Field(..., ge=0, decimal_places=2)
    fee_amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    status: SubjectStatus = SubjectStatus.ACTIVE


class SubjectUpdate(BaseModel):
    """Schema for updating a subject (partial)."""

    name_en: str | None = Field(None, min_length=1, max_length=255)
    name_ar: str | None = Field(None, min_length=1, max_length=255)
    code: str | None = Field(None, min_length=1, max_length=50)
    description_en: str | None = None
    description_ar: str | None = None
    grade_level: GradeLevel | None = None
    hours_per_week: int | None = Field(None, ge=1, le=20)
    price_per_hour: Decimal | None = Field(None, ge=0, decimal_places=2)
    fee_amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    status: SubjectStatus | None = None


class SubjectBrief(BaseModel):
    """Subject summary nested in other resources."""

    id: int
    name_en: str
    name_ar: str
    code: str

    model_config = {"from_attributes": True}


class SubjectResponse(SubjectBrief):
    """Subject response schema."""

    description_en: str | None
    description_ar: str | None
    grade_level: int
    hours_per_week: int
    price_per_hour: Decimal
    fee_amount: Decimal | None
    status: SubjectStatus
    created_at: datetime
    updated_at: datetime


class SubjectStatistics(BaseModel):
    total_classes: int
    active_classes: int
    total_teachers: int
    total_students: int


class SubjectStatisticsData(BaseModel):
    subject: SubjectResponse
    statistics: SubjectStatistics
