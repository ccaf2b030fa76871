"""Schemas for classes."""

from datetime import datetime, time
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, Field

from app.models.class_model import ClassStatus, WeekDay
from app.schemas.student import StudentBrief
from app.schemas.subject import SubjectBrief
from app.schemas.teacher import TeacherBrief
from app.schemas.validators import GradeLevel


class ClassCreate(BaseModel):
    """Schema for creating a new class."""

    name: str = Field(..., min_length=1, max_length=255)
    subject_id: int
    teacher_id: int
    grade_level: GradeLevel
    schedule_days: list[WeekDay] = Field(..., min_length=1)
    start_time: time
    end_time: time
    max_students: int = Field(..., ge=1, le=30)
    monthly_fee: Decimal = Field(..., ge=0, decimal_places=2)
    status: ClassStatus = ClassStatus.ACTIVE


class ClassUpdate(BaseModel):
    """Schema for updating a class (partial)."""

    name: str | None = Field(None, min_length=1, max_length=255)
    subject_id: int | None = None
    teacher_id: int | None = None
    grade_level: GradeLevel | None = None
    schedule_days: list[WeekDay] | None = Field(None, min_length=1)
    start_time: time | None = None
    end_time: time | None = None
    max_students: int | None = Field(None, ge=1, le=30)
    monthly_fee: Decimal | None = Field(None, ge=0, decimal_places=2)
    status: ClassStatus | None = None


class ClassBrief(BaseModel):
    """Class summary nested in other resources."""

    id: int
    name: str
    grade_level: int
    monthly_fee: Decimal
    status: ClassStatus

    model_config = {"from_attributes": True}


class ClassResponse(ClassBrief):
    """Class response schema."""

    subject_id: int
    teacher_id: int
    schedule_days: list[str]
    start_time: time
    end_time: time
    max_students: int
    subject: SubjectBrief | None = None
    teacher: TeacherBrief | None = None
    students: list[StudentBrief] = []
    created_at: datetime
    updated_at: datetime


class EnrollmentRequest(BaseModel):
    """Student to add to / remove from a class."""

    student_id: int


class ClassStatistics(BaseModel):
    total_students: int
    available_slots: int
    attendance_rate: Decimal
    capacity_percentage: Decimal


class ClassStatisticsData(BaseModel):
    class_: ClassResponse = Field(
        validation_alias=AliasChoices("class_", "class"),
        serialization_alias="class",
    )
    statistics: ClassStatistics
