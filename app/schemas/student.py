"""Student schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.models.student import StudentStatus
from app.schemas.subject import SubjectBrief
from app.schemas.validators import GRADE_LEVELS, GradeLevel, PhoneNumber

PAYMENT_STATUSES = ("paid", "partial", "unpaid", "no_subjects")


class StudentCreate(BaseModel):
    """Schema for creating a new student."""

    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    phone: PhoneNumber
    grade_level: GradeLevel
    joined_date: date
    notes: str | None = None
    attendance_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100, decimal_places=2)
    status: StudentStatus = StudentStatus.ACTIVE
    subjects: list[int] | None = None


class StudentUpdate(BaseModel):
    """Schema for updating a student (partial)."""

    first_name: str | None = Field(None, min_length=1, max_length=255)
    last_name: str | None = Field(None, min_length=1, max_length=255)
    phone: PhoneNumber | None = None
    grade_level: GradeLevel | None = None
    joined_date: date | None = None
    notes: str | None = None
    attendance_rate: Decimal | None = Field(None, ge=0, le=100, decimal_places=2)
    status: StudentStatus | None = None
    subjects: list[int] | None = None


class StudentBrief(BaseModel):
    """Student summary nested in other resources."""

    id: int
    first_name: str
    last_name: str
    phone: str
    grade_level: int

    model_config = {"from_attributes": True}


class StudentResponse(StudentBrief):
    """Student response schema."""

    joined_date: date
    notes: str | None
    attendance_rate: Decimal
    status: StudentStatus
    subjects: list[SubjectBrief]
    created_at: datetime
    updated_at: datetime


class StudentListItem(StudentResponse):
    """Student row with its payment status for the reference month."""

    payment_status: str
    total_subjects: int
    paid_subjects: int
    unpaid_subjects: int


class StudentListMeta(BaseModel):
    current_page: int
    total_pages: int
    total_count: int
    per_page: int


class StudentFilters(BaseModel):
    grades: list[int] = list(GRADE_LEVELS)
    payment_statuses: list[str] = list(PAYMENT_STATUSES)


class StudentListResponse(BaseModel):
    """Paginated list of students."""

    data: list[StudentListItem]
    meta: StudentListMeta
    filters: StudentFilters = StudentFilters()
