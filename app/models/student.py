"""Student model."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import BaseModel
from app.models.associations import class_student, student_subject


class StudentStatus(str, Enum):
    """Enrollment status of a student."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Student(BaseModel):
    """Student enrolled at the tutoring center."""

    __tablename__ = "students"

    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    grade_level: Mapped[int] = mapped_column(Integer, nullable=False, index=True)  # 7-12
    joined_date: Mapped[date] = mapped_column(Date, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    attendance_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
        default=Decimal("0"),
        server_default="0",
    )
    status: Mapped[StudentStatus] = mapped_column(
        String(20),
        nullable=False,
        default=StudentStatus.ACTIVE,
        server_default="active",
    )

    # Relationships
    subjects: Mapped[list["Subject"]] = relationship(
        "Subject", secondary=student_subject, viewonly=True, order_by="Subject.id"
    )
    classes: Mapped[list["ClassModel"]] = relationship(
        "ClassModel", secondary=class_student, viewonly=True, order_by="ClassModel.id"
    )
    payments: Mapped[list["Payment"]] = relationship(
        "Payment", back_populates="student", passive_deletes=True
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, name={self.full_name})>"
