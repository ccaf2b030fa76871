"""Class model."""

from datetime import time
from decimal import Decimal
from enum import Enum

from sqlalchemy import JSON, ForeignKey, Integer, Numeric, String, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import BaseModel
from app.models.associations import class_student


class ClassStatus(str, Enum):
    """Lifecycle status of a class."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETED = "completed"


class WeekDay(str, Enum):
    """Days a class can be scheduled on."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class ClassModel(BaseModel):
    """A scheduled group of students studying one subject with one teacher."""

    __tablename__ = "classes"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    teacher_id: Mapped[int] = mapped_column(
        ForeignKey("teachers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    subject_id: Mapped[int] = mapped_column(
        ForeignKey("subjects.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    grade_level: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    schedule_days: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    max_students: Mapped[int] = mapped_column(Integer, nullable=False)
    monthly_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[ClassStatus] = mapped_column(
        String(20),
        nullable=False,
        default=ClassStatus.ACTIVE,
        server_default="active",
    )

    # Relationships
    teacher: Mapped["Teacher"] = relationship("Teacher", back_populates="classes")
    subject: Mapped["Subject"] = relationship("Subject", back_populates="classes")
    students: Mapped[list["Student"]] = relationship(
        "Student", secondary=class_student, viewonly=True, order_by="Student.id"
    )
    payments: Mapped[list["Payment"]] = relationship(
        "Payment", back_populates="class_model", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<ClassModel(id={self.id}, name={self.name})>"
