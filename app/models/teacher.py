"""Teacher and teacher payment models."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import BaseModel
from app.models.associations import teacher_subject


class TeacherStatus(str, Enum):
    """Employment status of a teacher."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Teacher(BaseModel):
    """Teacher who runs classes for one or more subjects."""

    __tablename__ = "teachers"

    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    address: Mapped[str | None] = mapped_column(Text)
    qualification: Mapped[str] = mapped_column(String(255), nullable=False)
    experience_years: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    monthly_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))
    status: Mapped[TeacherStatus] = mapped_column(
        String(20),
        nullable=False,
        default=TeacherStatus.ACTIVE,
        server_default="active",
    )

    # Relationships
    subjects: Mapped[list["Subject"]] = relationship(
        "Subject", secondary=teacher_subject, viewonly=True, order_by="Subject.id"
    )
    classes: Mapped[list["ClassModel"]] = relationship(
        "ClassModel", back_populates="teacher", passive_deletes=True
    )
    payments: Mapped[list["TeacherPayment"]] = relationship(
        "TeacherPayment", back_populates="teacher", passive_deletes=True
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Teacher(id={self.id}, name={self.full_name})>"


class TeacherPayment(BaseModel):
    """Monthly salary payment made to a teacher."""

    __tablename__ = "teacher_payments"
    __table_args__ = (
        UniqueConstraint("teacher_id", "month", "year", name="uq_teacher_payment_period"),
    )

    teacher_id: Mapped[int] = mapped_column(
        ForeignKey("teachers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)

    teacher: Mapped["Teacher"] = relationship("Teacher", back_populates="payments")

    def __repr__(self) -> str:
        return f"<TeacherPayment(id={self.id}, teacher={self.teacher_id}, {self.year}-{self.month})>"
