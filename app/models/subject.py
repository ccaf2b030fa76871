"""Subject model."""

from decimal import Decimal
from enum import Enum

from sqlalchemy import Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import BaseModel
from app.models.associations import student_subject, teacher_subject


class SubjectStatus(str, Enum):
    """Whether a subject is offered."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Subject(BaseModel):
    """Subject taught at the center, with bilingual name and description."""

    __tablename__ = "subjects"

    name_en: Mapped[str] = mapped_column(String(255), nullable=False)
    name_ar: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    description_en: Mapped[str | None] = mapped_column(Text)
    description_ar: Mapped[str | None] = mapped_column(Text)
    grade_level: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    hours_per_week: Mapped[int] = mapped_column(Integer, nullable=False)
    price_per_hour: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    fee_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))  # Flat monthly fee
    status: Mapped[SubjectStatus] = mapped_column(
        String(20),
        nullable=False,
        default=SubjectStatus.ACTIVE,
        server_default="active",
    )

    # Relationships
    classes: Mapped[list["ClassModel"]] = relationship(
        "ClassModel", back_populates="subject", passive_deletes=True
    )
    payments: Mapped[list["Payment"]] = relationship(
        "Payment", back_populates="subject", passive_deletes=True
    )
    students: Mapped[list["Student"]] = relationship(
        "Student", secondary=student_subject, viewonly=True
    )
    teachers: Mapped[list["Teacher"]] = relationship(
        "Teacher", secondary=teacher_subject, viewonly=True
    )

    def __repr__(self) -> str:
        return f"<Subject(id={self.id}, code={self.code})>"
