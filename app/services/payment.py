"""Payment service layer."""

import random
import time
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import NotFoundError, guarded
from app.models.class_model import ClassModel
from app.models.payment import Payment, PaymentMethod, PaymentStatus
from app.models.student import Student
from app.models.subject import Subject
from app.schemas.payment import PaymentCreate, PaymentUpdate
from app.services import aggregation, policies
from app.services.associations import ensure_targets_exist
from app.services.class_model import count_enrolled
from app.services.pagination import contains, paginate

NULLABLE_FIELDS = frozenset({"subject_id", "reference_number", "notes"})

PAYMENT_RELATIONS = (
    selectinload(Payment.student),
    selectinload(Payment.class_model),
    selectinload(Payment.subject),
)


def generate_reference_number() -> str:
    """``PAY-<unix time>-<4 random digits>``."""
    return f"PAY-{int(time.time())}-{random.randint(1000, 9999)}"


async def get_payment_by_id(db: AsyncSession, payment_id: int) -> Payment | None:
    """Get a payment with student, class and subject loaded."""
    result = await db.execute(
        select(Payment)
        .options(*PAYMENT_RELATIONS)
        .where(Payment.id == payment_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_payment_or_404(db: AsyncSession, payment_id: int) -> Payment:
    payment = await get_payment_by_id(db, payment_id)
    if not payment:
        raise NotFoundError("PAYMENT_NOT_FOUND", "Payment not found")
    return payment


def _date_range(query, start_date: date | None, end_date: date | None):
    if start_date:
        query = query.where(Payment.payment_date >= start_date)
    if end_date:
        query = query.where(Payment.payment_date <= end_date)
    return query


async def get_payments(
    db: AsyncSession,
    page: int = 1,
    per_page: int = 15,
    student_id: int | None = None,
    class_id: int | None = None,
    payment_method: PaymentMethod | None = None,
    status: PaymentStatus | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    search: str | None = None,
) -> tuple[list[Payment], int]:
    """Get payments with optional filters, latest payment date first."""
    query = select(Payment).options(*PAYMENT_RELATIONS)

    if student_id is not None:
        query = query.where(Payment.student_id == student_id)
    if class_id is not None:
        query = query.where(Payment.class_id == class_id)
    if payment_method:
        query = query.where(Payment.payment_method == payment_method)
    if status:
        query = query.where(Payment.status == status)
    query = _date_range(query, start_date, end_date)
    if search:
        query = query.where(contains(Payment.reference_number, search))

    query = query.order_by(Payment.payment_date.desc(), Payment.id.desc())
    return await paginate(db, query, page, per_page)


async def reference_taken(
    db: AsyncSession, reference_number: str, exclude_id: int | None = None
) -> bool:
    query = select(Payment.id).where(Payment.reference_number == reference_number)
    if exclude_id is not None:
        query = query.where(Payment.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


async def _check_references(db: AsyncSession, data: dict) -> None:
    if data.get("student_id") is not None:
        await ensure_targets_exist(db, Student.id, [data["student_id"]], "student_id")
    if data.get("class_id") is not None:
        await ensure_targets_exist(db, ClassModel.id, [data["class_id"]], "class_id")
    if data.get("subject_id") is not None:
        await ensure_targets_exist(db, Subject.id, [data["subject_id"]], "subject_id")


async def create_payment(db: AsyncSession, payment_data: PaymentCreate) -> Payment:
    """Record a payment, generating a reference number when none is given."""
    data = payment_data.model_dump()
    await _check_references(db, data)
    if data["reference_number"]:
        policies.ensure_unique(
            await reference_taken(db, data["reference_number"]),
            "DUPLICATE_REFERENCE",
            "reference_number",
        )
    else:
        data["reference_number"] = generate_reference_number()

    async with guarded(db, "CREATE_ERROR", "Failed to create payment"):
        payment = Payment(**data)
        db.add(payment)
        await db.commit()
    return await get_payment_by_id(db, payment.id)


async def update_payment(
    db: AsyncSession, payment: Payment, payment_data: PaymentUpdate
) -> Payment:
    """Update a payment."""
    update_data = payment_data.model_dump(exclude_unset=True)
    policies.ensure_required_present(update_data, NULLABLE_FIELDS)
    await _check_references(db, update_data)
    if update_data.get("reference_number"):
        policies.ensure_unique(
            await reference_taken(db, update_data["reference_number"], exclude_id=payment.id),
            "DUPLICATE_REFERENCE",
            "reference_number",
        )

    async with guarded(db, "UPDATE_ERROR", "Failed to update payment"):
        for field, value in update_data.items():
            setattr(payment, field, value)
        await db.commit()
    return await get_payment_by_id(db, payment.id)


async def delete_payment(db: AsyncSession, payment: Payment) -> None:
    async with guarded(db, "DELETE_ERROR", "Failed to delete payment"):
        await db.delete(payment)
        await db.commit()


async def get_student_payments(db: AsyncSession, student: Student) -> dict:
    """A student's payment history with paid and pending totals."""
    result = await db.execute(
        select(Payment)
        .options(*PAYMENT_RELATIONS)
        .where(Payment.student_id == student.id)
        .order_by(Payment.payment_date.desc(), Payment.id.desc())
    )
    payments = list(result.scalars().all())
    return {
        "student": student,
        "payments": payments,
        "summary": aggregation.payment_totals(payments),
    }


async def get_class_payments(db: AsyncSession, school_class: ClassModel) -> dict:
    """A class's payments against the revenue its enrollment should bring in."""
    result = await db.execute(
        select(Payment)
        .options(*PAYMENT_RELATIONS)
        .where(Payment.class_id == school_class.id)
        .order_by(Payment.payment_date.desc(), Payment.id.desc())
    )
    payments = list(result.scalars().all())
    enrolled = await count_enrolled(db, school_class.id)
    collected = aggregation.payment_totals(payments)["total_paid"]
    return {
        "class_": school_class,
        "payments": payments,
        "summary": {
            "total_collected": collected,
            "expected_revenue": aggregation.to_decimal(enrolled)
            * aggregation.to_decimal(school_class.monthly_fee),
            "collection_rate": aggregation.collection_rate(
                collected, enrolled, school_class.monthly_fee
            ),
            "total_students": enrolled,
        },
    }


async def get_payment_statistics(
    db: AsyncSession, start_date: date | None = None, end_date: date | None = None
) -> dict:
    """Status counts, method breakdown and recent monthly revenue."""
    query = _date_range(
        select(
            Payment.amount,
            Payment.status,
            Payment.payment_method,
            Payment.payment_date,
        ),
        start_date,
        end_date,
    )
    result = await db.execute(query)
    return aggregation.payment_statistics(result.all())
