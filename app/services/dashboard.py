"""Dashboard figures."""

from collections import defaultdict
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.class_model import ClassModel
from app.models.payment import Payment, PaymentStatus
from app.models.student import Student
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.services import aggregation

RECENT_PAYMENTS_LIMIT = 10


async def _count(db: AsyncSession, model) -> int:
    return await db.scalar(select(func.count(model.id))) or 0


async def revenue_by_billing_month(
    db: AsyncSession, since_year: int
) -> dict[tuple[int, int], Decimal]:
    """Completed-payment totals keyed by billed (year, month)."""
    result = await db.execute(
        select(Payment.year, Payment.month, Payment.amount).where(
            Payment.status == PaymentStatus.COMPLETED,
            Payment.year >= since_year,
        )
    )
    totals: dict[tuple[int, int], Decimal] = defaultdict(Decimal)
    for year, month, amount in result.all():
        totals[(year, month)] += aggregation.to_decimal(amount)
    return totals


async def get_recent_payments(db: AsyncSession, limit: int = RECENT_PAYMENTS_LIMIT) -> list[dict]:
    result = await db.execute(
        select(Payment)
        .options(selectinload(Payment.student), selectinload(Payment.subject))
        .order_by(Payment.created_at.desc(), Payment.id.desc())
        .limit(limit)
    )
    return [
        {
            "id": payment.id,
            "student_id": payment.student_id,
            "student_name": payment.student.full_name,
            "amount": payment.amount,
            "month": payment.month,
            "year": payment.year,
            "payment_date": payment.payment_date,
            "subject_name": payment.subject.name_en if payment.subject else None,
        }
        for payment in result.scalars().all()
    ]


async def get_dashboard_statistics(db: AsyncSession, today: date) -> dict:
    """Entity counts, revenue for the trailing six months and the year to date."""
    totals = await revenue_by_billing_month(db, today.year - 1)

    this_year = sum(
        (amount for (year, _), amount in totals.items() if year == today.year), Decimal("0")
    )
    last_year = sum(
        (amount for (year, _), amount in totals.items() if year == today.year - 1), Decimal("0")
    )
    current_month = aggregation.to_decimal(totals.get((today.year, today.month)))

    return {
        "total_students": await _count(db, Student),
        "total_teachers": await _count(db, Teacher),
        "total_classes": await _count(db, ClassModel),
        "total_subjects": await _count(db, Subject),
        "monthly_revenue": current_month,
        "current_month_revenue": current_month,
        "last_6_months_revenue": aggregation.monthly_revenue_series(totals, today),
        "year_to_date": aggregation.year_to_date_stats(this_year, last_year, today),
        "recent_payments": await get_recent_payments(db),
    }
